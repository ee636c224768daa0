"""
Tests for controller/command_dispatcher.py
Validator -> Resolver -> Encoder pipeline with a fake transport
"""
import pytest

from controller.command_dispatcher import CommandDispatcher
from model.errors import AddressingError, CommandError, TransportError, ValidationError


class TestResolve:

    def test_returns_the_command(self):
        command = CommandDispatcher().resolve("recall_cue_list", {"recallId": 5})
        assert command.operation == "cue_list_recall"
        assert command.params["recallId"] == 4

    def test_is_idempotent(self):
        dispatcher = CommandDispatcher()
        fields = {"channelType": "input", "input": 0, "destinationDca": 4, "assign": True}
        assert dispatcher.resolve("dca_assign", fields) == dispatcher.resolve("dca_assign", fields)

    def test_does_not_modify_fields(self):
        fields = {"channelType": "input", "input": 0, "mute": True, "dca": 77}
        CommandDispatcher().resolve("mute", fields)
        assert fields == {"channelType": "input", "input": 0, "mute": True, "dca": 77}

    def test_validation_failure_propagates(self):
        with pytest.raises(ValidationError):
            CommandDispatcher().resolve("recall_scene", {"scene": "eight"})

    def test_addressing_failure_propagates(self):
        with pytest.raises(AddressingError):
            CommandDispatcher().resolve("mute", {"channelType": "input", "input": 128, "mute": True})


class TestDispatch:

    def test_sends_the_command(self, fake_transport):
        dispatcher = CommandDispatcher(fake_transport)
        command = dispatcher.dispatch("set_hpf_on_off", {"input": 3, "hpf": True})
        assert fake_transport.sent == [command]

    def test_rejected_request_never_reaches_the_transport(self, fake_transport):
        dispatcher = CommandDispatcher(fake_transport)
        with pytest.raises(CommandError):
            dispatcher.dispatch("recall_scene", {"scene": 3})
        assert fake_transport.sent == []

    def test_failed_send(self, failing_transport):
        dispatcher = CommandDispatcher(failing_transport)
        with pytest.raises(TransportError):
            dispatcher.dispatch("recall_scene", {"scene": 10})
        assert len(failing_transport.sent) == 1

    def test_no_transport(self):
        with pytest.raises(TransportError):
            CommandDispatcher().dispatch("recall_scene", {"scene": 10})

    def test_send_takes_a_resolved_command(self, fake_transport):
        dispatcher = CommandDispatcher(fake_transport)
        command = dispatcher.resolve("recall_scene", {"scene": 10})
        assert dispatcher.send(command) is command
        assert fake_transport.sent == [command]

    def test_send_failure(self, failing_transport):
        command = CommandDispatcher().resolve("recall_scene", {"scene": 10})
        with pytest.raises(TransportError):
            CommandDispatcher(failing_transport).send(command)
