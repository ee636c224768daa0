"""
Tests for the app.py command line
"""
import json

import pytest

import app


class TestParseFields:

    def test_values_are_json_literals(self):
        fields = app.parse_fields(["input=3", "mute=true", "name=Kick", "gain=32.5"], None)
        assert fields == {"input": 3, "mute": True, "name": "Kick", "gain": 32.5}

    def test_pairs_override_json(self):
        fields = app.parse_fields(["scene=9"], '{"scene": 8, "extra": null}')
        assert fields == {"scene": 9, "extra": None}

    def test_malformed_pair(self):
        with pytest.raises(ValueError):
            app.parse_fields(["scene"], None)

    def test_json_must_be_an_object(self):
        with pytest.raises(ValueError):
            app.parse_fields([], "[1, 2]")


class TestMain:

    def test_dry_run_prints_the_command(self, capsys):
        assert app.main(["recall_scene", "scene=130", "--dry-run"]) == app.EXIT_OK
        out = capsys.readouterr().out
        command = json.loads(out[:out.index("MIDI:")])
        assert command == {"operation": "scene_recall", "params": {"sceneNo": 130}}
        assert "MIDI: B0 00 01 C0 02" in out

    def test_rejected_command(self, capsys):
        assert app.main(["recall_scene", "scene=3", "--dry-run"]) == app.EXIT_REJECTED
        assert "rejected" in capsys.readouterr().err

    def test_all_addressing_failures_are_printed(self, capsys):
        argv = [
            "aux_fx_matrix_send_level",
            "channelType=input", "input=200",
            "destinationChannelType=mono_aux", "destinationMonoAux=99",
            "level=0", "--dry-run",
        ]
        assert app.main(argv) == app.EXIT_REJECTED
        err = capsys.readouterr().err
        assert "input" in err
        assert "destinationMonoAux" in err

    def test_list(self, capsys):
        assert app.main(["--list"]) == app.EXIT_OK
        assert "parametric_eq" in capsys.readouterr().out.split()

    def test_transport_failure(self, monkeypatch, capsys):
        monkeypatch.setattr(app.DLiveMIDIService, "connect", lambda self: False)
        monkeypatch.setattr(app.signal, "signal", lambda signum, handler: None)
        assert app.main(["recall_scene", "scene=10", "--host", "127.0.0.1"]) == app.EXIT_TRANSPORT_FAILURE

    def test_sends_the_command_it_resolved(self, monkeypatch, capsys):
        resolved = []
        sent = []
        resolve = app.CommandDispatcher.resolve

        def counting_resolve(dispatcher, operation, fields):
            resolved.append(operation)
            return resolve(dispatcher, operation, fields)

        monkeypatch.setattr(app.CommandDispatcher, "resolve", counting_resolve)
        monkeypatch.setattr(app.DLiveMIDIService, "connect", lambda self: True)
        monkeypatch.setattr(app.DLiveMIDIService, "send_command", lambda self, command: sent.append(command) or True)
        monkeypatch.setattr(app.signal, "signal", lambda signum, handler: None)
        assert app.main(["recall_scene", "scene=10", "--host", "127.0.0.1"]) == app.EXIT_OK
        assert resolved == ["recall_scene"]
        assert [command.operation for command in sent] == ["scene_recall"]

    def test_huge_number_is_rejected(self, capsys):
        argv = ["set_socket_preamp_gain", "socketType=mixrack", "mixrack=0", "gain=" + "9" * 400, "--dry-run"]
        assert app.main(argv) == app.EXIT_REJECTED
