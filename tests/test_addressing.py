"""
Tests for model/addressing.py
"""
import pytest

from model.addressing import (
    ChannelRef,
    SocketRef,
    resolve_channel,
    resolve_cue_list,
    resolve_midi_channel,
    resolve_request,
    resolve_scene,
    resolve_socket,
)
from model.catalog import ChannelKind, SocketKind
from model.errors import REASON_OUT_OF_RANGE, REASON_RESERVED, AddressingError
from model.parameters import (
    NUMBER_CUE_LIST,
    NUMBER_MIDI_CHANNEL,
    NUMBER_SCENE,
    ROLE_CHANNEL,
    ROLE_DESTINATION,
    validate_request,
)


class TestChannels:
    """Address is the index, and only inside the kind's count."""

    @pytest.mark.parametrize("kind", list(ChannelKind))
    def test_identity_at_both_ends(self, kind):
        assert resolve_channel(kind, 0).address == 0
        assert resolve_channel(kind, kind.count() - 1).address == kind.count() - 1

    @pytest.mark.parametrize("kind", list(ChannelKind))
    def test_out_of_range(self, kind):
        for index in (-1, kind.count()):
            with pytest.raises(AddressingError) as exc:
                resolve_channel(kind, index)
            assert exc.value.reason == REASON_OUT_OF_RANGE
            assert exc.value.kind == kind.id

    def test_failure_names_the_field(self):
        with pytest.raises(AddressingError) as exc:
            resolve_channel(ChannelKind.DCA, 24, field="destinationDca")
        assert exc.value.field == "destinationDca"

    def test_ref_cannot_be_built_out_of_range(self):
        with pytest.raises(AddressingError):
            ChannelRef(ChannelKind.MUTE_GROUP, 8)

    def test_refs_keep_their_kind(self):
        """Equal numbers under different kinds are different targets."""
        assert resolve_channel(ChannelKind.INPUT, 3) != resolve_channel(ChannelKind.MONO_GROUP, 3)
        assert resolve_channel(ChannelKind.INPUT, 3).tag == "input"


class TestSockets:

    def test_identity(self):
        ref = resolve_socket(SocketKind.DX_CARD, 63)
        assert ref.address == 63
        assert ref.tag == "dx_card"

    def test_out_of_range(self):
        with pytest.raises(AddressingError):
            resolve_socket(SocketKind.MIXRACK, 64)

    def test_sockets_never_equal_channels(self):
        assert SocketRef(SocketKind.MIXRACK, 0) != ChannelRef(ChannelKind.INPUT, 0)
        assert SocketRef(SocketKind.MIXRACK, 0) != SocketRef(SocketKind.DX_CARD, 0)


class TestNumbering:

    def test_scene_seven_is_reserved(self):
        with pytest.raises(AddressingError) as exc:
            resolve_scene(7)
        assert exc.value.reason == REASON_RESERVED

    def test_scene_eight_passes_through(self):
        assert resolve_scene(8) == 8
        assert resolve_scene(499) == 499

    def test_scene_past_the_end(self):
        with pytest.raises(AddressingError) as exc:
            resolve_scene(500)
        assert exc.value.reason == REASON_OUT_OF_RANGE

    @pytest.mark.parametrize("presented, wire", [(1, 0), (2, 1), (2000, 1999)])
    def test_cue_list_shift(self, presented, wire):
        assert resolve_cue_list(presented) == wire

    @pytest.mark.parametrize("presented", [0, 2001])
    def test_cue_list_out_of_range(self, presented):
        with pytest.raises(AddressingError):
            resolve_cue_list(presented)

    def test_midi_channel(self):
        assert resolve_midi_channel(1) == 0
        assert resolve_midi_channel(16) == 15

    @pytest.mark.parametrize("channel", [0, 17])
    def test_midi_channel_out_of_range(self, channel):
        with pytest.raises(AddressingError):
            resolve_midi_channel(channel)


class TestResolveRequest:

    def test_resolves_targets_and_numbers(self):
        params = validate_request("recall_cue_list", {"recallId": 10})
        resolved = resolve_request(params)
        assert resolved.numbers[NUMBER_CUE_LIST] == 9
        assert resolved.parameters is params

    def test_scene_and_midi_channel(self):
        assert resolve_request(validate_request("recall_scene", {"scene": 42})).numbers[NUMBER_SCENE] == 42
        fields = {"midiChannel": 1, "controlNumber": 7, "controlValue": 64}
        assert resolve_request(validate_request("set_ufx_unit_parameter", fields)).numbers[NUMBER_MIDI_CHANNEL] == 0

    def test_dual_targets_resolve(self):
        fields = {
            "channelType": "fx_return",
            "fxReturn": 15,
            "destinationChannelType": "stereo_matrix",
            "destinationStereoMatrix": 30,
            "level": 0,
        }
        resolved = resolve_request(validate_request("aux_fx_matrix_send_level", fields))
        assert resolved.targets[ROLE_CHANNEL] == ChannelRef(ChannelKind.FX_RETURN, 15)
        assert resolved.targets[ROLE_DESTINATION] == ChannelRef(ChannelKind.STEREO_MATRIX, 30)

    def test_both_out_of_range_targets_are_reported(self):
        fields = {
            "channelType": "input",
            "input": 128,
            "destinationChannelType": "mono_aux",
            "destinationMonoAux": 62,
            "level": 0,
        }
        params = validate_request("aux_fx_matrix_send_level", fields)
        with pytest.raises(AddressingError) as exc:
            resolve_request(params)
        assert [failure.field for failure in exc.value.failures] == ["input", "destinationMonoAux"]

    def test_one_bad_target_still_checks_the_other(self):
        fields = {
            "channelType": "input",
            "input": 0,
            "destinationDca": 24,
            "assign": True,
        }
        with pytest.raises(AddressingError) as exc:
            resolve_request(validate_request("dca_assign", fields))
        assert exc.value.field == "destinationDca"
        assert exc.value.others == ()
