"""
Tests for model/catalog.py and model/eq.py
Validates topology, choice tables and kind applicability
"""
import pytest

from model import eq
from model.catalog import (
    CHANNEL_KIND_ROLES,
    CHOICE_TABLES,
    EQ_FREQUENCY_CHOICES,
    FADER_LEVEL_CHOICES,
    HPF_FREQUENCY_CHOICES,
    RESERVED_SCENE_COUNT,
    SCENE_COUNT,
    ChannelKind,
    SocketKind,
    channel_kind_ids,
    validate_catalog,
)


class TestChannelKinds:
    """Tests for the ChannelKind table."""

    def test_every_kind_has_channels(self):
        for kind in ChannelKind:
            assert kind.count() > 0, f"{kind.id} has no channels"

    def test_from_id_round_trips(self):
        for kind in ChannelKind:
            assert ChannelKind.from_id(kind.id) is kind

    def test_unknown_id_raises_key_error(self):
        with pytest.raises(KeyError):
            ChannelKind.from_id("mono_bus")

    def test_labels(self):
        """Labels are 1-based for display."""
        assert ChannelKind.INPUT.label() == "Input Channel"
        assert ChannelKind.INPUT.label(0) == "Input Channel 1"
        assert ChannelKind.DCA.label(23) == "DCA 24"

    def test_field_names_are_explicit(self):
        assert ChannelKind.MONO_GROUP.field_name == "monoGroup"
        assert ChannelKind.STEREO_UFX_RETURN.field_name == "stereoUfxReturn"
        assert ChannelKind.MONO_AUX.destination_field_name == "destinationMonoAux"

    def test_known_counts(self):
        assert ChannelKind.INPUT.count() == 128
        assert ChannelKind.DCA.count() == 24
        assert ChannelKind.MUTE_GROUP.count() == 8


class TestSocketKinds:
    """Socket banks are separate from channel kinds."""

    def test_two_banks(self):
        assert {kind.id for kind in SocketKind} == {"mixrack", "dx_card"}

    def test_socket_ids_do_not_clash_with_channel_ids(self):
        channel_ids = {kind.id for kind in ChannelKind}
        assert not channel_ids & {kind.id for kind in SocketKind}

    def test_participates_only_in_preamp_roles(self):
        assert SocketKind.MIXRACK.participates_in("preamp_gain")
        assert SocketKind.DX_CARD.participates_in("preamp_48v")
        assert not SocketKind.MIXRACK.participates_in("mute")


class TestRoles:
    """Kind applicability per operation role."""

    def test_mute_accepts_every_kind(self):
        assert CHANNEL_KIND_ROLES["mute"] == frozenset(ChannelKind)

    def test_fader_level_excludes_mute_groups(self):
        assert not ChannelKind.MUTE_GROUP.participates_in("fader_level")
        assert ChannelKind.DCA.participates_in("fader_level")

    def test_send_sources(self):
        assert channel_kind_ids("send_source") == (
            "input", "mono_group", "stereo_group", "fx_return", "stereo_ufx_return",
        )

    def test_input_to_group_aux_destinations_leave_out_fx_sends(self):
        destinations = CHANNEL_KIND_ROLES["input_to_group_aux_destination"]
        assert ChannelKind.MONO_FX_SEND not in destinations
        assert ChannelKind.STEREO_UFX_SEND not in destinations
        assert ChannelKind.MONO_FX_SEND in CHANNEL_KIND_ROLES["send_destination"]

    def test_assign_roles_exclude_dca_and_mute_group(self):
        for role in ("dca_assign", "mute_group_assign"):
            assert not ChannelKind.DCA.participates_in(role)
            assert not ChannelKind.MUTE_GROUP.participates_in(role)
            assert ChannelKind.INPUT.participates_in(role)

    def test_parametric_eq_kinds(self):
        assert ChannelKind.INPUT.participates_in("parametric_eq")
        assert ChannelKind.MAIN.participates_in("parametric_eq")
        assert not ChannelKind.STEREO_FX_SEND.participates_in("parametric_eq")
        assert not ChannelKind.STEREO_UFX_RETURN.participates_in("parametric_eq")


class TestChoiceTables:
    """Choice tables are non-empty with unique ids."""

    def test_catalog_self_check_passes(self):
        validate_catalog()

    def test_unique_ids(self):
        for name, choices in CHOICE_TABLES.items():
            ids = [choice.id for choice in choices]
            assert len(ids) == len(set(ids)), f"duplicate id in {name}"

    def test_fader_levels_cover_midi_range(self):
        ids = [choice.id for choice in FADER_LEVEL_CHOICES]
        assert ids[0] == 127
        assert ids[-1] == 0
        assert len(ids) == 128

    def test_fader_level_labels(self):
        labels = {choice.id: choice.label for choice in FADER_LEVEL_CHOICES}
        assert labels[0x6B] == "0 dB"
        assert labels[0] == "-inf dB"
        assert labels[127] == "+10.0 dB"

    def test_frequency_tables(self):
        assert len(EQ_FREQUENCY_CHOICES) == 128
        assert EQ_FREQUENCY_CHOICES[0].label == "20 Hz"
        assert EQ_FREQUENCY_CHOICES[-1].label == "20.00 kHz"
        assert HPF_FREQUENCY_CHOICES[-1].label == "2.00 kHz"

    def test_scene_numbering_leaves_recallable_scenes(self):
        assert RESERVED_SCENE_COUNT == 8
        assert SCENE_COUNT > RESERVED_SCENE_COUNT


class TestEqRules:
    """Band/type rules shared by the validator and the encoder."""

    def test_outer_band_types(self):
        assert set(eq.band_rule(0).type_choices) == {"lf_shelf", "bell", "high_pass"}
        assert set(eq.band_rule(3).type_choices) == {"hf_shelf", "bell", "low_pass"}

    def test_inner_bands_are_fixed_bells(self):
        for band in (1, 2):
            rule = eq.band_rule(band)
            assert rule.has_fixed_type
            assert rule.type_choices == ("bell",)

    @pytest.mark.parametrize("eq_type, expected", [
        ("bell", {"type", "frequency", "width", "gain"}),
        ("lf_shelf", {"type", "frequency", "gain"}),
        ("high_pass", {"type", "frequency"}),
    ])
    def test_required_fields(self, eq_type, expected):
        assert eq.required_fields(0, eq_type) == frozenset(expected)

    def test_collected_fields_skip_fixed_type(self):
        assert dict(eq.collected_fields(1, "bell")) == {
            "frequency": "band1Frequency",
            "gain": "band1Gain",
            "width": "band1Width",
        }

    def test_collected_fields_include_selected_type(self):
        assert dict(eq.collected_fields(3, "low_pass")) == {
            "frequency": "band3Frequency",
            "type": "band3Type",
        }

    def test_unknown_band(self):
        with pytest.raises(KeyError):
            eq.band_rule(4)
