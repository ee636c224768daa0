"""
Static description of the console: channel and socket topology, value limits
and the choice tables operators pick from.

Everything here is built once at import time and never written afterwards.
"""
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, NamedTuple, Optional, Tuple


# Channel topology
INPUT_CHANNEL_COUNT = 128
MONO_GROUP_COUNT = 62
STEREO_GROUP_COUNT = 31
MONO_AUX_COUNT = 62
STEREO_AUX_COUNT = 31
MONO_MATRIX_COUNT = 62
STEREO_MATRIX_COUNT = 31
MONO_FX_SEND_COUNT = 16
STEREO_FX_SEND_COUNT = 16
FX_RETURN_COUNT = 16
MAIN_COUNT = 6
DCA_COUNT = 24
MUTE_GROUP_COUNT = 8
STEREO_UFX_SEND_COUNT = 8
STEREO_UFX_RETURN_COUNT = 8

# Preamp sockets
MIXRACK_SOCKET_COUNT = 64
DX_CARD_SOCKET_COUNT = 64

# Show control
SCENE_COUNT = 500
RESERVED_SCENE_COUNT = 8  # scenes 0-7 are utility scenes
CUE_LIST_COUNT = 2000

# Value limits
PREAMP_MINIMUM_GAIN = 5.0
PREAMP_MAXIMUM_GAIN = 60.0
PREAMP_GAIN_STEP = 0.5
EQ_MINIMUM_GAIN = -15.0
EQ_MAXIMUM_GAIN = 15.0
EQ_GAIN_STEP = 0.5
EQ_MINIMUM_WIDTH = 0.1
EQ_MAXIMUM_WIDTH = 1.5
EQ_BAND_COUNT = 4
MIDI_MINIMUM_CHANNEL = 1
MIDI_MAXIMUM_CHANNEL = 16
MIDI_MINIMUM_VALUE = 0
MIDI_MAXIMUM_VALUE = 127
CHANNEL_NAME_MAX_LENGTH = 8


class ChannelKind(Enum):
    """
    Addressable signal-path categories.

    Each member carries its wire id, label stem, channel count and the names of
    the operator-facing fields that hold its index when picked as a source or
    as a destination.
    """

    INPUT = ("input", "Input Channel", INPUT_CHANNEL_COUNT, "input", "destinationInput")
    MONO_GROUP = ("mono_group", "Mono Group", MONO_GROUP_COUNT, "monoGroup", "destinationMonoGroup")
    STEREO_GROUP = ("stereo_group", "Stereo Group", STEREO_GROUP_COUNT, "stereoGroup", "destinationStereoGroup")
    MONO_AUX = ("mono_aux", "Mono Aux", MONO_AUX_COUNT, "monoAux", "destinationMonoAux")
    STEREO_AUX = ("stereo_aux", "Stereo Aux", STEREO_AUX_COUNT, "stereoAux", "destinationStereoAux")
    MONO_MATRIX = ("mono_matrix", "Mono Matrix", MONO_MATRIX_COUNT, "monoMatrix", "destinationMonoMatrix")
    STEREO_MATRIX = ("stereo_matrix", "Stereo Matrix", STEREO_MATRIX_COUNT, "stereoMatrix", "destinationStereoMatrix")
    MONO_FX_SEND = ("mono_fx_send", "Mono FX Send", MONO_FX_SEND_COUNT, "monoFxSend", "destinationMonoFxSend")
    STEREO_FX_SEND = ("stereo_fx_send", "Stereo FX Send", STEREO_FX_SEND_COUNT, "stereoFxSend", "destinationStereoFxSend")
    FX_RETURN = ("fx_return", "FX Return", FX_RETURN_COUNT, "fxReturn", "destinationFxReturn")
    MAIN = ("main", "Main", MAIN_COUNT, "main", "destinationMain")
    DCA = ("dca", "DCA", DCA_COUNT, "dca", "destinationDca")
    MUTE_GROUP = ("mute_group", "Mute Group", MUTE_GROUP_COUNT, "muteGroup", "destinationMuteGroup")
    STEREO_UFX_SEND = ("stereo_ufx_send", "Stereo UFX Send", STEREO_UFX_SEND_COUNT, "stereoUfxSend", "destinationStereoUfxSend")
    STEREO_UFX_RETURN = ("stereo_ufx_return", "Stereo UFX Return", STEREO_UFX_RETURN_COUNT, "stereoUfxReturn", "destinationStereoUfxReturn")

    def __init__(self, kind_id: str, label_stem: str, count: int, field_name: str, destination_field_name: str):
        self.id = kind_id
        self._label_stem = label_stem
        self._count = count
        self.field_name = field_name
        self.destination_field_name = destination_field_name

    def count(self) -> int:
        return self._count

    def label(self, index: Optional[int] = None) -> str:
        """Label stem, or the 1-based display label of one channel."""
        if index is None:
            return self._label_stem
        return f"{self._label_stem} {index + 1}"

    def participates_in(self, role: str) -> bool:
        """Whether this kind may be picked for an operation role."""
        return self in CHANNEL_KIND_ROLES[role]

    @classmethod
    def from_id(cls, kind_id: str) -> "ChannelKind":
        """Look a kind up by wire id; raises KeyError if there is none."""
        return _CHANNEL_KINDS_BY_ID[kind_id]


class SocketKind(Enum):
    """Preamp socket banks. They share no address space with channels or each other."""

    MIXRACK = ("mixrack", "MixRack Socket", MIXRACK_SOCKET_COUNT, "mixrack")
    DX_CARD = ("dx_card", "DX Card Socket", DX_CARD_SOCKET_COUNT, "dxCard")

    def __init__(self, kind_id: str, label_stem: str, count: int, field_name: str):
        self.id = kind_id
        self._label_stem = label_stem
        self._count = count
        self.field_name = field_name

    def count(self) -> int:
        return self._count

    def label(self, index: Optional[int] = None) -> str:
        if index is None:
            return self._label_stem
        return f"{self._label_stem} {index + 1}"

    def participates_in(self, role: str) -> bool:
        # every preamp operation takes every socket bank
        return role in PREAMP_ROLES

    @classmethod
    def from_id(cls, kind_id: str) -> "SocketKind":
        return _SOCKET_KINDS_BY_ID[kind_id]


_CHANNEL_KINDS_BY_ID: Mapping[str, ChannelKind] = MappingProxyType({kind.id: kind for kind in ChannelKind})
_SOCKET_KINDS_BY_ID: Mapping[str, SocketKind] = MappingProxyType({kind.id: kind for kind in SocketKind})

ALL_CHANNEL_KINDS: FrozenSet[ChannelKind] = frozenset(ChannelKind)
PREAMP_ROLES: FrozenSet[str] = frozenset({"preamp_gain", "preamp_pad", "preamp_48v"})

_SEND_SOURCE_KINDS = frozenset({
    ChannelKind.INPUT,
    ChannelKind.MONO_GROUP,
    ChannelKind.STEREO_GROUP,
    ChannelKind.FX_RETURN,
    ChannelKind.STEREO_UFX_RETURN,
})

# Which kinds may be picked for each operation role.
# input_to_group_aux_destination deliberately leaves out the FX and UFX sends
# that send_destination accepts; the console offers no such routing.
CHANNEL_KIND_ROLES: Mapping[str, FrozenSet[ChannelKind]] = MappingProxyType({
    "mute": ALL_CHANNEL_KINDS,
    "fader_level": ALL_CHANNEL_KINDS - {ChannelKind.MUTE_GROUP},
    "assign_to_main_mix": _SEND_SOURCE_KINDS,
    "send_source": _SEND_SOURCE_KINDS,
    "send_destination": frozenset({
        ChannelKind.MONO_AUX,
        ChannelKind.STEREO_AUX,
        ChannelKind.MONO_FX_SEND,
        ChannelKind.STEREO_FX_SEND,
        ChannelKind.MONO_MATRIX,
        ChannelKind.STEREO_MATRIX,
        ChannelKind.STEREO_UFX_SEND,
    }),
    "input_to_group_aux_destination": frozenset({
        ChannelKind.MONO_GROUP,
        ChannelKind.STEREO_GROUP,
        ChannelKind.MONO_AUX,
        ChannelKind.STEREO_AUX,
        ChannelKind.MONO_MATRIX,
        ChannelKind.STEREO_MATRIX,
    }),
    "dca_assign": ALL_CHANNEL_KINDS - {ChannelKind.DCA, ChannelKind.MUTE_GROUP},
    "mute_group_assign": ALL_CHANNEL_KINDS - {ChannelKind.DCA, ChannelKind.MUTE_GROUP},
    "channel_name": ALL_CHANNEL_KINDS,
    "channel_colour": ALL_CHANNEL_KINDS - {ChannelKind.MUTE_GROUP},
    "parametric_eq": ALL_CHANNEL_KINDS - {
        ChannelKind.MUTE_GROUP,
        ChannelKind.DCA,
        ChannelKind.MONO_FX_SEND,
        ChannelKind.STEREO_FX_SEND,
        ChannelKind.STEREO_UFX_SEND,
        ChannelKind.STEREO_UFX_RETURN,
    },
    # single-kind roles used by fixed targets
    "input": frozenset({ChannelKind.INPUT}),
    "dca": frozenset({ChannelKind.DCA}),
    "mute_group": frozenset({ChannelKind.MUTE_GROUP}),
})


class Choice(NamedTuple):
    id: object
    label: str


def _fader_level_label(level: int) -> str:
    if level == 0:
        return "-inf dB"
    # 0x6B is unity; half-dB steps above it, 0.75 dB steps below
    if level >= 0x6B:
        db = (level - 0x6B) / 2
    else:
        db = (level - 0x6B) * 0.75
    return "0 dB" if db == 0 else f"{db:+.1f} dB"


def _frequency_label(hertz: float) -> str:
    if hertz < 1000:
        return f"{hertz:.0f} Hz"
    return f"{hertz / 1000:.2f} kHz"


def _log_frequency_choices(lowest: float, highest: float, steps: int = 128) -> Tuple[Choice, ...]:
    ratio = highest / lowest
    return tuple(
        Choice(i, _frequency_label(lowest * ratio ** (i / (steps - 1))))
        for i in range(steps)
    )


FADER_LEVEL_CHOICES: Tuple[Choice, ...] = tuple(
    Choice(level, _fader_level_label(level)) for level in range(MIDI_MAXIMUM_VALUE, -1, -1)
)

EQ_TYPE_CHOICES: Tuple[Choice, ...] = (
    Choice("lf_shelf", "LF Shelf"),
    Choice("hf_shelf", "HF Shelf"),
    Choice("bell", "Bell"),
    Choice("high_pass", "High Pass"),
    Choice("low_pass", "Low Pass"),
)

# Id 72 sits at roughly 1 kHz.
EQ_FREQUENCY_CHOICES: Tuple[Choice, ...] = _log_frequency_choices(20.0, 20000.0)
HPF_FREQUENCY_CHOICES: Tuple[Choice, ...] = _log_frequency_choices(20.0, 2000.0)

CHANNEL_COLOUR_CHOICES: Tuple[Choice, ...] = (
    Choice(0, "Off"),
    Choice(1, "Red"),
    Choice(2, "Green"),
    Choice(3, "Yellow"),
    Choice(4, "Blue"),
    Choice(5, "Purple"),
    Choice(6, "Light Blue"),
    Choice(7, "White"),
)

UFX_KEY_CHOICES: Tuple[Choice, ...] = tuple(
    Choice(i, key) for i, key in enumerate(("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"))
)

UFX_SCALE_CHOICES: Tuple[Choice, ...] = (
    Choice(0, "Major"),
    Choice(1, "Minor"),
)

CHOICE_TABLES: Mapping[str, Tuple[Choice, ...]] = MappingProxyType({
    "fader_level": FADER_LEVEL_CHOICES,
    "eq_type": EQ_TYPE_CHOICES,
    "eq_frequency": EQ_FREQUENCY_CHOICES,
    "hpf_frequency": HPF_FREQUENCY_CHOICES,
    "channel_colour": CHANNEL_COLOUR_CHOICES,
    "ufx_key": UFX_KEY_CHOICES,
    "ufx_scale": UFX_SCALE_CHOICES,
})


def choice_ids(choices: Iterable[Choice]) -> FrozenSet[object]:
    """Id set of a choice table, for membership checks."""
    return frozenset(choice.id for choice in choices)


def _assert_unique(values: Iterable[object], table: str) -> None:
    values = list(values)
    assert len(values) == len(set(values)), f"duplicate id in {table}"


def validate_catalog() -> None:
    """Check the static tables once: positive counts and unique ids everywhere."""
    for kind in ChannelKind:
        assert kind.count() > 0, f"{kind.id} has no channels"
    for socket_kind in SocketKind:
        assert socket_kind.count() > 0, f"{socket_kind.id} has no sockets"

    _assert_unique((kind.id for kind in ChannelKind), "channel kinds")
    _assert_unique((kind.field_name for kind in ChannelKind), "channel kind fields")
    _assert_unique((kind.destination_field_name for kind in ChannelKind), "channel kind destination fields")
    _assert_unique((kind.id for kind in SocketKind), "socket kinds")
    _assert_unique((kind.field_name for kind in SocketKind), "socket kind fields")

    for table_name, choices in CHOICE_TABLES.items():
        assert choices, f"{table_name} is empty"
        _assert_unique((choice.id for choice in choices), table_name)

    assert SCENE_COUNT > RESERVED_SCENE_COUNT, "no recallable scenes"
    assert CUE_LIST_COUNT > 0, "no cue lists"


validate_catalog()


def channel_kind_ids(role: str) -> Tuple[str, ...]:
    """Wire ids of the kinds enabled for a role, in catalog order."""
    return tuple(kind.id for kind in ChannelKind if kind in CHANNEL_KIND_ROLES[role])
