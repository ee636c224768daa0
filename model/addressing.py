"""
Address resolution.

Maps symbolic (kind, index) picks onto console addresses and applies the
numbering rules of each show-control area:

- channels and sockets: address == index, only within [0, kind.count())
- scenes: the first RESERVED_SCENE_COUNT scenes are utility scenes and are
  never recalled
- cue lists: operators see ids starting at 1, the console counts from 0
- MIDI channels: operators see 1-16, the wire carries 0-15

Channel and socket refs keep their kind, so equal numbers under different
kinds never name the same thing.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Union

from model.catalog import (
    CUE_LIST_COUNT,
    MIDI_MAXIMUM_CHANNEL,
    MIDI_MINIMUM_CHANNEL,
    RESERVED_SCENE_COUNT,
    SCENE_COUNT,
    ChannelKind,
    SocketKind,
)
from model.errors import REASON_OUT_OF_RANGE, REASON_RESERVED, AddressingError
from model.parameters import (
    NUMBER_CUE_LIST,
    NUMBER_MIDI_CHANNEL,
    NUMBER_SCENE,
    ParameterSet,
    SymbolicTarget,
)

CUE_LIST_LABEL_OFFSET = 1
MIDI_CHANNEL_LABEL_OFFSET = 1


def _check_index(kind: Union[ChannelKind, SocketKind], index: int, field: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not (0 <= index < kind.count()):
        raise AddressingError(
            field, REASON_OUT_OF_RANGE,
            f"{kind.label()} {index!r} does not exist (valid: 0-{kind.count() - 1})",
            kind=kind.id, index=index if isinstance(index, int) else None,
        )


@dataclass(frozen=True)
class ChannelRef:
    kind: ChannelKind
    index: int

    def __post_init__(self):
        _check_index(self.kind, self.index, "index")

    @property
    def address(self) -> int:
        return self.index

    @property
    def tag(self) -> str:
        return self.kind.id


@dataclass(frozen=True)
class SocketRef:
    kind: SocketKind
    index: int

    def __post_init__(self):
        _check_index(self.kind, self.index, "index")

    @property
    def address(self) -> int:
        return self.index

    @property
    def tag(self) -> str:
        return self.kind.id


def resolve_channel(kind: ChannelKind, index: int, field: str = "channelNo") -> ChannelRef:
    _check_index(kind, index, field)
    return ChannelRef(kind, index)


def resolve_socket(kind: SocketKind, index: int, field: str = "socketNo") -> SocketRef:
    _check_index(kind, index, field)
    return SocketRef(kind, index)


def resolve_scene(scene: int, field: str = "scene") -> int:
    """Scene numbers pass through unchanged; utility scenes are refused."""
    if isinstance(scene, bool) or not isinstance(scene, int):
        raise AddressingError(field, REASON_OUT_OF_RANGE, f"scene {scene!r} is not a scene number")
    if 0 <= scene < RESERVED_SCENE_COUNT:
        raise AddressingError(
            field, REASON_RESERVED,
            f"scene {scene} is a reserved utility scene (first recallable scene is {RESERVED_SCENE_COUNT})",
            index=scene,
        )
    if not (RESERVED_SCENE_COUNT <= scene < SCENE_COUNT):
        raise AddressingError(field, REASON_OUT_OF_RANGE, f"scene {scene} does not exist", index=scene)
    return scene


def resolve_cue_list(recall_id: int, field: str = "recallId") -> int:
    """Presented id n (1-based label) -> console id n - 1."""
    if isinstance(recall_id, bool) or not isinstance(recall_id, int):
        raise AddressingError(field, REASON_OUT_OF_RANGE, f"cue list {recall_id!r} is not a cue list id")
    wire_id = recall_id - CUE_LIST_LABEL_OFFSET
    if not (0 <= wire_id < CUE_LIST_COUNT):
        raise AddressingError(
            field, REASON_OUT_OF_RANGE,
            f"cue list {recall_id} does not exist (valid: 1-{CUE_LIST_COUNT})",
            index=recall_id,
        )
    return wire_id


def resolve_midi_channel(channel: int, field: str = "midiChannel") -> int:
    """Presented MIDI channel 1-16 -> wire channel 0-15."""
    if isinstance(channel, bool) or not isinstance(channel, int):
        raise AddressingError(field, REASON_OUT_OF_RANGE, f"MIDI channel {channel!r} is not a channel number")
    if not (MIDI_MINIMUM_CHANNEL <= channel <= MIDI_MAXIMUM_CHANNEL):
        raise AddressingError(
            field, REASON_OUT_OF_RANGE,
            f"MIDI channel {channel} does not exist (valid: {MIDI_MINIMUM_CHANNEL}-{MIDI_MAXIMUM_CHANNEL})",
            index=channel,
        )
    return channel - MIDI_CHANNEL_LABEL_OFFSET


_NUMBERING: Mapping[str, Callable[[int], int]] = MappingProxyType({
    NUMBER_SCENE: resolve_scene,
    NUMBER_CUE_LIST: resolve_cue_list,
    NUMBER_MIDI_CHANNEL: resolve_midi_channel,
})


@dataclass(frozen=True)
class ResolvedRequest:
    parameters: ParameterSet
    targets: Mapping[str, Union[ChannelRef, SocketRef]]
    numbers: Mapping[str, int]


def resolve_target(target: SymbolicTarget) -> Union[ChannelRef, SocketRef]:
    if isinstance(target.kind, SocketKind):
        return resolve_socket(target.kind, target.index, target.field)
    return resolve_channel(target.kind, target.index, target.field)


def resolve_request(parameters: ParameterSet) -> ResolvedRequest:
    """
    Resolve every target and number of a validated request.

    Targets are resolved independently; a failure on one does not stop the
    others from being checked. All failures are reported together, the first
    one raised with the rest in its ``others``.
    """
    targets: Dict[str, Union[ChannelRef, SocketRef]] = {}
    failures: List[AddressingError] = []

    for role, target in parameters.targets.items():
        try:
            targets[role] = resolve_target(target)
        except AddressingError as e:
            failures.append(e)

    numbers: Dict[str, int] = {}
    for role, value in parameters.numbers.items():
        try:
            numbers[role] = _NUMBERING[role](value)
        except AddressingError as e:
            failures.append(e)

    if failures:
        first, *others = failures
        first.others = tuple(others)
        raise first

    return ResolvedRequest(parameters, MappingProxyType(targets), MappingProxyType(numbers))
