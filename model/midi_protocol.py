"""
dLive MIDI protocol encoding.

Turns a resolved Command into the ordered mido messages the console expects.
All channel numbers here are 0-based wire channels; ``base_channel`` is the
operator-facing (1-based) MIDI channel N configured on the console, and the
console listens on N to N+4.
"""
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Sequence, Tuple

import mido

from config.settings import CONTROL_CHANGE_TYPE, MIDI_CHANNEL_RANGE, NOTE_ON_TYPE, PROGRAM_CHANGE_TYPE, SYSEX_TYPE
from model.catalog import (
    EQ_MAXIMUM_GAIN,
    EQ_MAXIMUM_WIDTH,
    EQ_MINIMUM_GAIN,
    EQ_MINIMUM_WIDTH,
    MIDI_MAXIMUM_VALUE,
    PREAMP_MAXIMUM_GAIN,
    PREAMP_MINIMUM_GAIN,
    ChannelKind,
    SocketKind,
)
from model.commands import Command

# Allen & Heath dLive SysEx header (F0/F7 are added by mido)
SYSEX_HEADER: Tuple[int, ...] = (0x00, 0x00, 0x1A, 0x50, 0x10, 0x01, 0x00)

# NRPN controllers
NRPN_PARAMETER_MSB = 0x63
NRPN_PARAMETER_LSB = 0x62
DATA_ENTRY = 0x06
BANK_SELECT = 0x00

# NRPN parameter ids
PARAM_FADER_LEVEL = 0x17
PARAM_ASSIGN = 0x40
PARAM_PREAMP_GAIN = 0x19
PARAM_PREAMP_PAD = 0x1A
PARAM_PREAMP_48V = 0x1B
PARAM_HPF_FREQUENCY = 0x30
PARAM_HPF_ON = 0x31
PARAM_EQ_BASE = 0x60

# SysEx message ids
SYSEX_NAME = 0x03
SYSEX_COLOUR = 0x06
SYSEX_SEND_LEVEL = 0x0D
SYSEX_INPUT_TO_GROUP_AUX = 0x0E
SYSEX_MAIN_MIX_ASSIGN = 0x18
SYSEX_UFX_KEY = 0x1B
SYSEX_UFX_SCALE = 0x1C

ON = 0x7F
OFF = 0x3F

DCA_ASSIGN_ON = 0x40
DCA_ASSIGN_OFF = 0x00
MUTE_GROUP_ASSIGN_ON = 0x58
MUTE_GROUP_ASSIGN_OFF = 0x18
CUE_LIST_BANK_BASE = 0x10
PROGRAMS_PER_BANK = 128

# (MIDI channel offset from N, first channel byte) per kind
CHANNEL_ADDRESSING: Mapping[ChannelKind, Tuple[int, int]] = MappingProxyType({
    ChannelKind.INPUT: (0, 0x00),
    ChannelKind.MONO_GROUP: (1, 0x00),
    ChannelKind.STEREO_GROUP: (1, 0x40),
    ChannelKind.MONO_AUX: (2, 0x00),
    ChannelKind.STEREO_AUX: (2, 0x40),
    ChannelKind.MONO_MATRIX: (3, 0x00),
    ChannelKind.STEREO_MATRIX: (3, 0x40),
    ChannelKind.MONO_FX_SEND: (4, 0x00),
    ChannelKind.STEREO_FX_SEND: (4, 0x10),
    ChannelKind.FX_RETURN: (4, 0x20),
    ChannelKind.MAIN: (4, 0x30),
    ChannelKind.DCA: (4, 0x36),
    ChannelKind.MUTE_GROUP: (4, 0x4E),
    ChannelKind.STEREO_UFX_SEND: (4, 0x56),
    ChannelKind.STEREO_UFX_RETURN: (4, 0x5E),
})

SOCKET_ADDRESSING: Mapping[SocketKind, int] = MappingProxyType({
    SocketKind.MIXRACK: 0x00,
    SocketKind.DX_CARD: 0x40,
})

UFX_CHANNEL_OFFSET = 4

EQ_TYPE_WIRE_VALUES: Mapping[str, int] = MappingProxyType({
    "lf_shelf": 0,
    "hf_shelf": 1,
    "bell": 2,
    "high_pass": 3,
    "low_pass": 4,
})
EQ_FIELD_OFFSETS: Mapping[str, int] = MappingProxyType({
    "type": 0,
    "frequency": 1,
    "width": 2,
    "gain": 3,
})


def _scale(value: float, minimum: float, maximum: float) -> int:
    """Map a value in [minimum, maximum] linearly onto 0-127."""
    return int(round((value - minimum) / (maximum - minimum) * MIDI_MAXIMUM_VALUE))


def _on_off(enabled: bool) -> int:
    return ON if enabled else OFF


def channel_address(base: int, kind_id: str, index: int) -> Tuple[int, int]:
    """(wire MIDI channel, channel byte) of one channel."""
    offset, first = CHANNEL_ADDRESSING[ChannelKind.from_id(kind_id)]
    return base + offset, first + index


def socket_address(base: int, kind_id: str, index: int) -> Tuple[int, int]:
    return base, SOCKET_ADDRESSING[SocketKind.from_id(kind_id)] + index


def _cc(channel: int, control: int, value: int) -> mido.Message:
    return mido.Message(CONTROL_CHANGE_TYPE, channel=channel, control=control, value=value)


def _nrpn(channel: int, channel_byte: int, parameter: int, value: int) -> List[mido.Message]:
    return [
        _cc(channel, NRPN_PARAMETER_MSB, channel_byte),
        _cc(channel, NRPN_PARAMETER_LSB, parameter),
        _cc(channel, DATA_ENTRY, value),
    ]


def _sysex(body: Sequence[int]) -> mido.Message:
    return mido.Message(SYSEX_TYPE, data=SYSEX_HEADER + tuple(body))


def _channel(base: int, params: Mapping) -> Tuple[int, int]:
    return channel_address(base, params["channelType"], params["channelNo"])


def _input(base: int, params: Mapping) -> Tuple[int, int]:
    return channel_address(base, ChannelKind.INPUT.id, params["channelNo"])


def _mute(enabled: bool):
    def build(base, params):
        channel, channel_byte = _channel(base, params)
        return [
            mido.Message(NOTE_ON_TYPE, channel=channel, note=channel_byte, velocity=_on_off(enabled)),
            mido.Message(NOTE_ON_TYPE, channel=channel, note=channel_byte, velocity=0),
        ]
    return build


def _fader_level(base, params):
    channel, channel_byte = _channel(base, params)
    return _nrpn(channel, channel_byte, PARAM_FADER_LEVEL, params["level"])


def _main_mix_assign(enabled: bool):
    def build(base, params):
        channel, channel_byte = _channel(base, params)
        return [_sysex((channel, SYSEX_MAIN_MIX_ASSIGN, channel_byte, _on_off(enabled)))]
    return build


def _send_level(base, params):
    channel, channel_byte = _channel(base, params)
    send_channel, send_byte = channel_address(
        base, params["destinationChannelType"], params["destinationChannelNo"],
    )
    return [_sysex((channel, SYSEX_SEND_LEVEL, channel_byte, send_channel, send_byte, params["level"]))]


def _input_to_group_aux(base, params):
    channel, channel_byte = _input(base, params)
    send_channel, send_byte = channel_address(
        base, params["destinationChannelType"], params["destinationChannelNo"],
    )
    return [_sysex((
        channel, SYSEX_INPUT_TO_GROUP_AUX, channel_byte, send_channel, send_byte, _on_off(params["shouldEnable"]),
    ))]


def _assign(target_field: str, on_base: int, off_base: int, enabled: bool):
    def build(base, params):
        channel, channel_byte = _channel(base, params)
        value = (on_base if enabled else off_base) + params[target_field]
        return _nrpn(channel, channel_byte, PARAM_ASSIGN, value)
    return build


def _preamp_gain(base, params):
    channel, socket_byte = socket_address(base, params["socketType"], params["socketNo"])
    value = _scale(params["gain"], PREAMP_MINIMUM_GAIN, PREAMP_MAXIMUM_GAIN)
    return _nrpn(channel, socket_byte, PARAM_PREAMP_GAIN, value)


def _preamp_switch(parameter: int):
    def build(base, params):
        channel, socket_byte = socket_address(base, params["socketType"], params["socketNo"])
        return _nrpn(channel, socket_byte, parameter, _on_off(params["shouldEnable"]))
    return build


def _channel_name(base, params):
    channel, channel_byte = _channel(base, params)
    name = tuple(params["name"].encode("ascii"))
    return [_sysex((channel, SYSEX_NAME, channel_byte) + name)]


def _channel_colour(base, params):
    channel, channel_byte = _channel(base, params)
    return [_sysex((channel, SYSEX_COLOUR, channel_byte, params["colour"]))]


def _bank_and_program(channel: int, bank: int, program: int) -> List[mido.Message]:
    return [
        _cc(channel, BANK_SELECT, bank),
        mido.Message(PROGRAM_CHANGE_TYPE, channel=channel, program=program),
    ]


def _scene_recall(base, params):
    scene = params["sceneNo"]
    return _bank_and_program(base, scene // PROGRAMS_PER_BANK, scene % PROGRAMS_PER_BANK)


def _cue_list_recall(base, params):
    recall_id = params["recallId"]
    return _bank_and_program(
        base, CUE_LIST_BANK_BASE + recall_id // PROGRAMS_PER_BANK, recall_id % PROGRAMS_PER_BANK,
    )


def _go_next_previous(base, params):
    return [_cc(base, params["controlNumber"], params["controlValue"])]


def _eq_value(field: str, value) -> int:
    if field == "type":
        return EQ_TYPE_WIRE_VALUES[value]
    if field == "width":
        return _scale(value, EQ_MINIMUM_WIDTH, EQ_MAXIMUM_WIDTH)
    if field == "gain":
        return _scale(value, EQ_MINIMUM_GAIN, EQ_MAXIMUM_GAIN)
    return value


def _parametric_eq(base, params):
    channel, channel_byte = _channel(base, params)
    first_parameter = PARAM_EQ_BASE + len(EQ_FIELD_OFFSETS) * params["bandNo"]
    messages: List[mido.Message] = []
    for field, offset in EQ_FIELD_OFFSETS.items():
        if field in params:
            messages.extend(_nrpn(channel, channel_byte, first_parameter + offset, _eq_value(field, params[field])))
    return messages


def _hpf_frequency(base, params):
    channel, channel_byte = _input(base, params)
    return _nrpn(channel, channel_byte, PARAM_HPF_FREQUENCY, params["frequency"])


def _hpf_on_off(base, params):
    channel, channel_byte = _input(base, params)
    return _nrpn(channel, channel_byte, PARAM_HPF_ON, _on_off(params["shouldEnable"]))


def _ufx_global(message_id: int, field: str):
    def build(base, params):
        return [_sysex((base + UFX_CHANNEL_OFFSET, message_id, params[field]))]
    return build


def _ufx_unit_parameter(base, params):
    return [_cc(params["midiChannel"], params["controlNumber"], params["value"])]


MessageBuilder = Callable[[int, Mapping], List[mido.Message]]

_BUILDERS: Dict[str, MessageBuilder] = {
    "mute_on": _mute(True),
    "mute_off": _mute(False),
    "fader_level": _fader_level,
    "channel_assignment_to_main_mix_on": _main_mix_assign(True),
    "channel_assignment_to_main_mix_off": _main_mix_assign(False),
    "aux_fx_matrix_send_level": _send_level,
    "input_to_group_aux_on": _input_to_group_aux,
    "dca_assignment_on": _assign("dcaNo", DCA_ASSIGN_ON, DCA_ASSIGN_OFF, True),
    "dca_assignment_off": _assign("dcaNo", DCA_ASSIGN_ON, DCA_ASSIGN_OFF, False),
    "mute_group_assignment_on": _assign("muteGroupNo", MUTE_GROUP_ASSIGN_ON, MUTE_GROUP_ASSIGN_OFF, True),
    "mute_group_assignment_off": _assign("muteGroupNo", MUTE_GROUP_ASSIGN_ON, MUTE_GROUP_ASSIGN_OFF, False),
    "set_socket_preamp_gain": _preamp_gain,
    "set_socket_preamp_pad": _preamp_switch(PARAM_PREAMP_PAD),
    "set_socket_preamp_48v": _preamp_switch(PARAM_PREAMP_48V),
    "set_channel_name": _channel_name,
    "set_channel_colour": _channel_colour,
    "scene_recall": _scene_recall,
    "cue_list_recall": _cue_list_recall,
    "go_next_previous": _go_next_previous,
    "parametric_eq": _parametric_eq,
    "hpf_frequency": _hpf_frequency,
    "set_hpf_on_off": _hpf_on_off,
    "set_ufx_global_key": _ufx_global(SYSEX_UFX_KEY, "key"),
    "set_ufx_global_scale": _ufx_global(SYSEX_UFX_SCALE, "scale"),
    "set_ufx_unit_parameter": _ufx_unit_parameter,
}


def build_messages(command: Command, base_channel: int) -> List[mido.Message]:
    """
    Encode one command as dLive MIDI messages, in sending order.

    ``base_channel`` is the console's 1-based MIDI channel N; it must leave
    room for the five channels N..N+4 the console listens on.
    """
    low, high = MIDI_CHANNEL_RANGE
    if not (low <= base_channel <= high):
        raise ValueError(f"base MIDI channel must be between {low} and {high}, got {base_channel}")
    builder = _BUILDERS.get(command.operation)
    if builder is None:
        raise ValueError(f"no MIDI encoding for operation {command.operation!r}")
    return builder(base_channel - 1, command.params)


def to_bytes(messages: Sequence[mido.Message]) -> bytes:
    """Raw wire bytes of a message sequence."""
    return b"".join(bytes(message.bytes()) for message in messages)


def hex_dump(messages: Sequence[mido.Message]) -> str:
    return " ".join(f"{b:02X}" for b in to_bytes(messages))
