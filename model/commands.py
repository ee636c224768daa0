"""
Command encoding.

Turns a validated ParameterSet plus its resolved addresses into the canonical
Command record the console transport consumes. Each output operation carries
exactly the neutral fields listed for it in _ENCODERS; nothing optional is
ever filled with a placeholder.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Tuple, Union

from model import eq
from model.addressing import ChannelRef, ResolvedRequest, SocketRef
from model.parameters import (
    NUMBER_CUE_LIST,
    NUMBER_MIDI_CHANNEL,
    NUMBER_SCENE,
    ROLE_CHANNEL,
    ROLE_DCA,
    ROLE_DESTINATION,
    ROLE_MUTE_GROUP,
    ROLE_SOCKET,
    ParameterSet,
)

ParamValue = Union[bool, int, float, str]


@dataclass(frozen=True)
class Command:
    """One fully resolved console command."""
    operation: str
    params: Mapping[str, ParamValue]

    @classmethod
    def build(cls, operation: str, params: Mapping[str, ParamValue]) -> "Command":
        return cls(operation, MappingProxyType(dict(params)))

    def to_dict(self) -> Dict[str, Any]:
        return {"operation": self.operation, "params": dict(self.params)}


def _channel_params(ref: ChannelRef) -> Dict[str, ParamValue]:
    return {"channelType": ref.tag, "channelNo": ref.address}


def _socket_params(ref: SocketRef) -> Dict[str, ParamValue]:
    return {"socketType": ref.tag, "socketNo": ref.address}


def _on_off(prefix: str, enabled: bool) -> str:
    return f"{prefix}_on" if enabled else f"{prefix}_off"


def _mute(params: ParameterSet, resolved: ResolvedRequest) -> Tuple[str, Dict[str, ParamValue]]:
    return _on_off("mute", params["mute"]), _channel_params(resolved.targets[ROLE_CHANNEL])


def _fader_level(params, resolved):
    fields = _channel_params(resolved.targets[ROLE_CHANNEL])
    fields["level"] = params["level"]
    return "fader_level", fields


def _assign_to_main_mix(params, resolved):
    operation = _on_off("channel_assignment_to_main_mix", params["assign"])
    return operation, _channel_params(resolved.targets[ROLE_CHANNEL])


def _send_level(params, resolved):
    destination = resolved.targets[ROLE_DESTINATION]
    fields = _channel_params(resolved.targets[ROLE_CHANNEL])
    fields.update({
        "destinationChannelType": destination.tag,
        "destinationChannelNo": destination.address,
        "level": params["level"],
    })
    return "aux_fx_matrix_send_level", fields


def _input_to_group_aux(params, resolved):
    destination = resolved.targets[ROLE_DESTINATION]
    return "input_to_group_aux_on", {
        "channelNo": resolved.targets[ROLE_CHANNEL].address,
        "destinationChannelType": destination.tag,
        "destinationChannelNo": destination.address,
        "shouldEnable": params["on"],
    }


def _dca_assign(params, resolved):
    fields = _channel_params(resolved.targets[ROLE_CHANNEL])
    fields["dcaNo"] = resolved.targets[ROLE_DCA].address
    return _on_off("dca_assignment", params["assign"]), fields


def _mute_group_assign(params, resolved):
    fields = _channel_params(resolved.targets[ROLE_CHANNEL])
    fields["muteGroupNo"] = resolved.targets[ROLE_MUTE_GROUP].address
    return _on_off("mute_group_assignment", params["assign"]), fields


def _preamp(operation: str, value_field: str, output_field: str):
    def encode_preamp(params, resolved):
        fields = _socket_params(resolved.targets[ROLE_SOCKET])
        fields[output_field] = params[value_field]
        return operation, fields
    return encode_preamp


def _channel_value(operation: str, value_field: str):
    def encode_channel_value(params, resolved):
        fields = _channel_params(resolved.targets[ROLE_CHANNEL])
        fields[value_field] = params[value_field]
        return operation, fields
    return encode_channel_value


def _recall_scene(params, resolved):
    return "scene_recall", {"sceneNo": resolved.numbers[NUMBER_SCENE]}


def _recall_cue_list(params, resolved):
    return "cue_list_recall", {"recallId": resolved.numbers[NUMBER_CUE_LIST]}


def _go_next_previous(params, resolved):
    return "go_next_previous", {
        "controlNumber": params["controlNumber"],
        "controlValue": params["controlValue"],
    }


def _parametric_eq(params, resolved):
    band = params["band"]
    rule = eq.band_rule(band)
    eq_type = eq.EQ_TYPE_BELL if rule.has_fixed_type else params[rule.type_field]

    fields = _channel_params(resolved.targets[ROLE_CHANNEL])
    fields["bandNo"] = band
    fields[eq.FIELD_TYPE] = eq_type
    for field, operator_field in eq.collected_fields(band, eq_type).items():
        if field != eq.FIELD_TYPE:
            fields[field] = params[operator_field]
    return "parametric_eq", fields


def _hpf_frequency(params, resolved):
    return "hpf_frequency", {
        "channelNo": resolved.targets[ROLE_CHANNEL].address,
        "frequency": params["frequency"],
    }


def _hpf_on_off(params, resolved):
    return "set_hpf_on_off", {
        "channelNo": resolved.targets[ROLE_CHANNEL].address,
        "shouldEnable": params["hpf"],
    }


def _ufx_global(operation: str, value_field: str):
    def encode_ufx_global(params, resolved):
        return operation, {value_field: params[value_field]}
    return encode_ufx_global


def _ufx_unit_parameter(params, resolved):
    return "set_ufx_unit_parameter", {
        "midiChannel": resolved.numbers[NUMBER_MIDI_CHANNEL],
        "controlNumber": params["controlNumber"],
        "value": params["controlValue"],
    }


Encoder = Callable[[ParameterSet, ResolvedRequest], Tuple[str, Dict[str, ParamValue]]]

_ENCODERS: Mapping[str, Encoder] = MappingProxyType({
    "mute": _mute,
    "fader_level": _fader_level,
    "assign_to_main_mix": _assign_to_main_mix,
    "aux_fx_matrix_send_level": _send_level,
    "input_to_group_aux_on": _input_to_group_aux,
    "dca_assign": _dca_assign,
    "mute_group_assign": _mute_group_assign,
    "set_socket_preamp_gain": _preamp("set_socket_preamp_gain", "gain", "gain"),
    "set_socket_preamp_pad": _preamp("set_socket_preamp_pad", "pad", "shouldEnable"),
    "set_socket_preamp_48v": _preamp("set_socket_preamp_48v", "phantom", "shouldEnable"),
    "set_channel_name": _channel_value("set_channel_name", "name"),
    "set_channel_colour": _channel_value("set_channel_colour", "colour"),
    "recall_scene": _recall_scene,
    "recall_cue_list": _recall_cue_list,
    "go_next_previous": _go_next_previous,
    "parametric_eq": _parametric_eq,
    "hpf_frequency": _hpf_frequency,
    "set_hpf_on_off": _hpf_on_off,
    "set_ufx_global_key": _ufx_global("set_ufx_global_key", "key"),
    "set_ufx_global_scale": _ufx_global("set_ufx_global_scale", "scale"),
    "set_ufx_unit_parameter": _ufx_unit_parameter,
})

# Output operation tags the transport must understand
COMMAND_OPERATIONS: Tuple[str, ...] = (
    "mute_on", "mute_off",
    "fader_level",
    "channel_assignment_to_main_mix_on", "channel_assignment_to_main_mix_off",
    "aux_fx_matrix_send_level",
    "input_to_group_aux_on",
    "dca_assignment_on", "dca_assignment_off",
    "mute_group_assignment_on", "mute_group_assignment_off",
    "set_socket_preamp_gain", "set_socket_preamp_pad", "set_socket_preamp_48v",
    "set_channel_name", "set_channel_colour",
    "scene_recall", "cue_list_recall", "go_next_previous",
    "parametric_eq", "hpf_frequency", "set_hpf_on_off",
    "set_ufx_global_key", "set_ufx_global_scale", "set_ufx_unit_parameter",
)


def encode(params: ParameterSet, resolved: ResolvedRequest) -> Command:
    """Build the Command for a validated, resolved request."""
    operation, fields = _ENCODERS[params.operation](params, resolved)
    return Command.build(operation, fields)
