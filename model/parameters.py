"""
Parameter validation.

Turns the loosely-typed field values collected by a host UI into a
ParameterSet. Every operation is described by one OperationSchema; a request
either passes every check of its schema or is rejected with the first
failure. Fields the schema does not ask for (hidden UI fields) are ignored.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple, Union

from model import eq
from model.catalog import (
    CHANNEL_COLOUR_CHOICES,
    CHANNEL_NAME_MAX_LENGTH,
    CUE_LIST_COUNT,
    EQ_BAND_COUNT,
    EQ_FREQUENCY_CHOICES,
    EQ_GAIN_STEP,
    EQ_MAXIMUM_GAIN,
    EQ_MAXIMUM_WIDTH,
    EQ_MINIMUM_GAIN,
    EQ_MINIMUM_WIDTH,
    FADER_LEVEL_CHOICES,
    HPF_FREQUENCY_CHOICES,
    MIDI_MAXIMUM_CHANNEL,
    MIDI_MAXIMUM_VALUE,
    MIDI_MINIMUM_CHANNEL,
    MIDI_MINIMUM_VALUE,
    PREAMP_GAIN_STEP,
    PREAMP_MAXIMUM_GAIN,
    PREAMP_MINIMUM_GAIN,
    RESERVED_SCENE_COUNT,
    SCENE_COUNT,
    UFX_KEY_CHOICES,
    UFX_SCALE_CHOICES,
    ChannelKind,
    Choice,
    SocketKind,
    choice_ids,
)
from model.errors import (
    REASON_NOT_APPLICABLE,
    REASON_UNKNOWN_KIND,
    RULE_CHARSET,
    RULE_CHOICE,
    RULE_LENGTH,
    RULE_MISSING,
    RULE_RANGE,
    RULE_STEP,
    RULE_TYPE,
    RULE_UNKNOWN_OPERATION,
    AddressingError,
    ValidationError,
)

# Roles of the targets a request can carry
ROLE_CHANNEL = "channel"
ROLE_DESTINATION = "destination"
ROLE_DCA = "dca"
ROLE_MUTE_GROUP = "mute_group"
ROLE_SOCKET = "socket"

# Roles of the operator-facing numbers that need renumbering
NUMBER_SCENE = "scene"
NUMBER_CUE_LIST = "cue_list"
NUMBER_MIDI_CHANNEL = "midi_channel"

_STEP_TOLERANCE = 1e-9


def _require(fields: Mapping[str, Any], name: str) -> Any:
    raw = fields.get(name)
    if raw is None:
        raise ValidationError(name, RULE_MISSING, f"{name} is required")
    return raw


def _as_int(name: str, raw: Any) -> int:
    # bool is an int subclass; a checkbox value is never a number
    if isinstance(raw, bool):
        raise ValidationError(name, RULE_TYPE, f"{name} must be an integer, got a boolean")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    raise ValidationError(name, RULE_TYPE, f"{name} must be an integer, got {raw!r}")


def _as_real(name: str, raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError(name, RULE_TYPE, f"{name} must be a number, got {raw!r}")
    try:
        return float(raw)
    except OverflowError:
        raise ValidationError(name, RULE_RANGE, f"{name} is out of range") from None


class FieldSpec:
    """One required scalar field of an operation."""

    def __init__(self, name: str):
        self.name = name

    def parse(self, fields: Mapping[str, Any]) -> Any:
        return self.coerce(_require(fields, self.name))

    def coerce(self, raw: Any) -> Any:
        raise NotImplementedError


class BooleanField(FieldSpec):
    def coerce(self, raw: Any) -> bool:
        if not isinstance(raw, bool):
            raise ValidationError(self.name, RULE_TYPE, f"{self.name} must be true or false, got {raw!r}")
        return raw


class IntegerField(FieldSpec):
    def __init__(self, name: str, minimum: int, maximum: int):
        super().__init__(name)
        self.minimum = minimum
        self.maximum = maximum

    def coerce(self, raw: Any) -> int:
        value = _as_int(self.name, raw)
        if not (self.minimum <= value <= self.maximum):
            raise ValidationError(
                self.name, RULE_RANGE,
                f"{self.name} must be between {self.minimum} and {self.maximum}, got {value}",
            )
        return value


class RealField(FieldSpec):
    def __init__(self, name: str, minimum: float, maximum: float, step: Optional[float] = None):
        super().__init__(name)
        self.minimum = minimum
        self.maximum = maximum
        self.step = step

    def coerce(self, raw: Any) -> float:
        value = _as_real(self.name, raw)
        if not (self.minimum <= value <= self.maximum):
            raise ValidationError(
                self.name, RULE_RANGE,
                f"{self.name} must be between {self.minimum} and {self.maximum}, got {value}",
            )
        if self.step is not None:
            steps = value / self.step
            if abs(steps - round(steps)) > _STEP_TOLERANCE:
                raise ValidationError(self.name, RULE_STEP, f"{self.name} must be a multiple of {self.step}, got {value}")
        return value


class ChoiceField(FieldSpec):
    def __init__(self, name: str, choices: Tuple[Choice, ...]):
        super().__init__(name)
        self.ids = choice_ids(choices)

    def coerce(self, raw: Any) -> Any:
        if isinstance(raw, bool):
            raise ValidationError(self.name, RULE_TYPE, f"{self.name} must be a choice id, got a boolean")
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        if not isinstance(raw, (str, int)) or raw not in self.ids:
            raise ValidationError(self.name, RULE_CHOICE, f"{self.name} has no choice {raw!r}")
        return raw


class TextField(FieldSpec):
    def __init__(self, name: str, max_length: int):
        super().__init__(name)
        self.max_length = max_length

    def coerce(self, raw: Any) -> str:
        # an empty name clears the label on the console
        if not isinstance(raw, str):
            raise ValidationError(self.name, RULE_TYPE, f"{self.name} must be text, got {raw!r}")
        if len(raw) > self.max_length:
            raise ValidationError(self.name, RULE_LENGTH, f"{self.name} is longer than {self.max_length} characters")
        if any(not (0x20 <= ord(char) < 0x7F) for char in raw):
            raise ValidationError(self.name, RULE_CHARSET, f"{self.name} must be printable ASCII")
        return raw


class NumberSpec(IntegerField):
    """An operator-facing number the resolver renumbers for the wire."""

    def __init__(self, name: str, role: str, minimum: int, maximum: int):
        super().__init__(name, minimum, maximum)
        self.role = role


class SymbolicTarget(NamedTuple):
    """A (kind, index) pair whose index has been read but not range-checked."""
    role: str
    kind: Union[ChannelKind, SocketKind]
    index: int
    field: str


class ChannelTargetSpec:
    """A channel picked through a kind selector plus that kind's own index field."""

    def __init__(self, role: str, kind_field: str, kind_role: str, destination: bool = False):
        self.role = role
        self.kind_field = kind_field
        self.kind_role = kind_role
        self.destination = destination

    def parse(self, fields: Mapping[str, Any]) -> SymbolicTarget:
        raw_kind = _require(fields, self.kind_field)
        if not isinstance(raw_kind, str):
            raise ValidationError(self.kind_field, RULE_TYPE, f"{self.kind_field} must be a kind id, got {raw_kind!r}")
        try:
            kind = ChannelKind.from_id(raw_kind)
        except KeyError:
            raise AddressingError(
                self.kind_field, REASON_UNKNOWN_KIND, f"no channel kind {raw_kind!r}", kind=raw_kind,
            ) from None
        if not kind.participates_in(self.kind_role):
            raise AddressingError(
                self.kind_field, REASON_NOT_APPLICABLE,
                f"{kind.label()} cannot be used as {self.kind_role.replace('_', ' ')}",
                kind=kind.id,
            )
        index_field = kind.destination_field_name if self.destination else kind.field_name
        index = _as_int(index_field, _require(fields, index_field))
        return SymbolicTarget(self.role, kind, index, index_field)


class FixedChannelTargetSpec:
    """A channel whose kind is implied by the operation."""

    def __init__(self, role: str, kind: ChannelKind, index_field: str):
        self.role = role
        self.kind = kind
        self.index_field = index_field

    def parse(self, fields: Mapping[str, Any]) -> SymbolicTarget:
        index = _as_int(self.index_field, _require(fields, self.index_field))
        return SymbolicTarget(self.role, self.kind, index, self.index_field)


class SocketTargetSpec:
    """A preamp socket picked through the socket bank selector."""

    def __init__(self, kind_role: str, role: str = ROLE_SOCKET, kind_field: str = "socketType"):
        self.role = role
        self.kind_field = kind_field
        self.kind_role = kind_role

    def parse(self, fields: Mapping[str, Any]) -> SymbolicTarget:
        raw_kind = _require(fields, self.kind_field)
        if not isinstance(raw_kind, str):
            raise ValidationError(self.kind_field, RULE_TYPE, f"{self.kind_field} must be a socket id, got {raw_kind!r}")
        try:
            kind = SocketKind.from_id(raw_kind)
        except KeyError:
            raise AddressingError(
                self.kind_field, REASON_UNKNOWN_KIND, f"no socket kind {raw_kind!r}", kind=raw_kind,
            ) from None
        if not kind.participates_in(self.kind_role):
            raise AddressingError(
                self.kind_field, REASON_NOT_APPLICABLE,
                f"{kind.label()} cannot be used as {self.kind_role.replace('_', ' ')}",
                kind=kind.id,
            )
        index = _as_int(kind.field_name, _require(fields, kind.field_name))
        return SymbolicTarget(self.role, kind, index, kind.field_name)


TargetSpec = Union[ChannelTargetSpec, FixedChannelTargetSpec, SocketTargetSpec]


class OperationSchema(NamedTuple):
    targets: Tuple[TargetSpec, ...] = ()
    fields: Tuple[FieldSpec, ...] = ()
    numbers: Tuple[NumberSpec, ...] = ()
    parametric_eq: bool = False


@dataclass(frozen=True)
class ParameterSet:
    """
    Fully validated parameters of one request.

    values holds scalar fields under their operator-facing names, targets
    holds the symbolic channel/socket picks by role, numbers holds the
    operator-facing scene / cue list / MIDI channel numbers by role.
    """
    operation: str
    values: Mapping[str, Any]
    targets: Mapping[str, SymbolicTarget]
    numbers: Mapping[str, int]

    @classmethod
    def build(
        cls,
        operation: str,
        values: Mapping[str, Any],
        targets: Mapping[str, SymbolicTarget],
        numbers: Mapping[str, int],
    ) -> "ParameterSet":
        return cls(
            operation,
            MappingProxyType(dict(values)),
            MappingProxyType(dict(targets)),
            MappingProxyType(dict(numbers)),
        )

    def __getitem__(self, name: str) -> Any:
        return self.values[name]


def _channel(role: str) -> ChannelTargetSpec:
    return ChannelTargetSpec(ROLE_CHANNEL, "channelType", role)


def _destination(role: str) -> ChannelTargetSpec:
    return ChannelTargetSpec(ROLE_DESTINATION, "destinationChannelType", role, destination=True)


_INPUT = FixedChannelTargetSpec(ROLE_CHANNEL, ChannelKind.INPUT, "input")
_LEVEL = ChoiceField("level", FADER_LEVEL_CHOICES)
_CONTROL_NUMBER = IntegerField("controlNumber", MIDI_MINIMUM_VALUE, MIDI_MAXIMUM_VALUE)
_CONTROL_VALUE = IntegerField("controlValue", MIDI_MINIMUM_VALUE, MIDI_MAXIMUM_VALUE)

OPERATION_SCHEMAS: Mapping[str, OperationSchema] = MappingProxyType({
    "mute": OperationSchema(
        targets=(_channel("mute"),),
        fields=(BooleanField("mute"),),
    ),
    "fader_level": OperationSchema(
        targets=(_channel("fader_level"),),
        fields=(_LEVEL,),
    ),
    "assign_to_main_mix": OperationSchema(
        targets=(_channel("assign_to_main_mix"),),
        fields=(BooleanField("assign"),),
    ),
    "aux_fx_matrix_send_level": OperationSchema(
        targets=(_channel("send_source"), _destination("send_destination")),
        fields=(_LEVEL,),
    ),
    "input_to_group_aux_on": OperationSchema(
        targets=(_INPUT, _destination("input_to_group_aux_destination")),
        fields=(BooleanField("on"),),
    ),
    "dca_assign": OperationSchema(
        targets=(_channel("dca_assign"), FixedChannelTargetSpec(ROLE_DCA, ChannelKind.DCA, "destinationDca")),
        fields=(BooleanField("assign"),),
    ),
    "mute_group_assign": OperationSchema(
        targets=(
            _channel("mute_group_assign"),
            FixedChannelTargetSpec(ROLE_MUTE_GROUP, ChannelKind.MUTE_GROUP, "destinationMuteGroup"),
        ),
        fields=(BooleanField("assign"),),
    ),
    "set_socket_preamp_gain": OperationSchema(
        targets=(SocketTargetSpec("preamp_gain"),),
        fields=(RealField("gain", PREAMP_MINIMUM_GAIN, PREAMP_MAXIMUM_GAIN, PREAMP_GAIN_STEP),),
    ),
    "set_socket_preamp_pad": OperationSchema(
        targets=(SocketTargetSpec("preamp_pad"),),
        fields=(BooleanField("pad"),),
    ),
    "set_socket_preamp_48v": OperationSchema(
        targets=(SocketTargetSpec("preamp_48v"),),
        fields=(BooleanField("phantom"),),
    ),
    "set_channel_name": OperationSchema(
        targets=(_channel("channel_name"),),
        fields=(TextField("name", CHANNEL_NAME_MAX_LENGTH),),
    ),
    "set_channel_colour": OperationSchema(
        targets=(_channel("channel_colour"),),
        fields=(ChoiceField("colour", CHANNEL_COLOUR_CHOICES),),
    ),
    "recall_scene": OperationSchema(
        numbers=(NumberSpec("scene", NUMBER_SCENE, RESERVED_SCENE_COUNT, SCENE_COUNT - 1),),
    ),
    "recall_cue_list": OperationSchema(
        numbers=(NumberSpec("recallId", NUMBER_CUE_LIST, 1, CUE_LIST_COUNT),),
    ),
    "go_next_previous": OperationSchema(
        fields=(_CONTROL_NUMBER, _CONTROL_VALUE),
    ),
    "parametric_eq": OperationSchema(
        targets=(_channel("parametric_eq"),),
        parametric_eq=True,
    ),
    "hpf_frequency": OperationSchema(
        targets=(_INPUT,),
        fields=(ChoiceField("frequency", HPF_FREQUENCY_CHOICES),),
    ),
    "set_hpf_on_off": OperationSchema(
        targets=(_INPUT,),
        fields=(BooleanField("hpf"),),
    ),
    "set_ufx_global_key": OperationSchema(
        fields=(ChoiceField("key", UFX_KEY_CHOICES),),
    ),
    "set_ufx_global_scale": OperationSchema(
        fields=(ChoiceField("scale", UFX_SCALE_CHOICES),),
    ),
    "set_ufx_unit_parameter": OperationSchema(
        fields=(_CONTROL_NUMBER, _CONTROL_VALUE),
        numbers=(NumberSpec("midiChannel", NUMBER_MIDI_CHANNEL, MIDI_MINIMUM_CHANNEL, MIDI_MAXIMUM_CHANNEL),),
    ),
})


def _eq_field_specs(band: int) -> Dict[str, FieldSpec]:
    rule = eq.band_rule(band)
    return {
        eq.FIELD_FREQUENCY: ChoiceField(rule.frequency_field, EQ_FREQUENCY_CHOICES),
        eq.FIELD_WIDTH: RealField(rule.width_field, EQ_MINIMUM_WIDTH, EQ_MAXIMUM_WIDTH),
        eq.FIELD_GAIN: RealField(rule.gain_field, EQ_MINIMUM_GAIN, EQ_MAXIMUM_GAIN, EQ_GAIN_STEP),
    }


def _parse_eq_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Band first, then the band's type, then exactly the sub-fields that band/type carries."""
    band = IntegerField("band", 0, EQ_BAND_COUNT - 1).parse(fields)
    rule = eq.band_rule(band)
    values: Dict[str, Any] = {"band": band}

    if rule.has_fixed_type:
        eq_type = eq.EQ_TYPE_BELL
    else:
        type_field = rule.type_field
        raw_type = _require(fields, type_field)
        if not isinstance(raw_type, str) or raw_type not in rule.type_choices:
            raise ValidationError(type_field, RULE_CHOICE, f"band {band} has no type {raw_type!r}")
        eq_type = raw_type
        values[type_field] = eq_type

    specs = _eq_field_specs(band)
    for field, operator_field in eq.collected_fields(band, eq_type).items():
        if field == eq.FIELD_TYPE:
            continue
        values[operator_field] = specs[field].parse(fields)
    return values


def _parse_targets(schema: OperationSchema, fields: Mapping[str, Any]) -> Dict[str, SymbolicTarget]:
    targets: Dict[str, SymbolicTarget] = {}
    failures = []
    for spec in schema.targets:
        try:
            targets[spec.role] = spec.parse(fields)
        except AddressingError as e:
            failures.append(e)
        except ValidationError:
            # an addressing failure on an earlier target was found first
            if not failures:
                raise
            break
    if failures:
        first, *others = failures
        first.others = tuple(others)
        raise first
    return targets


def validate_request(operation: str, fields: Mapping[str, Any]) -> ParameterSet:
    """Check one request against its operation schema and return its ParameterSet."""
    schema = OPERATION_SCHEMAS.get(operation)
    if schema is None:
        raise ValidationError("operation", RULE_UNKNOWN_OPERATION, f"unknown operation {operation!r}")
    if not isinstance(fields, Mapping):
        raise ValidationError("fields", RULE_TYPE, "fields must be a mapping of field name to value")

    targets = _parse_targets(schema, fields)
    values: Dict[str, Any] = {spec.name: spec.parse(fields) for spec in schema.fields}
    if schema.parametric_eq:
        values.update(_parse_eq_fields(fields))
    numbers = {spec.role: spec.parse(fields) for spec in schema.numbers}

    return ParameterSet.build(operation, values, targets, numbers)


def supported_operations() -> Tuple[str, ...]:
    return tuple(OPERATION_SCHEMAS.keys())
