"""
Parametric EQ band rules.

Which sub-fields of a band are meaningful depends on the band and, for the
two outer bands, on the selected filter type. The validator and the encoder
both read these rules, so they always agree on what a band carries.
"""
from types import MappingProxyType
from typing import FrozenSet, Mapping, NamedTuple, Optional, Tuple

from model.catalog import EQ_TYPE_CHOICES

EQ_TYPE_BELL = "bell"
CUT_TYPES: FrozenSet[str] = frozenset({"high_pass", "low_pass"})

FIELD_TYPE = "type"
FIELD_FREQUENCY = "frequency"
FIELD_WIDTH = "width"
FIELD_GAIN = "gain"


class EqBandRule(NamedTuple):
    band: int
    type_field: Optional[str]  # None: the band is fixed to bell
    type_choices: Tuple[str, ...]
    frequency_field: str
    width_field: str
    gain_field: str

    @property
    def has_fixed_type(self) -> bool:
        return self.type_field is None

    def operator_field(self, field: str) -> Optional[str]:
        """Operator-facing field holding a neutral sub-field of this band."""
        return {
            FIELD_TYPE: self.type_field,
            FIELD_FREQUENCY: self.frequency_field,
            FIELD_WIDTH: self.width_field,
            FIELD_GAIN: self.gain_field,
        }[field]


def _type_choices(excluded: FrozenSet[str]) -> Tuple[str, ...]:
    return tuple(choice.id for choice in EQ_TYPE_CHOICES if choice.id not in excluded)


EQ_BAND_RULES: Mapping[int, EqBandRule] = MappingProxyType({
    0: EqBandRule(0, "band0Type", _type_choices(frozenset({"hf_shelf", "low_pass"})),
                  "band0Frequency", "band0Width", "band0Gain"),
    1: EqBandRule(1, None, (EQ_TYPE_BELL,), "band1Frequency", "band1Width", "band1Gain"),
    2: EqBandRule(2, None, (EQ_TYPE_BELL,), "band2Frequency", "band2Width", "band2Gain"),
    3: EqBandRule(3, "band3Type", _type_choices(frozenset({"lf_shelf", "high_pass"})),
                  "band3Frequency", "band3Width", "band3Gain"),
})


def band_rule(band: int) -> EqBandRule:
    return EQ_BAND_RULES[band]


def required_fields(band: int, eq_type: str) -> FrozenSet[str]:
    """
    Neutral sub-fields a command for this band and type carries.

    Type and frequency always; width only for a bell; gain for anything that
    is not a high or low pass. The band is only used to reject unknown bands.
    """
    band_rule(band)
    fields = {FIELD_TYPE, FIELD_FREQUENCY}
    if eq_type == EQ_TYPE_BELL:
        fields.add(FIELD_WIDTH)
    if eq_type not in CUT_TYPES:
        fields.add(FIELD_GAIN)
    return frozenset(fields)


def collected_fields(band: int, eq_type: str) -> Mapping[str, str]:
    """
    Neutral sub-field -> operator-facing field, for the sub-fields an operator
    actually fills in. A fixed band's type is never collected.
    """
    rule = band_rule(band)
    return MappingProxyType({
        field: rule.operator_field(field)
        for field in sorted(required_fields(band, eq_type))
        if not (field == FIELD_TYPE and rule.has_fixed_type)
    })
