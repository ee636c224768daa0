"""
Failures raised while turning an operator request into a console command.

Both kinds are final for the request that raised them: nothing is retried and
nothing is corrected to a nearby legal value.
"""
from typing import Optional, Tuple


# Validation rules
RULE_MISSING = "missing"
RULE_TYPE = "type"
RULE_RANGE = "range"
RULE_STEP = "step"
RULE_CHOICE = "choice"
RULE_LENGTH = "length"
RULE_CHARSET = "charset"
RULE_UNKNOWN_OPERATION = "unknown_operation"

# Addressing reasons
REASON_OUT_OF_RANGE = "out_of_range"
REASON_NOT_APPLICABLE = "not_applicable"
REASON_UNKNOWN_KIND = "unknown_kind"
REASON_RESERVED = "reserved"


class CommandError(Exception):
    """Base class for every command resolution failure."""


class ValidationError(CommandError):
    """A field value broke a bound, a choice set or a cross-field rule."""

    def __init__(self, field: str, rule: str, message: str = ""):
        self.field = field
        self.rule = rule
        super().__init__(message or f"{field}: {rule}")


class AddressingError(CommandError):
    """
    A (kind, index) pair does not exist on the console, or the kind cannot
    take part in the requested operation.

    Dual-target requests resolve both targets before raising; the other
    failures, if any, are kept in ``others``.
    """

    def __init__(
        self,
        field: str,
        reason: str,
        message: str = "",
        kind: Optional[str] = None,
        index: Optional[int] = None,
        others: Tuple["AddressingError", ...] = (),
    ):
        self.field = field
        self.reason = reason
        self.kind = kind
        self.index = index
        self.others = tuple(others)
        super().__init__(message or f"{field}: {reason}")

    @property
    def failures(self) -> Tuple["AddressingError", ...]:
        """This failure followed by every other one found in the same request."""
        return (self,) + self.others


class TransportError(Exception):
    """A resolved command could not be delivered to the console."""
