"""
Typed failures raised by the pricing engine.

All of them are input-validation failures of a pure computation: nothing is
retried and no partially-filled quote is ever returned.
"""
from typing import Optional


class PricingError(ValueError):
    """Base class for every pricing failure."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message, "field": self.field}


class InvalidInput(PricingError):
    """Quantity, distance, date or selection is malformed."""


class MissingCatalogReference(PricingError):
    """A package, tier, item or add-on id is unknown or inactive."""

    def __init__(self, kind: str, ref: str, field: Optional[str] = None):
        super().__init__(f"Unknown {kind} '{ref}'", field=field)
        self.kind = kind
        self.ref = ref

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"kind": self.kind, "ref": self.ref})
        return data


class InconsistentTierRules(PricingError):
    """Selection does not match the fixed menu composition of a tier."""

    def __init__(self, section: str, expected: int, actual: int):
        super().__init__(
            f"{section}: expected exactly {expected} item(s), got {actual}",
            field="selected_items",
        )
        self.section = section
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"section": self.section, "expected": self.expected, "actual": self.actual})
        return data
