"""
DeckValidationReport: the diagnostic result of validating a deck.

A report is derived from a deck's current contents on every call and holds
no state beyond the messages themselves. Errors block a deck from being
legal; warnings are advisories and never affect validity.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DeckValidationReport:
    """
    Outcome of validating a deck.

    Attributes:
        errors: Blocking violations, in rule order
        warnings: Non-blocking advisories, in rule order
    """

    errors: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        """True when no errors were reported."""
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, object]:
        """Plain dict form, as returned by the API."""
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }
