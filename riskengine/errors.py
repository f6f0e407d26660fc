"""
Error kinds raised by the pricing-and-risk core.

All errors derive from `RiskEngineError`, which is a `ValueError` so callers that
already guard pricing calls with `except ValueError` keep working.

Propagation policy:
- ConfigurationError / DuplicateInstrument abort the whole run.
- DataMissing raised while an Engine derives its parameters aborts only that group.
- UnsupportedInstrument / NumericalFailure / PricingError are recorded against
  a single instrument (and Greek, where relevant).
"""

from __future__ import annotations


class RiskEngineError(ValueError):
    """Base class for all riskengine errors."""


class DataMissing(RiskEngineError):
    """A required market observation or derived parameter is not available."""

    def __init__(self, kind: str, name: str, context: str = "") -> None:
        self.kind = kind
        self.name = name
        self.context = context
        msg = f"{kind} '{name}' not found in market data"
        if context:
            msg = f"{context}: {msg}"
        super().__init__(msg)


class UnsupportedInstrument(RiskEngineError):
    """No categorizer rule or pricer is registered for an instrument type."""

    def __init__(self, instrument: object, what: str = "pricer") -> None:
        self.instrument_type = type(instrument).__name__
        super().__init__(
            f"No {what} registered for {self.instrument_type}. "
            "Register one before running the calculation."
        )


class ConfigurationError(RiskEngineError):
    """Calculation configuration is unsound (non-positive bump, conflicting flags)."""


class NumericalFailure(RiskEngineError):
    """A price or Greek came out NaN/Inf, or a difference interval had zero length."""


class DuplicateInstrument(RiskEngineError):
    """The same instrument id appears more than once in a batch or a merge."""

    def __init__(self, instrument_id: str) -> None:
        self.instrument_id = instrument_id
        super().__init__(f"instrument id '{instrument_id}' appears more than once")


class PricingError(RiskEngineError):
    """A pricer raised something other than a riskengine error for one instrument."""
