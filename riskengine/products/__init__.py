"""Products: bonds, KTB futures, equity futures/options, FX products, swaps."""

from typing import TypeAlias

from riskengine.products.bond import Bond, KoreaTreasuryBondFuture
from riskengine.products.equity import Future, OptionType, VanillaOption
from riskengine.products.fx import FxForward, FxFuture, FxSpot, FxSwap
from riskengine.products.swap import CrossCurrencySwap, InterestRateSwap

Instrument: TypeAlias = (
    Bond
    | Future
    | FxFuture
    | FxForward
    | FxSwap
    | FxSpot
    | VanillaOption
    | InterestRateSwap
    | CrossCurrencySwap
    | KoreaTreasuryBondFuture
)

INSTRUMENT_TYPES: tuple[type, ...] = (
    Bond,
    Future,
    FxFuture,
    FxForward,
    FxSwap,
    FxSpot,
    VanillaOption,
    InterestRateSwap,
    CrossCurrencySwap,
    KoreaTreasuryBondFuture,
)

__all__ = [
    "Instrument",
    "INSTRUMENT_TYPES",
    "Bond",
    "KoreaTreasuryBondFuture",
    "Future",
    "VanillaOption",
    "OptionType",
    "FxSpot",
    "FxForward",
    "FxSwap",
    "FxFuture",
    "InterestRateSwap",
    "CrossCurrencySwap",
]
