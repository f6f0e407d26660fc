"""Pricer implementations for the registry-based PricerDispatch."""

from riskengine.pricers.base import BasePricer, PricingOutput
from riskengine.pricers.bond_pricer import BondPricer, KtbFuturePricer
from riskengine.pricers.equity_pricer import FuturesPricer, VanillaOptionPricer
from riskengine.pricers.fx_pricer import (
    FxForwardPricer,
    FxFuturePricer,
    FxSpotPricer,
    FxSwapPricer,
)
from riskengine.pricers.swap_pricer import CrossCurrencySwapPricer, SwapPricer

__all__ = [
    "BasePricer",
    "PricingOutput",
    "BondPricer",
    "KtbFuturePricer",
    "FuturesPricer",
    "VanillaOptionPricer",
    "FxSpotPricer",
    "FxForwardPricer",
    "FxSwapPricer",
    "FxFuturePricer",
    "SwapPricer",
    "CrossCurrencySwapPricer",
]
