"""Risk engine: market snapshot, categorization, pricers, Greeks and result aggregation."""

from riskengine.categorizer import (
    InstrumentCategorizer,
    InstrumentCategory,
    MarketRequirements,
    market_requirements,
)
from riskengine.config import CalculationConfiguration, Differencing
from riskengine.curves import VolatilitySurface, ZeroRateCurve
from riskengine.daycount import DayCountConvention, year_fraction
from riskengine.dispatch import PricerDispatch, create_default_dispatch
from riskengine.engine import Engine
from riskengine.errors import (
    ConfigurationError,
    DataMissing,
    DuplicateInstrument,
    NumericalFailure,
    PricingError,
    RiskEngineError,
    UnsupportedInstrument,
)
from riskengine.generator import EngineGenerator, calculate
from riskengine.interfaces import Curve, Greek, Instrument, MarketData, Pricer
from riskengine.market import CurveData, MarketDataSnapshot, MarketKey, SurfaceData
from riskengine.parameters import ParameterDeriver, Parameters
from riskengine.pricers import BasePricer, PricingOutput
from riskengine.products import (
    INSTRUMENT_TYPES,
    Bond,
    CrossCurrencySwap,
    Future,
    FxForward,
    FxFuture,
    FxSpot,
    FxSwap,
    InterestRateSwap,
    KoreaTreasuryBondFuture,
    OptionType,
    VanillaOption,
)
from riskengine.result import (
    CalculationResult,
    CalculationResults,
    Cashflow,
    GreekKind,
    GreekMatrix,
    GreekVector,
    GroupError,
    InstrumentError,
)

__all__ = [
    "Curve",
    "Greek",
    "Instrument",
    "MarketData",
    "Pricer",
    "ZeroRateCurve",
    "VolatilitySurface",
    "DayCountConvention",
    "year_fraction",
    "MarketKey",
    "CurveData",
    "SurfaceData",
    "MarketDataSnapshot",
    "MarketRequirements",
    "InstrumentCategory",
    "InstrumentCategorizer",
    "market_requirements",
    "Parameters",
    "ParameterDeriver",
    "CalculationConfiguration",
    "Differencing",
    "BasePricer",
    "PricingOutput",
    "PricerDispatch",
    "create_default_dispatch",
    "Engine",
    "EngineGenerator",
    "calculate",
    "GreekKind",
    "GreekVector",
    "GreekMatrix",
    "Cashflow",
    "CalculationResult",
    "CalculationResults",
    "InstrumentError",
    "GroupError",
    "RiskEngineError",
    "DataMissing",
    "UnsupportedInstrument",
    "ConfigurationError",
    "NumericalFailure",
    "DuplicateInstrument",
    "PricingError",
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
