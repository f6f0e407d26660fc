"""
Greeks implemented via "bump and reprice".

Each Greek builds, per risk factor, a BumpScenario of independently bumped
Parameters views; the Engine prices every sensitive instrument under each view
and combines the prices.
"""

from __future__ import annotations

from riskengine.risk.base import BaseGreek, BumpScenario
from riskengine.risk.delta import Delta, Gamma
from riskengine.risk.rho import DividendDelta, DividendStructure, Rho, RhoStructure
from riskengine.risk.theta import Theta
from riskengine.risk.vega import Vega, VegaMatrix, VegaStructure


def default_greeks() -> tuple[BaseGreek, ...]:
    """One builder per GreekKind, in reporting order."""
    return (
        Delta(),
        Gamma(),
        Theta(),
        Vega(),
        VegaStructure(),
        VegaMatrix(),
        Rho(),
        RhoStructure(),
        DividendDelta(),
        DividendStructure(),
    )


__all__ = [
    "BaseGreek",
    "BumpScenario",
    "Delta",
    "Gamma",
    "Theta",
    "Vega",
    "VegaStructure",
    "VegaMatrix",
    "Rho",
    "RhoStructure",
    "DividendDelta",
    "DividendStructure",
    "default_greeks",
]
