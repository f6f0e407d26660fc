"""GraphQL schema: calculation query."""

from typing import Optional

import strawberry

from riskengine.service.services import run_calculation
from riskengine.service.types import (
    CalculationOutput,
    ConfigurationInput,
    MarketInput,
    PortfolioInput,
)

API_VERSION = "0.1.0"


@strawberry.type
class Query:
    @strawberry.field
    def version(self) -> str:
        return API_VERSION

    @strawberry.field
    def calculate(
        self,
        market: MarketInput,
        portfolio: PortfolioInput,
        configuration: Optional[ConfigurationInput] = None,
    ) -> CalculationOutput:
        """Price a portfolio and compute the requested Greeks against one market snapshot."""
        return run_calculation(market=market, portfolio=portfolio, configuration=configuration)


schema = strawberry.Schema(query=Query)
