"""
Asset-class return parameters and the economic regime model.
All returns and volatilities are expressed in percent.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


# ============================
# Enumerations
# ============================
class AssetClass(str, Enum):
    """Portfolio buckets tracked by each simulated path."""
    PENSION = "pension"
    TRAINING_FUND = "training_fund"
    PERSONAL_PORTFOLIO = "personal_portfolio"
    REAL_ESTATE = "real_estate"
    CRYPTO = "crypto"


# Fixed iteration order for balances, returns and contributions
ASSETS: List[AssetClass] = list(AssetClass)


class Distribution(str, Enum):
    NORMAL = "normal"
    LOGNORMAL = "lognormal"


class Regime(str, Enum):
    """Macroeconomic regime drawn independently every simulated year."""
    RECESSION = "recession"
    EXPANSION = "expansion"
    BOOM = "boom"
    STAGFLATION = "stagflation"


class MarketFactor(str, Enum):
    """Which regime multiplier an asset class responds to."""
    STOCK = "stock"
    BOND = "bond"
    REAL_ESTATE = "real_estate"


# Crypto follows stock-like behaviour in every regime
ASSET_FACTORS: Dict[AssetClass, MarketFactor] = {
    AssetClass.PENSION: MarketFactor.STOCK,
    AssetClass.TRAINING_FUND: MarketFactor.BOND,
    AssetClass.PERSONAL_PORTFOLIO: MarketFactor.STOCK,
    AssetClass.REAL_ESTATE: MarketFactor.REAL_ESTATE,
    AssetClass.CRYPTO: MarketFactor.STOCK,
}


# ============================
# Configuration Classes
# ============================
@dataclass(frozen=True)
class AssetParameters:
    """Return law for a single asset class."""
    expected_return: float   # percent per year
    volatility: float        # percent standard deviation
    distribution: Distribution = Distribution.NORMAL
    correlations: Dict[str, float] = field(default_factory=dict)  # hints only, not sampled


@dataclass(frozen=True)
class CompositeAssetParameters:
    """Stocks/bonds blend used for the personal portfolio."""
    stocks: AssetParameters
    bonds: AssetParameters
    default_stock_weight: float = 0.60


@dataclass(frozen=True)
class EconomicScenario:
    """Probability and return multipliers of one regime."""
    probability: float
    stock_return_multiplier: float
    bond_return_multiplier: float
    real_estate_return_multiplier: float
    inflation_multiplier: float
    duration: float  # average length in years; regimes are drawn independently each year

    def multiplier(self, factor: MarketFactor) -> float:
        if factor is MarketFactor.STOCK:
            return self.stock_return_multiplier
        if factor is MarketFactor.BOND:
            return self.bond_return_multiplier
        return self.real_estate_return_multiplier


@dataclass(frozen=True)
class MarketModel:
    """
    Complete parameter set consumed by the path simulator.

    ``single_assets`` covers every asset class except the personal
    portfolio, which is described by ``personal_portfolio``. The order of
    ``scenarios`` is the order used when walking cumulative probabilities.
    """
    single_assets: Dict[AssetClass, AssetParameters]
    personal_portfolio: CompositeAssetParameters
    inflation: AssetParameters
    scenarios: Dict[Regime, EconomicScenario]

    def __post_init__(self):
        covered = set(self.single_assets) | {AssetClass.PERSONAL_PORTFOLIO}
        missing = set(AssetClass) - covered
        if missing:
            raise ValueError(f"Missing asset parameters for: {sorted(a.value for a in missing)}")
        if AssetClass.PERSONAL_PORTFOLIO in self.single_assets:
            raise ValueError("personal_portfolio must be described by the composite parameters")
        if set(ASSET_FACTORS) != set(AssetClass):
            raise ValueError("Every asset class needs a regime factor")

        params = list(self.single_assets.values()) + [
            self.personal_portfolio.stocks,
            self.personal_portfolio.bonds,
            self.inflation,
        ]
        for p in params:
            if p.volatility < 0:
                raise ValueError(f"Volatility must be >= 0, got {p.volatility}")

        if not self.scenarios:
            raise ValueError("At least one economic scenario is required")
        total = sum(s.probability for s in self.scenarios.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Scenario probabilities must sum to 1.0, got {total}")

    @property
    def regimes(self) -> List[Regime]:
        return list(self.scenarios)

    def scenario_probabilities(self) -> List[float]:
        return [s.probability for s in self.scenarios.values()]

    def expected_return(self, asset: AssetClass) -> float:
        """Table default for an asset; the stock sub-model for the personal portfolio."""
        if asset is AssetClass.PERSONAL_PORTFOLIO:
            return self.personal_portfolio.stocks.expected_return
        return self.single_assets[asset].expected_return


# ============================
# Default tables
# ============================
DEFAULT_ASSET_PARAMETERS: Dict[AssetClass, AssetParameters] = {
    AssetClass.PENSION: AssetParameters(
        7.0, 12.0, correlations={"stocks": 0.8, "bonds": 0.6, "real_estate": 0.4, "crypto": 0.3}
    ),
    AssetClass.TRAINING_FUND: AssetParameters(
        6.5, 10.0, correlations={"stocks": 0.7, "bonds": 0.8, "real_estate": 0.3, "crypto": 0.2}
    ),
    AssetClass.REAL_ESTATE: AssetParameters(
        6.0, 14.0, correlations={"stocks": 0.4, "bonds": 0.2}
    ),
    # Lognormal keeps simulated crypto returns above -100%
    AssetClass.CRYPTO: AssetParameters(
        15.0, 60.0, Distribution.LOGNORMAL, correlations={"stocks": 0.3, "bonds": 0.1}
    ),
}

DEFAULT_PERSONAL_PORTFOLIO = CompositeAssetParameters(
    stocks=AssetParameters(9.0, 16.0),
    bonds=AssetParameters(4.5, 6.0),
    default_stock_weight=0.60,
)

DEFAULT_INFLATION = AssetParameters(2.5, 1.5)

DEFAULT_SCENARIOS: Dict[Regime, EconomicScenario] = {
    Regime.RECESSION: EconomicScenario(
        probability=0.15,
        stock_return_multiplier=-0.2,
        bond_return_multiplier=1.1,        # flight to safety
        real_estate_return_multiplier=-0.1,
        inflation_multiplier=0.5,
        duration=1.2,
    ),
    Regime.EXPANSION: EconomicScenario(
        probability=0.65,
        stock_return_multiplier=1.0,
        bond_return_multiplier=1.0,
        real_estate_return_multiplier=1.0,
        inflation_multiplier=1.0,
        duration=5.0,
    ),
    Regime.BOOM: EconomicScenario(
        probability=0.15,
        stock_return_multiplier=1.5,
        bond_return_multiplier=0.8,
        real_estate_return_multiplier=1.3,
        inflation_multiplier=1.2,
        duration=2.0,
    ),
    Regime.STAGFLATION: EconomicScenario(
        probability=0.05,
        stock_return_multiplier=0.3,
        bond_return_multiplier=-0.2,
        real_estate_return_multiplier=0.8,
        inflation_multiplier=2.0,
        duration=2.5,
    ),
}

DEFAULT_MARKET_MODEL = MarketModel(
    single_assets=DEFAULT_ASSET_PARAMETERS,
    personal_portfolio=DEFAULT_PERSONAL_PORTFOLIO,
    inflation=DEFAULT_INFLATION,
    scenarios=DEFAULT_SCENARIOS,
)
