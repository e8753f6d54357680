"""
Path simulator: advances independent portfolio paths year by year.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..config import PENSION_CONTRIBUTION_SHARE, PORTFOLIO_CONTRIBUTION_SHARE, WITHDRAWAL_RATE
from ..models import SimulationInput
from .parameters import ASSET_FACTORS, ASSETS, AssetClass, MarketModel, Regime
from .sampling import generate_random_return, normal_random, select_regimes


# ============================
# Normalized configuration
# ============================
@dataclass(frozen=True)
class SimulationConfig:
    """Fully-populated simulation settings derived once from the caller's inputs."""
    current_age: int
    retirement_age: int
    years_to_retirement: int
    projection_years: int
    initial_balances: Dict[AssetClass, float]
    expected_returns: Dict[AssetClass, float]  # percent, single-law assets only
    stock_weight: float                        # personal portfolio stock fraction
    monthly_contribution: float
    target_monthly_income: float
    inflation_rate: float                      # percent, caller input; the draw uses the table mean

    @classmethod
    def from_inputs(cls, inputs: SimulationInput, projection_years: int,
                    market: MarketModel) -> "SimulationConfig":
        overrides = {
            AssetClass.PENSION: inputs.pension_return,
            AssetClass.TRAINING_FUND: inputs.training_fund_return,
            AssetClass.REAL_ESTATE: inputs.real_estate_return,
            AssetClass.CRYPTO: inputs.crypto_return,
        }
        expected = {
            asset: (value if value is not None else market.single_assets[asset].expected_return)
            for asset, value in overrides.items()
        }
        return cls(
            current_age=inputs.current_age,
            retirement_age=inputs.retirement_age,
            years_to_retirement=inputs.retirement_age - inputs.current_age,
            projection_years=projection_years,
            initial_balances={
                AssetClass.PENSION: inputs.current_savings,
                AssetClass.TRAINING_FUND: inputs.current_training_fund,
                AssetClass.PERSONAL_PORTFOLIO: inputs.current_personal_portfolio,
                AssetClass.REAL_ESTATE: inputs.current_real_estate,
                AssetClass.CRYPTO: inputs.current_crypto,
            },
            expected_returns=expected,
            stock_weight=inputs.stock_percentage / 100.0,
            monthly_contribution=inputs.monthly_contributions,
            target_monthly_income=inputs.target_monthly_income,
            inflation_rate=inputs.inflation_rate,
        )

    def annual_contributions(self) -> Dict[AssetClass, float]:
        annual = self.monthly_contribution * 12
        return {
            AssetClass.PENSION: annual * PENSION_CONTRIBUTION_SHARE,
            AssetClass.PERSONAL_PORTFOLIO: annual * PORTFOLIO_CONTRIBUTION_SHARE,
        }

    def contribution_schedule(self) -> np.ndarray:
        """Contributions per simulated year, shape [years, assets]."""
        schedule = np.zeros((self.projection_years, len(ASSETS)))
        per_year = np.array([self.annual_contributions().get(a, 0.0) for a in ASSETS])
        working_years = min(max(self.years_to_retirement, 0), self.projection_years)
        schedule[:working_years] = per_year
        return schedule


# ============================
# Path records
# ============================
@dataclass
class YearOutcome:
    year: int
    total_value: float
    real_value: float
    inflation: float
    returns: Dict[AssetClass, float]
    contributions: Dict[AssetClass, float]
    economic_scenario: Regime


@dataclass
class PathOutcome:
    yearly_results: List[YearOutcome]
    final_portfolio_value: float
    final_monthly_income: float
    inflation_adjusted_income: float
    success_probability: int  # 1 if the real income meets the target, else 0
    shortfall_risk: float
    max_drawdown: float


@dataclass(eq=False)
class PathEnsemble:
    """
    Outcomes of a block of independent paths stored column-wise.

    Per-year arrays have shape [paths, years]; ``returns`` adds an asset
    axis in ``ASSETS`` order. ``regime_codes`` index into ``regimes``.
    """
    regimes: List[Regime]
    total_values: np.ndarray
    real_values: np.ndarray
    inflation: np.ndarray
    regime_codes: np.ndarray
    returns: np.ndarray
    drawdowns: np.ndarray  # running maximum drawdown after each year
    contributions: np.ndarray  # [years, assets], shared by every path
    final_portfolio_value: np.ndarray
    final_monthly_income: np.ndarray
    inflation_adjusted_income: np.ndarray
    success: np.ndarray
    shortfall_risk: np.ndarray
    max_drawdown: np.ndarray = field(init=False)

    def __post_init__(self):
        self.max_drawdown = self.drawdowns[:, -1] if self.drawdowns.size else np.zeros(self.n_paths)

    @property
    def n_paths(self) -> int:
        return self.total_values.shape[0]

    @property
    def n_years(self) -> int:
        return self.total_values.shape[1]

    def outcome(self, i: int) -> PathOutcome:
        yearly = []
        for yi in range(self.n_years):
            yearly.append(YearOutcome(
                year=yi + 1,
                total_value=float(self.total_values[i, yi]),
                real_value=float(self.real_values[i, yi]),
                inflation=float(self.inflation[i, yi]),
                returns={a: float(self.returns[i, yi, j]) for j, a in enumerate(ASSETS)},
                contributions={
                    a: float(self.contributions[yi, j])
                    for j, a in enumerate(ASSETS) if self.contributions[yi, j]
                },
                economic_scenario=self.regimes[self.regime_codes[i, yi]],
            ))
        return PathOutcome(
            yearly_results=yearly,
            final_portfolio_value=float(self.final_portfolio_value[i]),
            final_monthly_income=float(self.final_monthly_income[i]),
            inflation_adjusted_income=float(self.inflation_adjusted_income[i]),
            success_probability=int(self.success[i]),
            shortfall_risk=float(self.shortfall_risk[i]),
            max_drawdown=float(self.max_drawdown[i]),
        )

    def outcomes(self) -> List[PathOutcome]:
        return [self.outcome(i) for i in range(self.n_paths)]

    @classmethod
    def concatenate(cls, blocks: Sequence["PathEnsemble"]) -> "PathEnsemble":
        if not blocks:
            raise ValueError("Cannot combine an empty list of path blocks")
        first = blocks[0]

        def cat(name):
            return np.concatenate([getattr(b, name) for b in blocks], axis=0)

        return cls(
            regimes=first.regimes,
            total_values=cat("total_values"),
            real_values=cat("real_values"),
            inflation=cat("inflation"),
            regime_codes=cat("regime_codes"),
            returns=cat("returns"),
            drawdowns=cat("drawdowns"),
            contributions=first.contributions,
            final_portfolio_value=cat("final_portfolio_value"),
            final_monthly_income=cat("final_monthly_income"),
            inflation_adjusted_income=cat("inflation_adjusted_income"),
            success=cat("success"),
            shortfall_risk=cat("shortfall_risk"),
        )


# ============================
# Simulation
# ============================
def _base_returns(asset: AssetClass, config: SimulationConfig, market: MarketModel,
                  rng: np.random.Generator, size: int) -> np.ndarray:
    """Percent returns before the regime multiplier."""
    if asset is AssetClass.PERSONAL_PORTFOLIO:
        pp = market.personal_portfolio
        stocks = generate_random_return(rng, pp.stocks.expected_return, pp.stocks.volatility,
                                        pp.stocks.distribution, size)
        bonds = generate_random_return(rng, pp.bonds.expected_return, pp.bonds.volatility,
                                       pp.bonds.distribution, size)
        return stocks * config.stock_weight + bonds * (1 - config.stock_weight)

    params = market.single_assets[asset]
    return generate_random_return(rng, config.expected_returns[asset], params.volatility,
                                  params.distribution, size)


def _drawdown(peak: np.ndarray, total: np.ndarray) -> np.ndarray:
    dd = np.zeros_like(total)
    np.divide(peak - total, peak, out=dd, where=peak > 0)
    return np.clip(dd, 0.0, 1.0)


def simulate_paths(config: SimulationConfig, market: MarketModel,
                   rng: np.random.Generator, n_paths: int) -> PathEnsemble:
    """
    Simulate ``n_paths`` independent paths over ``config.projection_years``.

    Each year: draw a regime, draw inflation, draw a return for every
    asset holding a positive balance, grow balances, then add
    contributions while still working. Paths never stop early; zero or
    negative totals keep compounding.

    Args:
        config: Normalized simulation settings
        market: Asset parameters and regime table
        rng: Random generator owned by this block of paths
        n_paths: Number of paths to advance together

    Returns:
        PathEnsemble holding every path's yearly snapshots and final outcome
    """
    n_years = config.projection_years
    A = len(ASSETS)

    regimes = market.regimes
    probabilities = market.scenario_probabilities()
    inflation_mult = np.array([market.scenarios[r].inflation_multiplier for r in regimes])
    factor_mult = {
        asset: np.array([market.scenarios[r].multiplier(ASSET_FACTORS[asset]) for r in regimes])
        for asset in ASSETS
    }
    contributions = config.contribution_schedule()

    balances = np.tile(np.array([config.initial_balances[a] for a in ASSETS], dtype=float), (n_paths, 1))
    max_value = balances.sum(axis=1)
    cumulative_inflation = np.ones(n_paths)
    max_drawdown = np.zeros(n_paths)

    total_values = np.zeros((n_paths, n_years))
    real_values = np.zeros((n_paths, n_years))
    inflation = np.zeros((n_paths, n_years))
    regime_codes = np.zeros((n_paths, n_years), dtype=np.int8)
    returns = np.zeros((n_paths, n_years, A))
    drawdowns = np.zeros((n_paths, n_years))

    for yi in range(n_years):
        codes = select_regimes(rng, probabilities, n_paths)

        # Inflation is floored at zero after the regime multiplier
        infl = normal_random(rng, market.inflation.expected_return, market.inflation.volatility, n_paths)
        year_inflation = np.maximum(0.0, infl * inflation_mult[codes]) / 100.0

        year_returns = np.zeros((n_paths, A))
        for j, asset in enumerate(ASSETS):
            active = balances[:, j] > 0
            if not active.any():
                continue
            base = _base_returns(asset, config, market, rng, n_paths)
            year_returns[:, j] = np.where(active, base * factor_mult[asset][codes] / 100.0, 0.0)

        # Contributions land after growth and are not compounded this year
        balances = balances * (1.0 + year_returns) + contributions[yi]

        total = balances.sum(axis=1)
        max_value = np.maximum(max_value, total)
        max_drawdown = np.maximum(max_drawdown, _drawdown(max_value, total))
        cumulative_inflation *= 1.0 + year_inflation

        total_values[:, yi] = total
        real_values[:, yi] = total / cumulative_inflation
        inflation[:, yi] = year_inflation
        regime_codes[:, yi] = codes
        returns[:, yi, :] = year_returns
        drawdowns[:, yi] = max_drawdown

    final_value = total_values[:, -1]
    monthly_income = final_value * WITHDRAWAL_RATE / 12
    real_income = monthly_income / cumulative_inflation
    target = config.target_monthly_income

    return PathEnsemble(
        regimes=regimes,
        total_values=total_values,
        real_values=real_values,
        inflation=inflation,
        regime_codes=regime_codes,
        returns=returns,
        drawdowns=drawdowns,
        contributions=contributions,
        final_portfolio_value=final_value,
        final_monthly_income=monthly_income,
        inflation_adjusted_income=real_income,
        success=(real_income >= target).astype(np.int8),
        shortfall_risk=np.maximum(0.0, target - real_income) / target,
    )


def simulate_path(config: SimulationConfig, market: MarketModel,
                  rng: np.random.Generator) -> PathOutcome:
    """Single-path form of :func:`simulate_paths`."""
    return simulate_paths(config, market, rng, 1).outcome(0)
