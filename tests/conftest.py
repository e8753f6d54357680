"""
Shared fixtures for simulation engine testing.
"""

from dataclasses import replace

import numpy as np
import pytest

from retirement_risk.models import SimulationInput
from retirement_risk.monte_carlo import DEFAULT_MARKET_MODEL, Engine, Regime
from retirement_risk.monte_carlo.parameters import ASSETS
from retirement_risk.monte_carlo.paths import PathEnsemble, SimulationConfig


@pytest.fixture
def standard_inputs():
    """Mid-career saver with a pension balance and steady contributions."""
    return {
        "currentAge": 40,
        "retirementAge": 65,
        "currentSavings": 200000,
        "monthlyContributions": 2000,
        "targetMonthlyIncome": 8000,
        "inflationRate": 2.5,
    }


@pytest.fixture
def diversified_inputs():
    """Balances in every asset class, including crypto."""
    return {
        "currentAge": 50,
        "retirementAge": 60,
        "currentSavings": 300000,
        "currentTrainingFund": 80000,
        "currentPersonalPortfolio": 150000,
        "currentRealEstate": 400000,
        "currentCrypto": 20000,
        "monthlyContributions": 1500,
        "targetMonthlyIncome": 12000,
    }


@pytest.fixture
def forced_recession_market():
    """Market model where every simulated year is a recession."""
    scenarios = {
        regime: replace(s, probability=1.0 if regime is Regime.RECESSION else 0.0)
        for regime, s in DEFAULT_MARKET_MODEL.scenarios.items()
    }
    return replace(DEFAULT_MARKET_MODEL, scenarios=scenarios)


@pytest.fixture
def make_config():
    """Factory for normalized configs."""
    def _make(inputs, projection_years=30, market=DEFAULT_MARKET_MODEL):
        return SimulationConfig.from_inputs(SimulationInput.model_validate(inputs), projection_years, market)
    return _make


@pytest.fixture
def make_ensemble():
    """Factory for hand-built ensembles with known outcome values."""
    def _make(final_values, incomes=None, target=1.0, drawdowns=None, years=1):
        final = np.asarray(final_values, dtype=float)
        n = len(final)
        income = final.copy() if incomes is None else np.asarray(incomes, dtype=float)
        dd = np.zeros(n) if drawdowns is None else np.asarray(drawdowns, dtype=float)
        return PathEnsemble(
            regimes=list(Regime),
            total_values=np.tile(final[:, None], (1, years)),
            real_values=np.tile(final[:, None], (1, years)),
            inflation=np.zeros((n, years)),
            regime_codes=np.zeros((n, years), dtype=np.int8),
            returns=np.zeros((n, years, len(ASSETS))),
            drawdowns=np.tile(dd[:, None], (1, years)),
            contributions=np.zeros((years, len(ASSETS))),
            final_portfolio_value=final,
            final_monthly_income=final * 0.04 / 12,
            inflation_adjusted_income=income,
            success=(income >= target).astype(np.int8),
            shortfall_risk=np.maximum(0.0, target - income) / target,
        )
    return _make


@pytest.fixture
def tolerance():
    """Tolerance for statistical tests."""
    return {
        "mean": 0.005,  # absolute, fractional returns
        "frequency": 0.02,  # absolute, regime frequencies
    }


@pytest.fixture
def run_simulation():
    """Factory fixture for running seeded simulations."""
    def _run(inputs, projection_years=30, simulations=1000, language="en", seed=42, market=None):
        engine = Engine(market) if market is not None else Engine()
        return engine.run(inputs, projection_years=projection_years, simulations=simulations,
                          language=language, seed=seed)
    return _run
