"""
Reductions over a simulated ensemble: distribution summaries, risk
metrics, regime breakdown and the dashboard series.
"""

import math
from typing import Dict, Sequence

import numpy as np

from ..models import (
    DistributionSummary,
    DrawdownSummary,
    Histogram,
    RiskLevels,
    RiskMetrics,
    ScenarioStats,
    SimulationStatistics,
    ValueAtRisk,
    YearlyBands,
)
from .paths import PathEnsemble

PORTFOLIO_PERCENTILES = (10, 25, 75, 90)
INCOME_PERCENTILES = (10, 25, 75, 90)
DRAWDOWN_PERCENTILES = (75, 90, 95)
BAND_PERCENTILES = (10, 25, 50, 75, 90)
TAIL_FRACTION = 0.05
HISTOGRAM_BINS = 20


# ============================
# Helpers
# ============================
def mean(values: Sequence[float]) -> float:
    return float(np.mean(values))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation."""
    return float(np.std(values))


def percentile(values: Sequence[float], p: float) -> float:
    """Linear interpolation between adjacent order statistics."""
    return float(np.percentile(values, p, method="linear"))


def _band_key(p: int) -> str:
    return "median" if p == 50 else f"p{p}"


# ============================
# Distribution summaries
# ============================
def summarize_distribution(values: Sequence[float],
                           percentiles: Sequence[int] = PORTFOLIO_PERCENTILES) -> DistributionSummary:
    arr = np.asarray(values, dtype=float)
    return DistributionSummary(
        mean=mean(arr),
        median=percentile(arr, 50),
        std=standard_deviation(arr),
        min=float(arr.min()),
        max=float(arr.max()),
        percentiles={f"p{p}": percentile(arr, p) for p in percentiles},
    )


def summarize_drawdowns(values: Sequence[float]) -> DrawdownSummary:
    arr = np.asarray(values, dtype=float)
    return DrawdownSummary(
        mean=mean(arr),
        median=percentile(arr, 50),
        max=float(arr.max()),
        percentiles={f"p{p}": percentile(arr, p) for p in DRAWDOWN_PERCENTILES},
    )


def calculate_statistics(ensemble: PathEnsemble) -> SimulationStatistics:
    return SimulationStatistics(
        portfolio=summarize_distribution(ensemble.final_portfolio_value, PORTFOLIO_PERCENTILES),
        income=summarize_distribution(ensemble.inflation_adjusted_income, INCOME_PERCENTILES),
        drawdown=summarize_drawdowns(ensemble.max_drawdown),
    )


# ============================
# Risk metrics
# ============================
def calculate_expected_shortfall(incomes: Sequence[float], tail_fraction: float = TAIL_FRACTION) -> float:
    """
    Mean of the worst ``floor(N * tail_fraction)`` incomes.

    Returns 0.0 when the ensemble is too small to have a tail.
    """
    ordered = np.sort(np.asarray(incomes, dtype=float))
    count = int(math.floor(len(ordered) * tail_fraction))
    if count == 0:
        return 0.0
    return mean(ordered[:count])


def calculate_risk_metrics(ensemble: PathEnsemble) -> RiskMetrics:
    """
    Success and shortfall probabilities, shortfall severity, VaR and ES.

    Average and worst-case shortfall only consider paths that actually
    fall short; paths meeting the target are excluded, not counted as 0.
    """
    n = ensemble.n_paths
    successes = int(ensemble.success.sum())

    shortfalls = ensemble.shortfall_risk[ensemble.shortfall_risk > 0]
    final_values = ensemble.final_portfolio_value

    return RiskMetrics(
        success_probability=successes / n,
        shortfall_probability=(n - successes) / n,
        average_shortfall=mean(shortfalls) if shortfalls.size else 0.0,
        worst_case_shortfall=float(shortfalls.max()) if shortfalls.size else 0.0,
        value_at_risk=ValueAtRisk(
            var95=percentile(final_values, 5),
            var99=percentile(final_values, 1),
        ),
        expected_shortfall=calculate_expected_shortfall(ensemble.inflation_adjusted_income),
    )


# ============================
# Scenario analysis
# ============================
def analyze_scenarios(ensemble: PathEnsemble) -> Dict[str, ScenarioStats]:
    """Occurrences, mean portfolio value and frequency for each regime seen."""
    path_years = ensemble.n_paths * ensemble.n_years
    scenarios: Dict[str, ScenarioStats] = {}
    for code, regime in enumerate(ensemble.regimes):
        mask = ensemble.regime_codes == code
        occurrences = int(mask.sum())
        if occurrences == 0:
            continue
        scenarios[regime.value] = ScenarioStats(
            occurrences=occurrences,
            average_return=mean(ensemble.total_values[mask]),
            frequency=occurrences / path_years,
        )
    return scenarios


# ============================
# Dashboard series
# ============================
def yearly_percentile_bands(ensemble: PathEnsemble) -> YearlyBands:
    nominal = np.percentile(ensemble.total_values, BAND_PERCENTILES, axis=0)
    real = np.percentile(ensemble.real_values, BAND_PERCENTILES, axis=0)
    return YearlyBands(
        years=list(range(1, ensemble.n_years + 1)),
        nominal={_band_key(p): nominal[i].tolist() for i, p in enumerate(BAND_PERCENTILES)},
        real={_band_key(p): real[i].tolist() for i, p in enumerate(BAND_PERCENTILES)},
    )


def histogram(values: Sequence[float], bins: int = HISTOGRAM_BINS) -> Histogram:
    counts, edges = np.histogram(np.asarray(values, dtype=float), bins=bins)
    return Histogram(counts=counts.tolist(), bin_edges=edges.tolist())


def classify_success(probability: float) -> str:
    if probability >= 0.8:
        return "good"
    if probability >= 0.6:
        return "fair"
    return "poor"


def classify_shortfall(probability: float) -> str:
    if probability <= 0.2:
        return "low"
    if probability <= 0.4:
        return "moderate"
    return "high"


def assess_risk_levels(metrics: RiskMetrics) -> RiskLevels:
    return RiskLevels(
        success=classify_success(metrics.success_probability),
        shortfall=classify_shortfall(metrics.shortfall_probability),
    )
