"""
Pydantic models for the retirement risk engine.
Input normalization, API requests and response payloads.
"""

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, conint, field_validator
from pydantic.alias_generators import to_camel

from .config import (
    DEFAULT_LANGUAGE,
    DEFAULT_PROJECTION_YEARS,
    DEFAULT_SIMULATIONS,
    MAX_PROJECTION_YEARS,
    MAX_SIMULATIONS,
    MIN_SIMULATIONS,
)


def parse_number(value: Any) -> Optional[float]:
    """
    Lenient numeric parse used for every input field.

    Returns None for missing, blank, unparseable, NaN or infinite values so
    the caller can substitute its default.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace("_", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


# ============================
# Simulation inputs
# ============================
class SimulationInput(BaseModel):
    """
    Flat financial input record. Accepts camelCase keys from the UI
    (``currentAge``) as well as field names (``current_age``).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # Ages
    current_age: int = 30
    retirement_age: int = 67

    # Current balances per asset class
    current_savings: float = 0.0  # pension
    current_training_fund: float = 0.0
    current_personal_portfolio: float = 0.0
    current_real_estate: float = 0.0
    current_crypto: float = 0.0

    # Expected return overrides in percent (None = market table default)
    pension_return: Optional[float] = None
    training_fund_return: Optional[float] = None
    real_estate_return: Optional[float] = None
    crypto_return: Optional[float] = None
    stock_percentage: float = 60.0  # personal portfolio stock allocation

    # Cash flows and goals
    monthly_contributions: float = 1000.0
    target_monthly_income: float = Field(10000.0, gt=0)
    inflation_rate: float = 2.5  # percent

    @field_validator(
        "current_age", "retirement_age",
        "current_savings", "current_training_fund", "current_personal_portfolio",
        "current_real_estate", "current_crypto",
        "pension_return", "training_fund_return", "real_estate_return", "crypto_return",
        "stock_percentage", "monthly_contributions", "target_monthly_income", "inflation_rate",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        number = parse_number(value)
        if number is None:
            return default
        if info.field_name in ("current_age", "retirement_age"):
            return int(number)
        # Lognormal sampling needs a positive mean
        if info.field_name == "crypto_return" and number <= 0:
            return default
        return number


class SimulationRequest(BaseModel):
    """Body of POST /api/simulate."""
    inputs: SimulationInput = Field(default_factory=SimulationInput)
    projection_years: conint(ge=1, le=MAX_PROJECTION_YEARS) = DEFAULT_PROJECTION_YEARS
    simulations: conint(ge=MIN_SIMULATIONS, le=MAX_SIMULATIONS) = DEFAULT_SIMULATIONS
    language: str = DEFAULT_LANGUAGE
    seed: Optional[int] = None


# ============================
# Statistics
# ============================
class DistributionSummary(BaseModel):
    """Summary of one outcome metric across the ensemble"""
    mean: float
    median: float
    std: float
    min: float
    max: float
    percentiles: Dict[str, float]


class DrawdownSummary(BaseModel):
    mean: float
    median: float
    max: float
    percentiles: Dict[str, float]


class SimulationStatistics(BaseModel):
    portfolio: DistributionSummary  # final nominal portfolio value
    income: DistributionSummary     # inflation-adjusted monthly income
    drawdown: DrawdownSummary


class ValueAtRisk(BaseModel):
    var95: float
    var99: float


class RiskMetrics(BaseModel):
    """Probabilities and tail measures derived from the ensemble"""
    success_probability: float
    shortfall_probability: float
    average_shortfall: float
    worst_case_shortfall: float
    value_at_risk: ValueAtRisk
    expected_shortfall: float


class ScenarioStats(BaseModel):
    occurrences: int
    average_return: float  # mean portfolio value over path-years spent in the regime
    frequency: float


class Recommendation(BaseModel):
    type: str
    priority: Literal["high", "medium", "low"]
    title: str
    description: str
    actions: List[str]


class YearlyBands(BaseModel):
    """Per-year percentile bands of portfolio value (time-series view)"""
    years: List[int]
    nominal: Dict[str, List[float]]
    real: Dict[str, List[float]]


class Histogram(BaseModel):
    counts: List[int]
    bin_edges: List[float]


class RiskLevels(BaseModel):
    success: Literal["good", "fair", "poor"]
    shortfall: Literal["low", "moderate", "high"]


# ============================
# Response Models
# ============================
class SimulationResponse(BaseModel):
    """Results from a Monte Carlo simulation, without per-path outcomes"""
    simulations: int
    projection_years: int
    statistics: SimulationStatistics
    risk_metrics: RiskMetrics
    scenarios: Dict[str, ScenarioStats]
    recommendations: List[Recommendation]
    yearly_bands: YearlyBands
    histograms: Dict[str, Histogram]
    risk_levels: RiskLevels
