"""
Test threshold-driven, localized recommendations.
"""

import pytest

from retirement_risk.models import (
    DistributionSummary,
    DrawdownSummary,
    RiskMetrics,
    SimulationStatistics,
    ValueAtRisk,
)
from retirement_risk.monte_carlo.recommendations import CONTENT, generate_recommendations


def _summary():
    return DistributionSummary(mean=1, median=1, std=0, min=1, max=1,
                               percentiles={"p10": 1, "p25": 1, "p75": 1, "p90": 1})


def _statistics(p90_drawdown=0.1):
    return SimulationStatistics(
        portfolio=_summary(),
        income=_summary(),
        drawdown=DrawdownSummary(mean=0.1, median=0.1, max=p90_drawdown,
                                 percentiles={"p75": 0.1, "p90": p90_drawdown, "p95": p90_drawdown}),
    )


def _metrics(success=0.8, average_shortfall=0.0):
    return RiskMetrics(
        success_probability=success,
        shortfall_probability=1 - success,
        average_shortfall=average_shortfall,
        worst_case_shortfall=average_shortfall,
        value_at_risk=ValueAtRisk(var95=0, var99=0),
        expected_shortfall=0,
    )


class TestThresholds:
    """Test which recommendations fire."""

    def test_moderate_success_no_recommendations(self):
        assert generate_recommendations(_statistics(), _metrics(success=0.8)) == []

    def test_low_success(self):
        recs = generate_recommendations(_statistics(), _metrics(success=0.5))
        assert [r.type for r in recs] == ["low_success_probability"]
        assert recs[0].priority == "high"
        assert len(recs[0].actions) == 4
        assert "50%" in recs[0].description

    def test_high_success(self):
        recs = generate_recommendations(_statistics(), _metrics(success=0.95))
        assert [r.type for r in recs] == ["high_success_probability"]
        assert recs[0].priority == "low"
        assert len(recs[0].actions) == 3

    def test_boundaries_are_strict(self):
        assert generate_recommendations(_statistics(0.40), _metrics(success=0.70, average_shortfall=0.20)) == []
        assert generate_recommendations(_statistics(), _metrics(success=0.90)) == []

    def test_high_drawdown(self):
        recs = generate_recommendations(_statistics(p90_drawdown=0.55), _metrics())
        assert [r.type for r in recs] == ["high_drawdown_risk"]
        assert recs[0].priority == "medium"
        assert "55%" in recs[0].description

    def test_fixed_order_when_several_fire(self):
        recs = generate_recommendations(_statistics(p90_drawdown=0.6), _metrics(success=0.3, average_shortfall=0.45))
        assert [r.type for r in recs] == ["low_success_probability", "high_drawdown_risk", "shortfall_risk"]
        assert [r.priority for r in recs] == ["high", "medium", "high"]

    def test_percent_rounds_half_up(self):
        recs = generate_recommendations(_statistics(), _metrics(success=0.125))
        assert "13%" in recs[0].description


class TestLocalization:
    """Test message tables."""

    def test_hebrew(self):
        recs = generate_recommendations(_statistics(), _metrics(success=0.5), language="he")
        assert recs[0].title == CONTENT["he"]["low_success"]["title"]
        assert "50%" in recs[0].description

    @pytest.mark.parametrize("language", ["en", "fr", ""])
    def test_other_languages_use_english(self, language):
        recs = generate_recommendations(_statistics(), _metrics(success=0.5), language=language)
        assert recs[0].title == "Low Retirement Success Probability"

    def test_tables_have_same_keys(self):
        for section, messages in CONTENT["en"].items():
            assert set(messages) == set(CONTENT["he"][section])
