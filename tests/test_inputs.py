"""
Test input normalization into a simulation config.
"""

import math

import pytest
from pydantic import ValidationError

from retirement_risk.models import SimulationInput, parse_number
from retirement_risk.monte_carlo.parameters import DEFAULT_MARKET_MODEL, AssetClass
from retirement_risk.monte_carlo.paths import SimulationConfig


class TestParseNumber:
    """Test the lenient numeric parse."""

    @pytest.mark.parametrize("raw,expected", [
        (5, 5.0), (2.5, 2.5), ("7.5", 7.5), (" 1,200 ", 1200.0), ("1_000", 1000.0), ("-3", -3.0),
    ])
    def test_parses(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", float("nan"), math.inf, True, [1], {}])
    def test_rejects(self, raw):
        assert parse_number(raw) is None


class TestSimulationInput:
    """Test defaults and coercion."""

    def test_defaults(self):
        inputs = SimulationInput()
        assert inputs.current_age == 30
        assert inputs.retirement_age == 67
        assert inputs.inflation_rate == 2.5
        assert inputs.stock_percentage == 60.0
        assert inputs.monthly_contributions == 1000.0
        assert inputs.target_monthly_income == 10000.0
        assert inputs.pension_return is None

    def test_camel_and_snake_keys(self):
        camel = SimulationInput.model_validate({"currentAge": 45, "currentSavings": "250000"})
        snake = SimulationInput.model_validate({"current_age": 45, "current_savings": 250000})
        assert camel == snake
        assert camel.current_savings == 250000.0

    def test_unparseable_values_fall_back(self):
        inputs = SimulationInput.model_validate({
            "currentAge": "forty",
            "monthlyContributions": "n/a",
            "targetMonthlyIncome": "",
            "currentCrypto": None,
            "pensionReturn": "abc",
        })
        assert inputs.current_age == 30
        assert inputs.monthly_contributions == 1000.0
        assert inputs.target_monthly_income == 10000.0
        assert inputs.current_crypto == 0.0
        assert inputs.pension_return is None

    def test_zero_is_kept(self):
        inputs = SimulationInput.model_validate({"monthlyContributions": 0, "stockPercentage": "0"})
        assert inputs.monthly_contributions == 0.0
        assert inputs.stock_percentage == 0.0

    def test_ages_truncate(self):
        inputs = SimulationInput.model_validate({"currentAge": "40.9", "retirementAge": 66.5})
        assert inputs.current_age == 40
        assert inputs.retirement_age == 66

    def test_non_positive_crypto_return_uses_default(self):
        assert SimulationInput.model_validate({"cryptoReturn": 0}).crypto_return is None
        assert SimulationInput.model_validate({"cryptoReturn": "-5"}).crypto_return is None
        assert SimulationInput.model_validate({"cryptoReturn": 20}).crypto_return == 20.0

    @pytest.mark.parametrize("target", [0, -100, "0"])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(ValidationError):
            SimulationInput.model_validate({"targetMonthlyIncome": target})

    def test_unknown_keys_ignored(self):
        inputs = SimulationInput.model_validate({"salary": 20000, "currentAge": 35})
        assert inputs.current_age == 35


class TestSimulationConfig:
    """Test the normalized configuration."""

    def test_return_overrides(self):
        inputs = SimulationInput.model_validate({"pensionReturn": 5, "realEstateReturn": "4.5"})
        config = SimulationConfig.from_inputs(inputs, 30, DEFAULT_MARKET_MODEL)
        assert config.expected_returns[AssetClass.PENSION] == 5.0
        assert config.expected_returns[AssetClass.REAL_ESTATE] == 4.5
        assert config.expected_returns[AssetClass.TRAINING_FUND] == 6.5
        assert config.expected_returns[AssetClass.CRYPTO] == 15.0

    def test_derived_values(self):
        inputs = SimulationInput.model_validate({
            "currentAge": 40, "retirementAge": 65, "stockPercentage": 80, "monthlyContributions": 2000,
        })
        config = SimulationConfig.from_inputs(inputs, 30, DEFAULT_MARKET_MODEL)
        assert config.years_to_retirement == 25
        assert config.stock_weight == pytest.approx(0.8)
        contributions = config.annual_contributions()
        assert contributions[AssetClass.PENSION] == pytest.approx(14400.0)
        assert contributions[AssetClass.PERSONAL_PORTFOLIO] == pytest.approx(9600.0)
        assert config.contribution_schedule()[24].sum() == pytest.approx(24000.0)
        assert config.contribution_schedule()[25].sum() == 0.0
