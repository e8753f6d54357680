"""
Core Monte Carlo simulation engine for retirement outcomes.
"""

import logging
import threading
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from ..config import (
    CHUNK_SIZE,
    DEFAULT_LANGUAGE,
    DEFAULT_PROJECTION_YEARS,
    DEFAULT_SIMULATIONS,
    MAX_WORKERS,
    USE_PARALLEL_PROCESSING,
)
from ..models import (
    Histogram,
    Recommendation,
    RiskLevels,
    RiskMetrics,
    ScenarioStats,
    SimulationInput,
    SimulationResponse,
    SimulationStatistics,
    YearlyBands,
)
from .parameters import DEFAULT_MARKET_MODEL, MarketModel
from .paths import PathEnsemble, PathOutcome, SimulationConfig, simulate_paths
from .recommendations import generate_recommendations
from .statistics import (
    analyze_scenarios,
    assess_risk_levels,
    calculate_risk_metrics,
    calculate_statistics,
    histogram,
    yearly_percentile_bands,
)

logger = logging.getLogger(__name__)


class SimulationCancelled(RuntimeError):
    """Raised when a run is cancelled before every path completed."""


@dataclass
class SimulationResult:
    """Ensemble of simulated paths plus everything reduced from it."""
    simulations: int
    projection_years: int
    ensemble: PathEnsemble
    statistics: SimulationStatistics
    risk_metrics: RiskMetrics
    scenarios: Dict[str, ScenarioStats]
    recommendations: List[Recommendation]
    yearly_bands: YearlyBands
    histograms: Dict[str, Histogram]
    risk_levels: RiskLevels

    @cached_property
    def outcomes(self) -> List[PathOutcome]:
        return self.ensemble.outcomes()

    def to_response(self) -> SimulationResponse:
        return SimulationResponse(
            simulations=self.simulations,
            projection_years=self.projection_years,
            statistics=self.statistics,
            risk_metrics=self.risk_metrics,
            scenarios=self.scenarios,
            recommendations=self.recommendations,
            yearly_bands=self.yearly_bands,
            histograms=self.histograms,
            risk_levels=self.risk_levels,
        )


def _simulate_chunk(config: SimulationConfig, market: MarketModel,
                    seed_seq: np.random.SeedSequence, n_paths: int) -> PathEnsemble:
    """Run one chunk of paths with its own generator (top-level so it pickles)."""
    rng = np.random.default_rng(seed_seq)
    return simulate_paths(config, market, rng, n_paths)


class Engine:
    """Monte Carlo simulation engine for retirement outcomes."""

    def __init__(self, market: MarketModel = DEFAULT_MARKET_MODEL,
                 chunk_size: int = CHUNK_SIZE,
                 parallel: bool = USE_PARALLEL_PROCESSING,
                 max_workers: Optional[int] = MAX_WORKERS):
        """
        Initialize the Monte Carlo engine.

        Args:
            market: Asset parameters and economic regime table
            chunk_size: Paths simulated together with one random generator
            parallel: Run chunks in a process pool
            max_workers: Pool size (None lets the executor decide)
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.market = market
        self.chunk_size = chunk_size
        self.parallel = parallel
        self.max_workers = max_workers

    def _chunk_sizes(self, simulations: int) -> List[int]:
        full, rest = divmod(simulations, self.chunk_size)
        return [self.chunk_size] * full + ([rest] if rest else [])

    def _simulate(self, config: SimulationConfig, simulations: int, seed: Optional[int],
                  cancel_event: Optional[threading.Event]) -> PathEnsemble:
        """
        Simulate all paths chunk by chunk.

        Chunk generators are spawned from one SeedSequence, so a fixed seed
        gives the same ensemble whether chunks run sequentially or in parallel.
        """
        sizes = self._chunk_sizes(simulations)
        seeds = np.random.SeedSequence(seed).spawn(len(sizes))

        if self.parallel and len(sizes) > 1:
            blocks = self._simulate_parallel(config, sizes, seeds, cancel_event)
        else:
            blocks = []
            for seed_seq, n_paths in zip(seeds, sizes):
                _check_cancelled(cancel_event)
                blocks.append(_simulate_chunk(config, self.market, seed_seq, n_paths))

        return PathEnsemble.concatenate(blocks)

    def _simulate_parallel(self, config, sizes, seeds, cancel_event) -> List[PathEnsemble]:
        with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(_simulate_chunk, config, self.market, seed_seq, n_paths)
                for seed_seq, n_paths in zip(seeds, sizes)
            ]
            blocks = []
            # Collected in submission order so path order matches a sequential run
            for future in futures:
                if cancel_event is not None and cancel_event.is_set():
                    for f in futures:
                        f.cancel()
                    _check_cancelled(cancel_event)
                blocks.append(future.result())
        return blocks

    def run(self, inputs: Union[SimulationInput, Mapping[str, Any], None] = None,
            projection_years: int = DEFAULT_PROJECTION_YEARS,
            simulations: int = DEFAULT_SIMULATIONS,
            language: str = DEFAULT_LANGUAGE,
            seed: Optional[int] = None,
            cancel_event: Optional[threading.Event] = None) -> SimulationResult:
        """
        Run the Monte Carlo simulation.

        Args:
            inputs: Flat input record (mapping or SimulationInput)
            projection_years: Years simulated per path
            simulations: Number of independent paths
            language: Recommendation language ("en" or "he")
            seed: Seed for reproducible runs (None draws fresh entropy)
            cancel_event: Checked between chunks; when set the run is abandoned

        Returns:
            SimulationResult with statistics, risk metrics, regime breakdown
            and recommendations
        """
        if projection_years < 1:
            raise ValueError("projection_years must be >= 1")
        if simulations < 1:
            raise ValueError("simulations must be >= 1")

        if not isinstance(inputs, SimulationInput):
            inputs = SimulationInput.model_validate(inputs or {})
        config = SimulationConfig.from_inputs(inputs, projection_years, self.market)

        logger.info("Starting Monte Carlo simulation with %d iterations...", simulations)
        ensemble = self._simulate(config, simulations, seed, cancel_event)

        statistics = calculate_statistics(ensemble)
        risk_metrics = calculate_risk_metrics(ensemble)
        result = SimulationResult(
            simulations=simulations,
            projection_years=projection_years,
            ensemble=ensemble,
            statistics=statistics,
            risk_metrics=risk_metrics,
            scenarios=analyze_scenarios(ensemble),
            recommendations=generate_recommendations(statistics, risk_metrics, language),
            yearly_bands=yearly_percentile_bands(ensemble),
            histograms={
                "portfolio": histogram(ensemble.final_portfolio_value),
                "income": histogram(ensemble.inflation_adjusted_income),
            },
            risk_levels=assess_risk_levels(risk_metrics),
        )
        logger.info(
            "Monte Carlo simulation completed: success probability %.1f%%",
            risk_metrics.success_probability * 100,
        )
        return result


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Cancellation requested, abandoning simulation")
        raise SimulationCancelled("Simulation cancelled")


def run_simulation(inputs: Union[SimulationInput, Mapping[str, Any], None] = None,
                   projection_years: int = DEFAULT_PROJECTION_YEARS,
                   simulations: int = DEFAULT_SIMULATIONS,
                   language: str = DEFAULT_LANGUAGE,
                   seed: Optional[int] = None) -> SimulationResult:
    """Run a simulation with the default market model."""
    return Engine().run(inputs, projection_years, simulations, language, seed)
