"""
Monte Carlo retirement-outcome simulation.
"""

from .engine import Engine, SimulationCancelled, SimulationResult, run_simulation
from .parameters import DEFAULT_MARKET_MODEL, AssetClass, MarketModel, Regime

__all__ = [
    "Engine",
    "SimulationCancelled",
    "SimulationResult",
    "run_simulation",
    "DEFAULT_MARKET_MODEL",
    "AssetClass",
    "MarketModel",
    "Regime",
]
