"""
Retirement risk engine: Monte Carlo projections of retirement outcomes.
"""

from .config import API_VERSION as __version__
from .models import SimulationInput
from .monte_carlo import Engine, SimulationCancelled, SimulationResult, run_simulation

__all__ = [
    "Engine",
    "SimulationCancelled",
    "SimulationInput",
    "SimulationResult",
    "run_simulation",
]
