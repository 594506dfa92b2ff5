"""
This initialization file serves as the main entry point for the reversible N-body
integration package, exposing all public APIs through a clean namespace.

It imports and re-exports the configuration (SimConfig), the host simulation classes
(Body, BodyView, NBodySimulation, HostSnapshot, SimulationState), the integrator
dispatch and its schemes (Integrator, JanusScheme, WHFastScheme, VerletScheme), the
fixed-point lattice codec, the force evaluator, the Kepler solver used by WHFast and
the diagnostic tools and the reversibility analyzers. The file establishes the package's public interface while
maintaining internal module organization, allowing users to import any major component
directly from the package root.
"""

from .sim_config import SimConfig
from .simulation_validator import SimulationValidator
from .simulation_state import SimulationState

from .body import Body
from .body_view import BodyView
from .simulation import NBodySimulation, HostSnapshot
from .integrator import Integrator
from .integration_scheme_base import IntegrationScheme
from .janus_scheme import JanusScheme
from .whfast_scheme import WHFastScheme, to_jacobi, from_jacobi
from .verlet_scheme import VerletScheme

from .kepler_solver import UniversalVariableKeplerSolver
from .forces import (
    gravitational_acceleration,
    gravitational_force,
    geometry_buffers,
)
from .fixed_point import (
    FixedPointOverflowError,
    encode,
    decode,
    headroom_issues,
)

from .diagnostics import Diagnostics, diag_print
from .reversibility_analyzer import ReversibilityAnalyzer, BatchReversibilityAnalyzer


__all__ = [
    "SimConfig",
    "SimulationValidator",
    "SimulationState",
    "Body",
    "BodyView",
    "NBodySimulation",
    "HostSnapshot",
    "Integrator",
    "IntegrationScheme",
    "JanusScheme",
    "WHFastScheme",
    "to_jacobi",
    "from_jacobi",
    "VerletScheme",
    "UniversalVariableKeplerSolver",
    "gravitational_acceleration",
    "gravitational_force",
    "geometry_buffers",
    "FixedPointOverflowError",
    "encode",
    "decode",
    "headroom_issues",
    "Diagnostics",
    "diag_print",
    "ReversibilityAnalyzer",
    "BatchReversibilityAnalyzer",
]
