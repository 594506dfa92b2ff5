"""
This module implements the standard leapfrog (Stormer-Verlet) integration scheme.

The VerletScheme class extends IntegrationScheme with the second-order symplectic
drift-kick-drift method split across the host's two-phase protocol: part1 drifts
positions by half a step, the host then evaluates accelerations at the midpoint, and
part2 applies the full kick followed by the second half drift. Host time advances by
half a step in each phase. It is one of the companion schemes the janus integrator can
use to bootstrap its history, and assumes timesteps are appropriate for system dynamics.
"""

from __future__ import annotations
from .forces import IGNORE_NONE
from .integration_scheme_base import IntegrationScheme



class VerletScheme(IntegrationScheme):
	name = "verlet"

	def part1(self) -> bool:
		sim = self.sim
		sim.gravity_ignore_terms = IGNORE_NONE
		self.drift(0.5 * sim.dt)
		sim.t += 0.5 * sim.dt
		return True

	def part2(self) -> None:
		sim = self.sim
		self.kick(sim.dt)
		self.drift(0.5 * sim.dt)
		sim.t += 0.5 * sim.dt
