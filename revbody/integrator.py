from __future__ import annotations
from typing import TYPE_CHECKING, Dict
from .integration_scheme_base import IntegrationScheme
from .janus_scheme import JanusScheme
from .verlet_scheme import VerletScheme
from .whfast_scheme import WHFastScheme

if TYPE_CHECKING:
    from .simulation import NBodySimulation

"""
This central module implements the Integrator class that coordinates timestepping for N-body simulations. It owns one scheme instance per integrator mode, created lazily the first time the mode is selected and kept across selector switches so that internal buffers (such as the janus generation history) survive a temporary switch to a companion scheme. Each step follows the generic two-phase protocol: part1 of the active scheme, a host acceleration evaluation honouring the scheme's ignore-terms request, then part2. A part1 that reports failure ends the step early. The class also forwards synchronize and reset requests. The implementation assumes the simulation maintains valid particle data and a valid integrator selector.

"""

_SCHEMES = {
	"janus": JanusScheme,
	"whfast": WHFastScheme,
	"verlet": VerletScheme,
}


class Integrator:

	def __init__(self, sim: "NBodySimulation") -> None:
		self.sim = sim
		self._schemes: Dict[str, IntegrationScheme] = {}

	def _make_scheme(self, mode: str) -> IntegrationScheme:
		cls = _SCHEMES.get(mode)
		if cls is None:
			print(f"unknown integrator mode {mode!r}; falling back to verlet")
			cls = VerletScheme
		return cls(self.sim)

	def scheme(self, mode: str | None = None) -> IntegrationScheme:
		if mode is None:
			mode = self.sim.integrator
		sch = self._schemes.get(mode)
		if sch is None:
			sch = self._make_scheme(mode)
			self._schemes[mode] = sch
		return sch

	def step(self) -> bool:
		sim = self.sim
		sch = self.scheme()
		if not sch.part1():
			return False
		sim.update_acceleration()
		sch.part2()
		return True

	def synchronize(self) -> None:
		self.scheme().synchronize()

	def reset(self) -> None:
		for sch in self._schemes.values():
			sch.reset()
