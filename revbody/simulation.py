"""
This module implements NBodySimulation, the host context that integration schemes
operate on.

The class holds the particle state (through SimulationState), the current time, the
signed timestep, the gravitational constant, the integrator selector, the run status
and the gravity ignore-terms selector, and exposes the generic entry points step,
integrate, synchronize and integrator_reset. update_acceleration is the force evaluator
every scheme calls. snapshot and restore capture and reinstate the complete mutable
context as a HostSnapshot, which lets a scheme run a collaborator in isolation and then
discard its side effects. Bodies can be added or removed between steps; schemes that
keep per-particle history detect the count change themselves. The module assumes
masses are positive and that positions and velocities are three-dimensional.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import List, Sequence
import numpy as np

from .body import Body
from .body_view import BodyView
from .diagnostics import Diagnostics, diag_print
from .forces import IGNORE_NONE, gravitational_acceleration
from .integration_scheme_base import IntegrationScheme
from .integrator import Integrator
from .physics_utils import center_of_mass
from .sim_config import SimConfig, _ALLOWED_MODES
from .simulation_state import SimulationState
from .simulation_validator import SimulationValidator


RUNNING = "running"
FINISHED = "finished"
ERROR = "error"


@dataclass
class HostSnapshot:
	t: float
	dt: float
	status: str
	integrator: str
	gravity_ignore_terms: int
	state: dict


class NBodySimulation:

	def __init__(
		self,
		cfg: SimConfig | None = None,
		*,
		bodies: Sequence[Body] | None = None,
		masses=None,
		positions=None,
		velocities=None,
	) -> None:
		if cfg is None:
			cfg = SimConfig()
		self.cfg = cfg
		for issue in cfg.validate():
			diag_print(cfg, "config", f"[config] {issue}")

		self.G = float(cfg.G)
		self.t = 0.0
		self.dt = float(cfg.initial_dt)
		self.status = RUNNING
		self.gravity_ignore_terms = IGNORE_NONE
		if cfg.integrator_mode in _ALLOWED_MODES:
			self._integrator_mode = cfg.integrator_mode
		else:
			self._integrator_mode = "janus"

		self._state = SimulationState()
		if bodies is not None or masses is not None:
			self._build(bodies, masses, positions, velocities)

		self._integrator = Integrator(self)

	def _build(self, bodies, masses, positions, velocities) -> None:
		ok = self._state.build_state(
			list(bodies) if bodies is not None else None, masses, positions, velocities
		)
		if ok:
			ok = SimulationValidator.state_is_valid(
				self._state._mass,
				self._state._pos,
				self._state._vel,
				self.cfg.softening,
			)
		if not ok:
			SimulationValidator.report_invalid_state(
				"initial conditions",
				masses=masses,
				positions=positions,
				velocities=velocities,
				softening=self.cfg.softening,
			)
			self._state.disable_simulation()

	@property
	def n_bodies(self) -> int:
		return self._state.n_bodies

	@property
	def _mass(self) -> np.ndarray:
		return self._state._mass

	@property
	def _pos(self) -> np.ndarray:
		return self._state._pos

	@_pos.setter
	def _pos(self, value: np.ndarray) -> None:
		self._state._pos = value

	@property
	def _vel(self) -> np.ndarray:
		return self._state._vel

	@_vel.setter
	def _vel(self, value: np.ndarray) -> None:
		self._state._vel = value

	@property
	def _acc(self) -> np.ndarray:
		return self._state._acc

	@property
	def state(self) -> SimulationState:
		return self._state

	@property
	def bodies(self) -> List[BodyView]:
		return [BodyView(self, i) for i in range(self.n_bodies)]

	@property
	def integrator(self) -> str:
		return self._integrator_mode

	@integrator.setter
	def integrator(self, mode: str) -> None:
		if mode not in _ALLOWED_MODES:
			print(f"unknown integrator mode {mode!r}; expected one of {sorted(_ALLOWED_MODES)}")
			return
		self._integrator_mode = mode

	def scheme(self, mode: str | None = None) -> IntegrationScheme:
		return self._integrator.scheme(mode)

	def add(self, body: Body) -> bool:
		return self._state.append(body)

	def remove(self, index: int) -> bool:
		return self._state.remove(index)

	def update_acceleration(self) -> None:
		self._state._acc = gravitational_acceleration(
			self._state._pos,
			self._state._mass,
			G=self.G,
			eps=self.cfg.softening,
			ignore_terms=self.gravity_ignore_terms,
		)

	def step(self) -> bool:
		return self._integrator.step()

	def integrate(self, t_max: float) -> None:
		if self.dt == 0.0 or not math.isfinite(self.dt):
			print(f"cannot integrate with dt={self.dt}")
			return
		direction = 1.0 if self.dt > 0.0 else -1.0
		self.status = RUNNING
		while self.status == RUNNING and (float(t_max) - self.t) * direction > 0.0:
			self.step()
		if self.status == RUNNING:
			self.status = FINISHED

	def synchronize(self) -> None:
		self._integrator.synchronize()

	def integrator_reset(self) -> None:
		self._integrator.reset()

	def snapshot(self) -> HostSnapshot:
		return HostSnapshot(
			t=self.t,
			dt=self.dt,
			status=self.status,
			integrator=self._integrator_mode,
			gravity_ignore_terms=self.gravity_ignore_terms,
			state=self._state.snapshot(),
		)

	def restore(self, snap: HostSnapshot) -> None:
		self.t = snap.t
		self.dt = snap.dt
		self.status = snap.status
		self._integrator_mode = snap.integrator
		self.gravity_ignore_terms = snap.gravity_ignore_terms
		self._state.restore(snap.state)

	def move_to_com(self) -> None:
		if self.n_bodies == 0:
			return
		self._state._pos -= center_of_mass(self._mass, self._pos)
		self._state._vel -= center_of_mass(self._mass, self._vel)

	def energy(self) -> float:
		return Diagnostics(self).energy()
