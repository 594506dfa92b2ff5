"""
This module implements the janus integration scheme, a time-symmetric leapfrog that is
exactly reversible because its state lives on an integer lattice.

The JanusScheme class keeps four generation buffers of fixed-point positions (prev,
curr, next, scratch) held in a fixed list and addressed through a role-to-slot table,
so rotating generations only permutes indices. Each part1 call decodes curr into the
host positions, requests a full acceleration evaluation, forms
next = -prev + 2*curr + trunc(scale*dt^2*acc) with arbitrary-precision integers,
reconstructs velocities by central difference, rotates the generations and advances
host time. Because the central-difference law is its own inverse under time reversal,
flip followed by negating dt replays a forward run backwards bit-for-bit.

The scheme needs two generations but the host only provides one, so bootstrap runs a
companion scheme for one step backwards in time and encodes the result as prev. The
companion step runs on a full snapshot of the host context that is restored afterwards, so none
of its side effects leak. Bootstrap runs again whenever the particle count differs from
the allocated buffer size; reversibility holds within such an epoch only. part2 and
synchronize are no-ops because the whole update happens in part1.
"""

from __future__ import annotations
import math
from typing import List, Tuple, TYPE_CHECKING
import numpy as np

from .diagnostics import diag_print
from .fixed_point import (
	decode,
	encode,
	forcing_term,
	headroom_issues,
	narrow,
	widen,
)
from .forces import IGNORE_NONE
from .integration_scheme_base import IntegrationScheme
from .sim_config import _COMPANION_MODES

if TYPE_CHECKING:
    from .simulation import NBodySimulation


ROLES = ("prev", "curr", "next", "scratch")


def _empty_generation(n: int = 0) -> np.ndarray:
	return np.zeros((n, 3), dtype=np.int64)


class JanusScheme(IntegrationScheme):
	name = "janus"

	def __init__(self, sim: "NBodySimulation", scale: float | None = None) -> None:
		super().__init__(sim)
		if scale is None:
			scale = sim.cfg.janus_scale
		self._scale = float(scale)
		self._generations: List[np.ndarray] = [_empty_generation() for _ in ROLES]
		self._slot = {role: i for i, role in enumerate(ROLES)}
		self.allocated_n = 0
		self.bootstrap_count = 0
		self._in_bootstrap = False

	@property
	def scale(self) -> float:
		return self._scale

	@scale.setter
	def scale(self, value: float) -> None:
		value = float(value)
		if self.allocated_n:
			print("[janus] scale is fixed while generation buffers are allocated; "
				  "call reset() first")
			return
		if not (math.isfinite(value) and value > 0.0):
			print(f"[janus] scale must be positive and finite, got {value}")
			return
		self._scale = value

	def _gen(self, role: str) -> np.ndarray:
		return self._generations[self._slot[role]]

	def generation(self, role: str) -> np.ndarray:
		return self._gen(role).copy()

	def fixed_state(self) -> Tuple[np.ndarray, np.ndarray]:
		return self.generation("prev"), self.generation("curr")

	def positions(self) -> np.ndarray:
		return decode(self._gen("curr"), self._scale)

	def _allocate(self, n: int) -> None:
		self._generations = [_empty_generation(n) for _ in ROLES]
		self._slot = {role: i for i, role in enumerate(ROLES)}

	def _rotate(self) -> None:
		slot = self._slot
		old_prev = slot["prev"]
		slot["prev"] = slot["curr"]
		slot["curr"] = slot["next"]
		slot["next"] = old_prev

	def check_headroom(self) -> List[str]:
		sim = self.sim
		issues = headroom_issues(sim._pos, sim._vel, self._scale, sim.dt)
		for issue in issues:
			diag_print(sim.cfg, "janus_headroom", f"[janus] {issue}")
		return issues

	def _companion(self) -> str:
		companion = getattr(self.sim.cfg, "janus_companion", "whfast")
		if companion not in _COMPANION_MODES:
			diag_print(
				self.sim.cfg,
				"janus_companion",
				f"[janus] companion {companion!r} cannot bootstrap janus; using 'whfast'",
			)
			companion = "whfast"
		return companion

	def bootstrap(self) -> bool:
		sim = self.sim
		if self._in_bootstrap:
			diag_print(sim.cfg, "janus_reentrant",
					   "[warning] janus bootstrap called re-entrantly; call ignored")
			return False

		n = sim.n_bodies
		diag_print(sim.cfg, "janus_realloc",
				   f"[janus] reallocating generation buffers for N={n}")
		try:
			self._allocate(n)
		except MemoryError:
			diag_print(sim.cfg, "janus_alloc",
					   f"[janus] could not allocate generation buffers for N={n}")
			self.reset()
			sim.status = "error"
			return False
		self.allocated_n = 0

		self.check_headroom()
		companion = self._companion()

		snap = sim.snapshot()
		self._in_bootstrap = True
		try:
			curr = encode(sim._pos, self._scale)
			sim.integrator = companion
			sim.dt = -snap.dt
			sim.status = "running"
			sim.step()
			prev = encode(sim._pos, self._scale)
		finally:
			sim.restore(snap)
			self._in_bootstrap = False

		self._gen("curr")[...] = curr
		self._gen("prev")[...] = prev
		self.allocated_n = n
		self.bootstrap_count += 1
		return True

	def part1(self) -> bool:
		sim = self.sim
		n = sim.n_bodies
		dt = float(sim.dt)
		if n == 0 or dt == 0.0:
			return True

		if self.allocated_n != n:
			if not self.bootstrap():
				return False

		scale = self._scale
		prev = self._gen("prev")
		curr = self._gen("curr")

		sim._pos[...] = decode(curr, scale)
		sim.gravity_ignore_terms = IGNORE_NONE
		sim.update_acceleration()

		prev_w = widen(prev)
		next_w = -prev_w + 2 * widen(curr) + forcing_term(sim._acc, scale, dt)
		next_fixed = narrow(next_w)

		self._gen("next")[...] = next_fixed
		diff = (next_w - prev_w).astype(np.float64)
		sim._vel[...] = diff / scale / 2.0 / dt

		self._rotate()
		sim.t += dt
		return True

	def flip(self) -> bool:
		if not self.allocated_n:
			diag_print(self.sim.cfg, "janus_flip",
					   "[janus] flip requested before generation buffers exist; ignored")
			return False
		scratch = self._gen("scratch")
		np.copyto(scratch, self._gen("curr"))
		np.copyto(self._gen("curr"), self._gen("prev"))
		np.copyto(self._gen("prev"), scratch)
		return True

	def part2(self) -> None:
		pass

	def synchronize(self) -> None:
		pass

	def reset(self) -> None:
		super().reset()
		self._generations = [_empty_generation() for _ in ROLES]
		self._slot = {role: i for i, role in enumerate(ROLES)}
		self.allocated_n = 0
