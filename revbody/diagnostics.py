from __future__ import annotations
import numpy as np
from typing import TYPE_CHECKING
from .forces import geometry_buffers, potential_energy
from .physics_utils import center_of_mass
if TYPE_CHECKING:
    from .simulation import NBodySimulation

"""
This module computes conserved quantities during N-body simulations and hosts the package's diagnostic printer. The Diagnostics class provides kinetic and potential energies with softening, a high-precision total energy using extended precision arithmetic and Kahan summation, linear and angular momentum, and the center of mass position and velocity. The diag_print function is the rate-limited console reporter used by every component: each message kind is printed for its first few occurrences and then only every interval-th time, controlled by the diag_prints, diag_print_limit and diag_print_interval configuration fields. It assumes access to simulation state through the standard array attributes.

"""

_GLOBAL_DIAG_COUNTS: dict = {}


def diag_print(cfg, key: str, msg: str) -> None:
	if cfg is None:
		enabled = True
	else:
		enabled = bool(getattr(cfg, "diag_prints", True))
	if not enabled:
		return

	if cfg is None:
		limit = 3
		interval = 1000
	else:
		limit = int(getattr(cfg, "diag_print_limit", 3))
		interval = int(getattr(cfg, "diag_print_interval", 1000))
	if limit < 0:
		limit = 0
	if interval < 1:
		interval = 1

	c = _GLOBAL_DIAG_COUNTS.get(key, 0) + 1
	_GLOBAL_DIAG_COUNTS[key] = c

	if (c <= limit) or (c % interval == 0):
		if c <= limit:
			suffix = ""
		else:
			suffix = f" (occurrence #{c})"
		print(msg + suffix)


def reset_diag_counts() -> None:
	_GLOBAL_DIAG_COUNTS.clear()


class Diagnostics:

	def __init__(self, simulation: "NBodySimulation"):
		self.sim = simulation

	def kinetic_energy(self) -> float:
		m = self.sim._mass
		v = self.sim._vel
		return 0.5 * float(np.sum(m * np.sum(v * v, axis=1)))

	def potential_energy(self) -> float:
		sim = self.sim
		return potential_energy(sim._pos, sim._mass, G=sim.G, eps=sim.cfg.softening)

	def energy(self) -> float:
		return self.kinetic_energy() + self.potential_energy()

	def _kahan_sum_hp(self, arr_hp):
		a = np.asarray(arr_hp).ravel()
		dtype = a.dtype.type
		s = dtype(0.0)
		c = dtype(0.0)
		for x in a:
			y = x - c
			t = s + y
			c = (t - s) - y
			s = t
		return s

	def energy_hp(self) -> float:
		sim = self.sim
		hp = np.longdouble

		m_hp = np.asarray(sim._mass, dtype=hp)
		v_hp = np.asarray(sim._vel, dtype=hp)
		v2_hp = np.sum(v_hp * v_hp, axis=1, dtype=hp)
		T_hp = self._kahan_sum_hp(hp(0.5) * m_hp * v2_hp)

		n = sim.n_bodies
		if n >= 2 and sim.G != 0.0:
			eps = hp(sim.cfg.softening)
			_, r2, _ = geometry_buffers(sim._pos)
			iu = np.triu_indices(n, 1)
			r2_iu = np.asarray(r2[iu], dtype=hp) + eps * eps
			r2_iu = np.where(r2_iu > hp(0.0), r2_iu, hp(1e-300))
			inv_r = hp(1.0) / np.sqrt(r2_iu)
			V_hp = hp(-sim.G) * self._kahan_sum_hp(m_hp[iu[0]] * m_hp[iu[1]] * inv_r)
		else:
			V_hp = hp(0.0)

		total = T_hp + V_hp
		if not np.isfinite(total):
			diag_print(sim.cfg, "energy_hp", "[diag] non-finite energy")
		return float(total)

	def linear_momentum(self) -> np.ndarray:
		sim = self.sim
		return np.sum(sim._mass[:, None] * sim._vel, axis=0)

	def angular_momentum(self) -> np.ndarray:
		sim = self.sim
		return np.sum(sim._mass[:, None] * np.cross(sim._pos, sim._vel), axis=0)

	def center_of_mass(self) -> tuple[np.ndarray, np.ndarray]:
		sim = self.sim
		return center_of_mass(sim._mass, sim._pos), center_of_mass(sim._mass, sim._vel)
