from __future__ import annotations
import numpy as np
from .forces import IGNORE_FIRST_PAIR
from .integration_scheme_base import IntegrationScheme
from .kepler_solver import UniversalVariableKeplerSolver

"""
This module implements the Wisdom-Holman fast integration scheme for hierarchical N-body systems. The WHFastScheme class splits the Hamiltonian into Kepler motion of each Jacobi coordinate about the cumulative interior mass and an interaction part. part1 performs a half-step Kepler drift and asks the host for accelerations without the 0-1 pair, part2 converts those accelerations to Jacobi coordinates, adds back the Kepler term for Jacobi indices above one, kicks, and performs the second half drift. Kepler drifts are solved analytically with universal variables, so the scheme accelerates integration for systems with a dominant central mass. It serves as the default companion used by the janus integrator to generate its second history generation. The scheme assumes Jacobi coordinates are well-defined, which requires positive masses.
"""


def to_jacobi(m: np.ndarray, vec: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
	if out is None:
		out = np.empty_like(vec)
	eta = np.cumsum(m)
	s = m[0] * vec[0]
	for i in range(1, len(m)):
		out[i] = vec[i] - s / eta[i - 1]
		s = s + m[i] * vec[i]
	out[0] = s / eta[-1]
	return out


def from_jacobi(m: np.ndarray, jac: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
	if out is None:
		out = np.empty_like(jac)
	eta = np.cumsum(m)
	s = eta[-1] * jac[0]
	for i in range(len(m) - 1, 0, -1):
		out[i] = jac[i] + (s - m[i] * jac[i]) / eta[i]
		s = s - m[i] * out[i]
	out[0] = s / m[0]
	return out


class WHFastScheme(IntegrationScheme):
	name = "whfast"

	def __init__(self, sim) -> None:
		super().__init__(sim)
		self._uv_solver = UniversalVariableKeplerSolver()

	def _kepler_drift(self, h: float) -> None:
		sim = self.sim
		n = sim.n_bodies
		m = sim._mass
		eta = np.cumsum(m)
		jac_pos = to_jacobi(m, sim._pos, out=self.ensure_buffer("jac_pos", (n, 3)))
		jac_vel = to_jacobi(m, sim._vel, out=self.ensure_buffer("jac_vel", (n, 3)))
		jac_pos[0] += jac_vel[0] * h
		for i in range(1, n):
			mu = sim.G * eta[i]
			r_new, v_new = self._uv_solver.propagate(jac_pos[i], jac_vel[i], mu, h)
			jac_pos[i] = r_new
			jac_vel[i] = v_new
		from_jacobi(m, jac_pos, out=sim._pos)
		from_jacobi(m, jac_vel, out=sim._vel)

	def interaction_acceleration(self) -> np.ndarray:
		sim = self.sim
		n = sim.n_bodies
		m = sim._mass
		eta = np.cumsum(m)
		acc_jac = to_jacobi(m, sim._acc)
		acc_jac[0] = 0.0
		if n > 2 and sim.G != 0.0:
			jac_pos = to_jacobi(m, sim._pos)
			for i in range(2, n):
				r2 = float(np.dot(jac_pos[i], jac_pos[i]))
				if r2 > 0.0:
					acc_jac[i] += sim.G * eta[i] * jac_pos[i] / (r2 ** 1.5)
		return acc_jac

	def _interaction_kick(self, h: float) -> None:
		sim = self.sim
		m = sim._mass
		jac_vel = to_jacobi(m, sim._vel)
		jac_vel += h * self.interaction_acceleration()
		from_jacobi(m, jac_vel, out=sim._vel)

	def part1(self) -> bool:
		sim = self.sim
		sim.gravity_ignore_terms = IGNORE_FIRST_PAIR
		if sim.n_bodies == 0:
			return True
		self._kepler_drift(0.5 * sim.dt)
		sim.t += 0.5 * sim.dt
		return True

	def part2(self) -> None:
		sim = self.sim
		if sim.n_bodies == 0:
			return
		self._interaction_kick(sim.dt)
		self._kepler_drift(0.5 * sim.dt)
		sim.t += 0.5 * sim.dt
