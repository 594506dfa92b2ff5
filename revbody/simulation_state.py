"""
This module manages the internal state representation for N-body simulations.

The SimulationState class maintains numpy arrays for positions, velocities, masses, and
accelerations in three dimensions, provides property accessors with validation, handles
state initialization from Body objects or raw arrays, supports appending and removing
bodies, and produces deep snapshots that can be restored exactly. The snapshot/restore
pair is what lets an integrator run a collaborator in isolation and discard every side
effect afterwards. It assumes state arrays maintain compatible dimensions throughout the
simulation.
"""

from __future__ import annotations
import numpy as np
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .body import Body


def _empty_vectors() -> np.ndarray:
	return np.empty((0, 3), dtype=np.float64)


def _as_vectors(values) -> np.ndarray:
	arr = np.asarray(values, dtype=np.float64)
	if arr.ndim == 1:
		arr = arr.reshape(-1, 3)
	return arr


class SimulationState:

	def __init__(self):
		self.n_bodies: int = 0
		self._mass: np.ndarray = np.empty(0, dtype=np.float64)
		self._pos: np.ndarray = _empty_vectors()
		self._vel: np.ndarray = _empty_vectors()
		self._acc: np.ndarray = _empty_vectors()

	@property
	def pos(self) -> np.ndarray:
		return self._pos

	@property
	def vel(self) -> np.ndarray:
		return self._vel

	@property
	def mass(self) -> np.ndarray:
		return self._mass

	@property
	def acc(self) -> np.ndarray:
		return self._acc

	@pos.setter
	def pos(self, value: np.ndarray) -> None:
		arr = np.asarray(value, dtype=np.float64)
		if arr.ndim == 1 and arr.size % 3 == 0:
			arr = arr.reshape(-1, 3)
		if arr.shape != self._pos.shape:
			print(f"shape mismatch when assigning to sim.pos: "
							 f"expected {self._pos.shape}, got {arr.shape}")
			return
		self._pos[...] = arr

	@vel.setter
	def vel(self, value: np.ndarray) -> None:
		arr = np.asarray(value, dtype=np.float64)
		if arr.ndim == 1 and arr.size % 3 == 0:
			arr = arr.reshape(-1, 3)
		if arr.shape != self._vel.shape:
			print(f"shape mismatch when assigning to sim.vel: "
							 f"expected {self._vel.shape}, got {arr.shape}")
			return
		self._vel[...] = arr

	@mass.setter
	def mass(self, value: np.ndarray) -> None:
		arr = np.asarray(value, dtype=np.float64).ravel()
		if arr.shape != self._mass.shape:
			print(f"shape mismatch when assigning to sim.mass: "
							 f"expected {self._mass.shape}, got {arr.shape}")
			return
		if np.any(arr <= 0) or not np.all(np.isfinite(arr)):
			print("all masses must be positive finite numbers")
			return
		self._mass[...] = arr

	def build_state(self, bodies: List[Body] | None, masses, positions, velocities) -> bool:
		if bodies is None:
			if masses is None or positions is None:
				return False

			masses = list(masses)
			positions = list(positions)
			if velocities is None:
				velocities = []
			else:
				velocities = list(velocities)

			if len(velocities) == 0:
				velocities = [(0.0, 0.0, 0.0)] * len(masses)
			elif len(velocities) == 1 and len(masses) > 1:
				velocities = velocities * len(masses)

			if len(velocities) != len(masses) or len(positions) != len(masses):
				return False

			mass = np.asarray(masses, dtype=np.float64)
			pos = _as_vectors(positions)
			vel = _as_vectors(velocities)
		else:
			mass = np.array([b.mass for b in bodies], dtype=np.float64)
			pos = np.array([b.position for b in bodies], dtype=np.float64).reshape(-1, 3)
			vel = np.array([b.velocity for b in bodies], dtype=np.float64).reshape(-1, 3)

		if pos.shape != (mass.size, 3) or vel.shape != (mass.size, 3):
			return False
		if np.any(mass <= 0) or not np.all(np.isfinite(mass)):
			return False

		self.n_bodies = int(mass.size)
		self._mass = mass
		self._pos = pos
		self._vel = vel
		self._acc = np.zeros_like(self._pos)
		return True

	def append(self, body: "Body") -> bool:
		if not (body.mass > 0.0 and np.isfinite(body.mass)):
			print("all masses must be positive finite numbers")
			return False
		self._mass = np.append(self._mass, body.mass)
		self._pos = np.vstack([self._pos, np.asarray(body.position, dtype=np.float64)])
		self._vel = np.vstack([self._vel, np.asarray(body.velocity, dtype=np.float64)])
		self._acc = np.vstack([self._acc, np.zeros(3)])
		self.n_bodies = int(self._mass.size)
		return True

	def remove(self, index: int) -> bool:
		index = int(index)
		if index < 0:
			index += self.n_bodies
		if not 0 <= index < self.n_bodies:
			print(f"cannot remove body {index}: simulation has {self.n_bodies} bodies")
			return False
		self._mass = np.delete(self._mass, index)
		self._pos = np.delete(self._pos, index, axis=0)
		self._vel = np.delete(self._vel, index, axis=0)
		self._acc = np.delete(self._acc, index, axis=0)
		self.n_bodies = int(self._mass.size)
		return True

	def disable_simulation(self) -> None:
		self.n_bodies = 0
		self._mass = np.empty(0, dtype=np.float64)
		self._pos = _empty_vectors()
		self._vel = _empty_vectors()
		self._acc = _empty_vectors()

	def snapshot(self) -> dict:
		return {
			"masses": self._mass.copy(),
			"positions": self._pos.copy(),
			"velocities": self._vel.copy(),
			"acc": self._acc.copy(),
		}

	def restore(self, state_dict: dict) -> None:
		self._mass = state_dict["masses"].copy()
		self._pos = state_dict["positions"].copy()
		self._vel = state_dict["velocities"].copy()
		if "acc" in state_dict:
			self._acc = state_dict["acc"].copy()
		else:
			self._acc = np.zeros_like(self._pos)
		self.n_bodies = int(self._mass.size)
