"""
This module checks initial conditions before they are handed to the host simulation.

SimulationValidator.state_is_valid accepts mass, position and velocity sequences and
answers whether they describe a usable three-dimensional system: every mass positive and
finite, positions and velocities shaped (N, 3) with finite entries, and a non-negative
softening length. An empty system is valid. report_invalid_state prints the rejected
input under an [invalid] tag, flagging any vector with the wrong number of components,
so that a failed construction can be diagnosed from the console.
"""

from __future__ import annotations
import math
from typing import Sequence, Tuple
import numpy as np


Vec3 = Tuple[float, float, float]


class SimulationValidator:
	@staticmethod
	def state_is_valid(
		masses: Sequence[float],
		positions: Sequence[Vec3],
		velocities: Sequence[Vec3],
		softening: float = 0.0,
	) -> bool:

		if masses is None or positions is None or velocities is None:
			return False

		m = np.asarray(masses, dtype=float).ravel()
		r = np.asarray(positions, dtype=float)
		v = np.asarray(velocities, dtype=float)

		if m.size == 0:
			return r.size == 0 and v.size == 0

		if r.ndim != 2 or v.ndim != 2 or r.shape != v.shape:
			return False
		if r.shape[0] != m.size or r.shape[1] != 3:
			return False

		for m_i in m:
			if not (m_i > 0.0 and math.isfinite(m_i)):
				return False

		if not np.all(np.isfinite(r)) or not np.all(np.isfinite(v)):
			return False

		if not (softening >= 0.0 and math.isfinite(softening)):
			return False

		return True

	@staticmethod
	def report_invalid_state(
		label: str,
		masses=None,
		positions=None,
		velocities=None,
		softening=None,
	) -> None:

		print(f"[invalid] {label}")
		if masses is not None:
			print("masses", masses)
		if positions is not None:
			print("positions", positions)
			for i, pos in enumerate(positions):
				if len(pos) != 3:
					print(f"  position[{i}] has {len(pos)} dimensions (expected 3)")
		if velocities is not None:
			print("velocities", velocities)
			for i, vel in enumerate(velocities):
				if len(vel) != 3:
					print(f"  velocity[{i}] has {len(vel)} dimensions (expected 3)")
		if softening is not None:
			print("softening", softening)
