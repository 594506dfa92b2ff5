"""
This module implements BodyView, a proxy class providing Body-like access to individual
particles stored in the simulation's numpy arrays.

The class generates properties with getters and setters that map attribute access (mass,
x, y, z, vx, vy, vz, ax, ay, az) directly to the appropriate array indices in the parent
simulation, maintaining the same interface as Body while operating on the array storage.
Accelerations are exposed read-only since they are owned by the force evaluator. The
view assumes the parent simulation maintains valid array structures and that the body
index remains within bounds; views are invalidated when bodies are added or removed.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .simulation import NBodySimulation


def _component(array_name: str, axis: int, writable: bool = True) -> property:
	def fget(self: "BodyView") -> float:
		return float(getattr(self._sim, array_name)[self._i, axis])

	def fset(self: "BodyView", v: float) -> None:
		getattr(self._sim, array_name)[self._i, axis] = float(v)

	if writable:
		return property(fget, fset)
	return property(fget)


class BodyView:
	__slots__ = ("_sim", "_i")

	def __init__(self, sim: "NBodySimulation", idx: int) -> None:
		self._sim = sim
		self._i = int(idx)

	@property
	def mass(self) -> float:
		return float(self._sim._mass[self._i])
	@mass.setter
	def mass(self, v: float) -> None:
		self._sim._mass[self._i] = float(v)

	x = _component("_pos", 0)
	y = _component("_pos", 1)
	z = _component("_pos", 2)
	vx = _component("_vel", 0)
	vy = _component("_vel", 1)
	vz = _component("_vel", 2)
	ax = _component("_acc", 0, writable=False)
	ay = _component("_acc", 1, writable=False)
	az = _component("_acc", 2, writable=False)

	def __repr__(self) -> str:
		return (f"Body(mass={self.mass}, x={self.x}, y={self.y}, z={self.z}, "
				f"vx={self.vx}, vy={self.vy}, vz={self.vz})")
