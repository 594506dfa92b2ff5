"""
This base class defines the interface every integration scheme exposes to the host.

The IntegrationScheme class implements the generic two-phase stepping protocol:
part1 runs before the host evaluates accelerations, part2 runs after, synchronize
brings any internal representation back into the host particle arrays and reset
releases internal buffers. It also provides the shared drift and kick operators and
ensure_buffer for capacity-aware array allocation. Verlet, WHFast and janus derive from
it. The class assumes the host simulation keeps valid particle arrays and time fields.
"""

from __future__ import annotations
import math
from typing import Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .simulation import NBodySimulation



class IntegrationScheme:
	name: str = "base"

	def __init__(self, sim: "NBodySimulation") -> None:
		self.sim = sim
		self._buffers: dict = {}

	def part1(self) -> bool:
		return True

	def part2(self) -> None:
		pass

	def synchronize(self) -> None:
		pass

	def reset(self) -> None:
		self._buffers.clear()

	def drift(self, h: float) -> None:
		self.sim._pos += h * self.sim._vel

	def kick(self, h: float) -> None:
		self.sim._vel += h * self.sim._acc

	def ensure_buffer(
		self,
		name: str,
		shape: Tuple[int, int],
		*,
		dtype: np.dtype | str = np.float64,
	) -> np.ndarray:
		rows = max(int(shape[0]), 0)
		cols = max(int(shape[1]), 0)
		req_dtype = np.dtype(dtype)

		buf = self._buffers.get(name)

		need_realloc = (
			not isinstance(buf, np.ndarray)
			or buf.ndim != 2
			or buf.shape[0] < rows
			or buf.shape[1] < cols
			or buf.dtype != req_dtype
		)

		if need_realloc:
			new_rows = max(int(math.ceil(rows * 1.5)), rows)
			new_cols = max(int(math.ceil(cols * 1.5)), cols)
			buf = np.empty((new_rows, new_cols), dtype=req_dtype)
			self._buffers[name] = buf

		return buf[:rows, :cols]
