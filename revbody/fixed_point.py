"""
This module implements the fixed-point lattice codec used by the janus integrator.

Positions are mapped onto a signed 64-bit integer grid with quantum 1/scale by
multiplying with the scale and truncating toward zero, and mapped back by dividing.
Integer addition on the lattice is exactly associative and invertible, which is what
makes the janus update reversible bit-for-bit. The forcing term of the update is the
only quantity that crosses from floating point into the lattice during a step; it is
computed once in float64 and truncated once into arbitrary-precision Python integers,
and the accumulated result is narrowed back to storage width with an explicit range
check. headroom_issues reports scale/timestep choices that would overflow the lattice
or lose motion to truncation. Only positions are encoded; velocities are always
reconstructed by central difference.
"""

from __future__ import annotations
import math
from typing import List
import numpy as np
from numpy.typing import NDArray


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
HEADROOM_LIMIT = 2 ** 62

_to_int = np.frompyfunc(int, 1, 1)


class FixedPointOverflowError(OverflowError):
    pass


def _check_scale(scale: float) -> float:
    scale = float(scale)
    if not (math.isfinite(scale) and scale > 0.0):
        raise ValueError(f"fixed-point scale must be positive and finite, got {scale}")
    return scale


def encode(positions: NDArray[np.floating], scale: float) -> NDArray[np.int64]:
    scale = _check_scale(scale)
    scaled = np.asarray(positions, dtype=np.float64) * scale
    if not np.all(np.isfinite(scaled)):
        raise FixedPointOverflowError("cannot encode non-finite coordinates")
    truncated = np.trunc(scaled)
    if truncated.size and (truncated.min() < INT64_MIN or truncated.max() >= 2.0 ** 63):
        raise FixedPointOverflowError(
            f"coordinates exceed the fixed-point range at scale {scale:g}"
        )
    return truncated.astype(np.int64)


def decode(fixed: NDArray[np.integer], scale: float) -> NDArray[np.float64]:
    scale = _check_scale(scale)
    return np.asarray(fixed, dtype=np.int64).astype(np.float64) / scale


def forcing_term(acc: NDArray[np.floating], scale: float, dt: float) -> np.ndarray:
    # scale*dt*dt is evaluated left to right so +dt and -dt give identical bits
    kick = float(scale) * float(dt) * float(dt) * np.asarray(acc, dtype=np.float64)
    if not np.all(np.isfinite(kick)):
        raise FixedPointOverflowError("non-finite forcing term")
    return _to_int(np.trunc(kick)).astype(object)


def widen(fixed: NDArray[np.integer]) -> np.ndarray:
    return _to_int(np.asarray(fixed, dtype=np.int64)).astype(object)


def narrow(wide: np.ndarray) -> NDArray[np.int64]:
    wide = np.asarray(wide, dtype=object)
    if wide.size:
        lo = min(wide.flat)
        hi = max(wide.flat)
        if lo < INT64_MIN or hi > INT64_MAX:
            raise FixedPointOverflowError(
                f"fixed-point update out of range: [{lo}, {hi}]"
            )
    return wide.astype(np.int64)


def headroom_issues(
    positions: NDArray[np.floating],
    velocities: NDArray[np.floating],
    scale: float,
    dt: float,
) -> List[str]:
    issues: List[str] = []
    scale = float(scale)
    if not (math.isfinite(scale) and scale > 0.0):
        return [f"scale must be positive and finite, got {scale}"]

    pos = np.asarray(positions, dtype=np.float64)
    vel = np.asarray(velocities, dtype=np.float64)
    if pos.size == 0:
        return issues

    if not np.all(np.isfinite(pos)) or not np.all(np.isfinite(vel)):
        issues.append("non-finite positions or velocities")
        return issues

    extent = float(np.max(np.abs(pos))) * scale
    if extent >= HEADROOM_LIMIT:
        issues.append(
            f"largest coordinate maps to {extent:.3e} lattice units, "
            f"beyond the safe limit {float(HEADROOM_LIMIT):.3e}"
        )

    step = np.abs(vel) * abs(float(dt)) * scale
    moving = vel != 0.0
    if np.any(moving & (step < 1.0)):
        issues.append(
            "per-step displacement of a moving body is below one lattice quantum; "
            "increase scale or dt"
        )
    if np.any(step >= HEADROOM_LIMIT):
        issues.append("per-step displacement exceeds the fixed-point range")
    return issues


__all__ = [
    "INT64_MIN",
    "INT64_MAX",
    "FixedPointOverflowError",
    "encode",
    "decode",
    "forcing_term",
    "widen",
    "narrow",
    "headroom_issues",
]
