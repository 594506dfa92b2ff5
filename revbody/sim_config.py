from __future__ import annotations
from dataclasses import dataclass
import math

"""
This central configuration module defines all simulation parameters through the SimConfig dataclass. Key parameters include the gravitational constant, the initial signed timestep, the active integrator mode, the fixed-point lattice scale and companion scheme used by the janus integrator, and the switches controlling rate-limited diagnostic printing. The class provides a copy method for configuration inheritance and a validate method that reports inconsistent settings as human-readable issues. It serves as the single source of truth for simulation behavior, with all components referencing this configuration. The module assumes reasonable default values and that users understand the physical implications of parameter choices.

"""
_ALLOWED_MODES = {
    "janus",
    "whfast",
    "verlet",
}

_COMPANION_MODES = {
    "whfast",
    "verlet",
}

@dataclass
class SimConfig:
    G:               float = 1.0
    initial_dt:      float = 0.01
    softening:       float = 0.0
    integrator_mode: str = "janus"
    janus_scale:     float = 1.0e16
    janus_companion: str = "whfast"
    diag_prints:     bool = True
    diag_print_limit: int = 3
    diag_print_interval: int = 1000

    def copy(self) -> "SimConfig":
        new = object.__new__(SimConfig)
        new.__dict__ = dict(getattr(self, "__dict__", {}))
        return new

    def validate(self) -> list[str]:
        issues: list[str] = []
        if self.integrator_mode not in _ALLOWED_MODES:
            issues.append(f"unknown integrator_mode {self.integrator_mode!r}")
        if self.janus_companion not in _COMPANION_MODES:
            issues.append(
                f"janus_companion must be one of {sorted(_COMPANION_MODES)}, "
                f"got {self.janus_companion!r}"
            )
        scale = float(self.janus_scale)
        if not (math.isfinite(scale) and scale > 0.0):
            issues.append(f"janus_scale must be positive and finite, got {scale}")
        dt = float(self.initial_dt)
        if not math.isfinite(dt) or dt == 0.0:
            issues.append(f"initial_dt must be finite and non-zero, got {dt}")
        if self.softening < 0.0:
            issues.append(f"softening must be non-negative, got {self.softening}")
        return issues
