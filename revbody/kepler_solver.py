"""
This module implements Kepler's equation solver using Stiefel-Scheifele universal
variables.

The UniversalVariableKeplerSolver class provides two-body orbital propagation in three
dimensions through the propagate method, using Newton-Raphson iteration on the universal
anomaly, Stumpff c-functions evaluated with argument quartering for numerical stability,
and support for all orbit types (elliptic, parabolic, hyperbolic) and for negative time
steps. The solver drives the Kepler drift of the WHFast companion scheme. It assumes
Newtonian gravity; a non-positive gravitational parameter degenerates to straight-line
motion.
"""

from __future__ import annotations
import math
import numpy as np


class UniversalVariableKeplerSolver:
	max_iterations: int = 64

	def _cfunc(self, z: float):
		z = float(z)
		n = 0
		while abs(z) > 0.1:
			z *= 0.25
			n += 1
		c0 = 1 - z / 2 * (1 - z / 12 * (1 - z / 30 * (1 - z / 56 * (1 - z / 90 * (1 - z / 132)))))
		c1 = 1 - z / 6 * (1 - z / 20 * (1 - z / 42 * (1 - z / 72 * (1 - z / 110 * (1 - z / 156)))))
		c2 = 0.5 * (1 - z / 12 * (1 - z / 30 * (1 - z / 56 * (1 - z / 90 * (1 - z / 132 * (1 - z / 182))))))
		c3 = (1 - z / 20 * (1 - z / 42 * (1 - z / 72 * (1 - z / 110 * (1 - z / 156 * (1 - z / 210)))))) / 6
		while n:
			# doubling formulas, c_k(4z) from c_k(z)
			c0_h, c1_h, c2_h, c3_h = c0, c1, c2, c3
			c0 = 2 * c0_h * c0_h - 1
			c1 = c0_h * c1_h
			c2 = 0.5 * c1_h * c1_h
			c3 = 0.25 * (c3_h + c1_h * c2_h)
			z *= 4
			n -= 1
		return c0, c1, c2, c3

	def _propagate_single(self, r, v, mu, dt):
		r = np.asarray(r, dtype=float)
		v = np.asarray(v, dtype=float)
		mu = float(mu)
		dt = float(dt)
		r0 = float(math.sqrt(np.dot(r, r)))
		if r0 < 1e-14 or mu <= 0.0 or dt == 0.0:
			return r + v * dt, v.copy()
		sqrt_mu = math.sqrt(mu)
		vr0 = float(np.dot(r, v) / r0)
		v2 = float(np.dot(v, v))
		alpha = 2 / r0 - v2 / mu
		if alpha > 1e-12:
			chi = sqrt_mu * alpha * dt
		else:
			chi = sqrt_mu * dt / r0
		sigma0 = r0 * vr0 / sqrt_mu
		prev1 = math.nan
		prev2 = math.nan
		for _ in range(self.max_iterations):
			z = alpha * chi * chi
			_, c1, c2, c3 = self._cfunc(z)
			chi2 = chi * chi
			f = sigma0 * chi2 * c2 + (1 - alpha * r0) * chi2 * chi * c3 + r0 * chi - sqrt_mu * dt
			fp = sigma0 * chi * c1 + (1 - alpha * r0) * chi2 * c2 + r0
			if fp == 0:
				break
			chi_new = chi - f / fp
			prev2 = prev1
			prev1 = chi_new
			if chi_new == chi or chi_new == prev2:
				chi = chi_new
				break
			chi = chi_new
		z = alpha * chi * chi
		_, c1, c2, c3 = self._cfunc(z)
		chi2 = chi * chi
		f = 1 - chi2 * c2 / r0
		g = dt - chi2 * chi * c3 / sqrt_mu
		r_vec = f * r + g * v
		rn = float(math.sqrt(np.dot(r_vec, r_vec)))
		if rn == 0:
			return r_vec, v.copy()
		fdot = sqrt_mu / (rn * r0) * (alpha * chi2 * chi * c3 - chi)
		gdot = 1 - chi2 * c2 / rn
		v_vec = fdot * r + gdot * v
		return r_vec, v_vec

	def propagate(self, r, v, mu, dt):
		r = np.asarray(r, dtype=float)
		v = np.asarray(v, dtype=float)
		mu = float(mu)
		dt = float(dt)
		if r.ndim == 1:
			return self._propagate_single(r, v, mu, dt)
		out_r = []
		out_v = []
		for ri, vi in zip(r, v):
			rn, vn = self._propagate_single(ri, vi, mu, dt)
			out_r.append(rn)
			out_v.append(vn)
		return np.array(out_r), np.array(out_v)
