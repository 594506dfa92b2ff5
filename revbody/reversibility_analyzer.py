import numpy as np
import pandas as pd
from typing import Dict, List, Optional
from .simulation import NBodySimulation
from .diagnostics import Diagnostics
from .fixed_point import FixedPointOverflowError

"""
This module measures how well the janus integrator lives up to its promise of exact time reversibility. The ReversibilityAnalyzer class runs a single forward/backward experiment on a simulation in place: it resets and bootstraps the janus scheme, takes a first step to obtain the reference positions, velocities, energy and angular momentum, integrates forward while tracking the relative energy error, flips the generations, negates the timestep and integrates back the same number of steps, then flips again so the lattice can be compared with its post-bootstrap values. Every run ends with an outcome: exact, inexact, overflow (the lattice ran out of range), step_failed (a step reported failure, for instance on allocation) or empty (no bodies or a zero timestep). The BatchReversibilityAnalyzer class runs many simulations, keeps one row per run with its outcome in a pandas DataFrame, and summarizes the batch by outcome counts, the fraction of bit-exact round trips, the number of bootstrap epochs and the worst energy error, with CSV export of the rows. It assumes the simulations are configured with a lattice scale suited to the extent of the system.


"""

EXACT = "exact"
INEXACT = "inexact"
OVERFLOW = "overflow"
STEP_FAILED = "step_failed"
EMPTY = "empty"

OUTCOMES = (EXACT, INEXACT, OVERFLOW, STEP_FAILED, EMPTY)


class ReversibilityAnalyzer:
	def __init__(self, sim: NBodySimulation, n_steps: int = 1000, dt: float = 0.01) -> None:
		self.sim = sim
		self.n_steps = max(1, int(n_steps))
		self.dt = float(dt)
		self.diagnostics = Diagnostics(sim)
		self.outcome: Optional[str] = None
		self.failure_message = ""

	def _relative_energy_error(self, e: float, e0: float) -> float:
		if e0 == 0.0:
			return abs(e - e0)
		return abs((e - e0) / e0)

	def _steps(self, n: int) -> bool:
		for _ in range(n):
			if not self.sim.step():
				return False
		return True

	def _leg(self, n: int, e0: float) -> tuple[bool, float]:
		max_err = 0.0
		for _ in range(n):
			if not self.sim.step():
				return False, max_err
			max_err = max(max_err, self._relative_energy_error(self.diagnostics.energy(), e0))
		return True, max_err

	def _fail(self, outcome: str, message: str) -> Dict[str, float]:
		self.outcome = outcome
		self.failure_message = message
		print(f"[warning] reversibility run ended with {outcome}: {message}")
		return {}

	def _backward_leg(self, janus) -> bool:
		sim = self.sim
		janus.flip()
		sim.dt = -self.dt
		try:
			return self._steps(self.n_steps)
		finally:
			janus.flip()
			sim.dt = self.dt

	def run_reversibility_analysis(self) -> Dict[str, float]:
		sim = self.sim
		self.outcome = None
		self.failure_message = ""
		if sim.n_bodies == 0 or self.dt == 0.0:
			return self._fail(EMPTY, "simulation has no bodies or dt is zero")

		sim.integrator = "janus"
		sim.dt = self.dt
		janus = sim.scheme("janus")
		janus.reset()

		try:
			if not janus.bootstrap():
				return self._fail(STEP_FAILED, "bootstrap failed")
			prev0, curr0 = janus.fixed_state()

			if not self._steps(1):
				return self._fail(STEP_FAILED, "first step failed")
			pos1 = sim._pos.copy()
			e0 = self.diagnostics.energy()
			L0 = self.diagnostics.angular_momentum()

			ok, max_err = self._leg(self.n_steps - 1, e0)
			if not ok:
				return self._fail(STEP_FAILED, "forward leg failed")
			if not self._backward_leg(janus):
				return self._fail(STEP_FAILED, "backward leg failed")
		except FixedPointOverflowError as exc:
			sim.dt = self.dt
			return self._fail(OVERFLOW, str(exc))

		prev, curr = janus.fixed_state()
		lattice_exact = bool(np.array_equal(prev, prev0) and np.array_equal(curr, curr0))
		pos_err = float(np.max(np.abs(sim._pos - pos1)))
		L = self.diagnostics.angular_momentum()
		L0_norm = float(np.linalg.norm(L0))
		L_err = float(np.linalg.norm(L - L0))
		if L0_norm > 0.0:
			L_err /= L0_norm

		is_reversible = lattice_exact and pos_err == 0.0
		self.outcome = EXACT if is_reversible else INEXACT
		return {
			'n_bodies': sim.n_bodies,
			'n_steps': self.n_steps,
			'dt': self.dt,
			'scale': janus.scale,
			'max_energy_error': max_err,
			'final_energy_error': self._relative_energy_error(self.diagnostics.energy(), e0),
			'angular_momentum_error': L_err,
			'position_roundtrip_error': pos_err,
			'lattice_roundtrip_exact': lattice_exact,
			'bootstrap_count': janus.bootstrap_count,
			'is_reversible': is_reversible,
		}


class BatchReversibilityAnalyzer:
	def __init__(self, n_steps: int = 1000, dt: float = 0.01) -> None:
		self.n_steps = n_steps
		self.dt = dt
		self.frame = pd.DataFrame()

	def _row(self, i: int, sim: NBodySimulation) -> Dict[str, object]:
		analyzer = ReversibilityAnalyzer(sim, self.n_steps, self.dt)
		row: Dict[str, object] = {'simulation_id': i, 'n_bodies': sim.n_bodies}
		row.update(analyzer.run_reversibility_analysis())
		row['outcome'] = analyzer.outcome
		row['failure'] = analyzer.failure_message
		if analyzer.outcome == INEXACT:
			print(f"[warning] simulation {i}: round trip off by "
				  f"{row['position_roundtrip_error']:.3e}")
		return row

	def analyze_batch(self, simulations: List[NBodySimulation], show_progress: bool = True) -> pd.DataFrame:
		rows = []
		for i, sim in enumerate(simulations):
			rows.append(self._row(i, sim))
			if show_progress:
				print(f"  [{i + 1}/{len(simulations)}] {rows[-1]['outcome']}")
		self.frame = pd.DataFrame(rows)
		return self.frame

	def outcome_counts(self) -> pd.Series:
		if self.frame.empty:
			return pd.Series(0, index=list(OUTCOMES), dtype=int)
		return self.frame['outcome'].value_counts().reindex(list(OUTCOMES), fill_value=0)

	def summary(self) -> Dict[str, float]:
		counts = self.outcome_counts()
		n_runs = int(len(self.frame))
		completed = self.frame[self.frame['outcome'].isin([EXACT, INEXACT])] if n_runs else self.frame
		n_completed = int(len(completed))
		result: Dict[str, float] = {'n_runs': n_runs, 'n_completed': n_completed}
		for outcome in OUTCOMES:
			result[f'n_{outcome}'] = int(counts[outcome])
		if n_completed:
			result['exact_fraction'] = float(completed['lattice_roundtrip_exact'].astype(bool).mean())
			result['total_bootstraps'] = int(completed['bootstrap_count'].sum())
			result['worst_energy_error'] = float(completed['max_energy_error'].max())
		else:
			result['exact_fraction'] = float('nan')
			result['total_bootstraps'] = 0
			result['worst_energy_error'] = float('nan')
		return result

	def failed_runs(self) -> pd.DataFrame:
		if self.frame.empty:
			return self.frame
		mask = self.frame['outcome'].isin([OVERFLOW, STEP_FAILED, EMPTY])
		return self.frame.loc[mask, ['simulation_id', 'n_bodies', 'outcome', 'failure']]

	def save_batch_results(self, filename: str) -> bool:
		if self.frame.empty:
			print("[error] no batch results to save; run analyze_batch first")
			return False
		self.frame.to_csv(filename, index=False)
		return True
