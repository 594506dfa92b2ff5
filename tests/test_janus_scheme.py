import numpy as np
import pytest

from revbody import (
    Body,
    Diagnostics,
    FixedPointOverflowError,
    JanusScheme,
    NBodySimulation,
    SimConfig,
    WHFastScheme,
)
from revbody.fixed_point import encode

from conftest import make_sim, two_body_bodies


def _run(sim, n):
    for _ in range(n):
        sim.step()


def _reverse(sim):
    sim.scheme("janus").flip()
    sim.dt = -sim.dt


def test_scheme_for_janus_mode():
    sim = make_sim([Body(1.0)])
    assert isinstance(sim.scheme(), JanusScheme)
    assert sim.scheme().scale == 1.0e16


def test_free_particle_scenario():
    sim = make_sim([Body(1.0, x=1.0, vy=1.0)], dt=0.01, scale=1.0e6)
    janus = sim.scheme("janus")

    _run(sim, 100)
    np.testing.assert_allclose(janus.positions()[0], [1.0, 1.0, 0.0], atol=1.5e-6)
    np.testing.assert_allclose(sim._vel[0], [0.0, 1.0, 0.0])
    assert sim.t == pytest.approx(1.0)

    _reverse(sim)
    _run(sim, 100)
    np.testing.assert_array_equal(sim._pos[0], [1.0, 0.0, 0.0])
    np.testing.assert_array_equal(janus.generation("prev"), [[1_000_000, 0, 0]])
    assert sim.t == pytest.approx(0.0, abs=1e-12)
    assert janus.bootstrap_count == 1


@pytest.mark.parametrize("companion", ["whfast", "verlet"])
def test_bootstrap_steps_once_into_the_past(companion):
    sim = make_sim([Body(1.0, x=1.0, vy=1.0)], dt=0.01, scale=1.0e6, companion=companion)
    janus = sim.scheme("janus")
    assert janus.bootstrap()
    prev, curr = janus.fixed_state()
    np.testing.assert_array_equal(curr, [[1_000_000, 0, 0]])
    np.testing.assert_array_equal(prev, [[1_000_000, -10_000, 0]])


def test_free_particle_has_no_drift():
    sim = make_sim([Body(2.5, x=0.25, y=-3.0, vx=0.3, vy=-0.7, vz=0.125)], dt=0.01, scale=1.0e9)
    janus = sim.scheme("janus")
    janus.bootstrap()
    prev0, curr0 = janus.fixed_state()
    step = curr0 - prev0

    _run(sim, 1000)
    prev, curr = janus.fixed_state()
    np.testing.assert_array_equal(curr - prev, step)
    np.testing.assert_array_equal(curr, curr0 + 1000 * step)


def test_forward_flip_backward_restores_bootstrap_buffers(three_body_sim):
    sim = three_body_sim
    janus = sim.scheme("janus")
    janus.bootstrap()
    prev0, curr0 = janus.fixed_state()

    _run(sim, 300)
    assert not np.array_equal(janus.generation("curr"), curr0)

    _reverse(sim)
    _run(sim, 300)
    janus.flip()
    prev, curr = janus.fixed_state()
    np.testing.assert_array_equal(prev, prev0)
    np.testing.assert_array_equal(curr, curr0)


def test_round_trip_energy_is_exact(two_body_sim):
    sim = two_body_sim
    diag = Diagnostics(sim)

    sim.step()
    pos1 = sim._pos.copy()
    vel1 = sim._vel.copy()
    e1 = diag.energy()

    _run(sim, 499)
    assert not np.array_equal(sim._pos, pos1)

    _reverse(sim)
    _run(sim, 500)
    np.testing.assert_array_equal(sim._pos, pos1)
    np.testing.assert_array_equal(sim._vel, vel1)
    assert diag.energy() == e1


def test_energy_error_is_bounded(two_body_sim):
    sim = two_body_sim
    diag = Diagnostics(sim)
    sim.step()
    e0 = diag.energy()
    _run(sim, 1000)
    assert abs((diag.energy() - e0) / e0) < 1e-3


def test_bootstrap_runs_once_per_epoch(two_body_sim):
    sim = two_body_sim
    whfast = sim.scheme("whfast")
    calls = []
    original = whfast.part1

    def counting_part1():
        calls.append(sim.dt)
        return original()

    whfast.part1 = counting_part1

    _run(sim, 50)
    janus = sim.scheme("janus")
    assert janus.bootstrap_count == 1
    assert len(calls) == 1
    assert calls[0] == -0.01


def test_particle_count_change_rebootstraps(two_body_sim):
    sim = two_body_sim
    janus = sim.scheme("janus")
    _run(sim, 5)
    assert janus.allocated_n == 2

    sim.add(Body(1.0e-4, x=2.0, vy=0.7))
    expected_curr = encode(sim._pos, janus.scale)
    sim.step()
    assert janus.bootstrap_count == 2
    assert janus.allocated_n == 3
    for role in ("prev", "curr", "next", "scratch"):
        assert janus.generation(role).shape == (3, 3)
    np.testing.assert_array_equal(janus.generation("prev"), expected_curr)

    _run(sim, 5)
    assert janus.bootstrap_count == 2

    sim.remove(1)
    sim.step()
    assert janus.bootstrap_count == 3
    assert janus.allocated_n == 2


def test_bootstrap_restores_host_context(two_body_sim):
    sim = two_body_sim
    sim.t = 3.5
    pos0 = sim._pos.copy()
    vel0 = sim._vel.copy()

    assert sim.scheme("janus").bootstrap()
    assert sim.t == 3.5
    assert sim.dt == 0.01
    assert sim.status == "running"
    assert sim.integrator == "janus"
    np.testing.assert_array_equal(sim._pos, pos0)
    np.testing.assert_array_equal(sim._vel, vel0)


def test_bootstrap_restores_host_when_companion_fails(two_body_sim, monkeypatch):
    sim = two_body_sim
    pos0 = sim._pos.copy()

    def exploding_part1(self):
        self.sim._pos += 1.0
        self.sim.t += 7.0
        raise RuntimeError("companion failed")

    monkeypatch.setattr(WHFastScheme, "part1", exploding_part1)
    janus = sim.scheme("janus")
    with pytest.raises(RuntimeError):
        janus.bootstrap()

    assert sim.integrator == "janus"
    assert sim.dt == 0.01
    assert sim.t == 0.0
    np.testing.assert_array_equal(sim._pos, pos0)
    assert janus.allocated_n == 0
    assert not janus._in_bootstrap


def test_bootstrap_restores_status_after_abnormal_companion_step(two_body_sim, monkeypatch):
    sim = two_body_sim

    def failing_part1(self):
        self.sim.status = "error"
        return False

    monkeypatch.setattr(WHFastScheme, "part1", failing_part1)
    janus = sim.scheme("janus")
    assert janus.bootstrap()
    assert sim.status == "running"
    prev, curr = janus.fixed_state()
    np.testing.assert_array_equal(prev, curr)


def test_flip_swaps_prev_and_curr_only(two_body_sim):
    sim = two_body_sim
    janus = sim.scheme("janus")
    _run(sim, 3)
    prev, curr = janus.fixed_state()
    nxt = janus.generation("next")
    t = sim.t

    assert janus.flip()
    np.testing.assert_array_equal(janus.generation("prev"), curr)
    np.testing.assert_array_equal(janus.generation("curr"), prev)
    np.testing.assert_array_equal(janus.generation("next"), nxt)
    assert sim.t == t


def test_flip_before_bootstrap_is_ignored():
    sim = make_sim([Body(1.0)])
    assert not sim.scheme("janus").flip()


def test_reset_releases_buffers_and_is_idempotent(two_body_sim):
    sim = two_body_sim
    janus = sim.scheme("janus")
    _run(sim, 3)
    sim.integrator_reset()
    assert janus.allocated_n == 0
    for role in ("prev", "curr", "next", "scratch"):
        assert janus.generation(role).shape == (0, 3)
    sim.integrator_reset()
    assert janus.allocated_n == 0

    sim.step()
    assert janus.bootstrap_count == 2
    assert janus.allocated_n == 2


def test_scale_is_fixed_while_allocated(two_body_sim):
    janus = two_body_sim.scheme("janus")
    janus.bootstrap()
    janus.scale = 1.0e10
    assert janus.scale == 1.0e16
    janus.reset()
    janus.scale = 1.0e10
    assert janus.scale == 1.0e10
    janus.scale = -1.0
    assert janus.scale == 1.0e10


def test_part2_and_synchronize_do_nothing(two_body_sim):
    sim = two_body_sim
    janus = sim.scheme("janus")
    _run(sim, 2)
    pos = sim._pos.copy()
    vel = sim._vel.copy()
    prev, curr = janus.fixed_state()
    janus.part2()
    sim.synchronize()
    np.testing.assert_array_equal(sim._pos, pos)
    np.testing.assert_array_equal(sim._vel, vel)
    np.testing.assert_array_equal(janus.generation("prev"), prev)
    np.testing.assert_array_equal(janus.generation("curr"), curr)


def test_steps_are_deterministic():
    a = make_sim(two_body_bodies())
    b = make_sim(two_body_bodies())
    _run(a, 50)
    _run(b, 50)
    np.testing.assert_array_equal(a.scheme("janus").generation("curr"), b.scheme("janus").generation("curr"))
    np.testing.assert_array_equal(a._vel, b._vel)


def test_time_advances_by_dt(two_body_sim):
    _run(two_body_sim, 10)
    assert two_body_sim.t == pytest.approx(0.1)


def test_zero_dt_leaves_state_alone(two_body_sim):
    sim = two_body_sim
    sim.dt = 0.0
    pos = sim._pos.copy()
    sim.step()
    np.testing.assert_array_equal(sim._pos, pos)
    assert sim.scheme("janus").allocated_n == 0


def test_out_of_range_positions_raise_and_keep_host_intact():
    sim = make_sim([Body(1.0, x=1.0e4)], scale=1.0e16)
    with pytest.raises(FixedPointOverflowError):
        sim.step()
    assert sim.integrator == "janus"
    assert sim.dt == 0.01
    assert sim._pos[0, 0] == 1.0e4


def test_allocation_failure_sets_error_status(two_body_sim, monkeypatch):
    sim = two_body_sim
    janus = sim.scheme("janus")

    def no_memory(n):
        raise MemoryError

    monkeypatch.setattr(janus, "_allocate", no_memory)
    assert sim.step() is False
    assert sim.status == "error"
    assert janus.allocated_n == 0


def test_lattice_overflow_leaves_generations_untouched():
    sim = make_sim([Body(1.0, x=1.0)], scale=1.0e18)
    janus = sim.scheme("janus")
    janus.bootstrap()
    janus._gen("prev")[0, 0] = -(2**63 - 1)
    prev, curr = janus.fixed_state()
    vel = sim._vel.copy()

    with pytest.raises(FixedPointOverflowError):
        sim.step()
    np.testing.assert_array_equal(janus.generation("prev"), prev)
    np.testing.assert_array_equal(janus.generation("curr"), curr)
    np.testing.assert_array_equal(sim._vel, vel)
    assert sim.t == 0.0


def _printing_sim(bodies, **cfg):
    return NBodySimulation(SimConfig(initial_dt=0.01, **cfg), bodies=bodies)


def test_bootstrap_refuses_reentry(two_body_sim, monkeypatch):
    sim = two_body_sim
    janus = sim.scheme("janus")
    inner = []
    part1 = WHFastScheme.part1

    def reentrant_part1(self):
        inner.append(janus.bootstrap())
        return part1(self)

    monkeypatch.setattr(WHFastScheme, "part1", reentrant_part1)
    assert janus.bootstrap()
    assert inner == [False]
    assert janus.allocated_n == 2
    assert janus.bootstrap_count == 1
    assert not janus._in_bootstrap


@pytest.mark.parametrize("companion", ["janus", "rk4"])
def test_invalid_companion_falls_back_to_whfast(companion, capsys):
    bodies = two_body_bodies()
    sim = _printing_sim(bodies, janus_companion=companion)
    reference = make_sim(bodies, companion="whfast")
    capsys.readouterr()

    janus = sim.scheme("janus")
    assert janus.bootstrap()
    assert "using 'whfast'" in capsys.readouterr().out
    assert isinstance(sim.scheme("whfast"), WHFastScheme)

    reference.scheme("janus").bootstrap()
    prev, curr = janus.fixed_state()
    ref_prev, ref_curr = reference.scheme("janus").fixed_state()
    np.testing.assert_array_equal(prev, ref_prev)
    np.testing.assert_array_equal(curr, ref_curr)


def test_bootstrap_reports_headroom_issues(capsys):
    sim = _printing_sim([Body(1.0, x=1.0, vy=1.0e-20)], janus_scale=1.0e6)
    janus = sim.scheme("janus")
    assert janus.bootstrap()
    assert "below one lattice quantum" in capsys.readouterr().out
    assert any("below one lattice quantum" in issue for issue in janus.check_headroom())


def test_headroom_reports_large_coordinates(capsys):
    sim = _printing_sim([Body(1.0, x=5.0e2, vy=1.0)], janus_scale=1.0e16)
    assert sim.scheme("janus").bootstrap()
    assert "safe limit" in capsys.readouterr().out
