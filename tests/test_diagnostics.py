import math

import numpy as np
import pytest

from revbody import Body, Diagnostics, NBodySimulation, SimConfig, diag_print

from conftest import make_sim


def test_energy_of_static_pair():
    sim = make_sim([Body(1.0), Body(2.0, x=2.0)])
    diag = Diagnostics(sim)
    assert diag.kinetic_energy() == 0.0
    assert diag.potential_energy() == pytest.approx(-1.0)
    assert diag.energy_hp() == pytest.approx(diag.energy(), rel=1e-14)


def test_momenta_and_center_of_mass():
    sim = make_sim([Body(1.0, x=1.0, vy=2.0), Body(3.0, x=-1.0, vy=-1.0)])
    diag = Diagnostics(sim)
    np.testing.assert_allclose(diag.linear_momentum(), [0.0, -1.0, 0.0])
    np.testing.assert_allclose(diag.angular_momentum(), [0.0, 0.0, 5.0])
    com, vcom = diag.center_of_mass()
    np.testing.assert_allclose(com, [-0.5, 0.0, 0.0])
    np.testing.assert_allclose(vcom, [0.0, -0.25, 0.0])


def test_kinetic_energy_free_body():
    sim = make_sim([Body(2.0, vx=3.0, vz=4.0)])
    assert Diagnostics(sim).kinetic_energy() == pytest.approx(25.0)
    assert math.isfinite(Diagnostics(sim).energy_hp())


def test_diag_print_is_rate_limited(capsys):
    cfg = SimConfig(diag_print_limit=2, diag_print_interval=3)
    for _ in range(6):
        diag_print(cfg, "k", "[diag] message")
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "[diag] message",
        "[diag] message",
        "[diag] message (occurrence #3)",
        "[diag] message (occurrence #6)",
    ]


def test_diag_print_can_be_disabled(capsys):
    diag_print(SimConfig(diag_prints=False), "k", "hidden")
    assert capsys.readouterr().out == ""


def test_bootstrap_announces_reallocation(capsys):
    cfg = SimConfig(initial_dt=0.01)
    sim = NBodySimulation(cfg, bodies=[Body(1.0, vy=1.0)])
    sim.step()
    assert "reallocating generation buffers for N=1" in capsys.readouterr().out
