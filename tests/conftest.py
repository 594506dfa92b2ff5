import math

import pytest

from revbody import Body, NBodySimulation, SimConfig
from revbody.diagnostics import reset_diag_counts


@pytest.fixture(autouse=True)
def _fresh_diag_counts():
    reset_diag_counts()
    yield
    reset_diag_counts()


def make_sim(bodies, *, dt=0.01, scale=1.0e16, mode="janus", companion="whfast", G=1.0):
    cfg = SimConfig(
        G=G,
        initial_dt=dt,
        integrator_mode=mode,
        janus_scale=scale,
        janus_companion=companion,
        diag_prints=False,
    )
    return NBodySimulation(cfg, bodies=bodies)


def two_body_bodies(m2=1.0e-3, a=1.0):
    v = math.sqrt((1.0 + m2) / a)
    return [
        Body(1.0),
        Body(m2, x=a, vy=v),
    ]


def three_body_bodies():
    return [
        Body(1.0),
        Body(1.0e-3, x=1.0, vy=math.sqrt(1.001)),
        Body(2.0e-3, x=-1.6, vy=-1.0 / math.sqrt(1.6), z=0.05),
    ]


@pytest.fixture
def two_body_sim():
    sim = make_sim(two_body_bodies())
    sim.move_to_com()
    return sim


@pytest.fixture
def three_body_sim():
    sim = make_sim(three_body_bodies())
    sim.move_to_com()
    return sim
