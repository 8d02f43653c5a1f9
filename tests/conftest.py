import numpy as np
import pytest

import hwcontract.core as cr
from hwcontract.environment import Environment
from hwcontract.io import set_backend


set_backend("numpy")


def site_matrix(mat):
    # [spin sink, spin source, color sink, color source] -> 12 x 12, spin major.
    Ns, _, Nc, _ = mat.shape
    return np.transpose(mat, (0, 2, 1, 3)).reshape(Ns * Nc, Ns * Nc)


def spin_matrix(gamma, Nc=3):
    return np.kron(gamma.mat, np.identity(Nc))


@pytest.fixture
def geometry():
    return cr.QCD_geometry([4, 2, 2, 2])


@pytest.fixture
def random_props(geometry):
    np.random.seed(1234)
    q1 = cr.SlicedPropagator(geometry)
    q1.init_random()
    q2, q3, q4 = cr.Propagator(geometry), cr.Propagator(geometry), cr.Propagator(geometry)
    for q in [q2, q3, q4]:
        q.init_random()
    return q1, q2, q3, q4


@pytest.fixture
def env(geometry, random_props):
    env = Environment(geometry)
    for name, q in zip(["q1", "q2", "q3", "q4"], random_props):
        env.create(name, q)
    return env


@pytest.fixture
def par(tmp_path):
    return {"q1": "q1", "q2": "q2", "q3": "q3", "q4": "q4", "tSnk": 1, "output": str(tmp_path / "hw")}
