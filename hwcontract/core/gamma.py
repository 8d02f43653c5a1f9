# Directional generators and chiral vertices of the weak Hamiltonian.
#
# gamma_mu for mu = 0, 1, 2, 3 is (t, x, y, z), matching the ordering of the
# lattice axes. The chiral vertices carry twice the projector:
#   GammaL(g) = (1 - gamma_5) g = 2 P_L g
#   GammaR(g) = (1 + gamma_5) g = 2 P_R g

from hwcontract.core.fields import Gamma


G5 = 5
CHIRALITIES = ("L", "R")


def gmu(mu):
    if mu not in [0, 1, 2, 3]:
        raise ValueError(f"Invalid direction mu = {mu}")
    return Gamma(mu)


def GammaL(g: Gamma):
    return (1 - Gamma(G5)) * g


def GammaR(g: Gamma):
    return (1 + Gamma(G5)) * g


def chiral_insertion(mu, chirality="L"):
    if chirality == "L":
        return GammaL(gmu(mu))
    elif chirality == "R":
        return GammaR(gmu(mu))
    else:
        raise ValueError(f"Invalid chirality {chirality}, expected one of {CHIRALITIES}")


def sigma_munu(mu, nu):
    return (1 / 2j) * (Gamma(mu) * Gamma(nu) - Gamma(nu) * Gamma(mu))
