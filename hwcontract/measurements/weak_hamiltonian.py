r"""Weak Hamiltonian current-current contractions, Eye type.

These contractions are generated by the Q1 and Q2 operators in the physical
basis (see e.g. Fig 3 of arXiv:1507.03094).

Schematics::

                   q4                 |
                 /-<-¬                |
                /     \               |             q2           q3
                \     /               |        /----<------*------<----¬
           q2    \   /    q3          |       /          /-*-¬          \
      /-----<-----* *-----<----¬      |      /          /     \          \
   i *            H_W           * f   |   i *           \     /  q4      * f
      \                        /      |      \           \->-/          /
       \                      /       |       \                        /
        \---------->---------/        |        \----------->----------/
                  q1                  |                   q1
                                      |
               Saucer (S)             |                  Eye (E)

    S: trace(q3*g5*q1*adj(q2)*g5*gL[mu]*q4*gL[mu])
    E: trace(q3*g5*q1*adj(q2)*g5*gL[mu])*trace(q4*gL[mu])

q1 must be sink smeared, i.e. a `SlicedPropagator`.
"""

import math
import typing as t
from dataclasses import field
from multiprocessing.pool import ThreadPool

from pydantic import Field
from pydantic.dataclasses import dataclass

import hwcontract.core as cr
import hwcontract.measurements.contract_funcs as cf
from hwcontract.environment import Environment, ScratchPool
from hwcontract.errors import AllocationError, DimensionMismatchError, ProjectionError
from hwcontract.io import Result, ResultWriter
from hwcontract.utils import get_logger

Chirality = t.Literal["L", "R"]


@dataclass
class WeakHamiltonianPar:
    """Parameters of the weak Hamiltonian contraction modules.

    Attributes
    ----------
    q1: str
        Sink-smeared propagator, only its `tSnk` time slice is used.
    q2, q3: str
        Propagators of the body of the diagrams.
    q4: str
        Propagator closing the loop.
    tSnk: int
        Sink time slice of `q1`.
    output: str
        Result file stem, `.h5` is appended.
    chirality: tuple
        Chirality of the vertex on the body and on the loop. ("L", "L") is
        the current-current operator.
    momentum: list
        Spatial momentum of the projection, in units of 2 pi / L.
    nthreads: int
        Threads used to build the sub-diagrams of the directions mu.
    """

    q1: str
    q2: str
    q3: str
    q4: str
    output: str
    tSnk: int = Field(default=0, ge=0)
    chirality: t.Tuple[Chirality, Chirality] = ("L", "L")
    momentum: t.List[int] = field(default_factory=lambda: [0, 0, 0])
    nthreads: int = Field(default=1, ge=1)


class SubDiagramCache:
    """Saucer and Eye sub-diagrams of one execution, one entry per direction.

    The Eye body and loop are the traces of the Saucer body and loop. They are
    derived from the stored Saucer fields on first request and never rebuilt
    from the propagators.
    """

    def __init__(self, pool: ScratchPool, geometry: cr.QCD_geometry, nd: int):
        self.nd = nd
        self.S_body = [pool.field(cr.Propagator, geometry) for _ in range(nd)]
        self.S_loop = [pool.field(cr.Propagator, geometry) for _ in range(nd)]
        self.E_body = [pool.field(cr.Scalar, geometry) for _ in range(nd)]
        self.E_loop = [pool.field(cr.Scalar, geometry) for _ in range(nd)]
        self._saucer_ready = [False] * nd
        self._eye_ready = [False] * nd

    def build_saucer(self, mu, q1Snk, q2, q3, q4, chirality=("L", "L")):
        cf.make_se_body(q1Snk, q2, q3, cr.chiral_insertion(mu, chirality[0]), out=self.S_body[mu])
        cf.make_se_loop(q4, cr.chiral_insertion(mu, chirality[1]), out=self.S_loop[mu])
        self._saucer_ready[mu] = True

    def saucer(self, mu):
        if not self._saucer_ready[mu]:
            raise RuntimeError(f"Saucer sub-diagrams for mu = {mu} requested before being built")
        return self.S_body[mu], self.S_loop[mu]

    def eye(self, mu):
        if not self._eye_ready[mu]:
            body, loop = self.saucer(mu)
            cf.trace(body, out=self.E_body[mu])
            cf.trace(loop, out=self.E_loop[mu])
            self._eye_ready[mu] = True
        return self.E_body[mu], self.E_loop[mu]


class WeakHamiltonianEye:
    n_eye_diag = 2
    S_diag = 0
    E_diag = 1
    result_key = "HW_Eye"

    def __init__(self, name: str, par: WeakHamiltonianPar, env: Environment):
        self.name = name
        self.par = par
        self.env = env

    def get_input(self) -> t.List[str]:
        return [self.par.q1, self.par.q2, self.par.q3, self.par.q4]

    def get_output(self) -> t.List[str]:
        return []

    def setup(self):
        nd = self.env.get_nd()
        geometry = self.env.geometry
        prop_bytes = 16 * math.prod(cr.Propagator.shape(geometry))
        scalar_bytes = 16 * math.prod(cr.Scalar.shape(geometry))
        # S_body, S_loop, E_body, E_loop per direction, expbuf and tmp.
        self.scratch_bytes = nd * (2 * prop_bytes + 2 * scalar_bytes) + 2 * scalar_bytes
        get_logger().debug(f"'{self.name}': {nd} directions, {self.scratch_bytes} bytes of scratch")
        budget = self.env.max_scratch_bytes
        if budget is not None and self.scratch_bytes > budget:
            raise AllocationError(f"'{self.name}' needs {self.scratch_bytes} bytes of scratch, the budget is {budget}")

    def _resolve_inputs(self):
        env = self.env
        q1 = env.resolve(self.par.q1, cr.SlicedPropagator)
        q2 = env.resolve(self.par.q2, cr.Propagator)
        q3 = env.resolve(self.par.q3, cr.Propagator)
        q4 = env.resolve(self.par.q4, cr.Propagator)
        return q1, q2, q3, q4

    def _check_inputs(self, q1, q2, q3, q4):
        geometry = self.env.geometry
        for name, q in zip(self.get_input(), [q1, q2, q3, q4]):
            if q.geometry != geometry:
                raise DimensionMismatchError(f"Propagator '{name}' lives on {q.geometry}, the lattice is {geometry}")
        if not 0 <= self.par.tSnk < geometry.T:
            raise DimensionMismatchError(f"tSnk = {self.par.tSnk} outside [0, {geometry.T})")
        nd = self.env.get_nd()
        if nd > geometry.Nd:
            raise DimensionMismatchError(f"{nd} directions requested on a {geometry.Nd}-dimensional lattice")
        if nd < 1:
            raise ProjectionError(f"Cannot sum over {nd} spacetime directions")

    def _build_saucer(self, cache: SubDiagramCache, q1Snk, q2, q3, q4):
        def build(mu):
            cache.build_saucer(mu, q1Snk, q2, q3, q4, self.par.chirality)

        if self.par.nthreads > 1 and cache.nd > 1:
            with ThreadPool(processes=min(self.par.nthreads, cache.nd)) as pool:
                pool.map(build, range(cache.nd))
        else:
            for mu in range(cache.nd):
                build(mu)

    def make_diag(self, expbuf: cr.Scalar, name: str) -> Result:
        corr = cf.mom_proj(expbuf, self.par.momentum)
        return Result(
            name=name,
            corr=corr,
            q1=self.par.q1,
            q2=self.par.q2,
            q3=self.par.q3,
            q4=self.par.q4,
            tSnk=self.par.tSnk,
            metadata={
                "module": self.name,
                "chirality": "".join(self.par.chirality),
                "momentum": list(self.par.momentum),
            },
        )

    def contract(self) -> t.List[Result]:
        """Compute the Saucer and Eye correlators without writing them."""
        logger = get_logger()
        logger.info(
            f"Computing Weak Hamiltonian (Eye type) contractions '{self.name}' using quarks "
            f"'{self.par.q1}', '{self.par.q2}', '{self.par.q3}' and '{self.par.q4}'."
        )

        q1, q2, q3, q4 = self._resolve_inputs()
        self._check_inputs(q1, q2, q3, q4)
        geometry = self.env.geometry
        nd = self.env.get_nd()
        result = [None] * self.n_eye_diag

        with self.env.scratch() as pool:
            cache = SubDiagramCache(pool, geometry, nd)
            expbuf = pool.field(cr.Scalar, geometry)
            tmp = pool.field(cr.Scalar, geometry)

            # Get sink timeslice of q1.
            q1Snk = q1[self.par.tSnk]

            # Setup for S-type contractions.
            self._build_saucer(cache, q1Snk, q2, q3, q4)

            # Perform S-type contractions.
            cf.sum_mu((cf.trace_product(*cache.saucer(mu), out=tmp) for mu in range(nd)), out=expbuf)
            result[self.S_diag] = self.make_diag(expbuf, "HW_S")

            # Perform E-type contractions, recycling the S-type sub-expressions.
            cf.sum_mu((cf.product(*cache.eye(mu), out=tmp) for mu in range(nd)), out=expbuf)
            result[self.E_diag] = self.make_diag(expbuf, "HW_E")

            logger.debug(f"'{self.name}': scratch pool used {pool.nbytes} bytes")

        return result

    def execute(self) -> t.List[Result]:
        result = self.contract()
        filename = ResultWriter(self.par.output).write(self.result_key, result)
        get_logger().info(f"Wrote {len(result)} diagrams of '{self.name}' to {filename}")
        return result


def run_from_param(param: t.Dict, env: Environment, name: str = "weakHamiltonianEye") -> t.List[Result]:
    par = WeakHamiltonianPar(**param)
    module = WeakHamiltonianEye(name, par, env)
    module.setup()
    return module.execute()



if __name__ == "__main__":
    import numpy as np
    import hwcontract.utils as ut
    from hwcontract.io import set_backend

    set_backend("numpy")

    # Identity propagators, the closed forms are
    #   (L, L): S = E = 0
    #   (L, R): S = V3 * Nc * Nd * tr(2 (1 - g5)) = 96 V3, E = 0
    geometry = cr.QCD_geometry([4, 2, 2, 2])
    env = Environment(geometry)
    q1 = cr.SlicedPropagator(geometry)
    q1.init_identity()
    q = cr.Propagator(geometry)
    q.init_identity()
    env.create("q1", q1)
    env.create("q", q)

    par = {"q1": "q1", "q2": "q", "q3": "q", "q4": "q", "tSnk": 0, "output": "hw_eye_identity"}
    S, E = run_from_param(par, env)
    ut.check("Saucer LL", S.corr, np.zeros(geometry.T))
    ut.check("Eye LL", E.corr, np.zeros(geometry.T))

    par["chirality"] = ("L", "R")
    par["output"] = "hw_eye_identity_LR"
    S, E = run_from_param(par, env)
    ut.check("Saucer LR", S.corr, np.full(geometry.T, 96 * geometry.spatial_volume))
    ut.check("Eye LR", E.corr, np.zeros(geometry.T))
