import hwcontract.core as cr
from hwcontract.errors import ProjectionError
from hwcontract.io import get_backend, to_numpy
from opt_einsum import contract



# Sub-diagrams of the Saucer and Eye contractions, per site:
#   body = q3 * g5 * q1_snk * adj(q2) * g5 * gamma
#   loop = q4 * gamma
# q1_snk is the sink time slice of a sink-smeared propagator and is the same
# at every site.
def make_se_body(q1_snk: cr.SitePropagator, q2: cr.Propagator, q3: cr.Propagator, gamma: cr.Gamma, out: cr.Propagator = None):
    xp = get_backend()
    q3.check_geometry(q2)
    g5 = cr.Gamma(5).mat
    if out is None:
        out = cr.Propagator(q3.geometry)
    contract('txyzBAba, AC, CDac, txyzEDec, EF, FG -> txyzBGbe', q3.field, g5, q1_snk.mat, xp.conjugate(q2.field), g5, gamma.mat, out=out.field)
    return out

def make_se_loop(q4: cr.Propagator, gamma: cr.Gamma, out: cr.Propagator = None):
    if out is None:
        out = cr.Propagator(q4.geometry)
    contract('txyzBAba, AC -> txyzBCba', q4.field, gamma.mat, out=out.field)
    return out

# trace(body * loop)
def trace_product(body: cr.Propagator, loop: cr.Propagator, out: cr.Scalar = None):
    body.check_geometry(loop)
    if out is None:
        out = cr.Scalar(body.geometry)
    contract('txyzBAba, txyzABab -> txyz', body.field, loop.field, out=out.field)
    return out

def trace(prop: cr.Propagator, out: cr.Scalar = None):
    if out is None:
        out = cr.Scalar(prop.geometry)
    contract('txyzAAaa -> txyz', prop.field, out=out.field)
    return out

# Elementwise product of two scalar fields
def product(a: cr.Scalar, b: cr.Scalar, out: cr.Scalar = None):
    xp = get_backend()
    a.check_geometry(b)
    if out is None:
        out = cr.Scalar(a.geometry)
    xp.multiply(a.field, b.field, out=out.field)
    return out

# Sum over the directions mu. The terms are added in the order given, each one
# as soon as it is produced, so a generator may reuse one buffer for all terms.
def sum_mu(terms, out: cr.Scalar = None):
    if out is not None:
        out.field[...] = 0
    n = 0
    for term in terms:
        if out is None:
            out = cr.Scalar(term.geometry)
        out += term
        n += 1
    if n == 0:
        raise ProjectionError("No direction to sum over")
    return out

def phase_grid(momvec, Lx, Ly, Lz):
    xp = get_backend()
    px, py, pz = momvec
    x = xp.arange(Lx)
    y = xp.arange(Ly)
    z = xp.arange(Lz)
    X, Y, Z = xp.meshgrid(x, y, z, indexing='ij')
    phase = xp.exp(-1j * 2 * xp.pi * px * X / Lx) * xp.exp(-1j * 2 * xp.pi * py * Y / Ly) * xp.exp(-1j * 2 * xp.pi * pz * Z / Lz)
    return phase

# Momentum projection of a per-site scalar, one complex number per time slice.
def mom_proj(corr, momvec=(0, 0, 0)):
    xp = get_backend()
    if isinstance(corr, cr.Scalar):
        corr = corr.field
    if corr.ndim != 4:
        raise ProjectionError(f"Expected a field with axes (t, x, y, z), got shape {corr.shape}")
    if len(momvec) != 3:
        raise ProjectionError(f"Expected a spatial momentum (px, py, pz), got {momvec}")
    T, Lx, Ly, Lz = corr.shape
    phase = phase_grid(momvec, Lx, Ly, Lz)
    projected_corr = xp.zeros(T, dtype=complex)
    for t in range(T):
        projected_corr[t] = xp.sum(corr[t] * phase)
    return to_numpy(projected_corr)

def slice_sum(corr):
    return mom_proj(corr, (0, 0, 0))
