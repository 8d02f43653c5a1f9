import itertools

import numpy as np
import pytest

import hwcontract.core as cr
import hwcontract.measurements.contract_funcs as cf
from hwcontract.errors import ProjectionError
from conftest import site_matrix, spin_matrix


class TestSubDiagrams:
    def test_body_matches_site_matrices(self, random_props):
        q1, q2, q3, _ = random_props
        q1Snk = q1[1]
        gamma = cr.chiral_insertion(1, "L")
        body = cf.make_se_body(q1Snk, q2, q3, gamma)
        G5 = spin_matrix(cr.Gamma(5))
        for pos in itertools.product(range(4), range(2), range(2), range(2)):
            expected = (
                site_matrix(q3[pos]) @ G5 @ site_matrix(q1Snk.mat)
                @ site_matrix(q2[pos]).conj().T @ G5 @ spin_matrix(gamma)
            )
            np.testing.assert_allclose(site_matrix(body[pos]), expected, rtol=1e-10, atol=1e-10)

    def test_body_matches_field_algebra(self, random_props):
        q1, q2, q3, _ = random_props
        g5 = cr.Gamma(5)
        gamma = cr.chiral_insertion(3, "R")
        expected = (q3 * g5) * (q1[2] * q2.dagger()) * g5 * gamma
        body = cf.make_se_body(q1[2], q2, q3, gamma)
        np.testing.assert_allclose(body.field, expected.field, rtol=1e-10, atol=1e-10)

    def test_loop(self, random_props):
        _, _, _, q4 = random_props
        gamma = cr.chiral_insertion(0, "L")
        np.testing.assert_allclose(cf.make_se_loop(q4, gamma).field, (q4 * gamma).field)

    def test_writes_into_buffer(self, random_props):
        _, _, _, q4 = random_props
        out = cr.Propagator(q4.geometry)
        res = cf.make_se_loop(q4, cr.chiral_insertion(0, "L"), out=out)
        assert res is out
        assert np.any(out.field != 0)

    def test_traces(self, random_props):
        _, q2, q3, _ = random_props
        np.testing.assert_allclose(cf.trace(q2).field, q2.trace().field)
        np.testing.assert_allclose(cf.trace_product(q2, q3).field, (q2 * q3).trace().field, rtol=1e-10)


class TestReduction:
    def test_sum_mu(self, geometry):
        terms = []
        for mu in range(4):
            s = cr.Scalar(geometry)
            s.field[...] = mu + 1j
            terms.append(s)
        np.testing.assert_allclose(cf.sum_mu(terms).field, 6 + 4j)

    def test_sum_mu_permutation(self, geometry):
        np.random.seed(7)
        terms = []
        for mu in range(4):
            s = cr.Scalar(geometry)
            s.field = np.random.rand(*geometry.dims) + 1j * np.random.rand(*geometry.dims)
            terms.append(s)
        ref = cf.sum_mu(terms).field
        for perm in itertools.permutations(range(4)):
            np.testing.assert_allclose(cf.sum_mu([terms[mu] for mu in perm]).field, ref, rtol=1e-13)

    def test_sum_mu_reused_buffer(self, geometry):
        tmp = cr.Scalar(geometry)
        out = cr.Scalar(geometry)
        out.field[...] = 100

        def terms():
            for mu in range(4):
                tmp.field[...] = mu
                yield tmp

        cf.sum_mu(terms(), out=out)
        np.testing.assert_allclose(out.field, 6)

    def test_sum_mu_empty(self, geometry):
        with pytest.raises(ProjectionError):
            cf.sum_mu([])
        with pytest.raises(ProjectionError):
            cf.sum_mu(iter([]), out=cr.Scalar(geometry))

    def test_zero_momentum(self, geometry):
        s = cr.Scalar(geometry)
        s.field = np.arange(np.prod(geometry.dims)).reshape(geometry.dims).astype(complex)
        corr = cf.mom_proj(s)
        assert corr.shape == (geometry.T,)
        np.testing.assert_allclose(corr, s.field.sum(axis=(1, 2, 3)))
        np.testing.assert_allclose(cf.slice_sum(s.field), corr)

    def test_plane_wave(self):
        geometry = cr.QCD_geometry([3, 4, 4, 4])
        p = (1, 0, 2)
        x, y, z = np.meshgrid(np.arange(4), np.arange(4), np.arange(4), indexing="ij")
        wave = np.exp(2j * np.pi * (p[0] * x + p[1] * y + p[2] * z) / 4)
        s = cr.Scalar(geometry)
        s.field[...] = wave
        np.testing.assert_allclose(cf.mom_proj(s, p), 64 * np.ones(3), atol=1e-10)
        np.testing.assert_allclose(cf.mom_proj(s, (0, 0, 0)), np.zeros(3), atol=1e-10)

    def test_single_timeslice(self):
        geometry = cr.QCD_geometry([1, 2, 2, 2])
        s = cr.Scalar(geometry)
        s.field[...] = 1
        corr = cf.mom_proj(s)
        assert corr.shape == (1,)
        assert np.isclose(corr[0], 8)

    def test_bad_momentum(self, geometry):
        with pytest.raises(ProjectionError):
            cf.mom_proj(cr.Scalar(geometry), (0, 0))
