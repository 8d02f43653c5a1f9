import numpy as np
import pytest

import hwcontract.core as cr
from hwcontract.errors import DimensionMismatchError
from conftest import site_matrix, spin_matrix


class TestGeometry:
    def test_extents(self, geometry):
        assert geometry.dims == (4, 2, 2, 2)
        assert geometry.Nd == 4
        assert geometry.spatial_volume == 8
        assert geometry == cr.QCD_geometry([4, 2, 2, 2])
        assert geometry != cr.QCD_geometry([2, 2, 2, 4])

    @pytest.mark.parametrize("dims", [[4, 2, 2], [4, 0, 2, 2]])
    def test_invalid(self, dims):
        with pytest.raises(ValueError):
            cr.QCD_geometry(dims)


class TestPropagator:
    def test_identity(self, geometry):
        q = cr.Propagator(geometry)
        q.init_identity()
        np.testing.assert_allclose(q.trace().field, 12 * np.ones(geometry.dims))
        np.testing.assert_allclose((q * q).field, q.field)
        np.testing.assert_allclose(site_matrix(q[1, 0, 1, 0]), np.identity(12))

    def test_product_matches_site_matrices(self, random_props):
        _, q2, q3, _ = random_props
        prod = q2 * q3
        for pos in [(0, 0, 0, 0), (3, 1, 0, 1)]:
            np.testing.assert_allclose(site_matrix(prod[pos]), site_matrix(q2[pos]) @ site_matrix(q3[pos]))

    def test_dagger(self, random_props):
        _, q2, _, _ = random_props
        np.testing.assert_allclose(q2.dagger().dagger().field, q2.field)
        pos = (2, 1, 1, 0)
        np.testing.assert_allclose(site_matrix(q2.dagger()[pos]), site_matrix(q2[pos]).conj().T)

    def test_gamma_multiplication(self, random_props):
        _, q2, _, _ = random_props
        g = cr.chiral_insertion(2, "L")
        pos = (1, 0, 1, 1)
        np.testing.assert_allclose(site_matrix((g * q2)[pos]), spin_matrix(g) @ site_matrix(q2[pos]))
        np.testing.assert_allclose(site_matrix((q2 * g)[pos]), site_matrix(q2[pos]) @ spin_matrix(g))

    def test_scalar_multiplication(self, random_props):
        _, q2, _, _ = random_props
        c = 0.5 - 2j
        np.testing.assert_allclose((c * q2).field, c * q2.field)
        np.testing.assert_allclose((q2 * c).field, c * q2.field)

    def test_geometry_mismatch(self, random_props):
        _, q2, _, _ = random_props
        other = cr.Propagator(cr.QCD_geometry([4, 2, 2, 4]))
        with pytest.raises(DimensionMismatchError):
            q2 * other
        with pytest.raises(DimensionMismatchError):
            q2 + other

    def test_invalid_index(self, random_props):
        _, q2, _, _ = random_props
        with pytest.raises(ValueError):
            q2[0, 0]

    def test_write_read(self, random_props, tmp_path):
        _, q2, _, _ = random_props
        filename = str(tmp_path / "q2.h5")
        q2.write(filename)
        q = cr.Propagator(q2.geometry)
        q.read(filename)
        np.testing.assert_array_equal(q.field, q2.field)

    def test_read_wrong_shape(self, random_props, tmp_path):
        _, q2, _, _ = random_props
        filename = str(tmp_path / "q2.h5")
        q2.write(filename)
        q = cr.Propagator(cr.QCD_geometry([2, 2, 2, 2]))
        with pytest.raises(DimensionMismatchError):
            q.read(filename)


class TestSlicedPropagator:
    def test_slice_sum(self, random_props):
        _, q2, _, _ = random_props
        sliced = q2.slice_sum()
        np.testing.assert_allclose(sliced[2].mat, q2.field[2].sum(axis=(0, 1, 2)))

    def test_index(self, random_props):
        q1, _, _, _ = random_props
        assert isinstance(q1[0], cr.SitePropagator)
        with pytest.raises(DimensionMismatchError):
            q1[q1.T]
        with pytest.raises(ValueError):
            q1[0, 0]

    def test_site_propagator_broadcast(self, random_props):
        q1, q2, _, _ = random_props
        s = q1[3]
        pos = (0, 1, 1, 0)
        np.testing.assert_allclose(site_matrix((s * q2)[pos]), site_matrix(s.mat) @ site_matrix(q2[pos]))
        np.testing.assert_allclose(site_matrix((q2 * s)[pos]), site_matrix(q2[pos]) @ site_matrix(s.mat))
        np.testing.assert_allclose(site_matrix(s.dagger().mat), site_matrix(s.mat).conj().T)
        assert np.isclose(s.trace(), np.trace(site_matrix(s.mat)))


class TestScalar:
    def test_algebra(self, geometry):
        a, b = cr.Scalar(geometry), cr.Scalar(geometry)
        a.field[...] = 2
        b.field[...] = 1j
        np.testing.assert_allclose((a * b).field, 2j)
        np.testing.assert_allclose((a + b).field, 2 + 1j)
        np.testing.assert_allclose((a - b).field, 2 - 1j)
        np.testing.assert_allclose((3 * a).field, 6)
        a += b
        np.testing.assert_allclose(a.field, 2 + 1j)
