import numbers
import h5py
from opt_einsum import contract
from hwcontract.io import get_backend, to_numpy
from hwcontract.core.geometry import QCD_geometry
from hwcontract.errors import DimensionMismatchError



class Field:
    def __init__(self, geometry: QCD_geometry):
        self.geometry = geometry
        self.T = geometry.T
        self.X = geometry.X
        self.Y = geometry.Y
        self.Z = geometry.Z
        self.Ns = geometry.Ns
        self.Nc = geometry.Nc
        self.Nd = geometry.Nd

        self.field = 0

    @classmethod
    def wrap(cls, geometry: QCD_geometry, arr):
        # Field view on an existing array, e.g. a scratch buffer.
        result = cls.__new__(cls)
        Field.__init__(result, geometry)
        result.field = arr
        return result

    def copy(self):
        xp = get_backend()
        result = type(self)(self.geometry)
        result.field = xp.copy(self.field)
        return result

    def check_geometry(self, other):
        if self.geometry != other.geometry:
            raise DimensionMismatchError(f"Field on {self.geometry} combined with field on {other.geometry}")

    def __add__(self, other):
        if isinstance(other, type(self)):
            self.check_geometry(other)
            result = type(self)(self.geometry)
            result.field = self.field + other.field
            return result
        else:
            return NotImplemented

    def __sub__(self, other):
        if isinstance(other, type(self)):
            self.check_geometry(other)
            result = type(self)(self.geometry)
            result.field = self.field - other.field
            return result
        else:
            return NotImplemented

    def __iadd__(self, other):
        if isinstance(other, type(self)):
            self.check_geometry(other)
            self.field += other.field
            return self
        else:
            return NotImplemented

    def read(self, filename):
        xp = get_backend()
        with h5py.File(filename, 'r') as f:
            data = f['field'][()]
        if data.shape != self.field.shape:
            raise DimensionMismatchError(f"{filename} holds a field of shape {data.shape}, expected {self.field.shape}")
        self.field = xp.asarray(data)

    def write(self, filename):
        with h5py.File(filename, 'w') as f:
            f.create_dataset('field', data=to_numpy(self.field))

    def __repr__(self):
        return f"{self.field}"


class Scalar(Field):
    def __init__(self, geometry: QCD_geometry):
        xp = get_backend()
        super().__init__(geometry)
        self.field = xp.zeros(Scalar.shape(geometry), dtype=xp.complex128)

    @staticmethod
    def shape(geometry: QCD_geometry):
        return (geometry.T, geometry.X, geometry.Y, geometry.Z)

    def __getitem__(self, pos):
        return self.field[pos]

    def __setitem__(self, pos, mat):
        self.field[pos] = mat

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            result = Scalar(self.geometry)
            result.field = self.field * other
            return result
        elif isinstance(other, Scalar):
            self.check_geometry(other)
            result = Scalar(self.geometry)
            result.field = self.field * other.field
            return result
        else:
            return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        else:
            return NotImplemented


class Propagator(Field):
    def __init__(self, geometry: QCD_geometry):
        xp = get_backend()
        super().__init__(geometry)
        self.field = xp.zeros(Propagator.shape(geometry), dtype=xp.complex128)

    @staticmethod
    def shape(geometry: QCD_geometry):
        # spin sink, spin source, color sink, color source
        return (geometry.T, geometry.X, geometry.Y, geometry.Z, geometry.Ns, geometry.Ns, geometry.Nc, geometry.Nc)

    def __getitem__(self, pos):
        # The spin-color matrix at [t, x, y, z]
        if len(pos) in [4]:
            return self.field[pos]
        else:
            raise ValueError("Invalid number of indices")

    def __setitem__(self, pos, mat):
        if len(pos) in [4]:
            self.field[pos] = mat
        else:
            raise ValueError("Invalid number of indices")

    def __mul__(self, other):
        # Capital: spin; small: color.
        if isinstance(other, numbers.Number):
            result = Propagator(self.geometry)
            result.field = self.field * other
            return result
        elif isinstance(other, Propagator):
            self.check_geometry(other)
            result = Propagator(self.geometry)
            result.field = contract("txyzBAba, txyzACac -> txyzBCbc", self.field, other.field)
            return result
        elif isinstance(other, SitePropagator):
            result = Propagator(self.geometry)
            result.field = contract("txyzBAba, ACac -> txyzBCbc", self.field, other.mat)
            return result
        else:
            return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        else:
            return NotImplemented

    def dagger(self):
        xp = get_backend()
        result = Propagator(self.geometry)
        result.field = xp.conjugate(xp.transpose(self.field, axes=(0,1,2,3,5,4,7,6)))
        return result

    def trace(self):
        result = Scalar(self.geometry)
        result.field = contract("txyzAAaa -> txyz", self.field)
        return result

    def init_identity(self):
        xp = get_backend()
        self.field[...] = contract("AB, ab -> ABab", xp.identity(self.Ns, dtype=xp.complex128), xp.identity(self.Nc, dtype=xp.complex128))

    def init_random(self):
        xp = get_backend()
        shape = self.field.shape
        self.field = xp.random.rand(*shape) + 1j * xp.random.rand(*shape)

    def slice_sum(self):
        # Sum over the spatial sites at each time, e.g. after sink smearing.
        result = SlicedPropagator(self.geometry)
        result.field = contract("txyzBAba -> tBAba", self.field)
        return result


class SlicedPropagator(Field):
    def __init__(self, geometry: QCD_geometry):
        xp = get_backend()
        super().__init__(geometry)
        self.field = xp.zeros(SlicedPropagator.shape(geometry), dtype=xp.complex128)

    @staticmethod
    def shape(geometry: QCD_geometry):
        return (geometry.T, geometry.Ns, geometry.Ns, geometry.Nc, geometry.Nc)

    def __getitem__(self, t):
        # The spin-color matrix at time slice t.
        if not isinstance(t, numbers.Integral):
            raise ValueError("A sliced propagator is indexed by a single time coordinate")
        if not 0 <= t < self.T:
            raise DimensionMismatchError(f"Time slice {t} outside [0, {self.T})")
        return SitePropagator(self.field[t])

    def __setitem__(self, t, mat):
        if isinstance(mat, SitePropagator):
            mat = mat.mat
        self.field[t] = mat

    def init_identity(self):
        xp = get_backend()
        self.field[...] = contract("AB, ab -> ABab", xp.identity(self.Ns, dtype=xp.complex128), xp.identity(self.Nc, dtype=xp.complex128))

    def init_random(self):
        xp = get_backend()
        shape = self.field.shape
        self.field = xp.random.rand(*shape) + 1j * xp.random.rand(*shape)


class SitePropagator:
    # The spin-color matrix of a propagator with the site dependence removed.
    def __init__(self, mat):
        self.mat = mat

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return SitePropagator(self.mat * other)
        elif isinstance(other, SitePropagator):
            return SitePropagator(contract("BAba, ACac -> BCbc", self.mat, other.mat))
        elif isinstance(other, Propagator):
            result = Propagator(other.geometry)
            result.field = contract("BAba, txyzACac -> txyzBCbc", self.mat, other.field)
            return result
        else:
            return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        else:
            return NotImplemented

    def dagger(self):
        xp = get_backend()
        return SitePropagator(xp.conjugate(xp.transpose(self.mat, axes=(1,0,3,2))))

    def trace(self):
        return contract("AAaa", self.mat)

    def __repr__(self):
        return f"{self.mat}"


class Gamma:
    def __init__(self, i, Nl=4):
        if Nl == 4:
            self.mat = self.gamma_4(i)
        else:
            raise NotImplementedError("Only Nl=4 is supported")

    def gamma_4(self, i):
        xp = get_backend()

        if not isinstance(i, numbers.Integral) or not 0 <= i < 16:
            raise ValueError(f"Invalid gamma index {i}")

        g = xp.zeros((16, 4, 4), dtype=complex)

        # CVC convention, chiral basis.
        g[0] = xp.array([[0, 0, -1, 0], [0, 0, 0, -1], [-1, 0, 0, 0], [0, -1, 0, 0]], dtype=complex) # gamma_0 = gamma_t
        g[1] = xp.array([[0, 0, 0, -1j], [0, 0, -1j, 0], [0, 1j, 0, 0], [1j, 0, 0, 0]], dtype=complex) # gamma_1 = gamma_x
        g[2] = xp.array([[0, 0, 0, -1], [0, 0, 1, 0], [0, 1, 0, 0], [-1, 0, 0, 0]], dtype=complex) # gamma_2 = gamma_y
        g[3] = xp.array([[0, 0, -1j, 0], [0, 0, 0, 1j], [1j, 0, 0, 0], [0, -1j, 0, 0]], dtype=complex) # gamma_3 = gamma_z
        g[4] = xp.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=complex) # gamma_4 = id
        g[5] = xp.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, -1, 0], [0, 0, 0, -1]], dtype=complex)
        g[6] = g[0] @ g[5]
        g[7] = g[1] @ g[5]
        g[8] = g[2] @ g[5]
        g[9] = g[3] @ g[5]
        g[10] = g[0] @ g[1]
        g[11] = g[0] @ g[2]
        g[12] = g[0] @ g[3]
        g[13] = g[1] @ g[2]
        g[14] = g[1] @ g[3]
        g[15] = g[2] @ g[3]

        return g[i]

    @classmethod
    def from_mat(cls, mat):
        result = cls(4)
        result.mat = mat
        return result

    def __add__(self, other):
        xp = get_backend()
        if isinstance(other, Gamma):
            return Gamma.from_mat(self.mat + other.mat)
        elif isinstance(other, numbers.Number):
            return Gamma.from_mat(self.mat + xp.eye(4, dtype=complex) * other)
        else:
            return NotImplemented

    def __sub__(self, other):
        xp = get_backend()
        if isinstance(other, Gamma):
            return Gamma.from_mat(self.mat - other.mat)
        elif isinstance(other, numbers.Number):
            return Gamma.from_mat(self.mat - xp.eye(4, dtype=complex) * other)
        else:
            return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __rsub__(self, other):
        xp = get_backend()
        if isinstance(other, numbers.Number):
            return Gamma.from_mat(-self.mat + xp.eye(4, dtype=complex) * other)
        else:
            return NotImplemented

    def __mul__(self, other):
        if isinstance(other, Gamma):
            return Gamma.from_mat(self.mat @ other.mat)
        elif isinstance(other, Propagator):
            result = Propagator(other.geometry)
            result.field = contract("CB, txyzBAba -> txyzCAba", self.mat, other.field)
            return result
        elif isinstance(other, SitePropagator):
            return SitePropagator(contract("CB, BAba -> CAba", self.mat, other.mat))
        elif isinstance(other, numbers.Number):
            return Gamma.from_mat(self.mat * other)
        else:
            return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, numbers.Number):
            return self.__mul__(other)
        elif isinstance(other, Propagator):
            result = Propagator(other.geometry)
            result.field = contract("txyzBAba, AC -> txyzBCba", other.field, self.mat)
            return result
        elif isinstance(other, SitePropagator):
            return SitePropagator(contract("BAba, AC -> BCba", other.mat, self.mat))
        else:
            return NotImplemented

    def dagger(self):
        xp = get_backend()
        return Gamma.from_mat(xp.conjugate(xp.transpose(self.mat)))

    def trace(self):
        xp = get_backend()
        return xp.trace(self.mat)

    def __repr__(self):
        return f"{self.mat}"
