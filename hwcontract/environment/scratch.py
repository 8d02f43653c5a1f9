import math
import typing as t
from collections import defaultdict

from hwcontract.core.geometry import QCD_geometry
from hwcontract.errors import AllocationError
from hwcontract.io import get_backend
from hwcontract.utils import get_logger


class ScratchPool:
    """Temporary buffers of one module execution.

    Buffers are keyed by (shape, dtype). A released buffer goes back to the
    free list of its key and is handed out again, zeroed, by the next
    `acquire` with the same key. Buffers never outlive the pool: leaving the
    `with` block releases everything, whether or not an exception was raised.

    Parameters
    ----------
    max_bytes : int, optional
        Upper bound on the memory the pool may allocate. `AllocationError`
        is raised when an allocation would exceed it.
    """

    def __init__(self, max_bytes: t.Optional[int] = None):
        self.max_bytes = max_bytes
        self.nbytes = 0
        self._free = defaultdict(list)
        self._in_use = {}

    @staticmethod
    def _key(shape, dtype):
        xp = get_backend()
        return tuple(int(n) for n in shape), xp.dtype(dtype).str

    def acquire(self, shape, dtype=None):
        xp = get_backend()
        if dtype is None:
            dtype = xp.complex128
        key = self._key(shape, dtype)

        if self._free[key]:
            arr = self._free[key].pop()
            arr[...] = 0
        else:
            nbytes = math.prod(key[0]) * xp.dtype(dtype).itemsize
            if self.max_bytes is not None and self.nbytes + nbytes > self.max_bytes:
                raise AllocationError(
                    f"Scratch buffer of shape {key[0]} needs {nbytes} bytes, "
                    f"{self.max_bytes - self.nbytes} of {self.max_bytes} left"
                )
            try:
                arr = xp.zeros(key[0], dtype=dtype)
            except MemoryError as e:
                raise AllocationError(f"Cannot allocate scratch buffer of shape {key[0]}") from e
            self.nbytes += nbytes
            get_logger().debug(f"Scratch: new buffer {key[0]} {key[1]}, pool size {self.nbytes} bytes")

        self._in_use[id(arr)] = (key, arr)
        return arr

    def release(self, arr):
        try:
            key, arr = self._in_use.pop(id(arr))
        except KeyError:
            raise ValueError("Buffer was not acquired from this pool") from None
        self._free[key].append(arr)

    def release_all(self):
        for key, arr in self._in_use.values():
            self._free[key].append(arr)
        self._in_use.clear()

    def field(self, kind, geometry: QCD_geometry):
        """Acquire a zeroed field of type `kind` backed by a pool buffer."""
        return kind.wrap(geometry, self.acquire(kind.shape(geometry)))

    def release_field(self, f):
        self.release(f.field)

    @property
    def in_use(self) -> int:
        return len(self._in_use)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release_all()
        return False
