from typing import Literal

_BACKEND = None


def get_backend():
    global _BACKEND
    if _BACKEND is None:
        set_backend("numpy")
    return _BACKEND


def set_backend(backend: Literal["numpy", "cupy"]):
    global _BACKEND
    if not isinstance(backend, str):
        backend = backend.__name__
    backend = backend.lower()
    if backend == "numpy":
        import numpy
        _BACKEND = numpy
    elif backend == "cupy":
        import cupy
        _BACKEND = cupy
    else:
        raise ValueError('Backend must be "numpy" or "cupy"')


def to_numpy(arr):
    # Results are always handed to h5py as numpy arrays.
    if hasattr(arr, "get"):
        return arr.get()
    return arr
