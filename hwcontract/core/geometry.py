from abc import ABC, abstractmethod
from typing import List


class geometry(ABC):
    @abstractmethod
    def __update__(self, geometry: List[int]):
        pass


class QCD_geometry(geometry):
    def __init__(self, geometry: List[int]):
        self.Ns = 4 # spinor
        self.Nc = 3 # color
        self.__update__(geometry)

    def __update__(self, geometry: List[int]):
        # Time first: [T, X, Y, Z].
        if len(geometry) != 4:
            raise ValueError(f"Expected 4 lattice extents [T, X, Y, Z], got {list(geometry)}")
        if any(int(L) < 1 for L in geometry):
            raise ValueError(f"Lattice extents must be positive, got {list(geometry)}")
        self.T = int(geometry[0])
        self.X = int(geometry[1])
        self.Y = int(geometry[2])
        self.Z = int(geometry[3])
        self.Nd = len(geometry)

    @property
    def dims(self):
        return (self.T, self.X, self.Y, self.Z)

    @property
    def spatial_volume(self):
        return self.X * self.Y * self.Z

    def __eq__(self, other):
        if isinstance(other, QCD_geometry):
            return self.dims == other.dims
        else:
            return NotImplemented

    def __hash__(self):
        return hash(self.dims)

    def __repr__(self):
        return f"QCD_geometry({list(self.dims)})"
