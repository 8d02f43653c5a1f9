import typing as t

from hwcontract.core.geometry import QCD_geometry
from hwcontract.environment.scratch import ScratchPool
from hwcontract.errors import UnresolvedInputError
from hwcontract.utils import get_logger

T = t.TypeVar("T")


class Environment:
    """Named objects of a measurement together with the lattice they live on.

    Parameters
    ----------
    geometry : QCD_geometry
        The lattice.
    nd : int, optional
        Number of spacetime directions reported to modules. Defaults to the
        dimension of `geometry`.
    max_scratch_bytes : int, optional
        Memory budget of each scratch pool handed out by `scratch`.
    """

    def __init__(
        self,
        geometry: QCD_geometry,
        nd: t.Optional[int] = None,
        max_scratch_bytes: t.Optional[int] = None,
    ):
        self.geometry = geometry
        self._nd = geometry.Nd if nd is None else nd
        self.max_scratch_bytes = max_scratch_bytes
        self._objects = {}

    def get_nd(self) -> int:
        return self._nd

    def get_nt(self) -> int:
        return self.geometry.T

    def create(self, name: str, obj):
        if name in self._objects:
            get_logger().warning(f"Replacing object '{name}' in the environment")
        self._objects[name] = obj
        return obj

    def load(self, name: str, kind: t.Type[T], filename: str) -> T:
        obj = kind(self.geometry)
        obj.read(filename)
        get_logger().debug(f"Loaded {kind.__name__} '{name}' from {filename}")
        return self.create(name, obj)

    def has(self, name: str) -> bool:
        return name in self._objects

    def resolve(self, name: str, kind: t.Type[T]) -> T:
        if name not in self._objects:
            raise UnresolvedInputError(f"Object '{name}' not found in the environment")
        obj = self._objects[name]
        if not isinstance(obj, kind):
            raise UnresolvedInputError(
                f"Object '{name}' is a {type(obj).__name__}, expected {kind.__name__}"
            )
        return obj

    def scratch(self, max_bytes: t.Optional[int] = None) -> ScratchPool:
        return ScratchPool(self.max_scratch_bytes if max_bytes is None else max_bytes)
