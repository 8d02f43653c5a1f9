class ContractionError(Exception):
    """Base class for errors raised while running a contraction module."""


class UnresolvedInputError(ContractionError):
    """A named input is missing from the environment or has the wrong kind."""


class DimensionMismatchError(ContractionError):
    """Input fields disagree on the lattice they live on."""


class AllocationError(ContractionError):
    """Scratch storage for an execution could not be obtained."""


class ProjectionError(ContractionError):
    """Degenerate reduction, e.g. no spacetime direction to sum over."""


__all__ = [
    "ContractionError",
    "UnresolvedInputError",
    "DimensionMismatchError",
    "AllocationError",
    "ProjectionError",
]
