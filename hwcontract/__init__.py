from .errors import (
    ContractionError,
    UnresolvedInputError,
    DimensionMismatchError,
    AllocationError,
    ProjectionError,
)

__version__ = "0.1.0"

__all__ = [
    'ContractionError',
    'UnresolvedInputError',
    'DimensionMismatchError',
    'AllocationError',
    'ProjectionError',
]
