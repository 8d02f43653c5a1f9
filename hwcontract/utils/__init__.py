from .logging import get_logger, set_logging_level
from .utils import check, load_param

__all__ = ['get_logger', 'set_logging_level', 'check', 'load_param']
