from .backend import get_backend, set_backend, to_numpy
from .results import Result, ResultWriter, read_results, result_file_name

__all__ = ['get_backend', 'set_backend', 'to_numpy', 'Result', 'ResultWriter', 'read_results', 'result_file_name']
