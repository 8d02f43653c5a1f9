import numpy as np
import yaml

from .logging import get_logger



class bcolors:
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


def check(msg, a, b, rtol=1e-05, atol=1e-08):
    # Regression check of a (complex) number or an array against a reference value.
    if np.allclose(a, b, rtol=rtol, atol=atol):
        get_logger().info(f"{msg} check {bcolors.OKGREEN}passed{bcolors.ENDC}")
    else:
        raise ValueError(f"Regression check of {msg} {bcolors.FAIL}failed{bcolors.ENDC}, new = {a}")


def load_param(file):
    """Read the YAML parameter file"""
    with open(file, "r") as f:
        param = yaml.safe_load(f)
    return param
