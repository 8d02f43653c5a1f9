from .environment import Environment
from .scratch import ScratchPool

__all__ = ['Environment', 'ScratchPool']
