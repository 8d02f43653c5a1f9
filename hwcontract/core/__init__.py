from .fields import Scalar, Gamma, Propagator, SlicedPropagator, SitePropagator
from .gamma import gmu, GammaL, GammaR, chiral_insertion, sigma_munu
from .geometry import QCD_geometry

__all__ = ['Scalar', 'Gamma', 'Propagator', 'SlicedPropagator', 'SitePropagator', 'QCD_geometry',
           'gmu', 'GammaL', 'GammaR', 'chiral_insertion', 'sigma_munu']
