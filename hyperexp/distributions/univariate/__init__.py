"""Univariate distributions."""

from .exponential import Exponential
from .hyperexponential import Hyperexponential, HyperexponentialDistribution

__all__ = ['Exponential', 'Hyperexponential', 'HyperexponentialDistribution']
