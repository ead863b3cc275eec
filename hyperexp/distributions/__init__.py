"""Distribution implementations."""

from .univariate import Exponential, Hyperexponential, HyperexponentialDistribution

__all__ = ['Exponential', 'Hyperexponential', 'HyperexponentialDistribution']
