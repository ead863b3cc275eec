"""
hyperexp: the hyperexponential distribution in any floating-point precision.

Implements the mixture of exponential distributions with a scipy-like API
(pdf, cdf, sf, ppf, isf, moments) evaluated in single, double, extended or
arbitrary (mpmath) precision.

Key features:
- Validated, normalized phase parameters (frozen dataclass containers)
- Numerically stable CDF/survival sums and quantile inversion by bracketing
- Closed-form mean, variance, skewness and kurtosis
- Out-of-domain arguments and unconverged quantiles reported as warnings
"""

from hyperexp._warnings import (
    ConstructionError,
    ConvergenceWarning,
    EvaluationDomainWarning,
    HyperexpWarning,
)
from hyperexp.distributions import (
    Exponential,
    Hyperexponential,
    HyperexponentialDistribution,
)
from hyperexp.params import ExponentialParams, HyperexponentialParams
from hyperexp.utils import RootFindingPolicy, make_tolerance, real_type

__all__ = [
    # Distributions
    "Exponential",
    "Hyperexponential",
    "HyperexponentialDistribution",
    # Parameter dataclasses
    "ExponentialParams",
    "HyperexponentialParams",
    # Errors and warnings
    "ConstructionError",
    "HyperexpWarning",
    "EvaluationDomainWarning",
    "ConvergenceWarning",
    # Numerics
    "RootFindingPolicy",
    "make_tolerance",
    "real_type",
]
