"""
Exponential distribution.

The Exponential distribution has PDF:

.. math::
    p(x|\\lambda) = \\lambda e^{-\\lambda x}

for :math:`x \\geq 0`, where :math:`\\lambda > 0` is the rate parameter.

Every function has a closed form; the distribution serves as the phase
(component) primitive of :class:`~hyperexp.distributions.univariate.Hyperexponential`.

Note: scipy uses scale = 1/rate parametrization.
"""

import math
from functools import cached_property

import numpy as np
from numpy.typing import ArrayLike, NDArray

from hyperexp.base import Distribution
from hyperexp.params import ExponentialParams
from hyperexp.utils.precision import infer_real_type, real_type


class Exponential(Distribution):
    """
    Exponential distribution with rate parameter :math:`\\lambda`.

    The Exponential distribution has PDF:

    .. math::
        p(x|\\lambda) = \\lambda e^{-\\lambda x}

    for :math:`x \\geq 0`, where :math:`\\lambda` is the rate parameter.

    Parameters
    ----------
    rate : real
        Rate parameter :math:`\\lambda > 0`.
    dtype : optional
        Real type of the computation (see :func:`hyperexp.utils.real_type`).
        Inferred from ``rate`` when omitted.

    Examples
    --------
    >>> dist = Exponential(2.0)
    >>> dist.mean()
    np.float64(0.5)

    >>> dist = Exponential(np.float32(2.0))
    >>> dist.cdf(1.0).dtype
    dtype('float32')

    Notes
    -----
    The Exponential distribution is a special case of the Gamma distribution
    with shape parameter :math:`\\alpha = 1`.
    """

    def __init__(self, rate, dtype=None):
        super().__init__()
        self._real = real_type(dtype) if dtype is not None else infer_real_type(rate)
        rate = self._real.cast(rate)
        if not (rate > 0 and self._real.isfinite(rate)):
            raise ValueError(f"Rate must be positive and finite, got {rate}")
        self._lambda = rate

    @classmethod
    def from_classical_params(cls, **kwargs) -> 'Exponential':
        """
        Create distribution from classical parameters.

        Examples
        --------
        >>> dist = Exponential.from_classical_params(rate=2.0)
        """
        return cls(**kwargs)

    @property
    def rate(self):
        return self._lambda

    @cached_property
    def classical_params(self) -> ExponentialParams:
        """Classical parameters as a frozen dataclass (cached)."""
        return ExponentialParams(rate=self._lambda)

    def range(self):
        """Range of the random variable: ``(0, inf)``."""
        real = self._real
        upper = real.infinity if real.has_infinity else real.max_value
        return real.cast(0), upper

    def support(self):
        """Support of the density: ``(min_value, max_value)``."""
        return self._real.min_value, self._real.max_value

    # ================================================================
    # Distribution functions
    # ================================================================

    def pdf(self, x: ArrayLike):
        """
        Probability density function: :math:`\\lambda e^{-\\lambda x}` for x ≥ 0.
        """
        return self._evaluate(x, self._pdf)

    def _pdf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        mask = ~(negative | nan)
        result[mask] = self._lambda * self._real.exp(-self._lambda * x[mask])
        result[nan] = self._real.nan
        return result

    def logpdf(self, x: ArrayLike):
        """Log density :math:`\\log\\lambda - \\lambda x`; ``-inf`` for x < 0."""
        return self._evaluate(x, self._logpdf)

    def _logpdf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.full(x.shape, -self._real.infinity)
        mask = ~(negative | nan)
        result[mask] = self._real.log(self._lambda) - self._lambda * x[mask]
        result[nan] = self._real.nan
        return result

    def cdf(self, x: ArrayLike):
        """
        Cumulative distribution function: F(x) = 1 - exp(-λx) for x ≥ 0.

        Evaluated as ``-expm1(-λx)`` to keep full relative accuracy for small x.
        """
        return self._evaluate(x, self._cdf)

    def _cdf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        infinite = x == self._real.infinity
        mask = (x > 0) & ~infinite
        result[mask] = -self._real.expm1(-self._lambda * x[mask])
        result[infinite] = self._real.cast(1)
        result[nan] = self._real.nan
        return result

    def sf(self, x: ArrayLike):
        """Survival function: S(x) = exp(-λx) for x ≥ 0."""
        return self._evaluate(x, self._sf)

    def _sf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.ones(x.shape)
        mask = x > 0
        result[mask] = self._real.exp(-self._lambda * x[mask])
        result[nan] = self._real.nan
        return result

    def ppf(self, q: ArrayLike):
        """Quantile function: :math:`-\\log(1 - q) / \\lambda`."""
        return self._evaluate(q, self._ppf)

    def _ppf(self, q: NDArray) -> NDArray:
        nan = self._check_probability(q)
        upper = self.range()[1]
        result = self._real.zeros(q.shape)
        result[q >= 1] = upper
        inner = (q > 0) & (q < 1)
        result[inner] = -self._real.log1p(-q[inner]) / self._lambda
        result[nan] = self._real.nan
        return result

    def isf(self, q: ArrayLike):
        """Inverse survival function: :math:`-\\log(q) / \\lambda`."""
        return self._evaluate(q, self._isf)

    def _isf(self, q: NDArray) -> NDArray:
        nan = self._check_probability(q)
        upper = self.range()[1]
        result = self._real.zeros(q.shape)
        result[q <= 0] = upper
        inner = (q > 0) & (q < 1)
        result[inner] = -self._real.log(q[inner]) / self._lambda
        result[nan] = self._real.nan
        return result

    # ================================================================
    # Moments
    # ================================================================

    def mean(self):
        """Mean: :math:`E[X] = 1/\\lambda`."""
        return 1 / self._lambda

    def var(self):
        """Variance: :math:`\\text{Var}[X] = 1/\\lambda^2`."""
        return 1 / self._lambda**2

    def skewness(self):
        return self._real.cast(2)

    def kurtosis(self):
        return self._real.cast(9)

    def mode(self):
        return self._real.cast(0)

    def moment(self, n: int):
        """
        Raw moment :math:`E[X^n] = n! / \\lambda^n`.

        Parameters
        ----------
        n : int
            Non-negative order.
        """
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 0:
            raise ValueError(f"Moment order must be a non-negative integer, got {n!r}")
        n = int(n)
        return self._real.cast(math.factorial(n)) / self._lambda**n

    def __eq__(self, other) -> bool:
        if not isinstance(other, Exponential):
            return NotImplemented
        return self._real == other._real and self._lambda == other._lambda

    def __hash__(self) -> int:
        return hash((Exponential, self._real, str(self._lambda)))

    def __repr__(self) -> str:
        return f"Exponential(rate={self._lambda}, dtype={self._real.name})"
