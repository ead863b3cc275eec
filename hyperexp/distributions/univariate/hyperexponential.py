"""
Hyperexponential distribution: a finite mixture of exponential phases.

A hyperexponential random variable picks phase :math:`i` with probability
:math:`p_i` and then draws from :math:`\\text{Exponential}(\\lambda_i)`.
Its PDF is:

.. math::
    f(x) = \\sum_{i=1}^K p_i \\lambda_i e^{-\\lambda_i x}

for :math:`x \\geq 0`, with CDF and survival function

.. math::
    F(x) = \\sum_{i=1}^K p_i (1 - e^{-\\lambda_i x}), \\qquad
    S(x) = \\sum_{i=1}^K p_i e^{-\\lambda_i x}

and raw moments :math:`E[X^n] = \\sum_i p_i \\, n! / \\lambda_i^n`.

For :math:`K > 1` the CDF has no closed-form inverse; quantiles are found by
bracketing the root of :math:`F(x) - p` (or :math:`S(x) - q`) between the
smallest and largest phase quantiles and refining it with
:func:`hyperexp.utils.roots.bracket_root`.
"""

import logging
import math
import warnings
from functools import cached_property
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from hyperexp._warnings import ConstructionError, ConvergenceWarning, find_stack_level
from hyperexp.base import Distribution
from hyperexp.params import HyperexponentialParams
from hyperexp.utils.precision import RealType, infer_real_type, real_type
from hyperexp.utils.roots import (
    DEFAULT_POLICY,
    RootFindingPolicy,
    bracket_root,
    expand_upper_bracket,
)

from .exponential import Exponential

logger = logging.getLogger(__name__)


class Hyperexponential(Distribution):
    """
    Hyperexponential distribution (mixture of exponential phases).

    Parameters
    ----------
    probabilities : sequence of real, optional
        Phase selection probabilities :math:`p_i \\geq 0`, at least one
        positive. Rescaled to sum to 1 unless they already do up to rounding.
        When omitted every phase gets probability :math:`1/K`.
    rates : sequence of real
        Phase rates :math:`\\lambda_i > 0`, same length as ``probabilities``.
    dtype : optional
        Real type of the computation: a numpy floating dtype, ``"mpmath"``,
        or a :class:`~hyperexp.utils.RealType`. Inferred from the inputs
        when omitted (``mpf`` elements select arbitrary precision).
    policy : RootFindingPolicy, optional
        Convergence policy of :meth:`ppf` and :meth:`isf`.

    Raises
    ------
    ConstructionError
        If the sequences are empty or differ in length, a rate is not
        positive and finite, a probability is negative or not finite, or
        all probabilities are zero.

    Examples
    --------
    >>> dist = Hyperexponential([0.2, 0.3, 0.5], [0.5, 1.0, 1.5])
    >>> float(dist.pdf(0.0))
    1.15
    >>> float(dist.mean())
    1.0333333333333332

    >>> # unnormalized weights are rescaled
    >>> Hyperexponential([2, 3, 5], [0.5, 1.0, 1.5]).probabilities
    (np.float64(0.2), np.float64(0.3), np.float64(0.5))

    >>> # arbitrary precision
    >>> import mpmath
    >>> with mpmath.workdps(40):
    ...     dist = Hyperexponential([mpmath.mpf(1)], [mpmath.mpf(2)])
    ...     dist.ppf(mpmath.mpf('0.5'))
    mpf('0.3465735902799726547086160607290882840377')

    Notes
    -----
    ``kurtosis()`` returns the non-excess kurtosis; ``kurtosis_excess()`` and
    ``stats(moments='k')`` return kurtosis minus 3.

    The distribution is immutable; derived quantities are cached.
    """

    def __init__(
        self,
        probabilities: Optional[Sequence] = None,
        rates: Optional[Sequence] = None,
        *,
        dtype=None,
        policy: Optional[RootFindingPolicy] = None,
    ):
        super().__init__()
        if dtype is not None:
            self._real = real_type(dtype)
        else:
            self._real = infer_real_type(probabilities, rates)
        self._policy = policy or DEFAULT_POLICY
        self._probs, self._rates = _validate_phases(self._real, probabilities, rates)
        self._components = tuple(Exponential(rate, dtype=self._real) for rate in self._rates)

    @classmethod
    def from_classical_params(cls, **kwargs) -> 'Hyperexponential':
        """
        Create distribution from classical parameters.

        Examples
        --------
        >>> dist = Hyperexponential.from_classical_params(
        ...     probabilities=[0.2, 0.8], rates=[1.0, 3.0])
        """
        return cls(**kwargs)

    # ================================================================
    # Parameters
    # ================================================================

    @property
    def probabilities(self) -> Tuple:
        """Normalized phase probabilities."""
        return self._probs

    @property
    def rates(self) -> Tuple:
        """Phase rates."""
        return self._rates

    @property
    def n_phases(self) -> int:
        return len(self._rates)

    @property
    def components(self) -> Tuple[Exponential, ...]:
        """Phase distributions, one :class:`Exponential` per rate."""
        return self._components

    @property
    def policy(self) -> RootFindingPolicy:
        return self._policy

    @cached_property
    def classical_params(self) -> HyperexponentialParams:
        """Classical parameters as a frozen dataclass (cached)."""
        return HyperexponentialParams(probabilities=self._probs, rates=self._rates)

    @cached_property
    def _active(self) -> Tuple[Tuple, ...]:
        # phases with positive probability, as (p, rate, component)
        return tuple(
            (p, rate, component)
            for p, rate, component in zip(self._probs, self._rates, self._components)
            if p > 0
        )

    @cached_property
    def _slowest_rate(self):
        return min(rate for _, rate, _ in self._active)

    def range(self):
        """Range of the random variable: ``(0, inf)``, or ``(0, max_value)``
        when the real type has no infinity."""
        real = self._real
        upper = real.infinity if real.has_infinity else real.max_value
        return real.cast(0), upper

    def support(self):
        """Support of the density: ``(min_value, max_value)`` of the real type."""
        return self._real.min_value, self._real.max_value

    # ================================================================
    # Distribution functions
    # ================================================================

    def _mix(self, method: str, x: NDArray) -> NDArray:
        """Probability-weighted sum of a phase method evaluated at ``x``."""
        total = self._real.zeros(x.shape)
        for p, component in zip(self._probs, self._components):
            total = total + p * getattr(component, method)(x)
        return total

    def pdf(self, x: ArrayLike):
        """
        Probability density function.

        .. math::
            f(x) = \\sum_i p_i \\lambda_i e^{-\\lambda_i x}

        At :math:`x = 0` this is :math:`\\sum_i p_i \\lambda_i`; for
        :math:`x < 0` it is 0 (with an ``EvaluationDomainWarning``).
        """
        return self._evaluate(x, self._pdf)

    def _pdf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        mask = ~(negative | nan)
        result[mask] = self._mix('pdf', x[mask])
        result[nan] = self._real.nan
        return result

    def cdf(self, x: ArrayLike):
        """
        Cumulative distribution function.

        Summed as :math:`\\sum_i p_i (1 - e^{-\\lambda_i x})` with each
        complement from ``expm1``, avoiding the cancellation of
        :math:`1 - S(x)` for small x.
        """
        return self._evaluate(x, self._cdf)

    def _cdf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        mask = x > 0
        result[mask] = self._mix('cdf', x[mask])
        result[nan] = self._real.nan
        return result

    def sf(self, x: ArrayLike):
        """Survival function :math:`S(x) = \\sum_i p_i e^{-\\lambda_i x}`."""
        return self._evaluate(x, self._sf)

    def _sf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.ones(x.shape)
        mask = x > 0
        result[mask] = self._mix('sf', x[mask])
        result[nan] = self._real.nan
        return result

    def _scaled_survival(self, x: NDArray) -> Tuple[NDArray, NDArray]:
        """
        Survival terms scaled by :math:`e^{\\lambda_{min} x}`.

        Returns :math:`\\sum_i p_i w_i` and :math:`\\sum_i p_i \\lambda_i w_i`
        with :math:`w_i = e^{-(\\lambda_i - \\lambda_{min}) x}`, which stay
        representable where the unscaled sums underflow.
        """
        real = self._real
        slowest = self._slowest_rate
        weight_sum = real.zeros(x.shape)
        rate_sum = real.zeros(x.shape)
        for p, rate, _ in self._active:
            shift = rate - slowest
            if shift == 0:
                w = p * real.ones(x.shape)
            else:
                w = p * real.exp(-shift * x)
            weight_sum = weight_sum + w
            rate_sum = rate_sum + rate * w
        return weight_sum, rate_sum

    def hazard(self, x: ArrayLike):
        """
        Hazard function :math:`h(x) = f(x) / S(x)`.

        Tends to the smallest active rate as x grows; evaluated in scaled
        form so it stays finite where f and S underflow.
        """
        return self._evaluate(x, self._hazard)

    def _hazard(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        mask = ~(negative | nan)
        weight_sum, rate_sum = self._scaled_survival(x[mask])
        result[mask] = rate_sum / weight_sum
        result[nan] = self._real.nan
        return result

    def chf(self, x: ArrayLike):
        """Cumulative hazard function :math:`H(x) = -\\log S(x)`."""
        return self._evaluate(x, self._chf)

    def _chf(self, x: NDArray) -> NDArray:
        negative, nan = self._check_x(x)
        result = self._real.zeros(x.shape)
        mask = x > 0
        xm = x[mask]
        weight_sum, _ = self._scaled_survival(xm)
        result[mask] = self._slowest_rate * xm - self._real.log(weight_sum)
        result[nan] = self._real.nan
        return result

    def logsf(self, x: ArrayLike):
        """Log survival function, :math:`-H(x)`."""
        return -self.chf(x)

    # ================================================================
    # Quantiles
    # ================================================================

    def ppf(self, q: ArrayLike):
        """
        Percent point function (inverse of CDF).

        ``ppf(0)`` is 0 and ``ppf(1)`` the upper end of :meth:`range`.
        Probabilities outside ``[0, 1]`` are clamped to these ends with an
        ``EvaluationDomainWarning``.
        """
        return self._evaluate(q, self._ppf)

    def _ppf(self, q: NDArray) -> NDArray:
        nan = self._check_probability(q)
        result = self._real.zeros(q.shape)
        result[q >= 1] = self.range()[1]
        for i in np.flatnonzero((q > 0) & (q < 1)):
            result[i] = self._invert(q[i], complement=False)
        result[nan] = self._real.nan
        return result

    def isf(self, q: ArrayLike):
        """
        Inverse survival function.

        Solves :math:`S(x) = q` directly rather than ``ppf(1 - q)``, so small
        survival probabilities keep their relative accuracy.
        """
        return self._evaluate(q, self._isf)

    def _isf(self, q: NDArray) -> NDArray:
        nan = self._check_probability(q)
        result = self._real.zeros(q.shape)
        result[q <= 0] = self.range()[1]
        for i in np.flatnonzero((q > 0) & (q < 1)):
            result[i] = self._invert(q[i], complement=True)
        result[nan] = self._real.nan
        return result

    def _invert(self, target, complement: bool):
        """Solve ``cdf(x) = target`` (or ``sf(x) = target``) for 0 < target < 1."""
        real = self._real
        if len(self._active) == 1:
            component = self._active[0][2]
            return component.isf(target) if complement else component.ppf(target)

        if complement:
            def func(x):
                return self.sf(x) - target

            def fprime(x):
                return -self.pdf(x)

            def at_or_below_root(x):
                return self.sf(x) >= target

            def at_or_above_root(x):
                return self.sf(x) <= target

            bounds = [component.isf(target) for _, _, component in self._active]
        else:
            def func(x):
                return self.cdf(x) - target

            fprime = self.pdf

            def at_or_below_root(x):
                return self.cdf(x) <= target

            def at_or_above_root(x):
                return self.cdf(x) >= target

            bounds = [component.ppf(target) for _, _, component in self._active]

        # the mixture quantile lies between the fastest and slowest phase quantiles
        lower = min(bounds)
        if not at_or_below_root(lower):
            lower = real.cast(0)
        upper, found = expand_upper_bracket(at_or_above_root, max(bounds), real, self._policy)
        if not found:
            warnings.warn(
                f"could not bracket the quantile of {target}; returning {upper}",
                ConvergenceWarning,
                stacklevel=find_stack_level(),
            )
            return upper

        ftol = real.cast(self._policy.rtol_factor * self.n_phases) * real.epsilon * target
        result = bracket_root(func, lower, upper, real, fprime=fprime,
                              ftol=ftol, policy=self._policy)
        if not result.converged:
            warnings.warn(
                f"quantile of {target} did not converge in {result.iterations} "
                f"iterations; returning approximation {result.root}",
                ConvergenceWarning,
                stacklevel=find_stack_level(),
            )
        return real.scalar(result.root)

    # ================================================================
    # Moments
    # ================================================================

    def moment(self, n: int):
        """
        Raw moment :math:`E[X^n] = \\sum_i p_i \\, n! / \\lambda_i^n`.

        Parameters
        ----------
        n : int
            Non-negative order.
        """
        total = self._real.cast(0)
        for p, component in zip(self._probs, self._components):
            total = total + p * component.moment(n)
        return total

    @cached_property
    def _scaled_central_moments(self) -> Tuple:
        """Central moments 2 to 4 of ``slowest_rate * X``."""
        real = self._real
        slowest = self._slowest_rate
        raw = []
        for n in (1, 2, 3, 4):
            total = real.cast(0)
            for p, rate, _ in self._active:
                total = total + p * real.cast(math.factorial(n)) * (slowest / rate) ** n
            raw.append(total)
        return central_moments(real, *raw)

    def mean(self):
        """Mean: :math:`E[X] = \\sum_i p_i / \\lambda_i`."""
        return self.moment(1)

    def var(self):
        """Variance :math:`E[X^2] - E[X]^2`, never negative."""
        mu2 = self._scaled_central_moments[0]
        slowest = self._slowest_rate
        return mu2 / slowest / slowest

    def skewness(self):
        """Skewness :math:`\\mu_3 / \\mu_2^{3/2}`."""
        mu2, mu3, _ = self._scaled_central_moments
        return mu3 / (mu2 * self._real.sqrt(mu2))

    def kurtosis(self):
        """Kurtosis :math:`\\mu_4 / \\mu_2^2` (not excess)."""
        mu2, _, mu4 = self._scaled_central_moments
        return mu4 / (mu2 * mu2)

    def mode(self):
        """Mode: always 0, the density is decreasing on ``[0, inf)``."""
        return self._real.cast(0)

    # ================================================================
    # Identity
    # ================================================================

    def __eq__(self, other) -> bool:
        if not isinstance(other, Hyperexponential):
            return NotImplemented
        return (self._real == other._real
                and self._probs == other._probs
                and self._rates == other._rates)

    def __hash__(self) -> int:
        return hash((Hyperexponential, self._real,
                     tuple(str(p) for p in self._probs),
                     tuple(str(r) for r in self._rates)))

    def __repr__(self) -> str:
        probs = ", ".join(str(p) for p in self._probs)
        rates = ", ".join(str(r) for r in self._rates)
        return (f"Hyperexponential(probabilities=[{probs}], rates=[{rates}], "
                f"dtype={self._real.name})")


HyperexponentialDistribution = Hyperexponential


def _as_vector(real: RealType, values, name: str) -> NDArray:
    try:
        arr = real.asarray(values)
    except (TypeError, ValueError) as exc:
        raise ConstructionError(name, f"expected a sequence of real numbers ({exc})") from exc
    if arr.ndim != 1:
        raise ConstructionError(name, f"expected a one-dimensional sequence, got shape {arr.shape}")
    return arr


def central_moments(real: RealType, m1, m2, m3, m4) -> Tuple:
    """
    Central moments :math:`\\mu_2, \\mu_3, \\mu_4` from raw moments 1 to 4.

    A negative :math:`\\mu_2` can only come from cancellation and is
    returned as 0.
    """
    mu2 = m2 - m1 * m1
    if mu2 < 0:
        mu2 = real.cast(0)
    mu3 = m3 - 3 * m1 * m2 + 2 * m1**3
    mu4 = m4 - 4 * m1 * m3 + 6 * m1**2 * m2 - 3 * m1**4
    return mu2, mu3, mu4


def _validate_phases(real: RealType, probabilities, rates) -> Tuple[Tuple, Tuple]:
    """
    Validate and normalize phase parameters.

    Checks, in order: lengths, rates, probabilities, and a positive total.
    Probabilities already summing to 1 within ``K * eps`` are kept as given;
    otherwise each is divided by the sum.
    """
    if rates is None:
        raise ConstructionError("rates", "rates are required")
    rate_arr = _as_vector(real, rates, "rates")
    n = rate_arr.shape[0]
    if n == 0:
        raise ConstructionError("rates", "at least one phase is required")
    if probabilities is None:
        prob_arr = real.full((n,), 1) / n
    else:
        prob_arr = _as_vector(real, probabilities, "probabilities")
        if prob_arr.shape[0] != n:
            raise ConstructionError(
                "probabilities",
                f"got {prob_arr.shape[0]} probabilities for {n} rates",
            )

    bad_rates = ~((rate_arr > 0) & real.isfinite(rate_arr))
    if np.any(bad_rates):
        raise ConstructionError(
            "rates",
            f"rates must be positive and finite, got {rate_arr[bad_rates][0]}",
        )
    bad_probs = ~((prob_arr >= 0) & real.isfinite(prob_arr))
    if np.any(bad_probs):
        raise ConstructionError(
            "probabilities",
            f"probabilities must be non-negative and finite, got {prob_arr[bad_probs][0]}",
        )

    probs = [real.scalar(p) for p in prob_arr]
    total = real.cast(0)
    for p in probs:
        total = total + p
    if total == 0:
        raise ConstructionError("probabilities", "at least one probability must be positive")
    if abs(total - 1) > n * real.epsilon:
        logger.debug("normalizing phase probabilities summing to %s", total)
        probs = [p / total for p in probs]

    return tuple(probs), tuple(real.scalar(r) for r in rate_arr)
