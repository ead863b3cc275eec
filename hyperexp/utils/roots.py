"""Bracketing root finder for monotone functions.

Used to invert distribution functions that have no closed-form inverse.
Double precision delegates to :func:`scipy.optimize.brentq`; every other
real type runs a safeguarded Newton iteration that falls back to bisection
whenever the Newton step leaves the current bracket, so the bracket always
shrinks and the iteration works in the arithmetic of the real type itself.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional, Tuple

import numpy as np
from scipy.optimize import brentq

from .precision import FLOAT64, RealType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RootFindingPolicy:
    """
    Convergence policy of the root finder.

    Attributes
    ----------
    max_iter : int
        Iteration budget of a single solve.
    rtol_factor : float
        Relative tolerance on the root, in multiples of the real type's
        epsilon. Double precision uses at least 4 (the brentq minimum).
    max_bracket_doublings : int
        Maximum number of doublings when searching for an upper bracket.
    """
    max_iter: int = 200
    rtol_factor: float = 4.0
    max_bracket_doublings: int = 2100

    def __post_init__(self):
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if not self.rtol_factor >= 1:
            raise ValueError(f"rtol_factor must be at least 1, got {self.rtol_factor}")
        if self.max_bracket_doublings < 0:
            raise ValueError(
                f"max_bracket_doublings must be non-negative, got {self.max_bracket_doublings}"
            )


DEFAULT_POLICY = RootFindingPolicy()


class RootResult(NamedTuple):
    """Outcome of :func:`bracket_root`."""
    root: Any
    iterations: int
    converged: bool


def expand_upper_bracket(
    predicate: Callable[[Any], bool],
    start,
    real: RealType,
    policy: Optional[RootFindingPolicy] = None,
) -> Tuple[Any, bool]:
    """
    Double ``start`` until ``predicate`` holds.

    Parameters
    ----------
    predicate : callable
        Monotone condition, false below the root and true above it.
    start : real
        First trial point; non-positive or non-finite values start at 1.
    real : RealType
        Arithmetic of the trial points.
    policy : RootFindingPolicy, optional

    Returns
    -------
    upper : real
        First trial point satisfying ``predicate``, or the last one tried.
    found : bool
        Whether ``predicate(upper)`` holds.
    """
    policy = policy or DEFAULT_POLICY
    x = real.cast(start)
    if not (x > 0 and real.isfinite(x)):
        x = real.cast(1)
    half_max = real.max_value / 2
    doublings = 0
    while not predicate(x):
        if doublings == policy.max_bracket_doublings or x >= real.max_value:
            logger.debug("no upper bracket found, stopped at %s", x)
            return x, False
        x = real.max_value if x > half_max else x * 2
        doublings += 1
    if doublings:
        logger.debug("upper bracket %s found after %d doublings", x, doublings)
    return x, True


def bracket_root(
    func: Callable[[Any], Any],
    lower,
    upper,
    real: RealType,
    fprime: Optional[Callable[[Any], Any]] = None,
    ftol=None,
    policy: Optional[RootFindingPolicy] = None,
) -> RootResult:
    """
    Find a root of a monotone function inside a sign-changing bracket.

    Parameters
    ----------
    func : callable
        Function of one real argument.
    lower, upper : real
        Bracket; ``func(lower)`` and ``func(upper)`` must differ in sign
        (or one of them be zero).
    real : RealType
        Arithmetic of the solve.
    fprime : callable, optional
        Derivative of ``func``; enables Newton steps outside double precision.
    ftol : real, optional
        Absolute tolerance on ``|func(x)|`` below which ``x`` is accepted,
        typically the rounding noise of ``func``.
    policy : RootFindingPolicy, optional
        Iteration budget and tolerance.

    Returns
    -------
    result : RootResult
        ``converged`` is False when the iteration budget ran out; ``root`` is
        then the best approximation found.

    Raises
    ------
    ValueError
        If the bracket does not contain a sign change.
    """
    policy = policy or DEFAULT_POLICY
    if real == FLOAT64:
        result = _brentq(func, lower, upper, policy)
    else:
        result = _newton_bisect(func, real.cast(lower), real.cast(upper),
                                real, fprime, ftol, policy)
    logger.debug("root %s after %d iterations (converged=%s)",
                 result.root, result.iterations, result.converged)
    return result


def _brentq(func, lower, upper, policy: RootFindingPolicy) -> RootResult:
    finfo = np.finfo(np.float64)
    rtol = max(policy.rtol_factor, 4.0) * finfo.eps
    root, info = brentq(
        func, float(lower), float(upper),
        xtol=finfo.tiny, rtol=rtol, maxiter=policy.max_iter,
        full_output=True, disp=False,
    )
    return RootResult(np.float64(root), info.iterations, bool(info.converged))


def _newton_bisect(func, lower, upper, real: RealType, fprime, ftol,
                   policy: RootFindingPolicy) -> RootResult:
    f_lower = func(lower)
    if f_lower == 0:
        return RootResult(lower, 0, True)
    f_upper = func(upper)
    if f_upper == 0:
        return RootResult(upper, 0, True)
    if (f_lower < 0) == (f_upper < 0):
        raise ValueError(
            f"f(lower) and f(upper) must have different signs, "
            f"got {f_lower} and {f_upper}"
        )

    # neg/pos are the bracket ends where func is negative/positive
    if f_lower < 0:
        neg, pos = lower, upper
    else:
        neg, pos = upper, lower
    rtol = real.cast(policy.rtol_factor) * real.epsilon
    ftol = real.cast(0) if ftol is None else ftol

    x = neg + (pos - neg) / 2
    last_step = abs(pos - neg)
    for iteration in range(1, policy.max_iter + 1):
        fx = func(x)
        if abs(fx) <= ftol:
            return RootResult(x, iteration, True)
        if fx < 0:
            neg = x
        else:
            pos = x
        low, high = min(neg, pos), max(neg, pos)
        if high - low <= rtol * abs(x) + real.min_value:
            return RootResult(x, iteration, True)

        # Newton only while it stays inside the bracket and at least halves
        # the previous step; bisect otherwise
        candidate = None
        if fprime is not None:
            slope = fprime(x)
            if slope != 0 and real.isfinite(slope):
                step = fx / slope
                if low < x - step < high and abs(2 * step) <= last_step:
                    candidate = x - step
        if candidate is None:
            candidate = low + (high - low) / 2
        if candidate == x or abs(candidate - x) <= rtol * abs(candidate):
            return RootResult(candidate, iteration, True)
        last_step = abs(candidate - x)
        x = candidate

    return RootResult(x, policy.max_iter, False)
