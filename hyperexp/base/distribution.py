"""
Abstract base of the univariate distributions.

Concrete distributions implement the density, distribution, survival and
quantile functions and the four moment summaries; this class derives the
rest of the scipy-style surface from them:

- **Logarithms**: :meth:`logpdf`, :meth:`logcdf`, :meth:`logsf`
- **Summaries**: :meth:`stats`, :meth:`std`, :meth:`kurtosis_excess`
- **Quantile helpers**: :meth:`median`, :meth:`interval`

Every distribution computes in a single :class:`~hyperexp.utils.RealType`.
Scalar arguments return a scalar of that type, array arguments return an
array of it with the same shape.
"""

import warnings
from abc import ABC, abstractmethod
from typing import Any, Callable, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from hyperexp._warnings import EvaluationDomainWarning, find_stack_level
from hyperexp.utils.precision import RealType


class Distribution(ABC):
    """
    Univariate distribution evaluated in one real type.

    Subclasses set ``self._real`` to the ``RealType`` they compute in and
    implement their functions as 1-d kernels run through :meth:`_evaluate`.
    Arguments outside the domain produce the boundary value and an
    :class:`~hyperexp.EvaluationDomainWarning`.
    """

    _real: RealType

    @property
    def real_type(self) -> RealType:
        """Real-number type of all results."""
        return self._real

    @property
    def dtype(self):
        """Numpy dtype of array results (``object`` for mpmath)."""
        return getattr(self._real, 'dtype', np.dtype(object))

    # ================================================================
    # Evaluation helpers
    # ================================================================

    def _evaluate(self, x: ArrayLike, kernel: Callable[[NDArray], NDArray]):
        """Apply a 1-d kernel to ``x``, preserving scalar/array shape."""
        arr = self._real.asarray(x)
        result = kernel(arr.reshape(-1))
        if arr.ndim == 0:
            return self._real.scalar(result[0])
        return result.reshape(arr.shape)

    def _warn_outside(self, invalid: NDArray, what: str) -> None:
        if np.any(invalid):
            warnings.warn(
                f"{what} outside the domain of {self.__class__.__name__}; "
                f"boundary value returned",
                EvaluationDomainWarning,
                stacklevel=find_stack_level(),
            )

    def _check_x(self, x: NDArray) -> Tuple[NDArray, NDArray]:
        """Warn on negative or NaN ``x``; return the two masks."""
        nan = self._real.isnan(x)
        negative = x < 0
        self._warn_outside(negative | nan, "x")
        return negative, nan

    def _check_probability(self, q: NDArray) -> NDArray:
        """Warn on probabilities outside ``[0, 1]``; return the NaN mask."""
        nan = self._real.isnan(q)
        self._warn_outside((q < 0) | (q > 1) | nan, "probability")
        return nan

    # ================================================================
    # Distribution functions
    # ================================================================

    @abstractmethod
    def pdf(self, x: ArrayLike):
        """Density at ``x``."""

    @abstractmethod
    def cdf(self, x: ArrayLike):
        """Probability of a value at most ``x``."""

    @abstractmethod
    def sf(self, x: ArrayLike):
        """Probability of a value above ``x``."""

    @abstractmethod
    def ppf(self, q: ArrayLike):
        """Smallest ``x`` with ``cdf(x) >= q``."""

    @abstractmethod
    def isf(self, q: ArrayLike):
        """``x`` with ``sf(x) == q``."""

    def logpdf(self, x: ArrayLike):
        """
        Log density, ``log(pdf(x))``; ``-inf`` where the density is 0.

        Subclasses with a closed form override this.
        """
        with np.errstate(divide='ignore'):
            return self._real.log(self.pdf(x))

    def logcdf(self, x: ArrayLike):
        with np.errstate(divide='ignore'):
            return self._real.log(self.cdf(x))

    def logsf(self, x: ArrayLike):
        with np.errstate(divide='ignore'):
            return self._real.log(self.sf(x))

    # ================================================================
    # Moments
    # ================================================================

    @abstractmethod
    def mean(self):
        ...

    @abstractmethod
    def var(self):
        ...

    @abstractmethod
    def skewness(self):
        ...

    @abstractmethod
    def kurtosis(self):
        """Kurtosis :math:`\\mu_4 / \\mu_2^2` (not excess)."""

    def std(self):
        return self._real.sqrt(self.var())

    def kurtosis_excess(self):
        """Excess kurtosis: ``kurtosis() - 3``."""
        return self.kurtosis() - 3

    def stats(self, moments: str = 'mv') -> Union[Any, Tuple[Any, ...]]:
        """
        Moment summaries selected by letter, in ``'mvsk'`` order.

        Parameters
        ----------
        moments : str, optional
            Any of ``'m'`` (mean), ``'v'`` (variance), ``'s'`` (skewness)
            and ``'k'`` (excess kurtosis, as in ``scipy.stats``).

        Returns
        -------
        stats : scalar or tuple
            A single value when one letter is requested.
        """
        summaries = {
            'm': self.mean,
            'v': self.var,
            's': self.skewness,
            'k': self.kurtosis_excess,
        }
        results = tuple(summaries[letter]() for letter in 'mvsk' if letter in moments)
        return results[0] if len(results) == 1 else results

    def moment(self, n: int):
        """Raw moment :math:`E[X^n]`."""
        raise NotImplementedError(f"{self.__class__.__name__} has no raw moments")

    # ================================================================
    # Quantile helpers
    # ================================================================

    def median(self):
        return self.ppf(self._real.cast(0.5))

    def interval(self, confidence) -> Tuple[Any, Any]:
        """
        Central interval holding probability ``confidence``.

        Each tail outside the interval has probability
        ``(1 - confidence) / 2``; the upper end comes from :meth:`isf`.

        Raises
        ------
        ValueError
            If ``confidence`` is outside ``[0, 1]``.
        """
        if not 0 <= confidence <= 1:
            raise ValueError(f"confidence must be in [0, 1], got {confidence}")
        tail = (1 - self._real.cast(confidence)) / 2
        return self.ppf(tail), self.isf(tail)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dtype={self._real.name})"
