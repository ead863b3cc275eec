"""Errors and warning classes for the hyperexp package.

The warning classes allow users to programmatically filter, suppress,
or capture numerical anomalies using Python's standard ``warnings`` module.

Example:
    Turn out-of-domain arguments into hard errors::

        import warnings
        from hyperexp import EvaluationDomainWarning

        warnings.filterwarnings("error", category=EvaluationDomainWarning)

    Check whether a quantile is only approximate::

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always", ConvergenceWarning)
            x = dist.ppf(0.999)
            approximate = any(issubclass(i.category, ConvergenceWarning) for i in w)
"""

import inspect
import os

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep


def find_stack_level() -> int:
    """Stack level of the first frame outside the hyperexp package.

    Passed as ``stacklevel`` to ``warnings.warn`` so that a warning points
    at the calling user code, however deep in the package it is raised.
    """
    frame = inspect.currentframe()
    level = 0
    try:
        while frame is not None and frame.f_code.co_filename.startswith(_PACKAGE_DIR):
            frame = frame.f_back
            level += 1
    finally:
        del frame
    return level


class ConstructionError(ValueError):
    """Invalid distribution parameters.

    Raised when the probability and rate sequences differ in length or are
    empty, when a rate is not positive and finite, when a probability is
    negative or not finite, or when all probabilities are zero.

    Attributes:
        parameter: Name of the offending argument (``"probabilities"`` or
            ``"rates"``).
    """

    def __init__(self, parameter: str, message: str):
        super().__init__(f"{parameter}: {message}")
        self.parameter = parameter


class HyperexpWarning(UserWarning):
    """Base class for all hyperexp warnings."""


class EvaluationDomainWarning(HyperexpWarning):
    """Query argument outside the conventional domain.

    Raised for a negative or NaN ``x`` passed to the density, distribution
    or survival functions, and for a probability outside ``[0, 1]`` passed
    to a quantile function. The boundary value is returned.
    """


class ConvergenceWarning(HyperexpWarning):
    """Root finder did not reach its tolerance.

    Raised when quantile inversion exhausts its iteration budget or cannot
    bracket the root. The best available approximation is returned.
    """
