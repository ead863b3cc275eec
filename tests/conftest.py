"""Shared fixtures: the reference mixture and the precisions under test."""

import mpmath
import numpy as np
import pytest

from hyperexp import Hyperexponential
from hyperexp.utils import FLOAT32, FLOAT64, LONGDOUBLE, MPMATH, make_tolerance

REFERENCE_PROBABILITIES = (0.2, 0.3, 0.5)
REFERENCE_RATES = (0.5, 1.0, 1.5)

PRECISIONS = [FLOAT32, FLOAT64, LONGDOUBLE, MPMATH]


@pytest.fixture(params=PRECISIONS, ids=lambda real: real.name)
def real(request):
    """Each supported real type; mpmath runs at 30 significant digits."""
    if request.param == MPMATH:
        with mpmath.workdps(30):
            yield request.param
    else:
        yield request.param


@pytest.fixture
def reference(real):
    """The three-phase reference mixture in the precision under test."""
    probabilities = [real.cast(p) for p in REFERENCE_PROBABILITIES]
    rates = [real.cast(r) for r in REFERENCE_RATES]
    return Hyperexponential(probabilities, rates)


@pytest.fixture
def reference64():
    return Hyperexponential(list(REFERENCE_PROBABILITIES), list(REFERENCE_RATES))


def assert_close(actual, expected, real):
    """Relative comparison at the tolerance of ``real``; absolute at zero."""
    tol = make_tolerance(real)
    expected = real.cast(expected)
    if expected == 0:
        assert abs(actual) <= tol, f"{actual} != 0 (tol {tol})"
    else:
        assert abs(actual - expected) <= tol * abs(expected), \
            f"{actual} != {expected} (rtol {tol}, {real.name})"


@pytest.fixture
def close():
    return assert_close
