"""Real-number types the distributions can be evaluated in.

A :class:`RealType` is the capability set a distribution needs from its
floating-point representation: machine constants (epsilon, smallest and
largest finite values, infinity), conversion of scalars and sequences, and
elementwise transcendental functions.

Two families are provided:

- :class:`NumpyRealType` for the numpy floating dtypes
  (``float32``, ``float64``, ``longdouble``), backed by :func:`numpy.finfo`.
- :class:`MpmathRealType` for arbitrary precision ``mpmath.mpf`` numbers,
  evaluated at the current working precision of ``mpmath.mp``.

Arrays of the arbitrary precision type are numpy ``object`` arrays holding
``mpf`` elements, so the same masking code runs for every type.

Examples
--------
>>> from hyperexp.utils import real_type
>>> real_type("float32").epsilon
np.float32(1.1920929e-07)
>>> real_type("mpmath").name
'mpmath'
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import mpmath
import numpy as np
from numpy.typing import ArrayLike, NDArray


class RealType(ABC):
    """
    Abstract capability set of a floating-point representation.

    Subclasses provide the machine constants of the representation and
    elementwise functions that accept both scalars and arrays of it.
    """

    name: str

    # ================================================================
    # Machine constants
    # ================================================================

    @property
    @abstractmethod
    def epsilon(self) -> Any:
        """Difference between 1 and the next representable value."""

    @property
    @abstractmethod
    def min_value(self) -> Any:
        """Smallest positive normalized value."""

    @property
    @abstractmethod
    def max_value(self) -> Any:
        """Largest finite value."""

    @property
    @abstractmethod
    def digits(self) -> int:
        """Number of binary digits in the significand."""

    @property
    def infinity(self) -> Optional[Any]:
        """Positive infinity, or None if the type cannot represent it."""
        return None

    @property
    def has_infinity(self) -> bool:
        return self.infinity is not None

    @property
    def nan(self) -> Any:
        return self.cast(float('nan'))

    # ================================================================
    # Conversion
    # ================================================================

    @abstractmethod
    def cast(self, value) -> Any:
        """Convert a scalar (number or numeric string) to this type."""

    @abstractmethod
    def asarray(self, values: ArrayLike) -> NDArray:
        """Convert a scalar or sequence to an array of this type (copied)."""

    @abstractmethod
    def full(self, shape, value) -> NDArray:
        """Array of ``shape`` filled with ``value`` converted to this type."""

    def zeros(self, shape) -> NDArray:
        return self.full(shape, 0)

    def ones(self, shape) -> NDArray:
        return self.full(shape, 1)

    def scalar(self, value) -> Any:
        """Unwrap an array element into a scalar of this type."""
        return self.cast(value)

    # ================================================================
    # Elementwise functions (scalars or arrays)
    # ================================================================

    @abstractmethod
    def exp(self, x): ...

    @abstractmethod
    def expm1(self, x): ...

    @abstractmethod
    def log(self, x): ...

    @abstractmethod
    def log1p(self, x): ...

    @abstractmethod
    def sqrt(self, x): ...

    @abstractmethod
    def isfinite(self, x): ...

    @abstractmethod
    def isnan(self, x): ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


class NumpyRealType(RealType):
    """
    Real type backed by a numpy floating dtype.

    Parameters
    ----------
    dtype : dtype-like
        A floating dtype, e.g. ``np.float32``, ``"float64"`` or ``np.longdouble``.
    """

    def __init__(self, dtype):
        dtype = np.dtype(dtype)
        if dtype.kind != 'f':
            raise ValueError(f"Expected a floating dtype, got {dtype}")
        self.dtype = dtype
        self.type = dtype.type
        self.name = dtype.name
        self._finfo = np.finfo(dtype)

    @property
    def epsilon(self):
        return self.type(self._finfo.eps)

    @property
    def min_value(self):
        return self.type(self._finfo.tiny)

    @property
    def max_value(self):
        return self.type(self._finfo.max)

    @property
    def digits(self) -> int:
        return int(self._finfo.nmant) + 1

    @property
    def infinity(self):
        return self.type(np.inf)

    def cast(self, value):
        if isinstance(value, mpmath.mpf):
            value = mpmath.nstr(value, self._finfo.precision + 5)
        return self.type(value)

    def asarray(self, values: ArrayLike) -> NDArray:
        return np.array(values, dtype=self.dtype)

    def full(self, shape, value) -> NDArray:
        return np.full(shape, value, dtype=self.dtype)

    def scalar(self, value):
        return self.type(value)

    def exp(self, x):
        return np.exp(x)

    def expm1(self, x):
        return np.expm1(x)

    def log(self, x):
        return np.log(x)

    def log1p(self, x):
        return np.log1p(x)

    def sqrt(self, x):
        return np.sqrt(x)

    def isfinite(self, x):
        return np.isfinite(x)

    def isnan(self, x):
        return np.isnan(x)

    def __eq__(self, other) -> bool:
        return isinstance(other, NumpyRealType) and other.dtype == self.dtype

    def __hash__(self) -> int:
        return hash(('numpy', self.dtype.str))


class MpmathRealType(RealType):
    """
    Arbitrary precision real type backed by ``mpmath.mpf``.

    Epsilon follows the working precision of ``mpmath.mp`` at the time it is
    queried, so results track ``mp.dps``/``mp.prec`` (and ``mpmath.workdps``
    blocks). ``mpf`` exponents are unbounded; the smallest and largest finite
    values mirror those of ``numpy.longdouble``.
    """

    name = 'mpmath'

    _longdouble = np.finfo(np.longdouble)

    # elementwise wrappers; they return a scalar for scalar input and an
    # object array for array input
    _exp = np.frompyfunc(mpmath.exp, 1, 1)
    _expm1 = np.frompyfunc(mpmath.expm1, 1, 1)
    _log = np.frompyfunc(mpmath.log, 1, 1)
    _log1p = np.frompyfunc(mpmath.log1p, 1, 1)
    _sqrt = np.frompyfunc(mpmath.sqrt, 1, 1)
    _isfinite = np.vectorize(mpmath.isfinite, otypes=[bool])
    _isnan = np.vectorize(mpmath.isnan, otypes=[bool])

    @property
    def epsilon(self):
        return mpmath.mp.eps

    @property
    def min_value(self):
        return mpmath.mpf(str(self._longdouble.tiny))

    @property
    def max_value(self):
        return mpmath.mpf(str(self._longdouble.max))

    @property
    def digits(self) -> int:
        return mpmath.mp.prec

    @property
    def infinity(self):
        return mpmath.inf

    def cast(self, value):
        if isinstance(value, np.longdouble):
            value = str(value)
        elif isinstance(value, (np.floating, np.integer)):
            value = value.item()
        return mpmath.mpf(value)

    def asarray(self, values: ArrayLike) -> NDArray:
        arr = np.array(values, dtype=object)
        flat = arr.reshape(-1)
        for i, value in enumerate(flat):
            flat[i] = self.cast(value)
        return arr

    def full(self, shape, value) -> NDArray:
        return np.full(shape, self.cast(value), dtype=object)

    def exp(self, x):
        return self._exp(x)

    def expm1(self, x):
        return self._expm1(x)

    def log(self, x):
        return self._log(x)

    def log1p(self, x):
        return self._log1p(x)

    def sqrt(self, x):
        return self._sqrt(x)

    def isfinite(self, x):
        return self._isfinite(x)

    def isnan(self, x):
        return self._isnan(x)

    def __eq__(self, other) -> bool:
        return isinstance(other, MpmathRealType)

    def __hash__(self) -> int:
        return hash('mpmath')


FLOAT32 = NumpyRealType(np.float32)
FLOAT64 = NumpyRealType(np.float64)
LONGDOUBLE = NumpyRealType(np.longdouble)
MPMATH = MpmathRealType()

_MPMATH_NAMES = ('mpmath', 'mpf', 'arbitrary')


def real_type(obj=None) -> RealType:
    """
    Resolve a dtype, type name, scalar or ``RealType`` to a ``RealType``.

    Parameters
    ----------
    obj : optional
        ``None`` (double precision), a ``RealType``, ``mpmath.mpf`` (the class
        or an instance), one of the strings ``"mpmath"``, ``"mpf"``,
        ``"arbitrary"``, or anything ``numpy.dtype`` accepts.

    Returns
    -------
    real : RealType
    """
    if obj is None:
        return FLOAT64
    if isinstance(obj, RealType):
        return obj
    if obj is mpmath.mpf or isinstance(obj, mpmath.mpf):
        return MPMATH
    if isinstance(obj, str) and obj.lower() in _MPMATH_NAMES:
        return MPMATH
    if isinstance(obj, np.generic):
        obj = obj.dtype
    dtype = np.dtype(obj)
    if dtype == np.float32:
        return FLOAT32
    if dtype == np.float64:
        return FLOAT64
    if dtype == np.longdouble:
        return LONGDOUBLE
    return NumpyRealType(dtype)


def infer_real_type(*values) -> RealType:
    """
    Infer the working real type from scalars or sequences.

    Any ``mpf`` element selects the arbitrary precision type; otherwise the
    numpy floating dtypes are promoted together. Inputs without a floating
    dtype (Python floats, integers, numeric strings) count as double.
    """
    dtypes = []
    for value in values:
        if value is None:
            continue
        if isinstance(value, mpmath.mpf):
            return MPMATH
        arr = np.asarray(value) if not isinstance(value, (list, tuple)) \
            else np.array(value, dtype=object)
        if arr.dtype == object:
            if any(isinstance(v, mpmath.mpf) for v in arr.flat):
                return MPMATH
            dtypes.extend(v.dtype for v in arr.flat
                          if isinstance(v, np.floating))
        elif arr.dtype.kind == 'f':
            dtypes.append(arr.dtype)
    if not dtypes:
        return FLOAT64
    return real_type(np.result_type(*dtypes))


def make_tolerance(real) -> Any:
    """
    Relative tolerance for comparing results against double precision
    reference values.

    Single precision uses ``1e-4``; double precision ``2000 * eps``; every
    other type ``5e6 * eps`` of its own epsilon, but never tighter than the
    double tolerance since the reference values themselves are doubles.
    """
    real = real_type(real)
    double_tol = 2e3 * np.finfo(np.float64).eps
    if real == FLOAT32:
        return real.cast(1e-4)
    if real == FLOAT64:
        return real.cast(double_tol)
    tol = real.cast(5e6) * real.epsilon
    return max(tol, real.cast(double_tol))
