"""Tests for real types, real type resolution and comparison tolerances."""

import mpmath
import numpy as np
import pytest

from hyperexp.utils import (
    FLOAT32,
    FLOAT64,
    LONGDOUBLE,
    MPMATH,
    NumpyRealType,
    infer_real_type,
    make_tolerance,
    real_type,
)


class TestRealTypeResolution:

    @pytest.mark.parametrize("obj, expected", [
        (None, FLOAT64),
        ("float32", FLOAT32),
        (np.float32, FLOAT32),
        (np.dtype("float64"), FLOAT64),
        (float, FLOAT64),
        (np.longdouble, LONGDOUBLE),
        (np.float32(1.0), FLOAT32),
        ("mpmath", MPMATH),
        ("MPF", MPMATH),
        (mpmath.mpf, MPMATH),
        (mpmath.mpf(1), MPMATH),
        (FLOAT32, FLOAT32),
    ])
    def test_resolves(self, obj, expected):
        assert real_type(obj) is expected

    def test_rejects_integer_dtype(self):
        with pytest.raises(ValueError):
            real_type(np.int64)

    def test_equality(self):
        assert NumpyRealType("float32") == FLOAT32
        assert hash(NumpyRealType("float32")) == hash(FLOAT32)
        assert FLOAT32 != FLOAT64
        assert FLOAT64 != MPMATH


class TestInference:

    def test_defaults_to_double(self):
        assert infer_real_type() == FLOAT64
        assert infer_real_type([1, 2], None) == FLOAT64
        assert infer_real_type(["0.5"]) == FLOAT64

    def test_numpy_scalars_and_arrays(self):
        assert infer_real_type([np.float32(1)], np.ones(2, dtype=np.float32)) == FLOAT32
        assert infer_real_type(np.float32(1), [2.0]) == FLOAT32
        assert infer_real_type(np.ones(2, dtype=np.float32), np.ones(2)) == FLOAT64
        assert infer_real_type([np.longdouble(1)], [np.float64(1)]) == LONGDOUBLE

    def test_any_mpf_wins(self):
        assert infer_real_type([np.float32(1)], [mpmath.mpf(2)]) == MPMATH
        assert infer_real_type(mpmath.mpf(2)) == MPMATH


class TestMachineConstants:

    @pytest.mark.parametrize("real, dtype", [
        (FLOAT32, np.float32), (FLOAT64, np.float64), (LONGDOUBLE, np.longdouble),
    ], ids=lambda v: getattr(v, 'name', None))
    def test_numpy(self, real, dtype):
        finfo = np.finfo(dtype)
        assert real.epsilon == finfo.eps
        assert real.min_value == finfo.tiny
        assert real.max_value == finfo.max
        assert real.digits == finfo.nmant + 1
        assert real.infinity == np.inf
        assert real.has_infinity
        assert isinstance(real.epsilon, dtype)

    def test_double_digits(self):
        assert FLOAT64.digits == 53
        assert FLOAT32.digits == 24

    def test_mpmath_tracks_working_precision(self):
        with mpmath.workdps(50):
            assert MPMATH.epsilon < mpmath.mpf('1e-49')
            assert MPMATH.digits == mpmath.mp.prec
        with mpmath.workdps(15):
            assert MPMATH.epsilon > mpmath.mpf('1e-17')

    def test_mpmath_limits(self):
        assert MPMATH.infinity == mpmath.inf
        assert MPMATH.max_value > 1e300
        assert 0 < MPMATH.min_value < 1e-300


class TestConversion:

    def test_numpy_cast(self):
        assert FLOAT32.cast("0.1") == np.float32(0.1)
        assert isinstance(FLOAT32.cast(1), np.float32)
        assert FLOAT64.cast(mpmath.mpf("0.1")) == 0.1

    def test_mpmath_cast(self):
        with mpmath.workdps(30):
            assert MPMATH.cast("0.1") == mpmath.mpf("0.1")
            assert MPMATH.cast(np.float32(0.5)) == mpmath.mpf("0.5")
            assert MPMATH.cast(np.int64(3)) == 3
            assert MPMATH.cast(np.float64(0.1)) == mpmath.mpf(0.1)

    def test_mpmath_asarray(self):
        with mpmath.workdps(30):
            arr = MPMATH.asarray([[1, "0.5"], [2.0, np.float32(0.25)]])
            assert arr.dtype == object
            assert arr.shape == (2, 2)
            assert all(isinstance(v, mpmath.mpf) for v in arr.flat)

    def test_asarray_copies(self):
        source = np.array([1.0, 2.0])
        arr = FLOAT64.asarray(source)
        arr[0] = 5.0
        assert source[0] == 1.0

    def test_mpmath_elementwise(self):
        with mpmath.workdps(30):
            arr = MPMATH.asarray([0, 1, "inf", "nan"])
            assert list(MPMATH.isfinite(arr)) == [True, True, False, False]
            assert list(MPMATH.isnan(arr)) == [False, False, False, True]
            assert MPMATH.exp(arr[:2])[1] == mpmath.e
            assert MPMATH.log1p(MPMATH.cast(0)) == 0
            assert MPMATH.sqrt(MPMATH.cast(4)) == 2

    def test_full(self):
        assert FLOAT32.zeros(3).dtype == np.float32
        ones = MPMATH.ones((2,))
        assert all(isinstance(v, mpmath.mpf) and v == 1 for v in ones)


class TestMakeTolerance:

    def test_single(self):
        assert make_tolerance(np.float32) == np.float32(1e-4)

    def test_double(self):
        assert make_tolerance(FLOAT64) == 2e3 * np.finfo(np.float64).eps

    def test_extended_never_tighter_than_double(self):
        assert make_tolerance(LONGDOUBLE) >= 2e3 * np.finfo(np.float64).eps

    def test_arbitrary_precision(self):
        with mpmath.workdps(30):
            tol = make_tolerance("mpmath")
            assert isinstance(tol, mpmath.mpf)
            assert tol == mpmath.mpf(2e3 * np.finfo(np.float64).eps)
