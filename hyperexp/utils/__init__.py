"""Utility functions for hyperexp package."""

from .precision import (
    RealType,
    NumpyRealType,
    MpmathRealType,
    FLOAT32,
    FLOAT64,
    LONGDOUBLE,
    MPMATH,
    real_type,
    infer_real_type,
    make_tolerance,
)
from .roots import RootFindingPolicy, RootResult, bracket_root, expand_upper_bracket

__all__ = [
    'RealType', 'NumpyRealType', 'MpmathRealType',
    'FLOAT32', 'FLOAT64', 'LONGDOUBLE', 'MPMATH',
    'real_type', 'infer_real_type', 'make_tolerance',
    'RootFindingPolicy', 'RootResult', 'bracket_root', 'expand_upper_bracket',
]
