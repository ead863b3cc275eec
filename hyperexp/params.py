"""
Classical parameters of the distributions as frozen dataclasses.

The containers are immutable and slotted, so a distribution can hand out its
parameters without copying; values keep the distribution's real type.
Fields read as attributes (``params.rates``) or by name
(``params["rates"]``), and ``dataclasses.asdict`` turns them into plain dicts.

Examples
--------
>>> from hyperexp.params import HyperexponentialParams
>>> params = HyperexponentialParams(probabilities=(0.25, 0.75), rates=(1.0, 4.0))
>>> params["rates"]
(1.0, 4.0)
>>> params.n_phases
2
>>> params.rates = (2.0, 8.0)  # Raises FrozenInstanceError
"""

from dataclasses import dataclass, fields
from typing import Any, Tuple


class _FieldAccess:
    """Read-only mapping view over the fields of a dataclass."""

    __slots__ = ()

    def __getitem__(self, name: str):
        if name not in self:
            raise KeyError(name)
        return getattr(self, name)

    def __contains__(self, name: str) -> bool:
        return any(f.name == name for f in fields(self))

    def keys(self):
        return [f.name for f in fields(self)]

    def values(self):
        return [getattr(self, name) for name in self.keys()]

    def items(self):
        return [(name, getattr(self, name)) for name in self.keys()]


@dataclass(frozen=True, slots=True)
class ExponentialParams(_FieldAccess):
    """Rate :math:`\\lambda > 0` of an exponential phase."""
    rate: Any


@dataclass(frozen=True, slots=True)
class HyperexponentialParams(_FieldAccess):
    """
    Phase parameters of a hyperexponential distribution.

    Attributes
    ----------
    probabilities : tuple
        Phase selection probabilities, normalized to sum to 1.
    rates : tuple
        Phase rates, aligned with ``probabilities``.
    """
    probabilities: Tuple[Any, ...]
    rates: Tuple[Any, ...]

    @property
    def n_phases(self) -> int:
        return len(self.rates)


__all__ = [
    "ExponentialParams",
    "HyperexponentialParams",
]
