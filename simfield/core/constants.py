"""Constants and enumerations shared by the field algorithms."""

from enum import Enum

MAX_RANK = 6
MAX_PER_LINE = 5
DEFAULT_PACK_SIZE = 1
DEFAULT_UNITS = "1"
PERTURB_FIELD_NAME = "perturb_field"
DEFAULT_COLLECTIVE_TIMEOUT = 120.0

ALL_RANKS = tuple(range(0, MAX_RANK + 1))
STAT_RANKS = tuple(range(1, MAX_RANK + 1))
CONTRACTION_RANKS = (1, 2, 3)
HYPERSLAB_RANKS = (0, 1, 2, 3, 4, 5)

SUPPORTED_DTYPES = ("float32", "float64", "int32", "int64")


class Comparison(Enum):
    """Comparison applied between a field entry and a threshold when masking."""

    EQ = 0
    NE = 1
    GT = 2
    GE = 3
    LT = 4
    LE = 5

    @classmethod
    def parse(cls, value):
        """Return the comparison for an enum member, its name or its operator symbol."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key in _SYMBOLS:
                return _SYMBOLS[key]
            try:
                return cls[key.upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown comparison {value!r}. Choose one of {', '.join(m.name for m in cls)}.")

    @property
    def symbol(self):
        return _NAMES[self]


_SYMBOLS = {
    "==": Comparison.EQ,
    "!=": Comparison.NE,
    ">": Comparison.GT,
    ">=": Comparison.GE,
    "<": Comparison.LT,
    "<=": Comparison.LE,
}
_NAMES = {v: k for k, v in _SYMBOLS.items()}
