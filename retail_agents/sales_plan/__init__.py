"""
Sales plan board: region x category plan/actual tracking with a
store-count-weighted network view.
"""

from .board import PlanBoard
from .errors import (
    HierarchyIntegrityError,
    InvalidDateIndex,
    InvalidInput,
    InvalidRegion,
    InvalidValue,
    PlanBoardError,
    RowNotFound,
)

__all__ = [
    "PlanBoard",
    "PlanBoardError",
    "RowNotFound",
    "InvalidInput",
    "InvalidRegion",
    "InvalidValue",
    "InvalidDateIndex",
    "HierarchyIntegrityError",
]
