"""Domain models for the take-off calculation sheet engine.

This package contains the data classes shared by the parsers, classifiers,
derivation table, tracker and assembler.
"""

from .calculation_result import CalculationResult
from .calculation_row import CalculationRow
from .directive import DerivationDirective
from .geometry import ParsedGeometry
from .item_type import ItemType, RowKind
from .raw_input import HeaderIndex, InputRow, RawInput
from .run_result import FileStat, RunResult
from .unused_row import UnusedRowRecord

__all__ = [
    # Input models
    "RawInput",
    "HeaderIndex",
    "InputRow",
    # Sheet models
    "ParsedGeometry",
    "ItemType",
    "RowKind",
    "CalculationRow",
    "DerivationDirective",
    "UnusedRowRecord",
    "CalculationResult",
    # Run models
    "FileStat",
    "RunResult",
]
