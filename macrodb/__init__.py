"""macrodb パッケージ。

外部に公開する API（時系列・データベース補助・db2array）をここで再エクスポートする。
利用者は基本的に `from macrodb import Series, db2array` の形で import できる。
"""

from .assemble import TTREND, ArrayResult, db2array
from .config import ToolboxConfig, load_config
from .database import database_from_frame, dbnames, dbrange
from .diagnostics import DbaseWarning, Diagnostic
from .exceptions import FrequencyError, InvalidStdCorrError, MacrodbError
from .options import AssembleOptions, WarnSwitches
from .quantity import Quantity
from .series import Series, is_series

__all__ = [
    "ArrayResult",
    "AssembleOptions",
    "DbaseWarning",
    "Diagnostic",
    "FrequencyError",
    "InvalidStdCorrError",
    "MacrodbError",
    "Quantity",
    "Series",
    "TTREND",
    "ToolboxConfig",
    "WarnSwitches",
    "database_from_frame",
    "db2array",
    "dbnames",
    "dbrange",
    "is_series",
    "load_config",
]
