"""db2array が集約して返す診断情報（Diagnostic）と、その出力先（sink）。

方針:
    - 名前が見つからない等のエントリ単位の問題は例外にしない。
    - カテゴリごとに 1 件の Diagnostic にまとめ、呼び出しの最後に 1 度だけ sink に渡す。
    - 既定の sink は warnings.warn で DbaseWarning を出す。sink=None なら何も出さない。
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

NAME_NOT_EXIST = "Dbase:NameNotExist"
ENTRY_SIZE_MISMATCH = "Dbase:EntrySizeMismatch"
ENTRY_FREQUENCY_MISMATCH = "Dbase:EntryFrequencyMismatch"
ENTRY_NOT_SERIES = "Dbase:EntryNotSeries"
NO_RANGE_FOUND = "Dbase:NoRangeFound"

_MESSAGES = {
    NAME_NOT_EXIST: "This name does not exist in the database",
    ENTRY_SIZE_MISMATCH: "Size of this database entry is not consistent with other entries",
    ENTRY_FREQUENCY_MISMATCH: "Frequency of this database entry does not match the date range",
    ENTRY_NOT_SERIES: "This database entry is not a time series",
    NO_RANGE_FOUND: (
        "Cannot determine range because no time series entries "
        "have been found in the database"
    ),
}


class DbaseWarning(UserWarning):
    """db2array の診断を warnings 経由で出すときのカテゴリ。"""


@dataclass(frozen=True)
class Diagnostic:
    """1 カテゴリ分の診断。names はそのカテゴリに該当した名前（出現順）。"""

    code: str
    names: Tuple[str, ...] = field(default_factory=tuple)
    message: str = ""

    @classmethod
    def create(cls, code: str, names: Sequence[str] = ()) -> "Diagnostic":
        return cls(code=code, names=tuple(names), message=_MESSAGES[code])

    def format(self) -> str:
        if not self.names:
            return f"[{self.code}] {self.message}."
        return f"[{self.code}] {self.message}: " + ", ".join(self.names)


DiagnosticSink = Callable[[Diagnostic], None]


def warn_sink(diagnostic: Diagnostic) -> None:
    """診断を DbaseWarning として warnings.warn に渡す。"""

    warnings.warn(diagnostic.format(), DbaseWarning, stacklevel=3)


def emit(diagnostics: Sequence[Diagnostic], sink: Optional[DiagnosticSink]) -> None:
    if sink is None:
        return
    for diagnostic in diagnostics:
        sink(diagnostic)
