"""データベース（名前 -> 値 の Mapping）に対する補助関数。

データベースは呼び出し側が所有する普通の dict でよい。
ここでは名前の列挙、観測期間の合併（dbrange）、DataFrame からの構築だけを提供する。
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

import pandas as pd

from .dates import period_range
from .series import Series, is_series
from .types import NameList

_NAME_PATTERN = re.compile(r"\w+")


def parse_names(names: NameList) -> List[str]:
    """名前リストを list[str] に正規化する。文字列は単語境界で分割する。"""

    if isinstance(names, str):
        return _NAME_PATTERN.findall(names)
    return [str(name) for name in names]


def dbnames(d: Mapping[str, Any], class_filter: Optional[type] = None) -> List[str]:
    """データベースの名前を挿入順で返す。

    Args:
        d: データベース。
        class_filter: 指定した場合、その型のインスタンスを値に持つ名前だけを返す。
    """

    if class_filter is None:
        return list(d.keys())
    return [name for name, value in d.items() if isinstance(value, class_filter)]


def dbrange(
    d: Mapping[str, Any],
    names: Optional[NameList] = None,
    freq: Optional[str] = None,
) -> Optional[pd.PeriodIndex]:
    """names に含まれる系列の観測期間を合併した範囲を返す。

    最も早い開始期から最も遅い終了期までを返す（union）。
    周波数は freq が指定されればそれに限り、未指定なら観測を持つ最初の系列の周波数に従う。
    他の周波数の系列は無視する。

    Returns:
        合併範囲の PeriodIndex。対象となる系列が一つも無ければ None。
    """

    if names is None:
        names = dbnames(d, class_filter=Series)
    names = parse_names(names)

    first = None
    last = None
    for name in names:
        value = d.get(name)
        if not is_series(value):
            continue
        span = value.observation_span()
        if span is None:
            continue
        if freq is None:
            freq = value.freq
        if value.freq != freq:
            continue
        start, end = span
        if first is None or start < first:
            first = start
        if last is None or end > last:
            last = end

    if first is None:
        return None
    return period_range(first, last)


def database_from_frame(frame: pd.DataFrame, freq: Optional[str] = None) -> dict:
    """DataFrame の各列を 1 本の Series とするデータベースを作る。"""

    return {
        str(column): Series.from_pandas(frame[column], freq=freq)
        for column in frame.columns
    }
