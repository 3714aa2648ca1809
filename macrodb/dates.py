"""期間（Period）と周波数を扱うユーティリティ。

責務:
    - 文字列や Timestamp を pd.Period に正規化する
    - 範囲の端が「未指定（unbounded）」かを判定する
    - 閉区間 [start, end] の PeriodIndex を作る（周波数は start に従う）
    - ラグ/リードによる範囲のシフトと、時間トレンド系列の生成

周波数の識別子には Period.freqstr（"M", "Q-DEC" など）を使う。
"""

from __future__ import annotations

import datetime as _dt
import math
from typing import Optional

import numpy as np
import pandas as pd

from .exceptions import FrequencyError
from .types import PeriodLike

_UNBOUNDED_STRINGS = {"inf", "+inf", "-inf"}


def is_unbounded(value: PeriodLike) -> bool:
    """範囲の端が未指定（None / ±inf）なら True を返す。"""

    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in _UNBOUNDED_STRINGS
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(
        value, bool
    ):
        return math.isinf(float(value))
    return False


def to_period(value: PeriodLike, freq: Optional[str] = None) -> pd.Period:
    """値を pd.Period に変換する。

    Args:
        value: pd.Period、"2020Q1" / "2020-01" のような文字列、Timestamp/datetime。
        freq: 周波数。文字列から推論できない場合や Timestamp の場合に使う。

    Returns:
        変換後の pd.Period。

    Raises:
        TypeError: 解釈できない型が渡された場合。
        ValueError: 文字列が日付として解釈できない場合（pandas 由来）。
    """

    if isinstance(value, pd.Period):
        return value
    if isinstance(value, str):
        return pd.Period(value.strip(), freq=freq)
    if isinstance(value, (pd.Timestamp, _dt.date)):
        if freq is None:
            raise TypeError("Timestamp から Period を作るには freq が必要です")
        return pd.Period(value, freq=freq)
    raise TypeError(f"Period に変換できない値です: {value!r}")


def freq_of(period: pd.Period) -> str:
    """Period の周波数識別子を返す。"""

    return period.freqstr


def empty_range(freq: str) -> pd.PeriodIndex:
    """長さ 0 の PeriodIndex を返す。"""

    return pd.PeriodIndex([], freq=freq)


def period_range(start: PeriodLike, end: PeriodLike) -> pd.PeriodIndex:
    """閉区間 start..end の PeriodIndex を返す。

    周波数は start に従う。start > end の場合は空の範囲になる。

    Raises:
        FrequencyError: start と end の周波数が異なる場合。
    """

    start_p = to_period(start)
    end_p = to_period(end, freq=start_p.freqstr)
    if end_p.freqstr != start_p.freqstr:
        raise FrequencyError(
            f"範囲の両端の周波数が一致しません: {start_p.freqstr} と {end_p.freqstr}"
        )
    n_per = end_p.ordinal - start_p.ordinal + 1
    if n_per <= 0:
        return empty_range(start_p.freqstr)
    return pd.period_range(start=start_p, periods=n_per, freq=start_p.freq)


def shift_range(periods: pd.PeriodIndex, k: int) -> pd.PeriodIndex:
    """範囲を k 期ずらす（正: リード、負: ラグ）。"""

    k = int(k)
    if k == 0 or len(periods) == 0:
        return periods
    return periods.shift(k)


def ttrend(periods: pd.PeriodIndex, base_year: int) -> np.ndarray:
    """時間トレンドを返す。

    base_year の最初の期を 0 とし、そこからの経過期数を float で返す。
    例: 四半期で base_year=2000 なら 2000Q1 -> 0, 2000Q2 -> 1, 1999Q4 -> -1。
    """

    if len(periods) == 0:
        return np.zeros(0, dtype=float)
    base = pd.Period(f"{int(base_year)}-01-01", freq=periods.freq)
    return (np.asarray(periods.asi8, dtype=np.int64) - base.ordinal).astype(float)
