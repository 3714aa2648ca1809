"""期間インデックス付きの時系列（Series）。

責務:
    - 開始期 start と数値配列 data（形状 (n,) または (n, *alt_shape)）を保持する
    - 任意の範囲（シフト済みでもよい）に対する値の取り出し（範囲外は NaN）
    - 非欠損観測の期間（observation span）の報告
    - 差分 diff

設計意図:
    データ配列の 2 次元目以降は「alternative（並列列）」として扱い、
    assemble.db2array はこの形状をそのまま出力の 3 次元目以降へ写す。

注意:
    構築時に先頭・末尾の「全列 NaN の行」を取り除く。全行 NaN の系列は空系列になり、
    start は None になる（周波数は指定されていれば保持する）。
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np
import pandas as pd

from .dates import empty_range, period_range, to_period
from .exceptions import FrequencyError
from .types import ArrayLike, PeriodLike


class Series:
    """期間インデックス付き時系列。"""

    def __init__(
        self,
        start: Optional[PeriodLike] = None,
        data: ArrayLike = (),
        freq: Optional[str] = None,
        comment: str = "",
    ) -> None:
        data_arr = np.array(data, dtype=float)
        if data_arr.ndim == 0:
            data_arr = data_arr.reshape(1)

        if start is None:
            # 開始期が無い系列はデータを持てない（空系列のみ）。
            if data_arr.shape[0] != 0:
                raise ValueError("start を指定せずにデータを持つ系列は作れません")
            self._start: Optional[pd.Period] = None
            self._freq = freq
            self.data = data_arr
        else:
            start_p = to_period(start, freq=freq)
            self._freq = start_p.freqstr
            self._start, self.data = self._trim(start_p, data_arr)

        self.comment = comment

    @classmethod
    def from_pandas(cls, obj: pd.Series, freq: Optional[str] = None) -> "Series":
        """pandas.Series から系列を作る。

        インデックスは PeriodIndex か DatetimeIndex を想定する。
        間の抜けた期は NaN で埋める。
        """

        index = obj.index
        if len(index) == 0:
            return cls(freq=freq)
        if isinstance(index, pd.DatetimeIndex):
            if freq is None:
                raise ValueError("DatetimeIndex から変換するには freq が必要です")
            index = index.to_period(freq)
        elif not isinstance(index, pd.PeriodIndex):
            index = pd.PeriodIndex([to_period(value, freq) for value in index])
        elif freq is not None:
            index = index.asfreq(freq)

        values = np.asarray(obj.to_numpy(), dtype=float)
        ordinals = np.asarray(index.asi8, dtype=np.int64)
        first = int(ordinals.min())
        n_per = int(ordinals.max()) - first + 1
        data = np.full(n_per, np.nan)
        data[ordinals - first] = values
        start = index[int(np.argmin(ordinals))]
        return cls(start=start, data=data, comment=str(obj.name or ""))

    @staticmethod
    def _trim(start: pd.Period, data: np.ndarray) -> Tuple[Optional[pd.Period], np.ndarray]:
        if data.shape[0] == 0:
            return None, data
        all_nan = np.isnan(data.reshape(data.shape[0], -1)).all(axis=1)
        keep = np.flatnonzero(~all_nan)
        if keep.size == 0:
            return None, data[:0]
        first = int(keep[0])
        last = int(keep[-1])
        return start + first, data[first : last + 1]

    @property
    def start(self) -> Optional[pd.Period]:
        return self._start

    @property
    def end(self) -> Optional[pd.Period]:
        if self._start is None:
            return None
        return self._start + (self.data.shape[0] - 1)

    @property
    def freq(self) -> Optional[str]:
        """周波数の識別子（Period.freqstr）。空系列で未指定なら None。"""
        return self._freq

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self.data.shape)

    @property
    def alt_shape(self) -> Tuple[int, ...]:
        """期の軸を除いた形状（trailing shape）。"""
        return tuple(self.data.shape[1:])

    @property
    def range(self) -> pd.PeriodIndex:
        if self._start is None:
            if self._freq is None:
                raise ValueError("周波数の無い空系列には範囲がありません")
            return empty_range(self._freq)
        return period_range(self._start, self.end)

    def is_empty(self) -> bool:
        return self._start is None

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def __repr__(self) -> str:
        if self._start is None:
            return f"Series(empty, freq={self._freq!r}, alt_shape={self.alt_shape})"
        return (
            f"Series({self._start}..{self.end}, freq={self._freq!r}, "
            f"alt_shape={self.alt_shape})"
        )

    def copy(self) -> "Series":
        if self._start is None:
            return Series(freq=self._freq, data=self.data.copy(), comment=self.comment)
        return Series(start=self._start, data=self.data.copy(), comment=self.comment)

    def observation_span(self) -> Optional[Tuple[pd.Period, pd.Period]]:
        """非欠損観測の (最初の期, 最後の期) を返す。空系列なら None。"""

        if self._start is None:
            return None
        return self._start, self.end

    def range_data(self, periods: pd.PeriodIndex) -> np.ndarray:
        """指定範囲の値を返す。

        Args:
            periods: 取り出す期の並び（系列と同じ周波数）。

        Returns:
            形状 (len(periods), *alt_shape) の配列。系列の保持範囲外は NaN。

        Raises:
            FrequencyError: periods の周波数が系列と異なる場合。
        """

        n_per = len(periods)
        out = np.full((n_per,) + self.alt_shape, np.nan)
        if self._start is None or n_per == 0:
            return out
        if periods.freqstr != self._freq:
            raise FrequencyError(
                f"系列の周波数 {self._freq} と範囲の周波数 {periods.freqstr} が異なります"
            )

        # 系列先頭からの相対位置に変換し、保持範囲に入る期だけ写す。
        pos = np.asarray(periods.asi8, dtype=np.int64) - self._start.ordinal
        valid = (pos >= 0) & (pos < self.data.shape[0])
        out[valid] = self.data[pos[valid]]
        return out

    def diff(self, shift: int = -1, order: int = 1) -> "Series":
        """差分 x(t) - x(t+shift) を order 回とった系列を返す。

        shift=-1（既定）は通常の 1 期差分 x(t) - x(t-1)。

        Raises:
            TypeError: shift/order が整数でない場合。
            ValueError: order が負の場合。
        """

        if not _is_int(shift):
            raise TypeError("shift は整数である必要があります")
        if not _is_int(order):
            raise TypeError("order は整数である必要があります")
        if order < 0:
            raise ValueError("order は 0 以上である必要があります")

        if self._start is None:
            return self.copy()

        data = self.data.copy()
        for _ in range(int(order)):
            data = data - _shift_rows(data, int(shift))
        return Series(start=self._start, data=data, comment=self.comment)


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _shift_rows(data: np.ndarray, shift: int) -> np.ndarray:
    # 行 t に x(t+shift) を置く。はみ出した行は NaN。
    n_per = data.shape[0]
    shifted = np.full_like(data, np.nan)
    if shift == 0:
        shifted[...] = data
    elif shift < 0 and -shift < n_per:
        shifted[-shift:] = data[: n_per + shift]
    elif 0 < shift < n_per:
        shifted[: n_per - shift] = data[shift:]
    return shifted


def is_series(value: Any) -> bool:
    """値が Series の機能（freq, range_data, observation_span）を持つかを返す。"""

    return isinstance(value, Series)
