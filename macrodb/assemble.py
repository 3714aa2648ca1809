"""データベースの時系列を 1 つの数値配列にまとめる（db2array）。

処理の流れ:
    1. 範囲の決定: 端が未指定（None / inf）なら、名前リストの系列の観測期間の合併で補う
    2. 名前ごとの取り出し: リスト順に系列を取り出し、ラグ/リードを反映した範囲で値を得る
    3. 形状の調整と挿入: alternative 数が 1 の側を相手の数まで拡張してから書き込む
    4. 後処理: 診断をカテゴリごとにまとめて出し、出力を最終形状に reshape する

出力配列の形状:
    - 全エントリの trailing shape（期の軸を除いた形状）が同じなら (n_per, n_names, *trailing)
    - 一つでも違えば (n_per, n_names, n_alt) の 3 次元（以降ずっと 3 次元のまま）
    - 一つも挿入できなければ (n_per, n_names) の全 NaN

エントリ単位の問題（名前が無い・系列でない・周波数違い・形状不整合）は例外にせず、
フラグと NaN で表し、最後に Diagnostic として 1 度だけ報告する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from . import diagnostics as diag
from .config import ToolboxConfig
from .database import dbnames, dbrange, parse_names
from .dates import is_unbounded, period_range, shift_range, to_period, ttrend
from .diagnostics import Diagnostic, DiagnosticSink, warn_sink
from .options import FILL_NAN, AssembleOptions, WarnSwitches, normalize_expand_method
from .series import Series, is_series
from .types import NameList, RangeLike

# 時間トレンドを表す予約名。データベースの中身とは無関係に合成される。
TTREND = "!ttrend"


@dataclass
class ArrayResult:
    """db2array の結果。

    - data: 出力配列
    - included: 実際に書き込まれた名前（名前リストの順序を保った部分列）
    - range: 使われた範囲（範囲を決められなかった場合は空の Index）
    - not_found / non_series / freq_mismatch / invalid: 名前リストと並行な bool 配列
    - diagnostics: 有効になっているカテゴリのうち、該当があったものの診断
    """

    data: np.ndarray
    included: List[str]
    range: pd.Index
    not_found: np.ndarray
    non_series: np.ndarray
    freq_mismatch: np.ndarray
    invalid: np.ndarray
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def as_tuple(self) -> Tuple[np.ndarray, List[str], pd.Index, np.ndarray, np.ndarray]:
        """(data, included, range, not_found, non_series) の 5 つ組を返す。"""
        return self.data, self.included, self.range, self.not_found, self.non_series


@dataclass
class _Accumulator:
    """名前ごとのループで更新していく状態をまとめたもの。

    x は作業用の 3 次元配列 (n_per, n_names, n_alt)。最初の挿入まで None。
    outp_size は最初に取り出せた系列の trailing shape。
    is_reshape は「全系列の trailing shape が一致している間」だけ True で、
    一度 False になったら戻らない。
    """

    n_per: int
    n_names: int
    x: Optional[np.ndarray] = None
    outp_size: Optional[Tuple[int, ...]] = None
    is_reshape: bool = True
    included: np.ndarray = field(init=False)
    not_found: np.ndarray = field(init=False)
    non_series: np.ndarray = field(init=False)
    freq_mismatch: np.ndarray = field(init=False)
    invalid: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        for name in ("included", "not_found", "non_series", "freq_mismatch", "invalid"):
            setattr(self, name, np.zeros(self.n_names, dtype=bool))

    @property
    def n_alt(self) -> int:
        if self.x is None:
            return 1
        return max(1, self.x.shape[2])


def db2array(
    d: Mapping[str, Any],
    names: Optional[NameList] = None,
    range_: RangeLike = None,
    options: Optional[AssembleOptions] = None,
    *,
    toolbox: Optional[ToolboxConfig] = None,
    sink: Optional[DiagnosticSink] = warn_sink,
) -> ArrayResult:
    """データベースの時系列を数値配列に変換する。

    Args:
        d: データベース（名前 -> 値）。読むだけで変更しない。
        names: 取り出す名前のリスト。None ならデータベース中の全 Series。
            文字列は単語ごとに分割する。"!ttrend" は時間トレンドを表す。
        range_: (start, end) の組か PeriodIndex。None や inf の端は観測期間から補う。
        options: AssembleOptions。None なら既定値。
        toolbox: 基準年・拡張方法の既定値。None なら ToolboxConfig()。
        sink: 診断の出力先。None なら出力せず、結果の diagnostics だけに残る。

    Returns:
        ArrayResult。

    Raises:
        ValueError: オプションのベクトル長が名前リストと合わない場合など、呼び出し側の誤り。
        FrequencyError: 指定された範囲の両端の周波数が異なる場合。
    """

    options = options if options is not None else AssembleOptions()
    toolbox = toolbox if toolbox is not None else ToolboxConfig()
    base_year = options.base_year if options.base_year is not None else toolbox.base_year
    expand_method = options.expand_method or normalize_expand_method(toolbox.expand_method)

    # 名前リストと範囲が逆に渡された場合は入れ替える。
    if _looks_like_range(names) and _looks_like_names(range_):
        names, range_ = range_, names

    if names is None:
        names = dbnames(d, class_filter=Series)
    name_list = parse_names(names)
    n_names = len(name_list)
    options.check_length(n_names)

    periods = _resolve_range(d, name_list, range_)
    if periods is None:
        return _no_range_result(n_names, options.warn, sink)

    acc = _Accumulator(n_per=len(periods), n_names=n_names)
    range_freq = periods.freqstr

    for i, name in enumerate(tqdm(name_list, desc="db2array", disable=not options.progress)):
        k = options.shift_for(i)
        if name == TTREND:
            values = ttrend(shift_range(periods, k), base_year).reshape(-1, 1)
        else:
            if name not in d:
                acc.not_found[i] = True
                continue
            entry = d[name]
            if not is_series(entry):
                acc.non_series[i] = True
                continue
            values = _extract_series(acc, i, entry, shift_range(periods, k), range_freq)
        _add_data(acc, i, values, expand_method, options.log_for(i))

    diagnostics = _collect_diagnostics(acc, name_list, options.warn)
    diag.emit(diagnostics, sink)

    return ArrayResult(
        data=_finalize(acc),
        included=[name for name, flag in zip(name_list, acc.included) if flag],
        range=periods,
        not_found=acc.not_found,
        non_series=acc.non_series,
        freq_mismatch=acc.freq_mismatch,
        invalid=acc.invalid,
        diagnostics=diagnostics,
    )


def _looks_like_range(value: Any) -> bool:
    if isinstance(value, (pd.PeriodIndex, pd.Period)):
        return True
    if isinstance(value, str):
        return False
    if isinstance(value, (tuple, list)):
        return len(value) > 0 and all(
            isinstance(v, pd.Period) or (not isinstance(v, str) and is_unbounded(v))
            for v in value
        )
    return value is not None and is_unbounded(value)


def _looks_like_names(value: Any) -> bool:
    if isinstance(value, str):
        return not is_unbounded(value)
    if isinstance(value, (tuple, list)):
        return len(value) > 0 and all(
            isinstance(v, str) and not is_unbounded(v) for v in value
        )
    return False


def _resolve_range(
    d: Mapping[str, Any], names: Sequence[str], range_: RangeLike
) -> Optional[pd.PeriodIndex]:
    """範囲を閉区間の PeriodIndex に確定させる。決められなければ None。"""

    if isinstance(range_, pd.PeriodIndex) and len(range_) == 0:
        return range_
    if range_ is None or (not isinstance(range_, (str, pd.Period)) and is_unbounded(range_)):
        start_in, end_in = None, None
    elif isinstance(range_, (str, pd.Period)):
        start_in, end_in = range_, range_
    else:
        bounds = list(range_)
        if not bounds:
            start_in, end_in = None, None
        else:
            start_in, end_in = bounds[0], bounds[-1]

    start_open = is_unbounded(start_in)
    end_open = is_unbounded(end_in)
    if not start_open and not end_open:
        return period_range(start_in, end_in)

    # 指定済みの端があれば、その周波数の系列だけで観測期間を合併する。
    freq = None
    if not start_open:
        freq = to_period(start_in).freqstr
    elif not end_open:
        freq = to_period(end_in).freqstr

    inferred = dbrange(d, names, freq=freq)
    if inferred is None:
        return None
    start = inferred[0] if start_open else to_period(start_in)
    end = inferred[-1] if end_open else end_in
    return period_range(start, end)


def _no_range_result(
    n_names: int, warn: WarnSwitches, sink: Optional[DiagnosticSink]
) -> ArrayResult:
    diagnostics = []
    if warn.no_range_found:
        diagnostics.append(Diagnostic.create(diag.NO_RANGE_FOUND))
    diag.emit(diagnostics, sink)
    flags = np.zeros(n_names, dtype=bool)
    return ArrayResult(
        data=np.empty((0, 0)),
        included=[],
        range=pd.Index([]),
        not_found=flags.copy(),
        non_series=flags.copy(),
        freq_mismatch=flags.copy(),
        invalid=flags.copy(),
        diagnostics=diagnostics,
    )


def _extract_series(
    acc: _Accumulator,
    i: int,
    series: Series,
    periods: pd.PeriodIndex,
    range_freq: str,
) -> np.ndarray:
    """系列の値を (n_per, 平坦化した trailing サイズ) の 2 次元で返す。"""

    # 周波数が違う系列は、現在の alternative 数の NaN で置き換える。
    if series.freq is not None and series.freq != range_freq:
        acc.freq_mismatch[i] = True
        return np.full((acc.n_per, acc.n_alt), np.nan)

    values = series.range_data(periods)
    i_size = tuple(values.shape[1:])
    if acc.outp_size is None:
        acc.outp_size = i_size
    else:
        acc.is_reshape = acc.is_reshape and acc.outp_size == i_size
    return values.reshape(acc.n_per, int(np.prod(i_size, dtype=int)))


def _expand(x: np.ndarray, n: int, method: str) -> np.ndarray:
    # 3 次元目が 1 の配列を n まで複製する。FILL_NAN なら 2 列目以降を NaN にする。
    out = np.repeat(x, n, axis=2)
    if method == FILL_NAN:
        out[:, :, 1:] = np.nan
    return out


def _add_data(
    acc: _Accumulator, i: int, values: np.ndarray, method: str, take_log: bool
) -> None:
    if acc.x is None:
        acc.x = np.full((acc.n_per, acc.n_names, values.shape[1]), np.nan)

    column = values[:, np.newaxis, :]
    n_alt_x = acc.x.shape[2]
    n_alt_i = column.shape[2]

    # alternative 数が 1 の側を相手の数まで拡張する（縮小はしない）。
    if n_alt_x == 1 and n_alt_i > 1:
        acc.x = _expand(acc.x, n_alt_i, method)
    elif n_alt_x > 1 and n_alt_i == 1:
        column = _expand(column, n_alt_x, method)

    if acc.x.shape[2] != column.shape[2]:
        acc.invalid[i] = True
        return

    if take_log:
        with np.errstate(divide="ignore", invalid="ignore"):
            column = np.log(column)
    acc.x[:, i, :] = column[:, 0, :]
    acc.included[i] = True


def _collect_diagnostics(
    acc: _Accumulator, names: Sequence[str], warn: WarnSwitches
) -> List[Diagnostic]:
    checks = (
        (warn.not_found, acc.not_found, diag.NAME_NOT_EXIST),
        (warn.size_mismatch, acc.invalid, diag.ENTRY_SIZE_MISMATCH),
        (warn.freq_mismatch, acc.freq_mismatch, diag.ENTRY_FREQUENCY_MISMATCH),
        (warn.non_series, acc.non_series, diag.ENTRY_NOT_SERIES),
    )
    diagnostics = []
    for enabled, flags, code in checks:
        if enabled and flags.any():
            flagged = [name for name, flag in zip(names, flags) if flag]
            diagnostics.append(Diagnostic.create(code, flagged))
    return diagnostics


def _finalize(acc: _Accumulator) -> np.ndarray:
    if acc.x is None:
        return np.full((acc.n_per, acc.n_names), np.nan)
    if not acc.is_reshape:
        return acc.x

    trailing = acc.outp_size if acc.outp_size is not None else ()
    if int(np.prod(trailing, dtype=int)) != acc.x.shape[2]:
        return acc.x
    return acc.x.reshape((acc.n_per, acc.n_names) + tuple(trailing))
