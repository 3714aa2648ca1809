"""db2array のオプション。

AssembleOptions は設定辞書から from_config で作れるようにしてある
（設定ファイルの [options] テーブルをそのまま渡す想定）。
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Sequence

import numpy as np

REPEAT_LAST = "repeat_last"
FILL_NAN = "nan"

_EXPAND_ALIASES = {
    "repeat_last": REPEAT_LAST,
    "repeatlast": REPEAT_LAST,
    "repeat_last_column": REPEAT_LAST,
    "nan": FILL_NAN,
    "fill_with_missing": FILL_NAN,
    "fill_missing": FILL_NAN,
}


def normalize_expand_method(value: Any) -> str:
    """拡張方法の表記ゆれ（"RepeatLast", "fill-with-missing" など）を正規化する。"""

    key = str(value).strip().lower().replace("-", "_")
    try:
        return _EXPAND_ALIASES[key]
    except KeyError:
        raise ValueError(f"未知の expand_method が指定されました: {value!r}") from None


@dataclass(frozen=True)
class WarnSwitches:
    """診断カテゴリごとの出力スイッチ。"""

    not_found: bool = True
    size_mismatch: bool = True
    freq_mismatch: bool = True
    non_series: bool = True
    no_range_found: bool = True

    @classmethod
    def from_mapping(cls, config: Optional[Mapping[str, Any]]) -> "WarnSwitches":
        config_dict = dict(config or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise TypeError(f"Unknown warn switch(es): {', '.join(unknown)}")
        return cls(**{key: bool(value) for key, value in config_dict.items()})

    @classmethod
    def none(cls) -> "WarnSwitches":
        return cls(False, False, False, False, False)


@dataclass
class AssembleOptions:
    """db2array の挙動を決めるオプション。

    - lag_or_lead: 名前ごとの範囲シフト（正: リード、負: ラグ）。None なら全て 0
    - ix_log: 名前ごとに自然対数をとるか。None なら全て False
    - warn: 診断カテゴリごとのスイッチ
    - base_year: !ttrend の基準年。None なら ToolboxConfig の値
    - expand_method: alternative 数の拡張方法。None なら ToolboxConfig の値
    - progress: tqdm の進捗バーを表示するか
    """

    lag_or_lead: Optional[Sequence[int]] = None
    ix_log: Optional[Sequence[bool]] = None
    warn: WarnSwitches = field(default_factory=WarnSwitches)
    base_year: Optional[int] = None
    expand_method: Optional[str] = None
    progress: bool = False

    def __post_init__(self) -> None:
        if self.expand_method is not None:
            self.expand_method = normalize_expand_method(self.expand_method)
        if self.lag_or_lead is not None:
            self.lag_or_lead = [int(k) for k in np.ravel(self.lag_or_lead)]
        if self.ix_log is not None:
            self.ix_log = [bool(flag) for flag in np.ravel(self.ix_log)]

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "AssembleOptions":
        """設定辞書から構築する。warn はサブ辞書として受け取る。

        Raises:
            TypeError: 未知のキーが含まれる場合。
        """

        config_dict = dict(config or {})
        warn = WarnSwitches.from_mapping(config_dict.pop("warn", None))
        return cls(warn=warn, **config_dict)

    def check_length(self, n_names: int) -> None:
        """名前ごとのベクトルが名前リストと同じ長さかを確認する。"""

        for label, values in (("lag_or_lead", self.lag_or_lead), ("ix_log", self.ix_log)):
            # 空リストは「未指定」と同じ扱い。
            if values and len(values) != n_names:
                raise ValueError(
                    f"{label} の長さ ({len(values)}) が名前の数 ({n_names}) と一致しません"
                )

    def shift_for(self, i: int) -> int:
        if not self.lag_or_lead:
            return 0
        return self.lag_or_lead[i]

    def log_for(self, i: int) -> bool:
        if not self.ix_log:
            return False
        return self.ix_log[i]
