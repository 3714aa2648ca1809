"""設定ファイル（TOML/JSON）の読み込みと、ツールボックス全体の既定値。

目的:
    db2array の実行条件（名前リスト・範囲・オプション）を設定ファイルに外出しし、
    同じ変換を再現できるようにする。

    基準年（時間トレンドの原点）のような「ツールボックス共通の既定値」は
    プロセス全体のシングルトンにせず、ToolboxConfig として明示的に呼び出しへ渡す。
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

DEFAULT_BASE_YEAR = 2000


def load_config(path: Path) -> Dict[str, Any]:
    """設定ファイルを読み込み、辞書として返す。

    Args:
        path: 設定ファイルへのパス。拡張子（.toml / .json）でフォーマットを判定する。

    Raises:
        FileNotFoundError: 指定パスが存在しない場合。
        ValueError: 対応していない拡張子の場合。
        json.JSONDecodeError / tomllib.TOMLDecodeError: パースに失敗した場合。
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".toml":
        # tomllib はバイナリモードのファイルを要求する。
        with path.open("rb") as handle:
            return tomllib.load(handle)

    if suffix == ".json":
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    raise ValueError(f"Unsupported config format: {path.suffix}")


@dataclass(frozen=True)
class ToolboxConfig:
    """ツールボックス共通の既定値。

    - base_year: 時間トレンド（!ttrend）の原点となる年
    - expand_method: alternative 数を揃えるときの既定の拡張方法
    """

    base_year: int = DEFAULT_BASE_YEAR
    expand_method: str = "repeat_last"

    @classmethod
    def from_mapping(cls, config: Optional[Mapping[str, Any]]) -> "ToolboxConfig":
        """辞書から構築する。未知のキーは TypeError。"""

        config_dict = dict(config or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise TypeError(f"Unknown toolbox config key(s): {', '.join(unknown)}")
        if "base_year" in config_dict:
            config_dict["base_year"] = int(config_dict["base_year"])
        return cls(**config_dict)
