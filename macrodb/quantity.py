"""モデルの数量（変数・ショック・パラメータ）名と、方程式中の置換パターン。

方程式文字列を評価可能な形にする後処理で、各数量名を x(i,t) 形式の参照に置き換える。
std_<shock> / corr_<shock1>__<shock2> は数量の後ろに並ぶ標準偏差・相関ベクトルを指す。

std/corr ベクトルの並び:
    - 先頭にショックごとの std_（ショックの並び順）
    - 続いて相関。ショック数 n の下三角 (r > c) を列優先で並べる
      (e2,e1), (e3,e1), ..., (en,e1), (e3,e2), ...
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import InvalidStdCorrError

SHOCK_TYPES = ("measurement_shock", "transition_shock")
STD_PREFIX = "std_"
CORR_PREFIX = "corr_"


class Quantity:
    """数量名と種類を保持する。"""

    def __init__(self, names: Sequence[str], types: Sequence[str]) -> None:
        if len(names) != len(types):
            raise ValueError("names と types の長さが一致しません")
        self.names = [str(name) for name in names]
        self.types = [str(t) for t in types]
        self._std_corr_pos = self._build_std_corr_index()

    def __len__(self) -> int:
        return len(self.names)

    @property
    def shocks(self) -> List[str]:
        return [name for name, t in zip(self.names, self.types) if t in SHOCK_TYPES]

    def _build_std_corr_index(self) -> Dict[str, int]:
        shocks = self.shocks
        n_shocks = len(shocks)
        index = {f"{STD_PREFIX}{name}": pos for pos, name in enumerate(shocks)}
        pos = n_shocks
        for c in range(n_shocks):
            for r in range(c + 1, n_shocks):
                # corr は対称なので両方の順序で引けるようにする。
                index[f"{CORR_PREFIX}{shocks[r]}__{shocks[c]}"] = pos
                index[f"{CORR_PREFIX}{shocks[c]}__{shocks[r]}"] = pos
                pos += 1
        return index

    def std_corr_names(self) -> List[str]:
        """std/corr ベクトルの正規名を並び順で返す。"""

        shocks = self.shocks
        names = [f"{STD_PREFIX}{name}" for name in shocks]
        for c in range(len(shocks)):
            for r in range(c + 1, len(shocks)):
                names.append(f"{CORR_PREFIX}{shocks[r]}__{shocks[c]}")
        return names

    def lookup_std_corr(self, names: Sequence[str]) -> List[Optional[int]]:
        """std/corr 名の位置（0 始まり）を返す。該当しない名前は None。"""

        return [self._std_corr_pos.get(name) for name in names]

    def pattern_replacements(
        self, std_corr_names: Sequence[str] = ()
    ) -> Tuple[List[str], List[str]]:
        """数量名と std/corr 名の置換文字列を返す。

        Returns:
            (rpl, rpl_std_corr)
            - rpl: i 番目の数量に対する "x(i,t)"（i は 1 始まり）
            - rpl_std_corr: std/corr 名に対する "x(n_quantities + pos + 1,t)"

        Raises:
            InvalidStdCorrError: 対応するショックの無い std/corr 名があった場合。
        """

        n_quan = len(self.names)
        rpl = [f"x({i},t)" for i in range(1, n_quan + 1)]

        positions = self.lookup_std_corr(std_corr_names)
        invalid = [name for name, pos in zip(std_corr_names, positions) if pos is None]
        if invalid:
            raise InvalidStdCorrError(invalid)

        rpl_std_corr = [f"x({n_quan + pos + 1},t)" for pos in positions]
        return rpl, rpl_std_corr
