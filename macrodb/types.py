"""型エイリアス。

pandas / numpy の具体型をそのまま注釈に書くと長くなるため、
パッケージ内で共通に使う別名をここにまとめる。
"""

from typing import Any, Optional, Sequence, Tuple, Union

import pandas as pd

# ArrayLike:
# - np.asarray で配列化できる入力全般。
ArrayLike = Any

# PeriodLike:
# - pd.Period、"2020Q1" のような文字列、Timestamp など、to_period で解釈できる値。
# - None / ±inf は「範囲の端が未指定（unbounded）」を表す。
PeriodLike = Any

# RangeLike:
# - (start, end) の組、または PeriodIndex。None は両端とも未指定。
RangeLike = Optional[Union[Tuple[PeriodLike, PeriodLike], Sequence[PeriodLike], pd.PeriodIndex]]

# NameList:
# - 名前のリスト。"a, b c" のような区切り文字列も受け付ける。
NameList = Union[str, Sequence[str]]
