"""macrodb が送出する例外。

エントリ単位の不整合（名前が無い、周波数が違うなど）は例外ではなく
Diagnostic として返す。ここにあるのは呼び出し側の誤りを表すものだけ。
"""


class MacrodbError(Exception):
    """macrodb の例外の基底クラス。"""


class FrequencyError(MacrodbError, ValueError):
    """範囲の両端や系列どうしで周波数が一致しない。"""


class InvalidStdCorrError(MacrodbError, ValueError):
    """std_/corr_ の名前がモデルのショックに対応しない。"""

    def __init__(self, names):
        self.names = tuple(names)
        super().__init__(
            "Invalid std/corr name(s) in link: " + ", ".join(self.names)
        )
