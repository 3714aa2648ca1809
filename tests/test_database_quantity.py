from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from macrodb.database import database_from_frame, dbnames, dbrange, parse_names
from macrodb.exceptions import InvalidStdCorrError
from macrodb.quantity import Quantity
from macrodb.series import Series


def test_parse_names() -> None:
    if parse_names("a, b  c") != ["a", "b", "c"]:
        raise AssertionError(f"unexpected tokens: {parse_names('a, b  c')}")
    if parse_names(("x", "x")) != ["x", "x"]:
        raise AssertionError("duplicates must be kept")


def test_dbnames_filters_by_class() -> None:
    d = {"a": Series("2020Q1", [1.0]), "s": "text", "b": Series("2020Q1", [2.0])}
    if dbnames(d) != ["a", "s", "b"]:
        raise AssertionError(f"unexpected names: {dbnames(d)}")
    if dbnames(d, class_filter=Series) != ["a", "b"]:
        raise AssertionError(f"unexpected series names: {dbnames(d, class_filter=Series)}")


def test_dbrange_union_and_frequency() -> None:
    d = {
        "m": Series("2019-11", [1.0, 2.0, 3.0]),
        "q1": Series("2020Q1", [1.0, 2.0]),
        "q2": Series("2019Q3", [np.nan, 5.0]),
        "empty": Series("2020Q1", [np.nan]),
    }

    # 周波数未指定なら最初に観測を持つ系列（m）の周波数
    monthly = dbrange(d, ["m", "q1"])
    if monthly[0] != pd.Period("2019-11", freq="M") or len(monthly) != 3:
        raise AssertionError(f"unexpected monthly range: {monthly}")

    quarterly = dbrange(d, ["m", "q1", "q2", "empty"], freq=d["q1"].freq)
    if quarterly[0] != pd.Period("2019Q4") or quarterly[-1] != pd.Period("2020Q2"):
        raise AssertionError(f"unexpected quarterly range: {quarterly}")

    if dbrange(d, ["empty", "missing"]) is not None:
        raise AssertionError("no observations should give None")


def test_database_from_frame() -> None:
    frame = pd.DataFrame(
        {"a": [1.0, 2.0, np.nan], "b": [np.nan, 4.0, 5.0]},
        index=["2020Q1", "2020Q2", "2020Q3"],
    )
    d = database_from_frame(frame, freq="Q")
    if list(d) != ["a", "b"]:
        raise AssertionError(f"unexpected names: {list(d)}")
    if d["a"].start != pd.Period("2020Q1") or d["a"].end != pd.Period("2020Q2"):
        raise AssertionError(f"unexpected a: {d['a']}")
    if d["b"].start != pd.Period("2020Q2") or len(d["b"]) != 2:
        raise AssertionError(f"unexpected b: {d['b']}")


def make_quantity() -> Quantity:
    return Quantity(
        ["y", "pi", "e_y", "e_pi", "alpha"],
        [
            "transition_variable",
            "transition_variable",
            "transition_shock",
            "transition_shock",
            "parameter",
        ],
    )


def test_std_corr_order() -> None:
    q = make_quantity()
    if q.std_corr_names() != ["std_e_y", "std_e_pi", "corr_e_pi__e_y"]:
        raise AssertionError(f"unexpected std/corr names: {q.std_corr_names()}")

    three = Quantity(["a", "b", "c"], ["measurement_shock"] * 3)
    expected = ["std_a", "std_b", "std_c", "corr_b__a", "corr_c__a", "corr_c__b"]
    if three.std_corr_names() != expected:
        raise AssertionError(f"unexpected order: {three.std_corr_names()}")
    if three.lookup_std_corr(["corr_a__c", "corr_c__b", "std_x"]) != [4, 5, None]:
        raise AssertionError("lookup should accept either corr order")


def test_pattern_replacements() -> None:
    q = make_quantity()
    rpl, rpl_std_corr = q.pattern_replacements(["std_e_pi", "corr_e_y__e_pi"])
    if rpl != ["x(1,t)", "x(2,t)", "x(3,t)", "x(4,t)", "x(5,t)"]:
        raise AssertionError(f"unexpected rpl: {rpl}")
    if rpl_std_corr != ["x(7,t)", "x(8,t)"]:
        raise AssertionError(f"unexpected rpl_std_corr: {rpl_std_corr}")

    try:
        q.pattern_replacements(["std_y", "std_e_y", "corr_a__b"])
    except InvalidStdCorrError as exc:
        if exc.names != ("std_y", "corr_a__b"):
            raise AssertionError(f"unexpected invalid names: {exc.names}")
    else:
        raise AssertionError("invalid std/corr names should raise")

    try:
        Quantity(["a"], [])
    except ValueError:
        pass
    else:
        raise AssertionError("length mismatch should raise ValueError")


def main() -> None:
    test_parse_names()
    test_dbnames_filters_by_class()
    test_dbrange_union_and_frequency()
    test_database_from_frame()
    test_std_corr_order()
    test_pattern_replacements()
    print("OK: database/quantity checks passed")


if __name__ == "__main__":
    main()
