from __future__ import annotations

import json
import sys
import tempfile
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import main as cli
from macrodb.assemble import db2array
from macrodb.config import ToolboxConfig, load_config
from macrodb.logger import WandBLogger, assembly_metrics, wandb_available
from macrodb.series import Series

CONFIG_TOML = """\
data = "macro.csv"
freq = "Q"
names = ["gdp", "cpi", "missing", "!ttrend"]

[toolbox]
base_year = 2020

[options]
lag_or_lead = [0, -1, 0, 0]
expand_method = "repeat_last"

[options.warn]
not_found = false
"""

MACRO_CSV = """\
period,gdp,cpi
2020Q1,100.0,1.0
2020Q2,101.0,1.1
2020Q3,102.5,1.2
"""


def test_load_config_formats() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        toml_path = tmp_path / "run.toml"
        toml_path.write_text(CONFIG_TOML, encoding="utf-8")
        config = load_config(toml_path)
        if config["names"][-1] != "!ttrend" or config["toolbox"]["base_year"] != 2020:
            raise AssertionError(f"unexpected TOML config: {config}")

        json_path = tmp_path / "run.json"
        json_path.write_text(json.dumps({"names": ["a"]}), encoding="utf-8")
        if load_config(json_path) != {"names": ["a"]}:
            raise AssertionError("unexpected JSON config")

        yaml_path = tmp_path / "run.yaml"
        yaml_path.write_text("names: [a]", encoding="utf-8")
        for path, exc in ((yaml_path, ValueError), (tmp_path / "nope.toml", FileNotFoundError)):
            try:
                load_config(path)
            except exc:
                pass
            else:
                raise AssertionError(f"{path.name} should raise {exc.__name__}")


def test_toolbox_config() -> None:
    toolbox = ToolboxConfig.from_mapping({"base_year": "1995"})
    if toolbox.base_year != 1995 or toolbox.expand_method != "repeat_last":
        raise AssertionError(f"unexpected toolbox config: {toolbox}")
    if ToolboxConfig.from_mapping(None) != ToolboxConfig():
        raise AssertionError("None should give defaults")
    try:
        ToolboxConfig.from_mapping({"base": 1})
    except TypeError:
        pass
    else:
        raise AssertionError("unknown key should raise TypeError")


def test_disabled_logger_and_metrics() -> None:
    d = {"a": Series("2020Q1", [1.0, 2.0]), "x": 1.0}
    result = db2array(d, ["a", "x", "z"], None, sink=None)
    metrics = assembly_metrics(result)
    expected = {
        "n_periods": 2,
        "n_names": 3,
        "n_included": 1,
        "n_not_found": 1,
        "n_non_series": 1,
    }
    for key, value in expected.items():
        if metrics[key] != value:
            raise AssertionError(f"{key}: {metrics[key]} != {value}")
    if metrics["diagnostic/Dbase:NameNotExist"] != 1:
        raise AssertionError(f"diagnostic count missing: {metrics}")

    logger = WandBLogger(project="macrodb", enabled=False)
    logger.start_run(config={"a": 1})
    logger.log_assembly(result)
    logger.finish()
    if not isinstance(wandb_available(), bool):
        raise AssertionError("wandb_available should return bool")


def test_cli_writes_npz() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        tmp_path = Path(tmp)
        (tmp_path / "macro.csv").write_text(MACRO_CSV, encoding="utf-8")
        config_path = tmp_path / "run.toml"
        config_path.write_text(CONFIG_TOML, encoding="utf-8")
        output_path = tmp_path / "out" / "result.npz"

        cli.main(
            [
                "--config",
                str(config_path),
                "--data",
                str(tmp_path / "macro.csv"),
                "--output",
                str(output_path),
            ]
        )

        with np.load(output_path) as saved:
            data = saved["data"]
            included = saved["included"].tolist()
            periods = saved["range"].tolist()
        if data.shape != (3, 4):
            raise AssertionError(f"unexpected shape: {data.shape}")
        if included != ["gdp", "cpi", "!ttrend"]:
            raise AssertionError(f"unexpected included: {included}")
        if periods != ["2020Q1", "2020Q2", "2020Q3"]:
            raise AssertionError(f"unexpected range: {periods}")
        if not np.allclose(data[:, 3], [0.0, 1.0, 2.0]):
            raise AssertionError(f"unexpected ttrend column: {data[:, 3]}")
        if not np.isnan(data[0, 1]) or not np.allclose(data[1:, 1], [1.0, 1.1]):
            raise AssertionError(f"unexpected lagged cpi column: {data[:, 1]}")

        summary = json.loads(output_path.with_suffix(".json").read_text(encoding="utf-8"))
        if summary["diagnostics"]:
            raise AssertionError(f"not_found warnings were disabled: {summary['diagnostics']}")


def main() -> None:
    test_load_config_formats()
    test_toolbox_config()
    test_disabled_logger_and_metrics()
    test_cli_writes_npz()
    print("OK: config/logger/cli checks passed")


if __name__ == "__main__":
    main()
