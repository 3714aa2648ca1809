"""CLI エントリポイント。

目的:
    設定ファイル（TOML/JSON）に書いた名前リスト・範囲・オプションで
    CSV の時系列データベースを db2array にかけ、結果を表示・保存する。

設定ファイルの例:
    data = "data/macro.csv"      # 1 列目が期（"2000Q1" など）、残りの列が系列
    freq = "Q"                   # 省略時は 1 列目の文字列から推論
    names = ["gdp", "cpi", "!ttrend"]
    range = ["2000Q1", "inf"]    # 省略すると観測期間の合併

    [toolbox]
    base_year = 2000

    [options]
    lag_or_lead = [0, -1, 0]
    expand_method = "repeat_last"

想定される例外:
    - 設定ファイルや CSV が存在しない: FileNotFoundError
    - JSON/TOML の構文エラー: パーサ由来の例外
"""

import argparse
import json
import os
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd

try:
    import matplotlib.pyplot as plt
except ImportError:
    plt = None

from macrodb.assemble import db2array
from macrodb.config import ToolboxConfig, load_config
from macrodb.database import database_from_frame, parse_names
from macrodb.logger import WandBLogger, wandb_available
from macrodb.options import AssembleOptions


def main(argv: Optional[Sequence[str]] = None) -> None:
    """コマンドライン引数を解釈し、db2array を実行する。

    Args:
        argv: 引数リスト。None の場合は `sys.argv` を argparse が参照する。
    """

    parser = argparse.ArgumentParser(description="db2array runner")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.toml"),
        help="Path to a TOML or JSON config file.",
    )
    # --data: 設定ファイルの data を上書きする。
    parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Path to a CSV database (first column = periods).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the assembled array (.npz, optional).",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a plot of the first alternative (requires matplotlib).",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar over the name list.",
    )
    args = parser.parse_args(argv)

    # 設定を読み込む。ファイル不在・拡張子非対応・パース失敗は例外として伝播する。
    config = load_config(args.config)
    data_path = args.data if args.data is not None else Path(config["data"])
    freq = config.get("freq")
    toolbox = ToolboxConfig.from_mapping(config.get("toolbox"))
    options = AssembleOptions.from_config(config.get("options"))
    if args.progress:
        options.progress = True

    # WandB ログの準備（任意）。
    wandb_logger = None
    wandb_project = os.getenv("WANDB_PROJECT")
    wandb_enabled = os.getenv("WANDB_ENABLED", "").lower() in {"1", "true", "yes"}
    if wandb_project or wandb_enabled:
        if wandb_project is None or wandb_project == "":
            wandb_project = "macrodb"
        if wandb_available():
            wandb_logger = WandBLogger(project=wandb_project, name="db2array-run")
            wandb_logger.start_run(config={"config": config})
        else:
            print("WandB が利用できないためロギングをスキップします。")

    print("\n=== Run parameters ===")
    print(
        {
            "config_path": str(args.config),
            "data_path": str(data_path),
            "output_path": str(args.output) if args.output is not None else None,
            "plot": bool(args.plot),
            "config": config,
        }
    )

    frame = pd.read_csv(data_path, index_col=0)
    database = database_from_frame(frame, freq=freq)

    range_ = config.get("range")
    if range_ is not None:
        range_ = tuple(range_)
    result = db2array(
        database, config.get("names"), range_, options, toolbox=toolbox
    )

    print("\n=== Result ===")
    print(
        {
            "shape": list(result.data.shape),
            "range": [str(result.range[0]), str(result.range[-1])]
            if len(result.range)
            else [],
            "included": result.included,
        }
    )
    for diagnostic in result.diagnostics:
        print(diagnostic.format())

    # 1 つ目の alternative を名前ごとに折れ線で描く。
    if args.plot and result.data.size:
        if plt is None:
            print("matplotlib が利用できないためプロットをスキップします。")
        else:
            page = result.data.reshape(result.data.shape[0], result.data.shape[1], -1)
            names = parse_names(config.get("names") or list(database))
            x_axis = result.range.to_timestamp()
            fig, ax = plt.subplots(figsize=(8, 4))
            for j, name in enumerate(names[: page.shape[1]]):
                ax.plot(x_axis, page[:, j, 0], label=name)
            ax.set_xlabel("period")
            ax.set_title("db2array output (first alternative)")
            ax.legend(loc="best", fontsize="small", ncol=2)
            ax.grid(True, linestyle=":", alpha=0.6)
            plot_path = Path("db2array.png")
            fig.tight_layout()
            fig.savefig(plot_path, dpi=150)
            print(f"Saved plot to {plot_path}")

    if args.output is not None:
        output_path = args.output
        output_path.parent.mkdir(parents=True, exist_ok=True)
        np.savez(
            output_path,
            data=result.data,
            included=np.asarray(result.included, dtype=str),
            range=np.asarray([str(p) for p in result.range], dtype=str),
            not_found=result.not_found,
            non_series=result.non_series,
        )
        summary_path = output_path.with_suffix(".json")
        with summary_path.open("w", encoding="utf-8") as handle:
            json.dump(
                {
                    "data_path": str(data_path),
                    "shape": list(result.data.shape),
                    "included": result.included,
                    "diagnostics": [
                        {"code": d.code, "names": list(d.names)}
                        for d in result.diagnostics
                    ],
                    "config": config,
                },
                handle,
                ensure_ascii=False,
                indent=2,
            )
        print(f"Saved result to {output_path} and {summary_path}")

    if wandb_logger is not None:
        wandb_logger.log_assembly(result)
        wandb_logger.finish()


if __name__ == "__main__":
    # 直接実行時のみ main() を呼び出す（import された場合に副作用を起こさない）。
    main()
