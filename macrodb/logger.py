"""WandB ロギング用のユーティリティ。

方針:
    - WandB は任意依存。未インストールでも db2array や CLI は動作させる。
    - ロギングは db2array から分離し、外側（main 等）で利用する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

if TYPE_CHECKING:
    from .assemble import ArrayResult


def _import_wandb():
    try:
        import importlib

        return importlib.import_module("wandb")
    except Exception as exc:  # noqa: BLE001 - 任意依存のため広めに捕捉
        raise RuntimeError(
            "wandb がインストールされていません。"
            " `pip install wandb` を実行するか、ロギングを無効化してください。"
        ) from exc


def wandb_available() -> bool:
    """wandb が利用可能かを返す。"""

    try:
        _import_wandb()
        return True
    except RuntimeError:
        return False


def assembly_metrics(result: "ArrayResult") -> Dict[str, Any]:
    """db2array の結果から記録用の指標を作る。"""

    metrics: Dict[str, Any] = {
        "n_periods": int(len(result.range)),
        "n_names": int(result.not_found.size),
        "n_included": len(result.included),
        "n_not_found": int(result.not_found.sum()),
        "n_non_series": int(result.non_series.sum()),
        "n_freq_mismatch": int(result.freq_mismatch.sum()),
        "n_invalid": int(result.invalid.sum()),
        "ndim": int(result.data.ndim),
    }
    for diagnostic in result.diagnostics:
        metrics[f"diagnostic/{diagnostic.code}"] = len(diagnostic.names)
    return metrics


@dataclass
class WandBLogger:
    """WandB へのロギングを行うクラス。enabled=False なら全メソッドが何もしない。"""

    project: str
    entity: Optional[str] = None
    name: Optional[str] = None
    tags: Optional[Iterable[str]] = None
    enabled: bool = True
    _run: Any = field(default=None, init=False, repr=False)

    def start_run(
        self,
        config: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        """WandB run を開始する。"""

        if not self.enabled:
            return
        wandb = _import_wandb()
        self._run = wandb.init(
            project=self.project,
            entity=self.entity,
            name=name or self.name,
            tags=(
                list(tags)
                if tags is not None
                else (list(self.tags) if self.tags else None)
            ),
            config=config,
        )

    def log_metrics(
        self,
        metrics: Dict[str, Any],
        step: Optional[int] = None,
        prefix: Optional[str] = None,
    ) -> None:
        """指標をログに送る。"""

        if not self.enabled:
            return
        wandb = _import_wandb()
        if prefix:
            payload = {f"{prefix}/{key}": value for key, value in metrics.items()}
        else:
            payload = dict(metrics)
        wandb.log(payload, step=step)

    def log_assembly(self, result: "ArrayResult", step: Optional[int] = None) -> None:
        """db2array 1 回分の件数と診断を記録する。"""

        if not self.enabled:
            return
        self.log_metrics(assembly_metrics(result), step=step, prefix="db2array")

    def finish(self) -> None:
        """WandB run を終了する。"""

        if not self.enabled:
            return
        wandb = _import_wandb()
        wandb.finish()
        self._run = None
