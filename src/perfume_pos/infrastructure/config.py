"""Runtime settings, read from the environment.

| Variable           | Default              |
|--------------------|----------------------|
| POS_DATA_DIR       | <repo root>/data     |
| POS_CASHIER_NAME   | Caissier Principal   |
| POS_MAX_CARTS      | 3                    |
| POS_LOG_LEVEL      | WARNING              |
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from perfume_pos.domain.exceptions import ConfigurationError
from perfume_pos.domain.model.sale import DEFAULT_CASHIER

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    cashier_name: str = DEFAULT_CASHIER
    max_carts: int = 3
    log_level: str = "WARNING"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        raw_max = env.get("POS_MAX_CARTS", "3")
        try:
            max_carts = int(raw_max)
        except ValueError as exc:
            raise ConfigurationError(f"POS_MAX_CARTS must be an integer, got {raw_max!r}") from exc
        if max_carts < 1:
            raise ConfigurationError("POS_MAX_CARTS must be at least 1")

        log_level = env.get("POS_LOG_LEVEL", "WARNING").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"Unknown POS_LOG_LEVEL {log_level!r}")

        data_dir = env.get("POS_DATA_DIR")
        return Settings(
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            cashier_name=env.get("POS_CASHIER_NAME", "").strip() or DEFAULT_CASHIER,
            max_carts=max_carts,
            log_level=log_level,
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
