# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/logging/log.py

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
LOG_DIR_ENV = "ADDONCTL_LOG_DIR"


def _default_log_dir() -> Path:
    env = os.environ.get(LOG_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".addonctl" / "logs"


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "addonctl",
    verbose: bool = False,
    run_id: str | None = None,
) -> tuple[logging.Logger, str, Path]:
    """
    Set up the run logger once per CLI invocation.

    The per-run file always gets the DEBUG trace (kubectl/helm argv, patch
    counts); the console gets INFO unless ``verbose``. Handlers from a
    previous call are closed and replaced. The returned run_id is shared
    with the observers so log lines and events correlate.
    """
    run_id = run_id or str(uuid.uuid4())

    base_dir = Path(base_dir) if base_dir is not None else _default_log_dir()
    base_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{stamp}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(formatter)
    logger.addHandler(console)

    logger.info("=== addonctl run %s started ===", run_id)
    logger.debug("log_file=%s", log_path)

    return logger, run_id, log_path
