"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from xychain_e2e.models.config import HarnessConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "XYCHAIN_E2E_",
) -> HarnessConfig:
    """Load harness configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (XYCHAIN_E2E_URL, etc.)
        2. TOML config file
        3. Defaults from HarnessConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = HarnessConfig()

    # ── Node section ───────────────────────────────────────
    node = raw.get("node", {})
    if v := node.get("url"):
        cfg.url = str(v)
    if (v := node.get("ss58_format")) is not None:
        cfg.ss58_format = int(v)
    if (v := node.get("connect_timeout")) is not None:
        cfg.connect_timeout = float(v)
    if (v := node.get("request_timeout")) is not None:
        cfg.request_timeout = float(v)

    # ── Submit section ─────────────────────────────────────
    submit = raw.get("submit", {})
    if (v := submit.get("timeout")) is not None:
        cfg.submit_timeout = float(v)

    # ── Scenarios section ──────────────────────────────────
    scenarios = raw.get("scenarios", {})
    if (v := scenarios.get("enabled")) is not None:
        cfg.scenarios = [str(s) for s in v]
    if v := scenarios.get("payload_path"):
        cfg.payload_path = str(v)
    if v := scenarios.get("output_path"):
        cfg.output_path = str(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if url := os.environ.get(f"{env_prefix}URL"):
        cfg.url = url
    if ss58 := os.environ.get(f"{env_prefix}SS58_FORMAT"):
        cfg.ss58_format = int(ss58)
    if timeout := os.environ.get(f"{env_prefix}SUBMIT_TIMEOUT"):
        cfg.submit_timeout = float(timeout)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    # Expand ~ in paths
    if cfg.payload_path:
        cfg.payload_path = str(Path(cfg.payload_path).expanduser())
    if cfg.output_path:
        cfg.output_path = str(Path(cfg.output_path).expanduser())

    return cfg
