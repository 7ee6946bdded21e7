from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .report.fonts import DEFAULT_FETCH_TIMEOUT_S, DEFAULT_FONT_FAMILY, DEFAULT_FONT_SOURCES

SERVER_DIR = Path(__file__).resolve().parents[1]
"""Root of the ``apps/server/`` package tree."""

LOGGER = logging.getLogger(__name__)

MIN_FONT_TIMEOUT_S = 0.5

DEFAULT_CONFIG: dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8000},
    "storage": {"reports_json_path": "data/reports.json"},
    "fonts": {
        "family": DEFAULT_FONT_FAMILY,
        "sources": list(DEFAULT_FONT_SOURCES),
        "timeout_s": DEFAULT_FETCH_TIMEOUT_S,
    },
    "advice": {
        "enabled": True,
        "model": "gemini-3-flash-preview",
        "api_key_env": "GEMINI_API_KEY",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta",
        "timeout_s": 30.0,
    },
}


def documented_default_config() -> dict[str, Any]:
    """Return runtime defaults in the shape documented by config.example.yaml."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(path_text: str, config_path: Path) -> Path:
    path = Path(path_text)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            raise ValueError(f"ServerConfig.port must be 1-65535, got {self.port!r}")


@dataclass(slots=True)
class StorageConfig:
    reports_json_path: Path


@dataclass(slots=True)
class FontConfig:
    family: str
    sources: tuple[str, ...]
    timeout_s: float

    def __post_init__(self) -> None:
        if not self.sources:
            raise ValueError("fonts.sources must list at least one URL")
        for url in self.sources:
            if not url.startswith("https://"):
                raise ValueError(f"fonts.sources entries must be HTTPS URLs, got {url!r}")
        if not self.family.strip():
            object.__setattr__(self, "family", DEFAULT_FONT_FAMILY)
        if self.timeout_s < MIN_FONT_TIMEOUT_S:
            LOGGER.warning(
                "fonts.timeout_s=%s is below minimum %s; clamped",
                self.timeout_s,
                MIN_FONT_TIMEOUT_S,
            )
            object.__setattr__(self, "timeout_s", MIN_FONT_TIMEOUT_S)


@dataclass(slots=True)
class AdviceConfig:
    enabled: bool
    model: str
    api_key_env: str
    endpoint: str
    timeout_s: float

    def __post_init__(self) -> None:
        if not self.endpoint.startswith("https://"):
            raise ValueError(f"advice.endpoint must be an HTTPS URL, got {self.endpoint!r}")
        if self.timeout_s <= 0:
            object.__setattr__(self, "timeout_s", 30.0)


@dataclass(slots=True)
class AppConfig:
    server: ServerConfig
    storage: StorageConfig
    fonts: FontConfig
    advice: AdviceConfig
    config_path: Path


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def load_config(config_path: Path | None = None) -> AppConfig:
    path = config_path or (SERVER_DIR / "config.yaml")
    path = path.resolve()
    merged = _deep_merge(DEFAULT_CONFIG, _read_config_file(path))

    server_port = int(merged["server"]["port"])
    if not 1 <= server_port <= 65535:
        raise ValueError(f"server.port must be 1-65535, got {server_port}")

    fonts_cfg = merged["fonts"]
    raw_sources = fonts_cfg.get("sources") or []
    if not isinstance(raw_sources, list):
        raise ValueError("fonts.sources must be a list of URLs")

    advice_cfg = merged["advice"]
    app_config = AppConfig(
        server=ServerConfig(host=str(merged["server"]["host"]), port=server_port),
        storage=StorageConfig(
            reports_json_path=_resolve_config_path(
                str(merged["storage"]["reports_json_path"]), path
            ),
        ),
        fonts=FontConfig(
            family=str(fonts_cfg.get("family") or DEFAULT_FONT_FAMILY),
            sources=tuple(str(u).strip() for u in raw_sources),
            timeout_s=float(fonts_cfg.get("timeout_s", DEFAULT_FETCH_TIMEOUT_S)),
        ),
        advice=AdviceConfig(
            enabled=bool(advice_cfg.get("enabled", True)),
            model=str(advice_cfg.get("model") or DEFAULT_CONFIG["advice"]["model"]),
            api_key_env=str(advice_cfg.get("api_key_env") or "GEMINI_API_KEY"),
            endpoint=str(advice_cfg.get("endpoint") or DEFAULT_CONFIG["advice"]["endpoint"]),
            timeout_s=float(advice_cfg.get("timeout_s", 30.0)),
        ),
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s reports_json_path=%s font_sources=%d",
        app_config.config_path,
        app_config.storage.reports_json_path,
        len(app_config.fonts.sources),
    )
    return app_config
