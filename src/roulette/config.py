"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _point(value: Any, field_name: str) -> tuple[float, float]:
    if not isinstance(value, list) or len(value) != 2:
        raise ValueError(f"Expected [lon, lat] pair for '{field_name}'")
    return (_float(value[0], f"{field_name}[0]"), _float(value[1], f"{field_name}[1]"))


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    geojson: Path
    device_id_file: Path
    logs_dir: Path

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.logs_dir, self.device_id_file.parent)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            geojson=_path_from_cfg(raw.get("geojson"), "paths.geojson", root_dir),
            device_id_file=_path_from_cfg(
                raw.get("device_id_file"), "paths.device_id_file", root_dir
            ),
            logs_dir=_path_from_cfg(raw.get("logs_dir"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class SpinConfig:
    """Tick cadence of the spin animation.

    Delays are expressed in abstract time units; `time_unit_s` converts one
    unit into seconds of real waiting (0 disables waiting entirely).
    """

    initial_delay_ms: float = 60.0
    growth_factor: float = 1.1
    max_ticks: int = 50
    max_delay_ms: float = 400.0
    highlight_delay_threshold_ms: float = 150.0
    fast_highlight_count: int = 2
    slow_highlight_count: int = 1
    time_unit_s: float = 0.001

    def __post_init__(self) -> None:
        if self.initial_delay_ms <= 0:
            raise ValueError("spin.initial_delay_ms must be > 0")
        if self.growth_factor <= 1.0:
            raise ValueError("spin.growth_factor must be > 1")
        if self.max_ticks < 1:
            raise ValueError("spin.max_ticks must be >= 1")
        if self.max_delay_ms <= 0:
            raise ValueError("spin.max_delay_ms must be > 0")
        if self.fast_highlight_count < 1 or self.slow_highlight_count < 1:
            raise ValueError("spin highlight counts must be >= 1")
        if self.time_unit_s < 0:
            raise ValueError("spin.time_unit_s must be >= 0")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SpinConfig:
        defaults = cls()
        return cls(
            initial_delay_ms=_float(
                raw.get("initial_delay_ms", defaults.initial_delay_ms), "spin.initial_delay_ms"
            ),
            growth_factor=_float(raw.get("growth_factor", defaults.growth_factor), "spin.growth_factor"),
            max_ticks=_int(raw.get("max_ticks", defaults.max_ticks), "spin.max_ticks"),
            max_delay_ms=_float(raw.get("max_delay_ms", defaults.max_delay_ms), "spin.max_delay_ms"),
            highlight_delay_threshold_ms=_float(
                raw.get("highlight_delay_threshold_ms", defaults.highlight_delay_threshold_ms),
                "spin.highlight_delay_threshold_ms",
            ),
            fast_highlight_count=_int(
                raw.get("fast_highlight_count", defaults.fast_highlight_count),
                "spin.fast_highlight_count",
            ),
            slow_highlight_count=_int(
                raw.get("slow_highlight_count", defaults.slow_highlight_count),
                "spin.slow_highlight_count",
            ),
            time_unit_s=_float(raw.get("time_unit_s", defaults.time_unit_s), "spin.time_unit_s"),
        )


@dataclass(frozen=True, slots=True)
class ViewConfig:
    default_center: tuple[float, float] = (0.0, 20.0)
    default_scale: float = 147.0
    focus_scale: float = 400.0
    focus_hold_ms: float = 5000.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ViewConfig:
        defaults = cls()
        center_raw = raw.get("default_center")
        return cls(
            default_center=(
                _point(center_raw, "view.default_center")
                if center_raw is not None
                else defaults.default_center
            ),
            default_scale=_float(raw.get("default_scale", defaults.default_scale), "view.default_scale"),
            focus_scale=_float(raw.get("focus_scale", defaults.focus_scale), "view.focus_scale"),
            focus_hold_ms=_float(raw.get("focus_hold_ms", defaults.focus_hold_ms), "view.focus_hold_ms"),
        )


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str
    port: int
    url_prefix: str
    database: Path
    max_countries_per_device: int

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> ServerConfig:
        max_countries = _int(raw.get("max_countries_per_device"), "server.max_countries_per_device")
        if max_countries < 1:
            raise ValueError("server.max_countries_per_device must be >= 1")
        prefix = raw.get("url_prefix", "")
        if not isinstance(prefix, str):
            raise ValueError("Expected string for 'server.url_prefix'")
        return cls(
            host=_str(raw.get("host"), "server.host"),
            port=_int(raw.get("port"), "server.port"),
            url_prefix=prefix.strip().rstrip("/"),
            database=_path_from_cfg(raw.get("database"), "server.database", root_dir),
            max_countries_per_device=max_countries,
        )


@dataclass(frozen=True, slots=True)
class ClientConfig:
    base_url: str
    request_timeout_s: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ClientConfig:
        return cls(
            base_url=_str(raw.get("base_url"), "client.base_url").rstrip("/"),
            request_timeout_s=_float(raw.get("request_timeout_s"), "client.request_timeout_s"),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    paths: PathsConfig
    spin: SpinConfig
    view: ViewConfig
    server: ServerConfig
    client: ClientConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            spin=SpinConfig.from_mapping(_mapping(raw.get("spin", {}), "spin")),
            view=ViewConfig.from_mapping(_mapping(raw.get("view", {}), "view")),
            server=ServerConfig.from_mapping(_mapping(raw.get("server"), "server"), root_dir),
            client=ClientConfig.from_mapping(_mapping(raw.get("client"), "client")),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
