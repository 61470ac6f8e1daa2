"""Configuration handling."""

from __future__ import annotations

from dataclasses import dataclass, field
import yaml


@dataclass
class StoreConfig:
    sessions_file: str = "sessions.json"
    dives_file: str = "dives.json"
    users_file: str = "users.json"


@dataclass
class DashboardConfig:
    recent_sessions: int = 5
    depth_below_surface: bool = True


@dataclass
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class Config:
    data_dir: str = "data"
    log_dir: str = "logs"
    log_level: str = "INFO"
    store: StoreConfig = field(default_factory=StoreConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    try:
        store = StoreConfig(**data.get("store", {}))
        dashboard = DashboardConfig(**data.get("dashboard", {}))
        api = ApiConfig(**data.get("api", {}))
    except TypeError as exc:
        # unknown keys inside a section
        raise ValueError(f"Invalid config {path}: {exc}")

    return Config(
        data_dir=data.get("data_dir", "data"),
        log_dir=data.get("log_dir", "logs"),
        log_level=str(data.get("log_level", "INFO")).upper(),
        store=store,
        dashboard=dashboard,
        api=api,
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "data_dir": config.data_dir,
        "log_dir": config.log_dir,
        "log_level": config.log_level,
        "store": {
            "sessions_file": config.store.sessions_file,
            "dives_file": config.store.dives_file,
            "users_file": config.store.users_file,
        },
        "dashboard": {
            "recent_sessions": config.dashboard.recent_sessions,
            "depth_below_surface": config.dashboard.depth_below_surface,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
