from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import sys

from dotenv import load_dotenv


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    session_path: Path
    logs_dir: Path


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = "http://localhost:8080/api"
    timeout: float = 30.0
    cold_start_timeout: float = 120.0
    legacy_mode: bool = False


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "PosteManager") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    session = base / "session.json"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, session_path=session, logs_dir=logs)


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_flag(name: str) -> bool:
    return (os.environ.get(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env_file: Path | str | None = None) -> ApiSettings:
    load_dotenv(dotenv_path=env_file, override=False)

    base_url = (os.environ.get("POSTES_API_BASE") or ApiSettings.base_url).strip().rstrip("/")
    return ApiSettings(
        base_url=base_url,
        timeout=_env_float("POSTES_API_TIMEOUT", ApiSettings.timeout),
        cold_start_timeout=_env_float("POSTES_API_COLD_START_TIMEOUT", ApiSettings.cold_start_timeout),
        legacy_mode=_env_flag("POSTES_LEGACY_CLIENT"),
    )
