"""Centralized settings with environment + runtime config overlay.
Each value is read from the environment first, then from the lower-cased key in
config/runtime.yml, then falls back to a hard default.
"""
from __future__ import annotations
from pathlib import Path
from urllib.parse import urlsplit
import os, yaml
from dataclasses import dataclass

_RUNTIME_CACHE: dict | None = None

CONFIG_DIR = Path(__file__).resolve().parent.parent / 'config'
DATA_DIR = Path(__file__).resolve().parent.parent / 'data'

def _load_runtime() -> dict:
    global _RUNTIME_CACHE
    if _RUNTIME_CACHE is None:
        cfg_file = CONFIG_DIR / 'runtime.yml'
        if cfg_file.exists():
            try:
                _RUNTIME_CACHE = yaml.safe_load(cfg_file.read_text(encoding='utf-8')) or {}
            except yaml.YAMLError:
                _RUNTIME_CACHE = {}
        else:
            _RUNTIME_CACHE = {}
    return _RUNTIME_CACHE

def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is not None:
        try:
            return float(v)
        except ValueError:
            return default
    return float(_load_runtime().get(name.lower(), default))

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is not None:
        try:
            return int(v)
        except ValueError:
            return default
    return int(_load_runtime().get(name.lower(), default))

def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    if v is not None:
        return v
    return str(_load_runtime().get(name.lower(), default))

def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        v = _load_runtime().get(name.lower())
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in ('1', 'true', 'yes', 'on')

SCHEMA_VERSION = 1  # increment when the sqlite layout changes

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

@dataclass(frozen=True)
class Settings:
    base_url: str
    user_agent: str
    fetch_timeout: float
    max_jobs_per_scrape: int
    fallback_enabled: bool
    db_path: Path
    export_dir: Path

    @property
    def site_root(self) -> str:
        """Scheme + host of base_url, used to absolutize relative links."""
        parts = urlsplit(self.base_url)
        return f"{parts.scheme}://{parts.netloc}"

def load_settings() -> Settings:
    return Settings(
        base_url=_env_str('JOBSCRAPER_BASE_URL', 'https://jobs.techstars.com/jobs'),
        user_agent=_env_str('JOBSCRAPER_USER_AGENT', DEFAULT_USER_AGENT),
        fetch_timeout=_env_float('JOBSCRAPER_FETCH_TIMEOUT', 30.0),
        max_jobs_per_scrape=_env_int('JOBSCRAPER_MAX_JOBS', 15),
        fallback_enabled=_env_bool('JOBSCRAPER_FALLBACK_ENABLED', True),
        db_path=Path(_env_str('JOBSCRAPER_DB_PATH', str(DATA_DIR / 'jobs.sqlite'))),
        export_dir=Path(_env_str('JOBSCRAPER_EXPORT_DIR', str(DATA_DIR / 'exports'))),
    )

SETTINGS = load_settings()
