from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_AGENT_ID = "69996ce29f3636d6dd80984c"
DEFAULT_AGENT_NAME = "Seva Health Agent"


def _load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    for candidate in (repo_root / ".env", repo_root / "backend/.env"):
        if candidate.exists():
            _load_local_env_file(candidate)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    agent_id: str
    agent_name: str
    agent_api_url: str
    agent_api_key: str | None
    agent_timeout_seconds: float
    log_level: str
    log_json: bool
    allowed_origins: tuple[str, ...]


def load_settings() -> Settings:
    bootstrap_local_env()
    origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    return Settings(
        agent_id=(os.getenv("SEVA_AGENT_ID") or DEFAULT_AGENT_ID).strip(),
        agent_name=(os.getenv("SEVA_AGENT_NAME") or DEFAULT_AGENT_NAME).strip(),
        agent_api_url=(os.getenv("SEVA_AGENT_API_URL") or "http://localhost:3000/api/agent").strip(),
        agent_api_key=(os.getenv("SEVA_AGENT_API_KEY") or "").strip() or None,
        agent_timeout_seconds=_env_float("SEVA_AGENT_TIMEOUT_SECONDS", 60.0),
        log_level=(os.getenv("SEVA_LOG_LEVEL") or "INFO").strip().upper(),
        log_json=_env_flag("SEVA_LOG_JSON", "true"),
        allowed_origins=tuple(origin.strip() for origin in origins if origin.strip()),
    )
