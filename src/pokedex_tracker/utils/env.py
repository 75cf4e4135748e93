from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional


def load_env(path: str | Path = ".env") -> Mapping[str, str]:
    """Lightweight .env loader (KEY=VALUE per line, ignores comments/blank, strips quotes)."""
    env_path = Path(path)
    env: dict[str, str] = {}
    if not env_path.exists():
        return env
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, val = line.split("=", 1)
        env[key.strip()] = val.strip().strip("'\"")
    return env


def env_value(name: str, env: Mapping[str, str]) -> Optional[str]:
    """Process environment wins over the .env file."""
    return os.getenv(name) or env.get(name)
