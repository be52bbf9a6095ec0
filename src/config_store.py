import json
import os
import sys
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Configuration missing, unreadable or invalid. Fatal at startup."""


def _runtime_base_dir() -> str:
    if getattr(sys, "frozen", False):
        exe_dir = os.path.dirname(os.path.abspath(sys.executable))
        candidates = [
            os.path.join(exe_dir, "src"),
            os.path.join(os.path.dirname(exe_dir), "src"),
            os.path.join(os.getcwd(), "src"),
            exe_dir,
        ]
        for candidate in candidates:
            if os.path.isdir(candidate):
                return os.path.abspath(candidate)
        return os.path.abspath(exe_dir)
    return os.path.dirname(os.path.abspath(__file__))


BASE_DIR = _runtime_base_dir()
DEFAULT_CONFIG_PATH = os.path.join(BASE_DIR, "server_config.json")


class ServerEntry(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    password: str = ""  # may be stored encrypted (Fernet)
    container: Optional[str] = None

    @field_validator("name", "address")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("container")
    @classmethod
    def _empty_container_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ConfigModel(BaseModel):
    servers: List[ServerEntry] = Field(default_factory=list)

    @field_validator("servers")
    @classmethod
    def _unique_names(cls, servers: List[ServerEntry]) -> List[ServerEntry]:
        seen = set()
        for entry in servers:
            if entry.name in seen:
                raise ValueError(f"duplicate server name: {entry.name}")
            seen.add(entry.name)
        return servers


def config_path(override: Optional[str] = None) -> str:
    return override or os.getenv("RCONDASH_CONFIG") or DEFAULT_CONFIG_PATH


def _validate(raw: Dict[str, Any], path: str) -> ConfigModel:
    try:
        return ConfigModel(**raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config in {path}: {e}") from e


def load_config(path: Optional[str] = None) -> ConfigModel:
    path = config_path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse JSON in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"config root in {path} must be an object")

    cfg = _validate(raw, path)
    if not cfg.servers:
        raise ConfigError(f"no servers defined in {path}")
    logging.info(f"[CONFIG] loaded {len(cfg.servers)} server(s) from {path}")
    return cfg


def load_server_list(path: Optional[str] = None) -> List[Dict[str, Optional[str]]]:
    """Server entries with their secrets already decrypted."""
    from security import reveal_secret  # late import

    cfg = load_config(path)
    return [
        {
            "name": entry.name,
            "address": entry.address,
            "secret": reveal_secret(entry.password),
            "container": entry.container,
        }
        for entry in cfg.servers
    ]


def get_status_ttl() -> float:
    raw = os.getenv("RCONDASH_STATUS_TTL", "10")
    try:
        return max(0.0, float(raw))
    except ValueError:
        logging.warning(f"invalid RCONDASH_STATUS_TTL {raw!r}, using 10")
        return 10.0


def get_rcon_timeout() -> Optional[float]:
    """Socket timeout for RCON calls. 0 disables it."""
    raw = os.getenv("RCONDASH_RCON_TIMEOUT", "10")
    try:
        timeout = float(raw)
    except ValueError:
        logging.warning(f"invalid RCONDASH_RCON_TIMEOUT {raw!r}, using 10")
        return 10.0
    return timeout if timeout > 0 else None
