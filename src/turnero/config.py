"""Configuration loading from YAML + environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv


@dataclass
class BusinessConfig:
    name: str = "Turnero"
    default_customer_name: str = "Cliente"


@dataclass
class SlotsConfig:
    opening_time: str = "09:00"
    closing_time: str = "19:00"
    step_minutes: int = 30
    max_suggestions: int = 3


@dataclass
class DatabaseConfig:
    path: str = "turnero.db"


@dataclass
class ClassifierConfig:
    enabled: bool = False
    provider: str = "anthropic"
    model: str = "claude-haiku-4-5-20251001"


@dataclass
class ChannelConfig:
    enabled: bool = False
    extra: dict = field(default_factory=dict)

    def get(self, key: str, default=None):
        return self.extra.get(key, default)


@dataclass
class ServiceConfig:
    name: str = ""
    description: str = ""
    duration_minutes: int | None = None
    price: float | None = None


@dataclass
class Config:
    business: BusinessConfig = field(default_factory=BusinessConfig)
    slots: SlotsConfig = field(default_factory=SlotsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    channels: dict[str, ChannelConfig] = field(default_factory=dict)
    services: list[ServiceConfig] = field(default_factory=list)


def _resolve_env_vars(value: str) -> str:
    """Replace ${VAR} with environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _resolve_dict(d: dict) -> dict:
    """Recursively resolve env vars in a dict."""
    resolved = {}
    for k, v in d.items():
        if isinstance(v, str):
            resolved[k] = _resolve_env_vars(v)
        elif isinstance(v, dict):
            resolved[k] = _resolve_dict(v)
        elif isinstance(v, list):
            resolved[k] = [
                _resolve_dict(i) if isinstance(i, dict)
                else _resolve_env_vars(i) if isinstance(i, str)
                else i
                for i in v
            ]
        else:
            resolved[k] = v
    return resolved


HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _hhmm_minutes(key: str, value: str) -> int:
    match = HHMM_RE.match(value.strip())
    if not match:
        raise ValueError(f"slots.{key} must be HH:mm, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def _validate_slots(slots: SlotsConfig) -> None:
    opening = _hhmm_minutes("opening_time", slots.opening_time)
    closing = _hhmm_minutes("closing_time", slots.closing_time)
    if opening >= closing:
        raise ValueError(
            f"slots.opening_time ({slots.opening_time}) must be before "
            f"closing_time ({slots.closing_time})"
        )
    if slots.step_minutes <= 0:
        raise ValueError(f"slots.step_minutes must be positive, got {slots.step_minutes}")
    if slots.max_suggestions < 0:
        raise ValueError(
            f"slots.max_suggestions must not be negative, got {slots.max_suggestions}"
        )


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def load_config(config_path: str | Path, env_path: str | Path | None = None) -> Config:
    """Load config from YAML file with env var resolution."""
    config_path = Path(config_path).resolve()
    config_dir = config_path.parent

    if env_path:
        load_dotenv(env_path)
    else:
        # .env next to the config file wins over CWD
        env_beside_config = config_dir / ".env"
        if env_beside_config.exists():
            load_dotenv(env_beside_config)
        else:
            load_dotenv()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    raw = _resolve_dict(raw)

    business_data = raw.get("business", {})
    business = BusinessConfig(
        name=business_data.get("name", "Turnero"),
        default_customer_name=business_data.get("default_customer_name", "Cliente"),
    )

    slots_data = raw.get("slots", {})
    slots = SlotsConfig(
        opening_time=str(slots_data.get("opening_time", "09:00")),
        closing_time=str(slots_data.get("closing_time", "19:00")),
        step_minutes=int(slots_data.get("step_minutes", 30)),
        max_suggestions=int(slots_data.get("max_suggestions", 3)),
    )
    _validate_slots(slots)

    db_data = raw.get("database", {})
    database = DatabaseConfig(
        path=os.environ.get("DATABASE_PATH") or db_data.get("path", "turnero.db"),
    )

    clf_data = raw.get("classifier", {})
    classifier = ClassifierConfig(
        enabled=_as_bool(clf_data.get("enabled", False)),
        provider=clf_data.get("provider", "anthropic"),
        model=clf_data.get("model", "claude-haiku-4-5-20251001"),
    )

    channels = {}
    for name, ch_data in raw.get("channels", {}).items():
        if isinstance(ch_data, dict):
            enabled = _as_bool(ch_data.pop("enabled", False))
            channels[name] = ChannelConfig(enabled=enabled, extra=ch_data)

    services = []
    for svc_data in raw.get("services", []):
        if isinstance(svc_data, dict) and svc_data.get("name"):
            services.append(ServiceConfig(
                name=svc_data["name"],
                description=svc_data.get("description", ""),
                duration_minutes=svc_data.get("duration_minutes"),
                price=svc_data.get("price"),
            ))

    return Config(
        business=business,
        slots=slots,
        database=database,
        classifier=classifier,
        channels=channels,
        services=services,
    )
