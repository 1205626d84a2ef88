import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import yaml


class ConfigError(ValueError):
    pass


@dataclass
class ReportConfig:
    hostname: str
    query_id: str
    api_key: str
    params: dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    debug: bool = False


ENV_KEYS = {
    "DISCOURSE_HOSTNAME": "hostname",
    "DISCOURSE_QUERY_ID": "query_id",
    "DISCOURSE_API_KEY": "api_key",
    "DISCOURSE_TIMEOUT": "timeout",
}

REQUIRED = ("hostname", "query_id", "api_key")


def _strip_scheme(hostname: str) -> str:
    for prefix in ("https://", "http://"):
        if hostname.startswith(prefix):
            hostname = hostname[len(prefix):]
    return hostname.rstrip("/")


def _read_yaml(path: str) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return data


def _parse_timeout(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout: {value!r}") from e


def load_config(
    path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides,
) -> ReportConfig:
    """Merge YAML file, environment and explicit overrides (later wins)."""
    env = os.environ if env is None else env
    values: dict = {}

    if path:
        values.update(_read_yaml(path))

    for var, key in ENV_KEYS.items():
        if env.get(var):
            values[key] = env[var]
    if env.get("RUNNER_DEBUG") == "1":
        values["debug"] = True

    values.update({k: v for k, v in overrides.items() if v is not None})

    missing = [k for k in REQUIRED if not values.get(k)]
    if missing:
        raise ConfigError(f"Missing required config: {', '.join(missing)}")

    return ReportConfig(
        hostname=_strip_scheme(str(values["hostname"])),
        query_id=str(values["query_id"]),
        api_key=str(values["api_key"]),
        params={str(k): str(v) for k, v in (values.get("params") or {}).items()},
        timeout=_parse_timeout(values.get("timeout")),
        debug=bool(values.get("debug", False)),
    )
