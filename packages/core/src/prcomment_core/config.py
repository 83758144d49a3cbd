import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import yaml

from prcomment_core.errors import ConfigError

ENV_PREFIX = "PLUGIN_"

DEFAULT_CONFIG: dict = {
    "scm_provider": "",
    "scm_endpoint": "",
    "token": "",
    "repo": "",
    "pr_number": 0,
    "commit_sha": "",
    "comment_body": "",
    "file_path": "",
    "line": 0,
    "comments_file": "",  # JSON file of {"reviews": [...]} posted as a batch
    "status_state": "",
    "status_context": "",
    "status_desc": "",
    "status_url": "",
    "harness_account_id": "",
    "harness_org_id": "",
    "harness_project_id": "",
    "debug": False,
    "dry_run": False,
}

_INT_KEYS = ("pr_number", "line")
_BOOL_KEYS = ("debug", "dry_run")
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class PluginConfig:
    scm_provider: str = ""
    scm_endpoint: str = ""
    token: str = ""
    repo: str = ""
    pr_number: int = 0
    commit_sha: str = ""
    comment_body: str = ""
    file_path: str = ""
    line: int = 0
    comments_file: str = ""
    status_state: str = ""
    status_context: str = ""
    status_desc: str = ""
    status_url: str = ""
    harness_account_id: str = ""
    harness_org_id: str = ""
    harness_project_id: str = ""
    debug: bool = False
    dry_run: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> "PluginConfig":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in names})


def load_config(config_path: str = ".prcomment.yml", cli_overrides: Optional[dict] = None) -> PluginConfig:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prcomment.yml in the current directory
      3. PLUGIN_* environment variables
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path}: expected a mapping at the top level, got {type(file_config).__name__}")
        config.update({k: v for k, v in file_config.items() if k in DEFAULT_CONFIG})

    for key in DEFAULT_CONFIG:
        value = os.environ.get(ENV_PREFIX + key.upper())
        if value:
            config[key] = value

    # Harness CI injects its scope identifiers without the plugin prefix.
    for key in ("harness_account_id", "harness_org_id", "harness_project_id"):
        if not config[key]:
            config[key] = os.environ.get(key.upper(), "")

    if not config["scm_endpoint"]:
        config["scm_endpoint"] = _endpoint_from_sto(os.environ.get("HARNESS_STO_SERVICE_ENDPOINT", ""))

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    for key in _INT_KEYS:
        config[key] = _parse_int(key, config[key])
    for key in _BOOL_KEYS:
        config[key] = _parse_bool(config[key])

    return PluginConfig.from_dict(config)


def validate_config(config: PluginConfig) -> None:
    """Raise ConfigError when an input every action needs is missing."""
    missing = [
        (ENV_PREFIX + name.upper())
        for name in ("scm_provider", "token", "repo")
        if not getattr(config, name)
    ]
    if missing:
        raise ConfigError(f"missing required configuration: {', '.join(missing)}")


def mask_token(token: str) -> str:
    """Return a loggable preview of a secret: at most its first 8 characters."""
    if len(token) > 8:
        return token[:8] + "..."
    if token:
        return "***"
    return ""


def _endpoint_from_sto(sto_endpoint: str) -> str:
    # e.g. "https://qa.harness.io/prod1/sto/" -> "https://qa.harness.io"
    if not sto_endpoint:
        return ""
    parsed = urlparse(sto_endpoint)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def _parse_int(key: str, value) -> int:
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{ENV_PREFIX}{key.upper()} must be an integer, got {value!r}")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY
