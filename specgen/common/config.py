"""Runtime settings — YAML file, environment and .env lookup with built-in fallbacks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

from specgen.common.errors import ConfigError
from specgen.common.llm_client import DEFAULT_ENDPOINT, DEFAULT_MODEL

logger = logging.getLogger(__name__)

API_KEY_VAR = "OPENAI_API_KEY"
DEFAULT_CONFIG_FILE = "specgen.yaml"

# Environment variable → settings field
ENV_OVERRIDES: dict[str, str] = {
    "SPECGEN_MODEL": "model",
    "SPECGEN_ENDPOINT": "endpoint",
}


@dataclass
class Settings:
    """Everything a run needs besides the idea itself."""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    endpoint: str = DEFAULT_ENDPOINT
    temperature: float = 0.7
    max_tokens: int | None = 1000
    timeout: float = 120.0
    output_dir: str = "."
    extended_synthesis: bool = False

    def __repr__(self) -> str:
        shown = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "api_key"}
        return f"Settings(api_key=<{len(self.api_key)} chars>, {shown})"


# Keys a config file may set
_FILE_KEYS = {f.name for f in fields(Settings)} - {"api_key"}
_TEXT_KEYS = ("model", "endpoint", "output_dir")
_NUMBER_KEYS = ("temperature", "max_tokens", "timeout")


def find_api_key(
    env: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
    log: logging.Logger | None = None,
) -> str | None:
    """Look for the API key in the environment, then in ``<cwd>/.env``."""
    log = log or logger
    env = os.environ if env is None else env

    log.debug("Checking for %s in environment variables", API_KEY_VAR)
    if env.get(API_KEY_VAR):
        log.debug("Found %s in environment variables", API_KEY_VAR)
        return env[API_KEY_VAR]

    env_file = Path(cwd or Path.cwd()) / ".env"
    log.debug("Looking for .env file at: %s", env_file)
    if not env_file.is_file():
        log.debug(".env file not found at path: %s", env_file)
        return None

    try:
        values = dotenv_values(env_file)
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Failed to read .env file: %s", e)
        return None

    value = (values.get(API_KEY_VAR) or "").strip().strip("\"'")
    if value:
        log.debug("Found %s line in .env file", API_KEY_VAR)
        return value
    log.debug("No %s found in .env file", API_KEY_VAR)
    return None


def load_config_file(path: str | Path, log: logging.Logger | None = None) -> dict[str, Any]:
    """Parse a YAML config file into a dict of known settings keys."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if not isinstance(cfg, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = set(cfg) - _FILE_KEYS
    if unknown:
        (log or logger).warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))
    return {k: v for k, v in cfg.items() if k in _FILE_KEYS}


def _check_types(values: Mapping[str, Any]) -> None:
    """Reject values whose YAML type cannot mean what the setting expects."""
    for name in _TEXT_KEYS:
        if name in values and not (isinstance(values[name], str) and values[name].strip()):
            raise ConfigError(f"Setting '{name}' must be a non-empty string, got {values[name]!r}")
    if "extended_synthesis" in values and not isinstance(values["extended_synthesis"], bool):
        raise ConfigError(
            f"Setting 'extended_synthesis' must be true or false, got {values['extended_synthesis']!r}"
        )
    for name in _NUMBER_KEYS:
        if name not in values or (name == "max_tokens" and values[name] is None):
            continue
        if values[name] is None or isinstance(values[name], bool):
            raise ConfigError(f"Setting '{name}' must be a number, got {values[name]!r}")


def load_settings(
    config_path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
    log: logging.Logger | None = None,
) -> Settings:
    """Resolve settings: defaults < config file < environment < *overrides*.

    Raises :class:`ConfigError` when no API key can be found.
    """
    log = log or logger
    env = os.environ if env is None else env
    cwd = Path(cwd or Path.cwd())

    values: dict[str, Any] = {}

    if config_path is not None:
        values.update(load_config_file(config_path, log=log))
    elif (cwd / DEFAULT_CONFIG_FILE).is_file():
        log.debug("Loading config from %s", cwd / DEFAULT_CONFIG_FILE)
        values.update(load_config_file(cwd / DEFAULT_CONFIG_FILE, log=log))

    for var, name in ENV_OVERRIDES.items():
        if env.get(var):
            values[name] = env[var]

    values.update({k: v for k, v in (overrides or {}).items() if v is not None})

    api_key = find_api_key(env=env, cwd=cwd, log=log)
    if not api_key:
        raise ConfigError(
            "OpenAI API key not found. "
            f"Please set the {API_KEY_VAR} environment variable or add it to a .env file."
        )
    log.debug("API key found with length: %d", len(api_key))

    _check_types(values)
    try:
        settings = Settings(api_key=api_key, **values)
        settings.temperature = float(settings.temperature)
        settings.timeout = float(settings.timeout)
        if settings.max_tokens is not None:
            settings.max_tokens = int(settings.max_tokens)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid setting value: {e}") from e
    return settings
