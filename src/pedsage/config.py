# src/pedsage/config.py
"""Configuration loading utilities for pedsage.

This module provides configuration loading that can be used by:
- CLI commands
- External applications using pedsage as a library

It handles:
- Finding and loading pedsage.yaml config files
- Loading .env files for API keys
- Building Settings objects from YAML and PEDSAGE_* environment variables
- Creating PedSage instances from configuration
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

if TYPE_CHECKING:
    from pedsage.pedsage import PedSage
    from pedsage.settings import Settings

# Default paths
DEFAULT_DATA_DIR = "./pedsage_data"
DEFAULT_USER_ID = "local"
CONFIG_FILES = ["pedsage.yaml", "pedsage.yml", ".pedsagerc"]
ENV_FILE = ".env"

PROVIDERS = {"litellm", "none"}


@dataclass
class ConfigError:
    """Error during configuration loading."""

    message: str
    suggestion: str | None = None


def load_env_file(env_path: str | Path = ENV_FILE) -> None:
    """Load environment variables from .env file if it exists.

    Existing environment variables are not overridden.

    Args:
        env_path: Path to .env file (default: .env in current directory)
    """
    path = Path(env_path)
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("\"'")
                if key not in os.environ:
                    os.environ[key] = value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file in current directory or parent directories.

    Args:
        start_dir: Directory to start searching from (default: cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir or Path.cwd()
    for _ in range(10):  # Limit search depth
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


# Valid configuration keys for validation
VALID_ROOT_KEYS = {
    "provider",
    "llm_model",
    "embedding_model",
    "data_dir",
    "use_chroma",
    "user_id",
    "settings",
}

# YAML key -> Settings field
SETTINGS_KEYS = {
    "similarity_threshold": "similarity_threshold",
    "threshold": "similarity_threshold",  # alias
    "default_limit": "default_limit",
    "limit": "default_limit",  # alias
    "candidate_limit_per_kind": "candidate_limit_per_kind",
    "chunk_share": "chunk_share",
    "composer": "composer",
    "synthesis_prompt": "synthesis_prompt",
    "synthesis_temperature": "synthesis_temperature",
    "excerpt_chars": "excerpt_chars",
    "num_retries": "num_retries",
    "embedding_batch_size": "embedding_batch_size",
    "batch_size": "embedding_batch_size",  # alias
}


def validate_config(config: dict[str, Any], config_path: Path | None = None) -> list[str]:
    """Validate config and return warnings about unknown keys.

    Args:
        config: The loaded configuration dictionary
        config_path: Path to config file (for error messages)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    unknown_root = set(config.keys()) - VALID_ROOT_KEYS
    if unknown_root:
        path_str = str(config_path) if config_path else "config"
        warnings.append(f"Unknown config keys in {path_str}: {', '.join(sorted(unknown_root))}")

    settings = config.get("settings", {})
    if isinstance(settings, dict):
        unknown_settings = set(settings.keys()) - set(SETTINGS_KEYS)
        if unknown_settings:
            warnings.append(f"Unknown settings keys: {', '.join(sorted(unknown_settings))}")

    return warnings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Explicit path to config file, or None to search

    Returns:
        Configuration dictionary (empty if no config found)
    """
    config_path = Path(config_path) if config_path is not None else find_config_file()

    if config_path is None:
        return {}

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return config


def _safe_int(value: str | None) -> int | None:
    """Parse int from string, returning None on invalid value."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _safe_float(value: str | None) -> float | None:
    """Parse float from string, returning None on invalid value."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def get_settings_from_env() -> dict[str, Any]:
    """Read behavioral settings from PEDSAGE_* environment variables.

    Returns values that were explicitly set (not defaults), to allow proper
    precedence: YAML settings are used unless overridden by env vars.

    Returns:
        Dictionary of setting name -> value for explicitly set env vars
    """
    result: dict[str, Any] = {}

    if (val := _safe_float(os.environ.get("PEDSAGE_SIMILARITY_THRESHOLD"))) is not None:
        result["similarity_threshold"] = val
    if (val := _safe_int(os.environ.get("PEDSAGE_DEFAULT_LIMIT"))) is not None:
        result["default_limit"] = val
    if "PEDSAGE_CANDIDATE_LIMIT_PER_KIND" in os.environ:
        # Empty string disables the cap
        raw = os.environ["PEDSAGE_CANDIDATE_LIMIT_PER_KIND"]
        if raw == "":
            result["candidate_limit_per_kind"] = None
        elif (val := _safe_int(raw)) is not None:
            result["candidate_limit_per_kind"] = val
    if (val := _safe_float(os.environ.get("PEDSAGE_CHUNK_SHARE"))) is not None:
        result["chunk_share"] = val
    if os.environ.get("PEDSAGE_COMPOSER"):
        result["composer"] = os.environ["PEDSAGE_COMPOSER"].lower()
    if "PEDSAGE_SYNTHESIS_PROMPT" in os.environ:
        result["synthesis_prompt"] = os.environ["PEDSAGE_SYNTHESIS_PROMPT"] or None
    if (val := _safe_float(os.environ.get("PEDSAGE_SYNTHESIS_TEMPERATURE"))) is not None:
        result["synthesis_temperature"] = val
    if (val := _safe_int(os.environ.get("PEDSAGE_EXCERPT_CHARS"))) is not None:
        result["excerpt_chars"] = val
    if (val := _safe_int(os.environ.get("PEDSAGE_NUM_RETRIES"))) is not None:
        result["num_retries"] = val
    if (val := _safe_int(os.environ.get("PEDSAGE_EMBEDDING_BATCH_SIZE"))) is not None:
        result["embedding_batch_size"] = val

    return result


def get_settings_from_yaml(config: dict[str, Any]) -> dict[str, Any]:
    """Extract settings from the 'settings:' section of a YAML config.

    Args:
        config: The loaded YAML configuration

    Returns:
        Dictionary of Settings field name -> value
    """
    yaml_settings = config.get("settings", {}) or {}
    return {
        settings_key: yaml_settings[yaml_key]
        for yaml_key, settings_key in SETTINGS_KEYS.items()
        if yaml_key in yaml_settings
    }


def build_settings(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> Settings:
    """Build Settings object from YAML config and env vars.

    Precedence (highest to lowest):
    1. Environment variables (for CI/CD override)
    2. YAML settings: section
    3. Settings class defaults

    Args:
        config: YAML configuration dictionary
        env_settings: Environment variable overrides (if None, reads from env)

    Returns:
        Configured Settings instance

    Raises:
        pydantic.ValidationError: If a value is out of range
    """
    from pedsage.settings import Settings

    config = config or {}
    yaml_settings = get_settings_from_yaml(config)
    env_settings = env_settings if env_settings is not None else get_settings_from_env()

    return Settings(**{**yaml_settings, **env_settings})


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


@dataclass
class PedSageConfig:
    """Configuration for creating a PedSage instance."""

    provider: str
    llm_model: str | None
    embedding_model: str | None
    data_dir: str
    settings: Settings
    use_chroma: bool = False
    user_id: str = DEFAULT_USER_ID
    llm_api_key: str | None = None
    embedding_api_key: str | None = None


def get_pedsage_config(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> PedSageConfig | ConfigError:
    """Get configuration for creating a PedSage instance.

    The provider defaults to "litellm" when both models are configured and
    to "none" (lexical ranking, template responses) otherwise.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        PedSageConfig with all settings, or ConfigError if invalid
    """
    try:
        config = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        return ConfigError(message=f"Could not read config: {e}")

    try:
        settings = build_settings(config)
    except ValidationError as e:
        return ConfigError(
            message=f"Invalid settings: {e}",
            suggestion="Check the settings: section of pedsage.yaml and PEDSAGE_* env vars",
        )

    effective_data_dir = (
        data_dir
        or os.environ.get("PEDSAGE_DATA_DIR")
        or config.get("data_dir")
        or DEFAULT_DATA_DIR
    )
    llm_model = config.get("llm_model") or os.environ.get("PEDSAGE_LITELLM_LLM_MODEL")
    embedding_model = config.get("embedding_model") or os.environ.get(
        "PEDSAGE_LITELLM_EMBEDDING_MODEL"
    )
    provider = (
        config.get("provider")
        or os.environ.get("PEDSAGE_PROVIDER")
        or ("litellm" if llm_model and embedding_model else "none")
    )

    if provider not in PROVIDERS:
        return ConfigError(
            message=f"Unknown provider '{provider}'",
            suggestion=f"Supported providers: {', '.join(sorted(PROVIDERS))}",
        )
    if provider == "litellm" and (not llm_model or not embedding_model):
        return ConfigError(
            message="LiteLLM provider requires llm_model and embedding_model.",
            suggestion="Set them in pedsage.yaml or via PEDSAGE_LITELLM_* env vars",
        )
    if provider == "none" and settings.composer == "llm":
        return ConfigError(
            message="The llm composer needs a provider.",
            suggestion="Configure the litellm provider or set composer: template",
        )

    return PedSageConfig(
        provider=provider,
        llm_model=llm_model,
        embedding_model=embedding_model,
        data_dir=str(effective_data_dir),
        settings=settings,
        use_chroma=_as_bool(
            config.get("use_chroma", os.environ.get("PEDSAGE_USE_CHROMA", False))
        ),
        user_id=str(config.get("user_id") or os.environ.get("PEDSAGE_USER_ID") or DEFAULT_USER_ID),
        llm_api_key=os.environ.get("PEDSAGE_LLM_API_KEY"),
        embedding_api_key=os.environ.get("PEDSAGE_EMBEDDING_API_KEY"),
    )


def create_pedsage(config: PedSageConfig) -> PedSage:
    """Create a PedSage instance from configuration.

    Args:
        config: Configuration for the PedSage instance

    Returns:
        Configured PedSage instance
    """
    from pedsage.configuration import LiteLLMProvider, LocalStorage
    from pedsage.pedsage import PedSage

    provider = None
    if config.provider == "litellm":
        if not config.llm_model or not config.embedding_model:
            raise ValueError("LiteLLM provider requires llm_model and embedding_model")
        provider = LiteLLMProvider(
            llm=config.llm_model,
            embedding=config.embedding_model,
            llm_api_key=config.llm_api_key,
            embedding_api_key=config.embedding_api_key,
        )
    elif config.provider != "none":
        raise ValueError(f"Unknown provider: {config.provider}")

    return PedSage(
        provider=provider,
        storage=LocalStorage(config.data_dir, use_chroma=config.use_chroma),
        settings=config.settings,
    )


def get_pedsage(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> PedSage | ConfigError:
    """Create a PedSage instance based on configuration.

    This is a convenience function that combines get_pedsage_config and
    create_pedsage. For more control, use those functions separately.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        Configured PedSage instance, or ConfigError if configuration is invalid
    """
    config = get_pedsage_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return config
    return create_pedsage(config)
