"""Configuration loader for the notification service."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings


def load_config(config_path: Optional[Path] = None) -> tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from a YAML file and environment variables.

    Config file location:
    1. Use provided config_path if given
    2. Try config.yaml in current directory
    3. Try ./config/config.yaml
    4. Fail with helpful error message

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If configuration is invalid or file not found
    """
    config_file = _find_config_file(config_path)
    config_dict = _read_yaml(config_file)

    if not config_dict:
        raise ConfigurationError(
            "Configuration file is empty",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                "Add kafka and frontend sections to your config file",
            ],
        )

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(config_dict).__name__}",
            suggestions=["Review config.example.yaml for the expected layout"],
        )

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        app_config = AppConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(
            e,
            suggestions=[
                "Review config.example.yaml for correct format",
                "Check that kafka.brokers and frontend.url are present",
                "Provider names must be one of the supported vendors",
            ],
        ) from e

    try:
        env_config = load_environment_config()
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load environment configuration: {e}",
            suggestions=["Copy .env.example to .env and fill in your credentials"],
        ) from e

    if app_config.kafka.sasl_mechanism and not env_config.has_kafka_sasl:
        emit_warnings([
            f"kafka.sasl_mechanism is {app_config.kafka.sasl_mechanism} but "
            "KAFKA_SASL_USERNAME/KAFKA_SASL_PASSWORD are not set; connecting without SASL"
        ])

    return app_config, env_config


def _read_yaml(config_file: Path):
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Configuration file not found: {config_file}",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                f"Ensure {config_file} exists and is readable",
            ],
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} is readable", "Check file permissions"],
        ) from e


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Resolve the configuration file path.

    Raises:
        ConfigurationError: If no config file is found
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[f"Ensure {config_path} exists", "Check the path and try again"],
            )
        return config_path

    candidates = [
        Path("config.yaml"),
        Path("config") / "config.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration file not found",
        errors=[f"Tried: {candidate}" for candidate in candidates],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config flag to specify a custom location",
        ],
    )


def validate_config_file(config_path: Path) -> bool:
    """
    Validate a configuration file without loading environment variables.

    Returns:
        True if valid, False otherwise (errors printed to stdout)
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        AppConfig.model_validate(config_dict)
        print(f"✓ Configuration file {config_path} is valid")
        return True
    except ValidationError as e:
        print(f"✗ Configuration validation failed:\n{ConfigurationError.from_validation_error(e)}")
        return False
    except (OSError, yaml.YAMLError) as e:
        print(f"✗ Could not read {config_path}: {e}")
        return False
