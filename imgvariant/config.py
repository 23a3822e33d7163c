"""
Configuration module for imgvariant.
Handles loading configuration from files and environment variables.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Any, Optional

# For Python < 3.11, use tomli instead of tomllib
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()


def get_config_paths() -> list[Path]:
    """
    Get a list of possible configuration file paths in order of priority.
    """
    paths = [
        Path.cwd() / "config.toml",  # Current directory
        Path.home() / ".imgvariant" / "config.toml",  # User's home directory
    ]

    # XDG config directory
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        paths.append(Path(xdg_config_home) / "imgvariant" / "config.toml")
    else:
        paths.append(Path.home() / ".config" / "imgvariant" / "config.toml")

    return paths


def default_config() -> Dict[str, Any]:
    return {
        "s3": {
            "bucket": None,
            "endpoint": None,
            "region": "us-east-1",
            "access_key": None,
            "secret_key": None,
        },
        "image": {
            "host": "",
            "base": "",
            "path_property": None,
        },
        "index": {
            "catalog": None,
            "refresh_interval": 60,
        },
        "producer": {
            "max_workers": 4,
        },
    }


def load_config() -> Dict[str, Any]:
    """
    Load configuration from TOML files and environment variables.
    Returns a dictionary with the merged configuration.
    """
    config = default_config()

    # Try to load from config files
    for config_path in get_config_paths():
        if config_path.exists():
            try:
                with open(config_path, "rb") as f:
                    file_config = tomllib.load(f)

                for section in config:
                    if section in file_config:
                        config[section].update(file_config[section])

                break  # Stop after the first valid config file
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Error loading config from {config_path}: {e}")

    # Override with environment variables
    env_mapping = {
        "IMGVARIANT_S3_BUCKET": ("s3", "bucket"),
        "IMGVARIANT_S3_ENDPOINT": ("s3", "endpoint"),
        "IMGVARIANT_S3_REGION": ("s3", "region"),
        "IMGVARIANT_S3_ACCESS_KEY": ("s3", "access_key"),
        "IMGVARIANT_S3_SECRET_KEY": ("s3", "secret_key"),
        "IMGVARIANT_HOST": ("image", "host"),
        "IMGVARIANT_BASE": ("image", "base"),
        "IMGVARIANT_PATH_PROPERTY": ("image", "path_property"),
        "IMGVARIANT_CATALOG": ("index", "catalog"),
        "IMGVARIANT_REFRESH_INTERVAL": ("index", "refresh_interval"),
        "IMGVARIANT_MAX_WORKERS": ("producer", "max_workers"),
    }

    for env_var, (section, key) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            # Convert to int for numeric values
            if key in ("refresh_interval", "max_workers"):
                try:
                    value = int(value)
                except ValueError:
                    pass
            # Comma separated list of session properties
            elif key == "path_property" and "," in value:
                value = [part.strip() for part in value.split(",") if part.strip()]
            config[section][key] = value

    # Also check for standard AWS environment variables
    if not config["s3"]["access_key"]:
        config["s3"]["access_key"] = os.environ.get("AWS_ACCESS_KEY_ID")
    if not config["s3"]["secret_key"]:
        config["s3"]["secret_key"] = os.environ.get("AWS_SECRET_ACCESS_KEY")
    if not config["s3"]["region"]:
        config["s3"]["region"] = (
            os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or "us-east-1"
        )

    return config


def validate_config(config: Dict[str, Any], require_storage: bool = True) -> Optional[str]:
    """
    Validate the configuration and return an error message if invalid.
    """
    if require_storage and not config["s3"]["bucket"]:
        return "S3 bucket name is required"

    if not config["index"]["catalog"]:
        return "Image type catalog is required"

    path_property = config["image"]["path_property"]
    if path_property is not None and not isinstance(path_property, (str, list)):
        return f"Invalid path property: {path_property}. Must be a string or a list of strings"

    refresh_interval = config["index"]["refresh_interval"]
    if not isinstance(refresh_interval, (int, float)) or refresh_interval < 0:
        return f"Invalid refresh interval: {refresh_interval}. Must be a non-negative number of seconds"

    max_workers = config["producer"]["max_workers"]
    if not isinstance(max_workers, int) or max_workers < 1:
        return f"Invalid max workers: {max_workers}. Must be a positive integer"

    return None
