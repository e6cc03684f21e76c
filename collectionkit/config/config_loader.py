"""
Configuration loader for YAML and JSON files.

Loads executor settings (worker pool, async scheduling, log level) from
declarative files.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from collectionkit.core.specifications import ChainSpecifications


class ConfigLoader:
    """
    Loads chain specifications from YAML or JSON files.

    Example YAML:
        parallel:
          workers: 8
          chunk_size: 500
        async:
          yield_every: 100
        log_level: info
    """

    @staticmethod
    def from_yaml(file_path: str | Path) -> ChainSpecifications:
        """
        Load configuration from YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            ChainSpecifications

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If invalid YAML or configuration
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        return ConfigLoader._dict_to_specifications(config_dict or {})

    @staticmethod
    def from_json(file_path: str | Path) -> ChainSpecifications:
        """
        Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If invalid JSON or configuration
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                config_dict = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e

        return ConfigLoader._dict_to_specifications(config_dict or {})

    @staticmethod
    def _dict_to_specifications(config: dict[str, Any]) -> ChainSpecifications:
        """
        Convert configuration dictionary to ChainSpecifications.

        Maps user-friendly field names to internal Pydantic field names.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")
        config = dict(config)

        # 'workers' is accepted as shorthand for parallel.max_workers
        if isinstance(config.get("parallel"), dict):
            parallel = dict(config["parallel"])
            if "workers" in parallel:
                parallel["max_workers"] = parallel.pop("workers")
            config["parallel"] = parallel

        if "async_" in config and "async" not in config:
            config["async"] = config.pop("async_")

        try:
            return ChainSpecifications(**config)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @staticmethod
    def to_yaml(specifications: ChainSpecifications, file_path: str | Path) -> None:
        """Save specifications to YAML file."""
        path = Path(file_path)

        config_dict = specifications.model_dump(mode="json", by_alias=True)

        with open(path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @staticmethod
    def to_json(specifications: ChainSpecifications, file_path: str | Path) -> None:
        """Save specifications to JSON file."""
        path = Path(file_path)

        config_dict = specifications.model_dump(mode="json", by_alias=True)

        with open(path, "w") as f:
            json.dump(config_dict, f, indent=2, default=str)
