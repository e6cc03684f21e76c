"""Configuration loading."""

from collectionkit.config.config_loader import ConfigLoader

__all__ = ["ConfigLoader"]
