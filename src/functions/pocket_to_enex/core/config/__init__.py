"""Configuration management for Pocket to ENEX conversion."""

from .settings import ConverterDefaults, load_defaults

__all__ = ["ConverterDefaults", "load_defaults"]
