"""Configuration loading utilities for plydecode."""

from .schema import (
    DecodeConfig,
    load_config,
)

__all__ = ["DecodeConfig", "load_config"]
