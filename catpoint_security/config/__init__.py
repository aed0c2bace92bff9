"""Configuration components for the catpoint security system."""

from .defaults import (
    DEFAULT_CONFIG,
    DEFAULT_PATHS,
    CASCADE_SETTINGS,
    IMAGE_BACKENDS
)

__all__ = [
    'DEFAULT_CONFIG',
    'DEFAULT_PATHS',
    'CASCADE_SETTINGS',
    'IMAGE_BACKENDS'
]
