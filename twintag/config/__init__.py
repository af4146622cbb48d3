"""
Configuration for the Twintag SDK.

This package provides the host and log level environment shared by clients
and the manager for stored profiles.
"""
from .environment import Environment, LOG_LEVELS, DEFAULT_HOST
from .manager import ConfigManager

__all__ = ['Environment', 'LOG_LEVELS', 'DEFAULT_HOST', 'ConfigManager']
