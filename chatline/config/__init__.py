"""Configuration module for the Chatline backend."""

from chatline.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
