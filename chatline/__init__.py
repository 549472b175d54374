"""Chatline: multi-session chat backend with durable history."""

__version__ = "0.1.0"
