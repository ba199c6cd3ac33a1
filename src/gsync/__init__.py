"""Configuration management for gsync, a Google Drive file sync tool."""

__version__ = "0.1.0"
