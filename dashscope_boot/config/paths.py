"""Shared filesystem helpers for configuration storage."""

from pathlib import Path


def get_app_dir() -> Path:
    """Return the dashscope-boot configuration directory under the user's home."""

    return Path.home() / '.dashscope-boot'


__all__ = ['get_app_dir']
