"""Configuration package for webflow."""

from .settings import load_config, build_callback_settings

__all__ = ['load_config', 'build_callback_settings']
