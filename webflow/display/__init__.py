"""Display package for console output of flow results."""

from .console_display import ConsoleDisplay, mask_secret

__all__ = ['ConsoleDisplay', 'mask_secret']
