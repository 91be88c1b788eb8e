"""CLI commands for asetiler."""

from cli.commands import convert_mode, tile_mode, info_mode

__all__ = ['convert_mode', 'tile_mode', 'info_mode']
