"""
Utilities module.
"""
from asetiler.utils.file_io import FileIO
from asetiler.utils.settings import Settings, get_settings

__all__ = ['FileIO', 'Settings', 'get_settings']
