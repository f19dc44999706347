# Picksift Utilities Package
"""
Shared utility functions and helpers for picksift.
"""

from .helpers import config_dir, data_dir, default_history_path, load_settings

__all__ = ["config_dir", "data_dir", "default_history_path", "load_settings"]
