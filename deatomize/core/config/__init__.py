"""
Run configuration loading.
"""

from .settings import NamespaceSettings, Settings, SettingsLoader, load_settings

__all__ = [
    "Settings",
    "NamespaceSettings",
    "SettingsLoader",
    "load_settings",
]
