"""
Backing-store clients.
"""

from .eos_client import EosCliClient, parse_monitoring_line, version_folder
from .protocol import BackingStoreClient

__all__ = [
    "BackingStoreClient",
    "EosCliClient",
    "parse_monitoring_line",
    "version_folder",
]
