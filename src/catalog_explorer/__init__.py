"""
Catalog Explorer.

Classification, listing and snapshot-diff presentation
for a versioned game asset catalog.
"""

from catalog_explorer.config import Settings, get_settings
from catalog_explorer.logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
