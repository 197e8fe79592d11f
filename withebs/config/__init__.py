# Configuration loading for withebs
from .manager import ConfigManager

__all__ = ["ConfigManager"]
