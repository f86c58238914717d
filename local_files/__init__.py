"""Local Files - discover and describe playable media on the local filesystem."""

__version__ = "0.1.0"
__author__ = "Local Files Team"

from .utils.config import Config
from .utils.logger import setup_logger
from .core.local_files import LocalFiles

__all__ = ['Config', 'setup_logger', 'LocalFiles']
