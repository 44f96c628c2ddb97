"""Common utilities for URL shortener."""

from .validators import is_valid_url
from .headers import extract_forwarded_headers, build_base_url, get_client_ip
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "extract_forwarded_headers",
    "build_base_url",
    "get_client_ip",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
