"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import ShorteningService
from .resolver import Resolver
from .metrics import ShortenerMetrics

__all__ = ["ShortCodeGenerator", "ShorteningService", "Resolver", "ShortenerMetrics"]

__version__ = "1.0.0"
