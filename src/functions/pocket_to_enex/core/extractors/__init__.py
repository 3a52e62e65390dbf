"""Content extractors: plain HTTP first, headless browser as fallback."""

from .browser_extractor import BrowserExtractor
from .browser_manager import BrowserManager, BrowserState, install_shutdown_handlers
from .light_extractor import DEFAULT_USER_AGENT, LightExtractor, describe_http_error

__all__ = [
    "BrowserExtractor",
    "BrowserManager",
    "BrowserState",
    "install_shutdown_handlers",
    "DEFAULT_USER_AGENT",
    "LightExtractor",
    "describe_http_error",
]
