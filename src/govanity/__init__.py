"""
govanity - go-import redirects for vanity domains

Resolves vanity import paths by reading ``go-import`` TXT records from DNS
and serving the matching ``<meta name="go-import">`` tags to ``go get``.
"""

__version__ = "1.0.0"


# Lazy imports to avoid loading aiohttp and dnspython when not needed
def __getattr__(name):
    """Lazy loading of package components to avoid unnecessary imports."""
    if name == "HostCache":
        from .dns_cache import HostCache

        return HostCache
    elif name == "TXTClient":
        from .dns_client import TXTClient

        return TXTClient
    elif name == "parse_import":
        from .parsers import parse_import

        return parse_import
    elif name == "create_app":
        from .server import create_app

        return create_app
    elif name == "AppSettings":
        from .config import AppSettings

        return AppSettings
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define the public API of the package
__all__ = [
    "HostCache",
    "TXTClient",
    "parse_import",
    "create_app",
    "AppSettings",
    "__version__",
]
