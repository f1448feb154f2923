"""
composer-advisories distribution import namespace.

This package re-exports the core `advisory_lifecycle` package for
convenience imports.
"""

from importlib.metadata import PackageNotFoundError, version

# src/composer_advisories/__init__.py
from advisory_lifecycle import *  # noqa: F401,F403
from advisory_lifecycle import __all__ as _core_all

try:
    from ._version import __version__  # canonical
except ImportError:  # pragma: no cover - fallback for editable/local non-built environments
    try:
        __version__ = version("composer-advisories")
    except PackageNotFoundError:
        __version__ = "0+unknown"

__all__ = [*_core_all, "__version__"]
