"""Version information for the trimws package."""

from __future__ import annotations

from importlib import metadata

# read by setuptools for the package metadata
VERSION = "0.3.0"

try:
    __version__ = metadata.version("trimws")
except metadata.PackageNotFoundError:  # pragma: no cover - running from a checkout
    __version__ = VERSION

__all__ = ["VERSION", "__version__"]
