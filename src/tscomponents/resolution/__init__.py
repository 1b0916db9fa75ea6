"""Filesystem-facing collaborators of the resolver."""

from .context import ResolutionContext
from .external import find_external_packages
from .packages import PackageMetadata, load_package_metadata

__all__ = [
    "PackageMetadata",
    "ResolutionContext",
    "find_external_packages",
    "load_package_metadata",
]
