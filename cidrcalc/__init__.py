"""Classify IP addresses and CIDR ranges against GitHub's published IP ranges."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["get_version"]


def get_version() -> str:
    """Return the installed package version or a development marker."""
    try:
        return version("cidrcalc")
    except PackageNotFoundError:
        return "0.0.0-dev"
