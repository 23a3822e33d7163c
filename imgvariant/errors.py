"""
Exceptions raised by imgvariant.
"""

from typing import Optional


class ImgVariantError(Exception):
    """Base class for imgvariant errors."""


class ConfigurationError(ImgVariantError):
    """A required setting, session value or collaborator is missing."""


class ProductionFailure(ImgVariantError):
    """Encoding or storing a variant failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
