"""
TOML catalog of image types, image profiles and their links.

Example:

    [[image_types]]
    id = "1"
    image_type_name = "avatar"
    file_type = "jpg"
    max_width = 800

    [[image_profiles]]
    id = "10"
    image_profile_name = "thumb"
    file_type = "jpg"
    max_width = 100
    pregenerate = true

    [[links]]
    image_type_id = "1"
    image_profile_id = "10"
"""

import sys
from pathlib import Path
from typing import Any, Dict, Union

# For Python < 3.11, use tomli instead of tomllib
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from imgvariant.errors import ConfigurationError
from imgvariant.index import IndexRecords, VariantIndexProvider
from imgvariant.models import ImageProfileSpec, ImageTypeProfileLink, ImageTypeSpec


class TomlCatalog:
    """Index source reading a TOML catalog file on every load."""

    def __init__(self, path: Union[str, Path, None]):
        if not path:
            raise ConfigurationError("Image type catalog is required (index.catalog)")
        self.path = Path(path)

    def __call__(self) -> IndexRecords:
        return self.load()

    def load(self) -> IndexRecords:
        with open(self.path, "rb") as f:
            data = tomllib.load(f)

        types = [ImageTypeSpec.from_mapping(row) for row in data.get("image_types", [])]
        profiles = [
            ImageProfileSpec.from_mapping(row) for row in data.get("image_profiles", [])
        ]
        links = [ImageTypeProfileLink.from_mapping(row) for row in data.get("links", [])]
        return types, profiles, links


def index_provider_from_config(config: Dict[str, Any]) -> VariantIndexProvider:
    """
    Create a refreshing index provider for the configured catalog.
    """
    return VariantIndexProvider(
        TomlCatalog(config["index"]["catalog"]),
        refresh_interval=config["index"]["refresh_interval"],
    )
