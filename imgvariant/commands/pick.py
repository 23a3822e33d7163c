"""
Pick command for imgvariant CLI.
"""

import sys
from typing import Optional

from imgvariant.catalog import index_provider_from_config
from imgvariant.config import load_config, validate_config
from imgvariant.errors import ImgVariantError
from imgvariant.models import ImageProfileSpec
from imgvariant.selector import select_profile


class PickCommand:
    """Show which variant of an image type is served for a display size."""

    def __call__(
        self,
        image_type: str,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ):
        """
        Show which variant of an image type is served for a display size.

        Args:
            image_type: Image type id or name
            width: Display width
            height: Display height
        """
        config = load_config()
        error = validate_config(config, require_storage=False)
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            sys.exit(1)

        try:
            index = index_provider_from_config(config).get()
        except (ImgVariantError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        image_type_spec = index.find_type(image_type)
        if image_type_spec is None:
            print(f"Image type not found: {image_type}", file=sys.stderr)
            sys.exit(1)

        selected = select_profile(image_type_spec, width, height)
        if isinstance(selected, ImageProfileSpec):
            alternates = " (webp alternate)" if selected.has_webp else ""
            print(f"Profile: {selected.image_profile_name} [{selected.file_type}]{alternates}")
        else:
            print(f"Image type: {image_type_spec.image_type_name} [{image_type_spec.file_type}]")
