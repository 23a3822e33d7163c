"""
Command-line interface for imgvariant.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

import fire


class ImgVariantCLI:
    """
    imgvariant - Image Variant Planning and Production Tool

    Produces sized and re-encoded variants of uploaded images from declarative
    image types and image profiles, and picks the variant to serve for a display size.
    """

    def __init__(self):
        pass

    def up(
        self,
        input_path: str,
        image_type: str,
        image_name: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        session: Optional[Dict[str, Any]] = None,
    ):
        """Store an image and its pregenerate variants in S3.

        Args:
            input_path: Path to the input image file
            image_type: Image type id or name
            image_name: Display name, derived from the file name if not set
            x: Crop offset from the left (may be negative)
            y: Crop offset from the top (may be negative)
            width: Crop width
            height: Crop height
            session: Session values for the storage path, e.g. '{"accountId": "abc"}'
        """
        from imgvariant.commands.upload import UploadCommand

        return UploadCommand()(
            input_path, image_type, image_name, x, y, width, height, session
        )

    def plan(
        self,
        input_path: str,
        image_type: str,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ):
        """Show crop and encode plans for an image without storing anything.

        Args:
            input_path: Path to the input image file
            image_type: Image type id or name
            x: Crop offset from the left (may be negative)
            y: Crop offset from the top (may be negative)
            width: Crop width
            height: Crop height
        """
        from imgvariant.commands.plan import PlanCommand

        return PlanCommand()(input_path, image_type, x, y, width, height)

    def pick(
        self,
        image_type: str,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ):
        """Show which variant is served for a display size.

        Args:
            image_type: Image type id or name
            width: Display width
            height: Display height
        """
        from imgvariant.commands.pick import PickCommand

        return PickCommand()(image_type, width, height)

    def types(self):
        """List image types and their linked profiles."""
        from imgvariant.commands.types import TypesCommand

        return TypesCommand()()

    @property
    def version(self):
        """Print the version and exit."""
        from importlib.metadata import PackageNotFoundError, version

        try:
            return version("imgvariant")
        except PackageNotFoundError:
            return "0.1.0"


def main():
    """
    Main entry point for the CLI.
    """
    logging.basicConfig(
        level=os.environ.get("IMGVARIANT_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        fire.Fire(ImgVariantCLI)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
