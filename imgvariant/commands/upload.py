"""
Upload command for imgvariant CLI.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from imgvariant.catalog import index_provider_from_config
from imgvariant.config import load_config, validate_config
from imgvariant.errors import ImgVariantError
from imgvariant.locator import SourceLocator
from imgvariant.producer import Upload, VariantProducer
from imgvariant.records import InMemoryRecordStore
from imgvariant.storage import S3Storage


def crop_from_args(x=None, y=None, width=None, height=None) -> Optional[Dict[str, Any]]:
    """Build crop data from CLI arguments, None when no crop was asked for."""
    crop = {
        key: value
        for key, value in (("x", x), ("y", y), ("width", width), ("height", height))
        if value is not None
    }
    return crop or None


class UploadCommand:
    """Store an image and its pregenerate variants in S3."""

    def __call__(
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
        """
        Store an image and its pregenerate variants in S3.

        Args:
            input_path: Path to the input image file
            image_type: Image type id or name
            image_name: Display name, derived from the file name if not set
            x: Crop offset from the left
            y: Crop offset from the top
            width: Crop width
            height: Crop height
            session: Session values used to derive the storage path
        """
        # Load and validate configuration
        config = load_config()
        error = validate_config(config)
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            sys.exit(1)

        # Validate input file
        input_path_obj = Path(input_path)
        if not input_path_obj.exists():
            print(f"Input file not found: {input_path_obj}", file=sys.stderr)
            sys.exit(1)

        try:
            index = index_provider_from_config(config).get()
            image_type_spec = index.find_type(image_type)
            if image_type_spec is None:
                print(f"Image type not found: {image_type}", file=sys.stderr)
                sys.exit(1)

            producer = VariantProducer(
                storage=S3Storage(config),
                records=InMemoryRecordStore(),
                locator=SourceLocator.from_config(config),
                max_workers=config["producer"]["max_workers"],
            )

            meta: Dict[str, Any] = {"file_name": input_path_obj.name}
            if image_name:
                meta["image_name"] = image_name
            crop = crop_from_args(x, y, width, height)
            if crop:
                meta["crop"] = crop

            produced = producer.process(
                Upload(
                    buffer=input_path_obj.read_bytes(),
                    image_type=image_type_spec,
                    meta=meta,
                    session=session or {},
                )
            )

            print(f"Image record: {produced.record.id} ({produced.record.image_name})")
            print(f"Stored image: {produced.primary.path} ({len(produced.primary.buffer)} bytes)")
            print(f"  src: {produced.primary.src}")
            for variant in produced.extras:
                print(f"Stored variant {variant.profile_name}: {variant.path} ({len(variant.buffer)} bytes)")  # fmt: skip
                print(f"  src: {variant.src}")

        except (ImgVariantError, OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
