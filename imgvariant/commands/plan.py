"""
Plan command for imgvariant CLI.
"""

import sys
from pathlib import Path
from typing import Optional

from imgvariant.catalog import index_provider_from_config
from imgvariant.commands.upload import crop_from_args
from imgvariant.config import load_config, validate_config
from imgvariant.crop import plan_crop
from imgvariant.errors import ImgVariantError
from imgvariant.geometry import can_reuse_original, plan_geometry
from imgvariant.image import ImageProcessor
from imgvariant.models import CropRequest


class PlanCommand:
    """Show how an image would be cropped and encoded, without storing anything."""

    def __call__(
        self,
        input_path: str,
        image_type: str,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ):
        config = load_config()
        error = validate_config(config, require_storage=False)
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            sys.exit(1)

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

            meta = ImageProcessor.read_metadata(input_path_obj.read_bytes())
            print(f"Original image: {meta.width}x{meta.height}, format: {meta.format}")

            crop_plan = None
            crop = crop_from_args(x, y, width, height)
            if crop:
                crop_plan = plan_crop(meta, CropRequest.from_mapping(crop))
                extension = crop_plan.canvas_extension
                print(
                    f"Extend: top={extension.top} bottom={extension.bottom} "
                    f"left={extension.left} right={extension.right}"
                )
                print(f"Crop: {crop_plan.crop_rect or 'none (full frame)'}")
                meta = crop_plan.updated_meta
                print(f"Cropped image: {meta.width}x{meta.height}")

            specs = [(image_type_spec.image_type_name, image_type_spec)]
            specs += [
                (profile.image_profile_name, profile)
                for profile in image_type_spec.profiles.values()
                if profile.pregenerate
            ]
            for name, spec in specs:
                plan = plan_geometry(meta, spec, crop_plan)
                reuse = can_reuse_original(meta, plan, modified=crop_plan is not None)
                action = "reuse original" if reuse else "encode"
                print(f"{name}: {plan.width}x{plan.height} {plan.format} ({action}) {plan.encode_options}")  # fmt: skip

        except (ImgVariantError, OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
