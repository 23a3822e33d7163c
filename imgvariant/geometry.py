"""
Output geometry and encode settings for a variant.
"""

import math
from typing import Any, Optional, Tuple

from imgvariant.models import CropPlan, EncodeOptions, GeometryPlan, ImageMeta


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def encode_settings(spec: Any) -> Tuple[str, EncodeOptions]:
    """
    Map a spec's file type to a codec format name and encode options.
    """
    file_type = getattr(spec, "file_type", None)
    quality = getattr(spec, "quality", None)

    if file_type == "png":
        return "png", EncodeOptions(compression_level=9)
    if file_type == "webp":
        return "webp", EncodeOptions(quality=quality)
    return "jpeg", EncodeOptions(quality=quality, progressive=True)


def output_size(original: ImageMeta, spec: Any) -> Tuple[int, int]:
    """
    Compute output (width, height) for a spec applied to an image.

    Precedence:
        1. width and height: used exactly
        2. height only: width from aspect ratio
        3. width only: height from aspect ratio
        4. max_height and/or max_width: shrink to fit, max_width checked last
        5. nothing: original size

    The aspect ratio comes from the profile or type, or from the original image when unset.
    """
    width = getattr(spec, "width", None)
    height = getattr(spec, "height", None)
    max_width = getattr(spec, "max_width", None)
    max_height = getattr(spec, "max_height", None)
    aspect_ratio: Optional[float] = getattr(spec, "aspect_ratio", None)
    if aspect_ratio is None:
        aspect_ratio = original.width / original.height

    if height and width:
        return width, height

    if height:
        return round_half_up(height * aspect_ratio), height

    if width:
        return width, round_half_up(width / aspect_ratio)

    out_width, out_height = original.width, original.height
    if max_height and out_height > max_height:
        out_height = max_height
        out_width = round_half_up(out_height * aspect_ratio)
    if max_width and out_width > max_width:
        out_width = max_width
        out_height = round_half_up(out_width / aspect_ratio)

    return out_width, out_height


def plan_geometry(
    original: ImageMeta, spec: Any, crop: Optional[CropPlan] = None
) -> GeometryPlan:
    """
    Plan the encode of a variant.

    Args:
        original: Metadata of the (possibly cropped) working image
        spec: ImageTypeSpec or ImageProfileSpec describing the variant
        crop: Crop plan already applied to the working image, if any

    Returns:
        GeometryPlan with final dimensions, codec format and encode options
    """
    format, options = encode_settings(spec)
    width, height = output_size(original, spec)
    # Never plan an empty image
    return GeometryPlan(
        width=max(int(width), 1),
        height=max(int(height), 1),
        format=format,
        encode_options=options,
        crop=crop,
    )


def can_reuse_original(original: ImageMeta, plan: GeometryPlan, modified: bool) -> bool:
    """
    True when the source bytes already are the planned output.
    """
    return not modified and plan.matches(original)
