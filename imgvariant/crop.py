"""
Crop planning for uploads that carry client cropper data.
"""

import math
from typing import Optional

from imgvariant.geometry import round_half_up
from imgvariant.models import CanvasExtension, CropPlan, CropRect, CropRequest, ImageMeta


def plan_crop(source: ImageMeta, request: CropRequest) -> CropPlan:
    """
    Correct a requested crop window against the source bounds.

    Negative offsets are absorbed by extending the canvas left/top; a window
    running past the right/bottom edge is shrunk to fit and the canvas is
    extended there afterwards so the output keeps the requested size. The
    checks run in a fixed order: left, top, bottom, right.

    Args:
        source: Metadata of the uploaded image
        request: Crop window in source pixels, any field may be missing

    Returns:
        CropPlan with the crop rectangle (None when the whole canvas is kept),
        the canvas extension and the resulting image metadata

    Raises:
        ValueError: The corrected window has no pixels left
    """
    left = round_half_up(request.x if request.x is not None else 0)
    top = round_half_up(request.y if request.y is not None else 0)
    height = round_half_up(
        request.height if request.height is not None else source.height - top
    )
    width = round_half_up(
        request.width if request.width is not None else source.width - left
    )

    canvas_width = source.width
    canvas_height = source.height
    extend_left = extend_top = extend_bottom = extend_right = 0

    if left < 0:
        extend_left = math.ceil(abs(left))
        canvas_width += extend_left
        left = 0

    if top < 0:
        extend_top = math.ceil(abs(top))
        canvas_height += extend_top
        top = 0

    if height + top > canvas_height:
        extend_bottom = height + top - canvas_height
        height -= extend_bottom

    if width + left > canvas_width:
        extend_right = width + left - canvas_width
        width -= extend_right

    if width <= 0 or height <= 0:
        raise ValueError(f"Crop window {request} is outside the {source.width}x{source.height} image")

    crop_rect: Optional[CropRect] = None
    if height < canvas_height or width < canvas_width:
        crop_rect = CropRect(left=left, top=top, width=width, height=height)
        out_width, out_height = width, height
    else:
        out_width, out_height = canvas_width, canvas_height

    return CropPlan(
        crop_rect=crop_rect,
        canvas_extension=CanvasExtension(
            top=extend_top, bottom=extend_bottom, left=extend_left, right=extend_right
        ),
        updated_meta=ImageMeta(
            width=out_width + extend_right,
            height=out_height + extend_bottom,
            format=source.format,
        ),
    )
