"""
Pixel area estimation for image types and profiles.
"""

from typing import Any, Optional


def estimate_area(
    spec: Any = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
) -> float:
    """
    Calculate an area or estimated area from a dimension spec.

    The spec may be any object with optional width, height, max_width,
    max_height and aspect_ratio attributes (an ImageTypeSpec or an
    ImageProfileSpec). Alternatively pass width and/or height directly.

    Args:
        spec: Object exposing dimension attributes
        width: Width, used when no spec is given
        height: Height, used when no spec is given

    Returns:
        Estimated area in pixels
    """
    if spec is not None:
        width = _first_set(spec, "width", "max_width")
        height = _first_set(spec, "height", "max_height")
        aspect_ratio = getattr(spec, "aspect_ratio", None)
    else:
        aspect_ratio = None

    # Missing height is derived from the aspect ratio or counts as 1
    if height is None:
        height = width / aspect_ratio if aspect_ratio and width else 1
    if width is None:
        width = height * aspect_ratio if aspect_ratio and height else 1

    return height * width


def _first_set(spec: Any, *names: str) -> Optional[float]:
    for name in names:
        value = getattr(spec, name, None)
        if value is not None:
            return value
    return None
