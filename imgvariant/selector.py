"""
Variant selection for display.
Picks the image profile closest to a requested size and builds the data
needed to render a picture element for a stored image.
"""

import logging
from typing import Any, Optional, Union

from imgvariant.area import estimate_area
from imgvariant.image import ImageProcessor
from imgvariant.index import VariantIndex
from imgvariant.locator import SourceLocator
from imgvariant.models import (
    ImageProfileSpec,
    ImageRef,
    ImageTypeSpec,
    Picture,
    PictureSource,
)

logger = logging.getLogger(__name__)


def select_profile(
    image_type: Optional[ImageTypeSpec],
    width: Optional[float] = None,
    height: Optional[float] = None,
    fallback: Any = None,
) -> Union[ImageProfileSpec, ImageTypeSpec, Any, None]:
    """
    Select the linked profile whose area is closest to the target size.

    Args:
        image_type: Image type to select a profile for
        width: Target display width
        height: Target display height
        fallback: Returned unchanged when there is no image type

    Returns:
        - fallback when image_type is None
        - image_type itself when it has no linked profiles
        - the first linked profile when neither width nor height is given
        - the closest non-webp profile, or None when no profile is closer
          to the target than the image type itself
    """
    if image_type is None:
        return fallback

    profiles = list(image_type.profiles.values())
    if not profiles:
        return image_type

    if width is None and height is None:
        return profiles[0]

    target_area = estimate_area(width=width, height=height)
    best_delta = abs(estimate_area(image_type) - target_area)
    best = None

    # Profiles are checked in link order; the first strictly closer one wins
    for profile in profiles:
        # webp variants are offered as alternates only
        if profile.file_type == "webp":
            continue
        delta = abs(estimate_area(profile) - target_area)
        if delta < best_delta:
            best_delta = delta
            best = profile

    return best


def resolve_picture(
    index: VariantIndex,
    locator: SourceLocator,
    image: ImageRef,
    width: Optional[float] = None,
    height: Optional[float] = None,
) -> Picture:
    """
    Build picture data for an image, choosing the variant that best fits
    the optional display width and height.

    Args:
        index: Current variant index snapshot
        locator: Builds src strings
        image: Normalized stored image
        width: Display width hint
        height: Display height hint

    Returns:
        Picture with original src, selected src and any webp alternatives
    """
    image_type = index.get_type_by_id(image.image_type_id)
    if image_type is None:
        logger.debug(f"No image type {image.image_type_id} for image {image.image_id}")

    selected = select_profile(image_type, width, height, fallback=image)

    picture = Picture(
        image_id=image.image_id,
        image_original_id=image.image_original_id,
        image_type_name=image_type.image_type_name if image_type else "",
        image_name=image.image_name,
        description=image.description,
        latitude=image.latitude,
        longitude=image.longitude,
        orig_src=locator.build_src(
            image.path, image.file_name, image.file_type, image.image_id
        ),
        src="",
    )

    if isinstance(selected, ImageProfileSpec):
        profile = selected
        picture.src = locator.build_src(
            image.path,
            image.file_name,
            profile.file_type,
            image.image_id,
            profile.image_profile_name,
        )
    else:
        # The type's own variant (or the image itself when untyped)
        file_type = image_type.file_type if image_type else image.file_type
        picture.src = locator.build_src(
            image.path, image.file_name, file_type, image.image_id
        )
        return picture

    if profile.has_webp:
        for file_type in ("webp", profile.file_type):
            picture.source.append(
                PictureSource(
                    file_type=file_type,
                    srcset=locator.build_src(
                        image.path,
                        image.file_name,
                        file_type,
                        image.image_id,
                        profile.image_profile_name,
                    ),
                    type=ImageProcessor.get_content_type(file_type),
                )
            )
        picture.source_by_type = {source.file_type: source for source in picture.source}

    return picture
