"""
Image codec module for imgvariant.
Handles metadata, cropping, canvas extension, resizing and encoding using libvips.
"""

from typing import Dict, Any, Union

import pyvips

from imgvariant.models import CropPlan, GeometryPlan, ImageMeta

# Mapping of libvips loader name prefixes to format names
LOADER_MAP = {
    "jpeg": "jpeg",
    "png": "png",
    "spng": "png",
    "webp": "webp",
}

# Mapping of format names to libvips save suffixes
FORMAT_MAP = {
    "webp": ".webp",
    "jpeg": ".jpg",
    "jpg": ".jpg",
    "png": ".png",
}

# Fill colors for canvas extension
FILL_MAP = {
    "white": 255,
    "black": 0,
}


class ImageProcessor:
    """
    Codec used by the variant producer. Images are handled as pyvips Image
    objects between calls and as encoded bytes at the edges.
    """

    @staticmethod
    def open_buffer(data: bytes) -> pyvips.Image:
        """
        Load encoded image bytes into a pyvips Image object.
        """
        return pyvips.Image.new_from_buffer(data, "")

    @staticmethod
    def read_metadata(data: Union[bytes, pyvips.Image]) -> ImageMeta:
        """
        Read dimensions and format of an image.

        Args:
            data: Encoded image bytes or an opened pyvips Image

        Returns:
            ImageMeta with width, height and format (jpeg, png, webp or None)
        """
        img = data if isinstance(data, pyvips.Image) else ImageProcessor.open_buffer(data)
        loader = None
        if img.get_typeof("vips-loader") != 0:
            # e.g. jpegload, pngload_buffer, webpload_source
            prefix = img.get("vips-loader").lower().split("load")[0]
            loader = LOADER_MAP.get(prefix)
        return ImageMeta(width=img.width, height=img.height, format=loader)

    @staticmethod
    def apply_crop(img: pyvips.Image, plan: CropPlan) -> pyvips.Image:
        """
        Apply a crop plan: left/top extension, crop, then bottom/right extension.

        Args:
            img: pyvips Image object
            plan: Crop plan computed for this image

        Returns:
            Cropped pyvips Image object
        """
        extension = plan.canvas_extension
        background = [FILL_MAP.get(extension.fill_color, 255)] * img.bands

        if extension.leading:
            img = img.embed(
                extension.left,
                extension.top,
                img.width + extension.left,
                img.height + extension.top,
                extend="background",
                background=background,
            )

        if plan.crop_rect is not None:
            rect = plan.crop_rect
            img = img.crop(rect.left, rect.top, rect.width, rect.height)

        if extension.trailing:
            img = img.embed(
                0,
                0,
                img.width + extension.right,
                img.height + extension.bottom,
                extend="background",
                background=background,
            )

        return img

    @staticmethod
    def resize_and_encode(img: pyvips.Image, plan: GeometryPlan) -> bytes:
        """
        Resize an image to the planned size and encode it.

        Args:
            img: pyvips Image object
            plan: Geometry plan with exact output size and encode options

        Returns:
            Encoded image as bytes
        """
        if plan.format not in FORMAT_MAP:
            raise ValueError(f"Unsupported format: {plan.format}")

        if img.width != plan.width or img.height != plan.height:
            # Resize to exact dimensions (may distort)
            img = img.thumbnail_image(plan.width, height=plan.height, size="force")

        # JPEG has no alpha channel
        if plan.format == "jpeg" and img.hasalpha():
            img = img.flatten(background=[255] * (img.bands - 1))

        return img.write_to_buffer(
            FORMAT_MAP[plan.format], **ImageProcessor.save_options(plan)
        )

    @staticmethod
    def save_options(plan: GeometryPlan) -> Dict[str, Any]:
        """
        Translate encode options to libvips save options.
        """
        options = plan.encode_options
        save_options: Dict[str, Any] = {}

        if plan.format == "png":
            if options.compression_level is not None:
                save_options["compression"] = options.compression_level
        elif plan.format == "webp":
            if options.quality is not None:
                save_options["Q"] = options.quality
        else:
            if options.quality is not None:
                save_options["Q"] = options.quality
            if options.progressive:
                save_options["interlace"] = True  # Progressive JPEG

        return save_options

    @staticmethod
    def get_content_type(format: str) -> str:
        """
        Get the MIME content type for a given image format.

        Args:
            format: Image format (webp, jpeg/jpg, png)

        Returns:
            MIME content type
        """
        format = format.lower()
        if format in ("jpg", "jpeg"):
            return "image/jpeg"
        elif format == "png":
            return "image/png"
        elif format == "webp":
            return "image/webp"
        else:
            return "application/octet-stream"
