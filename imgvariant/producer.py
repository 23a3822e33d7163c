"""
Variant production for uploaded images.
Crops the upload if requested, then encodes the primary image and every
pregenerate profile variant and hands them to storage.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from imgvariant.crop import plan_crop
from imgvariant.errors import ProductionFailure
from imgvariant.geometry import can_reuse_original, plan_geometry
from imgvariant.image import ImageProcessor
from imgvariant.locator import SourceLocator, file_name_for, image_name_for
from imgvariant.models import (
    CropPlan,
    CropRequest,
    ImageMeta,
    ImageProfileSpec,
    ImageTypeSpec,
    ProducedImage,
    Variant,
)

logger = logging.getLogger(__name__)


@dataclass
class Upload:
    """
    An uploaded image waiting to be processed.

    meta holds client supplied values: image_name, file_name and crop
    (a mapping with x, y, width, height).
    """

    buffer: bytes
    image_type: ImageTypeSpec
    profiles: Optional[List[ImageProfileSpec]] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    session: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.profiles is None:
            self.profiles = list(self.image_type.profiles.values())


@dataclass(frozen=True)
class VariantNaming:
    """Naming inputs shared by all variants of one image."""

    path: Optional[str]
    file_name: str
    image_id: str


class VariantProducer:
    """
    Produces and stores the variants of uploaded images.
    """

    def __init__(
        self,
        storage: Any,
        records: Any,
        locator: SourceLocator,
        codec: Any = ImageProcessor,
        max_workers: int = 4,
    ):
        """
        Args:
            storage: Object with write(path, data)
            records: Object with create_image_record(...)
            locator: Builds storage keys and src strings
            codec: Image codec, ImageProcessor by default
            max_workers: Threads used for profile variants
        """
        self.storage = storage
        self.records = records
        self.locator = locator
        self.codec = codec
        self.max_workers = max_workers

    def process(self, upload: Upload) -> ProducedImage:
        """
        Create the image record, then produce and store all variants.

        The crop window is checked before the record is created. When any
        variant fails the record is deleted again; files already written
        to storage are left in place.

        Raises:
            ConfigurationError: The session lacks the configured path value
            ProductionFailure: Any variant could not be encoded or stored
        """
        path = self.locator.get_path(upload.session)
        file_name = file_name_for(upload.meta)
        file_type = upload.image_type.file_type
        image_name = image_name_for(upload.meta)

        source_meta = self.codec.read_metadata(upload.buffer)
        logger.info(
            f"Processing upload {file_name}: {source_meta.width}x{source_meta.height} "
            f"{source_meta.format}, image type {upload.image_type.image_type_name}"
        )

        crop = CropRequest.from_mapping(upload.meta.get("crop"))
        crop_plan = None
        if crop is not None:
            try:
                crop_plan = plan_crop(source_meta, crop)
            except ValueError as e:
                raise ProductionFailure(f"Invalid crop for {file_name}: {e}") from e

        # Every variant key embeds the record id
        record = self.records.create_image_record(
            file_name=file_name,
            file_type=file_type,
            image_name=image_name,
            image_type_id=upload.image_type.id,
            path=path,
        )

        try:
            primary, extras = self.produce(
                upload.buffer,
                source_meta,
                upload.image_type,
                upload.profiles,
                naming=VariantNaming(path, file_name, record.id),
                crop_plan=crop_plan,
                write=self._write,
            )
        except ProductionFailure:
            self.records.delete_image_record(record.id)
            logger.warning(f"Dropped image record {record.id} after failed upload")
            raise
        return ProducedImage(record=record, primary=primary, extras=extras)

    def produce(
        self,
        source: bytes,
        source_meta: ImageMeta,
        target_spec: ImageTypeSpec,
        profiles: List[ImageProfileSpec],
        naming: VariantNaming,
        crop_plan: Optional[CropPlan] = None,
        write: Optional[Callable[[Variant], Any]] = None,
    ) -> Tuple[Variant, List[Variant]]:
        """
        Encode the primary variant and every pregenerate profile variant.

        Args:
            source: Uploaded image bytes
            source_meta: Metadata of the uploaded image
            target_spec: Image type describing the primary variant
            profiles: Profiles linked to the image type
            naming: Path, file name and image id for variant keys
            crop_plan: Corrected crop window, from plan_crop
            write: Called with each variant once encoded

        Returns:
            Primary variant and the list of profile variants, in profile order

        Raises:
            ProductionFailure: Encoding or writing any variant failed. Profile
                variants are all awaited before the failure is raised.
        """
        meta = source_meta
        try:
            img = self.codec.open_buffer(source)
            if crop_plan is not None:
                img = self.codec.apply_crop(img, crop_plan)
                meta = crop_plan.updated_meta
                logger.debug(f"Applied crop {crop_plan}")
        except Exception as e:
            raise ProductionFailure(f"Failed to prepare {naming.file_name}: {e}") from e

        primary = self._produce_one(
            source, img, meta, crop_plan, target_spec, naming, None, write
        )

        pregenerate = [profile for profile in profiles if profile.pregenerate is True]
        skipped = len(profiles) - len(pregenerate)
        if skipped:
            logger.debug(f"Skipping {skipped} profiles without pregenerate")

        if not pregenerate:
            return primary, []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(
                    self._produce_one,
                    source,
                    img,
                    meta,
                    crop_plan,
                    profile,
                    naming,
                    profile.image_profile_name,
                    write,
                )
                for profile in pregenerate
            ]

        extras: List[Variant] = []
        failures: List[BaseException] = []
        for profile, future in zip(pregenerate, futures):
            error = future.exception()
            if error is not None:
                logger.error(f"Profile variant {profile.image_profile_name} failed: {error}")
                failures.append(error)
            else:
                extras.append(future.result())

        if failures:
            raise failures[0]

        return primary, extras

    def _produce_one(
        self,
        source: bytes,
        img: Any,
        meta: ImageMeta,
        crop_plan: Optional[CropPlan],
        spec: Any,
        naming: VariantNaming,
        profile_name: Optional[str],
        write: Optional[Callable[[Variant], Any]],
    ) -> Variant:
        path = self.locator.save_as(
            naming.path, naming.file_name, spec.file_type, naming.image_id, profile_name
        )
        try:
            plan = plan_geometry(meta, spec, crop_plan)
            # A crop always means a new encode
            if can_reuse_original(meta, plan, modified=crop_plan is not None):
                buffer = source
            else:
                buffer = self.codec.resize_and_encode(img, plan)

            variant = Variant(
                path=path,
                buffer=buffer,
                file_type=spec.file_type,
                src=self.locator.build_src(
                    naming.path,
                    naming.file_name,
                    spec.file_type,
                    naming.image_id,
                    profile_name,
                ),
                profile_name=profile_name,
            )
            if write is not None:
                write(variant)
            return variant

        except ProductionFailure:
            raise
        except Exception as e:
            raise ProductionFailure(f"Failed to produce {path}: {e}", path=path) from e

    def _write(self, variant: Variant) -> None:
        self.storage.write(variant.path, variant.buffer)
