"""
Data model for imgvariant.
Image types, image profiles, the links between them and the per-request
values produced while planning and producing variants.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

FILE_TYPES = ("jpg", "png", "webp")
ENCODE_CLIENT_MODES = ("always", "best", "never")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def snake_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of a mapping with camelCase keys converted to snake_case.
    """
    return {_CAMEL_RE.sub("_", key).lower(): value for key, value in data.items()}


def _pick(data: Mapping[str, Any], names) -> Dict[str, Any]:
    return {name: data[name] for name in names if data.get(name) is not None}


def _check_choice(values: Mapping[str, Any], name: str, choices) -> None:
    value = values.get(name)
    if value is not None and value not in choices:
        raise ValueError(f"Invalid {name} {value!r}, expected one of: {', '.join(choices)}")


def _check_positive(values: Mapping[str, Any], name: str) -> None:
    value = values.get(name)
    if value is not None and value <= 0:
        raise ValueError(f"Invalid {name} {value!r}, must be greater than 0")


@dataclass
class ImageProfileSpec:
    """A named derived-size variant, e.g. "thumb"."""

    id: str
    image_profile_name: str
    file_type: str = "jpg"
    width: Optional[int] = None
    height: Optional[int] = None
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    aspect_ratio: Optional[float] = None
    quality: Optional[int] = None
    pregenerate: bool = False
    has_webp: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ImageProfileSpec":
        data = snake_keys(data)
        values = _pick(
            data,
            (
                "file_type",
                "width",
                "height",
                "max_width",
                "max_height",
                "aspect_ratio",
                "quality",
            ),
        )
        _check_choice(values, "file_type", FILE_TYPES)
        _check_positive(values, "aspect_ratio")
        return cls(
            id=str(data["id"]),
            image_profile_name=data["image_profile_name"],
            pregenerate=bool(data.get("pregenerate", False)),
            **values,
        )


@dataclass
class ImageTypeSpec:
    """A top-level display category owning default encode and geometry rules."""

    id: str
    image_type_name: str
    file_type: str = "jpg"
    width: Optional[int] = None
    height: Optional[int] = None
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    aspect_ratio: Optional[float] = None
    quality: Optional[int] = None
    encode_client: Optional[str] = None
    client_quality: Optional[int] = None
    max_client_size: Optional[int] = None
    max_client_height: Optional[int] = None
    max_client_width: Optional[int] = None
    # linked profiles keyed by profile id, in link order
    profiles: Dict[str, ImageProfileSpec] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ImageTypeSpec":
        data = snake_keys(data)
        values = _pick(
            data,
            (
                "file_type",
                "width",
                "height",
                "max_width",
                "max_height",
                "aspect_ratio",
                "quality",
                "encode_client",
                "client_quality",
                "max_client_size",
                "max_client_height",
                "max_client_width",
            ),
        )
        _check_choice(values, "file_type", FILE_TYPES)
        _check_positive(values, "aspect_ratio")
        _check_choice(values, "encode_client", ENCODE_CLIENT_MODES)
        return cls(id=str(data["id"]), image_type_name=data["image_type_name"], **values)


@dataclass(frozen=True)
class ImageTypeProfileLink:
    image_type_id: str
    image_profile_id: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ImageTypeProfileLink":
        data = snake_keys(data)
        return cls(str(data["image_type_id"]), str(data["image_profile_id"]))


@dataclass(frozen=True)
class SourceImageRecord:
    id: str
    file_name: str
    file_type: str
    image_name: str
    image_type_id: str
    path: Optional[str] = None
    original_id: Optional[str] = None


@dataclass(frozen=True)
class ImageRef:
    """
    Normalized view of a stored image used by the read path.

    Records arrive either as flat rows (imageId, imageData, ...) or wrapped
    (id, data, ...); from_mapping accepts both so nothing past this point has
    to probe for either shape.
    """

    image_id: str
    file_name: str
    file_type: str
    image_type_id: Optional[str] = None
    image_original_id: Optional[str] = None
    path: Optional[str] = None
    image_name: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "ImageRef":
        if record.get("data") is not None:
            image_id = record.get("id")
            original_id = record.get("originalId", record.get("original_id"))
            data = snake_keys(record["data"])
        else:
            image_id = record.get("imageId", record.get("image_id"))
            original_id = record.get("imageOriginalId", record.get("image_original_id"))
            data = snake_keys(record.get("imageData") or record.get("image_data") or {})
            if record.get("imageTypeId") is not None:
                data.setdefault("image_type_id", record["imageTypeId"])
        return cls(
            image_id=str(image_id),
            image_original_id=str(original_id) if original_id is not None else None,
            file_name=data["file_name"],
            file_type=data["file_type"],
            image_type_id=data.get("image_type_id"),
            path=data.get("path"),
            image_name=data.get("image_name"),
            description=data.get("description"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )


@dataclass(frozen=True)
class ImageMeta:
    """Pixel dimensions and codec format name (jpeg, png, webp) of an image."""

    width: int
    height: int
    format: Optional[str] = None


@dataclass(frozen=True)
class CropRequest:
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["CropRequest"]:
        if data is None:
            return None
        return cls(**_pick(data, ("x", "y", "width", "height")))


@dataclass(frozen=True)
class CropRect:
    left: int
    top: int
    width: int
    height: int


@dataclass(frozen=True)
class CanvasExtension:
    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0
    fill_color: str = "white"

    @property
    def leading(self) -> bool:
        return bool(self.top or self.left)

    @property
    def trailing(self) -> bool:
        return bool(self.bottom or self.right)

    def __bool__(self) -> bool:
        return self.leading or self.trailing


@dataclass(frozen=True)
class CropPlan:
    """
    Crop geometry for a working image.

    Codec order: left/top extension, then crop_rect, then bottom/right
    extension. updated_meta is the size of the result.
    """

    crop_rect: Optional[CropRect]
    canvas_extension: CanvasExtension
    updated_meta: ImageMeta


@dataclass(frozen=True)
class EncodeOptions:
    quality: Optional[int] = None
    compression_level: Optional[int] = None
    progressive: bool = False
    force: bool = True


@dataclass(frozen=True)
class GeometryPlan:
    width: int
    height: int
    format: str
    encode_options: EncodeOptions
    crop: Optional[CropPlan] = None

    def matches(self, meta: ImageMeta) -> bool:
        return (
            self.width == meta.width
            and self.height == meta.height
            and self.format == meta.format
        )


@dataclass(frozen=True)
class Variant:
    path: str
    buffer: bytes
    file_type: str
    src: str
    profile_name: Optional[str] = None


@dataclass(frozen=True)
class ProducedImage:
    record: SourceImageRecord
    primary: Variant
    extras: List[Variant] = field(default_factory=list)


@dataclass(frozen=True)
class PictureSource:
    file_type: str
    srcset: str
    type: str


@dataclass
class Picture:
    image_id: str
    image_original_id: Optional[str]
    image_type_name: str
    orig_src: str
    src: str
    image_name: Optional[str] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    source: List[PictureSource] = field(default_factory=list)
    source_by_type: Dict[str, PictureSource] = field(default_factory=dict)
