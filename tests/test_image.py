import pyvips
import pytest

from imgvariant.crop import plan_crop
from imgvariant.geometry import plan_geometry
from imgvariant.image import ImageProcessor
from imgvariant.locator import SourceLocator
from imgvariant.models import CropRequest, ImageMeta, ImageProfileSpec, ImageTypeSpec
from imgvariant.producer import Upload, VariantProducer
from imgvariant.records import InMemoryRecordStore
from tests.conftest import FakeStorage

GRAY = 128


def make_image(width=20, height=20, suffix=".png") -> bytes:
    img = (pyvips.Image.black(width, height, bands=3) + GRAY).cast("uchar")
    return img.write_to_buffer(suffix)


@pytest.fixture()
def png() -> bytes:
    return make_image()


def _type(**kwargs):
    return ImageTypeSpec(id="t", image_type_name="test", **kwargs)


def test_read_metadata(png):
    assert ImageProcessor.read_metadata(png) == ImageMeta(20, 20, "png")
    assert ImageProcessor.read_metadata(make_image(suffix=".jpg")).format == "jpeg"
    assert ImageProcessor.read_metadata(make_image(suffix=".webp")).format == "webp"


@pytest.mark.parametrize(
    "spec,size,format",
    [
        ({"file_type": "png", "height": 40, "width": 40}, (40, 40), "png"),
        ({"file_type": "jpg", "height": 40, "width": 40, "quality": 80}, (40, 40), "jpeg"),
        ({"file_type": "webp", "height": 40, "aspect_ratio": 1.3333333}, (53, 40), "webp"),
        ({"file_type": "png", "max_width": 10, "aspect_ratio": 1.3333333}, (10, 8), "png"),
    ],
)
def test_resize_and_encode(png, spec, size, format):
    img = ImageProcessor.open_buffer(png)
    plan = plan_geometry(ImageProcessor.read_metadata(png), _type(**spec))
    meta = ImageProcessor.read_metadata(ImageProcessor.resize_and_encode(img, plan))
    assert (meta.width, meta.height) == size
    assert meta.format == format


def test_negative_offset_is_filled_white(png):
    img = ImageProcessor.open_buffer(png)
    plan = plan_crop(ImageProcessor.read_metadata(png), CropRequest(x=-5))
    out = ImageProcessor.apply_crop(img, plan)
    assert (out.width, out.height) == (25, 20)
    assert out.getpoint(0, 10) == [255, 255, 255]
    assert out.getpoint(10, 10) == [GRAY, GRAY, GRAY]


def test_overflow_is_filled_white(png):
    img = ImageProcessor.open_buffer(png)
    plan = plan_crop(ImageProcessor.read_metadata(png), CropRequest(x=5, y=5, width=20, height=20))
    out = ImageProcessor.apply_crop(img, plan)
    assert (out.width, out.height) == (20, 20)
    assert out.getpoint(19, 19) == [255, 255, 255]
    assert out.getpoint(5, 5) == [GRAY, GRAY, GRAY]


def test_crop_inside_bounds(png):
    img = ImageProcessor.open_buffer(png)
    plan = plan_crop(ImageProcessor.read_metadata(png), CropRequest(x=5, y=5, width=10, height=10))
    out = ImageProcessor.apply_crop(img, plan)
    assert (out.width, out.height) == (10, 10)


def test_content_type():
    assert ImageProcessor.get_content_type("jpg") == "image/jpeg"
    assert ImageProcessor.get_content_type("JPEG") == "image/jpeg"
    assert ImageProcessor.get_content_type("png") == "image/png"
    assert ImageProcessor.get_content_type("webp") == "image/webp"
    assert ImageProcessor.get_content_type("gif") == "application/octet-stream"


def test_upload_with_pyvips(png):
    storage = FakeStorage()
    producer = VariantProducer(
        storage=storage,
        records=InMemoryRecordStore(),
        locator=SourceLocator(path_property="accountId"),
    )
    profiles = [
        ImageProfileSpec(id="p1", image_profile_name="small-webp", file_type="webp", max_width=10, max_height=10, pregenerate=True),
        ImageProfileSpec(id="p2", image_profile_name="small-jpg", file_type="jpg", max_width=10, max_height=10, pregenerate=True),
    ]
    produced = producer.process(
        Upload(
            buffer=png,
            image_type=_type(file_type="jpg", height=20, width=20),
            profiles=profiles,
            session={"accountId": "acct1"},
        )
    )
    assert ImageProcessor.read_metadata(produced.primary.buffer) == ImageMeta(20, 20, "jpeg")
    assert sorted(ImageProcessor.read_metadata(v.buffer).format for v in produced.extras) == ["jpeg", "webp"]
    for variant in produced.extras:
        meta = ImageProcessor.read_metadata(variant.buffer)
        assert (meta.width, meta.height) == (10, 10)
    assert len(storage.writes) == 3


def test_upload_matching_png_is_not_reencoded(png):
    producer = VariantProducer(
        storage=FakeStorage(), records=InMemoryRecordStore(), locator=SourceLocator()
    )
    produced = producer.process(Upload(buffer=png, image_type=_type(file_type="png")))
    assert produced.primary.buffer is png
