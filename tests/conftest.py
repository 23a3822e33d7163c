import threading

import pytest

from imgvariant.index import VariantIndex
from imgvariant.locator import SourceLocator
from imgvariant.models import ImageMeta, ImageProfileSpec, ImageTypeProfileLink, ImageTypeSpec
from imgvariant.records import InMemoryRecordStore


def fake_image(width: int, height: int, format: str = "png") -> bytes:
    return f"fake:{width}x{height}:{format}".encode()


class FakeCodec:
    """Codec stand-in; images are ImageMeta values and bytes describe them."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.crops = []
        self.encoded = []
        self._lock = threading.Lock()

    def read_metadata(self, data):
        _, size, format = data.decode().split(":")
        width, height = size.split("x")
        return ImageMeta(int(width), int(height), format)

    def open_buffer(self, data):
        return self.read_metadata(data)

    def apply_crop(self, img, plan):
        self.crops.append(plan)
        return plan.updated_meta

    def resize_and_encode(self, img, plan):
        if self.fail_on is not None and self.fail_on(plan):
            raise RuntimeError("encode failed")
        with self._lock:
            self.encoded.append(plan)
        return fake_image(plan.width, plan.height, plan.format)


class FakeStorage:
    def __init__(self, fail_suffix=None):
        self.fail_suffix = fail_suffix
        self.writes = {}
        self._lock = threading.Lock()

    def write(self, path, data):
        if self.fail_suffix and path.endswith(self.fail_suffix):
            raise IOError(f"cannot write {path}")
        with self._lock:
            self.writes[path] = data
        return path


@pytest.fixture()
def codec() -> FakeCodec:
    return FakeCodec()


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def locator() -> SourceLocator:
    return SourceLocator(host="", base="", path_property="accountId")


@pytest.fixture()
def session() -> dict:
    return {"accountId": "acct1", "sessionId": "s1"}


@pytest.fixture()
def sample_index() -> VariantIndex:
    types = [
        ImageTypeSpec(id="t1", image_type_name="avatar", file_type="jpg", max_width=800, max_height=800),
        ImageTypeSpec(id="t2", image_type_name="banner", file_type="png"),
    ]
    profiles = [
        ImageProfileSpec(id="p1", image_profile_name="thumb", file_type="jpg", width=50, height=50, pregenerate=True),
        ImageProfileSpec(id="p2", image_profile_name="medium", file_type="jpg", width=200, height=200, pregenerate=True),
        ImageProfileSpec(id="p3", image_profile_name="medium", file_type="webp", width=200, height=200, pregenerate=True),
        ImageProfileSpec(id="p4", image_profile_name="large", file_type="png", max_width=1200),
    ]
    links = [
        ImageTypeProfileLink("t1", "p1"),
        ImageTypeProfileLink("t1", "p2"),
        ImageTypeProfileLink("t1", "p3"),
        ImageTypeProfileLink("t1", "p4"),
    ]
    return VariantIndex.build(types, profiles, links)
