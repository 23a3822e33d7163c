import pytest

from imgvariant.crop import plan_crop
from imgvariant.models import CanvasExtension, CropRect, CropRequest, ImageMeta

SOURCE = ImageMeta(width=20, height=20, format="png")


@pytest.mark.parametrize(
    "request_,rect,size",
    [
        (CropRequest(x=5, y=5), CropRect(5, 5, 15, 15), (15, 15)),
        (CropRequest(x=5), CropRect(5, 0, 15, 20), (15, 20)),
        (CropRequest(y=5), CropRect(0, 5, 20, 15), (20, 15)),
        (CropRequest(width=10, height=10), CropRect(0, 0, 10, 10), (10, 10)),
        (CropRequest(height=10), CropRect(0, 0, 20, 10), (20, 10)),
        (CropRequest(width=10), CropRect(0, 0, 10, 20), (10, 20)),
        (CropRequest(x=5, y=5, width=10, height=10), CropRect(5, 5, 10, 10), (10, 10)),
    ],
)
def test_crop_inside_bounds(request_, rect, size):
    plan = plan_crop(SOURCE, request_)
    assert plan.crop_rect == rect
    assert not plan.canvas_extension
    assert (plan.updated_meta.width, plan.updated_meta.height) == size


def test_full_frame_needs_no_crop():
    plan = plan_crop(SOURCE, CropRequest())
    assert plan.crop_rect is None
    assert plan.updated_meta == SOURCE


def test_fractional_values_are_rounded():
    plan = plan_crop(SOURCE, CropRequest(x=4.5, y=0.4, width=9.6, height=10.2))
    assert plan.crop_rect == CropRect(5, 0, 10, 10)


def test_negative_x_extends_left():
    plan = plan_crop(SOURCE, CropRequest(x=-5))
    assert plan.canvas_extension == CanvasExtension(left=5)
    assert plan.crop_rect is None
    # Nothing is lost off the left edge: intended width is 20 - (-5)
    assert (plan.updated_meta.width, plan.updated_meta.height) == (25, 20)


def test_negative_y_extends_top():
    plan = plan_crop(SOURCE, CropRequest(y=-2.4))
    assert plan.canvas_extension == CanvasExtension(top=2)
    assert plan.crop_rect is None
    assert (plan.updated_meta.width, plan.updated_meta.height) == (20, 22)


def test_negative_offset_with_window():
    plan = plan_crop(SOURCE, CropRequest(x=-5, y=-5, width=10, height=10))
    assert plan.canvas_extension == CanvasExtension(top=5, left=5)
    assert plan.crop_rect == CropRect(0, 0, 10, 10)
    assert (plan.updated_meta.width, plan.updated_meta.height) == (10, 10)


def test_overflow_extends_bottom_and_right():
    plan = plan_crop(SOURCE, CropRequest(x=5, y=5, width=20, height=20))
    assert plan.canvas_extension == CanvasExtension(bottom=5, right=5)
    assert plan.crop_rect == CropRect(5, 5, 15, 15)
    assert (plan.updated_meta.width, plan.updated_meta.height) == (20, 20)


def test_overflow_on_both_sides():
    plan = plan_crop(SOURCE, CropRequest(x=-5, width=30))
    assert plan.canvas_extension == CanvasExtension(left=5, right=5)
    assert plan.crop_rect is None
    assert (plan.updated_meta.width, plan.updated_meta.height) == (30, 20)


def test_window_outside_image():
    with pytest.raises(ValueError):
        plan_crop(SOURCE, CropRequest(y=30))


def test_format_is_kept():
    assert plan_crop(SOURCE, CropRequest(x=5)).updated_meta.format == "png"
