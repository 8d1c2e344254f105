import pytest

from app.domain import crop
from app.domain.errors import InvalidCrop, MissingSource
from app.domain.models import CropRect, CropSelection, Size

LANDSCAPE = Size(600, 400)


def test_cover_viewport():
    assert crop.cover_viewport(Size(600, 400)) == Size(400, 400)
    assert crop.cover_viewport(Size(300, 900)) == Size(300, 300)
    assert crop.cover_viewport(Size(800, 400), aspect_ratio=4 / 3) == Size(400 * 4 / 3, 400)


def test_centered_zoom_one_covers_short_side():
    rect = crop.resolve(CropSelection(), LANDSCAPE)

    assert rect == CropRect(x=100, y=0, width=400, height=400)


def test_zoom_two_halves_the_footprint():
    rect = crop.resolve(CropSelection(zoom=2), LANDSCAPE)

    assert rect == CropRect(x=200, y=100, width=200, height=200)


@pytest.mark.parametrize("zoom", [1, 1.25, 1.5, 2, 2.75, 3.7, 10])
def test_width_is_viewport_over_zoom(zoom):
    viewport = Size(512, 512)
    rect = crop.resolve(CropSelection(zoom=zoom), Size(1024, 768), viewport)

    assert rect.width == round(viewport.width / zoom)
    assert rect.height == round(viewport.height / zoom)


def test_pan_moves_window_against_offset():
    rect = crop.resolve(CropSelection(offset_x=0.25, offset_y=-0.25, zoom=2), LANDSCAPE)

    assert (rect.x, rect.y) == (150, 150)
    assert (rect.width, rect.height) == (200, 200)


@pytest.mark.parametrize("offset_x, offset_y, expected", [
    (5, 5, (0, 0)),
    (-5, -5, (400, 200)),
    (5, -5, (0, 200)),
])
def test_out_of_bounds_pan_is_clamped(offset_x, offset_y, expected):
    rect = crop.resolve(CropSelection(offset_x=offset_x, offset_y=offset_y, zoom=2), LANDSCAPE)

    assert (rect.x, rect.y) == expected
    assert rect.x + rect.width <= LANDSCAPE.width
    assert rect.y + rect.height <= LANDSCAPE.height


def test_viewport_larger_than_photo_is_clamped_to_photo():
    rect = crop.resolve(CropSelection(), Size(300, 200), Size(512, 512))

    assert rect == CropRect(x=0, y=0, width=300, height=200)


@pytest.mark.parametrize("zoom", [0.99, 0.5, 0, -1, float("nan")])
def test_zoom_below_one_is_invalid(zoom):
    with pytest.raises(InvalidCrop):
        crop.resolve(CropSelection(zoom=zoom), LANDSCAPE)


def test_missing_photo_is_reported():
    with pytest.raises(MissingSource):
        crop.resolve(CropSelection(), None)
    with pytest.raises(MissingSource):
        crop.resolve(CropSelection(), Size(0, 400))


@pytest.mark.parametrize("viewport", [Size(0, 512), Size(-5, -5), Size(float("nan"), 512)])
def test_unusable_viewport_falls_back_to_cover_square(viewport):
    rect = crop.resolve(CropSelection(), LANDSCAPE, viewport)

    assert rect == CropRect(x=100, y=0, width=400, height=400)


def test_extreme_zoom_keeps_one_pixel():
    rect = crop.resolve(CropSelection(zoom=1e6), LANDSCAPE)

    assert rect == CropRect(x=300, y=200, width=1, height=1)


@pytest.mark.parametrize("offset", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_pan_is_centered(offset):
    rect = crop.resolve(CropSelection(offset_x=offset, offset_y=offset), LANDSCAPE)

    assert rect == CropRect(x=100, y=0, width=400, height=400)


def test_non_finite_photo_size_is_missing():
    with pytest.raises(MissingSource):
        crop.resolve(CropSelection(), Size(float("nan"), 400))


def test_resolve_is_deterministic():
    selection = CropSelection(offset_x=0.13, offset_y=-0.07, zoom=1.7)

    results = {crop.resolve(selection, Size(1234, 987), Size(512, 512)) for _ in range(5)}

    assert len(results) == 1


def test_rect_box():
    assert CropRect(x=10, y=20, width=30, height=40).box == (10, 20, 40, 60)
