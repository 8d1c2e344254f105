from PIL import Image

from app.domain.models import BackgroundGradient, CropRect
from app.infrastructure.cv import image_process
from tests.conftest import make_frame_image, png_bytes


def test_decode_photo_keeps_natural_size_and_colors():
    src = Image.new("RGB", (321, 123), (250, 10, 10))

    img = image_process.decode_photo(png_bytes(src))

    assert img.mode == "RGB"
    assert img.size == (321, 123)
    assert img.getpixel((5, 5)) == (250, 10, 10)


def test_decode_photo_rejects_garbage():
    assert image_process.decode_photo(b"definitely not an image") is None
    assert image_process.decode_photo(b"") is None
    assert image_process.decode_photo(None) is None


def test_decode_artwork_keeps_alpha():
    art = image_process.decode_artwork(png_bytes(make_frame_image()))

    assert art.mode == "RGBA"
    assert art.getpixel((256, 256))[3] == 0
    assert image_process.decode_artwork(b"garbage") is None


def test_crop_region():
    src = Image.new("RGB", (100, 100))
    assert image_process.crop_region(src, CropRect(10, 20, 30, 40)).size == (30, 40)


def test_desaturate():
    grey = image_process.desaturate(Image.new("RGB", (4, 4), (255, 0, 0)))

    r, g, b = grey.getpixel((0, 0))
    assert r == g == b


def test_linear_gradient_runs_left_to_right():
    bg = image_process.gradient_background((100, 10), BackgroundGradient(kind="linear", color1="#000000", color2="#ffffff"))

    assert bg.size == (100, 10)
    assert bg.getpixel((0, 5))[:3] == (0, 0, 0)
    assert bg.getpixel((99, 5))[:3] == (255, 255, 255)


def test_radial_gradient_starts_at_center():
    bg = image_process.gradient_background((101, 101), BackgroundGradient(type="radial", color1="red", color2="blue"))

    assert bg.getpixel((50, 50))[:3] == (255, 0, 0)
    assert bg.getpixel((0, 0))[:3] == (0, 0, 255)


def test_has_transparent_region():
    frame = make_frame_image()

    assert image_process.has_transparent_region(frame, (20, 50, 492, 462))
    assert not image_process.has_transparent_region(frame, (0, 0, 20, 50))
    assert not image_process.has_transparent_region(frame.convert("RGB"), (20, 50, 492, 462))


def test_encode_png_and_jpeg():
    img = Image.new("RGBA", (8, 8), (1, 2, 3, 255))

    assert image_process.encode_image(img, "png")[:4] == b"\x89PNG"
    assert image_process.encode_image(img, "jpg")[:2] == b"\xff\xd8"
