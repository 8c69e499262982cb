import struct
import zlib
from datetime import datetime, time
from fractions import Fraction

import pytest
from PIL import Image

import asset_inspector.metadata.raster as raster_module
from asset_inspector.exceptions import SourceUnavailableError, VectorParseError
from asset_inspector.metadata.raster import (
    RasterMetadataExtractor,
    alpha_from_mime,
    normalize_orientation,
)
from asset_inspector.metadata.vector import VectorMetadataExtractor, parse_length, parse_view_box
from asset_inspector.models import ColorModel
from conftest import FakeResolver, FakeTag, jpeg_bytes, png_bytes


# --- Raster ---

@pytest.mark.parametrize("raw, degrees", [
    (1, 0), (2, 0), (3, 180), (4, 0), (5, 0), (6, 90), (7, 0), (8, 270),
    (0, 0), (99, 0), (None, 0), ("junk", 0), ("6", 90),
])
def test_normalize_orientation_is_total(raw, degrees):
    assert normalize_orientation(raw) == degrees


@pytest.mark.parametrize("mime, alpha", [
    ("image/png", True),
    ("IMAGE/WEBP", True),
    ("image/jpeg", False),
    ("image/gif", None),
    (None, None),
])
def test_alpha_heuristic(mime, alpha):
    assert alpha_from_mime(mime) is alpha


def test_jpeg_orientation_and_bounds():
    resolver = FakeResolver(files={"photo.jpg": jpeg_bytes(size=(40, 20), orientation=6, make="TestCam")})
    img = RasterMetadataExtractor(resolver).extract("photo.jpg", "image/jpeg")

    assert img.geometry.width_px == 40
    assert img.geometry.height_px == 20
    assert img.geometry.aspect_ratio == 2.0
    assert img.geometry.view_box_width is None
    assert img.is_vector is False
    assert img.time.orientation == 90
    assert img.camera.make == "TestCam"
    assert img.color.has_alpha is False
    assert img.color.color_model is ColorModel.RGB
    assert img.color.bit_depth_per_channel == 8
    assert img.mime_type == "image/jpeg"


def test_png_without_exif():
    resolver = FakeResolver(files={"a.png": png_bytes(size=(30, 10))})
    img = RasterMetadataExtractor(resolver).extract("a.png", "image/png")

    assert (img.geometry.width_px, img.geometry.height_px) == (30, 10)
    assert img.geometry.aspect_ratio == 3.0
    assert img.color.color_model is ColorModel.RGBA
    assert img.time.orientation is None
    assert img.camera.make is None
    assert img.gps.has_gps_metadata is False


def test_undecodable_bounds_are_absent():
    resolver = FakeResolver(files={"broken.png": b"definitely not a png"})
    img = RasterMetadataExtractor(resolver).extract("broken.png", "image/png")

    assert img.geometry.width_px is None
    assert img.geometry.height_px is None
    assert img.geometry.aspect_ratio is None


def test_unopenable_raster_is_a_hard_failure():
    with pytest.raises(SourceUnavailableError):
        RasterMetadataExtractor(FakeResolver()).extract("missing.jpg", "image/jpeg")


def test_exif_reader_failure_keeps_geometry(monkeypatch):
    def boom(fh, **kwargs):
        raise ValueError("corrupt EXIF")

    monkeypatch.setattr(raster_module.exifread, "process_file", boom)
    resolver = FakeResolver(files={"photo.jpg": jpeg_bytes(orientation=6)})
    img = RasterMetadataExtractor(resolver).extract("photo.jpg", "image/jpeg")

    assert img.geometry.width_px == 40
    assert img.time.orientation is None
    assert img.exposure.iso_speed is None


def test_exif_fields_are_normalized(monkeypatch):
    tags = {
        'Image Orientation': FakeTag([8]),
        'Image DateTime': FakeTag("2021:06:01 10:00:00"),
        'EXIF DateTimeOriginal': FakeTag("2021:05:31 09:30:15"),
        'EXIF DateTimeDigitized': FakeTag("0000:00:00 00:00:00"),
        'EXIF SubSecTime': FakeTag("042"),
        'Image Make': FakeTag("Canon "),
        'Image Model': FakeTag("EOS R5"),
        'Image Software': FakeTag(""),
        'EXIF LensModel': FakeTag("RF 24-70mm"),
        'EXIF ExposureTime': FakeTag([Fraction(1, 250)], "1/250"),
        'EXIF FNumber': FakeTag([Fraction(28, 10)], "14/5"),
        'EXIF ISOSpeedRatings': FakeTag([400]),
        'EXIF FocalLength': FakeTag([Fraction(50, 1)], "50"),
        'EXIF ExposureBiasValue': FakeTag([Fraction(-1, 3)], "-1/3"),
        'EXIF MeteringMode': FakeTag([5]),
        'EXIF WhiteBalance': FakeTag([0]),
        'EXIF Flash': FakeTag([-1]),
        'EXIF BrightnessValue': FakeTag([float('nan')]),
        'EXIF Contrast': FakeTag([1]),
        'Image XResolution': FakeTag([Fraction(300, 1)], "300"),
        'Image YResolution': FakeTag([Fraction(0, 1)], "0"),
        'GPS GPSLatitude': FakeTag([Fraction(54), Fraction(21), Fraction(36)]),
        'GPS GPSLatitudeRef': FakeTag("S"),
        'GPS GPSLongitude': FakeTag([Fraction(18), Fraction(30), Fraction(0)]),
        'GPS GPSLongitudeRef': FakeTag("W"),
        'GPS GPSAltitude': FakeTag([Fraction(125, 2)], "125/2"),
        'GPS GPSAltitudeRef': FakeTag([1]),
        'GPS GPSTimeStamp': FakeTag([Fraction(13), Fraction(5), Fraction(9)]),
    }
    monkeypatch.setattr(raster_module.exifread, "process_file", lambda fh, **kw: tags)
    resolver = FakeResolver(files={"x.jpg": jpeg_bytes()})
    img = RasterMetadataExtractor(resolver).extract("x.jpg", "image/jpeg")

    assert img.time.orientation == 270
    assert img.time.date_time == datetime(2021, 6, 1, 10, 0, 0)
    assert img.time.date_time_original == datetime(2021, 5, 31, 9, 30, 15)
    assert img.time.date_time_digitized is None
    assert img.time.sub_sec_time == "042"

    assert img.camera.make == "Canon"
    assert img.camera.model == "EOS R5"
    assert img.camera.software is None
    assert img.camera.lens_make is None
    assert img.camera.lens_model == "RF 24-70mm"

    assert img.exposure.exposure_time == pytest.approx(0.004)
    assert img.exposure.f_number == pytest.approx(2.8)
    assert img.exposure.iso_speed == 400
    assert img.exposure.focal_length == 50.0
    assert img.exposure.exposure_bias == pytest.approx(-1 / 3)
    assert img.exposure.metering_mode == 5
    assert img.exposure.white_balance == 0
    assert img.exposure.flash is None

    assert img.image.brightness is None
    assert img.image.contrast == 1
    assert img.image.saturation is None

    assert img.color.dpi_x == 300
    assert img.color.dpi_y is None

    assert img.gps.has_gps_metadata is True
    assert img.gps.latitude == pytest.approx(-54.36)
    assert img.gps.longitude == pytest.approx(-18.5)
    assert img.gps.altitude == pytest.approx(-62.5)
    assert img.gps.timestamp == time(13, 5, 9)


def test_gps_needs_both_coordinates(monkeypatch):
    tags = {
        'Image Make': FakeTag("Pixel"),
        'GPS GPSLatitude': FakeTag([Fraction(10), Fraction(0), Fraction(0)]),
        'GPS GPSAltitude': FakeTag([Fraction(100)], "100"),
    }
    monkeypatch.setattr(raster_module.exifread, "process_file", lambda fh, **kw: tags)
    resolver = FakeResolver(files={"x.jpg": jpeg_bytes()})
    img = RasterMetadataExtractor(resolver).extract("x.jpg", "image/jpeg")

    assert img.gps.has_gps_metadata is False
    assert img.gps.latitude is None
    assert img.gps.altitude == 100.0
    assert img.gps.timestamp is None
    # tags present, orientation tag missing -> 0
    assert img.time.orientation == 0


def test_each_read_pass_releases_its_handle():
    resolver = FakeResolver(files={"a.png": png_bytes()})
    handles = []
    original = resolver.open_input

    def tracking_open(locator):
        handles.append(original(locator))
        return handles[-1]

    resolver.open_input = tracking_open
    RasterMetadataExtractor(resolver).extract("a.png", "image/png")

    assert len(handles) == 2
    assert all(h.closed for h in handles)


# --- Vector ---

@pytest.mark.parametrize("value, px", [
    ("100", 100.0),
    ("100px", 100.0),
    ("1in", 96.0),
    ("72pt", 96.0),
    (" 2.5e1 ", 25.0),
    ("50%", None),
    ("2em", None),
    ("0", None),
    ("-5", None),
    ("abc", None),
    (None, None),
])
def test_parse_length(value, px):
    result = parse_length(value)
    if px is None:
        assert result is None
    else:
        assert result == pytest.approx(px)


def test_parse_view_box():
    assert parse_view_box("0 0 200 100") == (200.0, 100.0)
    assert parse_view_box("-10,-10, 20,40") == (20.0, 40.0)
    assert parse_view_box("0 0 200") == (None, None)
    assert parse_view_box("0 0 -1 10") == (None, None)
    assert parse_view_box(None) == (None, None)


def _svg(attrs):
    return f'<svg xmlns="http://www.w3.org/2000/svg" {attrs}></svg>'.encode()


def test_svg_view_box_only():
    resolver = FakeResolver(files={"logo.svg": _svg('viewBox="0 0 200 100"')})
    img = VectorMetadataExtractor(resolver).extract("logo.svg")

    assert img.is_vector
    assert img.geometry.view_box_width == 200
    assert img.geometry.view_box_height == 100
    assert img.geometry.aspect_ratio == 2.0
    assert img.geometry.width_px is None
    assert img.geometry.height_px is None
    assert img.mime_type == "image/svg+xml"
    assert img.color.color_model is None
    assert img.time.orientation is None
    assert img.gps.has_gps_metadata is None


def test_svg_view_box_beats_declared_size():
    resolver = FakeResolver(files={"a.svg": _svg('width="100" height="100" viewBox="0 0 300 100"')})
    img = VectorMetadataExtractor(resolver).extract("a.svg")
    assert img.geometry.aspect_ratio == 3.0


def test_svg_declared_size_fallback():
    resolver = FakeResolver(files={"a.svg": _svg('width="300px" height="150"')})
    img = VectorMetadataExtractor(resolver).extract("a.svg")
    assert img.geometry.view_box_width is None
    assert img.geometry.aspect_ratio == 2.0


def test_svg_zero_height_view_box_uses_declared_size():
    resolver = FakeResolver(files={"a.svg": _svg('width="40" height="10" viewBox="0 0 10 0"')})
    img = VectorMetadataExtractor(resolver).extract("a.svg")
    assert img.geometry.view_box_height == 0
    assert img.geometry.aspect_ratio == 4.0


def test_svg_without_dimensions_has_no_aspect_ratio():
    resolver = FakeResolver(files={"a.svg": _svg('width="50%" height="50%"')})
    img = VectorMetadataExtractor(resolver).extract("a.svg")
    assert img.geometry.aspect_ratio is None


@pytest.mark.parametrize("payload", [
    b"<svg><unclosed></svg>",
    b"",
    b'<html xmlns="http://www.w3.org/1999/xhtml"></html>',
])
def test_bad_svg_is_a_hard_failure(payload):
    resolver = FakeResolver(files={"bad.svg": payload})
    with pytest.raises(VectorParseError):
        VectorMetadataExtractor(resolver).extract("bad.svg")


def test_unopenable_svg_is_a_hard_failure():
    with pytest.raises(SourceUnavailableError):
        VectorMetadataExtractor(FakeResolver()).extract("missing.svg")


def _png_header(width, height):
    """Signature + IHDR + IEND only; no pixel data at all."""
    def chunk(cid, data):
        return struct.pack(">I", len(data)) + cid + data + struct.pack(">I", zlib.crc32(cid + data))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def test_huge_raster_still_reports_header_size():
    resolver = FakeResolver(files={"huge.png": _png_header(20000, 20000)})
    img = RasterMetadataExtractor(resolver).extract("huge.png", "image/png")

    assert img.geometry.width_px == 20000
    assert img.geometry.height_px == 20000
    assert img.geometry.aspect_ratio == 1.0


def test_huge_raster_leaves_pixel_limit_alone():
    before = Image.MAX_IMAGE_PIXELS
    resolver = FakeResolver(files={"huge.png": _png_header(30000, 15000)})
    img = RasterMetadataExtractor(resolver).extract("huge.png", "image/png")

    assert img.geometry.aspect_ratio == 2.0
    assert Image.MAX_IMAGE_PIXELS == before


def test_integer_fields_truncate(monkeypatch):
    tags = {
        'Image XResolution': FakeTag([Fraction(2997, 10)], "2997/10"),
        'Image YResolution': FakeTag([Fraction(1, 2)], "1/2"),
        'EXIF ISOSpeedRatings': FakeTag([Fraction(1999, 10)], "1999/10"),
        'EXIF Contrast': FakeTag([Fraction(19, 10)], "19/10"),
    }
    monkeypatch.setattr(raster_module.exifread, "process_file", lambda fh, **kw: tags)
    resolver = FakeResolver(files={"x.jpg": jpeg_bytes()})
    img = RasterMetadataExtractor(resolver).extract("x.jpg", "image/jpeg")

    assert img.color.dpi_x == 299
    assert img.color.dpi_y is None
    assert img.exposure.iso_speed == 199
    assert img.image.contrast == 1
