import io
import pytest
from PIL import Image

from asset_inspector.scanning.filesystem import ContentResolver


class FakeResolver(ContentResolver):
    """In-memory ContentResolver. Files are bytes keyed by locator."""

    def __init__(self, files=None, row=None, mime=None, writable=False):
        self.files = files or {}
        self.row = row
        self.mime = mime
        self.writable = writable
        self.opened = 0

    def query(self, locator):
        return self.row

    def get_type(self, locator):
        return self.mime

    def open_input(self, locator):
        if locator not in self.files:
            raise FileNotFoundError(locator)
        self.opened += 1
        return io.BytesIO(self.files[locator])

    def open_output(self, locator):
        if not self.writable:
            raise PermissionError(locator)
        return io.BytesIO()


class FakeTag:
    """Stands in for an exifread IfdTag."""

    def __init__(self, values, printable=None):
        self.values = values
        if printable is None:
            printable = values if isinstance(values, str) else str(values)
        self.printable = printable

    def __str__(self):
        return self.printable


def jpeg_bytes(size=(40, 20), orientation=None, make=None) -> bytes:
    exif = Image.Exif()
    if orientation is not None:
        exif[0x0112] = orientation
    if make is not None:
        exif[0x010F] = make
    buf = io.BytesIO()
    Image.new("RGB", size, "red").save(buf, "JPEG", exif=exif.tobytes())
    return buf.getvalue()


def png_bytes(size=(30, 10)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, (0, 0, 255, 128)).save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def photo_jpg(tmp_path):
    """JPEG with EXIF orientation 6 (rotate 90) and a camera make."""
    p = tmp_path / "photo.jpg"
    p.write_bytes(jpeg_bytes(orientation=6, make="TestCam"))
    return p


@pytest.fixture
def plain_png(tmp_path):
    p = tmp_path / "plain.png"
    p.write_bytes(png_bytes())
    return p


@pytest.fixture
def logo_svg(tmp_path):
    p = tmp_path / "logo.svg"
    p.write_text('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100"><rect width="10" height="10"/></svg>')
    return p
