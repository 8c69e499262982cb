import logging
import math
import struct
from datetime import datetime, time
from typing import Any, Dict, Optional, Tuple

import exifread
from PIL import Image

from .. import config
from ..exceptions import SourceUnavailableError
from ..models import (
    ColorInfo,
    ColorModel,
    ExifCamera,
    ExifExposure,
    ExifGps,
    ExifImage,
    ExifTime,
    ImageGeometry,
    ImageMetadata,
)
from ..scanning.filesystem import ContentResolver


def normalize_orientation(raw: Any) -> int:
    """Maps any raw EXIF orientation value onto 0/90/180/270."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 0
    return config.ORIENTATION_DEGREES.get(value, 0)


def alpha_from_mime(mime_type: Optional[str]) -> Optional[bool]:
    """
    Guesses alpha support from the MIME type alone. This does not look at
    pixels: a PNG without an alpha channel still reports True.
    """
    mime = (mime_type or '').lower()
    if 'png' in mime:
        return True
    if 'webp' in mime:
        return True
    if 'jpeg' in mime:
        return False
    return None


def color_model_for(has_alpha: Optional[bool]) -> ColorModel:
    if has_alpha is True:
        return ColorModel.RGBA
    if has_alpha is False:
        return ColorModel.RGB
    return ColorModel.UNKNOWN


class RasterMetadataExtractor:
    """
    Reads geometry and EXIF from PNG/JPEG/WEBP files without decoding pixels.

    Two independent read passes are made over the source:
      - Bounds: Pillow opens the header lazily, only the size is read.
      - EXIF: 'exifread' walks the tag block.
    Only a source that cannot be opened at all is an error. Everything else
    degrades to None on the affected fields.
    """

    def __init__(self, resolver: ContentResolver):
        self.resolver = resolver

    def extract(self, locator: str, mime_type: Optional[str]) -> ImageMetadata:
        width, height = self._read_bounds(locator)
        tags = self._read_exif(locator)

        has_alpha = alpha_from_mime(mime_type)
        color = ColorInfo(
            has_alpha=has_alpha,
            color_model=color_model_for(has_alpha),
            bit_depth_per_channel=config.DEFAULT_BIT_DEPTH,
            dpi_x=self._positive_int(tags, config.TAG_X_RESOLUTION),
            dpi_y=self._positive_int(tags, config.TAG_Y_RESOLUTION),
        )

        if not tags:
            return ImageMetadata(
                geometry=ImageGeometry.for_raster(width, height),
                color=color,
                gps=ExifGps(has_gps_metadata=False),
                mime_type=mime_type,
            )

        latitude, longitude = self._lat_long(tags)
        return ImageMetadata(
            geometry=ImageGeometry.for_raster(width, height),
            color=color,
            time=ExifTime(
                orientation=normalize_orientation(_first(tags.get(config.TAG_ORIENTATION))),
                date_time=self._date(tags, config.TAG_DATETIME),
                date_time_original=self._date(tags, config.TAG_DATETIME_ORIGINAL),
                date_time_digitized=self._date(tags, config.TAG_DATETIME_DIGITIZED),
                sub_sec_time=self._text(tags, config.TAG_SUBSEC_TIME),
            ),
            camera=ExifCamera(
                make=self._text(tags, config.TAG_MAKE),
                model=self._text(tags, config.TAG_MODEL),
                software=self._text(tags, config.TAG_SOFTWARE),
                lens_make=self._text(tags, config.TAG_LENS_MAKE),
                lens_model=self._text(tags, config.TAG_LENS_MODEL),
            ),
            exposure=ExifExposure(
                exposure_time=self._number(tags, config.TAG_EXPOSURE_TIME),
                f_number=self._number(tags, config.TAG_F_NUMBER),
                iso_speed=self._positive_int(tags, config.TAG_ISO),
                focal_length=self._number(tags, config.TAG_FOCAL_LENGTH),
                exposure_bias=self._number(tags, config.TAG_EXPOSURE_BIAS),
                metering_mode=self._non_negative_int(tags, config.TAG_METERING_MODE),
                white_balance=self._non_negative_int(tags, config.TAG_WHITE_BALANCE),
                flash=self._non_negative_int(tags, config.TAG_FLASH),
            ),
            image=ExifImage(
                brightness=self._number(tags, config.TAG_BRIGHTNESS),
                contrast=self._non_negative_int(tags, config.TAG_CONTRAST),
                saturation=self._non_negative_int(tags, config.TAG_SATURATION),
                sharpness=self._non_negative_int(tags, config.TAG_SHARPNESS),
            ),
            gps=ExifGps(
                has_gps_metadata=latitude is not None and longitude is not None,
                latitude=latitude,
                longitude=longitude,
                altitude=self._altitude(tags),
                timestamp=self._gps_time(tags),
            ),
            mime_type=mime_type,
        )

    # --- Read Passes ---

    def _read_bounds(self, locator: str) -> Tuple[Optional[int], Optional[int]]:
        try:
            fh = self.resolver.open_input(locator)
        except OSError as e:
            raise SourceUnavailableError(locator, str(e)) from e

        with fh:
            try:
                # Image.open only parses the header; pixels stay undecoded
                with Image.open(fh) as im:
                    width, height = im.size
            except Image.DecompressionBombError:
                # The pixel limit guards decoding, which this pass never does
                size = _header_size(fh)
                if size is None:
                    return None, None
                width, height = size
            except Exception as e:
                logging.debug(f"Bounds decode failed for {locator}: {e}")
                return None, None

        return (width if width > 0 else None), (height if height > 0 else None)

    def _read_exif(self, locator: str) -> Dict[str, Any]:
        """Returns the exifread tag dict, or {} when there is no usable EXIF."""
        try:
            with self.resolver.open_input(locator) as fh:
                return exifread.process_file(fh, details=False) or {}
        except Exception as e:
            logging.debug(f"EXIF read failed for {locator}: {e}")
            return {}

    # --- Tag Helpers ---

    def _text(self, tags, key: str) -> Optional[str]:
        if key not in tags:
            return None
        value = str(tags[key]).strip()
        return value or None

    def _date(self, tags, key: str) -> Optional[datetime]:
        value = self._text(tags, key)
        if value is None:
            return None
        try:
            return datetime.strptime(value, config.EXIF_DATETIME_FORMAT)
        except ValueError:
            logging.debug(f"Unparsable EXIF date in {key}: {value!r}")
            return None

    def _number(self, tags, key: str) -> Optional[float]:
        return _to_float(_first(tags.get(key)))

    def _positive_int(self, tags, key: str) -> Optional[int]:
        value = _to_int(_first(tags.get(key)))
        return value if value is not None and value > 0 else None

    def _non_negative_int(self, tags, key: str) -> Optional[int]:
        value = _to_int(_first(tags.get(key)))
        return value if value is not None and value >= 0 else None

    def _lat_long(self, tags) -> Tuple[Optional[float], Optional[float]]:
        lat = _dms_to_degrees(tags.get(config.TAG_GPS_LATITUDE))
        lon = _dms_to_degrees(tags.get(config.TAG_GPS_LONGITUDE))
        if lat is None or lon is None:
            return None, None
        if (self._text(tags, config.TAG_GPS_LATITUDE_REF) or 'N').upper().startswith('S'):
            lat = -lat
        if (self._text(tags, config.TAG_GPS_LONGITUDE_REF) or 'E').upper().startswith('W'):
            lon = -lon
        return lat, lon

    def _altitude(self, tags) -> Optional[float]:
        altitude = self._number(tags, config.TAG_GPS_ALTITUDE)
        if altitude is None:
            return None
        # Ref 1 means below sea level
        if _to_float(_first(tags.get(config.TAG_GPS_ALTITUDE_REF))) == 1:
            return -altitude
        return altitude

    def _gps_time(self, tags) -> Optional[time]:
        tag = tags.get(config.TAG_GPS_TIMESTAMP)
        if tag is None:
            return None
        values = getattr(tag, 'values', tag)
        if isinstance(values, (list, tuple)):
            parts = [_to_float(v) for v in values]
            if len(parts) != 3 or any(p is None for p in parts):
                return None
            value = ':'.join(f"{int(p):02d}" for p in parts)
        else:
            value = str(values).strip()
        try:
            return datetime.strptime(value, config.GPS_TIME_FORMAT).time()
        except ValueError:
            logging.debug(f"Unparsable GPS time: {value!r}")
            return None


def _first(tag: Any) -> Any:
    """First value of an exifread IfdTag (or of a plain value/list)."""
    if tag is None:
        return None
    values = getattr(tag, 'values', tag)
    if isinstance(values, (list, tuple)):
        return values[0] if values else None
    return values


def _to_float(value: Any) -> Optional[float]:
    """Handles exifread Ratio objects, ints and numeric strings. NaN/inf -> None."""
    if value is None:
        return None
    if hasattr(value, 'num') and hasattr(value, 'den'):
        if not value.den:
            return None
        result = value.num / value.den
    else:
        try:
            result = float(value)
        except (TypeError, ValueError):
            return None
    if not math.isfinite(result):
        return None
    return float(result)


def _to_int(value: Any) -> Optional[int]:
    """Integer EXIF fields truncate toward zero, rationals included."""
    result = _to_float(value)
    if result is None:
        return None
    return int(result)


def _dms_to_degrees(tag: Any) -> Optional[float]:
    values = getattr(tag, 'values', None)
    if not isinstance(values, (list, tuple)) or len(values) != 3:
        return None
    parts = [_to_float(v) for v in values]
    if any(p is None for p in parts):
        return None
    degrees, minutes, seconds = parts
    return degrees + minutes / 60.0 + seconds / 3600.0


def _header_size(fh) -> Optional[Tuple[int, int]]:
    """
    Reads the declared size by calling the format plugins directly, which
    skips the decompression bomb check that Image.open applies.
    """
    fh.seek(0)
    prefix = fh.read(16)
    Image.init()
    for format_id in Image.ID:
        factory, accept = Image.OPEN[format_id]
        if accept and not accept(prefix):
            continue
        fh.seek(0)
        try:
            with factory(fh, "") as im:
                return im.size
        except (SyntaxError, IndexError, TypeError, ValueError, OSError, struct.error) as e:
            logging.debug(f"{format_id} header read failed: {e}")
    return None
