import logging
import math
import re
from typing import Optional, Tuple
from xml.etree import ElementTree as ET

from .. import config
from ..exceptions import SourceUnavailableError, VectorParseError
from ..models import ImageGeometry, ImageMetadata
from ..scanning.filesystem import ContentResolver

_LENGTH_RE = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z%]*)\s*$')
_VIEWBOX_SPLIT_RE = re.compile(r'[\s,]+')


def parse_length(value: Optional[str]) -> Optional[float]:
    """
    Converts an SVG width/height attribute to px. Returns None for missing,
    relative (%/em) or non-positive lengths.
    """
    if value is None:
        return None
    m = _LENGTH_RE.match(value)
    if not m:
        return None
    unit = m.group(2).lower()
    if unit not in config.SVG_LENGTH_UNITS:
        return None
    px = float(m.group(1)) * config.SVG_LENGTH_UNITS[unit]
    if not math.isfinite(px) or px <= 0:
        return None
    return px


def parse_view_box(value: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Returns (width, height) of a 'min-x min-y width height' viewBox."""
    if value is None:
        return None, None
    parts = [p for p in _VIEWBOX_SPLIT_RE.split(value.strip()) if p]
    if len(parts) != 4:
        return None, None
    try:
        _, _, width, height = (float(p) for p in parts)
    except ValueError:
        return None, None
    # Negative sizes are an error in SVG; zero disables rendering
    if not (math.isfinite(width) and math.isfinite(height)) or width < 0 or height < 0:
        return None, None
    return width, height


class VectorMetadataExtractor:
    """
    Reads SVG geometry from the root element's viewBox/width/height.

    The document must parse and have an <svg> root. Anything else is a hard
    failure, since there would be no dimension source left to report.
    """

    def __init__(self, resolver: ContentResolver):
        self.resolver = resolver

    def extract(self, locator: str) -> ImageMetadata:
        root = self._parse_root(locator)

        vb_width, vb_height = parse_view_box(root.get('viewBox'))
        declared_width = parse_length(root.get('width'))
        declared_height = parse_length(root.get('height'))
        logging.debug(
            f"SVG {locator}: viewBox={vb_width}x{vb_height}, "
            f"declared={declared_width}x{declared_height}"
        )

        return ImageMetadata(
            geometry=ImageGeometry.for_vector(vb_width, vb_height, declared_width, declared_height),
            mime_type=config.SVG_MIME_TYPE,
        )

    def _parse_root(self, locator: str) -> ET.Element:
        try:
            fh = self.resolver.open_input(locator)
        except OSError as e:
            raise SourceUnavailableError(locator, str(e)) from e

        with fh:
            try:
                root = ET.parse(fh).getroot()
            except ET.ParseError as e:
                raise VectorParseError(locator, f"invalid SVG document: {e}") from e

        # Tags come back as '{http://www.w3.org/2000/svg}svg' when namespaced
        if root.tag.rsplit('}', 1)[-1] != 'svg':
            raise VectorParseError(locator, f"root element is <{root.tag}>, not <svg>")
        return root
