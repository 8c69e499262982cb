import csv
import logging
from dataclasses import asdict
from datetime import datetime, time
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from . import config
from .core import AssetSelection
from .models import AssetInfo, FileDescriptor, ImageAsset, ImageMetadata, Model3DAsset

Section = Tuple[str, List[Tuple[str, str]]]

CSV_HEADERS = [
    "Locator",
    "File Name",
    "Format",
    "Extension",
    "Size (B)",
    "MIME Type",
    "Created",
    "Modified",
    "Permissions",
    "Kind",
    "Width (px)",
    "Height (px)",
    "ViewBox Width",
    "ViewBox Height",
    "Aspect Ratio",
]


def _fmt(value: Any, unit: str = '') -> str:
    """Renders one field. Absent values always show the ABSENT marker."""
    if value is None:
        return config.ABSENT
    if isinstance(value, bool):
        text = "yes" if value else "no"
    elif isinstance(value, Enum):
        text = str(value.value)
    elif isinstance(value, (datetime, time)):
        text = value.isoformat()
    else:
        text = str(value)
    return f"{text} {unit}" if unit else text


def _permissions(base: FileDescriptor) -> str:
    return ("R" if base.is_readable else "-") + ("W" if base.is_writable else "-")


def base_section(base: FileDescriptor) -> Section:
    return ("File", [
        ("File name", base.file_name),
        ("Path / URI", base.file_path),
        ("Format", base.format.value.upper()),
        ("Extension", base.extension or config.ABSENT),
        ("Size", _fmt(base.file_size_bytes if base.file_size_bytes >= 0 else None, "B")),
        ("MIME type", _fmt(base.mime_type)),
        ("Created", _fmt(base.created_at)),
        ("Modified", _fmt(base.modified_at)),
        ("Last accessed", _fmt(base.accessed_at)),
        ("Source", "bundled asset" if base.is_embedded else "external file"),
        ("Permissions", _permissions(base)),
    ])


def image_sections(img: ImageMetadata) -> List[Section]:
    g, c, t, cam, exp, q, gps = img.geometry, img.color, img.time, img.camera, img.exposure, img.image, img.gps
    return [
        ("Image geometry", [
            ("Vector", _fmt(g.is_vector)),
            ("Width", _fmt(g.width_px, "px")),
            ("Height", _fmt(g.height_px, "px")),
            ("ViewBox width", _fmt(g.view_box_width)),
            ("ViewBox height", _fmt(g.view_box_height)),
            ("Aspect ratio", _fmt(g.aspect_ratio)),
        ]),
        ("Image properties", [
            ("Alpha channel", _fmt(c.has_alpha)),
            ("Color model", _fmt(c.color_model)),
            ("Bit depth", _fmt(c.bit_depth_per_channel, "bpc")),
            ("DPI X", _fmt(c.dpi_x)),
            ("DPI Y", _fmt(c.dpi_y)),
        ]),
        ("EXIF - time", [
            ("Date", _fmt(t.date_time)),
            ("Date original", _fmt(t.date_time_original)),
            ("Date digitized", _fmt(t.date_time_digitized)),
            ("Sub-second", _fmt(t.sub_sec_time)),
            ("Orientation", _fmt(t.orientation, "deg")),
        ]),
        ("EXIF - camera / lens", [
            ("Make", _fmt(cam.make)),
            ("Model", _fmt(cam.model)),
            ("Software", _fmt(cam.software)),
            ("Lens make", _fmt(cam.lens_make)),
            ("Lens model", _fmt(cam.lens_model)),
        ]),
        ("EXIF - exposure", [
            ("Exposure time", _fmt(exp.exposure_time, "s")),
            ("F-number", _fmt(exp.f_number)),
            ("ISO", _fmt(exp.iso_speed)),
            ("Focal length", _fmt(exp.focal_length, "mm")),
            ("Exposure bias", _fmt(exp.exposure_bias, "EV")),
            ("Metering mode", _fmt(exp.metering_mode)),
            ("White balance", _fmt(exp.white_balance)),
            ("Flash", _fmt(exp.flash)),
        ]),
        ("EXIF - image", [
            ("Brightness", _fmt(q.brightness)),
            ("Contrast", _fmt(q.contrast)),
            ("Saturation", _fmt(q.saturation)),
            ("Sharpness", _fmt(q.sharpness)),
        ]),
        ("EXIF - location", [
            ("Has GPS", _fmt(gps.has_gps_metadata)),
            ("Latitude", _fmt(gps.latitude)),
            ("Longitude", _fmt(gps.longitude)),
            ("Altitude", _fmt(gps.altitude, "m")),
            ("GPS time", _fmt(gps.timestamp)),
        ]),
    ]


def asset_sections(asset: AssetInfo) -> List[Section]:
    if isinstance(asset, ImageAsset):
        return [base_section(asset.base)] + image_sections(asset.image)
    if isinstance(asset, Model3DAsset):
        return [base_section(asset.base)]
    raise TypeError(f"Unhandled asset type: {type(asset).__name__}")


def render_asset_info(asset: AssetInfo) -> str:
    """Plain-text info panel, one 'label: value' line per field."""
    lines = []
    for title, rows in asset_sections(asset):
        lines.append(f"== {title} ==")
        width = max(len(label) for label, _ in rows)
        for label, value in rows:
            lines.append(f"  {label.ljust(width)} : {value}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def asset_to_dict(asset: AssetInfo) -> Dict[str, Any]:
    """JSON-ready dict. Absent fields are kept as None rather than dropped."""
    if isinstance(asset, ImageAsset):
        return {"kind": "image", "base": _jsonable(asdict(asset.base)), "image": _jsonable(asdict(asset.image))}
    if isinstance(asset, Model3DAsset):
        return {"kind": "model_3d", "base": _jsonable(asdict(asset.base))}
    raise TypeError(f"Unhandled asset type: {type(asset).__name__}")


def status_text(selection: AssetSelection) -> str:
    """One-line status: failure, empty, or the selected file's name."""
    if selection.error is not None:
        return f"Could not load file: {selection.error.locator}"
    if selection.current is None:
        return "No file loaded"
    return selection.current.base.file_name


def csv_row(asset: AssetInfo) -> List[str]:
    base = asset.base
    geometry = asset.image.geometry if isinstance(asset, ImageAsset) else None

    def geo(attr: str) -> str:
        value: Optional[Any] = getattr(geometry, attr) if geometry else None
        return "" if value is None else str(value)

    return [
        base.uri,
        base.file_name,
        base.format.value,
        base.extension,
        str(base.file_size_bytes),
        base.mime_type or "",
        base.created_at.isoformat() if base.created_at else "",
        base.modified_at.isoformat() if base.modified_at else "",
        _permissions(base),
        "image" if isinstance(asset, ImageAsset) else "model_3d",
        geo("width_px"),
        geo("height_px"),
        geo("view_box_width"),
        geo("view_box_height"),
        geo("aspect_ratio"),
    ]


def write_csv_report(assets: Iterable[AssetInfo], output_csv: Path) -> int:
    """Writes one row per asset. Returns the number of rows written."""
    count = 0
    with open(output_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADERS)
        for asset in assets:
            writer.writerow(csv_row(asset))
            count += 1
    logging.info(f"Report complete. Wrote {count} rows to {output_csv}")
    return count
