from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Optional, Union

from . import config


class FormatFamily(Enum):
    IMAGE = 'image'
    MODEL_3D = 'model_3d'


class Format(Enum):
    PNG = 'png'
    JPEG = 'jpeg'
    WEBP = 'webp'
    SVG = 'svg'
    OBJ = 'obj'
    GLTF = 'gltf'
    GLB = 'glb'
    STL = 'stl'
    PLY = 'ply'
    UNKNOWN = 'unknown'

    @property
    def family(self) -> FormatFamily:
        if self.value in config.IMAGE_FORMATS:
            return FormatFamily.IMAGE
        if self.value in config.MODEL_FORMATS:
            return FormatFamily.MODEL_3D
        raise ValueError(f"Format {self} has no family")

    @property
    def is_raster(self) -> bool:
        return self in (Format.PNG, Format.JPEG, Format.WEBP)


class ColorModel(Enum):
    RGB = 'RGB'
    RGBA = 'RGBA'
    UNKNOWN = 'Unknown'


@dataclass(frozen=True)
class FileDescriptor:
    """
    Format-independent attributes of a selected file.
    """
    file_name: str
    file_path: str          # the locator as given
    extension: str          # lowercase, no dot, '' if none
    format: Format
    uri: str
    is_embedded: bool
    file_size_bytes: int    # -1 if unknown
    is_readable: bool
    is_writable: bool
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    accessed_at: Optional[datetime] = None  # never populated
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class ImageGeometry:
    """
    Pixel or view-box geometry. Build through for_raster/for_vector so that
    aspect_ratio is always derived from the dimensions it came from.
    """
    is_vector: bool
    width_px: Optional[int] = None
    height_px: Optional[int] = None
    view_box_width: Optional[float] = None
    view_box_height: Optional[float] = None
    aspect_ratio: Optional[float] = None

    @classmethod
    def for_raster(cls, width: Optional[int], height: Optional[int]) -> 'ImageGeometry':
        ratio = None
        if width is not None and height is not None and height > 0:
            ratio = width / height
        return cls(is_vector=False, width_px=width, height_px=height, aspect_ratio=ratio)

    @classmethod
    def for_vector(cls,
                   view_box_width: Optional[float],
                   view_box_height: Optional[float],
                   declared_width: Optional[float] = None,
                   declared_height: Optional[float] = None) -> 'ImageGeometry':
        # viewBox wins over declared size
        ratio = None
        if view_box_width is not None and view_box_height is not None and view_box_height != 0:
            ratio = view_box_width / view_box_height
        elif declared_width is not None and declared_height is not None and declared_height != 0:
            ratio = declared_width / declared_height
        return cls(
            is_vector=True,
            view_box_width=view_box_width,
            view_box_height=view_box_height,
            aspect_ratio=ratio,
        )


@dataclass(frozen=True)
class ColorInfo:
    has_alpha: Optional[bool] = None
    color_model: Optional[ColorModel] = None
    bit_depth_per_channel: Optional[int] = None
    dpi_x: Optional[int] = None
    dpi_y: Optional[int] = None


@dataclass(frozen=True)
class ExifTime:
    orientation: Optional[int] = None   # 0/90/180/270
    date_time: Optional[datetime] = None
    date_time_original: Optional[datetime] = None
    date_time_digitized: Optional[datetime] = None
    sub_sec_time: Optional[str] = None


@dataclass(frozen=True)
class ExifCamera:
    make: Optional[str] = None
    model: Optional[str] = None
    software: Optional[str] = None
    lens_make: Optional[str] = None
    lens_model: Optional[str] = None


@dataclass(frozen=True)
class ExifExposure:
    exposure_time: Optional[float] = None
    f_number: Optional[float] = None
    iso_speed: Optional[int] = None
    focal_length: Optional[float] = None
    exposure_bias: Optional[float] = None
    metering_mode: Optional[int] = None
    white_balance: Optional[int] = None
    flash: Optional[int] = None


@dataclass(frozen=True)
class ExifImage:
    brightness: Optional[float] = None
    contrast: Optional[int] = None
    saturation: Optional[int] = None
    sharpness: Optional[int] = None


@dataclass(frozen=True)
class ExifGps:
    has_gps_metadata: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    timestamp: Optional[time] = None


@dataclass(frozen=True)
class ImageMetadata:
    """
    Normalized description of a 2D image. Every leaf field is optional and
    None means "not present in the source", never zero.
    """
    geometry: ImageGeometry
    color: ColorInfo = field(default_factory=ColorInfo)
    time: ExifTime = field(default_factory=ExifTime)
    camera: ExifCamera = field(default_factory=ExifCamera)
    exposure: ExifExposure = field(default_factory=ExifExposure)
    image: ExifImage = field(default_factory=ExifImage)
    gps: ExifGps = field(default_factory=ExifGps)
    mime_type: Optional[str] = None

    @property
    def is_vector(self) -> bool:
        return self.geometry.is_vector


@dataclass(frozen=True)
class ImageAsset:
    base: FileDescriptor
    image: ImageMetadata


@dataclass(frozen=True)
class Model3DAsset:
    base: FileDescriptor


AssetInfo = Union[ImageAsset, Model3DAsset]
