"""
Configuration constants for the asset inspector.
"""

# --- Format Classification ---
PNG_EXTS = {'png'}
JPEG_EXTS = {'jpg', 'jpeg'}
WEBP_EXTS = {'webp'}
SVG_EXTS = {'svg'}
OBJ_EXTS = {'obj'}
GLTF_EXTS = {'gltf'}
GLB_EXTS = {'glb'}
PLY_EXTS = {'ply'}
STL_EXTS = {'stl'}

# Extension (lowercase, no dot) to Format value.
# Anything missing here classifies as 'unknown'.
EXT_TO_FORMAT = {}
for ext in PNG_EXTS: EXT_TO_FORMAT[ext] = 'png'
for ext in JPEG_EXTS: EXT_TO_FORMAT[ext] = 'jpeg'
for ext in WEBP_EXTS: EXT_TO_FORMAT[ext] = 'webp'
for ext in SVG_EXTS: EXT_TO_FORMAT[ext] = 'svg'
for ext in OBJ_EXTS: EXT_TO_FORMAT[ext] = 'obj'
for ext in GLTF_EXTS: EXT_TO_FORMAT[ext] = 'gltf'
for ext in GLB_EXTS: EXT_TO_FORMAT[ext] = 'glb'
for ext in PLY_EXTS: EXT_TO_FORMAT[ext] = 'ply'
for ext in STL_EXTS: EXT_TO_FORMAT[ext] = 'stl'

# Unknown lands in the model family on purpose (see DESIGN.md).
IMAGE_FORMATS = {'png', 'jpeg', 'webp', 'svg'}
MODEL_FORMATS = {'obj', 'gltf', 'glb', 'stl', 'ply', 'unknown'}

# --- Content Metadata Columns ---
COL_DISPLAY_NAME = '_display_name'
COL_SIZE = '_size'
COL_DATE_ADDED = 'date_added'        # epoch seconds
COL_LAST_MODIFIED = 'last_modified'  # epoch milliseconds

PLACEHOLDER_FILE_NAME = 'unknown'
UNKNOWN_SIZE = -1

# Types the platform mimetypes database may not carry
EXTRA_MIME_TYPES = {
    '.webp': 'image/webp',
    '.svg': 'image/svg+xml',
    '.obj': 'model/obj',
    '.gltf': 'model/gltf+json',
    '.glb': 'model/gltf-binary',
    '.stl': 'model/stl',
    '.ply': 'application/ply',
}

# --- Raster Metadata ---
DEFAULT_BIT_DEPTH = 8

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
GPS_TIME_FORMAT = "%H:%M:%S"

# Raw EXIF orientation -> clockwise rotation in degrees.
# Mirrored/transposed variants and 'undefined' collapse to 0.
ORIENTATION_DEGREES = {
    3: 180,
    6: 90,
    8: 270,
}

# exifread tag keys
TAG_ORIENTATION = 'Image Orientation'
TAG_DATETIME = 'Image DateTime'
TAG_DATETIME_ORIGINAL = 'EXIF DateTimeOriginal'
TAG_DATETIME_DIGITIZED = 'EXIF DateTimeDigitized'
TAG_SUBSEC_TIME = 'EXIF SubSecTime'
TAG_MAKE = 'Image Make'
TAG_MODEL = 'Image Model'
TAG_SOFTWARE = 'Image Software'
TAG_LENS_MAKE = 'EXIF LensMake'
TAG_LENS_MODEL = 'EXIF LensModel'
TAG_EXPOSURE_TIME = 'EXIF ExposureTime'
TAG_F_NUMBER = 'EXIF FNumber'
TAG_ISO = 'EXIF ISOSpeedRatings'
TAG_FOCAL_LENGTH = 'EXIF FocalLength'
TAG_EXPOSURE_BIAS = 'EXIF ExposureBiasValue'
TAG_METERING_MODE = 'EXIF MeteringMode'
TAG_WHITE_BALANCE = 'EXIF WhiteBalance'
TAG_FLASH = 'EXIF Flash'
TAG_BRIGHTNESS = 'EXIF BrightnessValue'
TAG_CONTRAST = 'EXIF Contrast'
TAG_SATURATION = 'EXIF Saturation'
TAG_SHARPNESS = 'EXIF Sharpness'
TAG_X_RESOLUTION = 'Image XResolution'
TAG_Y_RESOLUTION = 'Image YResolution'
TAG_GPS_LATITUDE = 'GPS GPSLatitude'
TAG_GPS_LATITUDE_REF = 'GPS GPSLatitudeRef'
TAG_GPS_LONGITUDE = 'GPS GPSLongitude'
TAG_GPS_LONGITUDE_REF = 'GPS GPSLongitudeRef'
TAG_GPS_ALTITUDE = 'GPS GPSAltitude'
TAG_GPS_ALTITUDE_REF = 'GPS GPSAltitudeRef'
TAG_GPS_TIMESTAMP = 'GPS GPSTimeStamp'

# --- Vector Metadata ---
SVG_MIME_TYPE = 'image/svg+xml'

# CSS absolute length units in px (96 dpi reference).
# Percentages and font-relative units are not resolvable without a viewport.
SVG_LENGTH_UNITS = {
    '': 1.0,
    'px': 1.0,
    'pt': 96.0 / 72.0,
    'pc': 16.0,
    'in': 96.0,
    'cm': 96.0 / 2.54,
    'mm': 96.0 / 25.4,
}

# --- Reporting ---
ABSENT = '—'
