import logging
from typing import Optional

from .exceptions import AssetLoadError
from .metadata.raster import RasterMetadataExtractor
from .metadata.vector import VectorMetadataExtractor
from .models import AssetInfo, Format, FormatFamily, ImageAsset, Model3DAsset
from .scanning.filesystem import ContentResolver, FileSystemProbe, LocalContentResolver


class AssetInfoBuilder:
    def __init__(self, resolver: Optional[ContentResolver] = None):
        self.resolver = resolver or LocalContentResolver()
        self.probe = FileSystemProbe(self.resolver)
        self.raster = RasterMetadataExtractor(self.resolver)
        self.vector = VectorMetadataExtractor(self.resolver)

    def build(self, locator: str) -> AssetInfo:
        """
        Produces the normalized description of one file.
        1. Probe (name, size, timestamps, permissions, MIME) and classify
        2. Images: SVG -> vector extractor, PNG/JPEG/WEBP -> raster extractor
        3. Models (and unknown formats): base descriptor only

        Raises AssetLoadError when the file cannot be read at all. No partial
        result is returned in that case.
        """
        base = self.probe.probe(locator)
        logging.debug(f"Classified {locator} as {base.format.value} ({base.format.family.value})")

        family = base.format.family
        if family is FormatFamily.IMAGE:
            try:
                if base.format is Format.SVG:
                    image = self.vector.extract(locator)
                else:
                    image = self.raster.extract(locator, base.mime_type)
            except AssetLoadError:
                raise
            except Exception as e:
                raise AssetLoadError(locator, str(e)) from e
            return ImageAsset(base=base, image=image)

        if family is FormatFamily.MODEL_3D:
            if base.format is Format.UNKNOWN:
                logging.info(f"Unrecognised extension '{base.extension}' for {locator}; treating as 3D model")
            return Model3DAsset(base=base)

        raise TypeError(f"Unhandled format family: {family}")


class AssetSelection:
    """
    The single currently selected asset.

    Starts empty, gets replaced wholesale on every successful select().
    A failed select() keeps the previous asset and records the error.
    """

    def __init__(self, builder: Optional[AssetInfoBuilder] = None):
        self.builder = builder or AssetInfoBuilder()
        self.current: Optional[AssetInfo] = None
        self.error: Optional[AssetLoadError] = None

    def select(self, locator: str) -> AssetInfo:
        try:
            asset = self.builder.build(locator)
        except AssetLoadError as e:
            logging.error(str(e))
            self.error = e
            raise
        self.current = asset
        self.error = None
        return asset

    @property
    def failed(self) -> bool:
        return self.error is not None
