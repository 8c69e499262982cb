"""
Custom exception hierarchy for the asset inspector.

Only hard failures travel as exceptions. Missing metadata is represented as
None on the result records, never raised.
"""


class AssetInspectorError(Exception):
    """Base exception for all asset inspector errors."""
    pass


class AssetLoadError(AssetInspectorError):
    """Raised when a file cannot be loaded at all."""

    def __init__(self, locator: str, message: str):
        super().__init__(f"Could not load file {locator}: {message}")
        self.locator = locator


class SourceUnavailableError(AssetLoadError):
    """Raised when the file's byte stream cannot be opened."""
    pass


class VectorParseError(AssetLoadError):
    """Raised when an SVG document cannot be parsed."""
    pass
