from .. import config
from ..models import Format


def extension_of(file_name: str) -> str:
    """Text after the last '.', lowercased; '' when there is no dot."""
    _, dot, ext = file_name.rpartition('.')
    if not dot:
        return ''
    return ext.lower()


def classify(file_name: str) -> Format:
    """Maps a file name onto the closed Format set. Never fails."""
    return Format(config.EXT_TO_FORMAT.get(extension_of(file_name), 'unknown'))
