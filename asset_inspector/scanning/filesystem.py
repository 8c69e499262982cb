import logging
import mimetypes
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, BinaryIO, Callable, Mapping, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .. import config
from ..models import FileDescriptor
from .classifier import classify, extension_of


def locator_to_path(locator: str) -> Path:
    """Accepts plain paths and file:// URIs."""
    if locator.startswith('file:'):
        parsed = urlparse(locator)
        return Path(url2pathname(parsed.path))
    return Path(locator)


def locator_name(locator: str) -> str:
    """Last path segment of a locator, used when no display name is known."""
    path = urlparse(locator).path if '://' in locator else locator
    return unquote(path.replace('\\', '/').rstrip('/').rsplit('/', 1)[-1])


class ContentResolver:
    """
    Access to a file's content and its content-provider metadata.

    query() returns a row of named columns (see config.COL_*) or None when the
    provider has nothing for the locator. Columns may be missing or None.
    """

    def query(self, locator: str) -> Optional[Mapping[str, Any]]:
        raise NotImplementedError

    def get_type(self, locator: str) -> Optional[str]:
        raise NotImplementedError

    def open_input(self, locator: str) -> BinaryIO:
        raise NotImplementedError

    def open_output(self, locator: str) -> BinaryIO:
        raise NotImplementedError


class LocalContentResolver(ContentResolver):
    """ContentResolver over the local file system."""

    def __init__(self):
        self._mime = mimetypes.MimeTypes()
        for ext, mime in config.EXTRA_MIME_TYPES.items():
            self._mime.add_type(mime, ext)

    def query(self, locator: str) -> Optional[Mapping[str, Any]]:
        path = locator_to_path(locator)
        try:
            st = path.stat()
        except OSError as e:
            logging.debug(f"No content row for {locator}: {e}")
            return None

        # st_birthtime only exists on some platforms
        created = getattr(st, 'st_birthtime', None) or st.st_ctime
        return {
            config.COL_DISPLAY_NAME: path.name,
            config.COL_SIZE: st.st_size,
            config.COL_DATE_ADDED: int(created),
            config.COL_LAST_MODIFIED: st.st_mtime_ns // 1_000_000,
        }

    def get_type(self, locator: str) -> Optional[str]:
        mime, _ = self._mime.guess_type(locator_to_path(locator).name, strict=False)
        return mime

    def open_input(self, locator: str) -> BinaryIO:
        return open(locator_to_path(locator), 'rb')

    def open_output(self, locator: str) -> BinaryIO:
        # r+b needs write permission but leaves the content untouched
        return open(locator_to_path(locator), 'r+b')


class FileSystemProbe:
    def __init__(self, resolver: ContentResolver):
        self.resolver = resolver

    def probe(self, locator: str) -> FileDescriptor:
        """
        Builds the base descriptor for a locator.

        Nothing in here raises for a missing or unreadable file: absent
        columns become None / -1 and failed permission probes become False.
        """
        file_name = config.PLACEHOLDER_FILE_NAME
        file_size = config.UNKNOWN_SIZE
        created_at = None
        modified_at = None
        display_name = None

        row = self.resolver.query(locator)
        if row is not None:
            display_name = row.get(config.COL_DISPLAY_NAME)
            if display_name is not None:
                file_name = str(display_name)
            size = _column(row, config.COL_SIZE, int)
            if size is not None:
                file_size = size
            # date_added is in seconds, last_modified already in ms
            created_at = _column(row, config.COL_DATE_ADDED, lambda v: _from_epoch_ms(int(v) * 1000))
            modified_at = _column(row, config.COL_LAST_MODIFIED, lambda v: _from_epoch_ms(int(v)))

        # Without a display name the locator itself still carries the extension
        name_for_format = file_name if display_name is not None else locator_name(locator)

        return FileDescriptor(
            file_name=file_name,
            file_path=locator,
            extension=extension_of(name_for_format),
            format=classify(name_for_format),
            uri=locator,
            is_embedded=False,
            file_size_bytes=file_size,
            is_readable=self._can_open(locator, self.resolver.open_input),
            is_writable=self._can_open(locator, self.resolver.open_output),
            created_at=created_at,
            modified_at=modified_at,
            accessed_at=None,
            mime_type=self.resolver.get_type(locator),
        )

    def _can_open(self, locator: str, opener) -> bool:
        try:
            with opener(locator):
                return True
        except Exception as e:
            logging.debug(f"Access probe {opener.__name__} failed for {locator}: {e}")
            return False


def _from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms // 1000, tz=timezone.utc) + timedelta(milliseconds=ms % 1000)


def _column(row: Mapping[str, Any], name: str, convert: Callable[[Any], Any]) -> Optional[Any]:
    """Converted column value, or None when the column is missing or unreadable."""
    value = row.get(name)
    if value is None:
        return None
    try:
        return convert(value)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logging.debug(f"Unreadable {name} column {value!r}: {e}")
        return None
