"""Plays files on the local filesystem. Uris are prefixed with 'file:'."""

import dataclasses
import logging
from typing import List, Optional, Union

from .collection import ResultCollection
from .scanner import LibraryScanner
from ..metadata.models import ROOT_FOLDER, LibraryEntry, TrackRecord
from ..metadata.prober import MetadataProber
from ..utils.errors import ErrorKind, InvalidInputError, LocalFilesError, SequenceError
from ..utils.file_utils import check_exists
from ..utils.uri import is_uri, to_path, to_uri


class LocalFiles:
    """Query interface over playable files on the local filesystem."""

    def __init__(self, config, logger=None, prober: Optional[MetadataProber] = None,
                 scanner: Optional[LibraryScanner] = None):
        """
        Initialize local files source.

        Args:
            config: Configuration object
            logger: Logger instance
            prober: MetadataProber to use (created from config if omitted)
            scanner: LibraryScanner to use (created from config if omitted)
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.prober = prober or MetadataProber(config, self.logger)
        self.scanner = scanner or LibraryScanner(config, self.prober, self.logger)
        self._uri_list: Optional[ResultCollection] = None
        self._noted_no_paths = False

    def can_play_uri(self, uri) -> bool:
        """
        Check if a uri can be played.

        A plain path starting with '/' is also accepted, in which case a
        missing file just gives False.

        Args:
            uri: 'file:' uri or absolute path

        Returns:
            True if playable, False if the uri isn't one of ours

        Raises:
            InvalidInputError: If uri is not a non-empty string
            LocalFilesError: (EFAULT) if a file: uri points to a missing file
        """
        if not isinstance(uri, str) or not uri.strip():
            raise InvalidInputError(f"Expected uri string, got {type(uri).__name__}: {uri!r}")
        uri = uri.strip()

        if not is_uri(uri):
            return uri.startswith('/') and check_exists(uri, 'file')

        try:
            check_exists(to_path(uri), 'file', raise_error=True)
        except LocalFilesError as e:
            raise LocalFilesError(ErrorKind.FAULT, e.message, path=e.path, uri=uri) from e
        return True

    def get_uri_details(self, uri) -> LibraryEntry:
        """
        Get information about a local uri.

        Args:
            uri: Uri or path

        Returns:
            FolderRecord for the root, else a TrackRecord

        Raises:
            SequenceError: If the file doesn't exist or isn't supported
        """
        try:
            path = to_path(uri)
            if path == '/':
                return ROOT_FOLDER

            details = self.prober.probe(path)
            return dataclasses.replace(details, contents=path, uri=to_uri(path))
        except (LocalFilesError, OSError) as e:
            raise SequenceError(
                f"Could not get details: {e}",
                hint='call can_play_uri() before get_uri_details()',
                uri=uri if isinstance(uri, str) else None
            ) from e

    def get_stream(self, track: TrackRecord) -> str:
        """
        Get the path the playback pipeline should open.

        Args:
            track: TrackRecord from get_uri_details()

        Returns:
            Path to file on filesystem

        Raises:
            InvalidInputError: If track is not a TrackRecord
            SequenceError: If the file no longer exists
        """
        if not isinstance(track, TrackRecord):
            raise InvalidInputError(f"Expected track record, got {type(track).__name__}: {track!r}")

        try:
            # Errors further down the pipeline are much harder to track down
            check_exists(track.contents or '', 'file', raise_error=True)
        except LocalFilesError as e:
            raise SequenceError(
                f"Track file is missing: {e.message}",
                hint='call get_uri_details() before get_stream()',
                path=track.contents,
                uri=track.uri
            ) from e
        return track.contents

    def get_uri_list(self) -> Union[ResultCollection, List[str]]:
        """
        Get all uris known to this source.

        The first call starts a scan of library.paths; later calls return
        the same (possibly still growing) collection.

        Returns:
            ResultCollection, or an empty list if no library paths are configured
        """
        if self._uri_list is not None:
            return self._uri_list

        paths = self.config.get_library_paths()
        if paths:
            self._uri_list = self.scanner.scan(paths, self.config.include_video())
            return self._uri_list

        if not self._noted_no_paths:
            self.logger.info("No library.paths specified, no local files will be added")
            self._noted_no_paths = True
        return []
