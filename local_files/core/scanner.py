"""File system scanner for playable media files."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from .collection import ResultCollection
from ..utils.file_utils import is_not_audio, walk_files
from ..utils.uri import to_uri


class LibraryScanner:
    """Scanner for discovering playable files under library roots."""

    def __init__(self, config, prober, logger=None):
        """
        Initialize library scanner.

        Args:
            config: Configuration object
            prober: MetadataProber used to confirm files are playable
            logger: Logger instance
        """
        self.config = config
        self.prober = prober
        self.logger = logger or logging.getLogger(__name__)
        self.max_workers = config.get('scanner.max_workers', 4)
        self.ignore_patterns = config.get('advanced.ignore_patterns', [])

    def scan(self, locations: Iterable[str], include_video: bool = False) -> ResultCollection:
        """
        Scan one or more locations for files the prober can play.

        Returns right away; each root is walked on a worker thread and the
        collection grows as files are confirmed.

        Args:
            locations: Root directories to search
            include_video: If True, video files with audio tracks are included

        Returns:
            ResultCollection that gets appended with each supported file
        """
        locations = [str(root) for root in locations]
        uri_list = ResultCollection()
        self.logger.info(f"Scanning for files in {len(locations)} locations: {locations}")

        if not locations:
            uri_list.close()
            return uri_list

        remaining = [len(locations)]
        remaining_lock = threading.Lock()

        def root_done(future):
            with remaining_lock:
                remaining[0] -= 1
                finished = remaining[0] == 0
            if finished:
                uri_list.close()
                self.logger.info(f"Scan finished, found {len(uri_list)} playable files")

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='local-files-scan')
        for root in locations:
            future = executor.submit(self.scan_root, root, uri_list, include_video)
            future.add_done_callback(root_done)

        # Workers keep running, we only stop accepting new jobs
        executor.shutdown(wait=False)
        return uri_list

    def scan_root(self, root: str, uri_list: ResultCollection, include_video: bool = False) -> int:
        """
        Walk a single root, appending every supported file.

        Failures are logged, never raised, so sibling roots carry on.

        Returns:
            Number of files added
        """
        added = [0]

        def add_audio_file(path: str) -> Optional[str]:
            try:
                path = self.check_file(path, include_video)
                if path and uri_list.append(to_uri(path)):
                    added[0] += 1
                return path
            except Exception as e:
                self.logger.error(f"Error checking file {path} (root: {root}): {e}")
                return None

        try:
            visited = walk_files(root, add_audio_file)
        except OSError as e:
            self.logger.error(f"Failed to scan library path {root}: {e}")
            return added[0]

        self.logger.info(f"Found {added[0]} playable files among {visited} files in {root}")
        return added[0]

    def check_file(self, path: str, include_video: bool = False) -> Optional[str]:
        """
        Decide if a single file belongs in the library.

        Args:
            path: Path to file
            include_video: If True, video files count as audio

        Returns:
            Normalized path if the file is playable, else None
        """
        if self._should_ignore(path):
            return None

        # Get rid of anything we KNOW isn't audio before running the prober
        if is_not_audio(path, self.config, include_video):
            self.logger.debug(f"Not an audio file, skipping: {path}")
            return None

        return self.prober.is_supported(path)

    def _should_ignore(self, path: str) -> bool:
        """Check if file should be ignored based on patterns."""
        for pattern in self.ignore_patterns:
            if pattern in path:
                return True
        return False
