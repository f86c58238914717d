"""Audio metadata extraction using ffprobe."""

import json
import logging
import re
import shutil
import subprocess
from datetime import datetime
from typing import Any, Dict, Optional

from .cache import ProbeCache
from .models import TrackRecord
from ..utils.errors import ErrorKind, ProbeError
from ..utils.uri import to_path

DEFAULT_TIMEOUT_MS = 100

_DATE_FORMATS = ('%Y/%m/%d', '%Y.%m.%d', '%d/%m/%Y', '%d %b %Y', '%b %d %Y', '%B %d, %Y', '%Y-%m')


def _to_int(value) -> Optional[int]:
    """Parse an integer the lenient way, folding garbage to None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _first_tag(tags: Dict[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = tags.get(name)
        if value not in (None, ''):
            return str(value)
    return None


def _parse_year(value: Optional[str]) -> Optional[int]:
    """
    Reduce a year/date tag to a four digit year.

    Args:
        value: Tag string, eg. '2004', '2004-03-01' or '1 Mar 2004'

    Returns:
        The year, or None if value isn't a valid date
    """
    if not value:
        return None
    value = str(value).strip()

    if re.fullmatch(r'\d{4}', value):
        return int(value)

    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).year
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).year
        except ValueError:
            continue
    return None


def _lower_keys(section: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not isinstance(section, dict):
        return {}
    return {str(k).lower(): v for k, v in section.items()}


class MetadataProber:
    """Extract metadata from audio files with an external probe tool."""

    def __init__(self, config, logger=None, cache: Optional[ProbeCache] = None):
        """
        Initialize metadata prober.

        Args:
            config: Configuration object
            logger: Logger instance
            cache: Cache to share, a new one is created if omitted
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.command = config.get('probe.command', 'ffprobe')
        self.timeout_ms = config.get('probe.timeout_ms', DEFAULT_TIMEOUT_MS)
        self.max_error_length = config.get('probe.max_error_length', 500)
        self.cache = cache or ProbeCache(config.get('probe.cache_window', 60), self.logger)

    def check_probe_available(self) -> bool:
        """Check that the probe command can be found on PATH."""
        return shutil.which(self.command) is not None

    def _truncate(self, text: Optional[str]) -> str:
        text = (text or '').strip()
        if len(text) > self.max_error_length:
            text = text[:self.max_error_length] + '...'
        return text

    def _run_probe(self, path: str, timeout_ms: int) -> Dict[str, Any]:
        """
        Run the probe tool on the first audio stream of a file.

        Args:
            path: Normalized file path
            timeout_ms: Timeout in milliseconds

        Returns:
            Parsed JSON output

        Raises:
            ProbeError: If the process fails or its output is unusable
        """
        cached = self.cache.get(path)
        if cached is not None:
            return cached

        args = [
            self.command,
            '-v', 'error',
            '-select_streams', 'a:0',
            '-show_streams',
            '-show_format',
            '-print_format', 'json',
            path
        ]

        try:
            result = subprocess.run(
                args,
                check=True,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=timeout_ms / 1000.0
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                ErrorKind.PROBE_FAILED,
                f"{self.command} timed out after {timeout_ms}ms",
                path=path
            ) from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(
                ErrorKind.PROBE_FAILED,
                f"{self.command} failed: {self._truncate(e.stderr) or f'exit code {e.returncode}'}",
                path=path
            ) from e
        except OSError as e:
            raise ProbeError(ErrorKind.PROBE_FAILED, f"Could not run {self.command}: {e}", path=path) from e

        try:
            data = json.loads(result.stdout)
        except (json.JSONDecodeError, TypeError) as e:
            raise ProbeError(
                ErrorKind.PARSE_FAILED,
                f"{self.command} output is not valid JSON: {self._truncate(result.stdout)}",
                path=path
            ) from e

        if not isinstance(data, dict) or not data.get('streams') or not data.get('format'):
            raise ProbeError(ErrorKind.PARSE_FAILED, "No audio stream or format in probe output", path=path)

        streams, fmt = data['streams'], data['format']
        if not isinstance(streams, list) or not isinstance(streams[0], dict) or not isinstance(fmt, dict):
            raise ProbeError(ErrorKind.PARSE_FAILED, "Unexpected layout of streams/format in probe output", path=path)
        format_name = fmt.get('format_name')
        if format_name is not None and not isinstance(format_name, str):
            raise ProbeError(ErrorKind.PARSE_FAILED, f"format_name is not a string: {format_name!r}", path=path)

        self.cache.put(path, data)
        return data

    def probe(self, path: str, timeout_ms: Optional[int] = None) -> TrackRecord:
        """
        Extract metadata from an audio file.

        Args:
            path: Path or uri of audio file
            timeout_ms: Probe timeout, defaults to probe.timeout_ms

        Returns:
            TrackRecord without uri/contents

        Raises:
            ProbeError: If probing or parsing fails
            InvalidInputError: If path is not a non-empty string
        """
        path = to_path(path)
        try:
            data = self._run_probe(path, timeout_ms or self.timeout_ms)
        except ProbeError as e:
            self.logger.warning(f"Failed to probe {path}: {e.message}")
            raise

        return self._build_record(data)

    def _build_record(self, data: Dict[str, Any]) -> TrackRecord:
        stream = _lower_keys(data['streams'][0])
        fmt = _lower_keys(data['format'])

        # mp3 keeps tags on the format, ogg/opus on the stream
        tags = _lower_keys(stream.get('tags'))
        tags.update(_lower_keys(fmt.get('tags')))

        format_name = fmt.get('format_name')
        bit_depth = _to_int(stream.get('bits_per_raw_sample')) or _to_int(stream.get('bits_per_sample'))

        return TrackRecord(
            codec=stream.get('codec_name') or None,
            format=format_name.split(',')[0] if format_name else None,
            size=_to_int(fmt.get('size')),
            bit_rate=_to_int(fmt.get('bit_rate', stream.get('bit_rate'))),
            sample_rate=_to_int(stream.get('sample_rate')),
            bit_depth=bit_depth or None,
            channels=_to_int(stream.get('channels')),
            duration=_to_int(fmt.get('duration', stream.get('duration'))),
            title=_first_tag(tags, 'title', 'name'),
            album=_first_tag(tags, 'album'),
            artist=_first_tag(tags, 'artist', 'album_artist', 'albumartist', 'composer'),
            genre=_first_tag(tags, 'genre'),
            year=_parse_year(_first_tag(tags, 'year', 'date'))
        )

    def is_supported(self, path: str) -> Optional[str]:
        """
        Check if a file has a playable audio stream.

        Probe errors are not raised, they just mean 'not supported'.

        Args:
            path: Path or uri of file

        Returns:
            The normalized path if supported, else None
        """
        try:
            path = to_path(path)
            data = self._run_probe(path, self.timeout_ms)
            stream = _lower_keys(data["streams"][0])
        except ProbeError as e:
            self.logger.debug(f"Not supported: {path} ({e.message})")
            return None

        if stream.get('index') is None:
            return None
        return path
