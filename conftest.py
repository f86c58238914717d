"""Shared fixtures for the Local Files tests."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from local_files import Config

DEFAULT_CONFIG = Path(__file__).parent / "config" / "default_config.yaml"

MP3_PROBE = {
    "streams": [{
        "index": 0,
        "codec_name": "mp3",
        "codec_type": "audio",
        "sample_rate": "44100",
        "channels": 2,
        "bits_per_sample": 0,
        "bit_rate": "320000",
        "duration": "215.433"
    }],
    "format": {
        "format_name": "mp3",
        "duration": "215.433",
        "size": "8617512",
        "bit_rate": "320012",
        "tags": {
            "TITLE": "Song",
            "ARTIST": "Band",
            "album": "Record",
            "genre": "Rock",
            "date": "2004-03-01"
        }
    }
}

# Valid JSON whose sections have the wrong shape
MALFORMED_OUTPUTS = [
    {"streams": MP3_PROBE["streams"][0], "format": MP3_PROBE["format"]},
    {"streams": ["audio"], "format": MP3_PROBE["format"]},
    {"streams": MP3_PROBE["streams"], "format": ["mp3"]},
    {"streams": MP3_PROBE["streams"], "format": "mp3"},
    {"streams": MP3_PROBE["streams"], "format": dict(MP3_PROBE["format"], format_name=3)},
]


@pytest.fixture
def config_file(tmp_path_factory):
    """Write a config based on the default one, returning a function taking overrides."""
    def _write(paths=None, include_video=False):
        data = yaml.safe_load(DEFAULT_CONFIG.read_text(encoding='utf-8'))
        data['library']['paths'] = [str(p) for p in (paths or [])]
        data['library']['include_video'] = include_video
        data['logging']['console'] = False
        target = tmp_path_factory.mktemp("config") / "test_config.yaml"
        target.write_text(yaml.safe_dump(data), encoding='utf-8')
        return target
    return _write


@pytest.fixture
def make_config(config_file):
    def _make(paths=None, include_video=False):
        return Config(str(config_file(paths, include_video)))
    return _make


def probe_result(data):
    """A CompletedProcess-like object with JSON stdout."""
    result = MagicMock()
    result.returncode = 0
    result.stdout = data if isinstance(data, str) else json.dumps(data)
    result.stderr = ""
    return result


def fake_ffprobe(playable_suffixes=('.mp3', '.flac')):
    """
    side_effect for subprocess.run: files with a playable suffix probe as
    MP3_PROBE, everything else fails the way ffprobe does on non-media.
    """
    def _run(args, **kwargs):
        path = args[-1]
        if path.lower().endswith(tuple(playable_suffixes)):
            return probe_result(MP3_PROBE)
        raise subprocess.CalledProcessError(1, args, stderr=f"{path}: Invalid data found when processing input")
    return _run
