"""Tests for the ffprobe based metadata prober and its cache."""

import copy
import logging
import subprocess
import time
from unittest.mock import patch

import pytest

from conftest import MALFORMED_OUTPUTS, MP3_PROBE, probe_result
from local_files.metadata.cache import ProbeCache
from local_files.metadata.prober import MetadataProber, _parse_year, _to_int
from local_files.utils.errors import ErrorKind, ProbeError

RUN = "local_files.metadata.prober.subprocess.run"


@pytest.fixture
def prober(make_config):
    return MetadataProber(make_config())


def with_changes(streams=None, fmt=None, tags=None):
    data = copy.deepcopy(MP3_PROBE)
    data["streams"][0].update(streams or {})
    data["format"].update(fmt or {})
    if tags is not None:
        data["format"]["tags"] = tags
    return data


# =========================================================================
# probe()
# =========================================================================


class TestProbe:
    def test_builds_track_record(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)):
            track = prober.probe("/music/song.mp3")

        assert track.type == "track"
        assert track.codec == "mp3"
        assert track.format == "mp3"
        assert track.size == 8617512
        assert track.bit_rate == 320012
        assert track.sample_rate == 44100
        assert track.bit_depth is None
        assert track.channels == 2
        assert track.duration == 215
        assert track.title == "Song"
        assert track.artist == "Band"
        assert track.album == "Record"
        assert track.genre == "Rock"
        assert track.year == 2004
        assert track.uri is None and track.contents is None

    def test_invokes_ffprobe_for_first_audio_stream(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)) as run:
            prober.probe("file:/music/a%20b.mp3")

        args, kwargs = run.call_args
        cmd = args[0]
        assert cmd[0] == "ffprobe"
        assert cmd[cmd.index("-select_streams") + 1] == "a:0"
        assert "-show_streams" in cmd and "-show_format" in cmd
        assert cmd[-1] == "/music/a b.mp3"
        assert kwargs["timeout"] == pytest.approx(0.1)

    def test_custom_timeout(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)) as run:
            prober.probe("/music/song.mp3", timeout_ms=2500)
        assert run.call_args[1]["timeout"] == pytest.approx(2.5)

    def test_compound_format_keeps_first_token(self, prober):
        data = with_changes(streams={"codec_name": "aac"}, fmt={"format_name": "mov,mp4,m4a,3gp,3g2,mj2"})
        with patch(RUN, return_value=probe_result(data)):
            track = prober.probe("/music/song.m4a")
        assert track.format == "mov"
        assert track.codec == "aac"

    def test_bit_depth_from_raw_sample(self, prober):
        data = with_changes(streams={"codec_name": "flac", "bits_per_raw_sample": "24"})
        with patch(RUN, return_value=probe_result(data)):
            assert prober.probe("/music/song.flac").bit_depth == 24

    def test_unparsable_numbers_become_none(self, prober):
        data = with_changes(streams={"sample_rate": "N/A", "channels": None}, fmt={"bit_rate": "N/A", "size": "nan"})
        del data["format"]["duration"]
        del data["streams"][0]["duration"]
        with patch(RUN, return_value=probe_result(data)):
            track = prober.probe("/music/song.mp3")

        assert track.bit_rate is None
        assert track.sample_rate is None
        assert track.channels is None
        assert track.size is None
        assert track.duration is None

    def test_missing_bit_rate_falls_back_to_stream(self, prober):
        data = with_changes()
        del data["format"]["bit_rate"]
        with patch(RUN, return_value=probe_result(data)):
            assert prober.probe("/music/song.mp3").bit_rate == 320000

    def test_stream_tags_are_used(self, prober):
        data = with_changes(tags={}, streams={"tags": {"Title": "Ogg Song", "ARTIST": "Ogg Band"}})
        with patch(RUN, return_value=probe_result(data)):
            track = prober.probe("/music/song.ogg")
        assert track.title == "Ogg Song"
        assert track.artist == "Ogg Band"

    def test_tag_fallbacks(self, prober):
        data = with_changes(tags={"name": "Named", "album_artist": "Album Artist", "composer": "Composer"})
        with patch(RUN, return_value=probe_result(data)):
            track = prober.probe("/music/song.mp3")
        assert track.title == "Named"
        assert track.artist == "Album Artist"
        assert track.album is None
        assert track.year is None

    def test_composer_is_last_artist_fallback(self, prober):
        data = with_changes(tags={"composer": "Bach", "year": "1721"})
        with patch(RUN, return_value=probe_result(data)):
            track = prober.probe("/music/song.mp3")
        assert track.artist == "Bach"
        assert track.year == 1721

    def test_invalid_date_is_none(self, prober):
        data = with_changes(tags={"date": "sometime in the nineties"})
        with patch(RUN, return_value=probe_result(data)):
            assert prober.probe("/music/song.mp3").year is None


class TestProbeErrors:
    @pytest.mark.parametrize("data", [
        {"format": MP3_PROBE["format"]},
        {"streams": [], "format": MP3_PROBE["format"]},
        {"streams": MP3_PROBE["streams"]},
        {"streams": MP3_PROBE["streams"], "format": {}},
        [],
    ])
    def test_missing_sections(self, prober, data):
        with patch(RUN, return_value=probe_result(data)):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/song.mp3")
        assert exc.value.kind is ErrorKind.PARSE_FAILED

    @pytest.mark.parametrize("data", MALFORMED_OUTPUTS)
    def test_malformed_sections(self, prober, data):
        with patch(RUN, return_value=probe_result(data)):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/song.mp3")
        assert exc.value.kind is ErrorKind.PARSE_FAILED
        assert exc.value.code == "EPARSE"
        assert len(prober.cache) == 0

    def test_invalid_json(self, prober):
        with patch(RUN, return_value=probe_result("this is not json")):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/song.mp3")
        assert exc.value.code == "EPARSE"

    def test_process_failure_truncates_stderr(self, prober, caplog):
        error = subprocess.CalledProcessError(1, ["ffprobe"], stderr="x" * 5000)
        with patch(RUN, side_effect=error), caplog.at_level(logging.WARNING):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/notes.txt")

        assert exc.value.code == "EPROBE"
        assert exc.value.path == "/music/notes.txt"
        assert len(exc.value.message) < 600
        assert exc.value.__cause__ is error
        assert any("Failed to probe /music/notes.txt" in r.message for r in caplog.records)

    def test_timeout(self, prober):
        with patch(RUN, side_effect=subprocess.TimeoutExpired(["ffprobe"], 0.1)):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/slow.mp3")
        assert exc.value.kind is ErrorKind.PROBE_FAILED
        assert "timed out" in exc.value.message

    def test_missing_ffprobe(self, prober):
        with patch(RUN, side_effect=FileNotFoundError("ffprobe")):
            with pytest.raises(ProbeError) as exc:
                prober.probe("/music/song.mp3")
        assert exc.value.kind is ErrorKind.PROBE_FAILED

    def test_failures_are_not_cached(self, prober):
        with patch(RUN, side_effect=subprocess.CalledProcessError(1, ["ffprobe"], stderr="boom")):
            with pytest.raises(ProbeError):
                prober.probe("/music/song.mp3")
        assert "/music/song.mp3" not in prober.cache


# =========================================================================
# is_supported()
# =========================================================================


class TestIsSupported:
    def test_returns_normalized_path(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)):
            assert prober.is_supported("file:/music/./song.mp3") == "/music/song.mp3"

    def test_swallows_probe_errors(self, prober):
        with patch(RUN, side_effect=subprocess.CalledProcessError(1, ["ffprobe"], stderr="Invalid data")):
            assert prober.is_supported("/music/notes.txt") is None

    def test_swallows_parse_errors(self, prober):
        with patch(RUN, return_value=probe_result({"streams": [], "format": {}})):
            assert prober.is_supported("/music/empty.mp3") is None

    @pytest.mark.parametrize("data", MALFORMED_OUTPUTS)
    def test_malformed_sections_are_unsupported(self, prober, data):
        with patch(RUN, return_value=probe_result(data)):
            assert prober.is_supported("/music/odd.mp3") is None

    def test_stream_without_index(self, prober):
        data = copy.deepcopy(MP3_PROBE)
        del data["streams"][0]["index"]
        with patch(RUN, return_value=probe_result(data)):
            assert prober.is_supported("/music/odd.mp3") is None

    def test_shares_cache_with_probe(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)) as run:
            assert prober.is_supported("/music/song.mp3")
            track = prober.probe("/music/song.mp3")
        assert run.call_count == 1
        assert track.title == "Song"


def test_check_probe_available(prober):
    with patch("local_files.metadata.prober.shutil.which", return_value="/usr/bin/ffprobe"):
        assert prober.check_probe_available()
    with patch("local_files.metadata.prober.shutil.which", return_value=None):
        assert not prober.check_probe_available()


# =========================================================================
# ProbeCache
# =========================================================================


class TestProbeCache:
    def test_repeated_probe_uses_cache(self, prober):
        with patch(RUN, return_value=probe_result(MP3_PROBE)) as run:
            prober.probe("/music/song.mp3")
            prober.probe("file:/music/song.mp3")
        assert run.call_count == 1

    def test_single_timer_per_window(self):
        cache = ProbeCache(window=60)
        try:
            cache.put("/a.mp3", {"a": 1})
            timer = cache._timer
            cache.put("/b.mp3", {"b": 2})
            assert cache._timer is timer
            assert len(cache) == 2
        finally:
            cache.clear()

    def test_clear_resets_timer(self):
        cache = ProbeCache(window=60)
        cache.put("/a.mp3", {"a": 1})
        cache.clear()
        assert len(cache) == 0
        assert cache._timer is None
        assert cache.get("/a.mp3") is None

    def test_whole_cache_expires(self):
        cache = ProbeCache(window=0.05)
        cache.put("/a.mp3", {"a": 1})
        cache.put("/b.mp3", {"b": 2})

        deadline = time.time() + 5
        while len(cache) and time.time() < deadline:
            time.sleep(0.01)

        assert len(cache) == 0
        assert cache._timer is None

    def test_new_window_after_expiry(self):
        cache = ProbeCache(window=60)
        cache.put("/a.mp3", {"a": 1})
        first = cache._timer
        cache.clear()
        cache.put("/b.mp3", {"b": 2})
        try:
            assert cache._timer is not None
            assert cache._timer is not first
        finally:
            cache.clear()


# =========================================================================
# helpers
# =========================================================================


@pytest.mark.parametrize("value, expected", [
    ("320000", 320000),
    (44100, 44100),
    ("215.433", 215),
    ("N/A", None),
    ("nan", None),
    ("inf", None),
    (None, None),
    ("", None),
])
def test_to_int(value, expected):
    assert _to_int(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("2004", 2004),
    ("2004-03-01", 2004),
    ("2004-03-01T10:00:00Z", 2004),
    ("2004/03/01", 2004),
    ("1 Mar 2004", 2004),
    ("2004-13-45", None),
    ("not a date", None),
    ("", None),
    (None, None),
])
def test_parse_year(value, expected):
    assert _parse_year(value) == expected
