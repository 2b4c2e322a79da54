"""Unit tests for encoder detection and availability."""

from pathlib import Path
from unittest.mock import patch

from tlb.tools import (
    EncoderAvailability,
    FFmpegInfo,
    ToolStatus,
    check_encoder_availability,
    detect_ffmpeg,
    parse_version_string,
)
from tlb.tools.detection import _parse_codec_list

VERSION_OUTPUT = """ffmpeg version 6.1.1 Copyright (c) 2000-2023 the FFmpeg developers
built with gcc 13
configuration: --prefix=/usr --enable-gpl --enable-libx264
libavutil      58. 29.100 / 58. 29.100
"""

ENCODERS_OUTPUT = """Encoders:
 V..... = Video
 ------
 V....D libx264              libx264 H.264 / AVC / MPEG-4 AVC (codec h264)
 V....D mpeg4                MPEG-4 part 2
 A....D aac                  AAC (Advanced Audio Coding)
"""


class TestParseVersionString:
    """Tests for version string parsing."""

    def test_standard_semver(self) -> None:
        assert parse_version_string("6.1.1") == (6, 1, 1)

    def test_nightly_prefix(self) -> None:
        assert parse_version_string("n7.0") == (7, 0)

    def test_version_with_suffix(self) -> None:
        assert parse_version_string("6.1.1-0ubuntu1") == (6, 1, 1)

    def test_invalid(self) -> None:
        assert parse_version_string("") is None
        assert parse_version_string("git-master") is None


class TestParseCodecList:
    def test_parses_encoder_names(self) -> None:
        encoders = _parse_codec_list(ENCODERS_OUTPUT)
        assert {"libx264", "mpeg4", "aac"} <= encoders
        assert "encoders:" not in encoders


class TestDetectFFmpeg:
    """Tests for detect_ffmpeg()."""

    def test_missing(self) -> None:
        with patch("tlb.tools.detection._find_tool", return_value=None):
            info = detect_ffmpeg()

        assert info.status == ToolStatus.MISSING
        assert not info.is_available()
        assert info.status_message == "ffmpeg not found in PATH"

    def test_available(self) -> None:
        outputs = {
            "-version": (VERSION_OUTPUT, "", 0),
            "-encoders": (ENCODERS_OUTPUT, "", 0),
        }

        def fake_run(args):
            return outputs[args[-1]]

        with (
            patch(
                "tlb.tools.detection._find_tool",
                return_value=Path("/usr/bin/ffmpeg"),
            ),
            patch("tlb.tools.detection._run_command", side_effect=fake_run),
        ):
            info = detect_ffmpeg()

        assert info.is_available()
        assert info.path == Path("/usr/bin/ffmpeg")
        assert info.version == "6.1.1"
        assert info.version_tuple == (6, 1, 1)
        assert info.is_gpl
        assert info.has_encoder("libx264")
        assert info.has_encoder("MPEG4")

    def test_version_failure(self) -> None:
        with (
            patch(
                "tlb.tools.detection._find_tool",
                return_value=Path("/usr/bin/ffmpeg"),
            ),
            patch(
                "tlb.tools.detection._run_command",
                return_value=("", "cannot execute binary file", 126),
            ),
        ):
            info = detect_ffmpeg()

        assert info.status == ToolStatus.ERROR
        assert "cannot execute binary file" in info.status_message

    def test_encoder_list_failure_still_available(self) -> None:
        def fake_run(args):
            if args[-1] == "-version":
                return VERSION_OUTPUT, "", 0
            return "", "unrecognized option", 1

        with (
            patch(
                "tlb.tools.detection._find_tool",
                return_value=Path("/usr/bin/ffmpeg"),
            ),
            patch("tlb.tools.detection._run_command", side_effect=fake_run),
        ):
            info = detect_ffmpeg()

        assert info.is_available()
        assert info.encoders == set()

    def test_real_subprocess(self, fake_ffmpeg: Path) -> None:
        """Detection runs the configured executable."""
        info = detect_ffmpeg(fake_ffmpeg)

        assert info.is_available()
        assert info.path == fake_ffmpeg
        assert info.version == "6.1.1"
        assert info.encoders == {"libx264", "mpeg4"}


class TestEncoderAvailability:
    """Tests for EncoderAvailability."""

    def test_from_info(self) -> None:
        info = FFmpegInfo(
            path=Path("/usr/bin/ffmpeg"),
            version="6.1.1",
            status=ToolStatus.AVAILABLE,
            encoders={"mpeg4"},
        )

        availability = EncoderAvailability.from_info(info)

        assert availability.available
        assert availability.path == Path("/usr/bin/ffmpeg")
        assert availability.supports("mpeg4") is True
        assert availability.supports("libx264") is False

    def test_unknown_encoder_list(self) -> None:
        availability = EncoderAvailability(available=True)
        assert availability.supports("libx264") is None

    def test_unavailable(self) -> None:
        availability = EncoderAvailability.unavailable("ffmpeg not found in PATH")
        assert not availability.available
        assert availability.message == "ffmpeg not found in PATH"

    def test_check_encoder_availability_missing(self) -> None:
        with patch("tlb.tools.detection._find_tool", return_value=None):
            availability = check_encoder_availability()

        assert not availability.available
        assert availability.message == "ffmpeg not found in PATH"

    def test_check_encoder_availability_configured(self, fake_ffmpeg: Path) -> None:
        availability = check_encoder_availability(fake_ffmpeg)

        assert availability.available
        assert availability.supports("libx264")
