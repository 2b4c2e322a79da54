"""Shared test fixtures for Timelapse Builder."""

import os
import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

FAKE_FFMPEG_SCRIPT = """#!{python}
import os
import sys

args = sys.argv[1:]
if args == ["-version"]:
    print("ffmpeg version 6.1.1 Copyright (c) 2000-2023 the FFmpeg developers")
    print("configuration: --enable-gpl --enable-libx264")
    sys.exit(0)
if "-encoders" in args:
    print("Encoders:")
    for name in os.environ.get("FAKE_FFMPEG_ENCODERS", "libx264,mpeg4").split(","):
        if name:
            print(" V....D " + name + "    fake " + name + " encoder")
    sys.exit(0)

codec = args[args.index("-c:v") + 1]
output = args[-1]
sys.stderr.write("Input #0, image2, from '" + args[args.index("-i") + 1] + "':\\n")
if codec in os.environ.get("FAKE_FFMPEG_FAIL", "").split(","):
    sys.stderr.write("Unknown encoder '" + codec + "'\\n")
    sys.exit(1)
sys.stderr.write("frame=    1 fps=0.0 q=0.0 size=       0kB time=00:00:00.00 speed=   0x\\r")
sys.stderr.write("frame=    3 fps=0.0 q=-1.0 Lsize=       1kB time=00:00:00.10 speed=1.0x\\n")
with open(output, "wb") as f:
    f.write(b"fake " + codec.encode())
sys.exit(0)
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Clear TLB_* variables and point the data directory at tmp_path."""
    for var in list(os.environ):
        if var.startswith("TLB_") or var.startswith("FAKE_FFMPEG_"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TLB_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture(autouse=True)
def cli_logging_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLI invocations from replacing the test logging handlers."""
    import tlb.cli

    monkeypatch.setattr(tlb.cli, "_logging_configured", True)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_session(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a session directory with numbered frames.

    Example:
        session = make_session(3)  # img_00001.jpg .. img_00003.jpg
    """

    def _make(
        count: int = 3,
        name: str = "session",
        indices: list[int] | None = None,
    ) -> Path:
        session = tmp_path / name
        session.mkdir(parents=True, exist_ok=True)
        for index in indices if indices is not None else range(1, count + 1):
            (session / f"img_{index:05d}.jpg").write_bytes(b"\xff\xd8fake\xff\xd9")
        return session

    return _make


@pytest.fixture
def fake_ffmpeg(tmp_path: Path) -> Path:
    """Executable stand-in for ffmpeg.

    Answers -version and -encoders like ffmpeg. When encoding it writes a
    few stderr lines and the output file, or exits 1 for any codec listed
    in FAKE_FFMPEG_FAIL. FAKE_FFMPEG_ENCODERS sets the listed encoders.
    """
    if sys.platform == "win32":
        pytest.skip("fake ffmpeg script needs a POSIX shebang")
    path = tmp_path / "bin" / "ffmpeg"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(FAKE_FFMPEG_SCRIPT.replace("{python}", sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
