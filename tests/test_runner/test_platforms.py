"""Tests for platform strategies and toolchain selection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from dumpbench.exceptions import ErrorKind, RuntimeNotFound
from dumpbench.runner.platforms import (
    HostPlatform,
    InterpreterToolchainLocator,
    MultiArchPlatform,
    PlatformTarget,
    SingleArchPlatform,
    Toolchain,
    default_program_dirs,
    strategy_for,
)


@pytest.fixture
def program_dirs(tmp_path: Path) -> dict[int, Path]:
    """Fake 32-bit and 64-bit program directories, each with a runtime."""
    dirs = {4: tmp_path / "Program Files (x86)", 8: tmp_path / "Program Files"}
    for base in dirs.values():
        runtime = base / "Python" / "python.exe"
        runtime.parent.mkdir(parents=True)
        runtime.write_text("")
    return dirs


class TestHostPlatform:
    """Tests for HostPlatform detection."""

    @pytest.mark.parametrize(
        "system,expected",
        [
            ("Windows", HostPlatform.WINDOWS),
            ("Linux", HostPlatform.LINUX),
            ("Darwin", HostPlatform.MACOS),
            ("SunOS", HostPlatform.UNKNOWN),
        ],
    )
    def test_detect(self, system: str, expected: HostPlatform) -> None:
        with patch("dumpbench.runner.platforms.platform.system", return_value=system):
            assert HostPlatform.detect() == expected


class TestToolchain:
    """Tests for Toolchain descriptors."""

    def test_default(self) -> None:
        toolchain = Toolchain.default()

        assert toolchain.is_default
        assert toolchain.runtime_path is None

    @pytest.mark.parametrize(
        "pointer_size,target", [(4, PlatformTarget.X86), (8, PlatformTarget.X64)]
    )
    def test_interpreter_locator(self, pointer_size: int, target: PlatformTarget) -> None:
        toolchain = InterpreterToolchainLocator().locate(Path("/rt/python.exe"), pointer_size)

        assert toolchain.platform_target == target
        assert toolchain.name == f"cpython-{target.value}"
        assert toolchain.runtime_path == Path("/rt/python.exe")
        assert not toolchain.is_default


class TestMultiArchPlatform:
    """Tests for the multi-architecture strategy."""

    def test_32bit_uses_32bit_program_directory(self, program_dirs: dict[int, Path]) -> None:
        toolchain = MultiArchPlatform(program_dirs).select_toolchain(4, None)

        assert toolchain.runtime_path == program_dirs[4] / "Python" / "python.exe"
        assert toolchain.platform_target == PlatformTarget.X86

    def test_64bit_uses_64bit_program_directory(self, program_dirs: dict[int, Path]) -> None:
        toolchain = MultiArchPlatform(program_dirs).select_toolchain(8, None)

        assert toolchain.runtime_path == program_dirs[8] / "Python" / "python.exe"
        assert toolchain.platform_target == PlatformTarget.X64

    def test_existing_override_wins(self, program_dirs: dict[int, Path], tmp_path: Path) -> None:
        override = tmp_path / "custom" / "python.exe"
        override.parent.mkdir()
        override.write_text("")

        toolchain = MultiArchPlatform(program_dirs).select_toolchain(8, str(override))

        assert toolchain.runtime_path == override

    def test_missing_override_does_not_fall_back(
        self, program_dirs: dict[int, Path], tmp_path: Path
    ) -> None:
        """A missing override fails even though the standard runtime exists."""
        missing = str(tmp_path / "nope" / "python.exe")

        with pytest.raises(RuntimeNotFound) as exc_info:
            MultiArchPlatform(program_dirs).select_toolchain(8, missing)

        assert exc_info.value.kind == ErrorKind.RUNTIME_NOT_FOUND
        assert exc_info.value.path == missing

    def test_blank_override_uses_standard_directory(self, program_dirs: dict[int, Path]) -> None:
        toolchain = MultiArchPlatform(program_dirs).select_toolchain(4, "  ")

        assert toolchain.runtime_path == program_dirs[4] / "Python" / "python.exe"

    def test_missing_standard_runtime(self, tmp_path: Path) -> None:
        dirs = {4: tmp_path / "x86", 8: tmp_path / "x64"}

        with pytest.raises(RuntimeNotFound, match="Could not find"):
            MultiArchPlatform(dirs).select_toolchain(8, None)

    def test_custom_runtime_names(self, tmp_path: Path) -> None:
        runtime = tmp_path / "x64" / "dotnet" / "dotnet.exe"
        runtime.parent.mkdir(parents=True)
        runtime.write_text("")

        strategy = MultiArchPlatform(
            {4: tmp_path / "x86", 8: tmp_path / "x64"},
            directory_name="dotnet",
            binary_name="dotnet.exe",
        )

        assert strategy.resolve_runtime_path(8, None) == runtime


class TestSingleArchPlatform:
    """Tests for the single-architecture strategy."""

    @pytest.mark.parametrize("pointer_size", [4, 8])
    def test_always_default(self, pointer_size: int) -> None:
        assert SingleArchPlatform().select_toolchain(pointer_size, None) == Toolchain.default()

    def test_override_ignored(self) -> None:
        toolchain = SingleArchPlatform().select_toolchain(8, "/does/not/exist")

        assert toolchain.is_default


class TestStrategyFor:
    """Tests for strategy selection by host."""

    def test_windows_is_multi_arch(self) -> None:
        assert isinstance(strategy_for(HostPlatform.WINDOWS), MultiArchPlatform)

    @pytest.mark.parametrize(
        "host", [HostPlatform.LINUX, HostPlatform.MACOS, HostPlatform.UNKNOWN]
    )
    def test_others_are_single_arch(self, host: HostPlatform) -> None:
        assert isinstance(strategy_for(host), SingleArchPlatform)


class TestDefaultProgramDirs:
    """Tests for standard install directory lookup."""

    def test_from_environment(self) -> None:
        dirs = default_program_dirs(
            {"ProgramFiles(x86)": "D:\\PF86", "ProgramFiles": "D:\\PF"}
        )

        assert dirs == {4: Path("D:\\PF86"), 8: Path("D:\\PF")}

    def test_prefers_program_w6432(self) -> None:
        dirs = default_program_dirs(
            {"ProgramFiles": "D:\\PF86", "ProgramW6432": "D:\\PF"}
        )

        assert dirs[8] == Path("D:\\PF")

    def test_fallback_defaults(self) -> None:
        dirs = default_program_dirs({})

        assert dirs[4] == Path(r"C:\Program Files (x86)")
        assert dirs[8] == Path(r"C:\Program Files")
