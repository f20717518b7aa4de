"""Crash dump reader.

This module defines the dump reader interface consumed by the architecture
resolver and the built-in benchmarks, along with a file-based implementation
that understands three dump container formats:

- Windows minidumps (``MDMP``), via the SystemInfo stream
- ELF core files, via ``EI_CLASS``
- Mach-O core files, via the header magic

Only the structures needed to recover the pointer width and enumerate the
top-level regions are parsed.
"""

from __future__ import annotations

import logging
import mmap
import os
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

from dumpbench.exceptions import DumpFileNotFound, DumpLoadFailed

logger = logging.getLogger(__name__)

MINIDUMP_SIGNATURE = b"MDMP"
ELF_MAGIC = b"\x7fELF"

MINIDUMP_HEADER = struct.Struct("<IIIIIIQ")
MINIDUMP_DIRECTORY_ENTRY = struct.Struct("<III")
MINIDUMP_SYSTEM_INFO_STREAM = 7

# MINIDUMP_SYSTEM_INFO.ProcessorArchitecture -> pointer size
PROCESSOR_ARCHITECTURE_POINTER_SIZE = {
    0: 4,  # INTEL
    5: 4,  # ARM
    6: 8,  # IA64
    9: 8,  # AMD64
    12: 8,  # ARM64
}

ET_CORE = 4
ELFCLASS32 = 1
ELFCLASS64 = 2

MH_MAGIC = 0xFEEDFACE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM = 0xCEFAEDFE
MH_CIGAM_64 = 0xCFFAEDFE
MH_CORE = 4


class DumpFormat(str, Enum):
    """Supported dump container formats."""

    MINIDUMP = "minidump"
    ELF_CORE = "elf_core"
    MACHO_CORE = "macho_core"


@dataclass
class CacheOptions:
    """Options controlling how dump contents are read.

    Attributes:
        use_os_memory_features: Memory-map the dump instead of using
            buffered file reads.
    """

    use_os_memory_features: bool = False


@dataclass(frozen=True)
class DumpRegion:
    """A top-level region of a dump file.

    Attributes:
        kind: Format-specific type tag (stream type, p_type, or load command).
        offset: File offset of the region data.
        size: Size of the region data in the file.
    """

    kind: int
    offset: int
    size: int


class _ByteSource(ABC):
    """Random-access view over the bytes of a dump file."""

    size: int

    @abstractmethod
    def read(self, offset: int, length: int) -> bytes: ...

    @abstractmethod
    def close(self) -> None: ...


class _BufferedSource(_ByteSource):
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle
        self.size = os.fstat(handle.fileno()).st_size

    def read(self, offset: int, length: int) -> bytes:
        if offset < 0 or length <= 0 or offset >= self.size:
            return b""
        self._handle.seek(offset)
        return self._handle.read(length)

    def close(self) -> None:
        self._handle.close()


class _MappedSource(_ByteSource):
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle
        self._map = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
        self.size = len(self._map)

    def read(self, offset: int, length: int) -> bytes:
        if offset < 0 or length <= 0:
            return b""
        return self._map[offset : offset + length]

    def close(self) -> None:
        self._map.close()
        self._handle.close()


class DumpTarget:
    """An opened dump file.

    Use as a context manager so the underlying file is released:

        >>> with FileDumpReader().open("app.dmp") as target:
        ...     print(target.pointer_size)
    """

    def __init__(
        self,
        path: Path,
        dump_format: DumpFormat,
        pointer_size: int,
        regions: list[DumpRegion],
        source: _ByteSource,
    ) -> None:
        self.path = path
        self.format = dump_format
        self.pointer_size = pointer_size
        self._regions = regions
        self._source = source

    @property
    def size(self) -> int:
        """Size of the dump file in bytes."""
        return self._source.size

    def regions(self) -> list[DumpRegion]:
        """Return the top-level regions in file order."""
        return list(self._regions)

    def read(self, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes at ``offset``."""
        return self._source.read(offset, length)

    def close(self) -> None:
        self._source.close()

    def __enter__(self) -> DumpTarget:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class DumpReader(ABC):
    """Interface for opening crash dumps."""

    @abstractmethod
    def open(
        self,
        path: str | os.PathLike[str],
        cache_options: CacheOptions | None = None,
    ) -> DumpTarget:
        """Open a dump file.

        Args:
            path: Path of the dump.
            cache_options: How the contents should be read.

        Returns:
            An opened DumpTarget.

        Raises:
            DumpFileNotFound: If the path does not reference a file.
            DumpLoadFailed: If the file is unreadable, truncated or corrupt.
        """


class FileDumpReader(DumpReader):
    """Dump reader for minidump, ELF core and Mach-O core files."""

    def open(
        self,
        path: str | os.PathLike[str],
        cache_options: CacheOptions | None = None,
    ) -> DumpTarget:
        options = cache_options or CacheOptions()
        dump_path = Path(path)
        if not dump_path.is_file():
            raise DumpFileNotFound(str(path))

        try:
            handle = open(dump_path, "rb")
        except OSError as e:
            raise DumpLoadFailed(str(path), str(e)) from e

        try:
            source: _ByteSource = (
                _MappedSource(handle) if options.use_os_memory_features else _BufferedSource(handle)
            )
        except (OSError, ValueError) as e:
            # mmap refuses empty files
            handle.close()
            raise DumpLoadFailed(str(path), f"cannot map file: {e}") from e

        try:
            dump_format, pointer_size, regions = _parse(source, str(path))
        except DumpLoadFailed:
            source.close()
            raise
        except OSError as e:
            source.close()
            raise DumpLoadFailed(str(path), str(e)) from e

        logger.debug(
            f"Opened {dump_format.value} dump {dump_path} "
            f"(pointer size {pointer_size}, {len(regions)} regions)"
        )
        return DumpTarget(dump_path, dump_format, pointer_size, regions, source)


def _read_exact(source: _ByteSource, offset: int, length: int, path: str, what: str) -> bytes:
    data = source.read(offset, length)
    if len(data) < length:
        raise DumpLoadFailed(path, f"truncated {what} at offset {offset:#x}")
    return data


def _parse(source: _ByteSource, path: str) -> tuple[DumpFormat, int, list[DumpRegion]]:
    magic = source.read(0, 4)
    if len(magic) < 4:
        raise DumpLoadFailed(path, "file is too small to be a dump")

    if magic == MINIDUMP_SIGNATURE:
        return (DumpFormat.MINIDUMP, *_parse_minidump(source, path))
    if magic == ELF_MAGIC:
        return (DumpFormat.ELF_CORE, *_parse_elf_core(source, path))
    if struct.unpack("<I", magic)[0] in (MH_MAGIC, MH_MAGIC_64, MH_CIGAM, MH_CIGAM_64):
        return (DumpFormat.MACHO_CORE, *_parse_macho_core(source, path))

    raise DumpLoadFailed(path, "unrecognized dump format")


def _parse_minidump(source: _ByteSource, path: str) -> tuple[int, list[DumpRegion]]:
    header = _read_exact(source, 0, MINIDUMP_HEADER.size, path, "minidump header")
    _, _, stream_count, directory_rva, _, _, _ = MINIDUMP_HEADER.unpack(header)

    directory = _read_exact(
        source,
        directory_rva,
        stream_count * MINIDUMP_DIRECTORY_ENTRY.size,
        path,
        "stream directory",
    )
    regions = [
        DumpRegion(kind=stream_type, offset=rva, size=data_size)
        for stream_type, data_size, rva in MINIDUMP_DIRECTORY_ENTRY.iter_unpack(directory)
    ]

    system_info = next((r for r in regions if r.kind == MINIDUMP_SYSTEM_INFO_STREAM), None)
    if system_info is None:
        raise DumpLoadFailed(path, "minidump has no SystemInfo stream")

    raw = _read_exact(source, system_info.offset, 2, path, "SystemInfo stream")
    architecture = struct.unpack("<H", raw)[0]
    pointer_size = PROCESSOR_ARCHITECTURE_POINTER_SIZE.get(architecture)
    if pointer_size is None:
        raise DumpLoadFailed(path, f"unsupported processor architecture {architecture}")

    return pointer_size, regions


def _parse_elf_core(source: _ByteSource, path: str) -> tuple[int, list[DumpRegion]]:
    ident = _read_exact(source, 0, 16, path, "ELF identification")
    elf_class, elf_data = ident[4], ident[5]

    if elf_data == 1:
        endian = "<"
    elif elf_data == 2:
        endian = ">"
    else:
        raise DumpLoadFailed(path, f"invalid ELF data encoding {elf_data}")

    if elf_class == ELFCLASS32:
        pointer_size = 4
        header = struct.Struct(endian + "HHIIIIIHHH")
        phdr = struct.Struct(endian + "IIIIIIII")
    elif elf_class == ELFCLASS64:
        pointer_size = 8
        header = struct.Struct(endian + "HHIQQQIHHH")
        phdr = struct.Struct(endian + "IIQQQQQQ")
    else:
        raise DumpLoadFailed(path, f"invalid ELF class {elf_class}")

    raw = _read_exact(source, 16, header.size, path, "ELF header")
    e_type, _, _, _, e_phoff, _, _, _, e_phentsize, e_phnum = header.unpack(raw)
    if e_type != ET_CORE:
        raise DumpLoadFailed(path, f"ELF file is not a core dump (e_type={e_type})")
    if e_phnum and e_phentsize < phdr.size:
        raise DumpLoadFailed(path, f"invalid program header size {e_phentsize}")

    table = _read_exact(source, e_phoff, e_phnum * e_phentsize, path, "program header table")
    regions = []
    for index in range(e_phnum):
        fields = phdr.unpack_from(table, index * e_phentsize)
        if pointer_size == 4:
            p_type, p_offset, _, _, p_filesz = fields[:5]
        else:
            p_type, _, p_offset, _, _, p_filesz = fields[:6]
        regions.append(DumpRegion(kind=p_type, offset=p_offset, size=p_filesz))

    return pointer_size, regions


def _parse_macho_core(source: _ByteSource, path: str) -> tuple[int, list[DumpRegion]]:
    magic = struct.unpack("<I", source.read(0, 4))[0]
    endian = "<" if magic in (MH_MAGIC, MH_MAGIC_64) else ">"
    is_64 = magic in (MH_MAGIC_64, MH_CIGAM_64)
    header_size = 32 if is_64 else 28

    raw = _read_exact(source, 0, header_size, path, "Mach-O header")
    _, _, _, filetype, ncmds, _, _ = struct.unpack_from(endian + "IiiIIII", raw)
    if filetype != MH_CORE:
        raise DumpLoadFailed(path, f"Mach-O file is not a core dump (filetype={filetype})")

    command = struct.Struct(endian + "II")
    regions = []
    offset = header_size
    for _ in range(ncmds):
        cmd, cmdsize = command.unpack(_read_exact(source, offset, command.size, path, "load command"))
        if cmdsize < command.size:
            raise DumpLoadFailed(path, f"invalid load command size {cmdsize}")
        regions.append(DumpRegion(kind=cmd, offset=offset, size=cmdsize))
        offset += cmdsize

    return (8 if is_64 else 4), regions
