#!/usr/bin/env python3
"""
# Course Engine
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

tar_archive.py - Minimal ustar + gzip codec for OLX course archives

Open edX Studio imports a gzip-compressed tar whose entries all live under
one top-level directory (normally "course/"). This module writes exactly
that shape and reads it back. It handles regular files and directories
only; links, sparse files and multi-volume archives are out of its reach.

Usage:
    from course_engine.tar_archive import pack_entries, unpack_entries

    blob = pack_entries({"course.xml": "<course/>\\n"})
    files = unpack_entries(blob)   # {"course.xml": "<course/>\\n"}
"""

from __future__ import annotations

import gzip
import time
import zlib
from typing import Dict, List, Mapping, Optional, Tuple

from course_engine.errors import path_too_long_error, unreadable_archive_error

BLOCK_SIZE = 512

NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
UID_FIELD = (108, 8)
GID_FIELD = (116, 8)
SIZE_FIELD = (124, 12)
MTIME_FIELD = (136, 12)
CHECKSUM_FIELD = (148, 8)
TYPEFLAG_OFFSET = 156
MAGIC_FIELD = (257, 6)
VERSION_FIELD = (263, 2)
PREFIX_FIELD = (345, 155)

DIR_MODE = "0000755"
FILE_MODE = "0000644"
OWNER_ID = "0001000"

REGULAR_FILE = ord("0")
DIRECTORY = ord("5")


# ============================================================================
# Headers
# ============================================================================

def _write_field(header: bytearray, field: Tuple[int, int], value: bytes):
    offset, length = field
    chunk = value[:length]
    header[offset:offset + len(chunk)] = chunk


def _read_field(header: bytes, field: Tuple[int, int]) -> str:
    offset, length = field
    raw = header[offset:offset + length]
    end = raw.find(b"\0")
    if end >= 0:
        raw = raw[:end]
    return raw.decode("utf-8", errors="replace")


def checksum_of(header: bytes) -> int:
    """Unsigned byte sum of a header with the checksum field counted as spaces."""
    offset, length = CHECKSUM_FIELD
    return sum(header[:offset]) + 0x20 * length + sum(header[offset + length:BLOCK_SIZE])


def verify_header(header: bytes) -> bool:
    """True when the stored checksum matches the recomputed one."""
    stored = _read_field(header, CHECKSUM_FIELD).strip(" \0")
    try:
        return int(stored, 8) == checksum_of(header)
    except ValueError:
        return False


def _split_path(path: str) -> Tuple[str, str]:
    """
    Split a long path into (prefix, name) for the ustar prefix field.

    Raises ArchiveWriteError when no '/' gives a name of at most 100 bytes
    and a prefix of at most 155 bytes.
    """
    encoded = path.encode("utf-8")
    if len(encoded) <= NAME_FIELD[1]:
        return "", path

    # A trailing slash belongs to the name part of a directory entry
    search_end = len(path) - 1 if path.endswith("/") else len(path)
    for i, ch in enumerate(path[:search_end]):
        if ch != "/" or i == 0:
            continue
        prefix, name = path[:i], path[i + 1:]
        if len(prefix.encode("utf-8")) <= PREFIX_FIELD[1] and len(name.encode("utf-8")) <= NAME_FIELD[1]:
            return prefix, name

    raise path_too_long_error(path)


def make_header(path: str, size: int, is_dir: bool, mtime: int) -> bytes:
    """Build one 512-byte ustar header block."""
    header = bytearray(BLOCK_SIZE)
    prefix, name = _split_path(path)

    _write_field(header, NAME_FIELD, name.encode("utf-8"))
    _write_field(header, MODE_FIELD, (DIR_MODE if is_dir else FILE_MODE).encode("ascii"))
    _write_field(header, UID_FIELD, OWNER_ID.encode("ascii"))
    _write_field(header, GID_FIELD, OWNER_ID.encode("ascii"))
    _write_field(header, SIZE_FIELD, format(size, "011o").encode("ascii"))
    _write_field(header, MTIME_FIELD, format(mtime, "011o").encode("ascii"))
    header[TYPEFLAG_OFFSET] = DIRECTORY if is_dir else REGULAR_FILE
    _write_field(header, MAGIC_FIELD, b"ustar")
    _write_field(header, VERSION_FIELD, b"  ")
    if prefix:
        _write_field(header, PREFIX_FIELD, prefix.encode("utf-8"))

    checksum = checksum_of(header)
    _write_field(header, CHECKSUM_FIELD, format(checksum, "06o").encode("ascii") + b"\0 ")
    return bytes(header)


def _padded(data: bytes) -> bytes:
    remainder = len(data) % BLOCK_SIZE
    if remainder:
        data += b"\0" * (BLOCK_SIZE - remainder)
    return data


# ============================================================================
# Pack
# ============================================================================

def directory_entries(paths) -> List[str]:
    """Every distinct parent directory of paths, sorted, with a trailing '/'."""
    dirs = set()
    for path in paths:
        parts = path.split("/")
        for i in range(1, len(parts)):
            dirs.add("/".join(parts[:i]) + "/")
    return sorted(dirs)


def pack_tar(entries: Mapping[str, str], root: str = "course", mtime: Optional[int] = None) -> bytes:
    """Assemble an uncompressed ustar stream from an entry map."""
    stamp = int(time.time()) if mtime is None else int(mtime)
    root = root.strip("/")
    files = [(f"{root}/{path}" if root else path, text) for path, text in entries.items()]

    blocks = []
    for directory in directory_entries(path for path, _ in files):
        blocks.append(make_header(directory, 0, True, stamp))

    for path, text in files:
        data = text.encode("utf-8")
        blocks.append(make_header(path, len(data), False, stamp))
        blocks.append(_padded(data))

    blocks.append(b"\0" * (BLOCK_SIZE * 2))
    return b"".join(blocks)


def pack_entries(entries: Mapping[str, str], root: str = "course", mtime: Optional[int] = None) -> bytes:
    """
    Pack an entry map into a .tar.gz archive.

    Args:
        entries: Relative posix path -> UTF-8 text
        root: Top-level directory every entry is placed under
        mtime: Modification time for every header (defaults to now)

    Returns:
        gzip-compressed ustar bytes
    """
    tar = pack_tar(entries, root=root, mtime=mtime)
    return gzip.compress(tar, mtime=mtime)


# ============================================================================
# Unpack
# ============================================================================

def _parse_size(header: bytes) -> int:
    text = _read_field(header, SIZE_FIELD).replace("\0", "").strip()
    try:
        return int(text, 8)
    except ValueError:
        return 0


def _strip_root(path: str) -> str:
    """Drop the first path component; paths without a separator are kept."""
    slash = path.find("/")
    if slash > 0:
        return path[slash + 1:]
    return path


def unpack_tar(data: bytes) -> Dict[str, str]:
    """Walk an uncompressed ustar stream and return its regular files."""
    files: Dict[str, str] = {}
    offset = 0

    while offset + BLOCK_SIZE <= len(data):
        header = data[offset:offset + BLOCK_SIZE]
        if not any(header):
            break

        name = _read_field(header, NAME_FIELD)
        if not name:
            break

        prefix = _read_field(header, PREFIX_FIELD)
        full_name = f"{prefix}/{name}" if prefix else name
        size = _parse_size(header)
        typeflag = header[TYPEFLAG_OFFSET]
        offset += BLOCK_SIZE

        if typeflag in (0, REGULAR_FILE):
            content = data[offset:offset + size]
            if len(content) < size:
                print(f"[archive:warn] Truncated entry {full_name}: "
                      f"expected {size} bytes, found {len(content)}")
            path = _strip_root(full_name)
            if path:
                files[path] = content.decode("utf-8", errors="replace")

        offset += -(-size // BLOCK_SIZE) * BLOCK_SIZE

    return files


def unpack_entries(data: bytes) -> Dict[str, str]:
    """
    Extract every regular file from a .tar.gz archive.

    The archive's top-level directory is removed from each path. A stream
    that cannot be decompressed raises ArchiveReadError; a tar stream that
    ends early yields whatever entries were read before the break.
    """
    try:
        tar = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise unreadable_archive_error(data, cause=e)
    return unpack_tar(tar)
