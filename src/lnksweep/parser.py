"""Read the stored target of Windows .lnk files (MS-SHLLINK)."""

import ntpath
import struct
from dataclasses import dataclass
from pathlib import Path

from ._constants import (
    COMMON_NETWORK_RELATIVE_LINK,
    ENVIRONMENT_PROPS_SIG,
    EXT_SIG,
    HAS_LINK_INFO,
    HAS_LINK_TARGET_ID_LIST,
    HEADER_SIZE,
    IS_UNICODE,
    ITEM_DRIVE,
    ITEM_FS_TYPES,
    ITEM_ROOT,
    STRING_FIELDS,
    VOLUME_ID_AND_LOCAL_BASE_PATH,
)
from ._types import PathLike
from ._util import decode_ansi_at, decode_utf16le_at, read_u16, read_u32
from .errors import ShortcutResolutionError


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------
class FormatError(Exception):
    """Raised when data does not conform to the MS-SHLLINK format."""


class MissingFieldError(FormatError):
    """Raised when a required field is absent or truncated."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class LinkTarget:
    """Target-related fields of a parsed .lnk file."""

    flags: int = 0

    # IDList
    id_list_path: str = ""

    # LinkInfo
    local_base_path: str = ""
    common_path: str = ""
    network_share_name: str = ""

    # StringData
    description: str = ""
    relative_path: str = ""
    working_dir: str = ""
    arguments: str = ""
    icon_location: str = ""

    # EnvironmentVariableDataBlock
    env_target: str = ""

    # Resolved (convenience)
    target_path: str = ""


# ---------------------------------------------------------------------------
# IDList
# ---------------------------------------------------------------------------
def _fs_item_name(body: bytes) -> str:
    """Return the long name of a file-system shell item, else its short name."""
    name_start = 12
    name_end = body.find(b"\x00", name_start)
    if name_end < 0:
        name_end = len(body)
    short_name = decode_ansi_at(body, name_start, name_end)

    pad_pos = name_end + 1
    if pad_pos % 2:
        pad_pos += 1
    if pad_pos + 8 > len(body):
        return short_name

    ext = body[pad_pos:]
    ext_size = read_u16(ext, 0)
    ext_ver = read_u16(ext, 2)
    ext_sig = read_u32(ext, 4)
    if ext_sig != EXT_SIG or ext_size > len(ext):
        return short_name

    if ext_ver >= 9 and len(ext) >= 46:
        uname_off = read_u16(ext, 16)
        if uname_off < ext_size:
            return decode_utf16le_at(ext, uname_off) or short_name
    elif ext_ver >= 3 and len(ext) > 13:
        return decode_utf16le_at(ext, 12) or short_name
    return short_name


def _parse_idlist(data: bytes, start: int, end: int) -> str:
    """Rebuild a drive path from the shell items between *start* and *end*."""
    drive = ""
    parts: list[str] = []
    end = min(end, len(data))
    pos = start
    while pos + 2 <= end:
        size = read_u16(data, pos)
        if size == 0:
            break
        if size < 3 or pos + size > end:
            raise MissingFieldError(f"Truncated shell item at offset 0x{pos:04X}")
        body = data[pos + 2 : pos + size]
        type_byte = body[0]

        if type_byte == ITEM_ROOT:
            pass
        elif type_byte == ITEM_DRIVE:
            drive = decode_ansi_at(body, 1)
        elif type_byte in ITEM_FS_TYPES:
            parts.append(_fs_item_name(body))
        pos += size

    if not drive:
        return ""
    return drive.rstrip("\\") + "\\" + "\\".join(parts)


# ---------------------------------------------------------------------------
# LinkInfo
# ---------------------------------------------------------------------------
def _parse_link_info(data: bytes, pos: int, info: LinkTarget) -> int:
    """Fill the LinkInfo fields of *info*; return the offset past the section."""
    li_size = read_u32(data, pos)
    li_hdr_size = read_u32(data, pos + 4)
    li_flags = read_u32(data, pos + 8)
    li_end = pos + li_size
    if li_size < 0x1C or li_end > len(data):
        raise MissingFieldError("LinkInfo section is truncated")

    if li_flags & VOLUME_ID_AND_LOCAL_BASE_PATH:
        base_off = read_u32(data, pos + 16)
        info.local_base_path = decode_ansi_at(data, pos + base_off, li_end)

        suffix_off = read_u32(data, pos + 24)
        if suffix_off > 0 and suffix_off < li_size:
            info.common_path = decode_ansi_at(data, pos + suffix_off, li_end)

        # Unicode variants when header size >= 0x24
        if li_hdr_size >= 0x24:
            uni_base_off = read_u32(data, pos + 28)
            if 0 < uni_base_off < li_size:
                info.local_base_path = decode_utf16le_at(
                    data, pos + uni_base_off, li_size - uni_base_off
                )
            uni_suffix_off = read_u32(data, pos + 32)
            if 0 < uni_suffix_off < li_size:
                info.common_path = decode_utf16le_at(
                    data, pos + uni_suffix_off, li_size - uni_suffix_off
                )

        info.target_path = info.local_base_path + info.common_path

    elif li_flags & COMMON_NETWORK_RELATIVE_LINK:
        cnr_pos = pos + read_u32(data, pos + 20)
        cnr_size = read_u32(data, cnr_pos)
        net_name_off = read_u32(data, cnr_pos + 8)
        info.network_share_name = decode_ansi_at(
            data, cnr_pos + net_name_off, cnr_pos + cnr_size
        )

        # Unicode share name if CNR has extended header
        if net_name_off > 0x14:
            uni_net_off = read_u32(data, cnr_pos + 20)
            if 0 < uni_net_off < cnr_size:
                info.network_share_name = decode_utf16le_at(
                    data, cnr_pos + uni_net_off, cnr_size - uni_net_off
                )

        suffix_off = read_u32(data, pos + 24)
        if 0 < suffix_off < li_size:
            info.common_path = decode_ansi_at(data, pos + suffix_off, li_end)

        info.target_path = info.network_share_name
        if info.common_path:
            info.target_path = info.network_share_name + "\\" + info.common_path

    return li_end


# ---------------------------------------------------------------------------
# Main parser
# ---------------------------------------------------------------------------
def parse_lnk(source: PathLike | bytes) -> LinkTarget:
    """Parse a .lnk file and return its :class:`LinkTarget`.

    ``target_path`` is taken from LinkInfo when present, then from the
    environment-variable block (with ``%VAR%`` expanded), then from the
    LinkTargetIDList.

    Args:
        source: A file path (str or Path) or raw bytes of a .lnk file.
    """
    data = Path(source).read_bytes() if isinstance(source, (str, Path)) else source

    if len(data) < HEADER_SIZE:
        raise FormatError("Data too short for an MS-SHLLINK header (need >= 76 bytes)")

    hdr_size = read_u32(data, 0)
    if hdr_size != HEADER_SIZE:
        raise FormatError(f"Invalid header size 0x{hdr_size:08X} (expected 0x4C)")

    info = LinkTarget(flags=read_u32(data, 20))
    pos = HEADER_SIZE

    try:
        # -- IDList --
        if info.flags & HAS_LINK_TARGET_ID_LIST:
            idlist_size = read_u16(data, pos)
            pos += 2
            info.id_list_path = _parse_idlist(data, pos, pos + idlist_size)
            pos += idlist_size

        # -- LinkInfo --
        if info.flags & HAS_LINK_INFO:
            pos = _parse_link_info(data, pos, info)

        # -- StringData --
        is_unicode = bool(info.flags & IS_UNICODE)
        for flag, name in STRING_FIELDS:
            if not info.flags & flag:
                continue
            count = read_u16(data, pos)
            pos += 2
            if is_unicode:
                raw = data[pos : pos + count * 2]
                setattr(info, name, raw.decode("utf-16-le", errors="replace"))
                pos += count * 2
            else:
                setattr(info, name, decode_ansi_at(data, pos, pos + count))
                pos += count

        # -- ExtraData --
        while pos + 8 <= len(data):
            block_size = read_u32(data, pos)
            if block_size < 8:
                break
            sig = read_u32(data, pos + 4)
            if sig == ENVIRONMENT_PROPS_SIG and block_size >= 268:
                info.env_target = decode_ansi_at(data, pos + 8, pos + 268)
                if block_size >= 788:
                    uni = decode_utf16le_at(data, pos + 268, 520)
                    if uni:
                        info.env_target = uni
            pos += block_size
    except (struct.error, IndexError) as exc:
        raise MissingFieldError(f"Unexpected end of data at offset 0x{pos:04X}") from exc

    if not info.target_path and info.env_target:
        info.target_path = ntpath.expandvars(info.env_target)
    if not info.target_path:
        info.target_path = info.id_list_path

    return info


def resolve_target(path: PathLike) -> str:
    """Return the stored target path of the shortcut at *path*.

    This is the default resolver used by a cleanup run.  Every failure is
    reported as :class:`~lnksweep.errors.ShortcutResolutionError` so the
    caller can skip the file and carry on.
    """
    try:
        info = parse_lnk(Path(path))
    except OSError as exc:
        raise ShortcutResolutionError(
            f"Cannot read shortcut: {exc.strerror or exc}", path
        ) from exc
    except FormatError as exc:
        raise ShortcutResolutionError(
            f"{type(exc).__name__}: {exc}", path
        ) from exc

    if not info.target_path:
        raise ShortcutResolutionError("Shortcut has no target path", path)
    return info.target_path


def format_target(path: PathLike, info: LinkTarget) -> str:
    """Return a human-readable summary of where *info* points."""
    lines = [f"FILE: {path}"]
    lines.append(f"  TargetPath:      {info.target_path or '(empty)'}")
    if info.arguments:
        lines.append(f"  Arguments:       {info.arguments}")
    if info.working_dir:
        lines.append(f"  WorkingDir:      {info.working_dir}")
    if info.description:
        lines.append(f"  Description:     {info.description}")
    if info.env_target:
        lines.append(f"  EnvTarget:       {info.env_target}")
    return "\n".join(lines)
