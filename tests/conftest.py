"""Shared fixtures for lnksweep tests."""

import struct

import pytest

from lnksweep import refresh
from lnksweep._constants import ANSI_CODEPAGE, LINK_CLSID

CITRIX_TARGET = (
    r"C:\Program Files (x86)\Citrix\ICA Client\SelfServicePlugin\SelfService.exe"
)
NOTEPAD_TARGET = r"C:\Windows\System32\notepad.exe"

CLSID_MY_COMPUTER = b"\xe0\x4f\xd0\x20\xea\x3a\x69\x10\xa2\xd8\x08\x00\x2b\x30\x30\x9d"


# ---------------------------------------------------------------------------
# Minimal MS-SHLLINK writer (fixtures only)
# ---------------------------------------------------------------------------
def _counted_utf16(s):
    return struct.pack("<H", len(s)) + s.encode("utf-16-le")


def _id_fs_entry(name, is_dir):
    base = bytearray()
    base.append(0x31 if is_dir else 0x32)
    base.append(0x00)
    base += struct.pack("<I", 0)  # file size
    base += struct.pack("<HH", 0, 0)  # DOS date, time
    base += struct.pack("<H", 0x10 if is_dir else 0x20)
    base += name.upper()[:8].encode(ANSI_CODEPAGE) + b"\x00"
    if len(base) % 2:
        base += b"\x00"

    uname = name.encode("utf-16-le") + b"\x00\x00"
    ext = bytearray(46)
    struct.pack_into("<H", ext, 0, 46 + len(uname) + 2)
    struct.pack_into("<H", ext, 2, 9)  # version
    struct.pack_into("<I", ext, 4, 0xBEEF0004)
    struct.pack_into("<H", ext, 16, 46)  # unicode name offset
    ext += uname
    ext += struct.pack("<H", len(base) + 2)

    body = bytes(base) + bytes(ext)
    return struct.pack("<H", len(body) + 2) + body


def _build_idlist(target):
    parts = target.split("\\")
    items = bytearray()
    root = b"\x1f\x50" + CLSID_MY_COMPUTER
    items += struct.pack("<H", len(root) + 2) + root
    drive = bytearray(23)
    drive[0] = 0x2F
    drive_str = (parts[0] + "\\").encode(ANSI_CODEPAGE)
    drive[1 : 1 + len(drive_str)] = drive_str
    items += struct.pack("<H", 25) + bytes(drive)
    segments = [p for p in parts[1:] if p]
    for i, segment in enumerate(segments):
        items += _id_fs_entry(segment, is_dir=i < len(segments) - 1)
    items += struct.pack("<H", 0)
    return struct.pack("<H", len(items)) + items


def _build_linkinfo(target):
    vol_id = bytearray()
    vol_id += struct.pack("<I", 17)  # VolumeIDSize
    vol_id += struct.pack("<I", 3)  # DRIVE_FIXED
    vol_id += struct.pack("<I", 0x4A2D5E79)
    vol_id += struct.pack("<I", 0x10)  # VolumeLabelOffset
    vol_id += b"\x00"

    base_ansi = target.encode(ANSI_CODEPAGE, errors="replace") + b"\x00"
    base_uni = target.encode("utf-16-le") + b"\x00\x00"

    hdr_size = 0x24
    base_offset = hdr_size + len(vol_id)
    suffix_offset = base_offset + len(base_ansi)
    uni_base_offset = suffix_offset + 1
    uni_suffix_offset = uni_base_offset + len(base_uni)

    info = bytearray()
    info += struct.pack("<I", 0)  # LinkInfoSize (fill later)
    info += struct.pack("<I", hdr_size)
    info += struct.pack("<I", 0x01)  # VolumeIDAndLocalBasePath
    info += struct.pack("<I", hdr_size)  # VolumeIDOffset
    info += struct.pack("<I", base_offset)
    info += struct.pack("<I", 0)  # CommonNetworkRelativeLinkOffset
    info += struct.pack("<I", suffix_offset)
    info += struct.pack("<I", uni_base_offset)
    info += struct.pack("<I", uni_suffix_offset)
    info += vol_id
    info += base_ansi
    info += b"\x00"
    info += base_uni
    info += b"\x00\x00"
    struct.pack_into("<I", info, 0, len(info))
    return bytes(info)


def _build_linkinfo_unc(unc_path):
    parts = unc_path.lstrip("\\").split("\\")
    share_name = "\\\\" + parts[0] + "\\" + parts[1]
    suffix = "\\".join(parts[2:])

    share_bytes = share_name.encode(ANSI_CODEPAGE) + b"\x00"
    share_uni = share_name.encode("utf-16-le") + b"\x00\x00"
    cnr_hdr_size = 0x1C  # extended header with Unicode offsets
    device_off = cnr_hdr_size + len(share_bytes)
    share_uni_off = device_off + 1

    cnr = bytearray()
    cnr += struct.pack("<I", 0)  # CNR size (fill later)
    cnr += struct.pack("<I", 0x02)  # ValidNetType
    cnr += struct.pack("<I", cnr_hdr_size)  # NetNameOffset
    cnr += struct.pack("<I", device_off)  # DeviceNameOffset
    cnr += struct.pack("<I", 0x00020000)  # WNNC_NET_LANMAN
    cnr += struct.pack("<I", share_uni_off)  # NetNameOffsetUnicode
    cnr += struct.pack("<I", share_uni_off + len(share_uni))
    cnr += share_bytes
    cnr += b"\x00"  # empty device name
    cnr += share_uni
    cnr += b"\x00\x00"
    struct.pack_into("<I", cnr, 0, len(cnr))

    suffix_ansi = suffix.encode(ANSI_CODEPAGE) + b"\x00"
    hdr_size = 0x1C
    suffix_offset = hdr_size + len(cnr)

    info = bytearray()
    info += struct.pack("<I", 0)  # LinkInfoSize (fill later)
    info += struct.pack("<I", hdr_size)
    info += struct.pack("<I", 0x02)  # CommonNetworkRelativeLinkAndPathSuffix
    info += struct.pack("<I", 0)  # VolumeIDOffset
    info += struct.pack("<I", 0)  # LocalBasePathOffset
    info += struct.pack("<I", hdr_size)  # CommonNetworkRelativeLinkOffset
    info += struct.pack("<I", suffix_offset)
    info += cnr
    info += suffix_ansi
    struct.pack_into("<I", info, 0, len(info))
    return bytes(info)


def _build_env_block(env_path):
    block = bytearray(788)
    struct.pack_into("<I", block, 0, 788)
    struct.pack_into("<I", block, 4, 0xA0000001)
    ansi = env_path.encode(ANSI_CODEPAGE) + b"\x00"
    block[8 : 8 + len(ansi)] = ansi
    uni = env_path.encode("utf-16-le") + b"\x00\x00"
    block[268 : 268 + len(uni)] = uni
    return bytes(block)


def make_lnk(
    target="",
    *,
    id_list="",
    env_target="",
    arguments="",
    working_dir="",
):
    """Return the bytes of a .lnk pointing at *target*.

    *target* goes into LinkInfo, *id_list* into the LinkTargetIDList and
    *env_target* into an EnvironmentVariableDataBlock.  Any of them may be
    left empty to exercise the parser's fallbacks.
    """
    flags = 0x80  # IsUnicode
    if id_list:
        flags |= 0x01
    if target:
        flags |= 0x02
    if working_dir:
        flags |= 0x10
    if arguments:
        flags |= 0x20
    if env_target:
        flags |= 0x200

    hdr = bytearray(76)
    struct.pack_into("<I", hdr, 0, 0x4C)
    hdr[4:20] = LINK_CLSID
    struct.pack_into("<I", hdr, 20, flags)
    struct.pack_into("<I", hdr, 24, 0x20)
    struct.pack_into("<I", hdr, 60, 1)  # SW_SHOWNORMAL

    out = bytearray(hdr)
    if id_list:
        out += _build_idlist(id_list)
    if target.startswith("\\\\"):
        out += _build_linkinfo_unc(target)
    elif target:
        out += _build_linkinfo(target)
    if working_dir:
        out += _counted_utf16(working_dir)
    if arguments:
        out += _counted_utf16(arguments)
    if env_target:
        out += _build_env_block(env_target)
    out += b"\x00" * 4  # terminal block
    return bytes(out)


def truncated_idlist_lnk():
    """Header promising a 100-byte IDList whose first 20-byte item is cut off."""
    hdr = bytearray(76)
    struct.pack_into("<I", hdr, 0, 0x4C)
    hdr[4:20] = LINK_CLSID
    struct.pack_into("<I", hdr, 20, 0x01)  # HasLinkTargetIDList
    return bytes(hdr) + struct.pack("<HH", 100, 20)


def write_lnk(path, target="", **kwargs):
    path.write_bytes(make_lnk(target, **kwargs))
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def citrix_lnk_bytes():
    """A launcher-generated shortcut for a published application."""
    return make_lnk(
        CITRIX_TARGET,
        id_list=CITRIX_TARGET,
        arguments="-qlaunch Notepad",
        working_dir=r"C:\Program Files (x86)\Citrix\ICA Client\SelfServicePlugin",
    )


@pytest.fixture
def notepad_lnk_bytes():
    """An ordinary shortcut that must never be removed."""
    return make_lnk(NOTEPAD_TARGET, id_list=NOTEPAD_TARGET)


@pytest.fixture
def shortcut_dir(tmp_path):
    """A desktop folder with one launcher shortcut and one ordinary shortcut."""
    desktop = tmp_path / "Desktop"
    desktop.mkdir()
    write_lnk(desktop / "A.lnk", CITRIX_TARGET, arguments="-qlaunch App")
    write_lnk(desktop / "B.lnk", NOTEPAD_TARGET)
    return desktop


class FakeProcess:
    """Stand-in for :class:`psutil.Process` as yielded by ``process_iter``."""

    def __init__(self, name, exe, pid=4242):
        self.pid = pid
        self.info = {"pid": pid, "name": name, "exe": exe}


@pytest.fixture
def processes(monkeypatch):
    """Replace the process table with a list the test controls."""
    table = []
    monkeypatch.setattr(
        refresh.psutil, "process_iter", lambda *args, **kwargs: iter(list(table))
    )
    return table


@pytest.fixture
def launches(monkeypatch):
    """Record ``subprocess.Popen`` calls made by the refresh step."""
    calls = []

    def fake_popen(command, *args, **kwargs):
        calls.append(command)
        return None

    monkeypatch.setattr(refresh.subprocess, "Popen", fake_popen)
    return calls
