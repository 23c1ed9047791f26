"""MS-SHLLINK layout constants and run defaults shared across lnksweep."""

# ---------------------------------------------------------------------------
# ANSI code page
# ---------------------------------------------------------------------------
# ANSI string fields are written with the creating system's code page
# (GetACP()).  CP-1252 covers Western/English Windows and is a strict superset
# of ASCII, which is all the launcher ever writes into its shortcuts.
ANSI_CODEPAGE = "cp1252"

# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------
HEADER_SIZE = 0x4C
LINK_CLSID = b"\x01\x14\x02\x00\x00\x00\x00\x00\xc0\x00\x00\x00\x00\x00\x00\x46"

# ---------------------------------------------------------------------------
# LinkFlags (MS-SHLLINK 2.1.1)
# ---------------------------------------------------------------------------
HAS_LINK_TARGET_ID_LIST = 0x00000001
HAS_LINK_INFO = 0x00000002
HAS_NAME = 0x00000004
HAS_RELATIVE_PATH = 0x00000008
HAS_WORKING_DIR = 0x00000010
HAS_ARGUMENTS = 0x00000020
HAS_ICON_LOCATION = 0x00000040
IS_UNICODE = 0x00000080

# StringData fields in on-disk order
STRING_FIELDS = (
    (HAS_NAME, "description"),
    (HAS_RELATIVE_PATH, "relative_path"),
    (HAS_WORKING_DIR, "working_dir"),
    (HAS_ARGUMENTS, "arguments"),
    (HAS_ICON_LOCATION, "icon_location"),
)

# ---------------------------------------------------------------------------
# LinkInfo flags
# ---------------------------------------------------------------------------
VOLUME_ID_AND_LOCAL_BASE_PATH = 0x1
COMMON_NETWORK_RELATIVE_LINK = 0x2

# ---------------------------------------------------------------------------
# Shell item types and extension block
# ---------------------------------------------------------------------------
ITEM_ROOT = 0x1F
ITEM_DRIVE = 0x2F
ITEM_FS_TYPES = (0x31, 0x32, 0x35, 0x36)
EXT_SIG = 0xBEEF0004

# ---------------------------------------------------------------------------
# ExtraData
# ---------------------------------------------------------------------------
ENVIRONMENT_PROPS_SIG = 0xA0000001

# ---------------------------------------------------------------------------
# Run defaults
# ---------------------------------------------------------------------------
SHORTCUT_SUFFIX = ".lnk"

DEFAULT_PATTERN = r"Citrix.*ICA.*SelfServicePlugin"
DEFAULT_LOG_FILE = r"C:\Logs\CitrixSSPCleanup.log"

# Relative to the user's profile directory
_START_MENU = ("AppData", "Roaming", "Microsoft", "Windows", "Start Menu")
DEFAULT_PROFILE_DIRS = (
    ("Desktop",),
    _START_MENU,
    (*_START_MENU, "Programs"),
    (*_START_MENU, "Programs", "Citrix"),
    (*_START_MENU, "Programs", "Published Applications"),
)

LAUNCHER_PROCESS = "SelfServicePlugin"
LAUNCHER_EXECUTABLE = "SelfService.exe"
POLL_ARGUMENT = "-poll"
