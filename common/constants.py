"""Project-wide constants (default ports, archive layout, limits)."""

MANAGED_EXTENSION: str = ".ipa"
INBOX_DIRNAME: str = "Inbox"

DEFAULT_STORE_PATH: str = "~/.ipadrop/files"

DEFAULT_SERVER_HOST: str = "127.0.0.1"
DEFAULT_SERVER_PORT: int = 8080
SERVER_START_TIMEOUT_SECONDS: float = 5.0
SERVER_STOP_TIMEOUT_SECONDS: float = 5.0

STREAM_PIECE_SIZE: int = 64 * 1024  # 64 KiB per streamed piece

# Archive layout of an installable package
PAYLOAD_DIRNAME: str = "Payload"
BUNDLE_EXTENSION: str = ".app"
METADATA_FILENAME: str = "Info.plist"
SCRATCH_DIR_PREFIX: str = ".extract-"

# Collision avoidance: "_1" .. "_MAX", then random tokens
MAX_COLLISION_SUFFIX: int = 1000
RANDOM_SUFFIX_ATTEMPTS: int = 8
RANDOM_SUFFIX_LENGTH: int = 8

DEFAULT_UPLOAD_FIELD: str = "ipa"
DEFAULT_UPLOAD_TIMEOUT_SECONDS: int = 30

WAITING_PROGRESS_TEXT: str = "Waiting..."
