"""Configuration constants for the static file server."""

HOST: str = "0.0.0.0"
PORT: int = 8080
ROOT_DIR: str = "."
INDEX_FILE: str = "index.html"
SERVER_NAME: str = "static-file-server/1.0"

BUFFER_SIZE: int = 4096
MAX_TARGET_LENGTH: int = 8192
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 65_536

SOCKET_TIMEOUT_SECS: float = 5.0
MAX_KEEPALIVE_REQUESTS: int = 100
DRAIN_TIMEOUT_SECS: float = 5.0

WORKER_COUNT: int = 8
REQUEST_QUEUE_SIZE: int = 64
LISTEN_BACKLOG: int = 128

LOG_LEVEL: str = "INFO"
