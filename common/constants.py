"""Project-wide constants (e.g., batch size, stream piece size, default paths)."""

BATCH_SIZE_BYTES: int = 32 * 1024 * 1024  # 32 MiB cumulative asset size per batch
DEFAULT_THREADS: int = 1

STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

CHUNK_FILE_SUFFIX: str = ".chk"
DEFAULT_CHUNK_STORAGE_PATH: str = "/app/data/chunks"
DEFAULT_OUTPUT_PATH: str = "/app/data/backups"
DEFAULT_API_URL: str = "http://localhost:8000"
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 30.0
