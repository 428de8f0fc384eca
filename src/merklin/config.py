import os
from dotenv import load_dotenv

from merkle_tree import DEFAULT_MAX_ENTRIES

load_dotenv()

MAX_ENTRIES = os.getenv("MERKLIN_MAX_ENTRIES", str(DEFAULT_MAX_ENTRIES))
HOST = os.getenv("MERKLIN_HOST", "0.0.0.0")
PORT = os.getenv("MERKLIN_PORT", "8000")
LOG_LEVEL = os.getenv("MERKLIN_LOG_LEVEL", "INFO")


def _positive_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {value!r}") from None
    if number < 1:
        raise RuntimeError(f"{name} must be positive, got {number}")
    return number


def max_entries() -> int:
    return _positive_int("MERKLIN_MAX_ENTRIES", MAX_ENTRIES)


def port() -> int:
    return _positive_int("MERKLIN_PORT", PORT)


def validate_config() -> None:
    max_entries()
    port()
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise RuntimeError(f"MERKLIN_LOG_LEVEL is not a log level: {LOG_LEVEL}")
