import os
from dotenv import load_dotenv

from applytrack.utils.exceptions import ConfigurationError

load_dotenv()


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer", config_key=key, config_value=raw, cause=e) from e


RESUME_DIR = os.getenv("RESUME_DIR", "./data/resumes")
REPORT_DIR = os.getenv("REPORT_DIR", "./reports")

# 0 means "one worker per CPU"
BATCH_WORKERS = _int_env("BATCH_WORKERS", 0)
DISPLAY_TOP_N = _int_env("DISPLAY_TOP_N", 10)
MAX_BULK_RESUMES = _int_env("MAX_BULK_RESUMES", 50)


def batch_workers() -> int:
    return BATCH_WORKERS if BATCH_WORKERS > 0 else (os.cpu_count() or 1)
