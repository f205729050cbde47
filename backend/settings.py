import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Basic settings helper to read environment configuration.
# An optional backend/.env is loaded first; real environment variables win.
load_dotenv(Path(__file__).resolve().parent / ".env")


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _as_path(val: str | None) -> Optional[Path]:
    if not val:
        return None
    return Path(val).expanduser()


class Settings:
    def __init__(self) -> None:
        self.FONTS_DIR: Optional[Path] = _as_path(os.getenv("REVIEW_FONTS_DIR"))
        self.DEFAULT_FONT_FAMILY: str = os.getenv("REVIEW_DEFAULT_FONT_FAMILY", "NanumSquareRound")
        self.WATERMARK_TEXT: str = os.getenv("REVIEW_WATERMARK_TEXT", "간판의 품격")
        self.PNG_COMPRESS_LEVEL: int = max(0, min(9, _as_int(os.getenv("REVIEW_PNG_COMPRESS_LEVEL"), 6)))
        self.RENDER_WORKERS: int = max(1, _as_int(os.getenv("REVIEW_RENDER_WORKERS"), 4))
        self.DEBUG_ARTIFACTS: bool = _as_bool(os.getenv("REVIEW_DEBUG_ARTIFACTS"), False)
        self.DEBUG_DIR: Path = _as_path(os.getenv("REVIEW_DEBUG_DIR")) or (
            Path(__file__).resolve().parent / "data" / "review_debug"
        )


settings = Settings()
