########## ini_config.py

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

INI_DEFAULT_NAME = "content_reviewer.ini"

DEFAULT_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
DEFAULT_EXTENSIONS = ("pdf", "doc", "docx")


@dataclass(frozen=True)
class AppSettings:
    backend_url: str = "http://localhost:3001"
    backend_timeout_seconds: float = 30.0

    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_types: Tuple[str, ...] = DEFAULT_MIME_TYPES
    allowed_extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS

    text_min_length: int = 10
    text_max_length: int = 50_000

    poll_interval_seconds: float = 2.0
    poll_max_attempts: int = 60

    # Direct-to-storage uploader; empty url disables the flow
    uploader_url: str = ""
    uploader_s3_bucket: str = ""
    uploader_s3_path: str = "uploads"

    session_cache_engine: str = "memory"
    session_secret_key: str = "change-me"
    session_redis_url: str = "redis://localhost:6379/0"
    session_ttl_seconds: int = 4 * 60 * 60

    log_level: str = "INFO"
    log_file: Optional[Path] = None
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 3

    flask_host: str = "127.0.0.1"
    flask_port: int = 3000
    flask_debug: bool = False


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(x.strip().lower().lstrip(".") for x in (raw or "").split(",") if x.strip())


class IniConfig:
    """
    Adapter around ConfigParser.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    @property
    def ini_path(self) -> Path:
        return self._ini_path

    def _str(self, section: str, key: str, fallback: str) -> str:
        return (self._cfg.get(section, key, fallback=fallback) or "").strip()

    def load_settings(self) -> AppSettings:
        d = AppSettings()

        # Backend
        backend_url = self._str("backend", "base_url", d.backend_url).rstrip("/") or d.backend_url
        backend_timeout = self._cfg.getfloat("backend", "timeout_seconds", fallback=d.backend_timeout_seconds)

        # Uploads
        max_upload_bytes = self._cfg.getint("uploads", "max_bytes", fallback=d.max_upload_bytes)
        mime_types = _split_list(self._str("uploads", "allowed_mime_types", "")) or d.allowed_mime_types
        extensions = _split_list(self._str("uploads", "allowed_extensions", "")) or d.allowed_extensions

        # Text
        text_min = self._cfg.getint("text", "min_length", fallback=d.text_min_length)
        text_max = self._cfg.getint("text", "max_length", fallback=d.text_max_length)

        # Polling
        poll_interval = self._cfg.getfloat("polling", "interval_seconds", fallback=d.poll_interval_seconds)
        poll_max = self._cfg.getint("polling", "max_attempts", fallback=d.poll_max_attempts)

        # Uploader (optional)
        uploader_url = self._str("uploader", "url", "").rstrip("/")
        uploader_bucket = self._str("uploader", "s3_bucket", "")
        uploader_path = self._str("uploader", "s3_path", d.uploader_s3_path)

        # Session
        cache_engine = self._str("session", "cache_engine", d.session_cache_engine).lower() or d.session_cache_engine
        secret_key = self._str("session", "secret_key", "") or os.getenv("SESSION_SECRET_KEY", "") or d.session_secret_key
        redis_url = self._str("session", "redis_url", d.session_redis_url) or d.session_redis_url
        ttl_seconds = self._cfg.getint("session", "ttl_seconds", fallback=d.session_ttl_seconds)

        # Logging
        log_level = self._str("logging", "level", d.log_level).upper() or d.log_level
        log_file_raw = self._str("logging", "file", "")
        log_file = Path(os.path.expandvars(os.path.expanduser(log_file_raw))).resolve() if log_file_raw else None
        log_max_bytes = self._cfg.getint("logging", "max_bytes", fallback=d.log_max_bytes)
        log_backup_count = self._cfg.getint("logging", "backup_count", fallback=d.log_backup_count)

        # Flask
        flask_host = self._str("flask", "host", d.flask_host) or d.flask_host
        flask_port = self._cfg.getint("flask", "port", fallback=d.flask_port)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=d.flask_debug)

        # Validate
        if text_min < 0 or text_max < text_min:
            raise ValueError(f"Invalid [text] bounds: min_length={text_min}, max_length={text_max}")
        if max_upload_bytes <= 0:
            raise ValueError(f"Invalid [uploads] max_bytes: {max_upload_bytes}")
        if poll_max < 1 or poll_interval <= 0:
            raise ValueError(f"Invalid [polling] policy: interval={poll_interval}, max_attempts={poll_max}")
        if cache_engine not in ("memory", "redis"):
            raise ValueError(f"Unknown [session] cache_engine: {cache_engine}")

        return AppSettings(
            backend_url=backend_url,
            backend_timeout_seconds=backend_timeout,
            max_upload_bytes=max_upload_bytes,
            allowed_mime_types=mime_types,
            allowed_extensions=extensions,
            text_min_length=text_min,
            text_max_length=text_max,
            poll_interval_seconds=poll_interval,
            poll_max_attempts=poll_max,
            uploader_url=uploader_url,
            uploader_s3_bucket=uploader_bucket,
            uploader_s3_path=uploader_path,
            session_cache_engine=cache_engine,
            session_secret_key=secret_key,
            session_redis_url=redis_url,
            session_ttl_seconds=ttl_seconds,
            log_level=log_level,
            log_file=log_file,
            log_max_bytes=log_max_bytes,
            log_backup_count=log_backup_count,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
        )
