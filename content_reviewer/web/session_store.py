"""
Server-side sessions: the cookie carries only an opaque id, the data lives in
an in-process dict (development) or in Redis.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

import redis
from flask.sessions import SessionInterface, SessionMixin
from werkzeug.datastructures import CallbackDict

from content_reviewer.config.ini_config import AppSettings

logger = logging.getLogger(__name__)


class ServerSideSession(CallbackDict, SessionMixin):
    def __init__(self, initial: Optional[Dict[str, Any]] = None, sid: str = "", new: bool = False):
        def on_update(self):
            self.modified = True

        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False


class MemorySessionStore:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    def get(self, sid: str) -> Optional[Dict[str, Any]]:
        entry = self._data.get(sid)
        if entry is None:
            return None
        expires_at, data = entry
        if expires_at <= self._clock():
            self._data.pop(sid, None)
            return None
        return dict(data)

    def _sweep(self, now: float) -> None:
        expired = [sid for sid, (expires_at, _) in list(self._data.items()) if expires_at <= now]
        for sid in expired:
            self._data.pop(sid, None)

    def set(self, sid: str, data: Dict[str, Any], ttl_seconds: int) -> None:
        now = self._clock()
        self._sweep(now)
        self._data[sid] = (now + ttl_seconds, dict(data))

    def delete(self, sid: str) -> None:
        self._data.pop(sid, None)

    def __len__(self) -> int:
        return len(self._data)


class RedisSessionStore:
    def __init__(self, client: "redis.Redis", prefix: str = "content-reviewer:session:"):
        self._client = client
        self._prefix = prefix

    def get(self, sid: str) -> Optional[Dict[str, Any]]:
        raw = self._client.get(self._prefix + sid)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session %s", sid)
            return None
        return data if isinstance(data, dict) else None

    def set(self, sid: str, data: Dict[str, Any], ttl_seconds: int) -> None:
        self._client.setex(self._prefix + sid, ttl_seconds, json.dumps(data))

    def delete(self, sid: str) -> None:
        self._client.delete(self._prefix + sid)


def create_session_store(settings: AppSettings, redis_factory: Callable[[str], Any] = redis.Redis.from_url):
    if settings.session_cache_engine == "redis":
        try:
            client = redis_factory(settings.session_redis_url)
            client.ping()
        except redis.RedisError as e:
            logger.error("Redis session cache unavailable (%s); falling back to in-memory sessions", e)
        else:
            logger.info("Using Redis session cache")
            return RedisSessionStore(client)

    logger.warning("Using in-memory session cache: suitable for local development only")
    return MemorySessionStore()


class ServerSideSessionInterface(SessionInterface):
    def __init__(self, store, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _new_sid() -> str:
        return uuid.uuid4().hex

    def open_session(self, app, request) -> ServerSideSession:
        sid = request.cookies.get(self.get_cookie_name(app))
        if sid:
            data = self.store.get(sid)
            if data is not None:
                return ServerSideSession(data, sid=sid)
        return ServerSideSession(sid=self._new_sid(), new=True)

    def save_session(self, app, session: ServerSideSession, response) -> None:
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)

        if not session:
            if session.modified:
                self.store.delete(session.sid)
                response.delete_cookie(name, domain=domain, path=path)
            return

        if not self.should_set_cookie(app, session):
            return

        self.store.set(session.sid, dict(session), self.ttl_seconds)
        response.set_cookie(
            name,
            session.sid,
            expires=self.get_expiration_time(app, session),
            httponly=self.get_cookie_httponly(app),
            domain=domain,
            path=path,
            secure=self.get_cookie_secure(app),
            samesite=self.get_cookie_samesite(app),
        )
