#!/usr/bin/env python3
# src/lapalma_mcp_server/protocol/session_manager.py
"""
Streaming session lifecycle management.

A session is OPEN from :meth:`SessionRegistry.open` until
:meth:`SessionRegistry.close`; there is no other state. Each session owns a
delivery channel (an ``asyncio.Queue`` drained by the SSE stream) and a
heartbeat task that writes ``ping`` events onto it.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..constants import DEFAULT_HEARTBEAT_INTERVAL, MAX_SESSION_ID_LENGTH, SSE_EVENT_PING
from ..errors import DuplicateSessionError, SessionClosedError

logger = logging.getLogger(__name__)

# Queue item: (event name, payload). ``None`` marks the end of the stream.
Event = tuple[str, Any]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Session:
    """One open streaming channel."""

    id: str
    created_at: float = field(default_factory=time.time)
    _queue: "asyncio.Queue[Event | None]" = field(default_factory=asyncio.Queue, repr=False)
    _heartbeat: "asyncio.Task[None] | None" = field(default=None, repr=False)
    _closed: bool = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: str, data: Any) -> None:
        """Queue an event for the client.

        Raises:
            SessionClosedError: the channel has been closed.
        """
        if self._closed:
            raise SessionClosedError(f"Session {self.id[:8]}... is closed")
        self._queue.put_nowait((event, data))

    async def next_event(self) -> Event | None:
        """Wait for the next queued event; ``None`` once the channel is closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def start_heartbeat(self, interval: float) -> None:
        if self._heartbeat is None and not self._closed:
            self._heartbeat = asyncio.create_task(self._heartbeat_loop(interval), name=f"heartbeat-{self.id[:8]}")

    async def _heartbeat_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.send(SSE_EVENT_PING, {"timestamp": utc_timestamp()})
            except SessionClosedError:
                logger.debug(f"Heartbeat stopped for closed session {self.id[:8]}...")
                return

    def close(self) -> bool:
        """Close the channel and cancel the heartbeat. Returns False if already closed."""
        if self._closed:
            return False
        self._closed = True

        heartbeat, self._heartbeat = self._heartbeat, None
        if heartbeat is not None and not heartbeat.done():
            heartbeat.cancel()

        # Wake the stream reader
        self._queue.put_nowait(None)
        return True


class SessionRegistry:
    """Maps session identifiers to open streaming sessions.

    Mutated only from the event loop, so no lock is taken. The registry is
    the only owner of :class:`Session` objects; other components address a
    session by its identifier.
    """

    def __init__(self, heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL):
        self.heartbeat_interval = heartbeat_interval
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @staticmethod
    def generate_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def is_valid_id(session_id: str) -> bool:
        """Client-chosen ids are 1-128 printable ASCII characters."""
        return 0 < len(session_id) <= MAX_SESSION_ID_LENGTH and all(" " <= char <= "~" for char in session_id)

    def open(self, session_id: str | None = None) -> Session:
        """Open a session, generating an identifier when none is given.

        Raises:
            DuplicateSessionError: ``session_id`` is already open.
        """
        session_id = session_id or self.generate_id()
        if session_id in self._sessions:
            raise DuplicateSessionError(session_id)

        session = Session(id=session_id)
        self._sessions[session_id] = session
        session.start_heartbeat(self.heartbeat_interval)
        logger.info(f"Opened session {session_id[:8]}... ({len(self._sessions)} active)")
        return session

    def get(self, session_id: str | None) -> Session | None:
        """Get an open session by ID."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def send(self, session_id: str, event: str, data: Any) -> bool:
        """Deliver an event to a session; False if it is gone."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning(f"Dropping {event} event for missing session {session_id[:8]}...")
            return False
        try:
            session.send(event, data)
        except SessionClosedError:
            logger.warning(f"Dropping {event} event for closed session {session_id[:8]}...")
            return False
        return True

    def close(self, session_id: str) -> bool:
        """Close and remove a session. Closing an unknown or closed session is a no-op."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        age = time.time() - session.created_at
        logger.info(f"Closed session {session_id[:8]}... after {age:.1f}s ({len(self._sessions)} active)")
        return True

    def close_all(self) -> int:
        """Close every open session, e.g. on shutdown."""
        session_ids = list(self._sessions)
        for session_id in session_ids:
            self.close(session_id)
        return len(session_ids)

    @contextmanager
    def session(self, session_id: str | None = None) -> Iterator[Session]:
        """Open a session for the duration of a ``with`` block."""
        session = self.open(session_id)
        try:
            yield session
        finally:
            # The id may have been closed and reopened by another client meanwhile
            if self._sessions.get(session.id) is session:
                self.close(session.id)
            else:
                session.close()
