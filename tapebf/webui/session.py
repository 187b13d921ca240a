from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from tapebf.bf_interpreter import DEFAULT_MAX_OPERATIONS
from tapebf.debugger import DebugSession


@dataclass
class SessionRecord:
    session_id: str
    session: DebugSession
    # Serializes requests that drive or inspect the same session.
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)


class SessionStore:
    """Thread-safe registry for DebugSession instances."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.RLock()

    def create_session(
        self,
        *,
        code: str,
        input_data: bytes,
        tape_window: int = 10,
        max_operations: Optional[int] = DEFAULT_MAX_OPERATIONS,
        history_limit: int = 200,
    ) -> SessionRecord:
        session = DebugSession(
            code=code,
            input_data=input_data,
            tape_window=tape_window,
            max_operations=max_operations,
            history_limit=history_limit,
        )
        record = SessionRecord(session_id=uuid.uuid4().hex, session=session)
        with self._lock:
            self._sessions[record.session_id] = record
        return record

    def get(self, session_id: str) -> SessionRecord:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError as exc:
                raise KeyError(f"Unknown session id: {session_id}") from exc

    def reset(self, session_id: str) -> SessionRecord:
        record = self.get(session_id)
        with record.lock:
            record.session.clear_breakpoints()
            record.session.restart()
        return record

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


__all__ = ["SessionRecord", "SessionStore"]
