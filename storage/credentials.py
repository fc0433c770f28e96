"""
CredentialStore — the Flattrade session shared with the websocket client.

One endpoint writes it (setCredentials), another reads it (websocketData).
It starts empty and lives for the lifetime of the process.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SessionCredentials:
    usersession: str = ""
    userid:      str = ""
    updated_at:  Optional[datetime] = None

    def to_dict(self) -> dict[str, str]:
        d = asdict(self)
        d.pop("updated_at")
        return d


class CredentialStore:
    """Thread-safe holder of the latest SessionCredentials snapshot."""

    def __init__(self):
        self._lock  = threading.Lock()
        self._creds = SessionCredentials()

    def set(self, usersession: Optional[str], userid: Optional[str]) -> SessionCredentials:
        creds = SessionCredentials(
            usersession=usersession or "",
            userid=userid or "",
            updated_at=datetime.now(),
        )
        with self._lock:
            self._creds = creds
        return creds

    def get(self) -> SessionCredentials:
        with self._lock:
            return self._creds

    def clear(self) -> None:
        with self._lock:
            self._creds = SessionCredentials()

    @property
    def is_set(self) -> bool:
        return self.get().updated_at is not None
