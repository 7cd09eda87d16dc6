import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple, TypeVar

from tictactoe.errors import GameNotFound
from tictactoe.models import Session, generate_game_id

T = TypeVar('T')


class _Entry:
    __slots__ = ('session', 'lock')

    def __init__(self, session: Session):
        self.session = session
        self.lock = threading.Lock()


def normalize_game_id(game_id) -> str:
    if not isinstance(game_id, str) or not game_id.strip():
        raise GameNotFound()
    return game_id.strip().upper()


class SessionRegistry:
    """In-memory store of live sessions keyed by game id.

    The mapping is guarded by one lock that is only held for dict
    operations. Each session has its own lock; ``with_session`` is the only
    way to run code against a live Session. A session lock may be held while
    taking the mapping lock, never the other way round.
    """

    def __init__(self, id_length: int = 6, logger: Optional[logging.Logger] = None):
        self.id_length = id_length
        self.logger = logger or logging.getLogger(__name__)
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, game_id) -> bool:
        try:
            key = normalize_game_id(game_id)
        except GameNotFound:
            return False
        with self._lock:
            return key in self._entries

    def create_session(self, created_at: Optional[float] = None) -> str:
        with self._lock:
            game_id = generate_game_id(self.id_length)
            while game_id in self._entries:
                self.logger.info(f"[create] id collision on {game_id}, regenerating")
                game_id = generate_game_id(self.id_length)
            self._entries[game_id] = _Entry(Session(game_id, created_at=created_at))
        self.logger.info(f"[create] game={game_id}")
        return game_id

    def _entry(self, game_id) -> Tuple[str, _Entry]:
        key = normalize_game_id(game_id)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            raise GameNotFound()
        return key, entry

    def with_session(self, game_id, fn: Callable[[Session], T]) -> T:
        """Run ``fn(session)`` while holding that session's lock.

        Raises GameNotFound if the id is unknown, or if the session was
        removed while waiting for the lock.
        """
        key, entry = self._entry(game_id)
        with entry.lock:
            with self._lock:
                current = self._entries.get(key)
            if current is not entry:
                raise GameNotFound()
            return fn(entry.session)

    def get(self, game_id) -> Session:
        return self.with_session(game_id, lambda s: s.snapshot())

    def join_session(self, game_id, connection_id, name) -> Tuple[str, Session]:
        """Add a player; returns the assigned symbol and a snapshot taken under the same lock."""
        def _join(session):
            symbol = session.add_player(connection_id, name)
            return symbol, session.snapshot()
        return self.with_session(game_id, _join)

    def make_move(self, game_id, connection_id, row, col) -> Session:
        def _move(session):
            session.move(connection_id, row, col)
            return session.snapshot()
        return self.with_session(game_id, _move)

    def remove_player(self, game_id, connection_id) -> int:
        """Remove the player if present; returns how many players remain."""
        def _remove(session):
            session.remove_player(connection_id)
            return len(session.players)
        return self.with_session(game_id, _remove)

    def delete(self, game_id) -> bool:
        key = normalize_game_id(game_id)
        with self._lock:
            removed = self._entries.pop(key, None)
        if removed is not None:
            self.logger.info(f"[delete] game={key}")
        return removed is not None

    def delete_if_empty(self, game_id) -> bool:
        """Delete the session only if nobody has joined it since the last check."""
        def _delete(session):
            if session.players:
                return False
            return self.delete(session.id)
        try:
            return self.with_session(game_id, _delete)
        except GameNotFound:
            return False

    def sweep_expired(self, max_age: float, now: Optional[float] = None) -> int:
        """Remove every session created more than ``max_age`` seconds ago."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e.session.created_at > max_age]
            for key in expired:
                del self._entries[key]
        for key in expired:
            self.logger.info(f"[sweep] removed inactive game={key}")
        return len(expired)
