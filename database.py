import logging
from collections import OrderedDict
from functools import lru_cache

import firebase_admin
from firebase_admin import credentials, db

from config import FIREBASE_CREDENTIALS, FIREBASE_DATABASE_URL

logger = logging.getLogger(__name__)

# Characters the Realtime Database refuses in keys, plus the escape character itself
_FORBIDDEN_KEY_CHARS = ".$#[]/%"


def get_firebase_app():
    """Return the default Firebase app, initialising it on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        if not FIREBASE_DATABASE_URL:
            raise RuntimeError("FIREBASE_DATABASE_URL environment variable not set.")
        cred = credentials.Certificate(FIREBASE_CREDENTIALS)
        logger.info("Initialising Firebase app for %s", FIREBASE_DATABASE_URL)
        return firebase_admin.initialize_app(cred, {"databaseURL": FIREBASE_DATABASE_URL})


def index_key(value: str) -> str:
    """Encode an arbitrary value (username, phone number) into a legal store key"""
    return "".join(f"%{ord(ch):02X}" if ch in _FORBIDDEN_KEY_CHARS else ch for ch in value)


def is_valid_key(value: str) -> bool:
    """True if value can be used as a single path segment as is"""
    if not value or len(value.encode("utf-8")) > 768:
        return False
    return not any(ch in ".$#[]/" or ord(ch) < 32 or ord(ch) == 127 for ch in value)


class RealtimeStore:
    """Thin path-based facade over the Firebase Realtime Database.

    Every method is a single remote call. ``transaction`` is the only
    read-modify-write primitive: the update function sees the current value
    and the write only lands if the node is unchanged since that read.
    """

    def __init__(self, app=None):
        self.app = app

    def _ref(self, path: str):
        return db.reference(path, app=self.app)

    def get(self, path: str):
        return self._ref(path).get()

    def set(self, path: str, value):
        self._ref(path).set(value)

    def update(self, path: str, fields: dict):
        self._ref(path).update(fields)

    def delete(self, path: str):
        self._ref(path).delete()

    def push(self, path: str, value) -> str:
        return self._ref(path).push(value).key

    def query(self, path: str, order_by: str, equal_to=None, start_at=None, limit: int = None):
        query = self._ref(path).order_by_child(order_by)
        if equal_to is not None:
            query = query.equal_to(equal_to)
        elif start_at is not None:
            query = query.start_at(start_at)
        if limit is not None:
            query = query.limit_to_first(limit)
        result = query.get()
        if not result:
            return OrderedDict()
        return result

    def transaction(self, path: str, update_fn):
        return self._ref(path).transaction(update_fn)


@lru_cache()
def get_store() -> RealtimeStore:
    return RealtimeStore(get_firebase_app())
