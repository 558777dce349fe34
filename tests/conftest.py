import copy
from collections import OrderedDict

import pytest
from fastapi.testclient import TestClient
from firebase_admin.exceptions import UnavailableError

from auth import create_access_token, hash_password
from database import get_store, index_key
from identity import get_identity, UserNotFound, EmailAlreadyExists
from mail import get_mailer
from main import app
from notifications import get_notifier


def _pruned(value):
    """Drop empty maps the way the Realtime Database does"""
    if isinstance(value, dict):
        cleaned = {}
        for key, child in value.items():
            child = _pruned(child)
            if child is not None:
                cleaned[key] = child
        return cleaned or None
    if isinstance(value, list):
        return value or None
    return value


class FakeStore:
    """In-memory stand-in for RealtimeStore with the same path semantics"""

    def __init__(self):
        self.data = {}
        self.failing = set()
        self.calls = []
        self._push_counter = 0

    def _check(self, op):
        self.calls.append(op)
        if op in self.failing:
            raise UnavailableError(f"{op} unavailable")

    @staticmethod
    def _parts(path):
        return [part for part in path.strip("/").split("/") if part]

    def _read(self, path):
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def _write(self, path, value):
        parts = self._parts(path)
        value = _pruned(copy.deepcopy(value))
        if not parts:
            self.data = value or {}
            return
        node = self.data
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = value
        self.data = _pruned(self.data) or {}

    def get(self, path):
        self._check("get")
        return self._read(path)

    def set(self, path, value):
        self._check("set")
        self._write(path, value)

    def update(self, path, fields):
        self._check("update")
        for key, value in fields.items():
            self._write(f"{path}/{key}", value)

    def delete(self, path):
        self._check("delete")
        self._write(path, None)

    def push(self, path, value):
        self._check("push")
        self._push_counter += 1
        key = f"-Nkey{self._push_counter:06d}"
        self._write(f"{path}/{key}", value)
        return key

    def query(self, path, order_by, equal_to=None, start_at=None, limit=None):
        self._check("query")
        children = self._read(path) or {}
        items = [(key, child) for key, child in children.items() if isinstance(child, dict)]
        if equal_to is not None:
            items = [(k, c) for k, c in items if c.get(order_by) == equal_to]
        if start_at is not None:
            items = [(k, c) for k, c in items if c.get(order_by) is not None and c[order_by] >= start_at]
        items.sort(key=lambda kc: (kc[1].get(order_by) is not None, kc[1].get(order_by) or 0, kc[0]))
        if limit is not None:
            items = items[:limit]
        return OrderedDict(items)

    def transaction(self, path, update_fn):
        self._check("transaction")
        new_value = update_fn(self._read(path))
        self._write(path, new_value)
        return new_value


class FakeIdentity:
    def __init__(self):
        self.users = {}
        self.failing = False
        self._counter = 0

    def _check(self):
        if self.failing:
            raise UnavailableError("identity provider unavailable")

    def create_user(self, email):
        self._check()
        if email in self.users:
            raise EmailAlreadyExists(email)
        self._counter += 1
        uid = f"uid-{self._counter}"
        self.users[email] = {"uid": uid, "verified": False}
        return uid

    def lookup(self, email):
        self._check()
        if email not in self.users:
            raise UserNotFound(email)
        user = self.users[email]
        return user["uid"], user["verified"]

    def delete_user(self, uid):
        self._check()
        for email, user in list(self.users.items()):
            if user["uid"] == uid:
                del self.users[email]
                return
        raise UserNotFound(uid)

    def email_verification_link(self, email):
        self._check()
        if email not in self.users:
            raise UserNotFound(email)
        return f"https://verify.example.com/{self.users[email]['uid']}"

    def mark_verified(self, email):
        self.users[email]["verified"] = True


class FakeNotifier:
    def __init__(self):
        self.sent = []
        self.failing = False

    def send(self, topic, title, body):
        if self.failing:
            raise UnavailableError("messaging unavailable")
        self.sent.append({"topic": topic, "title": title, "body": body})
        return f"msg-{len(self.sent)}"


class FakeMailer:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html_body):
        self.sent.append({"to": to, "subject": subject, "body": html_body})


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(store, identity, notifier, mailer):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity] = lambda: identity
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_user(store):
    """Write a user record plus its username/phone claims"""
    def seed(uid, username=None, role="user", phone_number=None, password="secret123", **fields):
        record = {"email": f"{uid}@example.com", "role": role, "hashed_password": hash_password(password), "profile_image": 3}
        record.update(fields)
        if username:
            record["username"] = username
            store.data.setdefault("usernames", {})[index_key(username)] = uid
        if phone_number:
            record["phone_number"] = phone_number
            store.data.setdefault("phone_numbers", {})[index_key(phone_number)] = uid
        store.data.setdefault("users", {})[uid] = record
        return record
    return seed


@pytest.fixture
def admin_headers(seed_user):
    seed_user("admin-uid", username="admin", role="admin")
    return {"Authorization": f"Bearer {create_access_token({'sub': 'admin-uid'})}"}


@pytest.fixture
def user_headers(seed_user):
    seed_user("member-uid", username="member")
    return {"Authorization": f"Bearer {create_access_token({'sub': 'member-uid'})}"}
