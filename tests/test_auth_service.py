import threading

import pytest

from conftest import START
from question_bank.services import auth_service
from question_bank.services.errors import Conflict, Forbidden, Unauthorized


def _lock_is_free(store) -> bool:
    """다른 스레드에서 저장소 잠금을 잡을 수 있는지."""
    result = []

    def attempt():
        acquired = store.lock.acquire(timeout=1)
        if acquired:
            store.lock.release()
        result.append(acquired)

    t = threading.Thread(target=attempt)
    t.start()
    t.join()
    return result[0]


def test_password_hash_is_computed_outside_store_lock(store, monkeypatch):
    free_during_hash = []
    real_hash = auth_service.hash_password

    def observed_hash(password, rounds=None):
        free_during_hash.append(_lock_is_free(store))
        return real_hash(password, rounds)

    monkeypatch.setattr(auth_service, "hash_password", observed_hash)

    auth_service.register(store, "kim", "kim@example.com", "secret1")
    user = auth_service.create_user(store, "park", "park@example.com", None, "teacher")
    auth_service.reset_password(store, user.id, "changed1", START)

    assert free_during_hash == [True, True, True]


def test_register_and_login(store):
    out = auth_service.register(store, "kim", "kim@example.com", "secret1")
    assert out["user"]["role"] == "student"

    login = auth_service.login(store, "kim@example.com", "secret1")
    assert auth_service.decode_token(login["token"]).username == "kim"

    with pytest.raises(Unauthorized):
        auth_service.login(store, "kim", "wrong")
    with pytest.raises(Conflict):
        auth_service.register(store, "kim", "other@example.com", "secret1")
    with pytest.raises(Forbidden):
        auth_service.register(store, "lee", "lee@example.com", "secret1", "admin")


def test_short_password_falls_back_to_default(store):
    user = auth_service.create_user(store, "choi", "choi@example.com", "123", "student")
    assert auth_service.verify_password("123456", user.password_hash)
