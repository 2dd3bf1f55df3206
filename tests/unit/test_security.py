import base64
import pytest
from shortener.security import hash_password, verify_password, SALT_SIZE, KEY_SIZE

def test_hash_format():
    stored = hash_password("hunter2")
    salt, key = stored.split(":")
    assert len(base64.b64decode(salt)) == SALT_SIZE
    assert len(base64.b64decode(key)) == KEY_SIZE

def test_empty_password_is_allowed():
    stored = hash_password("")
    assert stored
    assert stored.count(":") == 1
    assert verify_password(stored, "")

def test_same_password_gets_distinct_salts():
    first = hash_password("p@ssw0rd")
    second = hash_password("p@ssw0rd")
    assert first != second
    assert verify_password(first, "p@ssw0rd")
    assert verify_password(second, "p@ssw0rd")

def test_wrong_password_fails():
    stored = hash_password("p@ssw0rd")
    assert not verify_password(stored, "p@ssw0rD")
    assert not verify_password(stored, "")

def test_unicode_password():
    stored = hash_password("пароль-密码")
    assert verify_password(stored, "пароль-密码")

@pytest.mark.parametrize("stored", [
    "",
    "no-separator",
    "a:b:c",
    "::",
    "not base64!:also not base64!",
])
def test_malformed_hash_fails_closed(stored):
    assert verify_password(stored, "anything") is False

def test_non_string_input_fails_closed():
    assert verify_password(None, "anything") is False

def test_lone_surrogate_does_not_raise():
    assert verify_password(hash_password("p@ssw0rd"), "\ud800") is False
    assert verify_password(hash_password("\ud800"), "\ud800") is True
