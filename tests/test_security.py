import pytest

from userhub.core.security import hash_password, verify_password


@pytest.mark.parametrize("password", ["secret1", "pässwörd-ü", "x" * 100, " spaced out "])
def test_hash_then_verify_roundtrip(password):
    digest = hash_password(password)

    assert digest != password
    assert password not in digest
    assert verify_password(password, digest) is True


def test_verify_rejects_other_password():
    digest = hash_password("secret1")

    assert verify_password("secret2", digest) is False
    assert verify_password("Secret1", digest) is False


def test_same_password_hashes_differently_but_both_verify():
    first = hash_password("secret1")
    second = hash_password("secret1")

    assert first != second
    assert verify_password("secret1", first)
    assert verify_password("secret1", second)


@pytest.mark.parametrize("digest", ["", None, "not-a-bcrypt-hash", "$2b$04$short"])
def test_verify_returns_false_on_malformed_digest(digest):
    assert verify_password("secret1", digest) is False


def test_verify_returns_false_for_empty_password():
    assert verify_password("", hash_password("secret1")) is False


def test_passwords_sharing_a_long_prefix_do_not_match():
    prefix = "a" * 72

    assert verify_password(prefix + "y", hash_password(prefix + "x")) is False
    assert verify_password(prefix, hash_password(prefix + "x")) is False
    assert verify_password(prefix + "x", hash_password(prefix + "x")) is True
