import pytest

from app.models.domain.gift_domain import recipient_key
from app.security import pseudonym


@pytest.fixture
def secret(monkeypatch):
    monkeypatch.setattr("app.security.pseudonym.settings.HASHING_SECRET", "k" * 32)


def test_pseudonym_is_stable(secret):
    assert pseudonym.pseudonymize("value", scope="test") == pseudonym.pseudonymize(
        "value", scope="test"
    )


def test_scope_changes_pseudonym(secret):
    assert pseudonym.pseudonymize("bob@example.com", scope="other") != pseudonym.recipient_hash(
        "bob@example.com"
    )


def test_recipient_hash_uses_recipient_key(secret):
    assert pseudonym.recipient_hash("  Bob@Example.COM ") == pseudonym.recipient_hash(
        "bob@example.com"
    )


def test_recipient_hash_hides_address(secret):
    digest = pseudonym.recipient_hash("bob@example.com")
    assert "bob" not in digest
    assert len(digest) == 64


@pytest.mark.parametrize("value", ["", "short"])
def test_weak_secret_is_rejected(monkeypatch, value):
    monkeypatch.setattr("app.security.pseudonym.settings.HASHING_SECRET", value)
    with pytest.raises(pseudonym.PseudonymError):
        pseudonym.pseudonymize("value", scope="test")


@pytest.mark.parametrize(
    "raw, expected",
    [(" Bob@Example.com ", "bob@example.com"), (None, ""), ("", "")],
)
def test_recipient_key(raw, expected):
    assert recipient_key(raw) == expected
