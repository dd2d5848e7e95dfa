import hashlib

from waiting_room.services.token_issuer import TokenIssuer


def test_derive_matches_sha256_of_canonical_input():
    issuer = TokenIssuer()
    expected = hashlib.sha256("user-queue-default-100".encode("utf-8")).hexdigest()
    assert issuer.derive("default", 100) == expected

def test_derive_is_deterministic_and_lowercase_hex():
    issuer = TokenIssuer()
    token = issuer.derive("default", 100)
    assert token == issuer.derive("default", 100)
    assert len(token) == 64
    assert token == token.lower()
    int(token, 16)

def test_derive_depends_on_queue_and_user():
    issuer = TokenIssuer()
    base = issuer.derive("default", 100)
    assert issuer.derive("default", 101) != base
    assert issuer.derive("concert", 100) != base

def test_custom_prefix_changes_token():
    assert TokenIssuer(prefix="other").derive("default", 1) != TokenIssuer().derive("default", 1)

def test_matches_is_case_insensitive():
    issuer = TokenIssuer()
    token = issuer.derive("default", 7)
    assert issuer.matches("default", 7, token.upper())
    assert issuer.matches("default", 7, token)

def test_matches_rejects_wrong_or_empty_token():
    issuer = TokenIssuer()
    assert not issuer.matches("default", 7, issuer.derive("default", 8))
    assert not issuer.matches("default", 7, "")
    assert not issuer.matches("default", 7, None)

def test_matches_rejects_non_ascii_token():
    issuer = TokenIssuer()
    assert not issuer.matches("default", 100, "é")
    assert not issuer.matches("default", 100, "токен")

def test_matches_rejects_whitespace_padded_token():
    issuer = TokenIssuer()
    token = issuer.derive("default", 100)
    assert not issuer.matches("default", 100, f"  {token}\n")
    assert not issuer.matches("default", 100, f"{token} ")
