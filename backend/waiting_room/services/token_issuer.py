import hashlib
import hmac


class TokenIssuer:
    """
    Derives the access token for a (queue, user) pair.

    The token is the lowercase hex SHA-256 of "<prefix>-<queue>-<user_id>".
    It is deterministic and stateless; the cookie lifetime set by the HTTP
    layer is the only thing that bounds its validity.
    """

    def __init__(self, prefix: str = "user-queue"):
        self.prefix = prefix
        # Fail at construction rather than per call if sha256 is missing.
        hashlib.new("sha256")

    def derive(self, queue: str, user_id: int) -> str:
        payload = f"{self.prefix}-{queue}-{user_id}"
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def matches(self, queue: str, user_id: int, presented: str) -> bool:
        """Case-insensitive comparison of a presented token with the derived one."""
        if not presented:
            return False
        expected = self.derive(queue, user_id)
        # bytes, since compare_digest rejects non-ASCII str
        return hmac.compare_digest(expected.encode("utf-8"), presented.lower().encode("utf-8"))
