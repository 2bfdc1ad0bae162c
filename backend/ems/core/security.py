import secrets
from hashlib import pbkdf2_hmac
from hmac import compare_digest

ITERATIONS = 260_000


def hash_password(raw: str, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = pbkdf2_hmac("sha256", raw.encode("utf-8"), salt.encode("utf-8"), ITERATIONS).hex()
    return f"pbkdf2_sha256${ITERATIONS}${salt}${digest}"


def verify_password(raw: str, hashed: str) -> bool:
    try:
        _, iterations, salt, digest = hashed.split("$")
    except ValueError:
        return False
    candidate = pbkdf2_hmac("sha256", raw.encode("utf-8"), salt.encode("utf-8"), int(iterations)).hex()
    return compare_digest(candidate, digest)


def issue_token() -> str:
    return secrets.token_urlsafe(32)
