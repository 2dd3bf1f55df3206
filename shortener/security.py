"""PBKDF2 password hashing.

Stored format is ``base64(salt):base64(key)``. Iteration count is a fixed
tuning constant; changing it invalidates every stored hash.
"""
import base64
import binascii
import hashlib
import hmac
import secrets

SALT_SIZE = 16
KEY_SIZE = 32
ITERATIONS = 10_000
HASH_NAME = "sha256"
SEPARATOR = ":"

def _derive_key(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(HASH_NAME, password.encode("utf-8", errors="surrogatepass"), salt, ITERATIONS, dklen=KEY_SIZE)

def hash_password(password: str) -> str:
    salt = secrets.token_bytes(SALT_SIZE)
    key = _derive_key(password, salt)
    return SEPARATOR.join(
        (base64.b64encode(salt).decode("ascii"), base64.b64encode(key).decode("ascii"))
    )

def verify_password(stored_hash: str, password: str) -> bool:
    if not isinstance(stored_hash, str) or not isinstance(password, str):
        return False

    parts = stored_hash.split(SEPARATOR)
    if len(parts) != 2:
        return False

    try:
        salt = base64.b64decode(parts[0], validate=True)
        expected = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError):
        return False

    return hmac.compare_digest(_derive_key(password, salt), expected)
