import secrets
import string

# Digit value order: 0-9, then a-z, then A-Z
ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)
MAX_CODE_LENGTH = 16

_RANDOM_BYTES = 8

def encode_base62(value: int) -> str:
    if value < 0:
        raise ValueError("Cannot encode a negative value")
    if value == 0:
        return ALPHABET[0]

    digits = []
    while value > 0:
        value, remainder = divmod(value, BASE)
        digits.append(ALPHABET[remainder])
    return "".join(reversed(digits))

def decode_base62(code: str) -> int:
    if not code:
        raise ValueError("Cannot decode an empty code")

    value = 0
    for char in code:
        index = ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"Invalid base62 character: {char!r}")
        value = value * BASE + index
    return value

def is_valid_short_code(code: str) -> bool:
    return 0 < len(code) <= MAX_CODE_LENGTH and all(c in ALPHABET for c in code)

class Base62CodeGenerator:
    """Random short codes: 8 bytes of secure randomness read as an unsigned
    64-bit integer and written in base62, so codes are 1 to 11 characters."""

    def generate(self) -> str:
        value = int.from_bytes(secrets.token_bytes(_RANDOM_BYTES), "little", signed=False)
        return encode_base62(value)
