import random
import pytest
from shortener.shortcode import (
    ALPHABET, Base62CodeGenerator, encode_base62, decode_base62, is_valid_short_code,
)

MAX_U64 = 2**64 - 1

@pytest.mark.parametrize("value,expected", [
    (0, "0"),
    (1, "1"),
    (10, "a"),
    (35, "z"),
    (36, "A"),
    (61, "Z"),
    (62, "10"),
    (12345, "3d7"),
])
def test_encode_known_values(value, expected):
    assert encode_base62(value) == expected

def test_alphabet_order():
    assert len(ALPHABET) == 62
    assert ALPHABET.startswith("0123456789abc")
    assert ALPHABET.endswith("XYZ")

def test_round_trip_over_64_bit_range():
    rng = random.Random(62)
    values = [0, 1, 61, 62, MAX_U64, MAX_U64 - 1] + [rng.getrandbits(64) for _ in range(500)]
    for value in values:
        assert decode_base62(encode_base62(value)) == value

def test_largest_64_bit_value_needs_eleven_symbols():
    assert len(encode_base62(MAX_U64)) == 11

def test_encode_rejects_negative():
    with pytest.raises(ValueError):
        encode_base62(-1)

@pytest.mark.parametrize("code", ["", "abc-", "ab c", "é"])
def test_decode_rejects_foreign_symbols(code):
    with pytest.raises(ValueError):
        decode_base62(code)

def test_generate_uses_alphabet_and_length_bounds():
    generator = Base62CodeGenerator()
    for _ in range(1000):
        code = generator.generate()
        assert 1 <= len(code) <= 11
        assert all(c in ALPHABET for c in code)

def test_generate_has_no_duplicates_over_many_samples():
    generator = Base62CodeGenerator()
    codes = {generator.generate() for _ in range(1000)}
    assert len(codes) == 1000

def test_generate_encodes_secure_random_bytes(monkeypatch):
    monkeypatch.setattr("shortener.shortcode.secrets.token_bytes", lambda n: (12345).to_bytes(n, "little"))
    assert Base62CodeGenerator().generate() == "3d7"

def test_is_valid_short_code():
    assert is_valid_short_code("3d7")
    assert is_valid_short_code("Z" * 16)
    assert not is_valid_short_code("")
    assert not is_valid_short_code("Z" * 17)
    assert not is_valid_short_code("bad-code")
