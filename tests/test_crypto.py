"""Tests for hugo_protector.crypto module."""

import hashlib

import pytest

from hugo_protector.crypto import (
    IV_LENGTH,
    KEY_LENGTH,
    SALT_LENGTH,
    TAG_LENGTH,
    AuthenticationError,
    InvalidInputError,
    ProtectorError,
    derive_key,
    generate_iv,
    generate_salt,
    seal,
    unseal,
)

FAST_ITERATIONS = 1000


class TestDeriveKey:
    """Tests for PBKDF2-SHA256 key derivation."""

    def test_key_length(self):
        """Derived key is 256 bits."""
        key = derive_key("password", generate_salt(), FAST_ITERATIONS)
        assert len(key) == KEY_LENGTH

    def test_deterministic(self):
        """Same inputs always give the same key."""
        salt = generate_salt()
        assert derive_key("pw", salt, FAST_ITERATIONS) == derive_key(
            "pw", salt, FAST_ITERATIONS
        )

    def test_matches_independent_pbkdf2(self):
        """Key matches hashlib's PBKDF2-HMAC-SHA256 (what WebCrypto computes)."""
        salt = bytes(range(SALT_LENGTH))
        expected = hashlib.pbkdf2_hmac(
            "sha256", "pässwörd".encode("utf-8"), salt, 2000, dklen=32
        )
        assert derive_key("pässwörd", salt, 2000) == expected

    def test_salt_changes_key(self):
        """Different salts give different keys."""
        assert derive_key("pw", generate_salt(), FAST_ITERATIONS) != derive_key(
            "pw", generate_salt(), FAST_ITERATIONS
        )

    def test_iterations_change_key(self):
        """Different iteration counts give different keys."""
        salt = generate_salt()
        assert derive_key("pw", salt, 1000) != derive_key("pw", salt, 1001)

    @pytest.mark.parametrize("password", ["", None, b"bytes", 123])
    def test_invalid_password(self, password):
        """Empty or non-string passwords are rejected."""
        with pytest.raises(InvalidInputError, match="Password is required"):
            derive_key(password, generate_salt(), FAST_ITERATIONS)

    @pytest.mark.parametrize("salt", [b"short", b"x" * 17, "0" * 16, None])
    def test_invalid_salt(self, salt):
        """Salt must be exactly 16 bytes."""
        with pytest.raises(InvalidInputError, match="Salt must be"):
            derive_key("pw", salt, FAST_ITERATIONS)

    @pytest.mark.parametrize("iterations", [0, -5, 1.5, "1000", True, None])
    def test_invalid_iterations(self, iterations):
        """Iterations must be a positive integer."""
        with pytest.raises(InvalidInputError, match="Iterations"):
            derive_key("pw", generate_salt(), iterations)


class TestSealUnseal:
    """Tests for AES-256-GCM seal/unseal."""

    def test_known_answer(self):
        """NIST GCM test case 14 (AES-256, zero key/iv, one zero block)."""
        ciphertext, tag = seal(bytes(32), bytes(12), bytes(16))
        assert ciphertext.hex() == "cea7403d4d606b6e074ec5d3baf39d18"
        assert tag.hex() == "d0d1c8a799996bf0265b98b5d48ab919"

    def test_known_answer_empty(self):
        """NIST GCM test case 13 (AES-256, empty plaintext)."""
        ciphertext, tag = seal(bytes(32), bytes(12), b"")
        assert ciphertext == b""
        assert tag.hex() == "530f8afbc74536b9a963b4f1c4cb738b"

    def test_roundtrip(self):
        """Unseal recovers sealed plaintext."""
        key = bytes(range(32))
        iv = generate_iv()
        ciphertext, tag = seal(key, iv, b"secret text")
        assert unseal(key, iv, ciphertext, tag) == b"secret text"

    def test_ciphertext_length_equals_plaintext(self):
        """GCM is a stream mode: no padding."""
        ciphertext, tag = seal(bytes(32), generate_iv(), b"x" * 37)
        assert len(ciphertext) == 37
        assert len(tag) == TAG_LENGTH

    def test_wrong_key(self):
        """Unsealing with another key fails authentication."""
        iv = generate_iv()
        ciphertext, tag = seal(bytes(32), iv, b"secret")
        with pytest.raises(AuthenticationError):
            unseal(b"\x01" * 32, iv, ciphertext, tag)

    def test_corrupted_tag(self):
        """A modified tag fails authentication."""
        iv = generate_iv()
        ciphertext, tag = seal(bytes(32), iv, b"secret")
        bad_tag = bytes([tag[0] ^ 0x01]) + tag[1:]
        with pytest.raises(AuthenticationError):
            unseal(bytes(32), iv, ciphertext, bad_tag)

    def test_corrupted_ciphertext(self):
        """A modified ciphertext fails authentication."""
        iv = generate_iv()
        ciphertext, tag = seal(bytes(32), iv, b"secret")
        bad_ct = ciphertext[:-1] + bytes([ciphertext[-1] ^ 0x80])
        with pytest.raises(AuthenticationError):
            unseal(bytes(32), iv, bad_ct, tag)

    def test_truncated_tag(self):
        """A short tag never verifies."""
        iv = generate_iv()
        ciphertext, tag = seal(bytes(32), iv, b"secret")
        with pytest.raises(AuthenticationError):
            unseal(bytes(32), iv, ciphertext, tag[:8])

    def test_invalid_key_length(self):
        """Keys must be 32 bytes."""
        with pytest.raises(InvalidInputError, match="Key must be"):
            seal(bytes(16), generate_iv(), b"x")

    def test_invalid_iv_length(self):
        """IVs must be 12 bytes."""
        with pytest.raises(InvalidInputError, match="IV must be"):
            seal(bytes(32), bytes(16), b"x")


class TestRandomness:
    """Tests for salt and iv generation."""

    def test_lengths(self):
        assert len(generate_salt()) == SALT_LENGTH
        assert len(generate_iv()) == IV_LENGTH

    def test_fresh_values(self):
        """Generated values are never repeated."""
        assert len({generate_salt() for _ in range(50)}) == 50
        assert len({generate_iv() for _ in range(50)}) == 50


class TestErrorHierarchy:
    """All errors share a common base."""

    def test_subclasses(self):
        assert issubclass(InvalidInputError, ProtectorError)
        assert issubclass(AuthenticationError, ProtectorError)
