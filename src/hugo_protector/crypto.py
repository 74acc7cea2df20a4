"""Core cryptographic primitives for hugo-protector.

Provides PBKDF2-SHA256 key derivation and AES-256-GCM sealing,
compatible with the WebCrypto API used by the browser-side unlocker.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Cryptographic parameters (must match browser-side implementation)
VERSION = 1
ALGORITHM = "AES-256-GCM"
DEFAULT_ITERATIONS = 310000
SALT_LENGTH = 16  # 128 bits
IV_LENGTH = 12  # 96 bits (standard for GCM)
KEY_LENGTH = 32  # 256 bits
TAG_LENGTH = 16  # 128 bits


class ProtectorError(Exception):
    """Base exception for hugo-protector errors."""

    pass


class InvalidInputError(ProtectorError):
    """Raised for caller mistakes: missing text or password, bad parameters."""

    pass


class FormatError(ProtectorError):
    """Raised when a payload cannot be read."""

    pass


class AuthenticationError(ProtectorError):
    """Raised when the authentication tag does not verify.

    A wrong password and a tampered payload are indistinguishable.
    """

    pass


def _check_iterations(iterations: int) -> None:
    # bool is an int subclass, but True is never a meaningful cost
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise InvalidInputError(
            f"Iterations must be an integer, got {type(iterations).__name__}"
        )
    if iterations <= 0:
        raise InvalidInputError(f"Iterations must be positive, got {iterations}")


def derive_key(password: str, salt: bytes, iterations: int) -> bytes:
    """Derive a 256-bit key from password using PBKDF2-SHA256.

    Args:
        password: Non-empty password string (UTF-8 encoded for the KDF).
        salt: 16-byte salt.
        iterations: Positive iteration count.

    Returns:
        32-byte key.

    Raises:
        InvalidInputError: If any argument is malformed.
    """
    if not isinstance(password, str) or not password:
        raise InvalidInputError("Password is required to derive encryption key.")
    if not isinstance(salt, bytes) or len(salt) != SALT_LENGTH:
        raise InvalidInputError(f"Salt must be {SALT_LENGTH} bytes")
    _check_iterations(iterations)

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _check_key_iv(key: bytes, iv: bytes) -> None:
    if not isinstance(key, bytes) or len(key) != KEY_LENGTH:
        raise InvalidInputError(f"Key must be {KEY_LENGTH} bytes")
    if not isinstance(iv, bytes) or len(iv) != IV_LENGTH:
        raise InvalidInputError(f"IV must be {IV_LENGTH} bytes")


def seal(key: bytes, iv: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
    """Encrypt plaintext with AES-256-GCM and no associated data.

    The caller must never reuse an iv with the same key.

    Returns:
        Tuple of (ciphertext, tag). The ciphertext has the plaintext's length.
    """
    _check_key_iv(key, iv)
    sealed = AESGCM(key).encrypt(iv, plaintext, None)
    return sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]


def unseal(key: bytes, iv: bytes, ciphertext: bytes, tag: bytes) -> bytes:
    """Verify the tag and decrypt ciphertext with AES-256-GCM.

    Raises:
        AuthenticationError: If the tag does not verify (wrong key,
            corrupted ciphertext or corrupted tag).
    """
    _check_key_iv(key, iv)
    if len(tag) != TAG_LENGTH:
        raise AuthenticationError("Decryption failed: wrong password or tampered data")
    try:
        return AESGCM(key).decrypt(iv, ciphertext + tag, None)
    except InvalidTag:
        raise AuthenticationError(
            "Decryption failed: wrong password or tampered data"
        ) from None


def generate_salt() -> bytes:
    """Generate a fresh random 16-byte salt."""
    return os.urandom(SALT_LENGTH)


def generate_iv() -> bytes:
    """Generate a fresh random 12-byte GCM nonce."""
    return os.urandom(IV_LENGTH)
