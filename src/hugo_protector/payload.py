"""Payload codec for hugo-protector.

A payload is a JSON record carrying everything needed to decrypt, given
the password. The record is base64-encoded as a whole into a single
opaque transport string that gets embedded in a Hugo page:

    {"v": 1, "alg": "AES-256-GCM", "iter": 310000,
     "salt": <b64>, "iv": <b64>, "ct": <b64>, "tag": <b64>}

Consumers read fields by name; key order carries no meaning.
"""

import base64
import json
import logging
from typing import Any

from .crypto import (
    ALGORITHM,
    DEFAULT_ITERATIONS,
    IV_LENGTH,
    SALT_LENGTH,
    TAG_LENGTH,
    VERSION,
    AuthenticationError,
    FormatError,
    InvalidInputError,
    derive_key,
    generate_iv,
    generate_salt,
    seal,
    unseal,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("salt", "iv", "ct", "tag")
PAYLOAD_FIELDS = ("v", "alg", "iter") + REQUIRED_FIELDS

_FIELD_LENGTHS = {
    "salt": SALT_LENGTH,
    "iv": IV_LENGTH,
    "tag": TAG_LENGTH,
}


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _unb64(value: str) -> bytes:
    # Strict decoding: stray characters are corruption, not noise
    return base64.b64decode("".join(value.split()), validate=True)


def encode(plaintext: str, password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Encrypt plaintext into a transport string.

    A fresh salt and iv are drawn on every call, so encoding the same
    text twice with the same password yields unrelated payloads.

    Args:
        plaintext: Non-empty text to protect.
        password: Non-empty password.
        iterations: PBKDF2 iteration count.

    Returns:
        Base64-encoded JSON payload.

    Raises:
        InvalidInputError: If plaintext or password is missing, or
            iterations is malformed.
    """
    if not isinstance(plaintext, str) or not plaintext:
        raise InvalidInputError("Plaintext must be a non-empty string.")
    if not password:
        raise InvalidInputError("Password is required for encryption.")

    salt = generate_salt()
    iv = generate_iv()
    key = derive_key(password, salt, iterations)
    ciphertext, tag = seal(key, iv, plaintext.encode("utf-8"))

    payload = {
        "v": VERSION,
        "alg": ALGORITHM,
        "iter": iterations,
        "salt": _b64(salt),
        "iv": _b64(iv),
        "ct": _b64(ciphertext),
        "tag": _b64(tag),
    }
    logger.debug(
        "Encoded payload: %d ciphertext bytes, %d iterations",
        len(ciphertext),
        iterations,
    )
    return _b64(json.dumps(payload).encode("utf-8"))


def parse_payload(transport: str) -> dict[str, Any]:
    """Decode a transport string into its raw JSON record.

    No field validation happens here beyond requiring a JSON object.

    Raises:
        FormatError: If the string is not base64 or does not hold JSON.
    """
    if not isinstance(transport, str) or not transport.strip():
        raise FormatError("Payload is missing")

    try:
        decoded = _unb64(transport)
    except ValueError as e:
        raise FormatError(f"Invalid base64 encoding: {e}") from e

    try:
        data = json.loads(decoded.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError(f"Invalid JSON format: {e}") from e

    if not isinstance(data, dict):
        raise FormatError("Payload must be a JSON object")
    return data


def _read_fields(data: dict[str, Any]) -> tuple[int, dict[str, bytes]]:
    """Validate a parsed record and decode its byte fields.

    Returns:
        Tuple of (iterations, {field: bytes}).
    """
    if "v" in data and data["v"] != VERSION:
        raise FormatError(f"Unsupported format version: {data['v']}")
    if "alg" in data and data["alg"] != ALGORITHM:
        raise FormatError(f"Unsupported algorithm: {data['alg']}")

    for field_name in REQUIRED_FIELDS:
        if field_name not in data:
            raise FormatError(f"Missing required field: {field_name}")

    # Older payloads omit the iteration count
    iterations = data.get("iter", DEFAULT_ITERATIONS)
    if (
        isinstance(iterations, bool)
        or not isinstance(iterations, int)
        or iterations <= 0
    ):
        raise FormatError(f"Invalid iteration count: {iterations!r}")

    fields: dict[str, bytes] = {}
    for field_name in REQUIRED_FIELDS:
        value = data[field_name]
        if not isinstance(value, str):
            raise FormatError(f"Field {field_name} must be a base64 string")
        try:
            fields[field_name] = _unb64(value)
        except ValueError as e:
            raise FormatError(f"Invalid base64 in field {field_name}: {e}") from e

        expected = _FIELD_LENGTHS.get(field_name)
        if expected is not None and len(fields[field_name]) != expected:
            raise FormatError(
                f"Field {field_name} must be {expected} bytes, "
                f"got {len(fields[field_name])}"
            )

    return iterations, fields


def decode(transport: str, password: str) -> str:
    """Decrypt a transport string produced by encode().

    Each call derives its own key; nothing is cached between calls.

    Args:
        transport: Base64-encoded JSON payload.
        password: The password used for encryption.

    Returns:
        The original plaintext.

    Raises:
        FormatError: If the payload is malformed.
        InvalidInputError: If password is missing.
        AuthenticationError: If the password is wrong or the payload
            was tampered with.
    """
    data = parse_payload(transport)
    if not password:
        raise InvalidInputError("Password is required for decryption.")

    iterations, fields = _read_fields(data)
    logger.debug("Decoding payload with %d iterations", iterations)

    key = derive_key(password, fields["salt"], iterations)
    plaintext = unseal(key, fields["iv"], fields["ct"], fields["tag"])

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Decrypted content is not valid UTF-8: {e}") from e


def inspect_payload(transport: str) -> dict[str, Any]:
    """Inspect a payload without decrypting.

    Args:
        transport: Base64-encoded JSON payload.

    Returns:
        Dict with: version, algorithm, iterations, salt_hex, salt_length,
        iv_length, ciphertext_length, tag_length.

    Raises:
        FormatError: If payload cannot be read.
    """
    data = parse_payload(transport)
    iterations, fields = _read_fields(data)

    return {
        "version": data.get("v", VERSION),
        "algorithm": data.get("alg", ALGORITHM),
        "iterations": iterations,
        "salt_hex": fields["salt"].hex(),
        "salt_length": len(fields["salt"]),
        "iv_length": len(fields["iv"]),
        "ciphertext_length": len(fields["ct"]),
        "tag_length": len(fields["tag"]),
    }


def verify_password(transport: str, password: str) -> bool:
    """Check a password against a payload.

    Returns:
        True if the payload decrypts with password, False otherwise.

    Raises:
        FormatError: If payload cannot be read.
        InvalidInputError: If password is missing.
    """
    try:
        decode(transport, password)
    except AuthenticationError:
        return False
    return True
