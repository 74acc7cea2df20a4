"""hugo-protector - Password-protect content blocks of static Hugo sites."""

__version__ = "0.1.0"

from .crypto import (
    AuthenticationError,
    FormatError,
    InvalidInputError,
    ProtectorError,
)
from .markdown import markdown_to_html, render_content
from .payload import decode, encode, inspect_payload, verify_password

__all__ = [
    "encode",
    "decode",
    "inspect_payload",
    "verify_password",
    "markdown_to_html",
    "render_content",
    "ProtectorError",
    "InvalidInputError",
    "FormatError",
    "AuthenticationError",
    "__version__",
]
