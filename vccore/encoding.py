import base64
import binascii
import re
from typing import Union

from vccore.errors import InvalidEncoding

_B64URL_RE = re.compile(r"^[A-Za-z0-9_-]*$")

def b64url_encode(data: bytes) -> str:
    """Encode bytes to a URL-safe Base64 string without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')

def b64url_decode(s: Union[str, bytes]) -> bytes:
    """
    Strict inverse of b64url_encode.
    Padding, whitespace, characters outside the URL-safe alphabet and
    non-zero trailing bits are rejected, so each byte string has one encoding.
    """
    if isinstance(s, bytes):
        try:
            s = s.decode("ascii")
        except UnicodeDecodeError as e:
            raise InvalidEncoding("segment is not ASCII") from e

    if not _B64URL_RE.match(s):
        raise InvalidEncoding("segment contains non-base64url characters")
    if len(s) % 4 == 1:
        raise InvalidEncoding("segment has an impossible base64url length")

    pad = "=" * ((4 - len(s) % 4) % 4)
    try:
        raw = base64.urlsafe_b64decode((s + pad).encode("ascii"))
    except binascii.Error as e:
        raise InvalidEncoding(str(e)) from e
    if b64url_encode(raw) != s:
        raise InvalidEncoding("segment is not in canonical base64url form")
    return raw
