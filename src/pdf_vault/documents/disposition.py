from __future__ import annotations

import os
from typing import Literal
from urllib.parse import quote

# Same unreserved set as JavaScript's encodeURIComponent
_UNRESERVED_EXTRA = "!'()*"


def encode_filename(filename: str) -> str:
    return quote(filename, safe=_UNRESERVED_EXTRA)


def content_disposition(kind: Literal["inline", "attachment"], filename: str) -> str:
    """RFC 6266 header value using the RFC 5987 ``filename*`` form."""
    return f"{kind}; filename*=UTF-8''{encode_filename(filename)}"


def ensure_extension(filename: str, default: str = ".pdf") -> str:
    _, ext = os.path.splitext(filename)
    return filename if ext else filename + default


__all__ = ["content_disposition", "encode_filename", "ensure_extension"]
