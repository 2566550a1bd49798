from __future__ import annotations

import re


SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def ensure_scheme(url: str) -> str:
    trimmed = url.strip()
    if not trimmed:
        return ""
    return trimmed if SCHEME_RE.match(trimmed) else f"https://{trimmed}"


def normalize_base_url(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"
