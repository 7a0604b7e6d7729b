"""Turns scanned QR text into a scene index."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

from melodyquest.core.errors import MalformedScanText

_SCENE_PATTERN = re.compile(r"scene[:=]?\s*(\d+)", re.IGNORECASE)
_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ShortLink:
    """An external short link that always points at one scene."""

    host: str
    path: str
    scene: int


class QRTextResolver:
    """Maps raw scanned text to a scene index, or None.

    Rules are tried in order and the first match wins:

    1. ``scene`` followed by an optional ``:`` or ``=``, optional whitespace
       and digits, anywhere in the text (case-insensitive).
    2. An absolute URL with a numeric ``scene`` query parameter.
    3. An absolute URL whose host is an allowlisted short-link host and whose
       path contains that link's identifier.

    The result is not range checked.
    """

    def __init__(self, short_links: Iterable[ShortLink] = ()) -> None:
        self._short_links: Tuple[ShortLink, ...] = tuple(short_links)

    @property
    def short_links(self) -> Sequence[ShortLink]:
        return self._short_links

    def resolve(self, raw_text: Optional[str]) -> Optional[int]:
        if not raw_text:
            return None
        text = str(raw_text).strip()

        match = _SCENE_PATTERN.search(text)
        if match:
            return int(match.group(1))

        try:
            parts = _parse_absolute_url(text)
        except MalformedScanText:
            return None

        for value in parse_qs(parts.query).get("scene", []):
            if _DIGITS.fullmatch(value.strip()):
                return int(value.strip())

        host = (parts.hostname or "").lower()
        for link in self._short_links:
            if host == link.host.lower() and link.path in parts.path:
                return link.scene
        return None

    __call__ = resolve


def _parse_absolute_url(text: str):
    try:
        parts = urlsplit(text)
        # accessing hostname/port validates the netloc
        parts.hostname
        parts.port
    except ValueError as e:
        raise MalformedScanText(str(e)) from e
    if not parts.scheme or not parts.netloc:
        raise MalformedScanText(f"Not an absolute URL: {text!r}")
    return parts


def resolve_scene_text(raw_text: Optional[str], short_links: Iterable[ShortLink] = ()) -> Optional[int]:
    """Functional form of :meth:`QRTextResolver.resolve`."""
    return QRTextResolver(short_links).resolve(raw_text)


__all__ = ["QRTextResolver", "ShortLink", "resolve_scene_text"]
