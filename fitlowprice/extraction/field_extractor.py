# fitlowprice/extraction/field_extractor.py

"""Ordered multi-pattern field extraction for marketplace markup.

A *pattern* is a pure function ``(text) -> str | None`` that knows one
markup shape for one field. Marketplaces expose the same field under
different shapes (and roll out UI variants to subsets of users), so every
field is described by an ordered list of patterns and the first non-empty
match wins. Absence is a normal outcome: nothing here raises.
"""

import json
import logging
import re
import threading
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger("fitlowprice.extraction")

Pattern = Callable[[str], str | None]

_NON_DIGIT_RE = re.compile(r"\D")
_DECIMAL_RE = re.compile(r"\d+(?:\.\d+)?")


# Every pattern for a block parses the same text, so each thread keeps
# its last parsed document. Trees are never shared across threads.
_local = threading.local()


def _cached_parse(kind: str, text: str, parse: Callable[[str], Any]) -> Any:
    cached = getattr(_local, kind, None)
    if cached is not None and cached[0] == text:
        return cached[1]
    parsed = parse(text)
    setattr(_local, kind, (text, parsed))
    return parsed


def _parse_html(text: str) -> BeautifulSoup:
    return _cached_parse("html", text, lambda t: BeautifulSoup(t, "lxml"))


def _parse_json(text: str) -> Any:
    return _cached_parse("json", text, json.loads)


# ── Pattern factories ────────────────────────────────────


def css_text(selector: str) -> Pattern:
    """Match the text content of the first element for *selector*."""

    def pattern(text: str) -> str | None:
        el = _parse_html(text).select_one(selector)
        return el.get_text() if el else None

    pattern.__name__ = f"css_text({selector!r})"
    return pattern


def css_attr(selector: str, *attrs: str) -> Pattern:
    """Match the first non-empty attribute among *attrs* on *selector*."""

    def pattern(text: str) -> str | None:
        el = _parse_html(text).select_one(selector)
        if el is None:
            return None
        for attr in attrs:
            value = el.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value:
                return str(value)
        return None

    pattern.__name__ = f"css_attr({selector!r}, {attrs!r})"
    return pattern


def css_present(selector: str) -> Pattern:
    """Match (as ``"true"``) when any element satisfies *selector*."""

    def pattern(text: str) -> str | None:
        return "true" if _parse_html(text).select_one(selector) else None

    pattern.__name__ = f"css_present({selector!r})"
    return pattern


def regex(expr: str, group: int = 1, flags: int = re.DOTALL) -> Pattern:
    """Match capture *group* of the first hit of *expr*."""
    compiled = re.compile(expr, flags)

    def pattern(text: str) -> str | None:
        match = compiled.search(text)
        return match.group(group) if match else None

    pattern.__name__ = f"regex({expr!r})"
    return pattern


def json_field(*path: str | int) -> Pattern:
    """Match the scalar found by walking *path* through a JSON document."""

    def pattern(text: str) -> str | None:
        node: Any = _parse_json(text)
        for key in path:
            if isinstance(key, int):
                if not isinstance(node, list) or key >= len(node):
                    return None
                node = node[key]
            else:
                if not isinstance(node, dict):
                    return None
                node = node.get(key)
            if node is None:
                return None
        if isinstance(node, (dict, list)):
            return None
        if isinstance(node, bool):
            return "true" if node else None
        return str(node)

    pattern.__name__ = f"json_field{path!r}"
    return pattern


# ── Value normalisation ──────────────────────────────────


def strip_markup(value: str) -> str:
    """Drop embedded tags and entities, collapse whitespace."""
    if "<" not in value and "&" not in value:
        return " ".join(value.split())
    plain = BeautifulSoup(value, "lxml").get_text()
    return " ".join(plain.split())


def parse_price(value: str) -> int | None:
    """Strip every non-digit and parse; zero counts as absent."""
    digits = _NON_DIGIT_RE.sub("", value)
    if not digits:
        return None
    amount = int(digits)
    return amount if amount > 0 else None


def normalize_url(url: str, base_url: str = "") -> str:
    """Make protocol-relative and root-relative URLs absolute."""
    url = url.strip()
    if url.startswith("//"):
        return f"https:{url}"
    if base_url and not url.startswith(("http://", "https://")):
        return urljoin(base_url, url)
    return url


class FieldExtractor:
    """Apply ordered pattern lists to raw HTML or JSON text."""

    @staticmethod
    def _first(
        text: str,
        patterns: Sequence[Pattern],
        convert: Callable[[str], Any],
    ) -> Any:
        for pattern in patterns:
            try:
                raw = pattern(text)
                if raw is None:
                    continue
                value = convert(raw)
            except Exception as exc:
                logger.debug(
                    "Pattern %s failed: %s",
                    getattr(pattern, "__name__", pattern),
                    exc,
                )
                continue
            if value is not None and value != "":
                return value
        return None

    @staticmethod
    def extract(text: str, patterns: Sequence[Pattern]) -> str | None:
        """Return the first non-empty raw match, or ``None``."""
        return FieldExtractor._first(
            text, patterns, lambda raw: raw.strip() or None
        )

    @staticmethod
    def extract_text(text: str, patterns: Sequence[Pattern]) -> str | None:
        """Return the first match with markup and whitespace stripped."""
        return FieldExtractor._first(text, patterns, strip_markup)

    @staticmethod
    def extract_price(text: str, patterns: Sequence[Pattern]) -> int | None:
        """Return the first match that parses to a positive integer."""
        return FieldExtractor._first(text, patterns, parse_price)

    @staticmethod
    def extract_count(text: str, patterns: Sequence[Pattern]) -> int | None:
        """Return the first digit-only match, zero included."""

        def convert(raw: str) -> int | None:
            digits = _NON_DIGIT_RE.sub("", raw)
            return int(digits) if digits else None

        return FieldExtractor._first(text, patterns, convert)

    @staticmethod
    def extract_float(text: str, patterns: Sequence[Pattern]) -> float | None:
        """Return the first decimal number found in a match."""

        def convert(raw: str) -> float | None:
            match = _DECIMAL_RE.search(raw)
            return float(match.group(0)) if match else None

        return FieldExtractor._first(text, patterns, convert)

    @staticmethod
    def extract_flag(text: str, patterns: Sequence[Pattern]) -> bool | None:
        """Return ``True`` when any pattern matches, else ``None``."""
        found = FieldExtractor.extract(text, patterns)
        return True if found is not None else None

    @staticmethod
    def extract_url(
        text: str,
        patterns: Sequence[Pattern],
        base_url: str = "",
    ) -> str | None:
        """Return the first match normalised to an absolute URL."""
        return FieldExtractor._first(
            text,
            patterns,
            lambda raw: normalize_url(raw, base_url) or None,
        )
