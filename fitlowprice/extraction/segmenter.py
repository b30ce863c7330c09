# fitlowprice/extraction/segmenter.py

"""Split a search page into per-product blocks.

Upstream markup drifts over time, so each source keeps an ordered list of
segmenters; the first one that yields at least one block is used.
"""

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from bs4 import BeautifulSoup

logger = logging.getLogger("fitlowprice.extraction")

Segmenter = Callable[[str], list[str]]


def css_blocks(selector: str) -> Segmenter:
    """Every element matching *selector*, serialised back to markup."""

    def segment(text: str) -> list[str]:
        soup = BeautifulSoup(text, "lxml")
        return [str(el) for el in soup.select(selector)]

    segment.__name__ = f"css_blocks({selector!r})"
    return segment


def regex_blocks(expr: str, flags: int = re.DOTALL) -> Segmenter:
    """Every non-overlapping match of *expr* (whole match)."""
    compiled = re.compile(expr, flags)

    def segment(text: str) -> list[str]:
        return [m.group(0) for m in compiled.finditer(text)]

    segment.__name__ = f"regex_blocks({expr!r})"
    return segment


def json_blocks(*path: str) -> Segmenter:
    """Each object in the list at *path*, re-serialised as JSON."""

    def segment(text: str) -> list[str]:
        node: Any = json.loads(text)
        for key in path:
            if not isinstance(node, dict):
                return []
            node = node.get(key)
        if not isinstance(node, list):
            return []
        return [
            json.dumps(item, ensure_ascii=False)
            for item in node
            if isinstance(item, dict)
        ]

    segment.__name__ = f"json_blocks{path!r}"
    return segment


def segment_blocks(
    text: str,
    segmenters: Sequence[Segmenter],
    source_id: str = "",
) -> list[str]:
    """Return blocks from the first segmenter that finds any."""
    for segmenter in segmenters:
        name = getattr(segmenter, "__name__", repr(segmenter))
        try:
            blocks = segmenter(text)
        except Exception as exc:
            logger.debug("[%s] Segmenter %s failed: %s", source_id, name, exc)
            continue
        if blocks:
            logger.debug(
                "[%s] %s yielded %d blocks", source_id, name, len(blocks)
            )
            return blocks
        logger.debug("[%s] %s yielded no blocks", source_id, name)
    return []
