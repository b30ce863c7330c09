# tests/test_field_extractor.py

"""Tests for ordered multi-pattern field extraction."""

import threading
import unittest

from fitlowprice.extraction.field_extractor import (
    FieldExtractor,
    _parse_html,
    css_attr,
    css_present,
    css_text,
    json_field,
    normalize_url,
    parse_price,
    regex,
    strip_markup,
)

HTML = (
    '<div class="card">'
    '<span class="title"><b>Galaxy</b> S24   Ultra</span>'
    '<span class="price-old">0원</span>'
    '<strong class="price">1,299,000원</strong>'
    '<img class="thumb" src="" data-src="//img.example.com/a.jpg">'
    '<a class="link" href="/vp/products/1">go</a>'
    "</div>"
)


def _boom(text: str) -> str | None:
    """A pattern that always raises."""
    raise RuntimeError("broken pattern")


class TestExtract(unittest.TestCase):
    """FieldExtractor.extract ordering and absence semantics."""

    def test_first_matching_pattern_wins(self) -> None:
        """Patterns are tried in order; the first hit is returned."""
        value = FieldExtractor.extract(
            HTML,
            [css_text("span.missing"), css_text("strong.price"), css_text("span.title")],
        )
        self.assertEqual(value, "1,299,000원")

    def test_no_match_returns_none(self) -> None:
        """Absence is a normal outcome, not an error."""
        self.assertIsNone(
            FieldExtractor.extract(HTML, [css_text("p.nothing"), regex(r"zzz(\d+)")])
        )

    def test_empty_pattern_list_returns_none(self) -> None:
        """No patterns means nothing can match."""
        self.assertIsNone(FieldExtractor.extract(HTML, []))

    def test_raising_pattern_is_skipped(self) -> None:
        """A pattern that raises never aborts extraction."""
        value = FieldExtractor.extract(HTML, [_boom, css_text("strong.price")])
        self.assertEqual(value, "1,299,000원")

    def test_invalid_json_does_not_raise(self) -> None:
        """JSON patterns against non-JSON text simply miss."""
        self.assertIsNone(FieldExtractor.extract("<html>", [json_field("title")]))


class TestExtractText(unittest.TestCase):
    """Text fields drop markup and collapse whitespace."""

    def test_tags_and_whitespace_stripped(self) -> None:
        """Embedded tags vanish and runs of whitespace collapse."""
        value = FieldExtractor.extract_text(HTML, [css_text("span.title")])
        self.assertEqual(value, "Galaxy S24 Ultra")

    def test_markup_only_match_falls_through(self) -> None:
        """A match that is empty after stripping counts as absent."""
        text = '{"title": "<b></b>", "name": "Buds"}'
        value = FieldExtractor.extract_text(
            text, [json_field("title"), json_field("name")]
        )
        self.assertEqual(value, "Buds")

    def test_entities_decoded(self) -> None:
        """HTML entities in JSON strings are decoded."""
        self.assertEqual(strip_markup("<b>A</b> &amp; B"), "A & B")


class TestExtractPrice(unittest.TestCase):
    """Numeric extraction strips non-digits; zero is absent."""

    def test_non_digits_stripped(self) -> None:
        """Currency symbols and separators are removed."""
        self.assertEqual(
            FieldExtractor.extract_price(HTML, [css_text("strong.price")]),
            1299000,
        )

    def test_zero_price_falls_through_to_next_pattern(self) -> None:
        """A zero after stripping is treated as no match."""
        value = FieldExtractor.extract_price(
            HTML, [css_text("span.price-old"), css_text("strong.price")]
        )
        self.assertEqual(value, 1299000)

    def test_only_zero_is_absent(self) -> None:
        """When the only match is zero, the field is absent."""
        self.assertIsNone(
            FieldExtractor.extract_price(HTML, [css_text("span.price-old")])
        )

    def test_parse_price_without_digits(self) -> None:
        """Text without digits parses to None."""
        self.assertIsNone(parse_price("품절"))


class TestOtherExtractors(unittest.TestCase):
    """Attribute, flag, URL and JSON patterns."""

    def test_css_attr_skips_empty_attribute(self) -> None:
        """The first non-empty attribute among those listed is used."""
        value = FieldExtractor.extract(HTML, [css_attr("img.thumb", "src", "data-src")])
        self.assertEqual(value, "//img.example.com/a.jpg")

    def test_extract_url_normalises(self) -> None:
        """Protocol-relative and relative URLs become absolute."""
        self.assertEqual(
            FieldExtractor.extract_url(
                HTML, [css_attr("img.thumb", "data-src")]
            ),
            "https://img.example.com/a.jpg",
        )
        self.assertEqual(
            FieldExtractor.extract_url(
                HTML, [css_attr("a.link", "href")], "https://www.coupang.com"
            ),
            "https://www.coupang.com/vp/products/1",
        )

    def test_flag_present_and_absent(self) -> None:
        """Flags are True when matched and None when not exposed."""
        self.assertTrue(FieldExtractor.extract_flag(HTML, [css_present("img.thumb")]))
        self.assertIsNone(FieldExtractor.extract_flag(HTML, [css_present("span.rocket")]))

    def test_json_field_nested_path(self) -> None:
        """Nested keys and list indexes are walked."""
        text = '{"a": {"b": [{"c": 42}]}}'
        self.assertEqual(FieldExtractor.extract(text, [json_field("a", "b", 0, "c")]), "42")
        self.assertIsNone(FieldExtractor.extract(text, [json_field("a", "b", 3, "c")]))

    def test_float_and_count(self) -> None:
        """Ratings parse as decimals, review counts as digit runs."""
        text = '<em class="r">4.5</em><span class="n">(1,234)</span>'
        self.assertEqual(FieldExtractor.extract_float(text, [css_text("em.r")]), 4.5)
        self.assertEqual(FieldExtractor.extract_count(text, [css_text("span.n")]), 1234)

    def test_normalize_url_keeps_absolute(self) -> None:
        """Absolute URLs are left as they are."""
        self.assertEqual(
            normalize_url("https://a.example.com/x", "https://b.example.com"),
            "https://a.example.com/x",
        )


class TestParseCache(unittest.TestCase):
    """Parsed trees are reused within a thread only."""

    def test_same_thread_reuses_tree(self) -> None:
        """Repeated patterns on one block share a single parse."""
        self.assertIs(_parse_html(HTML), _parse_html(HTML))

    def test_new_text_replaces_cached_tree(self) -> None:
        """A different document is parsed afresh."""
        first = _parse_html(HTML)
        other = _parse_html("<p>다른 문서</p>")
        self.assertIsNot(first, other)
        self.assertIsNotNone(other.select_one("p"))

    def test_threads_get_their_own_tree(self) -> None:
        """Concurrent adapters never share a BeautifulSoup tree."""
        main_tree = _parse_html(HTML)
        seen: list[object] = []

        def worker() -> None:
            seen.append(_parse_html(HTML))

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        self.assertEqual(len(seen), 1)
        self.assertIsNot(seen[0], main_tree)


if __name__ == "__main__":
    unittest.main()
