"""Unit tests for parsers."""

import json
import unittest

from newsdesk.parsers.json_parser import (
    match_json_array,
    match_json_objects,
    parse_full_response,
)
from newsdesk.parsers.normalize import validate_and_clean
from newsdesk.parsers.regex import extract_articles_with_regex, guess_title

SOURCE = "https://www.edgeprop.sg/"


def make_articles(count):
    return [
        {
            "title": f"Story {i}",
            "description": f"Description {i}",
            "date": f"2024-01-{i + 1:02d}",
            "source": "EdgeProp",
            "canonical_url": f"https://www.edgeprop.sg/news/{i}",
        }
        for i in range(count)
    ]


class TestValidateAndClean(unittest.TestCase):
    """Tests for article normalization."""

    def test_drops_candidates_without_title(self):
        """Candidates without a title are dropped."""
        cleaned = validate_and_clean(
            [
                {"title": "Kept"},
                {"description": "no title"},
                {"title": "", "headline": ""},
                "not an object",
                None,
                {"headline": "Also kept"},
            ],
            SOURCE,
        )
        self.assertEqual([a["title"] for a in cleaned], ["Kept", "Also kept"])

    def test_blank_titles_dropped_and_values_stripped(self):
        """Whitespace-only titles count as missing and values are stripped."""
        cleaned = validate_and_clean(
            [
                {"title": "   "},
                {"title": "\n\t", "headline": " "},
                {"title": "  Padded  ", "url": "  https://x.com/a "},
                {"title": "   ", "headline": "H"},
            ],
            SOURCE,
        )
        self.assertEqual([a["title"] for a in cleaned], ["Padded", "H"])
        self.assertEqual(cleaned[0]["canonical_url"], "https://x.com/a")

    def test_blank_value_falls_through_to_next_key(self):
        """A blank field does not shadow the next alternate key."""
        cleaned = validate_and_clean([{"title": "T", "description": "  ", "summary": "S"}], SOURCE)
        self.assertEqual(cleaned[0]["description"], "S")

    def test_alternate_keys_and_defaults(self):
        """Alternate keys are read and missing fields get defaults."""
        cleaned = validate_and_clean(
            [
                {
                    "headline": "Headline",
                    "summary": "Summary",
                    "publishedAt": "2024-03-01",
                    "link": "https://x.com/a",
                },
                {"title": "Bare"},
            ],
            SOURCE,
        )
        first, second = cleaned
        self.assertEqual(first["title"], "Headline")
        self.assertEqual(first["description"], "Summary")
        self.assertEqual(first["date"], "2024-03-01")
        self.assertEqual(first["source"], SOURCE)
        self.assertEqual(first["canonical_url"], "https://x.com/a")

        self.assertEqual(second["description"], "No description available")
        self.assertEqual(second["canonical_url"], "#")
        self.assertTrue(second["date"])
        self.assertEqual(set(second), {"title", "description", "date", "source", "canonical_url"})

    def test_key_precedence(self):
        """Earlier keys win over later alternates."""
        cleaned = validate_and_clean(
            [
                {
                    "title": "T",
                    "headline": "H",
                    "content": "C",
                    "description": "D",
                    "created_at": "late",
                    "date": "early",
                    "href": "https://x.com/href",
                    "url": "https://x.com/url",
                }
            ],
            SOURCE,
        )
        self.assertEqual(cleaned[0]["title"], "T")
        self.assertEqual(cleaned[0]["description"], "D")
        self.assertEqual(cleaned[0]["date"], "early")
        self.assertEqual(cleaned[0]["canonical_url"], "https://x.com/url")

    def test_unknown_source_fallback(self):
        """Without a default source the placeholder is used."""
        cleaned = validate_and_clean([{"title": "T"}], None)
        self.assertEqual(cleaned[0]["source"], "Unknown Source")

    def test_caps_at_ten_in_order(self):
        """The list is capped at ten, keeping order."""
        cleaned = validate_and_clean(make_articles(15), SOURCE)
        self.assertEqual(cleaned, make_articles(10))

    def test_non_list_input(self):
        """Anything but a list yields nothing."""
        self.assertEqual(validate_and_clean({"title": "T"}, SOURCE), [])
        self.assertEqual(validate_and_clean(None, SOURCE), [])


class TestJSONStrategies(unittest.TestCase):
    """Tests for the JSON-based strategies."""

    def test_array_match_inside_prose(self):
        """A JSON array embedded in prose is found."""
        response = (
            "Sure, here are the latest stories:\n"
            + json.dumps(make_articles(3), indent=2)
            + "\nLet me know if you need more."
        )
        self.assertEqual(match_json_array(response, SOURCE, "HDB"), make_articles(3))

    def test_array_match_invalid_json(self):
        """A malformed array yields nothing."""
        self.assertEqual(match_json_array('[{"title": oops}]', SOURCE, "HDB"), [])

    def test_array_match_without_array(self):
        """Text without an array yields nothing."""
        self.assertEqual(match_json_array("no json here", SOURCE, "HDB"), [])

    def test_object_scan_keeps_titled_objects_in_order(self):
        """Only titled objects are kept, in order."""
        response = (
            'First {"title": "A", "url": "https://x.com/a"} then '
            '{"note": "no title here"} and {"headline": "B", "meta": {"k": 1}} '
            'plus broken {"title": nope} and {"title": "C"}.'
        )
        cleaned = match_json_objects(response, SOURCE, "HDB")
        self.assertEqual([a["title"] for a in cleaned], ["A", "B", "C"])
        self.assertEqual(cleaned[0]["canonical_url"], "https://x.com/a")

    def test_object_scan_skips_blank_titles(self):
        """Objects with a whitespace-only title are skipped."""
        response = 'See {"title": "  ", "url": "https://x.com/a"} and {"title": "B"}'
        self.assertEqual(
            [a["title"] for a in match_json_objects(response, SOURCE, "HDB")], ["B"]
        )

    def test_object_scan_without_objects(self):
        """Text without objects yields nothing."""
        self.assertEqual(match_json_objects("plain text", SOURCE, "HDB"), [])

    def test_full_parse_list_and_wrapper(self):
        """A bare list and an articles wrapper both parse."""
        as_list = json.dumps(make_articles(2))
        wrapped = json.dumps({"articles": make_articles(2)})
        self.assertEqual(parse_full_response(as_list, SOURCE, "HDB"), make_articles(2))
        self.assertEqual(parse_full_response(wrapped, SOURCE, "HDB"), make_articles(2))

    def test_full_parse_other_shapes(self):
        """Other JSON shapes and non-JSON yield nothing."""
        self.assertEqual(parse_full_response('{"items": []}', SOURCE, "HDB"), [])
        self.assertEqual(parse_full_response("null", SOURCE, "HDB"), [])
        self.assertEqual(parse_full_response("not json", SOURCE, "HDB"), [])


class TestRegexExtractor(unittest.TestCase):
    """Tests for the heuristic text extractor."""

    def test_labelled_blocks(self):
        """Title/Description/Date/URL blocks are extracted."""
        text = (
            "Title: HDB resale prices rise\n"
            "Description: Resale flats up 2% this quarter\n"
            "Date: 2024-05-01\n"
            "URL: https://x.com/a\n\n"
            "title: Condo launch weekend\n"
            "description: Strong take-up at new launch\n"
            "date: 2024-05-02\n"
            "url: https://x.com/b\n"
        )
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(len(articles), 2)
        self.assertEqual(articles[0]["title"], "HDB resale prices rise")
        self.assertEqual(articles[0]["description"], "Resale flats up 2% this quarter")
        self.assertEqual(articles[0]["date"], "2024-05-01")
        self.assertEqual(articles[0]["canonical_url"], "https://x.com/a")
        self.assertEqual(articles[1]["canonical_url"], "https://x.com/b")
        self.assertEqual(articles[1]["source"], SOURCE)

    def test_numbered_list(self):
        """Numbered list entries are extracted."""
        text = (
            "1. HDB prices rise - Resale flats up again (2024-05-01) [https://x.com/a]\n"
            "2. Condo sales dip - Fewer units moved (2024-05-02) [https://x.com/b]\n"
        )
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(
            [(a["title"], a["description"], a["date"], a["canonical_url"]) for a in articles],
            [
                ("HDB prices rise", "Resale flats up again", "2024-05-01", "https://x.com/a"),
                ("Condo sales dip", "Fewer units moved", "2024-05-02", "https://x.com/b"),
            ],
        )

    def test_markdown_headings(self):
        """Markdown heading entries are extracted."""
        text = "## HDB prices rise\nResale flats up again\nDate: 2024-05-01\nSource: EdgeProp\n"
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(len(articles), 1)
        self.assertEqual(articles[0]["title"], "HDB prices rise")
        self.assertEqual(articles[0]["description"], "Resale flats up again")
        self.assertEqual(articles[0]["date"], "2024-05-01")
        # The heading form has no URL slot; the source line lands there
        self.assertEqual(articles[0]["canonical_url"], "EdgeProp")

    def test_pattern_matches_capped_at_ten(self):
        """Pattern matches are capped at ten."""
        block = "Title: Story {0}\nDescription: Desc {0}\nDate: 2024-01-01\nURL: https://x.com/{0}\n"
        text = "".join(block.format(i) for i in range(12))
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(len(articles), 10)
        self.assertEqual(articles[-1]["canonical_url"], "https://x.com/9")

    def test_url_fallback_default_titles(self):
        """Bare URLs get numbered topic titles."""
        text = "No structured data here.\nhttps://a.com/one\nhttps://b.com/two\n"
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(len(articles), 2)
        self.assertEqual(articles[0]["title"], "HDB News Article 1")
        self.assertEqual(articles[1]["title"], "HDB News Article 2")
        self.assertEqual(articles[0]["canonical_url"], "https://a.com/one")
        self.assertEqual(
            articles[1]["description"], f"News article about HDB from {SOURCE}"
        )

    def test_url_fallback_sniffs_title(self):
        """Text right before a URL becomes its title."""
        text = "Read about Singapore HDB resale prices rising at https://x.com/a"
        articles = extract_articles_with_regex(text, SOURCE, "HDB")
        self.assertEqual(len(articles), 1)
        self.assertEqual(articles[0]["title"], "Read about Singapore HDB resale prices rising at")
        self.assertEqual(articles[0]["canonical_url"], "https://x.com/a")

    def test_url_fallback_takes_five(self):
        """At most five URLs are used."""
        text = "\n".join(f"https://x.com/{i}" for i in range(8))
        self.assertEqual(len(extract_articles_with_regex(text, SOURCE, "HDB")), 5)

    def test_nothing_found(self):
        """Plain prose yields nothing."""
        self.assertEqual(extract_articles_with_regex("Sorry, no news.", SOURCE, "HDB"), [])

    def test_guess_title_window(self):
        """Title sniffing only looks at a bounded window."""
        text = "x" * 300 + " https://x.com/a"
        title = guess_title(text, text.index("https://"))
        # Only the last 200 characters are considered, at most 100 of them
        self.assertIsNotNone(title)
        self.assertLessEqual(len(title), 100)
        self.assertIsNone(guess_title("Short.\nhttps://x.com/a", 7))


if __name__ == "__main__":
    unittest.main()
