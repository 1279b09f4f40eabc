from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from websummary.checks import DocumentCheckError, assert_document_ok, basic_html_checks
from websummary.embed import embed_data
from websummary.html_extract import (
    HtmlDataExtractError,
    extract_data_from_html_file,
    extract_data_from_html_text,
)


class TestHtmlExtractContract(unittest.TestCase):
    def test_extract_from_file(self) -> None:
        payload = {"sample": {"name": "S1"}, "values": [1, 2.5, None, "</script>"]}
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "r.html"
            p.write_text("<html><body>" + embed_data(payload, "data") + "</body></html>", encoding="utf-8")
            self.assertEqual(extract_data_from_html_file(p), payload)

    def test_custom_variable_name(self) -> None:
        html = embed_data([1], "other") + embed_data({"x": 1}, "data")
        self.assertEqual(extract_data_from_html_text(html, variable_name="other"), [1])
        self.assertEqual(extract_data_from_html_text(html), {"x": 1})

    def test_missing_or_repeated_block(self) -> None:
        with self.assertRaises(HtmlDataExtractError):
            extract_data_from_html_text("<html></html>")
        with self.assertRaises(HtmlDataExtractError):
            extract_data_from_html_text(embed_data(1, "data") + embed_data(2, "data"))


class TestDocumentChecksContract(unittest.TestCase):
    def test_detects_premature_script_termination(self) -> None:
        broken = '<script>window.data = {"x":"</script>"};</script>'
        problems = basic_html_checks(broken)
        self.assertTrue(any("stray </script>" in p for p in problems), problems)

    def test_detects_residual_markers_and_external_refs(self) -> None:
        html = '<!--SLOT:left--><script src="./app.js"></script><link href="app.css" rel="stylesheet">'
        problems = basic_html_checks(html, resolved_names=("app.js", "app.css"))
        self.assertEqual(len(problems), 3, problems)

    def test_unterminated_script(self) -> None:
        self.assertTrue(basic_html_checks("<script>go()"))

    def test_escaped_script_state_swallowing_the_document_is_detected(self) -> None:
        html = '<script>var s="<!--<script>";</script><script>window.data = {"x":1};</script><p>after</p>'
        problems = basic_html_checks(html)
        self.assertTrue(any("unterminated <script>" in p for p in problems), problems)

    def test_comment_without_nested_script_is_fine(self) -> None:
        self.assertEqual(basic_html_checks('<script>var s="<!-- x -->";</script><p>ok</p>'), [])

    def test_assert_document_ok(self) -> None:
        assert_document_ok("<script>a()</script>")
        with self.assertRaises(DocumentCheckError):
            assert_document_ok("<p>x</p>", strict=True)


if __name__ == "__main__":
    unittest.main(verbosity=2)
