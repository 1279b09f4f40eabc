from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from websummary.errors import ResourceNotFound, ResourceReadError
from websummary.resolve import ChainSource, MappingSource, SearchPathSource, decode_text, minified_variant


class TestResourceResolverContract(unittest.TestCase):
    def test_first_root_wins_in_configured_order(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            a = Path(td) / "a"
            b = Path(td) / "b"
            a.mkdir()
            b.mkdir()
            (a / "lib.js").write_text("from-a", encoding="utf-8")
            (b / "lib.js").write_text("from-b", encoding="utf-8")
            (b / "only-b.css").write_text("b{}", encoding="utf-8")

            self.assertEqual(SearchPathSource([a, b]).resolve("lib.js"), b"from-a")
            self.assertEqual(SearchPathSource([b, a]).resolve("lib.js"), b"from-b")
            self.assertEqual(SearchPathSource([a, b]).resolve("only-b.css"), b"b{}")

    def test_missing_everywhere_lists_searched_roots(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = SearchPathSource([td])
            with self.assertRaises(ResourceNotFound) as ctx:
                src.resolve("nope.js")
            self.assertEqual(ctx.exception.name, "nope.js")
            self.assertIn(str(Path(td)), str(ctx.exception))

    def test_names_cannot_escape_the_root(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td) / "root"
            root.mkdir()
            (Path(td) / "secret.txt").write_text("x", encoding="utf-8")
            src = SearchPathSource([root])
            for name in ("../secret.txt", "/etc/hostname", "", "a\\b.js"):
                with self.assertRaises(ResourceNotFound):
                    src.resolve(name)

    def test_subdirectory_names_resolve(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "vendor").mkdir()
            (Path(td) / "vendor" / "lib.js").write_bytes(b"v")
            self.assertEqual(SearchPathSource([td]).resolve("vendor/lib.js"), b"v")

    def test_each_resource_is_read_once(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "lib.js").write_bytes(b"one")
            src = SearchPathSource([td])
            self.assertEqual(src.resolve("lib.js"), b"one")
            (Path(td) / "lib.js").write_bytes(b"two")
            self.assertEqual(src.resolve("lib.js"), b"one")

    def test_read_failure_is_a_resource_read_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "lib.js").write_bytes(b"x")
            src = SearchPathSource([td])
            with patch("pathlib.Path.read_bytes", side_effect=PermissionError(13, "Permission denied")):
                with self.assertRaises(ResourceReadError) as ctx:
                    src.resolve("lib.js")
            self.assertIn("lib.js", str(ctx.exception))
            self.assertIn("Permission denied", str(ctx.exception))

    def test_obs_log_reports_reads(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "lib.js").write_bytes(b"abc")
            with patch.dict(os.environ, {"WEBSUMMARY_OBS_LOG": "1"}, clear=False), patch("websummary.resolve.eprint") as ep:
                SearchPathSource([td]).resolve("lib.js")
            combined = "\n".join(str(c.args[0]) for c in ep.call_args_list if c.args)
            self.assertIn("[websummary.resolve] read name='lib.js'", combined)
            self.assertIn("bytes=3", combined)

    def test_mapping_and_chain_sources(self) -> None:
        first = MappingSource({"summary.html": "<p>mine</p>"})
        second = MappingSource({"summary.html": b"theirs", "lib.js": b"js"})
        chain = ChainSource(first, second)
        self.assertEqual(chain.resolve("summary.html"), b"<p>mine</p>")
        self.assertEqual(chain.resolve("lib.js"), b"js")
        with self.assertRaises(ResourceNotFound):
            chain.resolve("missing")

    def test_minified_variant_names(self) -> None:
        self.assertEqual(minified_variant("app.js"), "app.min.js")
        self.assertEqual(minified_variant("vendor/styles.css"), "vendor/styles.min.css")
        self.assertIsNone(minified_variant("app.min.js"))
        self.assertIsNone(minified_variant("lib"))

    def test_decode_text_rejects_invalid_utf8(self) -> None:
        self.assertEqual(decode_text("a.js", "é".encode("utf-8")), "é")
        with self.assertRaises(ResourceReadError):
            decode_text("a.js", b"\xff\xfe\x00")


if __name__ == "__main__":
    unittest.main(verbosity=2)
