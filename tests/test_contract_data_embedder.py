from __future__ import annotations

import json
import math
import random
import re
import tempfile
import unittest
from pathlib import Path

from websummary.embed import data_assignment, embed_data, load_payload, serialize_payload
from websummary.errors import SerializationError
from websummary.html_extract import extract_data_from_html_text

_HOSTILE = [
    "</script>",
    "</SCRIPT >",
    "<!--",
    "-->",
    "<script>alert(1)</script>",
    "a & b > c < d",
    "line\u2028sep\u2029para",
    "quote \" backslash \\ tab \t nl \n",
    "é ü 漢字 😀",
]


def _random_tree(rng: random.Random, depth: int = 0):
    choices = ["str", "int", "float", "bool", "none"]
    if depth < 4:
        choices += ["list", "dict"]
    c = rng.choice(choices)
    if c == "str":
        return rng.choice(_HOSTILE) + str(rng.randint(0, 99))
    if c == "int":
        return rng.randint(-(2**53), 2**53)
    if c == "float":
        return rng.uniform(-1e6, 1e6)
    if c == "bool":
        return rng.random() < 0.5
    if c == "none":
        return None
    if c == "list":
        return [_random_tree(rng, depth + 1) for _ in range(rng.randint(0, 4))]
    return {f"k{i}{rng.choice(_HOSTILE)}": _random_tree(rng, depth + 1) for i in range(rng.randint(0, 4))}


class TestDataEmbedderContract(unittest.TestCase):
    def test_assignment_shape(self) -> None:
        self.assertEqual(embed_data({"a": 1}, "data"), '<script>window.data = {"a":1};</script>')
        self.assertEqual(data_assignment([1, True, None], "report"), "window.report = [1,true,null];")

    def test_scalars_pass_through(self) -> None:
        self.assertEqual(serialize_payload(3), "3")
        self.assertEqual(serialize_payload(1.5), "1.5")
        self.assertEqual(serialize_payload(False), "false")
        self.assertEqual(serialize_payload(None), "null")

    def test_output_is_free_of_html_breakout_sequences(self) -> None:
        for s in _HOSTILE:
            out = serialize_payload({"v": s})
            for bad in ("<", ">", "&", "\u2028", "\u2029"):
                self.assertNotIn(bad, out, f"{bad!r} leaked for {s!r}")
            self.assertEqual(json.loads(out), {"v": s})

    def test_embedded_block_is_never_terminated_early(self) -> None:
        html = "<html>" + embed_data({"x": "</script><script>alert(1)</script>"}, "data") + "</html>"
        self.assertEqual(len(re.findall(r"</script", html, flags=re.IGNORECASE)), 1)
        self.assertTrue(html.endswith("</script></html>"))

    def test_random_trees_round_trip(self) -> None:
        rng = random.Random(20241019)
        for _ in range(200):
            value = _random_tree(rng)
            html = "<body>" + embed_data(value, "data") + "</body>"
            self.assertEqual(extract_data_from_html_text(html), value)

    def test_tuples_serialize_as_arrays(self) -> None:
        self.assertEqual(serialize_payload({"t": (1, 2)}), '{"t":[1,2]}')

    def test_key_order_is_preserved_unless_sorted(self) -> None:
        self.assertEqual(serialize_payload({"b": 1, "a": 2}), '{"b":1,"a":2}')
        self.assertEqual(serialize_payload({"b": 1, "a": 2}, sort_keys=True), '{"a":2,"b":1}')

    def test_non_finite_numbers_are_rejected_with_path(self) -> None:
        for bad in (math.nan, math.inf, -math.inf):
            with self.assertRaises(SerializationError) as ctx:
                serialize_payload({"metrics": [1.0, bad]})
            self.assertEqual(ctx.exception.path, "$.metrics[1]")
            self.assertIn("non-finite", str(ctx.exception))

    def test_unrepresentable_values_are_rejected(self) -> None:
        with self.assertRaises(SerializationError):
            serialize_payload({1: "int key"})
        with self.assertRaises(SerializationError):
            serialize_payload({"s": {1, 2}})
        with self.assertRaises(SerializationError):
            serialize_payload({"b": b"bytes"})
        with self.assertRaises(SerializationError):
            serialize_payload(2**70)

    def test_over_deep_nesting_is_rejected(self) -> None:
        value: object = 1
        for _ in range(300):
            value = [value]
        with self.assertRaises(SerializationError):
            serialize_payload(value)

    def test_load_payload_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            good = Path(td) / "data.json"
            good.write_text('{"a": [1, 2, {"b": null}]}', encoding="utf-8")
            self.assertEqual(load_payload(good), {"a": [1, 2, {"b": None}]})

            bad = Path(td) / "bad.json"
            bad.write_text("{not json", encoding="utf-8")
            with self.assertRaises(SerializationError):
                load_payload(bad)


if __name__ == "__main__":
    unittest.main(verbosity=2)
