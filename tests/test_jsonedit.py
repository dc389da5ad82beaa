"""Tests for bumpkit.jsonedit."""

from __future__ import annotations

import json

import pytest

from bumpkit.jsonedit import MISSING, JsonDocument, JsonEditError, parse_jsonc


class TestParseJsonc:
    def test_plain_json(self) -> None:
        assert parse_jsonc('{"a": [1, 2.5, true, null, "x"]}') == {"a": [1, 2.5, True, None, "x"]}

    def test_comments_and_trailing_commas(self) -> None:
        text = """{
  // line comment
  "name": "pkg", /* block */
  "list": [1, 2,],
}"""
        assert parse_jsonc(text) == {"name": "pkg", "list": [1, 2]}

    def test_comment_markers_inside_strings(self) -> None:
        assert parse_jsonc('{"url": "https://example.com/*x*/"}') == {"url": "https://example.com/*x*/"}

    def test_invalid(self) -> None:
        with pytest.raises(JsonEditError):
            parse_jsonc('{"a": }')


class TestJsonDocument:
    def test_get(self) -> None:
        doc = JsonDocument('{"a": {"b": 1}}')
        assert doc.get(["a", "b"]) == 1
        assert doc.get(["a", "c"]) is MISSING
        assert doc.get(["a", "c"], None) is None

    def test_set_existing_value_keeps_the_rest(self) -> None:
        text = '{\n  // the version\n  "version": "1.0.0",\n  "name": "pkg"\n}\n'
        doc = JsonDocument(text)
        doc.set(["version"], "2.0.0")
        assert doc.text == text.replace("1.0.0", "2.0.0")

    def test_set_inserts_member(self) -> None:
        doc = JsonDocument('{\n  "version": "1.0.0"\n}\n')
        doc.set(["publishConfig", "tag"], "beta")
        assert doc.data == {"version": "1.0.0", "publishConfig": {"tag": "beta"}}
        assert doc.text == '{\n  "version": "1.0.0",\n  "publishConfig": {\n    "tag": "beta"\n  }\n}\n'

    def test_set_into_empty_object(self) -> None:
        doc = JsonDocument('{\n  "publishConfig": {}\n}\n')
        doc.set(["publishConfig", "tag"], "next")
        assert doc.data == {"publishConfig": {"tag": "next"}}

    def test_set_on_single_line_document(self) -> None:
        doc = JsonDocument('{"version": "1.0.0"}')
        doc.set(["private"], True)
        assert json.loads(doc.text) == {"version": "1.0.0", "private": True}

    def test_set_under_non_object(self) -> None:
        doc = JsonDocument('{"files": ["a"]}')
        with pytest.raises(JsonEditError):
            doc.set(["files", "x"], 1)

    def test_remove_middle_member(self) -> None:
        doc = JsonDocument('{\n  "a": 1,\n  "b": 2,\n  "c": 3\n}')
        assert doc.remove(["b"])
        assert doc.text == '{\n  "a": 1,\n  "c": 3\n}'

    def test_remove_last_member(self) -> None:
        doc = JsonDocument('{\n  "a": 1,\n  "b": 2\n}')
        assert doc.remove(["b"])
        assert doc.text == '{\n  "a": 1\n}'

    def test_remove_sole_member(self) -> None:
        doc = JsonDocument('{"publishConfig": {"tag": "beta"}}')
        assert doc.remove(["publishConfig", "tag"])
        assert doc.data == {"publishConfig": {}}

    def test_remove_missing(self) -> None:
        doc = JsonDocument('{"a": 1}')
        assert not doc.remove(["b"])
        assert not doc.remove(["a", "b"])

    def test_remove_keeps_comments_between_members(self) -> None:
        doc = JsonDocument(
            '{\n  "tag": "beta",\n  // scoped packages must be public\n  "access": "public"\n}'
        )
        assert doc.remove(["tag"])
        assert doc.text == '{\n  // scoped packages must be public\n  "access": "public"\n}'

    def test_remove_last_member_after_comment(self) -> None:
        doc = JsonDocument('{\n  "access": "public",\n  // dist-tag\n  "tag": "beta"\n}')
        assert doc.remove(["tag"])
        assert doc.text == '{\n  "access": "public"\n  // dist-tag\n}'

    def test_remove_sole_member_keeps_comment(self) -> None:
        doc = JsonDocument('{\n  /* npm */\n  "tag": "beta"\n}')
        assert doc.remove(["tag"])
        assert doc.text == "{\n  /* npm */\n}"

    def test_remove_on_single_line(self) -> None:
        doc = JsonDocument('{"tag": "beta", "access": "public"}')
        assert doc.remove(["tag"])
        assert doc.text == '{"access": "public"}'

    def test_remove_keeps_crlf(self) -> None:
        doc = JsonDocument('{\r\n  "a": 1,\r\n  "b": 2,\r\n  "c": 3\r\n}\r\n')
        assert doc.remove(["b"])
        assert doc.text == '{\r\n  "a": 1,\r\n  "c": 3\r\n}\r\n'
