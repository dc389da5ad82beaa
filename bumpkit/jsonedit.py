"""Format-preserving edits of JSON and JSONC documents.

json.loads/json.dumps would normalize whitespace and drop the comments that
jsr.jsonc and deno.jsonc files may carry. Instead the document is tokenized
once to learn where every value lives, and edits are spliced into the
original text so everything outside the edited values is kept byte for byte.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    | (?P<punct>[{}\[\]:,])
    | (?P<literal>[^\s{}\[\]:,"/]+)
    """,
    re.VERBOSE | re.DOTALL,
)

MISSING: Any = object()


class JsonEditError(ValueError):
    """Raised when a document can not be parsed or an edit can not be applied."""


@dataclass
class _Token:
    kind: str
    text: str
    start: int
    end: int


@dataclass
class _Node:
    kind: str  # "object", "array" or "value"
    start: int
    end: int
    value: Any = None
    members: list[_Member] = field(default_factory=list)
    items: list[_Node] = field(default_factory=list)


@dataclass
class _Member:
    key: str
    key_start: int
    value: _Node
    comma_end: int | None = None


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise JsonEditError(f"Unexpected character {text[pos]!r} at offset {pos}")
        kind = match.lastgroup or ""
        if kind not in ("ws", "comment"):
            tokens.append(_Token(kind, match.group(), match.start(), match.end()))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self.tokens = tokens
        self.index = 0

    def _next(self) -> _Token:
        if self.index >= len(self.tokens):
            raise JsonEditError("Unexpected end of document")
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _peek(self) -> _Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def parse(self) -> _Node:
        node = self._value()
        if self._peek() is not None:
            raise JsonEditError(f"Unexpected data at offset {self._peek().start}")  # type: ignore[union-attr]
        return node

    def _value(self) -> _Node:
        token = self._next()
        if token.text == "{":
            return self._object(token)
        if token.text == "[":
            return self._array(token)
        if token.kind in ("string", "literal"):
            try:
                value = json.loads(token.text)
            except json.JSONDecodeError as exc:
                raise JsonEditError(f"Invalid value {token.text!r} at offset {token.start}") from exc
            return _Node("value", token.start, token.end, value=value)
        raise JsonEditError(f"Unexpected {token.text!r} at offset {token.start}")

    def _object(self, open_token: _Token) -> _Node:
        node = _Node("object", open_token.start, open_token.end)
        while True:
            token = self._next()
            if token.text == "}":
                node.end = token.end
                return node
            if token.kind != "string":
                raise JsonEditError(f"Expected a key at offset {token.start}")
            if self._next().text != ":":
                raise JsonEditError(f"Expected ':' after key at offset {token.end}")
            node.members.append(_Member(json.loads(token.text), token.start, self._value()))
            sep = self._next()
            if sep.text == "}":
                node.end = sep.end
                return node
            if sep.text != ",":
                raise JsonEditError(f"Expected ',' or '}}' at offset {sep.start}")
            node.members[-1].comma_end = sep.end

    def _array(self, open_token: _Token) -> _Node:
        node = _Node("array", open_token.start, open_token.end)
        while True:
            peek = self._peek()
            if peek is not None and peek.text == "]":
                node.end = self._next().end
                return node
            node.items.append(self._value())
            sep = self._next()
            if sep.text == "]":
                node.end = sep.end
                return node
            if sep.text != ",":
                raise JsonEditError(f"Expected ',' or ']' at offset {sep.start}")


def _to_python(node: _Node) -> Any:
    if node.kind == "object":
        return {m.key: _to_python(m.value) for m in node.members}
    if node.kind == "array":
        return [_to_python(item) for item in node.items]
    return node.value


def _line_indent(text: str, pos: int) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    line = text[line_start:pos]
    return line[: len(line) - len(line.lstrip())]


def _is_blank(text: str) -> bool:
    return not text.strip()


def _removal_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Widen [start, end) over trailing blanks, and over the whole line when
    nothing else (a comment, another member) shares it."""
    while end < len(text) and text[end] in " \t":
        end += 1
    line_start = text.rfind("\n", 0, start) + 1
    if _is_blank(text[line_start:start]):
        for newline in ("\r\n", "\n"):
            if text.startswith(newline, end):
                return line_start, end + len(newline)
    return start, end


def _detect_indent_unit(text: str) -> str:
    match = re.search(r"\n([ \t]+)\S", text)
    return match.group(1) if match else "  "


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas."""
    return _to_python(_Parser(_tokenize(text)).parse())


class JsonDocument:
    """A JSON/JSONC document supporting in-place value edits.

    Example:
        doc = JsonDocument(path.read_bytes().decode("utf-8"))
        doc.set(["version"], "2.0.0")
        doc.remove(["publishConfig", "tag"])
        path.write_text(doc.text, encoding="utf-8", newline="")
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self._root = _Parser(_tokenize(text)).parse()

    @property
    def data(self) -> Any:
        """The document as plain Python values."""
        return _to_python(self._root)

    @property
    def _newline(self) -> str:
        return "\r\n" if "\r\n" in self.text else "\n"

    def _find(self, path: Sequence[str]) -> tuple[_Node | None, _Member | None]:
        """Return (parent object, member) for path; member is None when absent."""
        node = self._root
        parent: _Node | None = None
        member: _Member | None = None
        for key in path:
            if node.kind != "object":
                return None, None
            parent = node
            member = next((m for m in node.members if m.key == key), None)
            if member is None:
                return parent, None
            node = member.value
        return parent, member

    def get(self, path: Sequence[str], default: Any = MISSING) -> Any:
        _, member = self._find(path)
        return _to_python(member.value) if member else default

    def _splice(self, start: int, end: int, replacement: str) -> None:
        self.text = self.text[:start] + replacement + self.text[end:]
        self._root = _Parser(_tokenize(self.text)).parse()

    def _render(self, value: Any, indent: str) -> str:
        if isinstance(value, (dict, list)) and value:
            unit = _detect_indent_unit(self.text)
            return json.dumps(value, indent=unit, ensure_ascii=False).replace("\n", self._newline + indent)
        return json.dumps(value, ensure_ascii=False)

    def set(self, path: Sequence[str], value: Any) -> None:
        """Set the value at path, creating missing parent objects."""
        if not path:
            raise JsonEditError("Can not replace the document root")
        _, member = self._find(path)
        if member is not None:
            indent = _line_indent(self.text, member.key_start)
            self._splice(member.value.start, member.value.end, self._render(value, indent))
            return

        # Walk down to the deepest existing object, then insert the rest as a new member
        node = self._root
        depth = 0
        for depth, key in enumerate(path):
            if node.kind != "object":
                raise JsonEditError(f"Can not set {'.'.join(path)}: parent is not an object")
            found = next((m for m in node.members if m.key == key), None)
            if found is None:
                break
            node = found.value
        if node.kind != "object":
            raise JsonEditError(f"Can not set {'.'.join(path)}: parent is not an object")

        new_value: Any = value
        for key in reversed(path[depth + 1 :]):
            new_value = {key: new_value}
        self._insert_member(node, path[depth], new_value)

    def _insert_member(self, obj: _Node, key: str, value: Any) -> None:
        if obj.members:
            first, last = obj.members[0], obj.members[-1]
            gap = self.text[obj.start + 1 : first.key_start]
            if "\n" in gap:
                indent = _line_indent(self.text, first.key_start)
                lead = self._newline + indent
            else:
                indent = ""
                lead = " " if gap else ""
            rendered = f",{lead}{json.dumps(key, ensure_ascii=False)}: {self._render(value, indent)}"
            self._splice(last.value.end, last.value.end, rendered)
            return

        base = _line_indent(self.text, obj.start)
        if "\n" in self.text:
            indent = base + _detect_indent_unit(self.text)
            newline = self._newline
            rendered = (
                f"{newline}{indent}{json.dumps(key, ensure_ascii=False)}: "
                f"{self._render(value, indent)}{newline}{base}"
            )
        else:
            rendered = f"{json.dumps(key, ensure_ascii=False)}: {self._render(value, '')}"
        self._splice(obj.start + 1, obj.end - 1, rendered)

    def remove(self, path: Sequence[str]) -> bool:
        """Remove the member at path. Returns False when it does not exist.

        Only the member and its separating comma go; comments around it stay.
        """
        parent, member = self._find(path)
        if parent is None or member is None:
            return False
        text = self.text
        members = parent.members
        index = members.index(member)
        end = member.comma_end or member.value.end

        if (
            len(members) == 1
            and _is_blank(text[parent.start + 1 : member.key_start])
            and _is_blank(text[end : parent.end - 1])
        ):
            self._splice(parent.start + 1, parent.end - 1, "")
        elif member.comma_end is None and index > 0:
            # Last member: the comma to drop belongs to the previous one
            comma_end = members[index - 1].comma_end
            if comma_end is None:
                raise JsonEditError(f"Can not remove {'.'.join(path)}: missing separator")
            if _is_blank(text[comma_end : member.key_start]):
                self._splice(comma_end - 1, member.value.end, "")
            else:
                start, end = _removal_span(text, member.key_start, member.value.end)
                self._splice(start, end, "")
                self._splice(comma_end - 1, comma_end, "")
        else:
            start, end = _removal_span(text, member.key_start, end)
            self._splice(start, end, "")
        return True
