"""Permissive parser for JavaScript-style object literals.

Accepts a superset of JSON: bare identifier keys, single-quoted strings,
comments, trailing commas, hex numbers, leading ``+``/``.`` numbers and the
literals ``undefined``, ``NaN`` and ``Infinity``. The input is only ever
tokenized and walked; nothing is evaluated.
"""

from typing import Any, List

MAX_DEPTH = 200

_IDENT_START = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_$")
_IDENT_CHARS = _IDENT_START | set("0123456789")

_LITERALS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "NaN": float("nan"),
    "Infinity": float("inf"),
}

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "/": "/",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "\n": "",
}


class LenientJSONError(ValueError):
    """Raised when text is not a recognizable object literal."""

    def __init__(self, message: str, pos: int):
        super().__init__(f"{message} at position {pos}")
        self.pos = pos


class _LenientParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.depth = 0

    def parse(self) -> Any:
        self._skip()
        if self.pos >= len(self.text):
            raise LenientJSONError("Empty input", self.pos)
        value = self._value()
        self._skip()
        if self.pos < len(self.text):
            raise LenientJSONError(f"Unexpected trailing content {self.text[self.pos]!r}", self.pos)
        return value

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise LenientJSONError("Unterminated comment", self.pos)
                self.pos = end + 2
            else:
                return

    def _value(self) -> Any:
        ch = self._peek()
        if ch == "{":
            return self._nested(self._object)
        if ch == "[":
            return self._nested(self._array)
        if ch in ("'", '"'):
            return self._string()
        if ch in "+-.0123456789":
            return self._number()
        if ch in _IDENT_START:
            start = self.pos
            word = self._identifier()
            if word in _LITERALS:
                return _LITERALS[word]
            raise LenientJSONError(f"Unexpected identifier {word!r}", start)
        if not ch:
            raise LenientJSONError("Unexpected end of input", self.pos)
        raise LenientJSONError(f"Unexpected character {ch!r}", self.pos)

    def _nested(self, parse_fn) -> Any:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise LenientJSONError("Nesting too deep", self.pos)
        try:
            return parse_fn()
        finally:
            self.depth -= 1

    def _object(self) -> dict:
        self.pos += 1
        result: dict = {}
        while True:
            self._skip()
            ch = self._peek()
            if ch == "}":
                self.pos += 1
                return result
            key = self._key()
            self._skip()
            if self._peek() != ":":
                raise LenientJSONError("Expected ':' after key", self.pos)
            self.pos += 1
            self._skip()
            result[key] = self._value()
            self._skip()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch == "}":
                self.pos += 1
                return result
            elif not ch:
                raise LenientJSONError("Unterminated object", self.pos)
            else:
                raise LenientJSONError(f"Expected ',' or '}}', got {ch!r}", self.pos)

    def _key(self) -> str:
        ch = self._peek()
        if ch in ("'", '"'):
            return self._string()
        if ch in _IDENT_CHARS:
            return self._identifier()
        if not ch:
            raise LenientJSONError("Unterminated object", self.pos)
        raise LenientJSONError(f"Invalid object key start {ch!r}", self.pos)

    def _array(self) -> list:
        self.pos += 1
        result: List[Any] = []
        while True:
            self._skip()
            ch = self._peek()
            if ch == "]":
                self.pos += 1
                return result
            result.append(self._value())
            self._skip()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch == "]":
                self.pos += 1
                return result
            elif not ch:
                raise LenientJSONError("Unterminated array", self.pos)
            else:
                raise LenientJSONError(f"Expected ',' or ']', got {ch!r}", self.pos)

    def _identifier(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in _IDENT_CHARS:
            self.pos += 1
        return self.text[start:self.pos]

    def _string(self) -> str:
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        chunks: List[str] = []
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chunks)
            if ch == "\\":
                self.pos += 1
                esc = self._peek()
                if esc == "u":
                    digits = text[self.pos + 1:self.pos + 5]
                    if len(digits) != 4 or any(c not in "0123456789abcdefABCDEF" for c in digits):
                        raise LenientJSONError("Invalid unicode escape", self.pos)
                    chunks.append(chr(int(digits, 16)))
                    self.pos += 5
                    continue
                if esc == "x":
                    digits = text[self.pos + 1:self.pos + 3]
                    if len(digits) != 2 or any(c not in "0123456789abcdefABCDEF" for c in digits):
                        raise LenientJSONError("Invalid hex escape", self.pos)
                    chunks.append(chr(int(digits, 16)))
                    self.pos += 3
                    continue
                if not esc:
                    break
                chunks.append(_ESCAPES.get(esc, esc))
                self.pos += 1
                continue
            if ch == "\n":
                raise LenientJSONError("Unterminated string", start)
            chunks.append(ch)
            self.pos += 1
        raise LenientJSONError("Unterminated string", start)

    def _number(self) -> Any:
        text = self.text
        start = self.pos
        sign = 1
        if text[self.pos] in "+-":
            sign = -1 if text[self.pos] == "-" else 1
            self.pos += 1
        if text.startswith("Infinity", self.pos):
            self.pos += len("Infinity")
            return sign * float("inf")
        if text[self.pos:self.pos + 2].lower() == "0x":
            self.pos += 2
            digits_start = self.pos
            while self.pos < len(text) and text[self.pos] in "0123456789abcdefABCDEF":
                self.pos += 1
            if self.pos == digits_start:
                raise LenientJSONError("Invalid hex number", start)
            return sign * int(text[digits_start:self.pos], 16)

        digits_start = self.pos
        while self.pos < len(text) and text[self.pos] in "0123456789.eE+-":
            if text[self.pos] in "+-" and text[self.pos - 1] not in "eE":
                break
            self.pos += 1
        literal = text[digits_start:self.pos]
        if not literal or not any(c.isdigit() for c in literal):
            raise LenientJSONError("Invalid number", start)
        try:
            if any(c in literal for c in ".eE"):
                return sign * float(literal)
            return sign * int(literal)
        except ValueError:
            raise LenientJSONError(f"Invalid number {literal!r}", start)


def parse_lenient(text: str) -> Any:
    """Parse a permissive object/array literal into Python data.

    Raises
    ------
    LenientJSONError
        If the text is not a single well-formed literal.
    """
    return _LenientParser(text).parse()
