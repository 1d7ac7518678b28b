"""Robust JSON recovery from LLM responses.

Raw model output goes through four stages: normalization, candidate
extraction (balanced braces first, regex patterns second, the whole text
last), lenient repair, and ordered parse attempts. Every public function here
is pure and never raises on bad input.
"""

import json
import re
from typing import Any, Iterator, List, Optional, Tuple, Union

from component_forge.models import (
    ExtractionCandidate,
    ExtractionStrategy,
    FailureKind,
    ParseResult,
    ParseStrategy,
)
from component_forge.utils.lenient_json import LenientJSONError, parse_lenient

PREVIEW_LENGTH = 1000

_CLOSERS = {"{": "}", "[": "]"}

_FENCE_MARKER = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*")

# Ordered fallbacks; the first plausible match wins.
_PATTERNS: List[Tuple[ExtractionStrategy, re.Pattern]] = [
    (ExtractionStrategy.fenced_block, re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)),
    (ExtractionStrategy.fenced_block, re.compile(r"```\s*([\s\S]*?)\s*```")),
    (
        ExtractionStrategy.prefix_pattern,
        re.compile(
            r"(?:here'?s|here is|the)\s+(?:json|result|output)[:.]?\s*(\{[\s\S]*\})\s*(?:```|\n\n|$)",
            re.IGNORECASE,
        ),
    ),
    (ExtractionStrategy.bullet_pattern, re.compile(r"[-•:]\s*(\{[\s\S]*\})\s*(?:```|\n\n|$)")),
    (ExtractionStrategy.greedy_object, re.compile(r"(\{(?:[^{}]|\{[^{}]*\})*\})")),
    (ExtractionStrategy.array_pattern, re.compile(r"(\[[\s\S]*\])")),
]

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z0-9_$]+)(\s*:)")


def normalize(raw: Optional[str]) -> str:
    """Trim whitespace and markdown fence markers. Idempotent."""
    if not raw:
        return ""
    text = str(raw).strip()
    previous = None
    while text != previous:
        previous = text
        text = _FENCE_MARKER.sub("", text).strip()
    return text


def extract_balanced(text: str, open_char: str = "{") -> Optional[ExtractionCandidate]:
    """
    Return the first balanced span starting at the first ``open_char``.

    Characters inside quoted strings are ignored so braces in values do not
    affect the depth count. Returns None when there is no opener or the span
    never closes (truncated output).
    """
    if open_char not in _CLOSERS or not text:
        return None
    close_char = _CLOSERS[open_char]
    start = text.find(open_char)
    if start < 0:
        return None

    depth = 0
    quote = None
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return ExtractionCandidate(
                    span=(start, i + 1),
                    text=text[start:i + 1],
                    strategy=ExtractionStrategy.brace_balance,
                )
    return None


def _is_plausible(candidate: str) -> bool:
    if candidate.startswith("{"):
        return "}" in candidate
    if candidate.startswith("["):
        return "]" in candidate
    return False


def extract_by_pattern(text: str) -> Optional[ExtractionCandidate]:
    """Try the ordered regex fallbacks and return the first plausible match."""
    if not text:
        return None
    for strategy, pattern in _PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        group = 1 if match.lastindex else 0
        candidate = normalize(match.group(group))
        if candidate and _is_plausible(candidate):
            return ExtractionCandidate(
                span=(match.start(group), match.end(group)),
                text=candidate,
                strategy=strategy,
            )
    return None


def _segments(text: str) -> List[Tuple[str, str]]:
    """
    Split text into ("code" | "dq" | "sq" | "comment", chunk) segments.

    Quoted strings are kept whole (escapes respected); an unterminated quote
    runs to the end of the text.
    """
    segments: List[Tuple[str, str]] = []
    buf: List[str] = []
    i, n = 0, len(text)

    def flush():
        if buf:
            segments.append(("code", "".join(buf)))
            buf.clear()

    while i < n:
        ch = text[i]
        if ch in ('"', "'"):
            flush()
            j = i + 1
            while j < n and text[j] != ch:
                if text[j] == "\\":
                    j += 1
                j += 1
            segments.append(("dq" if ch == '"' else "sq", text[i:j + 1]))
            i = j + 1
        elif text.startswith("/*", i):
            flush()
            end = text.find("*/", i + 2)
            end = n if end < 0 else end + 2
            segments.append(("comment", text[i:end]))
            i = end
        elif text.startswith("//", i):
            flush()
            end = text.find("\n", i)
            end = n if end < 0 else end
            segments.append(("comment", text[i:end]))
            i = end
        else:
            buf.append(ch)
            i += 1
    flush()
    return segments


def _strip_comments(text: str) -> str:
    return "".join(chunk for kind, chunk in _segments(text) if kind != "comment")


def _map_code(text: str, fn) -> str:
    return "".join(fn(chunk) if kind == "code" else chunk for kind, chunk in _segments(text))


def _remove_trailing_commas(text: str) -> str:
    return _map_code(text, lambda chunk: _TRAILING_COMMA.sub(r"\1", chunk))


def _quote_bare_keys(text: str) -> str:
    return _map_code(text, lambda chunk: _BARE_KEY.sub(r'\1"\2"\3', chunk))


def _single_to_double(chunk: str) -> str:
    if len(chunk) < 2 or not chunk.endswith("'"):
        return chunk
    try:
        value = parse_lenient(chunk)
    except LenientJSONError:
        return chunk
    return json.dumps(value, ensure_ascii=False)


def _convert_single_quotes(text: str) -> str:
    return "".join(
        _single_to_double(chunk) if kind == "sq" else chunk for kind, chunk in _segments(text)
    )


def repair(candidate_text: str) -> str:
    """
    Rewrite near-JSON into strict JSON, best effort.

    Applied in order: strip comments, drop trailing commas, quote bare
    keys, convert single-quoted strings. Text inside double-quoted strings is
    never touched, so valid JSON comes back unchanged in meaning.
    """
    if not candidate_text:
        return ""
    text = _strip_comments(candidate_text)
    text = _remove_trailing_commas(text)
    text = _quote_bare_keys(text)
    text = _convert_single_quotes(text)
    return text


def iter_candidates(text: str) -> Iterator[ExtractionCandidate]:
    """Yield extraction candidates in priority order, skipping duplicates."""
    stripped = text.strip() if text else ""
    seen = set()
    for candidate in (
        extract_balanced(stripped, "{"),
        extract_balanced(stripped, "["),
        extract_by_pattern(stripped),
    ):
        if candidate is not None and candidate.text not in seen:
            seen.add(candidate.text)
            yield candidate

    whole = normalize(stripped)
    if whole and whole not in seen:
        yield ExtractionCandidate(
            span=(0, len(stripped)),
            text=whole,
            strategy=ExtractionStrategy.whole_text,
        )


def select_candidate(text: str) -> Optional[ExtractionCandidate]:
    """Return the first candidate in priority order, the one that gets parsed."""
    return next(iter_candidates(text), None)


def _attempt_parse(candidate_text: str) -> Tuple[Any, ParseStrategy]:
    try:
        return json.loads(candidate_text), ParseStrategy.strict_json
    except ValueError:
        pass
    repaired = repair(candidate_text)
    try:
        return json.loads(repaired), ParseStrategy.repaired_json
    except ValueError:
        pass
    return parse_lenient(repaired), ParseStrategy.sandbox_eval


def _failure(raw: Any, error: str, kind: FailureKind) -> ParseResult:
    preview = raw[:PREVIEW_LENGTH] if isinstance(raw, str) else None
    return ParseResult(success=False, error=error, error_kind=kind, raw_response_preview=preview)


def parse_structured(raw: Any) -> ParseResult:
    """
    Recover structured data from a model response.

    Parameters
    ----------
    raw : str, dict or list
        Raw response text, or data that is already structured.

    Returns
    -------
    ParseResult
        Already-structured input passes through with ``strategy_used=None``.
        Otherwise the first candidate from :func:`select_candidate` gets
        strict, repaired, then permissive parsing. If all three fail the
        call fails; later candidates are not tried.
    """
    if isinstance(raw, (dict, list)):
        return ParseResult(success=True, data=raw)
    if not isinstance(raw, str):
        return _failure(None, f"Expected string or object, got {type(raw).__name__}", FailureKind.extraction)
    if not raw.strip():
        return _failure(raw, "Empty response", FailureKind.extraction)

    candidate = select_candidate(raw)
    if candidate is None:
        return _failure(raw, "No JSON candidate found", FailureKind.extraction)
    try:
        data, strategy = _attempt_parse(candidate.text)
    except (LenientJSONError, RecursionError, ValueError) as e:
        return _failure(raw, str(e), FailureKind.parse)
    return ParseResult(
        success=True,
        data=data,
        strategy_used=strategy,
        extraction_strategy=candidate.strategy,
    )


def parse_json_from_response(text: str) -> Optional[Union[list, dict]]:
    """Return only the recovered dict or list, or None."""
    result = parse_structured(text)
    if result.success and isinstance(result.data, (dict, list)):
        return result.data
    return None
