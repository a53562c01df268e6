"""
Response sanitizer: repairs near-JSON text from the generator into JSON text.

The generator wraps its object in markdown fences or prose, leaves raw line
breaks inside string literals, and occasionally emits comments or trailing
commas. Repairs never touch the visible content of string literals; the only
characters removed from inside strings are illegal control characters.
"""
import logging
import re

from sitebuilder.core.exceptions import NoJsonBoundary

logger = logging.getLogger(__name__)

CODE_FENCE_RE = re.compile(r"```(?:json5?|javascript|js)?", re.IGNORECASE)

# Raw characters that have a two-character JSON escape
CONTROL_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
    "\b": "\\b",
}

VALID_ESCAPE_CHARS = frozenset('"\\/bfnrtu')
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
JSON_WHITESPACE = frozenset(" \t\n\r")


def is_control_character(ch: str) -> bool:
    code = ord(ch)
    return code < 0x20 or 0x7F <= code <= 0x9F


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers (with an optional language tag)."""
    return CODE_FENCE_RE.sub("", text)


def extract_json_span(text: str) -> str:
    """Slice from the first ``{`` to the last ``}``, dropping prose around it."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise NoJsonBoundary(preview=text[:120])
    return text[start:end + 1]


def _is_valid_escape(text: str, i: int) -> bool:
    """Whether the backslash at ``text[i]`` starts a legal JSON escape."""
    if i + 1 >= len(text):
        return False
    nxt = text[i + 1]
    if nxt not in VALID_ESCAPE_CHARS:
        return False
    if nxt == "u":
        digits = text[i + 2:i + 6]
        return len(digits) == 4 and all(c in HEX_DIGITS for c in digits)
    return True


def escape_control_characters(text: str, aggressive: bool = False) -> str:
    """Escape or drop control characters inside string literals.

    Tracks two bits of state: whether we are inside a string (toggled by an
    unescaped quote) and whether the previous character was a backslash inside
    a string. The character after a backslash is copied verbatim, so an
    escaped quote never ends a string.

    ``aggressive`` is the second-chance repair used after a parse failure: a
    backslash that does not start a legal escape is itself escaped, and stray
    control characters between tokens are dropped.
    """
    out: list[str] = []
    in_string = False
    escape_pending = False

    for i, ch in enumerate(text):
        if in_string:
            if escape_pending:
                out.append(ch)
                escape_pending = False
            elif ch == "\\":
                if aggressive and not _is_valid_escape(text, i):
                    out.append("\\\\")
                else:
                    out.append(ch)
                    escape_pending = True
            elif ch == '"':
                out.append(ch)
                in_string = False
            elif ch in CONTROL_ESCAPES:
                out.append(CONTROL_ESCAPES[ch])
            elif is_control_character(ch):
                continue
            else:
                out.append(ch)
        else:
            if ch == '"':
                in_string = True
            elif aggressive and is_control_character(ch) and ch not in JSON_WHITESPACE:
                continue
            out.append(ch)

    return "".join(out)


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and stray backticks outside strings."""
    out: list[str] = []
    in_string = False
    escape_pending = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escape_pending:
                escape_pending = False
            elif ch == "\\":
                escape_pending = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        nxt = text[i + 1] if i + 1 < n else ""
        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch == "/" and nxt == "/":
            # Keep the newline that ends the comment
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        elif ch != "`":
            out.append(ch)
        i += 1

    return "".join(out)


def remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede ``}`` or ``]`` (whitespace allowed)."""
    out: list[str] = []
    in_string = False
    escape_pending = False
    n = len(text)

    for i, ch in enumerate(text):
        if in_string:
            if escape_pending:
                escape_pending = False
            elif ch == "\\":
                escape_pending = True
            elif ch == '"':
                in_string = False
            out.append(ch)
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in JSON_WHITESPACE:
                j += 1
            if j < n and text[j] in "}]":
                continue
        out.append(ch)

    return "".join(out)


def sanitize(raw: str) -> str:
    """Repair a raw generator response into syntactically valid JSON text.

    Raises ``NoJsonBoundary`` when the response holds no ``{ ... }`` span;
    every other repair step is best-effort and never fails.
    """
    if not isinstance(raw, str):
        raise NoJsonBoundary("Received a non-text response from the generator")

    logger.info(f"Sanitizing generated response ({len(raw)} chars)")
    logger.debug(f"Raw response head: {raw[:500]!r}")

    cleaned = strip_code_fences(raw)
    cleaned = extract_json_span(cleaned)
    cleaned = strip_comments(cleaned)
    cleaned = escape_control_characters(cleaned)
    cleaned = remove_trailing_commas(cleaned)

    logger.info(f"Sanitized response: {len(cleaned)} chars")
    return cleaned
