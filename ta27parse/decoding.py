"""Source decoding: newline translation, BOM and coding-spec handling."""

from __future__ import annotations

from dataclasses import dataclass

_BOM = b"\xef\xbb\xbf"
_WHITESPACE = " \t\x0c"
_NATIVE_ENCODINGS = ("utf-8", "iso-8859-1")


class DecodeError(SyntaxError):
    """Raised when source bytes cannot be decoded as declared."""


@dataclass(frozen=True)
class DecodedSource:
    """Source bytes ready for tokenizing, with the encoding that was found.

    ``data`` is UTF-8 when the source declared an encoding that had to be
    recoded; for UTF-8 and Latin-1 declarations, and for sources without a
    declaration, it holds the bytes as given (after newline translation and
    removal of a UTF-8 byte order mark).
    """

    data: bytes
    encoding: str | None = None


def get_normal_name(name: str) -> str:
    """Map spellings of UTF-8 and Latin-1 onto their canonical names."""
    buf = name[:12].replace("_", "-").lower()
    if buf == "utf-8" or buf.startswith("utf-8-"):
        return "utf-8"
    if buf in ("latin-1", "iso-8859-1", "iso-latin-1") or buf.startswith(
        ("latin-1-", "iso-8859-1-", "iso-latin-1-")
    ):
        return "iso-8859-1"
    return name


def _is_name_char(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch in ("-", "_", ".")


def get_coding_spec(line: str | bytes) -> str | None:
    """Return the encoding named by a ``coding:`` comment on ``line``, if any.

    The comment must be the only thing on the line.
    """
    if isinstance(line, bytes):
        line = line.decode("latin-1")
    size = len(line)
    limit = size - 6
    i = 0
    while i < limit:
        ch = line[i]
        if ch == "#":
            break
        if ch not in _WHITESPACE:
            return None
        i += 1
    while i < limit:
        if line.startswith("coding", i) and line[i + 6] in (":", "="):
            t = i + 7
            while t < size and line[t] in (" ", "\t"):
                t += 1
            begin = t
            while t < size and _is_name_char(line[t]):
                t += 1
            if begin < t:
                return get_normal_name(line[begin:t])
        i += 1
    return None


def translate_newlines(source: str | bytes, exec_input: bool) -> str | bytes:
    """Turn CR LF and lone CR into LF.

    For exec input a final newline is added when missing; when the input
    ends in CR LF, exec input always gains one more newline.
    """
    if isinstance(source, str):
        cr, lf = "\r", "\n"
    else:
        cr, lf = b"\r", b"\n"
    result = source.replace(cr + lf, lf).replace(cr, lf)
    if exec_input and (not result.endswith(lf) or source.endswith(cr + lf)):
        result += lf
    return result


def _has_code(line: str) -> bool:
    for ch in line:
        if ch in ("#", "\n", "\r"):
            return False
        if ch not in _WHITESPACE:
            return True
    return False


def decode_source(data: bytes, exec_input: bool) -> DecodedSource:
    """Prepare raw source bytes for the tokenizer.

    Newlines are translated, a UTF-8 byte order mark is removed, and a
    coding declaration on the first or second line is honoured.
    """
    text = translate_newlines(bytes(data), exec_input)
    encoding: str | None = None
    if text.startswith(_BOM):
        text = text[len(_BOM):]
        encoding = "utf-8"

    parts = text.split(b"\n", 2)
    candidates: list[bytes] = []
    if len(parts) > 1:
        candidates.append(parts[0])
        if len(parts) > 2:
            candidates.append(parts[1] + b"\n")

    recode: str | None = None
    for line in candidates:
        spec = get_coding_spec(line)
        if spec is None:
            if _has_code(line.decode("latin-1")):
                break
            continue
        if encoding is None:
            encoding = spec
            if spec not in _NATIVE_ENCODINGS:
                recode = spec
        elif encoding != spec:
            raise DecodeError(f"encoding problem: {spec} with BOM")
        break

    if recode is not None:
        try:
            text = text.decode(recode).encode("utf-8")
        except (LookupError, UnicodeError) as exc:
            raise DecodeError(str(exc)) from exc
    return DecodedSource(text, encoding)


def restore_encoding(
    text: bytes, encoding: str | None, offset: int
) -> tuple[bytes | None, int]:
    """Convert UTF-8 ``text`` back to the source encoding for error reports.

    Returns the re-encoded text (or ``None`` when there is no encoding or it
    cannot be used) and the error offset adjusted to the re-encoded bytes.
    """
    if encoding is None:
        return None, offset
    try:
        line = text.decode("utf-8", "replace").encode(encoding, "replace")
    except (LookupError, UnicodeError):
        return None, offset
    if offset > 1:
        try:
            prefix = text[: offset - 1].decode("utf-8", "replace")
            offset = len(prefix.encode(encoding, "replace")) + 1
        except (LookupError, UnicodeError):
            pass
    return line, offset