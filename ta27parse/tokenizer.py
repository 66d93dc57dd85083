"""Tokenizer for Python 2.7 source, with support for type comments."""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from dataclasses import dataclass

from .decoding import decode_source, translate_newlines
from .tokens import ErrorCode, Token, one_char, three_chars, two_chars

TABSIZE = 8
"""Default tab stop width; never changes the meaning of portable code."""

MAXINDENT = 100
"""Maximum depth of nested indentation."""

EOF = -1

_SPACE = ord(" ")
_TAB = ord("\t")
_FORMFEED = 0x0C
_NEWLINE = ord("\n")
_HASH = ord("#")
_UNDERSCORE = ord("_")
_DOT = ord(".")
_BACKSLASH = ord("\\")
_ZERO = ord("0")
_EIGHT = ord("8")
_LESS = ord("<")

# Spaces in this prefix stand for "zero or more spaces or tabs".
_TYPE_COMMENT_PREFIX = b"# type: "
_TAB_FORMS = (b"tab-width:", b":tabstop=", b":ts=", b"set tabsize=")
_COMMENT_BUFSIZE = 80

_Scan = tuple[Token, "int | None", "int | None"]


def _isdigit(c: int) -> bool:
    return 48 <= c <= 57


def _isalpha(c: int) -> bool:
    return 65 <= c <= 90 or 97 <= c <= 122


def _isalnum(c: int) -> bool:
    return _isdigit(c) or _isalpha(c)


def _isxdigit(c: int) -> bool:
    return _isdigit(c) or 65 <= c <= 70 or 97 <= c <= 102


def _in(c: int, chars: bytes) -> bool:
    return 0 <= c < 256 and c in chars


def _chr(c: int) -> str:
    return "" if c == EOF else chr(c)


def _atoi(text: bytes) -> int:
    text = text.lstrip(b" \t\n\v\f\r")
    sign = 1
    if text[:1] in (b"+", b"-"):
        sign = -1 if text[:1] == b"-" else 1
        text = text[1:]
    digits = len(text) - len(text.lstrip(b"0123456789"))
    return sign * int(text[:digits]) if digits else 0


def _until_nul(data: bytes) -> bytes:
    return data.partition(b"\0")[0]


@dataclass(frozen=True)
class TokenInfo:
    """One token: its type, text, line number and column (-1 if unknown)."""

    type: Token
    string: str
    lineno: int
    col_offset: int


class Tokenizer:
    """Splits prepared source bytes into tokens, one ``get()`` at a time.

    After an ``ERRORTOKEN`` the reason is in ``done``; ``buffer_text`` and
    ``buffer_offset`` describe the line and position of the failure.
    """

    def __init__(
        self,
        data: bytes,
        encoding: str | None = None,
        filename: str = "<string>",
    ) -> None:
        self._data = data
        self.encoding = encoding
        self.filename = filename
        self._buf = 0
        self._cur = 0
        self._inp = 0
        self._start: int | None = None
        self._line_start = 0
        self.done = ErrorCode.OK
        self.tabsize = TABSIZE
        self.indent = 0
        self._indstack = [0] * MAXINDENT
        self.atbol = True
        self.pendin = 0
        self.lineno = 0
        self.level = 0
        self.altwarning = False
        self.alterror = False
        self._alttabsize = 1
        self._altindstack = [0] * MAXINDENT
        self.cont_line = False

    @classmethod
    def from_string(
        cls, source: bytes | bytearray | memoryview | str, exec_input: bool = True
    ) -> Tokenizer:
        """Tokenize raw source bytes, honouring a BOM or coding declaration."""
        if isinstance(source, str):
            source = source.encode("utf-8")
        decoded = decode_source(_until_nul(bytes(source)), exec_input)
        return cls(decoded.data, decoded.encoding)

    @classmethod
    def from_utf8(
        cls, source: bytes | bytearray | memoryview | str, exec_input: bool = True
    ) -> Tokenizer:
        """Tokenize UTF-8 source; coding declarations are ignored."""
        if isinstance(source, str):
            source = source.encode("utf-8", "surrogateescape")
        data = translate_newlines(_until_nul(bytes(source)), exec_input)
        return cls(data)

    @property
    def buffer_offset(self) -> int:
        """Position of the reading point within ``buffer_text``."""
        return self._cur - self._buf

    @property
    def buffer_text(self) -> bytes:
        """The source text held for the current token or line."""
        return self._data[self._buf:self._inp]

    def get(self) -> TokenInfo:
        """Return the next token; ``ERRORTOKEN`` signals failure."""
        type_, start, end = self._get()
        if start is None or end is None:
            raw = b""
            col_offset = -1
        else:
            raw = self._data[start:end]
            col_offset = start - self._line_start if start >= self._line_start else -1
        return TokenInfo(type_, self._decode(raw), self.lineno, col_offset)

    def __iter__(self) -> Iterator[TokenInfo]:
        while True:
            token = self.get()
            yield token
            if token.type in (Token.ENDMARKER, Token.ERRORTOKEN):
                return

    def _decode(self, raw: bytes) -> str:
        if self.encoding == "iso-8859-1":
            return raw.decode("latin-1")
        return raw.decode("utf-8", "surrogateescape")

    # Character input

    def _nextc(self) -> int:
        if self._cur != self._inp:
            c = self._data[self._cur]
            self._cur += 1
            return c
        if self.done != ErrorCode.OK:
            return EOF
        newline = self._data.find(b"\n", self._inp)
        end = newline + 1 if newline >= 0 else len(self._data)
        if end == self._inp:
            self.done = ErrorCode.EOF
            return EOF
        if self._start is None:
            self._buf = self._cur
        self._line_start = self._cur
        self.lineno += 1
        self._inp = end
        c = self._data[self._cur]
        self._cur += 1
        return c

    def _backup(self, c: int) -> None:
        if c != EOF:
            self._cur -= 1
            if self._cur < self._buf:
                raise RuntimeError("tok_backup: beginning of buffer")

    def _fail(self, code: ErrorCode) -> _Scan:
        self.done = code
        self._cur = self._inp
        return Token.ERRORTOKEN, None, None

    # Indentation

    def _indent_error(self) -> bool:
        if self.alterror:
            self.done = ErrorCode.TABSPACE
            self._cur = self._inp
            return True
        if self.altwarning:
            warnings.warn(
                f"{self.filename}: inconsistent use of tabs and spaces in indentation",
                RuntimeWarning,
                stacklevel=3,
            )
            self.altwarning = False
        return False

    def _read_indentation(self) -> tuple[bool, bool]:
        """Measure the new line's indentation; return (blankline, failed)."""
        col = altcol = 0
        self.atbol = False
        while True:
            c = self._nextc()
            if c == _SPACE:
                col += 1
                altcol += 1
            elif c == _TAB:
                col = (col // self.tabsize + 1) * self.tabsize
                altcol = (altcol // self._alttabsize + 1) * self._alttabsize
            elif c == _FORMFEED:
                col = altcol = 0
            else:
                break
        self._backup(c)
        blankline = c in (_HASH, _NEWLINE)
        if blankline or self.level != 0:
            return blankline, False

        indstack = self._indstack
        altstack = self._altindstack
        if col == indstack[self.indent]:
            if altcol != altstack[self.indent] and self._indent_error():
                return blankline, True
        elif col > indstack[self.indent]:
            if self.indent + 1 >= MAXINDENT:
                self._fail(ErrorCode.TOODEEP)
                return blankline, True
            if altcol <= altstack[self.indent] and self._indent_error():
                return blankline, True
            self.pendin += 1
            self.indent += 1
            indstack[self.indent] = col
            altstack[self.indent] = altcol
        else:
            while self.indent > 0 and col < indstack[self.indent]:
                self.pendin -= 1
                self.indent -= 1
            if col != indstack[self.indent]:
                self._fail(ErrorCode.DEDENT)
                return blankline, True
            if altcol != altstack[self.indent] and self._indent_error():
                return blankline, True
        return blankline, False

    # Token scanning

    def _get(self) -> _Scan:
        while True:
            self._start = None
            blankline = False
            if self.atbol:
                blankline, failed = self._read_indentation()
                if failed:
                    return Token.ERRORTOKEN, None, None
            self._start = self._cur
            if self.pendin < 0:
                self.pendin += 1
                return Token.DEDENT, None, None
            if self.pendin > 0:
                self.pendin -= 1
                return Token.INDENT, None, None
            result = self._scan(blankline)
            if result is not None:
                return result

    def _scan(self, blankline: bool) -> _Scan | None:
        """Scan one token; ``None`` means move on to the next line."""
        while True:
            self._start = None
            c = self._nextc()
            while c in (_SPACE, _TAB, _FORMFEED):
                c = self._nextc()
            self._start = self._cur - 1

            if c == _HASH:
                result, c = self._comment(blankline)
                if result is not None:
                    return result

            if c == EOF:
                if self.done == ErrorCode.EOF:
                    return Token.ENDMARKER, None, None
                return Token.ERRORTOKEN, None, None

            if _isalpha(c) or c == _UNDERSCORE:
                return self._name(c)

            if c == _NEWLINE:
                self.atbol = True
                if blankline or self.level > 0:
                    return None
                self.cont_line = False
                return Token.NEWLINE, self._start, self._cur - 1

            if c == _DOT:
                c = self._nextc()
                if _isdigit(c):
                    return self._fraction()
                self._backup(c)
                return Token.DOT, self._start, self._cur

            if _isdigit(c):
                return self._number(c)

            if _in(c, b"'\""):
                return self._string(c)

            if c == _BACKSLASH:
                c = self._nextc()
                if c != _NEWLINE:
                    return self._fail(ErrorCode.LINECONT)
                self.cont_line = True
                continue

            return self._operator(c)

    def _comment(self, blankline: bool) -> tuple[_Scan | None, int]:
        comment = bytearray()
        while True:
            c = self._nextc()
            if c != EOF:
                comment.append(c)
            if c in (EOF, _NEWLINE) or len(comment) + 1 >= _COMMENT_BUFSIZE:
                break
        for form in _TAB_FORMS:
            pos = comment.find(form)
            if pos >= 0:
                size = _atoi(bytes(comment[pos + len(form):]))
                if 1 <= size <= 40:
                    self.tabsize = size
        while c not in (EOF, _NEWLINE):
            c = self._nextc()

        data = self._data
        assert self._start is not None
        p = self._start
        for ch in _TYPE_COMMENT_PREFIX:
            if p >= self._cur:
                return None, c
            if ch == _SPACE:
                while p < len(data) and data[p] in (_SPACE, _TAB):
                    p += 1
            elif p < len(data) and data[p] == ch:
                p += 1
            else:
                return None, c

        self._backup(c)
        cur = self._cur
        ignore_end = p + 6
        is_type_ignore = (
            cur >= ignore_end
            and data[p:ignore_end] == b"ignore"
            and not (
                cur > ignore_end
                and (data[ignore_end] >= 128 or _isalnum(data[ignore_end]))
            )
        )
        if is_type_ignore:
            if blankline:
                self._nextc()
                self.atbol = True
            return (Token.TYPE_IGNORE, ignore_end, cur), c
        return (Token.TYPE_COMMENT, p, cur), c

    def _name(self, c: int) -> _Scan:
        if _in(c, b"bBuU"):
            c = self._nextc()
            if _in(c, b"rR"):
                c = self._nextc()
            if _in(c, b"'\""):
                return self._string(c)
        elif _in(c, b"rR"):
            c = self._nextc()
            if _in(c, b"'\""):
                return self._string(c)
        while c != EOF and (_isalnum(c) or c == _UNDERSCORE):
            c = self._nextc()
        self._backup(c)
        return Token.NAME, self._start, self._cur

    def _string(self, quote: int) -> _Scan:
        assert self._start is not None
        quote2 = self._cur - self._start + 1
        triple = False
        tripcount = 0
        while True:
            c = self._nextc()
            if c == _NEWLINE:
                if not triple:
                    self.done = ErrorCode.EOLS
                    self._backup(c)
                    return Token.ERRORTOKEN, None, None
                tripcount = 0
                self.cont_line = True
            elif c == EOF:
                return self._fail(ErrorCode.EOFS if triple else ErrorCode.EOLS)
            elif c == quote:
                tripcount += 1
                if self._cur - self._start == quote2:
                    c = self._nextc()
                    if c == quote:
                        triple = True
                        tripcount = 0
                        continue
                    self._backup(c)
                if not triple or tripcount == 3:
                    break
            elif c == _BACKSLASH:
                tripcount = 0
                c = self._nextc()
                if c == EOF:
                    return self._fail(ErrorCode.EOLS)
            else:
                tripcount = 0
        return Token.STRING, self._start, self._cur

    def _token_error(self, c: int) -> _Scan:
        self.done = ErrorCode.TOKEN
        self._backup(c)
        return Token.ERRORTOKEN, None, None

    def _end_number(self, c: int) -> _Scan:
        self._backup(c)
        return Token.NUMBER, self._start, self._cur

    def _imaginary(self) -> _Scan:
        return self._end_number(self._nextc())

    def _fraction(self) -> _Scan:
        c = self._nextc()
        while _isdigit(c):
            c = self._nextc()
        return self._exponent(c)

    def _exponent(self, c: int) -> _Scan:
        if _in(c, b"eE"):
            e = c
            c = self._nextc()
            if _in(c, b"+-"):
                c = self._nextc()
                if not _isdigit(c):
                    return self._token_error(c)
            elif not _isdigit(c):
                self._backup(c)
                self._backup(e)
                return Token.NUMBER, self._start, self._cur
            while _isdigit(c):
                c = self._nextc()
        if _in(c, b"jJ"):
            return self._imaginary()
        return self._end_number(c)

    def _number(self, c: int) -> _Scan:
        if c != _ZERO:
            while _isdigit(c):
                c = self._nextc()
            if _in(c, b"lL"):
                return self._end_number(self._nextc())
            if c == _DOT:
                return self._fraction()
            return self._exponent(c)

        c = self._nextc()
        if c == _DOT:
            return self._fraction()
        if _in(c, b"jJ"):
            return self._imaginary()
        if _in(c, b"xX"):
            c = self._nextc()
            if not _isxdigit(c):
                return self._token_error(c)
            while _isxdigit(c):
                c = self._nextc()
        elif _in(c, b"oO"):
            c = self._nextc()
            if not _ZERO <= c < _EIGHT:
                return self._token_error(c)
            while _ZERO <= c < _EIGHT:
                c = self._nextc()
        elif _in(c, b"bB"):
            c = self._nextc()
            if not _in(c, b"01"):
                return self._token_error(c)
            while _in(c, b"01"):
                c = self._nextc()
        else:
            found_decimal = False
            while _ZERO <= c < _EIGHT:
                c = self._nextc()
            if _isdigit(c):
                found_decimal = True
                while _isdigit(c):
                    c = self._nextc()
            if c == _DOT:
                return self._fraction()
            if _in(c, b"eE"):
                return self._exponent(c)
            if _in(c, b"jJ"):
                return self._imaginary()
            if found_decimal:
                return self._token_error(c)
        if _in(c, b"lL"):
            c = self._nextc()
        return self._end_number(c)

    def _operator(self, c: int) -> _Scan:
        c2 = self._nextc()
        token = two_chars(_chr(c), _chr(c2))
        if token == Token.NOTEQUAL and c == _LESS:
            warnings.warn_explicit(
                "<> not supported in 3.x; use !=",
                DeprecationWarning,
                self.filename,
                self.lineno,
            )
        if token != Token.OP:
            c3 = self._nextc()
            token3 = three_chars(_chr(c), _chr(c2), _chr(c3))
            if token3 != Token.OP:
                token = token3
            else:
                self._backup(c3)
            return token, self._start, self._cur
        self._backup(c2)

        if _in(c, b"([{"):
            self.level += 1
        elif _in(c, b")]}"):
            self.level -= 1
        return one_char(_chr(c)), self._start, self._cur


_ERRORS: dict[ErrorCode, tuple[type[SyntaxError], str]] = {
    ErrorCode.TOKEN: (SyntaxError, "invalid token"),
    ErrorCode.EOFS: (SyntaxError, "EOF while scanning triple-quoted string literal"),
    ErrorCode.EOLS: (SyntaxError, "EOL while scanning string literal"),
    ErrorCode.TABSPACE: (TabError, "inconsistent use of tabs and spaces in indentation"),
    ErrorCode.DEDENT: (
        IndentationError,
        "unindent does not match any outer indentation level",
    ),
    ErrorCode.TOODEEP: (IndentationError, "too many levels of indentation"),
    ErrorCode.LINECONT: (
        SyntaxError,
        "unexpected character after line continuation character",
    ),
}


def tokenize(
    source: bytes | bytearray | memoryview | str, exec_input: bool = True
) -> list[TokenInfo]:
    """Return all tokens of ``source`` up to and including ``ENDMARKER``.

    Text is read as UTF-8; bytes may carry a BOM or coding declaration.
    Raises ``SyntaxError`` (or a subclass) when the source cannot be split.
    """
    if isinstance(source, str):
        tokenizer = Tokenizer.from_utf8(source, exec_input)
    else:
        tokenizer = Tokenizer.from_string(source, exec_input)
    result = list(tokenizer)
    if result and result[-1].type == Token.ERRORTOKEN:
        exc_type, msg = _ERRORS.get(
            tokenizer.done, (SyntaxError, "unknown parsing error")
        )
        text = tokenizer.buffer_text
        offset = len(text[: tokenizer.buffer_offset].decode("utf-8", "replace"))
        raise exc_type(
            msg,
            (
                tokenizer.filename,
                tokenizer.lineno,
                offset,
                text.decode("utf-8", "replace"),
            ),
        )
    return result