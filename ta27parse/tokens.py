"""Token types, parser error codes and operator lookup tables."""

from __future__ import annotations

import enum

NT_OFFSET = 256
"""Numbers at or above this value denote non-terminal symbols."""


class Token(enum.IntEnum):
    """Terminal token types, in the order the grammar tables expect."""

    ENDMARKER = 0
    NAME = 1
    NUMBER = 2
    STRING = 3
    NEWLINE = 4
    INDENT = 5
    DEDENT = 6
    LPAR = 7
    RPAR = 8
    LSQB = 9
    RSQB = 10
    COLON = 11
    COMMA = 12
    SEMI = 13
    PLUS = 14
    MINUS = 15
    STAR = 16
    SLASH = 17
    VBAR = 18
    AMPER = 19
    LESS = 20
    GREATER = 21
    EQUAL = 22
    DOT = 23
    PERCENT = 24
    BACKQUOTE = 25
    LBRACE = 26
    RBRACE = 27
    EQEQUAL = 28
    NOTEQUAL = 29
    LESSEQUAL = 30
    GREATEREQUAL = 31
    TILDE = 32
    CIRCUMFLEX = 33
    LEFTSHIFT = 34
    RIGHTSHIFT = 35
    DOUBLESTAR = 36
    PLUSEQUAL = 37
    MINEQUAL = 38
    STAREQUAL = 39
    SLASHEQUAL = 40
    PERCENTEQUAL = 41
    AMPEREQUAL = 42
    VBAREQUAL = 43
    CIRCUMFLEXEQUAL = 44
    LEFTSHIFTEQUAL = 45
    RIGHTSHIFTEQUAL = 46
    DOUBLESTAREQUAL = 47
    DOUBLESLASH = 48
    DOUBLESLASHEQUAL = 49
    AT = 50
    OP = 51
    RARROW = 52
    TYPE_IGNORE = 53
    TYPE_COMMENT = 54
    ERRORTOKEN = 55
    N_TOKENS = 56


class ErrorCode(enum.IntEnum):
    """Status codes reported by the tokenizer and parser."""

    OK = 10
    EOF = 11
    INTR = 12
    TOKEN = 13
    SYNTAX = 14
    NOMEM = 15
    DONE = 16
    ERROR = 17
    TABSPACE = 18
    OVERFLOW = 19
    TOODEEP = 20
    DEDENT = 21
    DECODE = 22
    EOFS = 23
    EOLS = 24
    LINECONT = 25


_NAMES: dict[Token, str] = {
    tok: tok.name for tok in Token
}
_NAMES[Token.ERRORTOKEN] = "<ERRORTOKEN>"
_NAMES[Token.N_TOKENS] = "<N_TOKENS>"

_ONE_CHAR: dict[str, Token] = {
    "(": Token.LPAR,
    ")": Token.RPAR,
    "[": Token.LSQB,
    "]": Token.RSQB,
    ":": Token.COLON,
    ",": Token.COMMA,
    ";": Token.SEMI,
    "+": Token.PLUS,
    "-": Token.MINUS,
    "*": Token.STAR,
    "/": Token.SLASH,
    "|": Token.VBAR,
    "&": Token.AMPER,
    "<": Token.LESS,
    ">": Token.GREATER,
    "=": Token.EQUAL,
    ".": Token.DOT,
    "%": Token.PERCENT,
    "`": Token.BACKQUOTE,
    "{": Token.LBRACE,
    "}": Token.RBRACE,
    "^": Token.CIRCUMFLEX,
    "~": Token.TILDE,
    "@": Token.AT,
}

_TWO_CHARS: dict[str, Token] = {
    "==": Token.EQEQUAL,
    "!=": Token.NOTEQUAL,
    "<>": Token.NOTEQUAL,
    "<=": Token.LESSEQUAL,
    "<<": Token.LEFTSHIFT,
    ">=": Token.GREATEREQUAL,
    ">>": Token.RIGHTSHIFT,
    "+=": Token.PLUSEQUAL,
    "-=": Token.MINEQUAL,
    "->": Token.RARROW,
    "**": Token.DOUBLESTAR,
    "*=": Token.STAREQUAL,
    "//": Token.DOUBLESLASH,
    "/=": Token.SLASHEQUAL,
    "|=": Token.VBAREQUAL,
    "%=": Token.PERCENTEQUAL,
    "&=": Token.AMPEREQUAL,
    "^=": Token.CIRCUMFLEXEQUAL,
}

_THREE_CHARS: dict[str, Token] = {
    "<<=": Token.LEFTSHIFTEQUAL,
    ">>=": Token.RIGHTSHIFTEQUAL,
    "**=": Token.DOUBLESTAREQUAL,
    "//=": Token.DOUBLESLASHEQUAL,
}


def one_char(c: str) -> Token:
    """Return the token for a single operator character, or ``Token.OP``."""
    return _ONE_CHAR.get(c, Token.OP)


def two_chars(c1: str, c2: str) -> Token:
    """Return the token for a two-character operator, or ``Token.OP``."""
    return _TWO_CHARS.get(c1 + c2, Token.OP)


def three_chars(c1: str, c2: str, c3: str) -> Token:
    """Return the token for a three-character operator, or ``Token.OP``."""
    return _THREE_CHARS.get(c1 + c2 + c3, Token.OP)


def is_terminal(type: int) -> bool:
    """True if ``type`` names a terminal token."""
    return type < NT_OFFSET


def is_nonterminal(type: int) -> bool:
    """True if ``type`` names a non-terminal symbol."""
    return type >= NT_OFFSET


def token_name(type: int) -> str:
    """Return the printable name of a terminal token type."""
    try:
        return _NAMES[Token(type)]
    except ValueError:
        raise ValueError(f"not a terminal token type: {type}") from None