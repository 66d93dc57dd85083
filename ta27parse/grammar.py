"""Grammar tables: labels, DFAs, first sets and parser accelerators."""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from dataclasses import dataclass, field

from .tokens import NT_OFFSET, Token, is_nonterminal, one_char, three_chars, token_name, two_chars

EMPTY = 0
"""Index of the label that stands for the empty string."""

_ARROW_LIMIT = 1 << 7
_PUSH_FLAG = 1 << 7


class Bitset:
    """A fixed-size set of small non-negative integers."""

    __slots__ = ("nbits", "_bits")

    def __init__(self, nbits: int) -> None:
        if nbits < 0:
            raise ValueError("bitset size must not be negative")
        self.nbits = nbits
        self._bits = 0

    def add(self, ibit: int) -> bool:
        """Set bit ``ibit``; return True if it was not set before."""
        if not 0 <= ibit < self.nbits:
            raise IndexError(f"bit {ibit} out of range for bitset of {self.nbits}")
        mask = 1 << ibit
        if self._bits & mask:
            return False
        self._bits |= mask
        return True

    def merge(self, other: Bitset) -> None:
        """Add every bit of ``other`` to this set."""
        if other.nbits != self.nbits:
            raise ValueError("cannot merge bitsets of different sizes")
        self._bits |= other._bits

    def __contains__(self, ibit: object) -> bool:
        if not isinstance(ibit, int) or not 0 <= ibit < self.nbits:
            return False
        return bool(self._bits >> ibit & 1)

    def __iter__(self) -> Iterator[int]:
        return (i for i in range(self.nbits) if self._bits >> i & 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self.nbits == other.nbits and self._bits == other._bits

    def __bytes__(self) -> bytes:
        return self._bits.to_bytes((self.nbits + 7) // 8, "little")

    def __repr__(self) -> str:
        return f"Bitset({self.nbits}, {sorted(self)})"


@dataclass
class Label:
    """A grammar label: a token or non-terminal type with optional text."""

    type: int
    string: str | None = None


def label_repr(label: Label) -> str:
    """Return a printable description of ``label``."""
    if label.type == Token.ENDMARKER:
        return "EMPTY"
    if is_nonterminal(label.type):
        return label.string if label.string is not None else f"NT{label.type}"
    name = token_name(label.type)
    if label.string is None:
        return name
    return f"{name[:32]}({label.string[:32]})"


@dataclass
class Arc:
    """A transition on ``label`` (an index into the label list) to ``arrow``."""

    label: int
    arrow: int


@dataclass
class State:
    """A DFA state with its arcs and, once built, its accelerator table."""

    arcs: list[Arc] = field(default_factory=list)
    lower: int = 0
    upper: int = 0
    accel: list[int] | None = None
    accept: bool = False


@dataclass
class DFA:
    """The automaton for one grammar rule."""

    type: int
    name: str
    states: list[State] = field(default_factory=list)
    initial: int = -1
    first: Bitset | None = None

    def add_state(self) -> int:
        """Append a new state and return its index."""
        self.states.append(State())
        return len(self.states) - 1

    def add_arc(self, src: int, dst: int, label: int) -> None:
        """Add an arc from state ``src`` to state ``dst`` on ``label``."""
        count = len(self.states)
        if not 0 <= src < count or not 0 <= dst < count:
            raise IndexError(f"arc {src}->{dst} refers to a missing state")
        self.states[src].arcs.append(Arc(label, dst))


def _char_at(text: str, index: int) -> str:
    return text[index] if index < len(text) else "\0"


@dataclass
class Grammar:
    """A set of DFAs sharing one label list."""

    start: int
    dfas: list[DFA] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    accel: bool = False

    def add_dfa(self, type: int, name: str) -> DFA:
        """Append a DFA for rule ``name`` with symbol number ``type``."""
        dfa = DFA(type, name)
        self.dfas.append(dfa)
        return dfa

    def add_label(self, type: int, string: str | None) -> int:
        """Return the index of the label, appending it if it is new."""
        for index, label in enumerate(self.labels):
            if label.type == type and label.string == string:
                return index
        self.labels.append(Label(type, string))
        return len(self.labels) - 1

    def find_label(self, type: int, string: str | None) -> int:
        """Return the index of the first label of ``type``.

        Raises ``LookupError`` when there is none.
        """
        for index, label in enumerate(self.labels):
            if label.type == type:
                return index
        raise LookupError(f"Label {type}/'{string}' not found")

    def translate_labels(self) -> None:
        """Resolve names and quoted literals into token and symbol types."""
        for label in self.labels[EMPTY + 1:]:
            self._translate_label(label)

    def _translate_label(self, label: Label) -> None:
        string = label.string
        if label.type == Token.NAME:
            assert string is not None
            for dfa in self.dfas:
                if dfa.name == string:
                    label.type = dfa.type
                    label.string = None
                    return
            for i in range(Token.N_TOKENS):
                if token_name(i) == string:
                    label.type = i
                    label.string = None
                    return
            warnings.warn(f"Can't translate NAME label '{string}'", RuntimeWarning, stacklevel=3)
            return

        if label.type != Token.STRING or string is None:
            warnings.warn(f"Can't translate label '{label_repr(label)}'", RuntimeWarning, stacklevel=3)
            return

        c0, c1, c2, c3, c4 = (_char_at(string, i) for i in range(5))
        if (c1.isascii() and c1.isalpha()) or c1 == "_":
            label.type = Token.NAME
            label.string = string[1:].partition("'")[0]
            return
        if c2 == c0:
            token = one_char(c1)
        elif c2 != "\0" and c3 == c0:
            token = two_chars(c1, c2)
        elif c2 != "\0" and c3 != "\0" and c4 == c0:
            token = three_chars(c1, c2, c3)
        else:
            warnings.warn(f"Can't translate STRING label {string}", RuntimeWarning, stacklevel=3)
            return
        if token == Token.OP:
            warnings.warn(f"Unknown OP label {string}", RuntimeWarning, stacklevel=3)
            return
        label.type = token
        label.string = None

    def find_dfa(self, type: int) -> DFA:
        """Return the DFA for non-terminal ``type``."""
        index = type - NT_OFFSET
        if not 0 <= index < len(self.dfas) or self.dfas[index].type != type:
            raise KeyError(f"no DFA for symbol {type}")
        return self.dfas[index]

    def find_dfa_by_name(self, name: str) -> DFA:
        """Return the DFA for the rule called ``name``."""
        for dfa in self.dfas:
            if dfa.name == name:
                return dfa
        raise KeyError(f"no DFA named {name!r}")

    def add_accelerators(self) -> None:
        """Build the per-state lookup tables the parser relies on."""
        for dfa in self.dfas:
            for state in dfa.states:
                self._fix_state(state)
        self.accel = True

    def remove_accelerators(self) -> None:
        """Drop the accelerator tables of every state."""
        self.accel = False
        for dfa in self.dfas:
            for state in dfa.states:
                state.accel = None

    def _fix_state(self, state: State) -> None:
        nl = len(self.labels)
        state.accept = False
        accel = [-1] * nl
        for arc in state.arcs:
            lbl = arc.label
            type_ = self.labels[lbl].type
            if arc.arrow >= _ARROW_LIMIT:
                warnings.warn("too many states for accelerator", RuntimeWarning, stacklevel=3)
                continue
            if is_nonterminal(type_):
                sub = self.find_dfa(type_)
                if type_ - NT_OFFSET >= _ARROW_LIMIT:
                    warnings.warn("too high nonterminal number", RuntimeWarning, stacklevel=3)
                    continue
                if sub.first is None:
                    raise ValueError(f"DFA {sub.name!r} has no first set")
                entry = arc.arrow | _PUSH_FLAG | ((type_ - NT_OFFSET) << 8)
                for ibit in range(nl):
                    if ibit in sub.first:
                        if accel[ibit] != -1:
                            warnings.warn("ambiguous accelerator entry", RuntimeWarning, stacklevel=3)
                        accel[ibit] = entry
            elif lbl == EMPTY:
                state.accept = True
            elif 0 <= lbl < nl:
                accel[lbl] = arc.arrow
        while nl > 0 and accel[nl - 1] == -1:
            nl -= 1
        k = 0
        while k < nl and accel[k] == -1:
            k += 1
        if k < nl:
            state.accel = accel[k:nl]
            state.lower = k
            state.upper = nl