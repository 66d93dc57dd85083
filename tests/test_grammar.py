import pytest

from ta27parse.grammar import (
    DFA,
    EMPTY,
    Bitset,
    Grammar,
    Label,
    label_repr,
)
from ta27parse.tokens import NT_OFFSET, Token


def test_bitset_add_reports_new_bits():
    bits = Bitset(10)
    assert bits.add(3) is True
    assert bits.add(3) is False
    assert 3 in bits
    assert 4 not in bits


def test_bitset_byte_layout():
    bits = Bitset(16)
    bits.add(0)
    bits.add(9)
    assert bytes(bits) == b"\x01\x02"


def test_bitset_merge_and_equality():
    a = Bitset(12)
    b = Bitset(12)
    a.add(1)
    b.add(11)
    a.merge(b)
    assert sorted(a) == [1, 11]
    c = Bitset(12)
    c.add(11)
    c.add(1)
    assert a == c


def test_bitset_errors():
    bits = Bitset(4)
    with pytest.raises(IndexError):
        bits.add(4)
    with pytest.raises(ValueError):
        bits.merge(Bitset(5))
    assert 7 not in bits


def test_label_repr_forms():
    assert label_repr(Label(Token.ENDMARKER, None)) == "EMPTY"
    assert label_repr(Label(NT_OFFSET + 44, None)) == f"NT{NT_OFFSET + 44}"
    assert label_repr(Label(NT_OFFSET, "expr")) == "expr"
    assert label_repr(Label(Token.NAME, None)) == "NAME"
    assert label_repr(Label(Token.NAME, "if")) == "NAME(if)"


def test_dfa_states_and_arcs():
    dfa = DFA(NT_OFFSET, "rule")
    s0 = dfa.add_state()
    s1 = dfa.add_state()
    assert (s0, s1) == (0, 1)
    dfa.add_arc(s0, s1, 5)
    assert dfa.states[0].arcs[0].label == 5
    assert dfa.states[0].arcs[0].arrow == s1
    with pytest.raises(IndexError):
        dfa.add_arc(0, 2, 5)


def test_add_label_deduplicates():
    g = Grammar(NT_OFFSET)
    first = g.add_label(Token.NAME, "if")
    second = g.add_label(Token.NAME, "else")
    assert g.add_label(Token.NAME, "if") == first
    assert second == first + 1
    assert len(g.labels) == 2


def test_find_label():
    g = Grammar(NT_OFFSET)
    g.add_label(Token.ENDMARKER, "EMPTY")
    idx = g.add_label(Token.NAME, "x")
    g.add_label(Token.NAME, "y")
    assert g.find_label(Token.NAME, "y") == idx
    with pytest.raises(LookupError):
        g.find_label(Token.NUMBER, "1")


def test_translate_labels():
    g = Grammar(NT_OFFSET)
    g.add_dfa(NT_OFFSET, "expr")
    g.add_label(Token.ENDMARKER, "EMPTY")
    i_rule = g.add_label(Token.NAME, "expr")
    i_tok = g.add_label(Token.NAME, "NUMBER")
    i_kw = g.add_label(Token.STRING, "'print'")
    i_one = g.add_label(Token.STRING, "'+'")
    i_two = g.add_label(Token.STRING, "'->'")
    i_three = g.add_label(Token.STRING, "'<<='")
    g.translate_labels()
    assert g.labels[i_rule] == Label(NT_OFFSET, None)
    assert g.labels[i_tok] == Label(Token.NUMBER, None)
    assert g.labels[i_kw] == Label(Token.NAME, "print")
    assert g.labels[i_one] == Label(Token.PLUS, None)
    assert g.labels[i_two] == Label(Token.RARROW, None)
    assert g.labels[i_three] == Label(Token.LEFTSHIFTEQUAL, None)
    assert g.labels[EMPTY] == Label(Token.ENDMARKER, "EMPTY")


def test_translate_unknown_labels_warn_and_stay():
    g = Grammar(NT_OFFSET)
    g.add_label(Token.ENDMARKER, "EMPTY")
    i_name = g.add_label(Token.NAME, "missing_rule")
    i_op = g.add_label(Token.STRING, "'$'")
    with pytest.warns(RuntimeWarning):
        g.translate_labels()
    assert g.labels[i_name] == Label(Token.NAME, "missing_rule")
    assert g.labels[i_op] == Label(Token.STRING, "'$'")


def test_find_dfa():
    g = Grammar(NT_OFFSET)
    expr = g.add_dfa(NT_OFFSET, "expr")
    term = g.add_dfa(NT_OFFSET + 1, "term")
    assert g.find_dfa(NT_OFFSET + 1) is term
    assert g.find_dfa_by_name("expr") is expr
    with pytest.raises(KeyError):
        g.find_dfa(NT_OFFSET + 2)
    with pytest.raises(KeyError):
        g.find_dfa_by_name("atom")


def _expression_grammar():
    # expr: term ('+' term)* ; term: NAME | '(' expr ')'
    g = Grammar(NT_OFFSET)
    expr = g.add_dfa(NT_OFFSET, "expr")
    term = g.add_dfa(NT_OFFSET + 1, "term")
    g.add_label(Token.ENDMARKER, "EMPTY")
    labels = {
        "term": g.add_label(Token.NAME, "term"),
        "expr": g.add_label(Token.NAME, "expr"),
        "NAME": g.add_label(Token.NAME, "NAME"),
        "+": g.add_label(Token.STRING, "'+'"),
        "(": g.add_label(Token.STRING, "'('"),
        ")": g.add_label(Token.STRING, "')'"),
    }
    g.translate_labels()

    e0, e1 = expr.add_state(), expr.add_state()
    expr.add_arc(e0, e1, labels["term"])
    expr.add_arc(e1, e0, labels["+"])
    expr.add_arc(e1, e1, EMPTY)

    t0, t1, t2, t3 = (term.add_state() for _ in range(4))
    term.add_arc(t0, t1, labels["NAME"])
    term.add_arc(t0, t2, labels["("])
    term.add_arc(t2, t3, labels["expr"])
    term.add_arc(t3, t1, labels[")"])
    term.add_arc(t1, t1, EMPTY)

    for dfa in (expr, term):
        dfa.first = Bitset(len(g.labels))
        dfa.first.add(labels["NAME"])
        dfa.first.add(labels["("])
    return g, labels


def test_accelerators_push_and_shift_entries():
    g, labels = _expression_grammar()
    g.add_accelerators()
    assert g.accel is True

    start = g.find_dfa_by_name("expr").states[0]
    assert start.accept is False
    for lbl in (labels["NAME"], labels["("]):
        x = start.accel[lbl - start.lower]
        assert x & 128
        assert (x >> 8) + NT_OFFSET == NT_OFFSET + 1
        assert x & 127 == 1

    after_term = g.find_dfa_by_name("expr").states[1]
    assert after_term.accept is True
    assert after_term.lower == labels["+"]
    assert after_term.upper == labels["+"] + 1
    assert after_term.accel == [0]


def test_accelerators_table_bounds_trimmed():
    g, labels = _expression_grammar()
    g.add_accelerators()
    term = g.find_dfa_by_name("term")
    s0 = term.states[0]
    assert s0.lower == labels["NAME"]
    assert s0.upper == labels["("] + 1
    assert s0.accel[0] == 1
    assert s0.accel[-1] == 2
    assert all(v == -1 for v in s0.accel[1:-1])
    final = term.states[1]
    assert final.accept is True
    assert final.accel is None


def test_remove_accelerators():
    g, _ = _expression_grammar()
    g.add_accelerators()
    g.remove_accelerators()
    assert g.accel is False
    assert all(s.accel is None for d in g.dfas for s in d.states)


def test_accelerators_need_first_sets():
    g, _ = _expression_grammar()
    g.find_dfa_by_name("term").first = None
    with pytest.raises(ValueError):
        g.add_accelerators()