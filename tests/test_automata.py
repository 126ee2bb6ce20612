import io
import itertools
import re

import pytest
from binregex.automata.fsa import ALPHABET, DFA, EPSILON, prune_dfa
from binregex.automata.reg import regex_nfa
from loguru import logger

PATTERNS = [
    "0",
    "1",
    "00",
    "01",
    "0+1",
    "0*",
    "0*1",
    "0*1*",
    "0*+1*",
    "(0+1)*",
    "(0+1)*01",
    "(0+1)*0(0+1)",
    "1(01)*0",
    "(00+11)*",
    "(0*1)*",
    "((0+1)(0+1))*",
    "0(0+1)*1+1(0+1)*0",
    "(01+10)*(0+1)",
    "(0+1)(0+1)(0+1)",
    "(1+01)*(0+1)",
]


def binary_strings(maxlen):
    for n in range(maxlen + 1):
        for chars in itertools.product(ALPHABET, repeat=n):
            yield "".join(chars)


def reference(pattern):
    return re.compile(pattern.replace("+", "|"))


def pipeline(pattern):
    enfa = regex_nfa(pattern)
    nfa = enfa.remove_epsilon()
    dfa = nfa.to_dfa()
    return enfa, nfa, dfa, dfa.minimize()


@pytest.mark.parametrize("pattern", PATTERNS)
def test_language(pattern):
    expr = reference(pattern)
    automata = pipeline(pattern)
    for string in binary_strings(7):
        expected = expr.fullmatch(string) is not None
        for fsa in automata:
            assert fsa.accept(string) == expected, (pattern, string, fsa)


def test_closure():
    enfa = regex_nfa("0*")
    assert enfa.closure(0) == {0, 1, 2}
    assert enfa.closure(3) == {1, 2, 3}
    assert enfa.closure(1) == {1}
    assert enfa.closures() == [{0, 1, 2}, {1}, {2}, {1, 2, 3}]


def test_closure_cycles():
    # (0*)* has epsilon cycles through both stars
    enfa = regex_nfa("(0*)*")
    for state, closure in enumerate(enfa.closures()):
        assert state in closure
        for other in closure:
            assert enfa.closure(other) <= closure


def test_remove_epsilon():
    enfa = regex_nfa("0*")
    before = list(enfa.triples())
    nfa = enfa.remove_epsilon()

    # The input is left alone
    assert list(enfa.triples()) == before

    assert len(nfa) == len(enfa)
    assert nfa.initial == enfa.initial
    assert nfa.final_states == {0, 1, 3}
    assert all(label is not EPSILON for _, label, _ in nfa.triples())
    assert nfa.transitions[0]["0"] == {1, 2, 3}
    assert nfa.transitions[3]["0"] == {1, 2, 3}
    assert nfa.transitions[1] == {}


def test_subset_construction():
    dfa = regex_nfa("0").remove_epsilon().to_dfa()
    assert len(dfa) == 3
    assert dfa.initial == 0
    assert dfa.final_states == {1}
    assert dfa.trap == 2
    assert dfa.transitions == {
        0: {"0": 1, "1": 2},
        1: {"0": 2, "1": 2},
        2: {"0": 2, "1": 2},
    }


def test_trap_always_materialized():
    dfa = regex_nfa("(0+1)*").remove_epsilon().to_dfa()
    assert dfa.trap is not None
    assert dfa.trap not in dfa.reachable_from(dfa.initial)
    assert dfa.successors(dfa.trap) == (dfa.trap, dfa.trap)
    assert not dfa.is_final(dfa.trap)


@pytest.mark.parametrize("pattern", PATTERNS)
def test_subset_construction_is_total(pattern):
    _, _, dfa, minimal = pipeline(pattern)
    assert dfa.is_total()
    assert minimal.is_total()
    assert dfa.trap is not None
    assert minimal.trap is not None


def test_minimize():
    _, _, dfa, minimal = pipeline("(0+1)*")
    assert len(dfa) > 2
    assert len(minimal) == 2
    assert minimal.is_final(minimal.initial)
    assert not minimal.is_final(minimal.trap)


def test_minimize_keeps_distinct_states():
    _, _, dfa, minimal = pipeline("0")
    assert len(minimal) == 3
    assert minimal.initial == 0
    assert minimal.final_states == {1}
    assert minimal.trap == 2
    assert minimal.transitions == dfa.transitions


def test_minimize_does_not_modify():
    _, _, dfa, _ = pipeline("(0+1)*01")
    copy = dfa.copy()
    dfa.minimize()
    assert dfa == copy


@pytest.mark.parametrize("pattern", PATTERNS)
def test_minimize_idempotent(pattern):
    _, _, dfa, minimal = pipeline(pattern)
    again = minimal.minimize()
    assert len(again) == len(minimal)
    assert len(again.final_states) == len(minimal.final_states)
    assert len(minimal) <= len(dfa)
    for string in binary_strings(6):
        assert again.accept(string) == minimal.accept(string)


def test_minimize_needs_total_dfa():
    dfa = DFA()
    dfa.new_state()
    with pytest.raises(AssertionError):
        dfa.minimize()


def test_remove_trap():
    _, _, _, minimal = pipeline("0")
    minimal.remove_trap()
    assert minimal.trap is None
    assert minimal.transitions == {
        0: {"0": 1, "1": None},
        1: {"0": None, "1": None},
        2: {"0": None, "1": None},
    }
    assert not minimal.is_total()


def test_remove_trap_idempotent():
    _, _, _, minimal = pipeline("(0+1)*01")
    minimal.remove_trap()
    once = minimal.copy()
    minimal.remove_trap()
    assert minimal == once


@pytest.mark.parametrize("pattern", PATTERNS)
def test_trap_removed_and_pruned(pattern):
    _, _, _, minimal = pipeline(pattern)
    minimal.remove_trap()
    pruned = prune_dfa(minimal)
    reachable = pruned.reachable_from(pruned.initial)
    assert reachable == set(pruned.all_states())
    for src in pruned.all_states():
        for dest in pruned.successors(src):
            assert dest is None or dest in reachable
    for string in binary_strings(6):
        assert pruned.accept(string) == minimal.accept(string)


def test_prune_dfa():
    dfa = DFA(0)
    for _ in range(4):
        dfa.new_state()
    dfa.add_transition(0, "0", 2)
    dfa.add_transition(2, "1", 0)
    dfa.add_transition(1, "0", 2)
    dfa.add_transition(3, "1", 1)
    dfa.add_final_state(2)
    dfa.add_final_state(3)

    pruned = prune_dfa(dfa)
    assert len(pruned) == 2
    assert pruned.initial == 0
    assert pruned.final_states == {1}
    assert pruned.transitions == {
        0: {"0": 1, "1": None},
        1: {"0": None, "1": 0},
    }
    # The input is left alone
    assert len(dfa) == 4


def test_generate_all():
    _, _, _, minimal = pipeline("0*1")
    assert list(minimal.generate_all(3)) == ["1", "01", "001"]


def test_dump():
    out = io.StringIO()
    regex_nfa("0").dump(stream=out)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("@ 0")
    assert "||" in lines[2]

    out = io.StringIO()
    _, _, dfa, _ = pipeline("0")
    dfa.dump(stream=out)
    assert "(trap)" in out.getvalue()


def test_automata_are_unhashable():
    with pytest.raises(TypeError):
        hash(DFA())
    with pytest.raises(TypeError):
        hash(regex_nfa("0"))


def test_accept_trace_logging():
    messages = []
    logger.enable("binregex")
    handler = logger.add(messages.append, level="TRACE", format="{message}")
    try:
        _, _, _, minimal = pipeline("01")
        assert minimal.accept("01")
    finally:
        logger.remove(handler)
        logger.disable("binregex")

    steps = [m.split() for m in messages if m.rstrip().endswith("->")]
    assert steps[0] == [str(minimal.initial), "->", "0", "->"]
    assert [step[2] for step in steps] == ["0", "1"]
