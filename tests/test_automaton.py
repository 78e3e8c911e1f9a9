import pytest

from automaton import (
    EPSILON,
    Automaton,
    InvariantViolation,
    StateCounter,
    is_accepted,
    merge_automata,
)
from categories import CATEGORY_NAMES, build_category_automata


WORDS = [
    "", "main", "Main", "if", "iff", "42", "3.14", "3.", ".5", "+", "++",
    ";", "{", "x", "float", "floats", "=", "a1", "007", "1.2.3", "return",
]


def make_ab():
    # accepts a b*
    fa = Automaton(name="ab")
    fa.add_transition(0, 1, "a")
    fa.add_transition(1, 1, "b")
    fa.set_start(0)
    fa.mark_final(1)
    return fa


def test_add_transition_registers_states():
    fa = Automaton()
    fa.add_transition(3, 7, "x")
    assert fa.states == {3, 7}
    assert fa.targets(3, "x") == frozenset({7})
    assert fa.targets(7, "x") == frozenset()


def test_add_transition_accumulates_targets():
    fa = Automaton()
    fa.add_transition(0, 1, "a")
    fa.add_transition(0, 2, "a")
    assert fa.targets(0, "a") == frozenset({1, 2})
    assert not fa.is_deterministic()


def test_symbol_must_be_single_character():
    fa = Automaton()
    with pytest.raises(InvariantViolation):
        fa.add_transition(0, 1, "ab")
    with pytest.raises(InvariantViolation):
        fa.add_transition(0, 1, "")


def test_start_and_final_must_be_states():
    fa = Automaton(name="broken")
    with pytest.raises(InvariantViolation, match="broken"):
        fa.set_start(4)
    with pytest.raises(InvariantViolation):
        fa.mark_final(4)


def test_start_and_final_queries():
    fa = make_ab()
    assert fa.is_start(0)
    assert not fa.is_start(1)
    assert fa.is_final(1)
    assert not fa.is_final(0)


def test_validate_rejects_missing_start():
    fa = Automaton()
    fa.add_state(0)
    with pytest.raises(InvariantViolation):
        fa.validate()


def test_validate_rejects_stray_final_state():
    fa = Automaton(states={0}, start_state=0, accepting_states={9})
    with pytest.raises(InvariantViolation):
        fa.validate()


def test_constructor_accepts_plain_dict_transitions():
    fa = Automaton(states={0, 1}, start_state=0, accepting_states={1}, transitions={0: {"a": {1}}})
    fa.add_transition(1, 0, "b")
    assert fa.accepts("aba")


def test_alphabet_excludes_epsilon():
    fa = make_ab()
    fa.add_transition(1, 2, EPSILON)
    assert fa.alphabet == {"a", "b"}
    assert fa.has_epsilon_transitions()
    assert not fa.is_deterministic()


def test_epsilon_closure_follows_chains():
    fa = Automaton()
    fa.add_transition(0, 1, EPSILON)
    fa.add_transition(1, 2, EPSILON)
    fa.add_transition(2, 3, "a")
    fa.add_transition(3, 4, EPSILON)
    assert fa.epsilon_closure({0}) == frozenset({0, 1, 2})
    assert fa.epsilon_closure({3}) == frozenset({3, 4})
    assert fa.epsilon_closure(set()) == frozenset()


def test_is_accepted():
    fa = make_ab()
    assert is_accepted(fa, "a")
    assert is_accepted(fa, "abbb")
    assert not is_accepted(fa, "")
    assert not is_accepted(fa, "ba")
    assert not is_accepted(fa, "abc")


def test_is_accepted_without_start_state():
    with pytest.raises(InvariantViolation):
        is_accepted(Automaton(), "a")


def test_is_accepted_follows_epsilon_edges():
    fa = Automaton()
    fa.add_transition(0, 1, EPSILON)
    fa.add_transition(1, 2, "a")
    fa.add_transition(2, 3, EPSILON)
    fa.set_start(0)
    fa.mark_final(3)
    assert fa.accepts("a")
    assert not fa.accepts("")


def test_counter_is_monotonic():
    counter = StateCounter()
    assert [counter.next_state() for _ in range(3)] == [0, 1, 2]
    assert StateCounter(10).next_state() == 10


def test_merge_uses_fresh_start_state():
    counter = StateCounter()
    fragments = build_category_automata(CATEGORY_NAMES, counter)
    combined = merge_automata(fragments.values(), counter)

    assert combined.start_state == 50
    assert all(combined.start_state not in fa.states for fa in fragments.values())
    assert combined.targets(combined.start_state, EPSILON) == frozenset(
        fa.start_state for fa in fragments.values()
    )
    assert len(combined.states) == sum(len(fa.states) for fa in fragments.values()) + 1
    assert combined.accepting_states == set().union(*(fa.accepting_states for fa in fragments.values()))


def test_merge_without_counter_picks_next_id():
    fragments = build_category_automata()
    combined = merge_automata(fragments.values())
    assert combined.start_state == max(combined.states)
    assert combined.start_state == 50


def test_merge_rejects_overlapping_fragments():
    first = build_category_automata(["Operator"], StateCounter())
    second = build_category_automata(["Punctuator"], StateCounter())
    with pytest.raises(InvariantViolation):
        merge_automata([first["Operator"], second["Punctuator"]])


def test_merge_does_not_modify_fragments():
    fragments = build_category_automata()
    before = {name: set(fa.states) for name, fa in fragments.items()}
    merge_automata(fragments.values())
    assert {name: fa.states for name, fa in fragments.items()} == before


@pytest.mark.parametrize("word", WORDS)
def test_merge_preserves_language(word):
    fragments = build_category_automata()
    combined = merge_automata(fragments.values())
    expected = any(is_accepted(fa, word) for fa in fragments.values())
    assert is_accepted(combined, word) == expected


def test_to_graphviz_without_rendering():
    fragments = build_category_automata(["Operator", "Punctuator"])
    combined = merge_automata(fragments.values())
    dot = combined.to_graphviz()
    source = dot.source
    assert "doublecircle" in source
    assert "ε" in source
    assert "__start__" in source
