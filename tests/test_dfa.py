import pytest

from automaton import EPSILON, Automaton, InvariantViolation, merge_automata
from categories import KEYWORDS, build_category_automata
from dfa import DFA, RefinementCriterion, compute_partition, determinize, minimize


WORDS = [
    "", "main", "Main", "if", "iff", "42", "3.14", "3.", ".5", "+", "++",
    ";", "{", "x", "float", "floats", "=", "a1", "007", "1.2.3", "return",
    "char", "cha", "(", ")", "%", "intx",
]


@pytest.fixture(scope="module")
def combined():
    return merge_automata(build_category_automata().values())


@pytest.fixture(scope="module")
def combined_dfa(combined):
    return determinize(combined)


def twin_dfa():
    # States 1 and 2 both move to 3 on "c"
    return DFA(
        transitions={0: {"a": 1, "b": 2}, 1: {"c": 3}, 2: {"c": 3}, 3: {}},
        accepting_states={3},
    )


def split_finals_dfa():
    # States 1 and 2 lead to different but equivalent final states 3 and 4
    return DFA(
        transitions={0: {"a": 1, "b": 2}, 1: {"c": 3}, 2: {"c": 4}, 3: {}, 4: {}},
        accepting_states={3, 4},
    )


def test_determinize_simple_epsilon_nfa():
    nfa = Automaton()
    nfa.add_transition(0, 1, EPSILON)
    nfa.add_transition(0, 2, EPSILON)
    nfa.add_transition(1, 3, "a")
    nfa.add_transition(2, 4, "a")
    nfa.add_transition(4, 4, "b")
    nfa.set_start(0)
    nfa.mark_final(3)
    nfa.mark_final(4)

    dfa = determinize(nfa)
    assert dfa.start_state == 0
    assert dfa.subsets[0] == frozenset({0, 1, 2})
    assert dfa.subsets[1] == frozenset({3, 4})
    assert dfa.transitions[0] == {"a": 1}
    assert dfa.accepting_states == {1, 2}
    assert dfa.accepts("abb")
    assert not dfa.accepts("b")


def test_determinize_produces_a_dfa(combined_dfa):
    fa = combined_dfa.to_automaton()
    assert fa.is_deterministic()
    assert set(combined_dfa.subsets) == set(combined_dfa.transitions)


def test_determinize_deduplicates_subsets(combined_dfa):
    subsets = list(combined_dfa.subsets.values())
    assert len(subsets) == len(set(subsets))


def test_final_iff_subset_meets_nfa_finals(combined, combined_dfa):
    for state, subset in combined_dfa.subsets.items():
        assert combined_dfa.is_final(state) == bool(subset & combined.accepting_states)


def test_dfa_start_is_closure_of_nfa_start(combined, combined_dfa):
    assert combined_dfa.subsets[0] == combined.epsilon_closure({combined.start_state})


@pytest.mark.parametrize("word", WORDS)
def test_determinize_preserves_language(combined, combined_dfa, word):
    assert combined_dfa.accepts(word) == combined.accepts(word)


@pytest.mark.parametrize("criterion", list(RefinementCriterion))
@pytest.mark.parametrize("word", WORDS)
def test_minimize_preserves_language(combined_dfa, criterion, word):
    assert minimize(combined_dfa, criterion).accepts(word) == combined_dfa.accepts(word)


@pytest.mark.parametrize("criterion", list(RefinementCriterion))
def test_minimize_never_grows(combined_dfa, criterion):
    assert len(minimize(combined_dfa, criterion).states) <= len(combined_dfa.states)


def test_minimize_collapses_identical_signatures():
    for criterion in RefinementCriterion:
        minimized = minimize(twin_dfa(), criterion)
        assert len(minimized.states) == 3
        assert minimized.transitions[0] == {"a": 1, "b": 1}
        assert minimized.accepts("ac")
        assert minimized.accepts("bc")
        assert not minimized.accepts("a")


def test_partition_criterion_merges_equivalent_targets():
    dfa = split_finals_dfa()
    partition = compute_partition(dfa)
    assert sorted(sorted(group) for group in partition) == [[0], [1, 2], [3, 4]]

    minimized = minimize(dfa)
    assert len(minimized.states) == 3
    assert minimized.start_state == 0
    assert minimized.accepting_states == {2}


def test_raw_target_criterion_keeps_distinct_targets_apart():
    dfa = split_finals_dfa()
    partition = compute_partition(dfa, RefinementCriterion.RAW_TARGET)
    assert sorted(sorted(group) for group in partition) == [[0], [1], [2], [3, 4]]

    minimized = minimize(dfa, RefinementCriterion.RAW_TARGET)
    assert len(minimized.states) == 4
    for word in ["ac", "bc"]:
        assert minimized.accepts(word)
    for word in ["", "a", "abc", "cc"]:
        assert not minimized.accepts(word)


def test_minimize_without_final_states():
    dfa = DFA(transitions={0: {"a": 1}, 1: {"a": 0}})
    minimized = minimize(dfa)
    assert minimized.transitions == {0: {"a": 0}}
    assert minimized.accepting_states == set()
    assert not minimized.accepts("aa")

    # Raw targets differ, so nothing is merged
    assert len(minimize(dfa, RefinementCriterion.RAW_TARGET).states) == 2


def test_minimize_rejects_dangling_transition():
    dfa = DFA(transitions={0: {"a": 7}}, accepting_states={0})
    with pytest.raises(InvariantViolation):
        minimize(dfa)


def test_minimized_keyword_dfa():
    keyword = build_category_automata(["Keyword"])["Keyword"]
    dfa = determinize(keyword)
    # One state per distinct keyword prefix, plus the start state
    prefixes = {word[:i] for word in KEYWORDS for i in range(1, len(word) + 1)}
    assert len(dfa.states) == len(prefixes) + 1

    minimized = minimize(dfa)
    assert len(minimized.states) < len(dfa.states)
    assert all(minimized.accepts(word) for word in KEYWORDS)
    assert not minimized.accepts("iff")
    assert not minimized.accepts("fo")


def test_number_dfa_is_already_minimal():
    number = build_category_automata(["Number"])["Number"]
    dfa = determinize(number)
    assert len(dfa.states) == 4
    assert len(minimize(dfa).states) == 4


def test_to_automaton_round_trip():
    fa = twin_dfa().to_automaton("twin")
    assert fa.name == "twin"
    assert fa.is_deterministic()
    assert fa.accepts("bc")
    assert fa.accepting_states == {3}


def test_accepts_with_missing_rows():
    dfa = DFA(transitions={0: {"a": 1}}, accepting_states={1})
    assert dfa.accepts("a")
    assert not dfa.accepts("ab")
    assert not DFA(start_state=5).accepts("a")
    assert not DFA(start_state=5).accepts("")


def test_alphabet(combined_dfa):
    assert twin_dfa().alphabet == {"a", "b", "c"}
    assert set("+-*/%=,;{}[]().0123456789") <= combined_dfa.alphabet
