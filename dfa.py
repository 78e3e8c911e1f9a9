import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing_extensions import *

from automaton import EPSILON, Automaton, InvariantViolation

logger = logging.getLogger(__name__)


@dataclass
class DFA:
    """
    Deterministic automaton as an explicit table: transitions[state][char]
    is the single target state. Every state has an entry, possibly empty.

    `subsets` remembers which NFA states each DFA state stands for; it is
    empty for minimized automata.
    """

    transitions: Dict[int, Dict[str, int]] = field(default_factory=dict)
    accepting_states: Set[int] = field(default_factory=set)
    start_state: int = 0
    subsets: Dict[int, FrozenSet[int]] = field(default_factory=dict)

    @property
    def states(self) -> Set[int]:
        return set(self.transitions)

    @property
    def alphabet(self) -> Set[str]:
        return {symbol for row in self.transitions.values() for symbol in row}

    def is_final(self, state: int) -> bool:
        return state in self.accepting_states

    def accepts(self, word: str) -> bool:
        state = self.start_state
        for ch in word:
            state = self.transitions.get(state, {}).get(ch)
            if state is None:
                return False
        return state in self.accepting_states

    def to_automaton(self, name: str = "DFA") -> Automaton:
        """Copy the table into an Automaton, e.g. to draw it."""
        fa = Automaton(name=name)
        for state in self.transitions:
            fa.add_state(state)
        for src, row in self.transitions.items():
            for symbol, dst in row.items():
                fa.add_transition(src, dst, symbol)
        fa.set_start(self.start_state)
        for state in self.accepting_states:
            fa.mark_final(state)
        return fa


# -----------------------------------------------------------------------------
# NFA -> DFA
# -----------------------------------------------------------------------------


def determinize(nfa: Automaton) -> DFA:
    """Convert `nfa` to a DFA with the subset construction."""
    nfa.validate()

    mapping: Dict[FrozenSet[int], int] = {}
    dfa = DFA()
    queue: Deque[FrozenSet[int]] = deque()

    def state_id(subset: FrozenSet[int]) -> int:
        if subset not in mapping:
            new_id = len(mapping)
            mapping[subset] = new_id
            dfa.transitions[new_id] = {}
            dfa.subsets[new_id] = subset
            if not subset.isdisjoint(nfa.accepting_states):
                dfa.accepting_states.add(new_id)
            queue.append(subset)
        return mapping[subset]

    dfa.start_state = state_id(nfa.epsilon_closure({nfa.start_state}))

    while queue:
        subset = queue.popleft()
        src = mapping[subset]

        moves: Dict[str, Set[int]] = defaultdict(set)
        for state in subset:
            for symbol, dsts in nfa.transitions.get(state, {}).items():
                if symbol is not EPSILON:
                    moves[symbol].update(dsts)

        for symbol in sorted(moves):
            dfa.transitions[src][symbol] = state_id(nfa.epsilon_closure(moves[symbol]))

    logger.debug(
        "Subset construction: %d NFA states -> %d DFA states",
        len(nfa.states),
        len(dfa.transitions),
    )
    return dfa


# -----------------------------------------------------------------------------
# Minimization
# -----------------------------------------------------------------------------


class RefinementCriterion(Enum):
    # Split on the group each transition leads to
    PARTITION = "partition"
    # Split on the raw target state of each transition
    RAW_TARGET = "raw"


def compute_partition(
    dfa: DFA, criterion: RefinementCriterion = RefinementCriterion.PARTITION
) -> List[FrozenSet[int]]:
    """
    Compute the groups of indistinguishable states by iterative refinement.

    Starts from {final states}, {non-final states} and splits every group by
    the transition signature of its members until a pass no longer produces
    more groups. With RefinementCriterion.RAW_TARGET the signature holds raw
    target ids, so only states with literally identical rows are merged.
    """
    finals = frozenset(s for s in dfa.transitions if s in dfa.accepting_states)
    non_finals = frozenset(dfa.transitions) - finals
    partition = [group for group in (finals, non_finals) if group]

    while True:
        group_of = {state: index for index, group in enumerate(partition) for state in group}

        new_partition = []
        for group in partition:
            signature_groups = defaultdict(set)
            for state in sorted(group):
                row = dfa.transitions[state]
                if criterion is RefinementCriterion.RAW_TARGET:
                    signature = frozenset(row.items())
                else:
                    signature = frozenset((symbol, group_of[dst]) for symbol, dst in row.items())
                signature_groups[signature].add(state)
            new_partition.extend(frozenset(members) for members in signature_groups.values())

        if len(new_partition) <= len(partition):
            return partition
        partition = new_partition


def minimize(dfa: DFA, criterion: RefinementCriterion = RefinementCriterion.PARTITION) -> DFA:
    """Collapse every group of indistinguishable states into one state."""
    for src, row in dfa.transitions.items():
        for symbol, dst in row.items():
            if dst not in dfa.transitions:
                raise InvariantViolation(f"DFA transition {src} --{symbol}--> {dst} leaves the table")
    if dfa.start_state not in dfa.transitions:
        raise InvariantViolation(f"DFA start state {dfa.start_state} is not in the table")

    partition = compute_partition(dfa, criterion)

    # The group holding the start state becomes state 0
    ordered = sorted(partition, key=lambda group: (dfa.start_state not in group, min(group)))
    state_to_class = {state: index for index, group in enumerate(ordered) for state in group}

    minimized = DFA(start_state=state_to_class[dfa.start_state])
    for index in range(len(ordered)):
        minimized.transitions[index] = {}

    for state, row in dfa.transitions.items():
        src = state_to_class[state]
        for symbol, dst in row.items():
            minimized.transitions[src][symbol] = state_to_class[dst]
        if state in dfa.accepting_states:
            minimized.accepting_states.add(src)

    logger.debug(
        "Minimization (%s): %d -> %d states",
        criterion.value,
        len(dfa.transitions),
        len(minimized.transitions),
    )
    return minimized
