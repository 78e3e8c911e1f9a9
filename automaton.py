from collections import defaultdict
from dataclasses import dataclass, field
from typing_extensions import *

from graphviz import Digraph

# Epsilon edges are labeled with None, which can never be an input character.
EPSILON = None


class AutomatonError(Exception):
    """Base class for errors raised while building or combining automata."""


class InvariantViolation(AutomatonError):
    """A construction step broke the automaton's structural invariants."""


@dataclass
class StateCounter:
    """
    Hands out state ids. Every fragment that may later be merged with
    another one must draw its ids from the same counter.
    """

    next_id: int = 0

    def next_state(self) -> int:
        state = self.next_id
        self.next_id += 1
        return state


@dataclass
class Automaton:
    """
    Non-deterministic finite automaton with integer states.

    transitions[state][symbol] is the set of target states; a symbol of
    EPSILON marks a transition that consumes no input. The structure is
    append-only: states and transitions are never removed.
    """

    name: str = ""
    states: Set[int] = field(default_factory=set)
    start_state: Optional[int] = None
    accepting_states: Set[int] = field(default_factory=set)
    transitions: Dict[int, Dict[Optional[str], Set[int]]] = field(
        default_factory=lambda: defaultdict(dict)
    )

    def __post_init__(self):
        table = defaultdict(dict)
        for src, edges in self.transitions.items():
            table[src] = {symbol: set(dsts) for symbol, dsts in edges.items()}
        self.transitions = table
        self.states = set(self.states)
        self.accepting_states = set(self.accepting_states)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_state(self, state: int) -> int:
        self.states.add(state)
        return state

    def add_transition(self, src: int, dst: int, symbol: Optional[str]) -> None:
        """Add `src --symbol--> dst`, registering both states."""
        if symbol is not EPSILON and (not isinstance(symbol, str) or len(symbol) != 1):
            raise InvariantViolation(
                f"Transition symbol must be a single character or EPSILON, got {symbol!r}"
            )
        self.states.add(src)
        self.states.add(dst)
        self.transitions[src].setdefault(symbol, set()).add(dst)

    def set_start(self, state: int) -> None:
        if state not in self.states:
            raise InvariantViolation(f"Start state {state} is not a state of {self._label()}")
        self.start_state = state

    def mark_final(self, state: int) -> None:
        if state not in self.states:
            raise InvariantViolation(f"Final state {state} is not a state of {self._label()}")
        self.accepting_states.add(state)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_start(self, state: int) -> bool:
        return state == self.start_state

    def is_final(self, state: int) -> bool:
        return state in self.accepting_states

    def targets(self, state: int, symbol: Optional[str]) -> FrozenSet[int]:
        """Get all target states for a given (state, symbol) pair."""
        return frozenset(self.transitions.get(state, {}).get(symbol, ()))

    @property
    def alphabet(self) -> Set[str]:
        return {
            symbol
            for edges in self.transitions.values()
            for symbol in edges
            if symbol is not EPSILON
        }

    def transition_relation(self) -> Iterator[Tuple[int, Optional[str], int]]:
        for src, edges in self.transitions.items():
            for symbol, dsts in edges.items():
                for dst in dsts:
                    yield src, symbol, dst

    def has_epsilon_transitions(self) -> bool:
        return any(EPSILON in edges for edges in self.transitions.values())

    def is_deterministic(self) -> bool:
        return not self.has_epsilon_transitions() and all(
            len(dsts) <= 1 for edges in self.transitions.values() for dsts in edges.values()
        )

    def epsilon_closure(self, states: Iterable[int]) -> FrozenSet[int]:
        """Return every state reachable from *states* through epsilon edges alone."""
        closure = set(states)
        stack = list(closure)
        while stack:
            s = stack.pop()
            for next_state in self.transitions.get(s, {}).get(EPSILON, ()):
                if next_state not in closure:
                    closure.add(next_state)
                    stack.append(next_state)
        return frozenset(closure)

    def validate(self) -> None:
        """Raise InvariantViolation if the automaton is structurally broken."""
        if self.start_state is None:
            raise InvariantViolation(f"{self._label()} has no start state")
        if self.start_state not in self.states:
            raise InvariantViolation(
                f"Start state {self.start_state} of {self._label()} is not a state"
            )
        stray = self.accepting_states - self.states
        if stray:
            raise InvariantViolation(
                f"Final states {sorted(stray)} of {self._label()} are not states"
            )
        for src, _, dst in self.transition_relation():
            if src not in self.states or dst not in self.states:
                raise InvariantViolation(
                    f"Transition {src} -> {dst} of {self._label()} references an unknown state"
                )

    def accepts(self, word: str) -> bool:
        return is_accepted(self, word)

    def _label(self) -> str:
        return f"automaton {self.name!r}" if self.name else "automaton"

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def to_graphviz(self, filename: Optional[str] = None, view: bool = False) -> Digraph:
        """
        Build a Graphviz drawing of this automaton. The drawing is rendered
        to `filename` (png) only when a filename is given.
        """
        title = self.name or ("DFA" if self.is_deterministic() else "NFA")

        dot = Digraph(
            name=title,
            format="png",
            graph_attr={
                "rankdir": "LR",
                "splines": "true",
                "nodesep": "0.8",
                "ranksep": "1.2",
                "label": title,
                "labelloc": "t",
                "fontsize": "14",
                "fontname": "Arial",
                "bgcolor": "white",
            },
            node_attr={
                "shape": "circle",
                "fontsize": "14",
                "fontname": "Arial",
                "style": "filled",
                "fillcolor": "lightblue",
            },
            edge_attr={"fontsize": "12", "fontname": "Arial", "arrowsize": "0.8"},
        )

        dot.node("__start__", shape="point", width="0.01", style="invis")

        for state in sorted(self.states):
            node_id = f"q{state}"
            if state in self.accepting_states:
                dot.node(
                    node_id,
                    label=str(state),
                    shape="doublecircle",
                    fillcolor="lightgreen",
                )
            else:
                dot.node(node_id, label=str(state))

        if self.start_state is not None:
            dot.edge("__start__", f"q{self.start_state}", penwidth="2")

        # Parallel edges share one arrow labeled with all of their symbols
        edges = defaultdict(list)
        for src, symbol, dst in self.transition_relation():
            edges[(src, dst)].append("ε" if symbol is EPSILON else symbol)

        for (src, dst), symbols in sorted(edges.items()):
            label = ", ".join(sorted(symbols))
            if src == dst:
                dot.edge(f"q{src}", f"q{dst}", label=label, headport="n", tailport="n")
            else:
                dot.edge(f"q{src}", f"q{dst}", label=label)

        if filename:
            dot.render(filename, view=view, cleanup=True)
        return dot


def is_accepted(automaton: Automaton, word: str) -> bool:
    """
    Run `word` through `automaton` by tracking the set of active states.
    """
    if automaton.start_state is None:
        raise InvariantViolation(f"{automaton._label()} has no start state")

    current = automaton.epsilon_closure({automaton.start_state})
    for ch in word:
        nxt: Set[int] = set()
        for state in current:
            nxt.update(automaton.transitions.get(state, {}).get(ch, ()))
        if not nxt:
            return False
        current = automaton.epsilon_closure(nxt)
    return not current.isdisjoint(automaton.accepting_states)


def merge_automata(
    fragments: Iterable[Automaton],
    counter: Optional[StateCounter] = None,
    name: str = "Combined",
) -> Automaton:
    """
    Union the fragments into one NFA: a fresh start state gets an epsilon
    edge to each fragment's start state, everything else is copied as is.

    Fragments must come from a shared counter so their ids are disjoint.
    Without a counter, the new start state is one above the largest id in use.
    """
    fragments = list(fragments)
    seen: Set[int] = set()
    for fragment in fragments:
        fragment.validate()
        overlap = seen & fragment.states
        if overlap:
            raise InvariantViolation(
                f"{fragment._label()} reuses state ids {sorted(overlap)} of another fragment"
            )
        seen |= fragment.states

    if counter is not None:
        new_start = counter.next_state()
        if new_start in seen:
            raise InvariantViolation(f"Counter handed out state {new_start}, which is already in use")
    else:
        new_start = max(seen, default=-1) + 1

    combined = Automaton(name=name)
    combined.add_state(new_start)
    combined.set_start(new_start)

    for fragment in fragments:
        combined.states |= fragment.states
        combined.accepting_states |= fragment.accepting_states
        for src, edges in fragment.transitions.items():
            for symbol, dsts in edges.items():
                combined.transitions[src].setdefault(symbol, set()).update(dsts)
        combined.add_transition(new_start, fragment.start_state, EPSILON)

    return combined
