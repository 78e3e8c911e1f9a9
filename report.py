"""Plain-text reports printed by the command-line tools."""

from typing_extensions import *

from automaton import EPSILON, Automaton
from dfa import DFA
from lexer import LexemeError, SymbolEntry, Token

RULE = "=" * 42


def print_automaton(fa: Automaton, title: Optional[str] = None) -> None:
    print("\n" + "=" * 30)
    print(f"  NFA for: {title or fa.name}")
    print("=" * 30)
    print(f"Total States: {len(fa.states)}")
    print(f"Start State: {fa.start_state}")
    print(f"Final States: {sorted(fa.accepting_states)}")
    print("-" * 30)
    print("Transitions:")
    for state in sorted(fa.states):
        edges = fa.transitions.get(state, {})
        # Epsilon edges first, then by character
        for symbol in sorted(edges, key=lambda s: (s is not EPSILON, s or "")):
            label = "ε" if symbol is EPSILON else symbol
            print(f"  State {state} --({label})--> {sorted(edges[symbol])}")
    print("=" * 30 + "\n")


def print_dfa(dfa: DFA, title: str = "DFA", show_transitions: bool = False) -> None:
    print(f"{title}:")
    print(f"Total DFA States: {len(dfa.transitions)}")
    print(f"Start State: {dfa.start_state}")
    print(f"Final States: {sorted(dfa.accepting_states)}")
    print(f"Alphabet: {''.join(sorted(dfa.alphabet))}")
    if show_transitions:
        print("-" * 30)
        print("DFA Transitions:")
        for state in sorted(dfa.transitions):
            for symbol, dst in sorted(dfa.transitions[state].items()):
                print(f"  State {state} --({symbol})--> {dst}")
    print("=" * 30 + "\n")


def print_minimization(before: DFA, after: DFA, show_transitions: bool = False) -> None:
    print("\n" + "=" * 30)
    print("        DFA Minimization       ")
    print("=" * 30)
    print_dfa(before, "Before Minimization", show_transitions)
    print_dfa(after, "After Minimization", show_transitions)


def print_tokens(tokens: Iterable[Token]) -> None:
    recognized = [token for token in tokens if token.category is not None]
    print("\nTokenized Code:")
    print("=" * 30)
    for token in recognized:
        print(f"Token: {token.text}, Type: {token.category}")
    print("=" * 30)
    print(f"Total Number of Tokens: {len(recognized)}")


def print_lexeme_errors(errors: Sequence[LexemeError]) -> None:
    print("\nLexeme Errors:")
    print(RULE)
    print(f"{'Line No':<10} {'Unidentified Token':<15} {'Reason':<20}")
    print("-" * 42)
    for error in errors:
        print(f"{error.line:<10} {error.token:<15} {error.reason:<20}")
    if not errors:
        print("No lexeme errors found.")
    print(RULE)


def print_symbol_table(entries: Sequence[SymbolEntry]) -> None:
    print("\nSymbol Table:")
    print(RULE)
    print(f"{'Identifier':<15} {'Datatype':<10} {'Scope':<10}")
    print("-" * 42)
    for entry in entries:
        print(f"{entry.identifier:<15} {entry.datatype:<10} {entry.scope:<10}")
    if not entries:
        print("No variables found.")
    print(RULE)
