from typing_extensions import *

from automaton import Automaton, StateCounter, merge_automata
from categories import CATEGORY_NAMES, build_fragment
from dfa import DFA, RefinementCriterion, determinize, minimize
from io_utils import read_source
from lexer import classify, create_symbol_table, detect_lexeme_errors, tokenize_code
from report import (
    print_automaton,
    print_dfa,
    print_lexeme_errors,
    print_symbol_table,
    print_tokens,
)

HELP = """
Commands:
  BUILDING:
    build [category ...]         - Build category fragments (default: all five)
    merge [result]               - Merge all fragments into one NFA (default: Combined)
    to_dfa <name> [result]       - Determinize an NFA
    minimize <name> [raw] [res]  - Minimize a DFA ('raw' compares raw target ids)
    list                         - List all automata

  INSPECTION:
    show <name>                  - Show automaton states and transitions
    graph <name>                 - Visualize automaton
    test <name> <word>           - Test if word is accepted
    classify <token>             - Classify a token with the category fragments

  SOURCE CODE:
    load <file>                  - Load a source file
    tokens                       - Tokenize the loaded source
    errors                       - List unrecognized tokens of the loaded source
    symbols                      - Show the symbol table of the loaded source

  GENERAL:
    delete <name>                - Delete automaton
    clear                        - Clear all
    exit                         - Exit
"""


def main():
    """Simple interactive terminal for building and testing the lexer automata."""
    counter = StateCounter()
    fragments: Dict[str, Automaton] = {}
    automata: Dict[str, Union[Automaton, DFA]] = {}
    source: Optional[str] = None

    print("Lexical Automata Terminal - Type 'help' for commands\n")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()

            # Exit
            if cmd in ["exit", "quit"]:
                break

            # Help
            elif cmd == "help":
                print(HELP)

            # Build fragments
            elif cmd == "build":
                for name in parts[1:] or CATEGORY_NAMES:
                    if name in fragments:
                        print(f"Already built: {name}")
                        continue
                    fragments[name] = automata[name] = build_fragment(name, counter)
                    print(f"Created automaton: {name} ({len(fragments[name].states)} states)")

            # List
            elif cmd == "list":
                if automata:
                    print("Automata:")
                    for name, fa in sorted(automata.items()):
                        kind = "DFA" if isinstance(fa, DFA) else "NFA"
                        print(f"  {name}: {kind}, {len(fa.states)} states")
                else:
                    print("Nothing built")

            # Merge
            elif cmd == "merge":
                if not fragments:
                    print("Build the category fragments first")
                else:
                    result_name = parts[1] if len(parts) > 1 else "Combined"
                    automata[result_name] = merge_automata(fragments.values(), counter, name=result_name)
                    print(f"Created automaton: {result_name}")

            # Show
            elif cmd == "show":
                if len(parts) < 2:
                    print("Usage: show <name>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                elif isinstance(automata[parts[1]], DFA):
                    print_dfa(automata[parts[1]], parts[1], show_transitions=True)
                else:
                    print_automaton(automata[parts[1]], parts[1])

            # Graph
            elif cmd == "graph":
                if len(parts) < 2:
                    print("Usage: graph <name>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    fa = automata[parts[1]]
                    if isinstance(fa, DFA):
                        fa = fa.to_automaton(parts[1])
                    fa.to_graphviz(filename=parts[1], view=True)

            # Test
            elif cmd == "test":
                if len(parts) < 3:
                    print("Usage: test <name> <word>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    accepted = automata[parts[1]].accepts(parts[2])
                    print(f"'{parts[2]}' is {'ACCEPTED' if accepted else 'REJECTED'}")

            # Classify
            elif cmd == "classify":
                if len(parts) < 2:
                    print("Usage: classify <token>")
                elif not fragments:
                    print("Build the category fragments first")
                else:
                    category = classify(parts[1], fragments)
                    print(f"Token: {parts[1]}, Type: {category or 'Unrecognized'}")

            # Determinize
            elif cmd == "to_dfa":
                if len(parts) < 2:
                    print("Usage: to_dfa <name> [result]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                elif isinstance(automata[parts[1]], DFA):
                    print(f"Already a DFA: {parts[1]}")
                else:
                    result_name = parts[2] if len(parts) > 2 else f"{parts[1]}_dfa"
                    automata[result_name] = determinize(automata[parts[1]])
                    print(f"Created DFA: {result_name} ({len(automata[result_name].states)} states)")

            # Minimize
            elif cmd == "minimize":
                if len(parts) < 2:
                    print("Usage: minimize <name> [raw] [result]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                elif not isinstance(automata[parts[1]], DFA):
                    print("Minimization only defined for DFAs, use to_dfa first")
                else:
                    rest = parts[2:]
                    criterion = RefinementCriterion.PARTITION
                    if rest and rest[0] == RefinementCriterion.RAW_TARGET.value:
                        criterion = RefinementCriterion.RAW_TARGET
                        rest = rest[1:]
                    result_name = rest[0] if rest else f"{parts[1]}_min"
                    automata[result_name] = minimize(automata[parts[1]], criterion)
                    print(
                        f"Created DFA: {result_name} "
                        f"({len(automata[parts[1]].states)} -> {len(automata[result_name].states)} states)"
                    )

            # Load source
            elif cmd == "load":
                if len(parts) < 2:
                    print("Usage: load <filename>")
                else:
                    source = read_source(parts[1])
                    print(f"Loaded {len(source.splitlines())} lines from {parts[1]}")

            # Source reports
            elif cmd in ["tokens", "errors", "symbols"]:
                if source is None:
                    print("Load a source file first")
                elif set(CATEGORY_NAMES) - set(fragments):
                    print("Build all category fragments first")
                elif cmd == "tokens":
                    print_tokens(tokenize_code(source, fragments))
                elif cmd == "errors":
                    print_lexeme_errors(detect_lexeme_errors(source, fragments))
                else:
                    print_symbol_table(create_symbol_table(source, fragments))

            # Delete
            elif cmd == "delete":
                if len(parts) < 2:
                    print("Usage: delete <name>")
                elif parts[1] in automata:
                    del automata[parts[1]]
                    fragments.pop(parts[1], None)
                    print(f"Deleted automaton: {parts[1]}")
                else:
                    print(f"Not found: {parts[1]}")

            # Clear
            elif cmd == "clear":
                automata.clear()
                fragments.clear()
                source = None
                print("Cleared all")

            else:
                print(f"Unknown command: {cmd}")

        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break
        except Exception as e:
            print(f"Error: {e}")

    print("Goodbye!")


if __name__ == "__main__":
    main()
