#!/usr/bin/env python3
"""
Lexical analyzer driver: builds the category automata, merges them,
determinizes and minimizes the result, then reports on a source file.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing_extensions import *

import graphviz

from automaton import Automaton, AutomatonError, StateCounter, merge_automata
from categories import CATEGORY_NAMES, build_category_automata
from dfa import DFA, RefinementCriterion, determinize, minimize
from io_utils import graph_path, read_source
from lexer import create_symbol_table, detect_lexeme_errors, tokenize_code
from report import (
    print_automaton,
    print_lexeme_errors,
    print_minimization,
    print_symbol_table,
    print_tokens,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    source: str = "code.txt"
    criterion: RefinementCriterion = RefinementCriterion.PARTITION
    log_level: str = "WARNING"
    graph_dir: Optional[str] = None
    show_transitions: bool = False

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "PipelineConfig":
        parser = argparse.ArgumentParser(
            description="Classify tokens with finite automata and report on a source file"
        )
        parser.add_argument("source", nargs="?", default=cls.source, help="Source file to analyze")
        parser.add_argument(
            "--criterion",
            choices=[c.value for c in RefinementCriterion],
            default=cls.criterion.value,
            help="Refinement rule used when minimizing the DFA",
        )
        parser.add_argument(
            "--log-level",
            default=cls.log_level,
            choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        )
        parser.add_argument("--graph-dir", help="Render the automata as PNG files into this directory")
        parser.add_argument(
            "--show-transitions",
            action="store_true",
            help="List the DFA transitions before and after minimization",
        )
        args = parser.parse_args(argv)
        return cls(
            source=args.source,
            criterion=RefinementCriterion(args.criterion),
            log_level=args.log_level,
            graph_dir=args.graph_dir,
            show_transitions=args.show_transitions,
        )


@dataclass
class PipelineResult:
    fragments: Dict[str, Automaton]
    combined: Automaton
    dfa: DFA
    minimized: DFA


def build_pipeline(
    criterion: RefinementCriterion = RefinementCriterion.PARTITION,
    counter: Optional[StateCounter] = None,
) -> PipelineResult:
    """Run category construction, merging, determinization and minimization once."""
    counter = counter if counter is not None else StateCounter()

    fragments = build_category_automata(CATEGORY_NAMES, counter)
    for name, fa in fragments.items():
        logger.info("Built %s fragment: %d states", name, len(fa.states))

    combined = merge_automata(fragments.values(), counter)
    logger.info("Combined NFA: %d states", len(combined.states))

    dfa = determinize(combined)
    logger.info("DFA built: |Q| = %d, |F| = %d", len(dfa.transitions), len(dfa.accepting_states))

    minimized = minimize(dfa, criterion)
    logger.info("Minimized DFA: |Q| = %d", len(minimized.transitions))

    return PipelineResult(fragments, combined, dfa, minimized)


def render_graphs(result: PipelineResult, directory: str) -> None:
    for name, fa in result.fragments.items():
        fa.to_graphviz(graph_path(directory, name))
    result.combined.to_graphviz(graph_path(directory, result.combined.name))
    result.dfa.to_automaton("DFA").to_graphviz(graph_path(directory, "DFA"))
    result.minimized.to_automaton("MinimalDFA").to_graphviz(graph_path(directory, "MinimalDFA"))
    logger.info("Graphs written to %s", directory)


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = PipelineConfig.from_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s: %(message)s",
    )

    try:
        result = build_pipeline(config.criterion)
    except AutomatonError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_automaton(result.combined, "Combined")
    print_minimization(result.dfa, result.minimized, config.show_transitions)

    if config.graph_dir:
        try:
            render_graphs(result, config.graph_dir)
        except (graphviz.ExecutableNotFound, graphviz.CalledProcessError, OSError) as e:
            logger.error("Could not render graphs: %s", e)

    try:
        code = read_source(config.source)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_lexeme_errors(detect_lexeme_errors(code, result.fragments))
    print_tokens(tokenize_code(code, result.fragments))
    print_symbol_table(create_symbol_table(code, result.fragments))
    return 0


if __name__ == "__main__":
    sys.exit(main())
