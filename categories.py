"""
Automaton fragments for the five lexical categories.

Each category is described by a small pattern value (see CATEGORY_PATTERNS)
and turned into an NFA fragment by `build_fragment`. Fragments built for the
same lexer must share one StateCounter so they can be merged later.

>>> fragments = build_category_automata()
>>> fragments["Keyword"].accepts("return")
True
>>> fragments["Number"].accepts("3.")
False
"""

import string
from dataclasses import dataclass
from typing_extensions import *

from automaton import Automaton, AutomatonError, StateCounter

IDENTIFIER = "Identifier"
NUMBER = "Number"
KEYWORD = "Keyword"
OPERATOR = "Operator"
PUNCTUATOR = "Punctuator"

CATEGORY_NAMES = (IDENTIFIER, NUMBER, KEYWORD, OPERATOR, PUNCTUATOR)

# Order in which categories are tried when classifying a token
CLASSIFICATION_PRIORITY = (KEYWORD, NUMBER, OPERATOR, PUNCTUATOR, IDENTIFIER)

KEYWORDS = ("for", "if", "else", "return", "void", "main", "int", "bool", "char", "float")


class ConfigurationError(AutomatonError):
    """No pattern is known for the requested category."""

    def __init__(self, category: str):
        super().__init__(f"Unrecognized category: {category!r}")
        self.category = category


# -----------------------------------------------------------------------------
# Pattern variants
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CharacterRun:
    """
    One or more characters from `charset`. With a separator, optionally
    followed by the separator and a second run: c+ (sep c+)?
    """

    charset: str
    separator: Optional[str] = None


@dataclass(frozen=True)
class WordSet:
    """Exactly one of `words`, each spelled out on its own chain of states."""

    words: Tuple[str, ...]


@dataclass(frozen=True)
class SingleCharacter:
    """Exactly one character from `charset`."""

    charset: str


Pattern = Union[CharacterRun, WordSet, SingleCharacter]

CATEGORY_PATTERNS: Dict[str, Pattern] = {
    IDENTIFIER: CharacterRun(string.ascii_lowercase),
    NUMBER: CharacterRun(string.digits, separator="."),
    KEYWORD: WordSet(KEYWORDS),
    OPERATOR: SingleCharacter("+-*/%="),
    PUNCTUATOR: SingleCharacter(",;{}[]()"),
}


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------


def _add_run(fa: Automaton, src: int, charset: str, counter: StateCounter) -> int:
    """Add src --c--> run --c--> run for every c in charset, return run."""
    run = fa.add_state(counter.next_state())
    for ch in charset:
        fa.add_transition(src, run, ch)
        fa.add_transition(run, run, ch)
    return run


def _build_run(fa: Automaton, pattern: CharacterRun, counter: StateCounter) -> None:
    run = _add_run(fa, fa.start_state, pattern.charset, counter)
    fa.mark_final(run)

    if pattern.separator is not None:
        point = fa.add_state(counter.next_state())
        fa.add_transition(run, point, pattern.separator)
        fraction = _add_run(fa, point, pattern.charset, counter)
        fa.mark_final(fraction)


def _build_words(fa: Automaton, pattern: WordSet, counter: StateCounter) -> None:
    # Words sharing a prefix still get separate chains
    for word in pattern.words:
        current = fa.start_state
        for ch in word:
            nxt = fa.add_state(counter.next_state())
            fa.add_transition(current, nxt, ch)
            current = nxt
        fa.mark_final(current)


def _build_single(fa: Automaton, pattern: SingleCharacter, counter: StateCounter) -> None:
    final = fa.add_state(counter.next_state())
    for ch in pattern.charset:
        fa.add_transition(fa.start_state, final, ch)
    fa.mark_final(final)


_BUILDERS = {
    CharacterRun: _build_run,
    WordSet: _build_words,
    SingleCharacter: _build_single,
}


@dataclass
class BuildResult:
    """Either a built fragment or the error that prevented building it."""

    category: str
    fragment: Optional[Automaton] = None
    error: Optional[ConfigurationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Automaton:
        if self.error is not None:
            raise self.error
        return self.fragment


def try_build_fragment(
    category: str,
    counter: StateCounter,
    patterns: Optional[Mapping[str, Pattern]] = None,
) -> BuildResult:
    patterns = CATEGORY_PATTERNS if patterns is None else patterns
    pattern = patterns.get(category)
    if pattern is None:
        return BuildResult(category, error=ConfigurationError(category))

    fa = Automaton(name=category)
    fa.set_start(fa.add_state(counter.next_state()))
    _BUILDERS[type(pattern)](fa, pattern, counter)
    fa.validate()
    return BuildResult(category, fragment=fa)


def build_fragment(
    category: str,
    counter: StateCounter,
    patterns: Optional[Mapping[str, Pattern]] = None,
) -> Automaton:
    """Build the NFA fragment for `category`, raising ConfigurationError if unknown."""
    return try_build_fragment(category, counter, patterns).unwrap()


def build_category_automata(
    names: Iterable[str] = CATEGORY_NAMES,
    counter: Optional[StateCounter] = None,
    patterns: Optional[Mapping[str, Pattern]] = None,
) -> Dict[str, Automaton]:
    """
    Build one fragment per category name, all drawing state ids from the
    same counter. A fresh counter is used when none is given.
    """
    counter = counter if counter is not None else StateCounter()
    return {name: build_fragment(name, counter, patterns) for name in names}


if __name__ == "__main__":
    import doctest

    doctest.testmod()
