import re
from dataclasses import dataclass
from typing_extensions import *

from automaton import Automaton, is_accepted
from categories import CLASSIFICATION_PRIORITY, IDENTIFIER

# Split on whitespace and around single-character delimiters, keeping the delimiters
_TOKEN_SPLIT = re.compile(r"\s+|(?=[{}()=;,])|(?<=[{}()=;,])")
# Scanned left to right, so "/*" inside a line comment opens nothing
_COMMENT = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)

DATATYPES = ("int", "float", "bool", "char")


@dataclass(frozen=True)
class Token:
    text: str
    category: Optional[str]
    line: int


@dataclass(frozen=True)
class LexemeError:
    line: int
    token: str
    reason: str = "Unrecognized token"


@dataclass(frozen=True)
class SymbolEntry:
    identifier: str
    datatype: str
    scope: str


def strip_comments(code: str) -> str:
    """Blank out // and /* */ comments, keeping the line breaks inside them."""
    return _COMMENT.sub(lambda m: "\n" * m.group().count("\n"), code)


def split_tokens(line: str) -> List[str]:
    return [token for token in _TOKEN_SPLIT.split(line) if token]


def classify(token: str, fragments: Mapping[str, Automaton]) -> Optional[str]:
    """Return the first category, in priority order, whose automaton accepts `token`."""
    for category in CLASSIFICATION_PRIORITY:
        if category in fragments and is_accepted(fragments[category], token):
            return category
    return None


def tokenize_code(code: str, fragments: Mapping[str, Automaton]) -> List[Token]:
    """Classify every candidate token of `code`; unrecognized ones get category None."""
    tokens = []
    for line_number, line in enumerate(strip_comments(code).split("\n"), start=1):
        for text in split_tokens(line):
            tokens.append(Token(text, classify(text, fragments), line_number))
    return tokens


def detect_lexeme_errors(code: str, fragments: Mapping[str, Automaton]) -> List[LexemeError]:
    return [
        LexemeError(token.line, token.text)
        for token in tokenize_code(code, fragments)
        if token.category is None
    ]


def create_symbol_table(code: str, fragments: Mapping[str, Automaton]) -> List[SymbolEntry]:
    """
    Collect variables declared with one of DATATYPES.

    Declarations before `main (` are global, the ones after it are local.
    Initializers are skipped up to the next `;` or the next `,` outside
    parentheses.
    """
    identifier = fragments[IDENTIFIER]
    entries = []
    is_local = False

    for line in strip_comments(code).split("\n"):
        tokens = split_tokens(line)

        for i, token in enumerate(tokens):
            if token == "main" and i + 1 < len(tokens) and tokens[i + 1] == "(":
                is_local = True

            if token not in DATATYPES:
                continue

            in_initializer = False
            depth = 0
            for name in tokens[i + 1:]:
                if name == ";":
                    break
                if name == "(":
                    depth += 1
                elif name == ")":
                    depth = max(depth - 1, 0)
                elif name == "," and depth == 0:
                    in_initializer = False
                elif name == "=":
                    in_initializer = True
                elif not in_initializer and name != "main" and is_accepted(identifier, name):
                    entries.append(SymbolEntry(name, token, "Local" if is_local else "Global"))

    return entries
