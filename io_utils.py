import os
from typing_extensions import *


def read_source(filename: str) -> str:
    """
    Read the program text to analyze. Raises FileNotFoundError for a missing
    file and ValueError when the file holds nothing but whitespace.
    """
    if not os.path.isfile(filename):
        raise FileNotFoundError(f"Source file not found: {filename}")

    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    if not content.strip():
        raise ValueError(f"Source file is empty: {filename}")

    # Trailing blank lines carry no tokens; leading ones still count for line numbers
    return content.rstrip()


def graph_path(directory: str, name: str) -> str:
    """Where to render the drawing of automaton `name` inside `directory`."""
    os.makedirs(directory, exist_ok=True)
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in name)
    return os.path.join(directory, safe or "automaton")
