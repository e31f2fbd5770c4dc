from dataclasses import dataclass
from typing import Iterable, List
import re

DEFAULT_DELIMITER = ":"

# Leading "1.", "2)", "-" or "*" that completion output tends to add
LIST_MARKER_PATTERN = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s+")

@dataclass(frozen=True)
class CardPair:
    """A term/description pair that has not been saved yet."""
    term: str
    description: str

    def to_dict(self) -> dict:
        return {"term": self.term, "description": self.description}

def split_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> CardPair | None:
    """Split one line on the first delimiter occurrence.

    Anything after the first delimiter belongs to the description, including
    further delimiters. Returns None when the line has no delimiter or either
    side is empty after trimming.
    """
    if not delimiter:
        raise ValueError("Delimiter must not be empty")
    if delimiter not in line:
        return None
    term, description = line.split(delimiter, 1)
    term = term.strip()
    description = description.strip()
    if not term or not description:
        return None
    return CardPair(term=term, description=description)

def parse_pairs(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[CardPair]:
    """Parse delimiter-separated text into card pairs, one pair per non-blank line.

    Args:
        text: Source text
        delimiter: Separator between term and description (default: ":")

    Returns:
        Pairs in the order they appear in the text
    """
    pairs = []
    for line in text.splitlines():
        if not line.strip():
            continue
        pair = split_line(line, delimiter)
        if pair is not None:
            pairs.append(pair)
    return pairs

def parse_completion_output(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[CardPair]:
    """Parse completion output with the same line rule after dropping list markers."""
    cleaned = "\n".join(LIST_MARKER_PATTERN.sub("", line) for line in text.splitlines())
    return parse_pairs(cleaned, delimiter)

def format_pairs(pairs: Iterable[CardPair], delimiter: str = DEFAULT_DELIMITER) -> str:
    """Render pairs back into the line format understood by parse_pairs."""
    return "\n".join(f"{pair.term}{delimiter} {pair.description}" for pair in pairs)

def clean_option_lines(text: str) -> List[str]:
    """Split completion output into option strings, dropping numbering and blanks."""
    options = []
    for line in text.splitlines():
        line = LIST_MARKER_PATTERN.sub("", line).strip()
        if line:
            options.append(line)
    return options
