import os
from typing import List, Optional

from .errors import ArgumentError

DEFAULT_PHRASES_FILE = os.path.abspath(
    os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'phrases.txt')
)


def parse_phrases(text: str) -> List[str]:
    """One phrase per line; blank lines skipped, repeats keep the first occurrence."""
    seen = {}
    for line in text.splitlines():
        phrase = line.strip()
        if phrase and phrase not in seen:
            seen[phrase] = None
    return list(seen)


def load_phrases(path: Optional[str] = None) -> List[str]:
    path = path or DEFAULT_PHRASES_FILE
    with open(path, encoding='utf-8') as fh:
        phrases = parse_phrases(fh.read())
    if not phrases:
        raise ArgumentError(f'Phrase list {path} is empty')
    return phrases
