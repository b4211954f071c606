"""Text transliteration between Serbian Cyrillic and Latin."""

import re
from typing import Dict, Pattern, Tuple

from .direction import Direction
from .tables import TABLES

_compiled: Dict[Direction, Tuple[Pattern[str], Dict[str, str]]] = {}


def _compile(direction: Direction) -> Tuple[Pattern[str], Dict[str, str]]:
    """Build one scanner per direction.

    Sequence keys come first in the alternation, longest first, so at any
    position a digraph wins over its first letter. The single-character
    class is only tried where no sequence key starts.
    """
    if direction not in _compiled:
        sequences, singles = TABLES[direction]
        keys = sorted(sequences, key=len, reverse=True)
        alternatives = [re.escape(key) for key in keys]
        alternatives.append("[" + "".join(re.escape(char) for char in singles) + "]")
        replacements = {**singles, **sequences}
        _compiled[direction] = (re.compile("|".join(alternatives)), replacements)
    return _compiled[direction]


def transliterate(text: str, direction: Direction) -> str:
    """Transliterate text in the given direction.

    Characters found in neither table pass through unchanged. Empty and
    whitespace-only input is returned as is.
    """
    if not isinstance(text, str) or not text or text.isspace():
        return text

    pattern, replacements = _compile(Direction.normalize(direction))
    return pattern.sub(lambda match: replacements[match.group(0)], text)


def to_latin(text: str) -> str:
    return transliterate(text, Direction.CYRILLIC_TO_LATIN)


def to_cyrillic(text: str) -> str:
    return transliterate(text, Direction.LATIN_TO_CYRILLIC)
