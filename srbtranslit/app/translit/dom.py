"""
Text-node traversal over parsed HTML documents.

Only the text of eligible nodes is rewritten. Elements are never moved,
re-created or re-parented, so markup and element boundaries survive a pass
untouched.
"""

from typing import Iterable, Iterator, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from .direction import Direction
from .engine import transliterate
from ..utils.logger import get_logger

logger = get_logger("translit.dom")

# Text directly inside these elements is code, fallback markup or user input
SKIPPED_PARENTS = frozenset({"script", "style", "noscript", "textarea"})

Node = Union[Tag, NavigableString]


# Valid contenteditable keywords; any other value means "inherit"
EDITABLE_STATES = {"": True, "true": True, "plaintext-only": True, "false": False}


def _is_live_editable(element: Optional[Tag]) -> bool:
    # Nearest valid contenteditable wins, like the DOM's isContentEditable
    while element is not None:
        value = element.get("contenteditable") if isinstance(element, Tag) else None
        if value is not None:
            state = EDITABLE_STATES.get(str(value).strip().lower())
            if state is not None:
                return state
        element = element.parent
    return False


def is_eligible(node: NavigableString) -> bool:
    """Whether a text node may be transliterated."""
    if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
        return False

    parent = node.parent
    if parent is not None and parent.name in SKIPPED_PARENTS:
        return False
    if _is_live_editable(parent):
        return False

    return str(node).strip() != ""


def iter_text_nodes(nodes: Iterable[Node]) -> Iterator[NavigableString]:
    """Yield eligible text nodes in document order, each at most once."""
    seen = set()
    for node in nodes:
        candidates = node.descendants if isinstance(node, Tag) else (node,)
        for candidate in candidates:
            if id(candidate) in seen:
                continue
            seen.add(id(candidate))
            if is_eligible(candidate):
                yield candidate


def transliterate_nodes(nodes: Iterable[Node], direction: Direction) -> None:
    # Collect first: replacing while walking descendants would skip siblings
    targets: List[NavigableString] = list(iter_text_nodes(nodes))
    changed = 0

    for node in targets:
        try:
            original = str(node)
            converted = transliterate(original, direction)
            if converted != original:
                node.replace_with(type(node)(converted))
                changed += 1
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug(f"Leaving unreadable text node untouched: {e}")

    logger.debug(f"Transliterated {changed}/{len(targets)} text nodes ({direction.value})")


def transliterate_document(document: Tag, direction: Direction) -> None:
    """Transliterate every eligible text node of a parsed document in place."""
    transliterate_nodes([document], direction)


def transliterate_html(markup: str, direction: Direction) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    transliterate_document(soup, direction)
    return str(soup)
