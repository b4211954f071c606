"""
Serbian Cyrillic/Latin transliteration engine.
Provides the text transliterator and the document text-node walker.
"""

from .direction import Direction
from .dom import transliterate_document, transliterate_html, transliterate_nodes
from .engine import to_cyrillic, to_latin, transliterate

__all__ = [
    'Direction',
    'transliterate',
    'to_latin',
    'to_cyrillic',
    'transliterate_document',
    'transliterate_html',
    'transliterate_nodes',
]
