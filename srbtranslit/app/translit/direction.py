from enum import Enum
from typing import Any


class Direction(Enum):
    """Which script is read and which is written by a transliteration pass."""

    LATIN_TO_CYRILLIC = "lat_to_cyr"
    CYRILLIC_TO_LATIN = "cyr_to_lat"

    @classmethod
    def normalize(cls, value: Any) -> "Direction":
        """Coerce stored or inbound values; anything unrecognised is Latin to Cyrillic."""
        if isinstance(value, cls):
            return value
        if value == cls.CYRILLIC_TO_LATIN.value:
            return cls.CYRILLIC_TO_LATIN
        return cls.LATIN_TO_CYRILLIC
