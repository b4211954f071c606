"""Serbian Cyrillic <-> Latin transliteration tables.

Each direction has a sequence table (multi-character keys, matched first)
and a single-character table. Case variants are separate entries: Cyrillic
digraph capitalisation does not decompose letter by letter.
"""

from .direction import Direction

# Latin to Cyrillic, multi-character keys
LATIN_TO_CYRILLIC_SEQUENCES = {
    'LJ': 'Љ', 'Lj': 'Љ', 'lj': 'љ',
    'NJ': 'Њ', 'Nj': 'Њ', 'nj': 'њ',
    'DŽ': 'Џ', 'Dž': 'Џ', 'dž': 'џ',
    # dz collapses onto the same letter as dž; the round trip is lossy here
    'DZ': 'Џ', 'Dz': 'Џ', 'dz': 'џ',
}

LATIN_TO_CYRILLIC = {
    # Uppercase
    'A': 'А', 'B': 'Б', 'V': 'В', 'G': 'Г', 'D': 'Д', 'Đ': 'Ђ', 'E': 'Е',
    'Ž': 'Ж', 'Z': 'З', 'I': 'И', 'J': 'Ј', 'K': 'К', 'L': 'Л', 'M': 'М',
    'N': 'Н', 'O': 'О', 'P': 'П', 'R': 'Р', 'S': 'С', 'Š': 'Ш', 'T': 'Т',
    'Ć': 'Ћ', 'U': 'У', 'F': 'Ф', 'H': 'Х', 'C': 'Ц', 'Č': 'Ч',
    # Lowercase
    'a': 'а', 'b': 'б', 'v': 'в', 'g': 'г', 'd': 'д', 'đ': 'ђ', 'e': 'е',
    'ž': 'ж', 'z': 'з', 'i': 'и', 'j': 'ј', 'k': 'к', 'l': 'л', 'm': 'м',
    'n': 'н', 'o': 'о', 'p': 'п', 'r': 'р', 's': 'с', 'š': 'ш', 't': 'т',
    'ć': 'ћ', 'u': 'у', 'f': 'ф', 'h': 'х', 'c': 'ц', 'č': 'ч',
}

# Cyrillic to Latin, multi-character keys
CYRILLIC_TO_LATIN_SEQUENCES = {
    # Capital digraph letter before a lowercase vowel is title case
    'Ња': 'Nja', 'Ње': 'Nje', 'Њи': 'Nji', 'Њо': 'Njo', 'Њу': 'Nju',
    'Ља': 'Lja', 'Ље': 'Lje', 'Љи': 'Lji', 'Љо': 'Ljo', 'Љу': 'Lju',
    'Џа': 'Dža', 'Џе': 'Dže', 'Џи': 'Dži', 'Џо': 'Džo', 'Џу': 'Džu',
    # Serbian IDN names stay Cyrillic
    '.срб': '.срб', 'из.срб': 'из.срб', 'њњњ.из.срб': 'њњњ.из.срб',
    '.СРБ': '.СРБ', 'ИЗ.СРБ': 'ИЗ.СРБ', 'ЊЊЊ.ИЗ.СРБ': 'ЊЊЊ.ИЗ.СРБ',
}

CYRILLIC_TO_LATIN = {
    # Uppercase
    'А': 'A', 'Б': 'B', 'В': 'V', 'Г': 'G', 'Д': 'D', 'Ђ': 'Đ', 'Е': 'E',
    'Ж': 'Ž', 'З': 'Z', 'И': 'I', 'Ј': 'J', 'К': 'K', 'Л': 'L', 'Љ': 'LJ',
    'М': 'M', 'Н': 'N', 'Њ': 'NJ', 'О': 'O', 'П': 'P', 'Р': 'R', 'С': 'S',
    'Ш': 'Š', 'Т': 'T', 'Ћ': 'Ć', 'У': 'U', 'Ф': 'F', 'Х': 'H', 'Ц': 'C',
    'Ч': 'Č', 'Џ': 'DŽ',
    # Lowercase
    'а': 'a', 'б': 'b', 'в': 'v', 'г': 'g', 'д': 'd', 'ђ': 'đ', 'е': 'e',
    'ж': 'ž', 'з': 'z', 'и': 'i', 'ј': 'j', 'к': 'k', 'л': 'l', 'љ': 'lj',
    'м': 'm', 'н': 'n', 'њ': 'nj', 'о': 'o', 'п': 'p', 'р': 'r', 'с': 's',
    'ш': 'š', 'т': 't', 'ћ': 'ć', 'у': 'u', 'ф': 'f', 'х': 'h', 'ц': 'c',
    'ч': 'č', 'џ': 'dž',
}

TABLES = {
    Direction.LATIN_TO_CYRILLIC: (LATIN_TO_CYRILLIC_SEQUENCES, LATIN_TO_CYRILLIC),
    Direction.CYRILLIC_TO_LATIN: (CYRILLIC_TO_LATIN_SEQUENCES, CYRILLIC_TO_LATIN),
}
