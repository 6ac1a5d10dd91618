"""Raw terminal keys to the logical key vocabulary the views understand."""

from __future__ import annotations

_RU_TO_EN = {
    "й": "q", "ц": "w", "у": "e", "к": "r", "е": "t",
    "н": "y", "г": "u", "ш": "i", "щ": "o", "з": "p",
    "х": "[", "ъ": "]",
    "ф": "a", "ы": "s", "в": "d", "а": "f", "п": "g",
    "р": "h", "о": "j", "л": "k", "д": "l", "ж": ";",
    "э": "'",
    "я": "z", "ч": "x", "с": "c", "м": "v", "и": "b",
    "т": "n", "ь": "m", "б": ",", "ю": ".",
    "Й": "Q", "Ц": "W", "У": "E", "К": "R", "Е": "T",
    "Н": "Y", "Г": "U", "Ш": "I", "Щ": "O", "З": "P",
    "Х": "{", "Ъ": "}",
    "Ф": "A", "Ы": "S", "В": "D", "А": "F", "П": "G",
    "Р": "H", "О": "J", "Л": "K", "Д": "L", "Ж": ":",
    "Э": '"',
    "Я": "Z", "Ч": "X", "С": "C", "М": "V", "И": "B",
    "Т": "N", "Ь": "M",
}  # fmt: skip

_TERMINAL_NAMES = {
    "escape": "esc",
    "pageup": "pgup",
    "pagedown": "pgdown",
    "space": " ",
}


def normalize(key: str) -> str:
    """Map a Russian-layout letter to the Latin key in the same position."""
    return _RU_TO_EN.get(key, key)


def from_terminal(key: str, character: str | None = None) -> str:
    """Translate a terminal key event into a logical key.

    Named keys (arrows, ``enter``, ``ctrl+s``...) keep their name; printable
    characters become the character itself.
    """
    if key in _TERMINAL_NAMES:
        return _TERMINAL_NAMES[key]
    if character and len(character) == 1 and character.isprintable():
        return character
    return key
