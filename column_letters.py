"""Spreadsheet column letters (A, B, ..., Z, AA, ...) <-> 1-based indices."""

import string

LETTERS = string.ascii_uppercase


def encode_column_letter(index):
    """Return the letter name of a 1-based column index (1 -> 'A', 27 -> 'AA').

    Bijective base-26: there is no zero digit, so 26 is 'Z' and not 'A0'.
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"Column index must be an integer, got {index!r}")
    if index < 1:
        raise ValueError(f"Column index must be >= 1, got {index}")

    name = ""
    n = index
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        name = LETTERS[remainder] + name
    return name


def decode_column_letter(letters):
    """Return the 1-based column index of a letter name ('A' -> 1, 'AZ' -> 52)."""
    if not isinstance(letters, str):
        raise ValueError(f"Column letters must be a string, got {letters!r}")

    name = letters.strip().upper()
    if not name:
        raise ValueError("Column letters must not be empty")

    index = 0
    for ch in name:
        if ch not in LETTERS:
            raise ValueError(f"Invalid column letters: {letters!r}")
        index = index * 26 + (ord(ch) - ord('A') + 1)
    return index


def column_options(count):
    # Dropdown choices for a sheet with `count` columns
    return [encode_column_letter(i) for i in range(1, (count or 0) + 1)]
