"""Text loading and word tokenization.

Words are mapped to dense integer ids in first-seen order so that trials
hash small integers instead of strings. A token is a maximal run of
alphanumeric characters, combining marks and apostrophes, lowercased.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from uniqcount.errors import InputError

logger = logging.getLogger(__name__)

_ASCII_TOKEN = re.compile(rb"[A-Za-z0-9']+")


@dataclass(frozen=True)
class TokenData:
    """Token ids for a text plus the exact number of distinct ids."""
    ids: tuple[int, ...]
    exact_distinct: int

    def __len__(self) -> int:
        return len(self.ids)


def _encode(
    tokens: Iterable[str] | Iterable[bytes],
    dictionary: dict[str, int] | dict[bytes, int],
) -> tuple[int, ...]:
    ids = []
    for token in tokens:
        token_id = dictionary.get(token)
        if token_id is None:
            token_id = len(dictionary)
            dictionary[token] = token_id
        ids.append(token_id)
    return tuple(ids)


def _tokenize_ascii(data: bytes) -> TokenData:
    dictionary: dict[bytes, int] = {}
    ids = _encode((m.group().lower() for m in _ASCII_TOKEN.finditer(data)), dictionary)
    return TokenData(ids=ids, exact_distinct=len(dictionary))


def _is_word_char(char: str) -> bool:
    """Letters, digits, combining marks (Mn, Mc, Me) and the apostrophe."""
    return char.isalnum() or char == "'" or unicodedata.category(char).startswith("M")


def _unicode_words(text: str) -> Iterator[str]:
    current: list[str] = []
    for char in text:
        if _is_word_char(char):
            current.append(char)
        elif current:
            yield "".join(current).lower()
            current.clear()
    if current:
        yield "".join(current).lower()


def tokenize_text(text: str) -> TokenData:
    """Tokenize in-memory text."""
    if text.isascii():
        return _tokenize_ascii(text.encode("ascii"))
    dictionary: dict[str, int] = {}
    ids = _encode(_unicode_words(text), dictionary)
    return TokenData(ids=ids, exact_distinct=len(dictionary))


def load_token_data(path: str | Path) -> TokenData:
    """Read a UTF-8 text file and tokenize it.

    Pure-ASCII files take a byte-level fast path; anything else is decoded
    as UTF-8 first.

    Raises:
        InputError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise InputError(f"could not read {path}") from exc

    if not data:
        return TokenData(ids=(), exact_distinct=0)

    if data.isascii():
        token_data = _tokenize_ascii(data)
    else:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InputError("could not decode file as UTF-8 text") from exc
        token_data = tokenize_text(text)

    logger.info(
        "Loaded %s: %d tokens, %d distinct",
        path, len(token_data.ids), token_data.exact_distinct,
    )
    return token_data
