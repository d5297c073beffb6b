"""Default identifier tokenizer.

Splits Python identifiers into the words that make up an environment key:
underscores and other punctuation separate words, and so do case boundaries,
so both ``max_retries`` and ``MaxRetries`` yield ``["max", "retries"]``-style
word lists. Digits stay attached to the word they follow.
"""

from __future__ import annotations

import re
from typing import Final

_WORD: Final[re.Pattern[str]] = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+")


def split_words(identifier: str) -> list[str]:
    """Return the words of *identifier* in order.

    Examples
    --------
    >>> split_words("max_retries")
    ['max', 'retries']
    >>> split_words("IAmBatman")
    ['I', 'Am', 'Batman']
    >>> split_words("IamGroot")
    ['Iam', 'Groot']
    >>> split_words("PDFLoader")
    ['PDF', 'Loader']
    >>> split_words("http2_port")
    ['http2', 'port']
    >>> split_words("0")
    ['0']
    """

    return _WORD.findall(identifier)
