"""Key codec: paths to environment keys and back.

Purpose
-------
Derive the canonical key for a structural path and, in the other direction,
reverse-engineer collection structure from a flat key listing. Both passes
share one codec so discovery and assignment always agree on naming.

Contents
--------
* :class:`KeyCodec` – ``derive_key``, ``partition_next_segment`` and
  ``key_to_local_token``.
* :data:`DEFAULT_SEPARATOR` – ``"_"``.
"""

from __future__ import annotations

from typing import Final, Iterable

from ..adapters.naming.words import split_words
from ..domain.path import FieldPath, KeyToken
from .ports import Tokenizer

DEFAULT_SEPARATOR: Final[str] = "_"


class KeyCodec:
    """Translate between structural paths and flat keys.

    Parameters
    ----------
    prefix:
        Leading segment prepended to every key; empty means no prefix.
    separator:
        Joiner between words; an empty value falls back to ``"_"``.
    tokenizer:
        Splits field names into words.

    Examples
    --------
    >>> codec = KeyCodec("APP", "_")
    >>> codec.derive_key(("service", "max_retries"))
    'APP_SERVICE_MAX_RETRIES'
    """

    def __init__(self, prefix: str = "", separator: str = DEFAULT_SEPARATOR, tokenizer: Tokenizer = split_words) -> None:
        self.prefix = prefix
        self.separator = separator or DEFAULT_SEPARATOR
        self._tokenizer = tokenizer

    def derive_key(self, path: FieldPath) -> str:
        """Return the upper-cased key for *path*.

        Segments lifted from collection keys (:class:`KeyToken`) are kept as a
        single word; every other segment goes through the tokenizer.

        Examples
        --------
        >>> KeyCodec("YOUPI").derive_key(("Foo", "IamGroot", "IAmBatman"))
        'YOUPI_FOO_IAM_GROOT_I_AM_BATMAN'
        >>> KeyCodec().derive_key(("cache", KeyToken("my_key")))
        'CACHE_MY_KEY'
        """

        segments: list[str] = [self.prefix, *path] if self.prefix else list(path)
        words: list[str] = []
        for segment in segments:
            if isinstance(segment, KeyToken):
                words.append(str(segment))
            else:
                words.extend(self._tokenizer(segment))
        return self.separator.join(words).upper()

    def partition_next_segment(self, prefix: str, candidate_keys: Iterable[str]) -> list[str]:
        """Return the distinct keys one level below *prefix*, in first-seen order.

        Examples
        --------
        >>> codec = KeyCodec()
        >>> codec.partition_next_segment(
        ...     "CONFIG_APP",
        ...     ["CONFIG_APP_BATMAN_FOO", "CONFIG_APP_ROBIN_FOO", "CONFIG_APP_BATMAN_BAR", "OTHER"],
        ... )
        ['CONFIG_APP_BATMAN', 'CONFIG_APP_ROBIN']
        """

        head = prefix + self.separator
        seen: dict[str, None] = {}
        for key in candidate_keys:
            if not key.startswith(head):
                continue
            token = key[len(head) :].split(self.separator, 1)[0]
            if token:
                seen.setdefault(head + token, None)
        return list(seen)

    def key_to_local_token(self, full_key: str, prefix: str) -> str:
        """Return the lower-cased token directly after *prefix* in *full_key*.

        Examples
        --------
        >>> codec = KeyCodec()
        >>> codec.key_to_local_token("CONFIG_APP_BATMAN_FOO", "CONFIG_APP")
        'batman'
        >>> codec.key_to_local_token("BATMAN", "")
        'batman'
        """

        head = prefix + self.separator if prefix else ""
        remainder = full_key[len(head) :] if head and full_key.startswith(head) else full_key
        return remainder.split(self.separator, 1)[0].lower()
