# utils.py
import re
from typing import Callable, Iterable, Optional, Tuple, TypeVar
from urllib.parse import urlparse, urlencode, parse_qsl, urlunparse

from .constants import LOCALE_QUERY_PARAM

T = TypeVar('T')

_WHITESPACE = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(' ', text.strip()).lower()


def exact_then_substring(query: str, entries: Iterable[Tuple[str, T]],
                         lookup: Optional[Callable[[str], Optional[T]]] = None) -> Optional[T]:
    """Two-phase fuzzy lookup used by both attribution indexes.

    Phase one is an exact key hit through ``lookup``. Phase two walks
    ``entries`` in order and returns the value of the first key that contains
    the query or is contained in it. Phase two is deliberately low precision:
    a short key such as ``"get"`` matches any query containing it, so callers
    must treat the answer as a hint and not as proof.
    """
    if lookup is not None:
        hit = lookup(query)
        if hit is not None:
            return hit
    for key, value in entries:
        if key in query or query in key:
            return value
    return None


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with ``...``.

    Only leading whitespace is dropped before measuring: a cut that lands on a
    space still counts as a cut.
    """
    text = text.lstrip()
    if len(text) <= limit:
        return text.rstrip()
    return text[:limit] + '...'


def build_locale_url(base_url: str, locale: str) -> str:
    parsed = urlparse(base_url)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != LOCALE_QUERY_PARAM]
    query.append((LOCALE_QUERY_PARAM, locale))
    return urlunparse(parsed._replace(query=urlencode(query)))
