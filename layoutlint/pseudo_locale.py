# pseudo_locale.py
import math
import re
import logging
from typing import Dict, Iterable, List

from playwright.async_api import Page

from .constants import CHAR_MAP, PADDING_CHARS, PSEUDO_EXPANSION_FACTOR, PSEUDO_SKIP_TAGS, PSEUDO_ATTRIBUTES

logger = logging.getLogger(__name__)

_NUMERIC_OR_PUNCTUATION = re.compile(r'[0-9\s.,!?]+')

INDICATOR_ID = 'layoutlint-pseudo-indicator'

# Both scripts must visit nodes and attributes the same way: the first one
# gathers every string the second one may rewrite.
COLLECT_SCRIPT = """
({ skipTags, attributes }) => {
    const found = new Set();
    const visit = (node) => {
        if (node.nodeType === Node.TEXT_NODE) {
            const text = node.textContent;
            if (text && text.trim().length > 0) found.add(text);
            return;
        }
        if (node.nodeType !== Node.ELEMENT_NODE) return;
        const tag = node.tagName.toLowerCase();
        for (const name of attributes) {
            const value = node.getAttribute(name);
            if (value) found.add(value);
        }
        if (skipTags.includes(tag)) return;
        for (const child of Array.from(node.childNodes)) visit(child);
    };
    if (document.body) visit(document.body);
    return Array.from(found);
}
"""

APPLY_SCRIPT = """
({ mapping, skipTags, attributes, indicatorId }) => {
    const visit = (node) => {
        if (node.nodeType === Node.TEXT_NODE) {
            const text = node.textContent;
            if (text && Object.prototype.hasOwnProperty.call(mapping, text)) {
                node.textContent = mapping[text];
            }
            return;
        }
        if (node.nodeType !== Node.ELEMENT_NODE) return;
        const tag = node.tagName.toLowerCase();
        for (const name of attributes) {
            const value = node.getAttribute(name);
            if (value && Object.prototype.hasOwnProperty.call(mapping, value)) {
                node.setAttribute(name, mapping[value]);
            }
        }
        if (skipTags.includes(tag)) return;
        for (const child of Array.from(node.childNodes)) visit(child);
    };
    visit(document.body);

    const indicator = document.createElement('div');
    indicator.id = indicatorId;
    indicator.style.cssText = 'position: fixed; top: 4px; right: 4px; background: #8B5CF6; color: white; '
        + 'padding: 4px 8px; border-radius: 4px; font-size: 10px; font-family: monospace; '
        + 'z-index: 99999; opacity: 0.9;';
    indicator.textContent = 'PSEUDO';
    document.body.appendChild(indicator);
}
"""


def is_translatable(text: str) -> bool:
    if not text or not text.strip():
        return False
    if '://' in text or '{' in text or '<' in text:
        return False
    if _NUMERIC_OR_PUNCTUATION.fullmatch(text):
        return False
    return True


def padding_for(length: int, factor: float) -> str:
    count = math.ceil(length * factor)
    return ''.join(PADDING_CHARS[i % len(PADDING_CHARS)] for i in range(count))


def pseudo_localize(text: str, factor: float = PSEUDO_EXPANSION_FACTOR) -> str:
    """Accent every letter and pad the text to simulate a longer translation.

    ``"Hello"`` at 0.35 becomes ``"[Ĥèĺĺöẍỳ]"``: five substituted characters,
    ``ceil(5 * 0.35) == 2`` padding glyphs and the bracket delimiters.
    URLs, markup/template fragments and numbers are returned untouched.
    """
    if not is_translatable(text):
        return text

    result = ''.join(CHAR_MAP.get(char, char) for char in text)
    padding = padding_for(len(text), factor)
    if padding:
        result = f"[{result}{padding}]"
    return result


def build_mapping(texts: Iterable[str], factor: float) -> Dict[str, str]:
    mapping = {}
    for text in texts:
        localized = pseudo_localize(text, factor)
        if localized != text:
            mapping[text] = localized
    return mapping


async def apply_pseudo_locale(page: Page, factor: float = PSEUDO_EXPANSION_FACTOR) -> int:
    texts: List[str] = await page.evaluate(COLLECT_SCRIPT, {
        'skipTags': PSEUDO_SKIP_TAGS,
        'attributes': PSEUDO_ATTRIBUTES,
    })
    mapping = build_mapping(texts, factor)
    logger.debug(f"Pseudo-localizing {len(mapping)} of {len(texts)} strings (factor {factor})")
    await page.evaluate(APPLY_SCRIPT, {
        'mapping': mapping,
        'skipTags': PSEUDO_SKIP_TAGS,
        'attributes': PSEUDO_ATTRIBUTES,
        'indicatorId': INDICATOR_ID,
    })
    return len(mapping)


_REVERSE_CHAR_MAP = {accented: plain for plain, accented in CHAR_MAP.items()}
_PSEUDO_MARKERS = str.maketrans('', '', '[]' + ''.join(PADDING_CHARS))


def restore_pseudo(text: str) -> str:
    """Best-effort inverse of ``pseudo_localize`` for attribution lookups.

    Drops every bracket and padding glyph, so text gathered from several
    pseudo-localized nodes (or cut off mid-padding) still comes back readable.
    Genuine brackets in the original text are lost.
    """
    stripped = text.translate(_PSEUDO_MARKERS)
    return ''.join(_REVERSE_CHAR_MAP.get(char, char) for char in stripped)
