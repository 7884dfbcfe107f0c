# detector.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from playwright.async_api import Page

from .constants import (
    EXCLUDED_TAGS, OVERFLOW_TOLERANCE, ERROR_THRESHOLD, WARNING_THRESHOLD,
    MAX_TEXT_LENGTH, MAX_SELECTOR_CLASSES,
)
from .models import BoundingRect, OverflowIssue
from .origins import ComponentOriginProvider, default_providers, parse_origin, providers_script
from .utils import truncate_text

logger = logging.getLogger(__name__)

# Measures only. Excluded tags are rejected inside the walker so their whole
# subtree is pruned, not filtered afterwards.
DETECT_SCRIPT = """
({ excludedTags, tolerance, textLimit }) => {
    const providers = __PROVIDERS__;
    const results = [];

    const walker = document.createTreeWalker(document.body, NodeFilter.SHOW_ELEMENT, {
        acceptNode: (node) => excludedTags.includes(node.tagName.toLowerCase())
            ? NodeFilter.FILTER_REJECT
            : NodeFilter.FILTER_ACCEPT,
    });

    const describePath = (el) => {
        const path = [];
        let current = el;
        while (current && current !== document.body) {
            const parent = current.parentElement;
            let index = 1;
            let sameTag = 1;
            if (parent) {
                const siblings = Array.from(parent.children).filter((c) => c.tagName === current.tagName);
                index = siblings.indexOf(current) + 1;
                sameTag = siblings.length;
            }
            const classes = typeof current.className === 'string'
                ? current.className.trim().split(/\\s+/).filter(Boolean)
                : [];
            path.push({ tag: current.tagName.toLowerCase(), classes, index, sameTag });
            current = parent;
        }
        return path;
    };

    const originOf = (el) => {
        for (const provider of providers) {
            try {
                const origin = provider(el);
                if (origin) return origin;
            } catch (e) {
                // a provider that trips on one element must not hide the others
            }
        }
        return null;
    };

    let node;
    while ((node = walker.nextNode())) {
        const rect = node.getBoundingClientRect();
        if (rect.width === 0 || rect.height === 0) continue;

        const scrollWidth = node.scrollWidth;
        const offsetWidth = node.offsetWidth;
        const scrollHeight = node.scrollHeight;
        const offsetHeight = node.offsetHeight;
        if (!(scrollWidth > offsetWidth + tolerance || scrollHeight > offsetHeight + tolerance)) continue;

        results.push({
            tagName: node.tagName.toLowerCase(),
            id: node.id || null,
            path: node.id ? [] : describePath(node),
            textContent: (node.textContent || '').trim().slice(0, textLimit + 1),
            scrollWidth,
            offsetWidth,
            scrollHeight,
            offsetHeight,
            rect: { x: rect.x, y: rect.y, width: rect.width, height: rect.height },
            origin: originOf(node),
        });
    }
    return results;
}
"""


def has_horizontal_overflow(scroll_width: float, offset_width: float) -> bool:
    return scroll_width > offset_width + OVERFLOW_TOLERANCE


def has_vertical_overflow(scroll_height: float, offset_height: float) -> bool:
    return scroll_height > offset_height + OVERFLOW_TOLERANCE


def overflow_direction(horizontal: bool, vertical: bool) -> Optional[str]:
    if horizontal and vertical:
        return 'both'
    if horizontal:
        return 'horizontal'
    if vertical:
        return 'vertical'
    return None


def classify_severity(overflow_amount: float) -> str:
    if overflow_amount > ERROR_THRESHOLD:
        return 'error'
    if overflow_amount > WARNING_THRESHOLD:
        return 'warning'
    return 'info'


def suggestion_for(direction: str, tag_name: str) -> str:
    if direction == 'horizontal':
        if tag_name == 'table':
            return 'Add parent with overflow-x-auto'
        return 'Try: truncate, break-words, or w-full'
    return 'Try: h-auto, line-clamp, or overflow-y-auto'


def build_selector(element_id: Optional[str], path: Iterable[Dict[str, Any]]) -> str:
    """Selector for an element given its path segments, element first.

    An id always wins. Otherwise each segment is ``tag.class1.class2`` with an
    ``:nth-child(i)`` suffix only when the parent holds more than one element
    of the same tag, ``i`` being the position among those siblings.
    """
    if element_id:
        return f"#{element_id}"

    parts = []
    for segment in path:
        part = segment['tag']
        classes = [c for c in segment.get('classes') or [] if c][:MAX_SELECTOR_CLASSES]
        if classes:
            part += '.' + '.'.join(classes)
        if segment.get('sameTag', 1) > 1:
            part += f":nth-child({segment['index']})"
        parts.append(part)
    return ' > '.join(reversed(parts))


def build_issue(record: Dict[str, Any], locale: str) -> Optional[OverflowIssue]:
    scroll_width = record['scrollWidth']
    offset_width = record['offsetWidth']
    scroll_height = record['scrollHeight']
    offset_height = record['offsetHeight']

    direction = overflow_direction(
        has_horizontal_overflow(scroll_width, offset_width),
        has_vertical_overflow(scroll_height, offset_height),
    )
    if direction is None:
        return None

    amount = max(scroll_width - offset_width, scroll_height - offset_height)
    tag_name = record['tagName']
    rect = record.get('rect')
    origin = parse_origin(record.get('origin'))

    return OverflowIssue(
        selector=build_selector(record.get('id'), record.get('path') or []),
        tag_name=tag_name,
        text_content=truncate_text(record.get('textContent') or '', MAX_TEXT_LENGTH),
        offset_width=offset_width,
        scroll_width=scroll_width,
        offset_height=offset_height,
        scroll_height=scroll_height,
        overflow_direction=direction,
        severity=classify_severity(amount),
        locale=locale,
        suggestion=suggestion_for(direction, tag_name),
        bounding_rect=BoundingRect(**rect) if rect else None,
        source_file=origin.file if origin else None,
        source_line=origin.line if origin else None,
        component_name=origin.component_name if origin else None,
    )


class OverflowDetector:
    def __init__(self, excluded_tags: Optional[Iterable[str]] = None,
                 providers: Optional[List[ComponentOriginProvider]] = None):
        self.excluded_tags = [t.lower() for t in (excluded_tags if excluded_tags is not None else EXCLUDED_TAGS)]
        self.providers = providers if providers is not None else default_providers()
        self.script = DETECT_SCRIPT.replace('__PROVIDERS__', providers_script(self.providers))

    async def detect(self, page: Page, locale: str) -> List[OverflowIssue]:
        records = await page.evaluate(self.script, {
            'excludedTags': self.excluded_tags,
            'tolerance': OVERFLOW_TOLERANCE,
            'textLimit': MAX_TEXT_LENGTH,
        })
        issues = []
        for record in records:
            issue = build_issue(record, locale)
            if issue is not None:
                issues.append(issue)
        logger.debug(f"Detector flagged {len(issues)} of {len(records)} measured elements ({locale})")
        return issues
