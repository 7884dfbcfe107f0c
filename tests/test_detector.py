"""
Overflow detector tests
"""
import pytest
from unittest.mock import AsyncMock
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoutlint.detector import (
    OverflowDetector, build_issue, build_selector, classify_severity,
    has_horizontal_overflow, has_vertical_overflow, overflow_direction, suggestion_for,
)
from layoutlint.origins import IdentifierFallbackProvider
from layoutlint.utils import truncate_text


def make_record(**overrides):
    record = {
        'tagName': 'button',
        'id': None,
        'path': [{'tag': 'button', 'classes': ['btn'], 'index': 1, 'sameTag': 1}],
        'textContent': 'Get Started',
        'scrollWidth': 160,
        'offsetWidth': 100,
        'scrollHeight': 20,
        'offsetHeight': 20,
        'rect': {'x': 10, 'y': 20, 'width': 100, 'height': 20},
        'origin': None,
    }
    record.update(overrides)
    return record


class TestOverflowPredicate:
    """Overflow is reported only past the one pixel tolerance"""

    def test_two_pixels_is_overflow(self):
        assert has_horizontal_overflow(102, 100)
        assert has_vertical_overflow(22, 20)

    def test_one_pixel_is_rounding(self):
        assert not has_horizontal_overflow(101, 100)
        assert not has_vertical_overflow(21, 20)

    def test_direction(self):
        assert overflow_direction(True, False) == 'horizontal'
        assert overflow_direction(False, True) == 'vertical'
        assert overflow_direction(True, True) == 'both'
        assert overflow_direction(False, False) is None


class TestSeverity:
    """Severity thresholds"""

    @pytest.mark.parametrize('amount,expected', [
        (10, 'info'),
        (20, 'info'),
        (21, 'warning'),
        (25, 'warning'),
        (50, 'warning'),
        (51, 'error'),
        (60, 'error'),
    ])
    def test_classify(self, amount, expected):
        assert classify_severity(amount) == expected

    def test_suggestions(self):
        assert suggestion_for('horizontal', 'table') == 'Add parent with overflow-x-auto'
        assert 'truncate' in suggestion_for('horizontal', 'span')
        assert 'line-clamp' in suggestion_for('vertical', 'p')
        assert 'line-clamp' in suggestion_for('both', 'div')


class TestSelector:
    """CSS selector construction"""

    def test_id_wins(self):
        path = [{'tag': 'div', 'classes': ['a'], 'index': 1, 'sameTag': 1}]
        assert build_selector('foo', path) == '#foo'

    def test_nth_child_for_repeated_tag(self):
        path = [
            {'tag': 'li', 'classes': [], 'index': 2, 'sameTag': 3},
            {'tag': 'ul', 'classes': ['menu'], 'index': 1, 'sameTag': 1},
        ]
        assert build_selector(None, path) == 'ul.menu > li:nth-child(2)'

    def test_no_suffix_for_only_child(self):
        path = [{'tag': 'span', 'classes': [], 'index': 1, 'sameTag': 1}]
        assert build_selector(None, path) == 'span'

    def test_at_most_two_classes(self):
        path = [{'tag': 'div', 'classes': ['a', 'b', 'c'], 'index': 1, 'sameTag': 1}]
        assert build_selector(None, path) == 'div.a.b'


class TestBuildIssue:
    """Measurement record to OverflowIssue"""

    def test_horizontal_error(self):
        issue = build_issue(make_record(), 'pseudo')

        assert issue.selector == 'button.btn'
        assert issue.overflow_direction == 'horizontal'
        assert issue.severity == 'error'
        assert issue.width_overflow == 60
        assert issue.height_overflow == 0
        assert issue.locale == 'pseudo'
        assert issue.bounding_rect.width == 100
        assert issue.source_file is None

    def test_severity_uses_larger_axis(self):
        issue = build_issue(make_record(scrollWidth=110, scrollHeight=50), 'en')

        assert issue.overflow_direction == 'both'
        assert issue.severity == 'warning'

    def test_within_tolerance_is_dropped(self):
        assert build_issue(make_record(scrollWidth=101), 'en') is None

    def test_text_truncated(self):
        issue = build_issue(make_record(textContent='x' * 51), 'en')

        assert issue.text_content == 'x' * 50 + '...'

    def test_cut_on_whitespace_keeps_ellipsis(self):
        # the page sends the trimmed text sliced to one past the limit
        rendered = 'a' * 50 + ' and then a long tail of words'
        issue = build_issue(make_record(textContent=rendered[:51]), 'en')

        assert issue.text_content == 'a' * 50 + '...'

    def test_text_at_limit_not_marked(self):
        issue = build_issue(make_record(textContent='b' * 50), 'en')

        assert issue.text_content == 'b' * 50

    def test_runtime_origin(self):
        origin = {'file': 'src/Hero.tsx', 'line': 42, 'componentName': 'Hero'}
        issue = build_issue(make_record(origin=origin), 'en')

        assert issue.source_file == 'src/Hero.tsx'
        assert issue.source_line == 42
        assert issue.component_name == 'Hero'

    def test_name_only_origin(self):
        issue = build_issue(make_record(origin={'componentName': '#cta'}), 'en')

        assert issue.source_file is None
        assert issue.component_name == '#cta'


class TestOverflowDetector:
    """Detector against a mocked page"""

    def test_providers_composed_into_script(self):
        detector = OverflowDetector(providers=[IdentifierFallbackProvider()])

        assert '__PROVIDERS__' not in detector.script
        assert "data-component" in detector.script
        assert '__reactFiber$' not in detector.script

    def test_default_providers(self):
        detector = OverflowDetector()

        assert 'data-source' in detector.script
        assert '__reactFiber$' in detector.script

    @pytest.mark.asyncio
    async def test_detect(self):
        page = AsyncMock()
        page.evaluate.return_value = [
            make_record(),
            make_record(id='fits', scrollWidth=100),
        ]

        detector = OverflowDetector(excluded_tags=['SCRIPT'])
        issues = await detector.detect(page, 'de')

        assert len(issues) == 1
        assert issues[0].locale == 'de'
        args = page.evaluate.call_args[0][1]
        assert args['excludedTags'] == ['script']
        assert args['tolerance'] == 1
        assert args['textLimit'] == 50

    @pytest.mark.asyncio
    async def test_detect_empty_page(self):
        page = AsyncMock()
        page.evaluate.return_value = []

        assert await OverflowDetector().detect(page, 'en') == []


class TestTruncateText:
    """Text truncation marker"""

    def test_short_text_trimmed(self):
        assert truncate_text('  Sign in  ', 50) == 'Sign in'

    def test_cut_marked(self):
        assert truncate_text('abcdef', 3) == 'abc...'

    def test_cut_before_space_marked(self):
        assert truncate_text('abc def', 3) == 'abc...'
