"""
Source attribution and result aggregation tests
"""
import json
import pytest
from unittest.mock import Mock
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoutlint.aggregator import deduplicate, deduplicate_results, group_key
from layoutlint.attribution import SourceAttributor
from layoutlint.models import AuditResult, OverflowIssue, SourceLocation, TranslationEntry
from layoutlint.pseudo_locale import pseudo_localize


def make_issue(**overrides):
    values = dict(
        selector='button.cta',
        tag_name='button',
        text_content='Get Started',
        offset_width=100,
        scroll_width=130,
        offset_height=20,
        scroll_height=20,
        overflow_direction='horizontal',
        severity='warning',
        locale='en',
    )
    values.update(overrides)
    return OverflowIssue(**values)


@pytest.fixture
def project(tmp_path):
    (tmp_path / 'src').mkdir()
    (tmp_path / 'src' / 'Cta.tsx').write_text(
        "export const Cta = () => <button>{t('Get Started')}</button>;\n", encoding='utf-8'
    )
    locales = tmp_path / 'locales'
    locales.mkdir()
    (locales / 'en.json').write_text(json.dumps({'cta': 'Get Started'}), encoding='utf-8')
    (locales / 'de.json').write_text(json.dumps({'cta': 'Jetzt loslegen'}), encoding='utf-8')
    return tmp_path


class TestSourceAttributor:
    """Static attribution for issues without a runtime origin"""

    def test_runtime_origin_wins(self):
        finder = Mock()
        issue = make_issue(source_file='src/Hero.tsx', source_line=3)

        assert SourceAttributor(finder).attribute(issue) is issue
        finder.find_source.assert_not_called()

    def test_english_text(self, project):
        attributor = SourceAttributor.for_project(project)

        issue = attributor.attribute(make_issue())

        assert issue.source_file == 'src/Cta.tsx'
        assert issue.source_line == 1
        assert issue.source_priority == 'i18n'
        assert issue.english_text is None

    def test_pseudo_text_restored(self, project):
        attributor = SourceAttributor.for_project(project)
        issue = make_issue(text_content=pseudo_localize('Get Started'), locale='pseudo')

        attributed = attributor.attribute(issue, 'pseudo')

        assert attributed.source_file == 'src/Cta.tsx'

    def test_translated_text(self, project):
        attributor = SourceAttributor.for_project(project)
        issue = make_issue(text_content='Jetzt loslegen', locale='de')

        attributed = attributor.attribute(issue)

        assert attributed.english_text == 'Get Started'
        assert attributed.translation_key == 'cta'
        assert attributed.source_file == 'src/Cta.tsx'
        assert issue.source_file is None

    def test_truncation_marker_stripped(self):
        finder = Mock()
        finder.find_source.return_value = SourceLocation('a.tsx', 7, priority='jsx')
        issue = make_issue(text_content='A very long heading that...')

        attributed = SourceAttributor(finder).attribute(issue)

        finder.find_source.assert_called_once_with('A very long heading that')
        assert attributed.source_line == 7

    def test_retries_raw_text(self):
        finder = Mock()
        finder.find_source.side_effect = [None, SourceLocation('b.tsx', 2)]
        mapper = Mock()
        mapper.find_english_original.return_value = TranslationEntry('Home', 'Startseite', 'nav.home')

        attributed = SourceAttributor(finder, mapper).attribute(make_issue(text_content='Startseite', locale='de'))

        assert [c[0][0] for c in finder.find_source.call_args_list] == ['Home', 'Startseite']
        assert attributed.source_file == 'b.tsx'
        assert attributed.translation_key == 'nav.home'

    def test_nothing_found(self, tmp_path):
        attributor = SourceAttributor.for_project(tmp_path)
        issue = make_issue()

        assert attributor.attribute(issue) is issue


class TestAggregator:
    """Deduplication per source line"""

    def test_collapse_to_most_severe(self):
        warning = make_issue(source_file='src/Cta.tsx', source_line=1, severity='warning')
        error = make_issue(selector='a.cta', source_file='src/Cta.tsx', source_line=1, severity='error')
        result = AuditResult(url='http://localhost', locale='en', timestamp='t', issues=[warning, error])

        deduped = deduplicate(result)

        assert deduped.issue_count == 1
        assert deduped.issues[0].severity == 'error'
        assert deduped.issues[0].selector == 'a.cta'
        assert result.issue_count == 2

    def test_tie_keeps_first(self):
        first = make_issue(selector='first')
        second = make_issue(selector='second')
        result = AuditResult(url='u', locale='en', timestamp='t', issues=[first, second])

        assert deduplicate(result).issues == [first]

    def test_groups_keep_order(self):
        a = make_issue(text_content='Alpha')
        b = make_issue(text_content='Beta')
        a_error = make_issue(text_content='Alpha', severity='error')
        result = AuditResult(url='u', locale='en', timestamp='t', issues=[a, b, a_error])

        assert [i.text_content for i in deduplicate(result).issues] == ['Alpha', 'Beta']
        assert deduplicate(result).issues[0].severity == 'error'

    def test_group_key(self):
        assert group_key(make_issue(source_file='x.tsx', source_line=4)) == 'x.tsx:4'
        assert group_key(make_issue(source_file='x.tsx')) == 'Get Started'

    def test_results_list(self):
        results = [AuditResult(url='u', locale=loc, timestamp='t') for loc in ('en', 'de')]

        assert [r.locale for r in deduplicate_results(results)] == ['en', 'de']
