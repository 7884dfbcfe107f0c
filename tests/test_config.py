"""
Configuration and CLI tests
"""
import pytest
from unittest.mock import AsyncMock, patch
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoutlint.config import DEFAULTS, build_config, load_config_file
from layoutlint.constants import EXIT_ISSUES_FOUND, EXIT_INVALID_ARGUMENTS, EXIT_SUCCESS, EXIT_GENERAL_ERROR
from layoutlint.errors import ConfigError, NavigationError
from layoutlint.main import build_parser, main
from layoutlint.models import AuditResult, OverflowIssue


class TestConfigFile:
    """YAML config loading"""

    def test_missing_default_file(self, tmp_path):
        assert load_config_file(None, str(tmp_path)) == {}

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config_file(str(tmp_path / 'nope.yaml'))

    def test_project_file(self, tmp_path):
        (tmp_path / 'layoutlint.yaml').write_text(
            "locales: [en, ar]\nwidth: 375\nbogus: 1\n", encoding='utf-8'
        )

        config = load_config_file(None, str(tmp_path))

        assert config == {'locales': ['en', 'ar'], 'width': 375}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("- en\n- de\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            load_config_file(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("locales: [en\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            load_config_file(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('', encoding='utf-8')

        assert load_config_file(str(path)) == {}


class TestBuildConfig:
    """Defaults, file, flags"""

    def test_precedence(self):
        config = build_config({'width': 800, 'height': None}, {'width': 375, 'height': 600, 'format': 'json'})

        assert config['width'] == 800
        assert config['height'] == 600
        assert config['format'] == 'json'
        assert config['timeout'] == DEFAULTS['timeout']

    def test_single_locale_string(self):
        assert build_config({}, {'locales': 'ar'})['locales'] == ['ar']

    def test_api_key_from_environment(self):
        with patch.dict(os.environ, {'LINGODOTDEV_API_KEY': 'secret'}):
            assert build_config({})['api_key'] == 'secret'

    def test_defaults_not_shared(self):
        config = build_config({})
        config['locales'] = ['ja']

        assert DEFAULTS['locales'] == ['en', 'pseudo']


class TestParser:
    """Argument parsing"""

    def test_lint(self):
        args = build_parser().parse_args(['lint', 'http://localhost:3000', '-l', 'en', 'ar', '-f', 'json', '--no-use-provider'])

        assert args.command == 'lint'
        assert args.locales == ['en', 'ar']
        assert args.format == 'json'
        assert args.use_provider is False
        assert args.fail_on_error is None

    def test_watch(self):
        args = build_parser().parse_args(['watch', 'http://localhost:3000', '--iterations', '2'])

        assert args.locale == 'pseudo'
        assert args.iterations == 2

    def test_invalid_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['lint', 'http://localhost', '-f', 'csv'])


def error_result():
    issue = OverflowIssue(
        selector='#cta', tag_name='button', text_content='Get Started',
        offset_width=100, scroll_width=200, offset_height=20, scroll_height=20,
        overflow_direction='horizontal', severity='error', locale='pseudo',
    )
    return AuditResult(url='http://localhost?lang=pseudo', locale='pseudo', timestamp='t', issues=[issue])


class TestMain:
    """Exit codes"""

    @pytest.mark.asyncio
    async def test_fail_on_error(self, tmp_path):
        auditor = AsyncMock()
        auditor.__aenter__.return_value = auditor
        auditor.audit_locales.return_value = [error_result()]

        with patch('layoutlint.main.Auditor', return_value=auditor), patch('builtins.print'):
            code = await main(['lint', 'http://localhost', '-p', str(tmp_path), '--no-use-provider',
                               '--no-attribution', '--fail-on-error'])

        assert code == EXIT_ISSUES_FOUND

    @pytest.mark.asyncio
    async def test_success_without_flag(self, tmp_path):
        auditor = AsyncMock()
        auditor.__aenter__.return_value = auditor
        auditor.audit_locales.return_value = [error_result()]

        with patch('layoutlint.main.Auditor', return_value=auditor), patch('builtins.print') as mock_print:
            code = await main(['lint', 'http://localhost', '-p', str(tmp_path), '--no-use-provider',
                               '--no-attribution', '-f', 'json', '-o', str(tmp_path / 'out')])

        assert code == EXIT_SUCCESS
        saved = list((tmp_path / 'out').glob('layoutlint-report-*.json'))
        assert len(saved) == 1
        printed = [c[0][0] for c in mock_print.call_args_list]
        assert printed[0].startswith('=== LAYOUTLINT AUDIT RESULTS ===')
        assert printed[1] == f"Report saved to: {saved[0]}"

    @pytest.mark.asyncio
    async def test_bad_config(self, tmp_path):
        code = await main(['lint', 'http://localhost', '--config', str(tmp_path / 'missing.yaml')])

        assert code == EXIT_INVALID_ARGUMENTS

    @pytest.mark.asyncio
    async def test_general_error(self, tmp_path):
        auditor = AsyncMock()
        auditor.__aenter__.return_value = auditor
        auditor.prepare_page.side_effect = NavigationError('http://localhost', 'pseudo', 'refused')

        with patch('layoutlint.main.Auditor', return_value=auditor):
            code = await main(['watch', 'http://localhost', '-p', str(tmp_path), '--iterations', '1'])

        assert code == EXIT_GENERAL_ERROR
