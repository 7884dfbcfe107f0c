# main.py
import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Set

from playwright.async_api import Error as PlaywrightError

from .constants import (
    VERSION, EXIT_SUCCESS, EXIT_GENERAL_ERROR, EXIT_ISSUES_FOUND, EXIT_INVALID_ARGUMENTS,
)
from .aggregator import deduplicate_results
from .attribution import SourceAttributor
from .auditor import Auditor
from .config import load_config_file, build_config
from .database import ResultStore
from .errors import ConfigError, LayoutLintError
from .models import AuditResult, OverflowIssue
from .provider import LingoCliProvider
from .reporter import Reporter, FORMATS, summarize
from .session import WatchSession
from .utils import build_locale_url

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='layoutlint', description='Audit web pages for i18n layout overflow')
    parser.add_argument('--version', action='version', version=f"%(prog)s {VERSION}")
    subparsers = parser.add_subparsers(dest='command', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('url', help='URL to audit (e.g., http://localhost:3000)')
    common.add_argument('-p', '--project', help='Project directory with source files and locales/')
    common.add_argument('--config', help='YAML config file (default: <project>/layoutlint.yaml)')
    common.add_argument('-w', '--width', type=int, help='Viewport width')
    common.add_argument('--height', type=int, help='Viewport height')
    common.add_argument('-t', '--timeout', type=int, help='Page load timeout in milliseconds')
    common.add_argument('--headful', action='store_true', default=None, help='Show browser')
    common.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    lint = subparsers.add_parser('lint', parents=[common], help='Audit a URL under one or more locales')
    lint.add_argument('-l', '--locale', dest='locales', nargs='+', help='Locales to test (e.g., en pseudo ar de)')
    lint.add_argument('-f', '--format', choices=FORMATS, help='Output format')
    lint.add_argument('-o', '--output', help='Output directory for saved reports')
    lint.add_argument('--fail-on-error', action='store_true', default=None,
                      help='Exit with code 2 on error-level issues or failed locales')
    lint.add_argument('--use-provider', dest='use_provider', action='store_true', default=None,
                      help='Run the translation provider before auditing')
    lint.add_argument('--no-use-provider', dest='use_provider', action='store_false',
                      help='Skip the translation provider')
    lint.add_argument('--no-attribution', dest='attribution', action='store_false', default=None,
                      help='Skip source attribution')
    lint.add_argument('--dedupe', action='store_true', default=None, help='Collapse duplicate issues')
    lint.add_argument('--stop-on-failure', action='store_true', default=None,
                      help='Stop after the first locale that fails to load')
    lint.add_argument('--neo4j', action='store_true', default=None, help='Store results in Neo4j')

    watch = subparsers.add_parser('watch', parents=[common], help='Re-scan a live page and report new issues')
    watch.add_argument('-l', '--locale', dest='locale', default='pseudo', help='Locale to simulate')
    watch.add_argument('--interval', type=int, help='Milliseconds between scans')
    watch.add_argument('--iterations', type=int, help='Number of scans (default: until interrupted)')
    return parser


async def run_provider(config: Dict[str, Any]) -> Set[str]:
    provider = LingoCliProvider(config['project'], api_key=config.get('api_key'))
    if not provider.detect_config():
        logger.warning("No translation provider config (i18n.json) found. Use --no-use-provider to skip.")
        return set()

    logger.info(f"Provider config: source={provider.source_locale}, targets={', '.join(provider.target_locales)}")
    if 'pseudo' in config['locales']:
        provider.enable_pseudo_locale()

    result = await provider.run()
    if not result.success:
        logger.warning("Translation provider completed with errors; falling back to simulated locales")
        if result.error:
            logger.debug(result.error)
        return set()

    logger.info(f"Translation provider generated {len(result.locales_generated)} locale(s)")
    return set(provider.target_locales) | set(result.locales_generated)


async def run_lint(config: Dict[str, Any]) -> int:
    translated: Set[str] = set()
    if config['use_provider']:
        translated = await run_provider(config)

    attributor = None
    if config['attribution']:
        attributor = SourceAttributor.for_project(config['project'])

    async with Auditor(config, attributor=attributor) as auditor:
        results: List[AuditResult] = await auditor.audit_locales(config['url'], config['locales'], translated)

    if config['dedupe']:
        results = deduplicate_results(results)

    # The table always goes to stdout; other formats are written to a file as well.
    print(Reporter('table').render(results))
    if config['format'] != 'table':
        path = Reporter(config['format']).save(results, config['output'])
        print(f"Report saved to: {path}")

    if config['neo4j']:
        async with ResultStore(config['neo4j_uri'], config['neo4j_user'], config['neo4j_password']) as store:
            await store.save_results(results)

    summary = summarize(results)
    if config['fail_on_error'] and (summary['errors'] or summary['failed_locales']):
        logger.error("Exiting with error due to --fail-on-error flag")
        return EXIT_ISSUES_FOUND
    return EXIT_SUCCESS


def log_issue(issue: OverflowIssue):
    logger.warning(
        f"[{issue.severity.upper()}] {issue.overflow_direction} overflow at {issue.selector} "
        f"(+{issue.width_overflow}x{issue.height_overflow}px) \"{issue.text_content}\""
    )


async def run_watch(config: Dict[str, Any]) -> int:
    locale = config['locale']
    async with Auditor(config) as auditor:
        page, _ = await auditor.prepare_page(build_locale_url(config['url'], locale), locale)
        try:
            session = WatchSession(page, locale, auditor.detector)
            await session.watch(log_issue, interval=config['interval'], iterations=config['iterations'])
        finally:
            await page.close()
    return EXIT_SUCCESS


async def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(asctime)s %(levelname)-5s %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    overrides = {key: value for key, value in vars(args).items() if key not in ('command', 'config', 'verbose')}
    try:
        file_config = load_config_file(args.config, args.project or '.')
        config = build_config(overrides, file_config)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_INVALID_ARGUMENTS
    config['project'] = str(Path(config['project']).resolve())

    try:
        if args.command == 'watch':
            return await run_watch(config)
        return await run_lint(config)
    except (LayoutLintError, PlaywrightError) as e:
        logger.error(f"Audit failed: {e}")
        logger.debug("Traceback:", exc_info=True)
        return EXIT_GENERAL_ERROR


def run():
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
