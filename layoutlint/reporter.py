# reporter.py
import html
import json
import time
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .constants import REPORT_PREFIX
from .models import AuditResult, OverflowIssue

logger = logging.getLogger(__name__)

FORMATS = ['table', 'json', 'yaml', 'markdown', 'html']
EXTENSIONS = {'table': 'txt', 'json': 'json', 'yaml': 'yaml', 'markdown': 'md', 'html': 'html'}

DIRECTION_ARROWS = {'horizontal': '<->', 'vertical': '^v', 'both': '<->^v'}


def summarize(results: List[AuditResult]) -> Dict[str, Any]:
    issues = [issue for result in results for issue in result.issues]
    errors = sum(1 for issue in issues if issue.severity == 'error')
    warnings = sum(1 for issue in issues if issue.severity == 'warning')
    failed = [result.locale for result in results if result.failed]

    if errors or failed:
        status = 'FAIL'
    elif warnings:
        status = 'WARN'
    elif issues:
        status = 'INFO'
    else:
        status = 'PASS'

    return {
        'url': results[0].url if results else None,
        'locales': [result.locale for result in results],
        'total_issues': len(issues),
        'errors': errors,
        'warnings': warnings,
        'failed_locales': failed,
        'status': status,
    }


def format_overflow(issue: OverflowIssue) -> str:
    arrow = DIRECTION_ARROWS[issue.overflow_direction]
    if issue.overflow_direction == 'horizontal':
        return f"{arrow} +{issue.width_overflow}px"
    if issue.overflow_direction == 'vertical':
        return f"{arrow} +{issue.height_overflow}px"
    return f"{arrow} +{issue.width_overflow}x{issue.height_overflow}px"


def format_source(issue: OverflowIssue) -> str:
    if issue.source_file:
        if issue.source_line is not None:
            return f"{issue.source_file}:{issue.source_line}"
        return issue.source_file
    return issue.component_name or '-'


class Reporter:
    def __init__(self, format: str = 'table'):
        if format not in FORMATS:
            raise ValueError(f"Unknown report format: {format}")
        self.format = format

    def render(self, results: List[AuditResult]) -> str:
        return getattr(self, f"_format_{self.format}")(results)

    def save(self, results: List[AuditResult], output_dir) -> Path:
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{REPORT_PREFIX}-{int(time.time() * 1000)}.{EXTENSIONS[self.format]}"
        path.write_text(self.render(results), encoding='utf-8')
        logger.info(f"Report saved to: {path}")
        return path

    def _payload(self, results: List[AuditResult]) -> Dict[str, Any]:
        return {
            'summary': summarize(results),
            'results': [result.to_dict() for result in results],
        }

    def _format_json(self, results: List[AuditResult]) -> str:
        return json.dumps(self._payload(results), indent=2, ensure_ascii=False)

    def _format_yaml(self, results: List[AuditResult]) -> str:
        return yaml.safe_dump(self._payload(results), allow_unicode=True, default_flow_style=False, sort_keys=False)

    def _format_table(self, results: List[AuditResult]) -> str:
        summary = summarize(results)
        lines = [
            '=== LAYOUTLINT AUDIT RESULTS ===',
            f"URL: {summary['url'] or 'N/A'}",
            f"Locales tested: {', '.join(summary['locales'])}",
            f"Total issues: {summary['total_issues']}  Errors: {summary['errors']}  Warnings: {summary['warnings']}",
        ]
        for result in results:
            lines.append('')
            if result.failed:
                lines.append(f"x {result.locale.upper()}: FAILED ({result.error})")
                continue
            if not result.issues:
                lines.append(f"v {result.locale.upper()}: No issues found")
                continue
            lines.append(f"--- {result.locale.upper()} ({result.issue_count} issues) ---")
            for issue in result.issues:
                lines.append(
                    f"[{issue.severity.upper()}] {issue.selector}"
                    f"  ({issue.scroll_width}x{issue.scroll_height} > {issue.offset_width}x{issue.offset_height})"
                    f"  {format_overflow(issue)}  \"{issue.text_content}\"  @ {format_source(issue)}"
                )
                if issue.english_text:
                    lines.append(f"    English: \"{issue.english_text}\" (key: {issue.translation_key})")
        lines.append('')
        lines.append(f"{summary['status']}")
        return '\n'.join(lines)

    def _format_markdown(self, results: List[AuditResult]) -> str:
        summary = summarize(results)
        lines = [
            '# Layoutlint Audit Report',
            '',
            f"- **URL:** {summary['url'] or 'N/A'}",
            f"- **Status:** {summary['status']}",
            f"- **Total issues:** {summary['total_issues']} ({summary['errors']} errors, {summary['warnings']} warnings)",
        ]
        for result in results:
            lines += ['', f"## {result.locale.upper()}", '']
            if result.failed:
                lines.append(f"Locale failed to load: {result.error}")
                continue
            if not result.issues:
                lines.append('No issues found.')
                continue
            lines.append('| Severity | Element | Overflow | Text | Source |')
            lines.append('| --- | --- | --- | --- | --- |')
            for issue in result.issues:
                cells = [
                    issue.severity,
                    f"`{issue.selector}`",
                    format_overflow(issue),
                    issue.text_content.replace('|', '\\|'),
                    format_source(issue),
                ]
                lines.append('| ' + ' | '.join(cells) + ' |')
        return '\n'.join(lines) + '\n'

    def _format_html(self, results: List[AuditResult]) -> str:
        summary = summarize(results)
        sections = []
        for result in results:
            header = f"<h2>{html.escape(result.locale.upper())} - {result.issue_count} issues</h2>"
            if result.failed:
                body = f"<p class=\"failed\">Locale failed to load: {html.escape(result.error)}</p>"
            elif not result.issues:
                body = '<p class="pass">No issues</p>'
            else:
                rows = ''.join(
                    '<tr>'
                    f"<td><span class=\"severity {issue.severity}\">{issue.severity}</span></td>"
                    f"<td class=\"selector\">{html.escape(issue.selector)}</td>"
                    f"<td>{html.escape(format_overflow(issue))}</td>"
                    f"<td>{html.escape(issue.text_content)}</td>"
                    f"<td>{html.escape(format_source(issue))}</td>"
                    '</tr>'
                    for issue in result.issues
                )
                body = (
                    '<table><thead><tr><th>Severity</th><th>Element</th><th>Overflow</th>'
                    f"<th>Text</th><th>Source</th></tr></thead><tbody>{rows}</tbody></table>"
                )
            sections.append(f"<section>{header}{body}</section>")

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Layoutlint Audit Report</title>
  <style>
    body {{ font-family: sans-serif; background: #0f172a; color: #e2e8f0; padding: 2rem; }}
    table {{ width: 100%; border-collapse: collapse; }}
    th, td {{ padding: 0.5rem; text-align: left; border-bottom: 1px solid #334155; }}
    .severity.error {{ color: #fca5a5; }}
    .severity.warning {{ color: #fcd34d; }}
    .severity.info {{ color: #7dd3fc; }}
    .selector {{ font-family: monospace; color: #06B6D4; }}
    .failed {{ color: #f87171; }}
    .pass {{ color: #4ade80; }}
  </style>
</head>
<body>
  <h1>Layoutlint Audit Report</h1>
  <p>Status: {summary['status']} - {summary['total_issues']} issues, {summary['errors']} errors, {summary['warnings']} warnings</p>
  {''.join(sections)}
</body>
</html>
"""
