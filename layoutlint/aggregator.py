# aggregator.py
from dataclasses import replace
from typing import Dict, List

from .constants import SEVERITY_RANK
from .models import AuditResult, OverflowIssue


def group_key(issue: OverflowIssue) -> str:
    if issue.source_file and issue.source_line is not None:
        return f"{issue.source_file}:{issue.source_line}"
    return issue.text_content


def deduplicate(result: AuditResult) -> AuditResult:
    """Keep the most severe issue per source line (or per text when unattributed).

    Ties keep the first issue seen; groups stay in order of first appearance.
    """
    kept: Dict[str, OverflowIssue] = {}
    for issue in result.issues:
        key = group_key(issue)
        current = kept.get(key)
        if current is None or SEVERITY_RANK[issue.severity] > SEVERITY_RANK[current.severity]:
            kept[key] = issue
    return replace(result, issues=list(kept.values()))


def deduplicate_results(results: List[AuditResult]) -> List[AuditResult]:
    return [deduplicate(result) for result in results]
