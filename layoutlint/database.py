# database.py
import asyncio
import logging
from typing import List, Optional

from neo4j import AsyncGraphDatabase

from .models import AuditResult, OverflowIssue

logger = logging.getLogger(__name__)


def issue_properties(issue: OverflowIssue) -> dict:
    return {
        'selector': issue.selector,
        'tag_name': issue.tag_name,
        'text_content': issue.text_content,
        'overflow_direction': issue.overflow_direction,
        'severity': issue.severity,
        'locale': issue.locale,
        'width_overflow': issue.width_overflow,
        'height_overflow': issue.height_overflow,
        'suggestion': issue.suggestion,
        'component_name': issue.component_name,
        'english_text': issue.english_text,
        'translation_key': issue.translation_key,
    }


class ResultStore:
    """Neo4j sink for audit history. Writes go through one lock."""

    def __init__(self, uri: str, user: str, password: str):
        self.uri = uri
        self.user = user
        self.password = password
        self.driver = None
        self.lock = asyncio.Lock()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        self.driver = AsyncGraphDatabase.driver(self.uri, auth=(self.user, self.password))
        async with self.driver.session() as session:
            await session.run("CREATE INDEX audit_url IF NOT EXISTS FOR (a:Audit) ON (a.url)")
            await session.run("CREATE INDEX source_file_path IF NOT EXISTS FOR (f:SourceFile) ON (f.path)")
        logger.info("Indexes created for Audit and SourceFile")

    async def close(self):
        if self.driver:
            await self.driver.close()
            self.driver = None

    async def save_result(self, result: AuditResult) -> Optional[str]:
        logger.info(f"Saving audit for {result.url} ({result.locale})")
        async with self.lock:
            async with self.driver.session() as session:
                record = await session.run(
                    """
                    CREATE (a:Audit {url: $url, locale: $locale, timestamp: $timestamp,
                                     duration: $duration, issue_count: $issue_count, error: $error})
                    RETURN elementId(a) AS id
                    """,
                    url=result.url, locale=result.locale, timestamp=result.timestamp,
                    duration=result.duration, issue_count=result.issue_count, error=result.error,
                )
                audit = await record.single()
                audit_id = audit['id'] if audit else None

                for issue in result.issues:
                    await session.run(
                        """
                        MATCH (a:Audit) WHERE elementId(a) = $audit_id
                        CREATE (a)-[:HAS_ISSUE]->(i:Issue)
                        SET i += $props
                        WITH i
                        WHERE $source_file IS NOT NULL
                        MERGE (f:SourceFile {path: $source_file})
                        CREATE (i)-[:DEFINED_IN {line: $source_line}]->(f)
                        """,
                        audit_id=audit_id,
                        props=issue_properties(issue),
                        source_file=issue.source_file,
                        source_line=issue.source_line,
                    )
        return audit_id

    async def save_results(self, results: List[AuditResult]) -> List[Optional[str]]:
        return [await self.save_result(result) for result in results]
