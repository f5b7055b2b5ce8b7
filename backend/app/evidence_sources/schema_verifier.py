"""
Schema verifier: confirms a "no such table" failure against the project database.
"""

import re
from typing import List, Optional

from app.evidence_sources.base import AskContext, EvidenceSource
from app.schemas.deployment import Resource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import ResourceRegistry, SqlStore

MISSING_TABLE_RE = re.compile(r"no such table:\s*([A-Za-z0-9_]+)", re.IGNORECASE)
DATABASE_RESOURCE_TYPES = frozenset({"d1", "database", "sql"})


def find_missing_table(body: str) -> Optional[str]:
    match = MISSING_TABLE_RE.search(body or "")
    return match.group(1) if match else None


def pick_database(resources: List[Resource]) -> Optional[Resource]:
    """Oldest active database resource."""
    databases = [r for r in resources if r.resource_type.lower() in DATABASE_RESOURCE_TYPES]
    if not databases:
        return None
    return min(databases, key=lambda r: r.created_at or "")


class SchemaVerifierSource(EvidenceSource):
    name = "sql_table_check"
    evidence_type = "sql_result"

    def __init__(self, sql: SqlStore, resources: ResourceRegistry, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.sql = sql
        self.resources = resources

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        probe = context.probe
        if probe is None or probe.status < 500:
            return []
        table = find_missing_table(probe.body)
        if not table:
            return []
        context.missing_table = table

        resources = context.resources
        if resources is None:
            resources = await self.resources.list_active(context.project.id)
        database = pick_database(resources)
        if database is None:
            return [self.gap("Could not verify missing-table error because project has no database resource.")]

        if not context.budget.try_acquire():
            return [self.gap(f'Skipped verifying table "{table}": live-check budget exhausted.')]

        exists = await self.sql.table_exists(database.provider_id or database.id, table)
        context.table_missing_confirmed = not exists
        return [
            EvidenceDraft(
                type="sql_result",
                source=self.name,
                summary=(
                    f'Table "{table}" exists in the project database.'
                    if exists
                    else f'Table "{table}" does not exist in the project database.'
                ),
                relation="conflicts" if exists else "supports",
                meta={"table": table, "exists": exists},
            )
        ]

    def failure_draft(self, context: AskContext, message: str) -> EvidenceDraft:
        table = context.missing_table or "unknown"
        return self.gap(f'Failed to verify table "{table}": {message}')
