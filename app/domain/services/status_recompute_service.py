"""
Status Recompute Service - Fetch, classify and write back project statuses.

Handles:
1. Single-project recomputation on demand
2. Bulk recomputation over all (or selected) projects on a bounded pool
3. Manual status overrides validated against the transition table
4. Status summaries for dashboards
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

from app.domain.entities import ProjectStatus, RecomputeResult
from .activity_matcher import NameRecordMatcher
from .status_catalog import get_status_display_info, parse_status, status_statistics
from .status_classifier import DETERMINISTIC_CONFIDENCE, MatcherFactory, classify_project
from .status_store import StatusDataStore
from .transition_validator import require_transition

logger = logging.getLogger(__name__)


class StatusRecomputeService:
    """
    Service recomputing project statuses against a StatusDataStore.

    Projects are independent: a failure on one is recorded in its
    RecomputeResult and never aborts a batch.
    """

    def __init__(
        self,
        store: StatusDataStore,
        max_workers: int = 4,
        write_delay_seconds: float = 0.1,
        preserve_manual_statuses: bool = True,
        skip_unchanged: bool = True,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
        matcher_factory: MatcherFactory = NameRecordMatcher,
    ):
        self.store = store
        self.max_workers = max(1, max_workers)
        self.write_delay_seconds = write_delay_seconds
        self.preserve_manual_statuses = preserve_manual_statuses
        self.skip_unchanged = skip_unchanged
        self.clock = clock
        self.sleep = sleep
        self.matcher_factory = matcher_factory

    @classmethod
    def from_config(cls, store: StatusDataStore, config=None) -> 'StatusRecomputeService':
        """Build a service using the recompute section of the configuration."""
        if config is None:
            from app.config import get_config
            config = get_config()
        return cls(
            store,
            max_workers=config.max_workers,
            write_delay_seconds=config.write_delay_seconds,
            preserve_manual_statuses=config.preserve_manual_statuses,
            skip_unchanged=config.skip_unchanged,
        )

    # =========================================================================
    # Single project
    # =========================================================================

    def recompute_project(
        self,
        project_id: int,
        reevaluate_manual: bool = False
    ) -> RecomputeResult:
        """
        Fetch a project's data, classify it and write back the status.

        Args:
            project_id: Project to recompute
            reevaluate_manual: Overwrite on-hold / cancelled projects too

        Returns:
            RecomputeResult; failures are reported in its errors list
        """
        outcome = RecomputeResult(project_id=project_id)
        try:
            self._recompute(outcome, reevaluate_manual)
        except Exception as e:
            logger.error(f"Failed to recompute status for project {project_id}: {e}")
            outcome.errors.append(str(e))
        return outcome

    def _recompute(self, outcome: RecomputeResult, reevaluate_manual: bool) -> None:
        project = self.store.get_project(outcome.project_id)
        outcome.project_code = project.code
        outcome.previous_status = project.status

        activities = self.store.list_activities(project.code)
        records = self.store.list_progress_records(project.code)
        now = self.clock()

        result = classify_project(
            project, activities, records, now,
            matcher_factory=self.matcher_factory,
        )
        outcome.result = result

        if project.status.is_manual and self.preserve_manual_statuses and not reevaluate_manual:
            outcome.skipped = True
            logger.debug(
                f"Project {project.code} is manually set to {project.status.value}; "
                f"leaving it unchanged"
            )
            return

        if result.status == project.status and self.skip_unchanged:
            logger.debug(f"Project {project.code} status unchanged: {result.status.value}")
            return

        self.store.update_project_status(
            project.id,
            result.status,
            result.confidence,
            result.reason,
            now,
            kpi_added=any(r.is_planned for r in records),
        )
        outcome.changed = result.status != project.status

        logger.info(
            f"Project {project.code} status updated: "
            f"{project.status.value} -> {result.status.value} "
            f"({result.reason}; confidence {result.confidence}%)"
        )
        if self.write_delay_seconds > 0:
            self.sleep(self.write_delay_seconds)

    # =========================================================================
    # Bulk
    # =========================================================================

    def recompute_many(
        self,
        project_ids: Sequence[int],
        reevaluate_manual: bool = False
    ) -> List[RecomputeResult]:
        """Recompute the given projects on the worker pool, in input order."""
        project_ids = list(project_ids)
        if not project_ids:
            return []

        logger.info(f"Recomputing statuses for {len(project_ids)} projects")
        workers = min(self.max_workers, len(project_ids))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(
                lambda pid: self.recompute_project(pid, reevaluate_manual),
                project_ids,
            ))

        changed = sum(1 for r in results if r.changed)
        failed = sum(1 for r in results if not r.ok)
        logger.info(
            f"Status recompute finished: {changed} changed, "
            f"{failed} failed, {len(results)} total"
        )
        return results

    def recompute_all(self, reevaluate_manual: bool = False) -> List[RecomputeResult]:
        """Recompute every project in the store."""
        return self.recompute_many(self.store.list_project_ids(), reevaluate_manual)

    def recompute_by_criteria(
        self,
        project_codes: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[Union[str, ProjectStatus]]] = None,
        created_between: Optional[Tuple[date, date]] = None,
        reevaluate_manual: bool = False,
    ) -> List[RecomputeResult]:
        """
        Recompute projects selected by code, stored status or creation date.

        Args:
            project_codes: Restrict to these project codes
            statuses: Restrict to projects currently in these statuses
            created_between: Inclusive (start, end) creation date range
            reevaluate_manual: Overwrite on-hold / cancelled projects too

        Raises:
            ValueError: If a status is not a known (canonical, legacy or
                display) value
        """
        project_ids = self.store.list_project_ids(
            project_codes=project_codes,
            statuses=[parse_status(s) for s in statuses] if statuses else None,
            created_between=created_between,
        )
        return self.recompute_many(project_ids, reevaluate_manual)

    # =========================================================================
    # Manual override
    # =========================================================================

    def apply_manual_status(
        self,
        project_id: int,
        requested: Union[str, ProjectStatus],
        reason: str = ""
    ) -> RecomputeResult:
        """
        Apply an operator-requested status change.

        Raises:
            ProjectNotFoundError: If the project does not exist
            InvalidStatusTransitionError: If the change is not allowed;
                nothing is written
        """
        project = self.store.get_project(project_id)
        target = require_transition(project.status, requested)
        label = get_status_display_info(target)['label']
        reason = reason or f"Manually set to {label}"

        self.store.update_project_status(
            project.id,
            target,
            DETERMINISTIC_CONFIDENCE,
            reason,
            self.clock(),
            source="manual",
        )
        logger.info(
            f"Project {project.code} status manually changed: "
            f"{project.status.value} -> {target.value} ({reason})"
        )
        return RecomputeResult(
            project_id=project.id,
            project_code=project.code,
            previous_status=project.status,
            changed=True,
        )

    # =========================================================================
    # Reporting
    # =========================================================================

    def status_summary(self, recent_limit: int = 10) -> dict:
        """Totals per stored status plus the most recent status changes."""
        counts = self.store.status_counts()
        statuses = [status for status, n in counts.items() for _ in range(n)]
        summary = status_statistics(statuses)
        summary['recent_updates'] = self.store.recent_status_changes(recent_limit)
        return summary
