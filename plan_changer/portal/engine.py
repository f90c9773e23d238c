"""
Plan-change automation engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

import requests

from plan_changer.catalog import plan_name_for_code
from plan_changer.domain.plan_change import RunConfig, RunResult
from plan_changer.portal.classifier import KeywordSuccessClassifier, SuccessClassifier
from plan_changer.portal.confirm import ConfirmFlow
from plan_changer.portal.errors import PlanChangeError
from plan_changer.portal.logging_utils import log_event
from plan_changer.portal.login import LoginFlow
from plan_changer.portal.session import PortalSession
from plan_changer.portal.snapshots import SnapshotWriter

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Plan changed successfully"


class AutomationEngine:
    """
    Runs login then confirm on a fresh session and reports a `RunResult`.

    No exception escapes `run`: every failure becomes ``success=False`` with
    the error text as message. There are no retries; a run that fails after
    login leaves the portal as the confirm flow left it.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], requests.Session] = requests.Session,
        classifier: SuccessClassifier | None = None,
        snapshot_dir: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._classifier = classifier or KeywordSuccessClassifier()
        self._snapshot_dir = snapshot_dir
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self, config: RunConfig) -> RunResult:
        started_at = self._clock()
        portal = config.portal
        log_event(
            logger,
            logging.INFO,
            "plan_change_started",
            base=portal.base,
            psid=config.psid,
        )

        try:
            snapshots = SnapshotWriter(enabled=portal.debug_html, directory=self._snapshot_dir)
            with PortalSession(
                base_url=portal.base,
                timeout_seconds=portal.timeout_seconds,
                session=self._session_factory(),
            ) as session:
                LoginFlow(session=session, settings=portal, snapshots=snapshots).run()
                ConfirmFlow(
                    session=session,
                    config=config,
                    classifier=self._classifier,
                    snapshots=snapshots,
                ).run()
        except PlanChangeError as exc:
            log_event(
                logger,
                logging.WARNING,
                "plan_change_failed",
                psid=config.psid,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return RunResult(success=False, message=str(exc), timestamp=started_at)
        except Exception as exc:
            logger.exception("Unexpected plan change failure psid=%s", config.psid)
            return RunResult(
                success=False,
                message=str(exc) or "Unknown error occurred",
                timestamp=started_at,
            )

        plan_name = plan_name_for_code(config.psid)
        log_event(
            logger,
            logging.INFO,
            "plan_change_succeeded",
            psid=config.psid,
            plan_name=plan_name,
        )
        return RunResult(
            success=True,
            message=SUCCESS_MESSAGE,
            timestamp=started_at,
            plan_name=plan_name,
            psid=config.psid,
        )
