"""
Process-wide collaborators for the HTTP surface: configuration, the session
storage slot, the draft store, the submission gateway and live sessions.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from dotenv import load_dotenv

from formflow.integrations.clients.mocks.submission import MockSubmissionClient
from formflow.integrations.clients.real_http.submission import HttpSubmissionClient
from formflow.integrations.contracts.submission import SubmissionGateway
from formflow.utils.config_loader import FormFlowConfig, load_formflow_config
from formflow.wizard.drafts import DraftStore
from formflow.wizard.state_manager import FormSession, SessionStatus
from formflow.wizard.steps import WizardDefinition

load_dotenv()

logger = logging.getLogger(__name__)


def build_storage(cfg: FormFlowConfig):
    """Use real Redis when REDIS_URL is set, else the in-memory stub."""
    url = cfg.redis_url()
    if url:
        from formflow.database.redis_real import RedisCache

        logger.info("Draft storage: Redis")
        return RedisCache(url=url, default_ttl=cfg.drafts.ttl_seconds)

    from formflow.database.redis import RedisCache

    logger.info("Draft storage: in-memory")
    return RedisCache()


def build_gateway(cfg: FormFlowConfig) -> SubmissionGateway:
    sub = cfg.submission
    if sub.backend == "http":
        return HttpSubmissionClient(
            base_url=cfg.submission_base_url(),
            api_key=cfg.submission_api_key(),
            timeout=sub.timeout_seconds,
        )
    return MockSubmissionClient(delay_seconds=sub.mock_delay_seconds, failure_rate=sub.mock_failure_rate)


class SessionRegistry:
    """Live form sessions of this process, keyed by (wizard, session id).

    Sessions idle for longer than `idle_ttl_seconds` are dropped on the next
    access; a dropped session is rebuilt from its stored draft if one is left.
    Sessions with a submission in flight are never dropped.
    """

    def __init__(self, idle_ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        # (wizard, session id) -> (session, last access)
        self._sessions: Dict[Tuple[str, str], Tuple[FormSession, float]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(
        self,
        wizard: WizardDefinition,
        draft_store: DraftStore,
        gateway: SubmissionGateway,
        session_id: Optional[str] = None,
    ) -> FormSession:
        """Return the live session, or start one (resuming a stored draft if any)."""
        self._evict_idle()
        if session_id:
            live = self._touch((wizard.name, session_id))
            if live is not None:
                return live
        session = FormSession.start(wizard, draft_store, gateway, session_id=session_id)
        self._sessions[(wizard.name, session.session_id)] = (session, self._clock())
        return session

    def get(
        self,
        wizard: WizardDefinition,
        session_id: str,
        draft_store: DraftStore,
        gateway: SubmissionGateway,
    ) -> Optional[FormSession]:
        self._evict_idle()
        live = self._touch((wizard.name, session_id))
        if live is not None:
            return live
        # Not live in this process (e.g. after a restart): resume only if a draft exists.
        if draft_store.load(wizard.session_key(session_id)) is None:
            return None
        return self.open(wizard, draft_store, gateway, session_id=session_id)

    def discard(self, session: FormSession) -> None:
        self._sessions.pop((session.wizard.name, session.session_id), None)

    def _touch(self, key: Tuple[str, str]) -> Optional[FormSession]:
        entry = self._sessions.get(key)
        if entry is None:
            return None
        self._sessions[key] = (entry[0], self._clock())
        return entry[0]

    def _evict_idle(self) -> None:
        if self.idle_ttl_seconds is None:
            return
        cutoff = self._clock() - self.idle_ttl_seconds
        idle = [
            key
            for key, (session, seen) in self._sessions.items()
            if seen < cutoff and session.status != SessionStatus.SUBMITTING
        ]
        for key in idle:
            del self._sessions[key]
        if idle:
            logger.info("Evicted %d idle form sessions", len(idle))


config = load_formflow_config()
storage = build_storage(config)
draft_store = DraftStore(storage, debounce_seconds=config.drafts.debounce_seconds, ttl=config.drafts.ttl_seconds)
gateway = build_gateway(config)
registry = SessionRegistry(idle_ttl_seconds=config.drafts.ttl_seconds)


def get_config() -> FormFlowConfig:
    return config


def get_storage():
    return storage


def get_draft_store() -> DraftStore:
    return draft_store


def get_gateway() -> SubmissionGateway:
    return gateway


def get_registry() -> SessionRegistry:
    return registry
