import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from partquote.models.checkout import Attachment
from partquote.models.quote import QuoteSnapshot, QuoteTotals
from partquote.services.catalog import REQUIREMENT_IDS
from partquote.services.parts import PartsManager
from partquote.services.quote import QuoteAggregator, new_quote_id

logger = logging.getLogger(__name__)


@dataclass
class QuoteSession:
    quote_id: str
    manager: PartsManager = field(default_factory=PartsManager)
    zip_code: Optional[str] = None
    requirements: Set[str] = field(default_factory=set)
    notes: str = ""
    attachments: Dict[str, List[Attachment]] = field(default_factory=dict)
    # per-session lock; one user action is applied at a time
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def totals(self, aggregator: QuoteAggregator) -> QuoteTotals:
        return aggregator.totals(self.manager.parts, self.zip_code)

    def snapshot(self, aggregator: QuoteAggregator) -> QuoteSnapshot:
        return aggregator.snapshot(
            self.quote_id,
            self.manager.parts,
            self.zip_code,
            sorted(self.requirements),
            self.notes,
        )

    def toggle_requirement(self, requirement_id: str) -> bool:
        if requirement_id not in REQUIREMENT_IDS:
            raise KeyError(requirement_id)
        if requirement_id in self.requirements:
            self.requirements.discard(requirement_id)
            return False
        self.requirements.add(requirement_id)
        return True


class QuoteSessionStore:
    """Thread-safe in-memory quote sessions, keyed by quote id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, QuoteSession] = {}

    def create(self) -> QuoteSession:
        with self._lock:
            quote_id = new_quote_id()
            # two sessions created in the same millisecond get a suffix
            suffix = 1
            base = quote_id
            while quote_id in self._sessions:
                quote_id = f"{base}-{suffix}"
                suffix += 1
            session = QuoteSession(quote_id=quote_id)
            self._sessions[quote_id] = session
        logger.info("Created quote session quote_id=%s", quote_id)
        return session

    def get(self, quote_id: str) -> Optional[QuoteSession]:
        with self._lock:
            return self._sessions.get(quote_id)

    def discard(self, quote_id: str) -> None:
        with self._lock:
            self._sessions.pop(quote_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


quote_sessions = QuoteSessionStore()
aggregator = QuoteAggregator()
