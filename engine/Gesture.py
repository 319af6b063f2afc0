import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

# a drag whose release never arrives is dropped after this many seconds
SAFETY_TIMEOUT = 60.0


class GesturePhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class GestureSession:
    token: int
    source: str
    index: int
    cards: tuple[str, ...]
    startedAt: float


class GestureGuard:
    """
    Single-flight drag tracking: Idle -> Dragging(session) -> Idle.

    Only one gesture may be open at a time; a second begin() is refused until
    the open one finishes, is cancelled, or outlives the safety timeout.
    """

    def __init__(self, timeout: float = SAFETY_TIMEOUT):
        self.timeout = timeout
        self.session: Optional[GestureSession] = None
        self.nextToken = 1

    @property
    def phase(self) -> GesturePhase:
        return GesturePhase.IDLE if self.session is None else GesturePhase.DRAGGING

    def isExpired(self, now) -> bool:
        return self.session is not None and now - self.session.startedAt >= self.timeout

    def expire(self, now) -> bool:
        if not self.isExpired(now):
            return False
        logger.warning("drag from %s timed out after %.1fs; resetting",
                       self.session.source, now - self.session.startedAt)
        self.session = None
        return True

    def begin(self, source, index, cards, now) -> Optional[GestureSession]:
        self.expire(now)
        if self.session is not None:
            logger.debug("drag start from %s ignored: gesture %d still open", source, self.session.token)
            return None
        self.session = GestureSession(token=self.nextToken, source=source, index=index,
                                      cards=tuple(cards), startedAt=now)
        self.nextToken += 1
        return self.session

    def finish(self, token=None) -> Optional[GestureSession]:
        session = self.session
        if session is None:
            return None
        if token is not None and token != session.token:
            return None
        self.session = None
        return session

    def cancel(self):
        self.session = None
