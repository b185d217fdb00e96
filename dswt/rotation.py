"""
DSWT Key Rotation.

Rotation never touches key material in place: a new TokenManager is built
for the new key and the active reference is swapped under a lock. Readers
always see either the old or the new manager. Recently retired managers are
kept so tokens issued just before a rotation still verify.
"""

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Mapping, Optional

from dswt.manager import TokenManager
from dswt.token import Token

logger = logging.getLogger(__name__)


class KeyRotator:
    """
    Holds the active TokenManager and a short history of retired ones.

    Example:
        >>> rotator = KeyRotator(TokenManager(b"old-key"), retain=1)
        >>> token = rotator.issue({"sub": "alice"})
        >>> rotator.rotate(TokenManager(b"new-key"))
        >>> rotator.verify(token)  # still accepted via the retired manager
        True
    """

    def __init__(
        self,
        manager: TokenManager,
        retain: int = 1,
        on_rotation: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the rotator.

        Args:
            manager: The initially active manager.
            retain: How many retired managers keep verifying tokens.
            on_rotation: Optional callback receiving the new key id.
        """
        if retain < 0:
            raise ValueError("retain must be >= 0")
        self._active = manager
        self._retired: Deque[TokenManager] = deque(maxlen=retain)
        self._on_rotation = on_rotation
        self._lock = threading.Lock()

    @property
    def active(self) -> TokenManager:
        return self._active

    @property
    def retired(self) -> List[TokenManager]:
        with self._lock:
            return list(self._retired)

    def rotate(self, manager: TokenManager) -> None:
        """Make ``manager`` active and retire the current one."""
        with self._lock:
            previous = self._active
            if self._retired.maxlen:
                self._retired.appendleft(previous)
            self._active = manager
        logger.info(f"Rotated signing key {previous.key_id} -> {manager.key_id}")

        if self._on_rotation:
            try:
                self._on_rotation(manager.key_id)
            except Exception as e:
                logger.error(f"Rotation callback failed: {e}")

    def issue(self, payload: Mapping[str, Any]) -> Token:
        """Issue a token with the active manager."""
        return self._active.issue(payload)

    def verify(self, token: Token) -> bool:
        """Accept a token valid under the active or any retained manager."""
        with self._lock:
            candidates = [self._active, *self._retired]
        return any(manager.verify(token) for manager in candidates)
