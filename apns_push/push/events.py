"""
Error event channel.

Listeners subscribe to a specific reason (e.g. Reason.UNREGISTERED to prune
device tokens) or to Reason.ERROR to see every failure.
"""

import logging
from collections import defaultdict
from typing import Callable, DefaultDict, List, Union

from apns_push.push.errors import DeliveryError, Reason

logger = logging.getLogger(__name__)

ErrorListener = Callable[[DeliveryError], None]


class ErrorEvents:
    """Registry of error listeners keyed by reason code."""

    def __init__(self):
        self._listeners: DefaultDict[str, List[ErrorListener]] = defaultdict(list)

    @staticmethod
    def _key(reason: Union[Reason, str]) -> str:
        return reason.value if isinstance(reason, Reason) else reason

    def on(self, reason: Union[Reason, str], listener: ErrorListener) -> None:
        """Register a listener for a reason, or Reason.ERROR for all errors."""
        self._listeners[self._key(reason)].append(listener)

    def off(self, reason: Union[Reason, str], listener: ErrorListener) -> None:
        """Remove a previously registered listener. Unknown listeners are ignored."""
        listeners = self._listeners.get(self._key(reason))
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listener_count(self, reason: Union[Reason, str]) -> int:
        return len(self._listeners.get(self._key(reason), ()))

    def emit(self, reason: Union[Reason, str], error: DeliveryError) -> None:
        """Call every listener registered for reason. No listeners is fine."""
        # Copy so listeners may unsubscribe while being called
        for listener in list(self._listeners.get(self._key(reason), ())):
            try:
                listener(error)
            except Exception as e:
                logger.error(
                    f"Error in APNS {self._key(reason)} listener: {e}",
                    exc_info=True,
                )

    def emit_error(self, error: DeliveryError) -> None:
        """Emit on the error's own reason channel, then on the generic one."""
        self.emit(error.reason, error)
        self.emit(Reason.ERROR, error)
