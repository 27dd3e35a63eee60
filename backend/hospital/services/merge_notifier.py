"""
Event Notifier for completed patient merges.

Listeners are plain callables taking a ``PatientMergedEvent``. They are
connected to a blinker signal owned by the notifier and called
synchronously; blinker does not fix their relative order. The merge
service runs ``notify`` as a pre-commit hook, so a failing listener
vetoes the merge.
"""

import logging
from typing import Callable, List

from blinker import Signal

from hospital.core.exceptions import NotificationFailed
from hospital.domain.entities import PatientMergedEvent

logger = logging.getLogger(__name__)

MergeListener = Callable[[PatientMergedEvent], None]


class MergeEventNotifier:
    def __init__(self) -> None:
        self.signal = Signal("patient-merged")
        self._receivers = {}

    @property
    def listeners(self) -> List[MergeListener]:
        return list(self._receivers)

    def register(self, listener: MergeListener) -> None:
        if listener in self._receivers:
            return

        def receiver(sender, event):
            listener(event)

        self._receivers[listener] = receiver
        self.signal.connect(receiver, weak=False)

    def unregister(self, listener: MergeListener) -> None:
        receiver = self._receivers.pop(listener, None)
        if receiver is not None:
            self.signal.disconnect(receiver)

    def notify(self, event: PatientMergedEvent) -> None:
        """Deliver ``event`` to every listener; the first failure stops
        dispatch and is raised as NotificationFailed."""
        try:
            self.signal.send(self, event=event)
        except Exception as e:
            logger.error(
                "Merge listener failed",
                extra={
                    "context": {
                        "survivor_code": event.survivor_code,
                        "obsolete_code": event.obsolete_code,
                        "error": str(e),
                    }
                },
            )
            raise NotificationFailed(f"Merge listener failed: {e}") from e


def log_merge_event(event: PatientMergedEvent) -> None:
    """Audit listener registered by the application factory."""
    logger.info(
        "Patient merged",
        extra={
            "context": {
                "survivor_code": event.survivor_code,
                "obsolete_code": event.obsolete_code,
            }
        },
    )
