"""
Delivery Scheduler

Periodically ships the delivery buffer to a delivery backend using
threading.Event for efficient sleep/wake with clean shutdown support.

The tick thread only exists while the pipeline is running: start() and
stop() are called by the lifecycle controller on its phase transitions.
"""

import logging
import threading

from ..delivery import DeliveryOutcome, EventDelivery
from .buffer import DeliveryBuffer

logger = logging.getLogger(__name__)


class DeliveryScheduler:
    """
    Fixed-period delivery of buffered events.

    Each tick delivers a snapshot of the buffer. Only a SENT outcome removes
    the delivered events; anything else leaves them for the next tick.
    Deliveries never overlap, even across a stop/start.
    """

    def __init__(
        self,
        buffer: DeliveryBuffer,
        delivery: EventDelivery,
        interval_seconds: float,
    ):
        """
        Initialize the scheduler.

        Args:
            buffer: Buffer to drain
            delivery: Backend that receives each batch
            interval_seconds: Seconds between ticks
        """
        self._buffer = buffer
        self._delivery = delivery
        self._interval = interval_seconds

        self._deliver_lock = threading.Lock()
        self._shutdown: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._shutdown is not None

    def start(self) -> None:
        """Start the tick thread; no-op if already running."""
        if self._shutdown is not None:
            return

        # Each run gets its own event so a lingering old thread never sees a reset
        shutdown = threading.Event()
        self._shutdown = shutdown
        self._thread = threading.Thread(
            target=self._run,
            args=(shutdown,),
            name="DeliveryScheduler",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Delivery scheduler started (every {self._interval}s)")

    def stop(self, timeout: float = 2.0) -> None:
        """
        Stop the tick thread.

        Signals shutdown and waits briefly for the thread to exit. A delivery
        already in flight is allowed to finish.
        """
        if self._shutdown is None:
            return

        self._shutdown.set()  # Wakes thread immediately from wait()
        thread = self._thread
        self._shutdown = None
        self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Delivery scheduler did not stop cleanly (delivery in flight)")
            else:
                logger.debug("Delivery scheduler stopped")

    def tick(self) -> DeliveryOutcome:
        """
        Run one delivery attempt.

        Returns:
            Outcome reported by the delivery backend (FAILED if it raised)
        """
        with self._deliver_lock:
            events = self._buffer.snapshot()

            try:
                outcome = self._delivery.deliver(events)
            except Exception as e:
                logger.error(f"Error delivering expressions: {e}", exc_info=True)
                outcome = DeliveryOutcome.FAILED

            if outcome is DeliveryOutcome.SENT:
                self._buffer.discard(len(events))
                logger.info(f"Delivered {len(events)} expression event(s)")
            elif outcome is DeliveryOutcome.FAILED:
                logger.warning(f"Delivery failed, keeping {len(events)} event(s) for retry")

            return outcome

    def _run(self, shutdown: threading.Event) -> None:
        """
        Main scheduler loop.

        Wait for timeout OR shutdown signal; wait() returns True on shutdown.
        """
        while not shutdown.wait(timeout=self._interval):
            self.tick()

        logger.debug("Delivery scheduler loop exited")
