"""
Alert event manager with cooldown and async delivery.
Turns monitor results into alerts without blocking the camera loop.
"""

import asyncio
import logging
import queue
import threading
import time
from datetime import datetime

from ..utils.constants import AlertTypes

logger = logging.getLogger(__name__)


class AlertEventManager:
    """
    Manages posture alerts with cooldown and background delivery.

    An alert is raised on the rising edge of an event flag
    (sit_confirmed or fall_detected). A per-alert-type cooldown prevents
    alert spam when a flag flickers.

    Architecture:
    - The posture monitor hands every frame result to observe() (non-blocking)
    - Background asyncio task delivers queued alerts through the API client
    """

    def __init__(self, api_client, settings):
        """
        Initialize event manager.

        Args:
            api_client: AsyncAPIClient instance
            settings: Settings instance with configuration
        """
        self.api_client = api_client
        self.settings = settings

        # Thread-safe queue, filled from the camera thread
        self.queue: queue.Queue = queue.Queue()

        # observe/trigger_alert may be called from several threads
        self._lock = threading.RLock()

        # Rising edge tracking
        self._previous_flags = {
            AlertTypes.SIT_CONFIRMED: False,
            AlertTypes.FALL_DETECTED: False,
        }
        self._last_observed_at: float | None = None

        # Cooldown tracking (per alert type)
        self.last_event_time: dict[str, float] = {}
        self.cooldown_period: int = settings.COOLDOWN_PERIOD

        # Statistics
        self.total_events_triggered = 0
        self.total_events_processed = 0
        self.total_events_delivered = 0
        self.total_events_failed = 0

        # Running flag
        self.running = False

        logger.info(f"Initialized AlertEventManager: cooldown={self.cooldown_period}s")

    def observe(self, result) -> list[str]:
        """
        Inspect a frame result and trigger alerts on rising edges.

        Results older than the last observed one are ignored, so a late
        result cannot clear a flag a newer result already raised.

        Args:
            result: FrameResult from the posture monitor

        Returns:
            Alert types that were queued for this result
        """
        with self._lock:
            if (
                self._last_observed_at is not None
                and result.timestamp < self._last_observed_at
            ):
                logger.debug(
                    f"Ignoring stale result at {result.timestamp:.3f}s "
                    f"(last observed {self._last_observed_at:.3f}s)"
                )
                return []
            self._last_observed_at = result.timestamp

            queued = []
            flags = {
                AlertTypes.SIT_CONFIRMED: result.sit_confirmed,
                AlertTypes.FALL_DETECTED: result.fall_detected,
            }

            for alert_type, active in flags.items():
                if active and not self._previous_flags[alert_type]:
                    info = {"label": result.label, "frame_timestamp": result.timestamp}
                    if self.trigger_alert(alert_type, info):
                        queued.append(alert_type)
                self._previous_flags[alert_type] = active

            return queued

    def trigger_alert(self, alert_type: str, alert_info: dict | None = None) -> bool:
        """
        Trigger an alert (called from the camera thread).

        Non-blocking operation that adds the alert to the queue if the
        cooldown for its type has passed.

        Args:
            alert_type: AlertTypes value
            alert_info: Optional dictionary with detection details

        Returns:
            True if alert was queued, False if still in cooldown
        """
        with self._lock:
            current_time = time.time()

            # Check cooldown
            last_time = self.last_event_time.get(alert_type)
            if last_time is not None:
                time_since_last = current_time - last_time
                if time_since_last < self.cooldown_period:
                    remaining = self.cooldown_period - time_since_last
                    logger.info(
                        f"{alert_type} alert in cooldown period (wait {remaining:.1f}s more)"
                    )
                    return False

            # Update last event time
            self.last_event_time[alert_type] = current_time

            event = {
                "alert_type": alert_type,
                "timestamp": current_time,
                "datetime": datetime.fromtimestamp(current_time).isoformat(),
                "alert_info": alert_info or {},
            }

            self.queue.put_nowait(event)
            self.total_events_triggered += 1

            if alert_type == AlertTypes.FALL_DETECTED:
                logger.warning(
                    f"Fall alert triggered and queued (total: {self.total_events_triggered})"
                )
            else:
                logger.info(
                    f"{alert_type} alert triggered and queued "
                    f"(total: {self.total_events_triggered})"
                )
            return True

    async def process_events(self):
        """
        Background task: deliver alerts from queue.

        Runs until stop() is called and the queue is drained.

        This should be run as an asyncio task:
            task = asyncio.create_task(manager.process_events())
        """
        self.running = True
        logger.info("Event processor started")

        try:
            while self.running or not self.queue.empty():
                try:
                    event = self.queue.get_nowait()
                except queue.Empty:
                    await asyncio.sleep(0.1)
                    continue

                try:
                    await self._process_single_event(event)
                finally:
                    self.queue.task_done()

        except asyncio.CancelledError:
            logger.info("Event processor cancelled")
            raise

        finally:
            logger.info("Event processor stopped")

    async def _process_single_event(self, event: dict):
        """
        Deliver a single alert.

        Args:
            event: Event dictionary with alert type, timestamp and info
        """
        alert_type = event["alert_type"]
        logger.info(f"Processing {alert_type} alert from {event['datetime']}")

        self.total_events_processed += 1

        payload = {
            "alert_type": alert_type,
            "timestamp": event["timestamp"],
            "datetime": event["datetime"],
            "device_id": self.settings.DEVICE_ID,
            **event.get("alert_info", {}),
        }

        try:
            delivered = await self.api_client.send_alert(payload)
        except Exception as e:
            logger.error(f"Error processing {alert_type} alert: {e}", exc_info=True)
            delivered = False

        if delivered:
            self.total_events_delivered += 1
            logger.info(
                f"Alert processed successfully "
                f"(delivered: {self.total_events_delivered}/{self.total_events_processed})"
            )
        else:
            self.total_events_failed += 1
            logger.error(f"Failed to deliver {alert_type} alert")

    def stop(self):
        """
        Stop event processor gracefully.

        The processor keeps running until the queue is empty.
        """
        logger.info("Stopping event processor...")
        remaining = self.queue.qsize()
        if remaining > 0:
            logger.info(f"Waiting for {remaining} alerts to be delivered...")
        self.running = False

    def get_statistics(self) -> dict:
        """
        Get event processing statistics.

        Returns:
            Dictionary with statistics
        """
        now = time.time()
        return {
            "total_triggered": self.total_events_triggered,
            "total_processed": self.total_events_processed,
            "total_delivered": self.total_events_delivered,
            "total_failed": self.total_events_failed,
            "queue_size": self.queue.qsize(),
            "success_rate": (
                self.total_events_delivered / self.total_events_processed * 100
                if self.total_events_processed > 0
                else 0
            ),
            "last_event_time": dict(self.last_event_time),
            "in_cooldown": {
                alert_type: (now - last_time) < self.cooldown_period
                for alert_type, last_time in self.last_event_time.items()
            },
        }

    def log_statistics(self):
        """Log current statistics."""
        stats = self.get_statistics()
        logger.info("=" * 60)
        logger.info("Posture Alert Statistics")
        logger.info("=" * 60)
        logger.info(f"Alerts Triggered: {stats['total_triggered']}")
        logger.info(f"Alerts Processed: {stats['total_processed']}")
        logger.info(f"Alerts Delivered: {stats['total_delivered']}")
        logger.info(f"Alerts Failed: {stats['total_failed']}")
        logger.info(f"Success Rate: {stats['success_rate']:.1f}%")
        logger.info(f"Queue Size: {stats['queue_size']}")
        logger.info("=" * 60)

    def __repr__(self) -> str:
        """String representation."""
        stats = self.get_statistics()
        return (
            f"AlertEventManager("
            f"processed={stats['total_processed']}, "
            f"delivered={stats['total_delivered']}, "
            f"queue={stats['queue_size']})"
        )
