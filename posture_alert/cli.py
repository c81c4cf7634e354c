"""
Posture alert entry point.

The camera loop owns the main thread (OpenCV windows must live there on
macOS); alerts are delivered from a background thread running its own
asyncio loop.
"""

import asyncio
import logging
import signal
import sys
import threading
import time

from . import EventDebouncer, PostureClassifier, PostureMonitor
from .api import AsyncAPIClient
from .config import get_settings
from .events import AlertEventManager

MODEL_DOWNLOAD_URL = (
    "https://developers.google.com/mediapipe/solutions/vision/pose_landmarker/index#models"
)

logger = logging.getLogger(__name__)


def configure_logging(settings):
    """Log to stdout and to LOG_DIR/posture_alert.log."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(settings.LOG_DIR / "posture_alert.log"),
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_monitor(settings) -> PostureMonitor:
    return PostureMonitor(
        classifier=PostureClassifier(**settings.get_classifier_config()),
        debouncer=EventDebouncer(**settings.get_debouncer_config()),
    )


def build_api_client(settings) -> AsyncAPIClient:
    return AsyncAPIClient(
        alert_endpoint=settings.ALERT_ENDPOINT,
        api_key=settings.API_KEY,
        device_id=settings.DEVICE_ID,
        timeout=settings.API_TIMEOUT,
        retry_attempts=settings.API_RETRY_ATTEMPTS,
        retry_delays=settings.API_RETRY_DELAYS,
    )


class AlertDeliveryWorker:
    """Drains the alert queue on a dedicated thread and event loop."""

    def __init__(self, event_manager, api_client):
        self.event_manager = event_manager
        self.api_client = api_client
        self.loop = None
        self.thread = None

    def start(self):
        self.thread = threading.Thread(
            target=self._serve, name="alert-delivery", daemon=False
        )
        self.thread.start()
        logger.info("Alert delivery thread started")

    def _serve(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

        try:
            self.loop.run_until_complete(self.event_manager.process_events())
        except Exception as e:
            logger.error(f"Alert delivery loop failed: {e}", exc_info=True)
        finally:
            # The aiohttp session is bound to this loop
            self.loop.run_until_complete(self.api_client.close())
            self.loop.close()

    def stop(self, timeout: float = 30):
        """Ask the manager to stop, then wait for queued alerts to drain."""
        self.event_manager.stop()

        if self.thread:
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                logger.warning(f"Alert delivery still busy after {timeout}s")
            else:
                logger.info("Alert delivery thread stopped")


class PostureAlertApp:
    """
    Wires settings, monitor, alert delivery and the live camera together.
    """

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        configure_logging(self.settings)

        logger.info("=" * 80)
        logger.info("Posture Alert")
        logger.info("=" * 80)
        self.settings.log_config()

        # Camera stack needs OpenCV and MediaPipe (camera extra)
        from .camera import LiveCameraPostureDetector

        self.monitor = build_monitor(self.settings)
        self.api_client = build_api_client(self.settings)
        self.event_manager = AlertEventManager(
            api_client=self.api_client, settings=self.settings
        )
        self.detector = LiveCameraPostureDetector(
            monitor=self.monitor,
            model_path=str(self.settings.MODEL_PATH),
            camera_id=self.settings.CAMERA_ID,
            event_manager=self.event_manager,
            settings=self.settings,
            headless=self.settings.HEADLESS_MODE,
            privacy_mode=self.settings.PRIVACY_MODE,
        )
        logger.info(f"Ready: {self.monitor}, {self.api_client}")

        self.delivery = AlertDeliveryWorker(self.event_manager, self.api_client)
        self._stopped = False

    def run(self):
        """Block on the camera loop until it exits, then shut down."""
        try:
            self.delivery.start()
            # Let the delivery loop come up before the first frame
            time.sleep(0.5)

            if self.settings.HEADLESS_MODE:
                logger.info("Monitoring headless, Ctrl+C to stop")
            else:
                logger.info("Monitoring, press 'q' in the preview window to stop")

            self.detector.run()

        except KeyboardInterrupt:
            logger.info("Stopped from keyboard")
        except Exception as e:
            logger.error(f"Camera loop failed: {e}", exc_info=True)
        finally:
            self.shutdown()

    def shutdown(self):
        """Stop alert delivery and report totals. Safe to call twice."""
        if self._stopped:
            return
        self._stopped = True

        logger.info("Shutting down...")
        self.delivery.stop()
        self.event_manager.log_statistics()
        logger.info(f"Monitor totals: {self.monitor.get_statistics()}")
        logger.info("Shutdown complete")


def main():
    try:
        app = PostureAlertApp()
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(str(e))
        logger.info(f"Download a pose landmarker model from: {MODEL_DOWNLOAD_URL}")
        sys.exit(1)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}")
        app.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    app.run()


if __name__ == "__main__":
    main()
