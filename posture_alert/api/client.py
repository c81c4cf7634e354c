"""
Async API client for posture alert notifications.
Delivers sit-confirmed and fall-detected alerts to a webhook endpoint.
"""

import asyncio
import logging
import time

import aiohttp

logger = logging.getLogger(__name__)


class AsyncAPIClient:
    """
    Non-blocking API client with retry logic.

    Sends each alert as a JSON POST to the alert endpoint, retrying with
    exponential backoff for reliability on edge devices with potentially
    unstable network connections.
    """

    def __init__(
        self,
        alert_endpoint: str,
        api_key: str | None = None,
        device_id: str | None = None,
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delays: tuple[int, ...] = (1, 2, 4),
    ):
        """
        Initialize API client.

        Args:
            alert_endpoint: URL alerts are POSTed to
            api_key: Optional API key for authentication
            device_id: Identifier of this camera, added to every alert
            timeout: Request timeout in seconds
            retry_attempts: Number of retry attempts
            retry_delays: Delay in seconds between retries (exponential backoff)
        """
        self.alert_endpoint = alert_endpoint
        self.api_key = api_key
        self.device_id = device_id
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.retry_attempts = retry_attempts
        self.retry_delays = retry_delays

        # Session will be created when needed (in async context)
        self._session: aiohttp.ClientSession | None = None

        logger.info(
            f"Initialized API Client: " f"timeout={timeout}s, retries={retry_attempts}"
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Get or create aiohttp session.

        Returns:
            Active ClientSession instance
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("API client session closed")

    def _get_headers(self) -> dict[str, str]:
        """
        Get HTTP headers including authentication if available.

        Returns:
            Dictionary of HTTP headers
        """
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _retry_delay(self, attempt: int) -> int:
        if attempt < len(self.retry_delays):
            return self.retry_delays[attempt]
        return self.retry_delays[-1]

    async def send_alert(self, payload: dict) -> bool:
        """
        Send a posture alert to the alert endpoint.

        Args:
            payload: Alert data (alert_type, label, timestamp, ...)

        Returns:
            True if delivered (or delivered after retry), False otherwise
        """
        if not self.alert_endpoint:
            logger.warning("Alert endpoint not configured, skipping delivery")
            return False

        session = await self._get_session()

        body = {
            "event_type": "posture_alert",
            "sent_at": time.time(),
            **payload,
        }
        if self.device_id:
            body.setdefault("device_id", self.device_id)

        alert_type = payload.get("alert_type", "unknown")

        # Try with retries
        for attempt in range(self.retry_attempts):
            try:
                logger.info(
                    f"Sending {alert_type} alert "
                    f"(attempt {attempt + 1}/{self.retry_attempts})"
                )

                async with session.post(
                    self.alert_endpoint, json=body, headers=self._get_headers()
                ) as response:

                    if response.status in (200, 201, 202):
                        logger.info(f"✓ Alert delivered: {alert_type}")
                        return True
                    else:
                        error_text = await response.text()
                        logger.error(
                            f"✗ Alert failed with status {response.status}: {error_text}"
                        )

            except TimeoutError:
                logger.warning(f"Alert timeout (attempt {attempt + 1})")

            except aiohttp.ClientError as e:
                logger.warning(
                    f"Network error during alert delivery (attempt {attempt + 1}): {e}"
                )

            # Wait before retry (except on last attempt)
            if attempt < self.retry_attempts - 1:
                delay = self._retry_delay(attempt)
                logger.info(f"Retrying in {delay} seconds...")
                await asyncio.sleep(delay)

        logger.error(
            f"Failed to deliver {alert_type} alert after {self.retry_attempts} attempts"
        )
        return False

    async def health_check(self) -> bool:
        """
        Check if the alert endpoint is reachable.

        Returns:
            True if the endpoint answered without a server error
        """
        if not self.alert_endpoint:
            logger.warning("No alert endpoint configured")
            return False

        session = await self._get_session()

        try:
            async with session.get(
                self.alert_endpoint, headers=self._get_headers()
            ) as response:
                reachable = response.status < 500
                logger.info(
                    f"Alert endpoint: {'reachable' if reachable else 'unreachable'} "
                    f"(status {response.status})"
                )
                return reachable
        except (TimeoutError, aiohttp.ClientError) as e:
            logger.warning(f"Alert endpoint unreachable: {e}")
            return False

    def __repr__(self) -> str:
        """String representation of API client."""
        return (
            f"AsyncAPIClient("
            f"alert={bool(self.alert_endpoint)}, "
            f"retries={self.retry_attempts})"
        )
