"""
Client side of the contact flow.

ContactForm holds the three inputs, validates them with the same rules the
server applies, posts them to the contact endpoint and exposes a notification
that moves idle -> pending -> success | error -> idle. The return to idle is a
cancellable timer owned by the form.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from logging_config import LoggingConfig
from validation import MessageValidationError, validate_message

logger = LoggingConfig.get_logger(__name__)

CONTACT_ENDPOINT = "/api/contact"
DISMISS_DELAY_SECONDS = 3.0
FALLBACK_ERROR = "Something went wrong!"


class NotificationStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    status: NotificationStatus


class ContactForm:
    def __init__(self, endpoint: str = CONTACT_ENDPOINT, http_client: Optional[httpx.AsyncClient] = None,
                 dismiss_delay: float = DISMISS_DELAY_SECONDS, base_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        if http_client is None and base_url is None and not httpx.URL(endpoint).is_absolute_url:
            raise ValueError(f"Relative endpoint {endpoint!r} needs a base_url or an http_client")
        self.endpoint = endpoint
        self.dismiss_delay = dismiss_delay
        self.base_url = base_url
        self._transport = transport
        self._client = http_client
        self._owns_client = http_client is None
        self._closed = False

        self.name = ""
        self.email = ""
        self.message = ""

        self.status = NotificationStatus.IDLE
        self.error_message: Optional[str] = None
        self.validation_error: Optional[MessageValidationError] = None
        self._dismiss_task: Optional[asyncio.Task] = None

    @property
    def notification(self) -> Optional[Notification]:
        if self.status is NotificationStatus.PENDING:
            return Notification("Sending message...", "Your message is on its way!", self.status)
        if self.status is NotificationStatus.SUCCESS:
            return Notification("Success!", "Message sent successfully!", self.status)
        if self.status is NotificationStatus.ERROR:
            return Notification("Error!", self.error_message or FALLBACK_ERROR, self.status)
        return None

    @property
    def is_pending(self) -> bool:
        return self.status is NotificationStatus.PENDING

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url or "", transport=self._transport)
        return self._client

    async def submit(self) -> NotificationStatus:
        """Validate and send the form once. Returns the resulting status."""
        if self._closed:
            logger.debug("Submission ignored, the form is closed")
            return self.status
        if self.is_pending:
            logger.debug("Submission ignored, a request is already pending")
            return self.status

        try:
            validate_message(self.name, self.email, self.message)
        except MessageValidationError as e:
            self.validation_error = e
            logger.debug("Contact form rejected: %s", e.kind.value)
            return self.status
        self.validation_error = None

        self._cancel_dismiss()
        self.status = NotificationStatus.PENDING
        self.error_message = None

        payload = {"email": self.email, "name": self.name, "message": self.message}
        try:
            response = await self._http().post(self.endpoint, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Contact request failed: %s", e)
            self._finish(NotificationStatus.ERROR, FALLBACK_ERROR)
            return self.status
        else:
            if response.is_success:
                self.name = self.email = self.message = ""
                self._finish(NotificationStatus.SUCCESS)
            else:
                self._finish(NotificationStatus.ERROR, _error_text(response))
        finally:
            # cancelled or failed unexpectedly: never leave the form stuck in pending
            if self.is_pending:
                self.status = NotificationStatus.IDLE
        logger.info("Contact submission finished with %s (%d)", self.status.value, response.status_code)
        return self.status

    def _finish(self, status: NotificationStatus, error_message: Optional[str] = None):
        self.status = status
        self.error_message = error_message
        if self._closed:
            return
        self._dismiss_task = asyncio.get_running_loop().create_task(self._dismiss_later())

    async def _dismiss_later(self):
        await asyncio.sleep(self.dismiss_delay)
        self.status = NotificationStatus.IDLE
        self.error_message = None
        self._dismiss_task = None

    def _cancel_dismiss(self):
        if self._dismiss_task is not None:
            self._dismiss_task.cancel()
            self._dismiss_task = None

    async def aclose(self):
        self._closed = True
        self._cancel_dismiss()
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


def _error_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return FALLBACK_ERROR
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return FALLBACK_ERROR
