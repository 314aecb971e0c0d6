# Path: core/discovery/http_clients.py
# Purpose: Provide HTTP implementations of the identification and badge generation collaborators.
# Layer: core/discovery.
# Details: Uses a requests Session with per-call timeouts; transient failures are retried with linear backoff.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import backoff
import requests

from config.settings import RemoteSettings
from core.errors import EncodingFailure, NotFound, ReadFailure, RemoteFailure, RemoteFailureKind
from core.models.domain import GeneratedBadge, IdentificationResult
from core.storage.encoding import decode_base64

from .base import AnimalIdentifier, BadgeGenerator, Photo

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_wait(delay: float = 1.0):
    """backoff wait generator yielding delay, 2 * delay, 3 * delay, ..."""

    # backoff primes the generator with send(None) before the first wait.
    yield
    attempt = 1
    while True:
        yield delay * attempt
        attempt += 1


def _not_retryable(exc: Exception) -> bool:
    return isinstance(exc, RemoteFailure) and not exc.retryable


def with_retries(func: Callable[..., T], max_tries: int, delay: float) -> Callable[..., T]:
    """Wrap func so timeouts and server errors are retried before surfacing."""

    return backoff.on_exception(
        linear_wait,
        RemoteFailure,
        max_tries=max_tries,
        giveup=_not_retryable,
        jitter=None,
        logger=logger,
        delay=delay,
    )(func)


def _request(service: str, send: Callable[[], requests.Response]) -> requests.Response:
    """Run one HTTP call and translate transport problems into RemoteFailure."""

    try:
        response = send()
    except requests.Timeout as exc:
        raise RemoteFailure(RemoteFailureKind.TIMEOUT, "request timed out", service=service) from exc
    except requests.RequestException as exc:
        raise RemoteFailure(RemoteFailureKind.SERVER_ERROR, f"request failed: {exc}", service=service) from exc

    if not response.ok:
        raise RemoteFailure(
            RemoteFailureKind.SERVER_ERROR,
            f"HTTP {response.status_code}: {response.text[:400]}",
            service=service,
        )
    return response


def _read_photo(photo: Photo) -> bytes:
    if isinstance(photo, (bytes, bytearray)):
        return bytes(photo)
    raw = str(photo)
    path = Path(raw[len("file://"):] if raw.startswith("file://") else raw)
    if not path.is_file():
        raise NotFound(f"Photo not found: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ReadFailure(f"Could not read photo {path}: {exc}") from exc


class HttpAnimalIdentifier(AnimalIdentifier):
    """Upload a photo as multipart form data and parse the name/description reply."""

    name = "http-identify"

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 60.0,
        max_tries: int = 3,
        retry_delay: float = 2.0,
        connection_check_timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_tries = max_tries
        self.retry_delay = retry_delay
        self.connection_check_timeout = connection_check_timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: RemoteSettings, session: Optional[requests.Session] = None) -> "HttpAnimalIdentifier":
        return cls(
            url=settings.identify_url,
            timeout=settings.upload_timeout,
            max_tries=settings.identify_max_tries,
            retry_delay=settings.identify_retry_delay,
            connection_check_timeout=settings.connection_check_timeout,
            session=session,
        )

    def identify(self, photo: Photo) -> IdentificationResult:
        if not self.url:
            raise RemoteFailure(RemoteFailureKind.SERVER_ERROR, "identification endpoint is not configured", service="identify")
        content = _read_photo(photo)
        response = with_retries(self._upload, self.max_tries, self.retry_delay)(content)
        return self._parse(response)

    def _upload(self, content: bytes) -> requests.Response:
        logger.debug("Uploading %d bytes to %s", len(content), self.url)
        files = {"image": ("animal.jpg", content, "image/jpeg")}
        return _request("identify", lambda: self.session.post(self.url, files=files, timeout=self.timeout))

    @staticmethod
    def _parse(response: requests.Response) -> IdentificationResult:
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFailure(RemoteFailureKind.MALFORMED_RESPONSE, "response is not JSON", service="identify") from exc

        data = payload.get("output", payload) if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise RemoteFailure(RemoteFailureKind.MALFORMED_RESPONSE, "unexpected response shape", service="identify")

        name = data.get("name")
        description = data.get("description")
        if not isinstance(name, str) or not name.strip() or not isinstance(description, str) or not description.strip():
            raise RemoteFailure(
                RemoteFailureKind.MALFORMED_RESPONSE,
                "response is missing the animal name or description",
                service="identify",
            )
        return IdentificationResult(name=name.strip(), description=description.strip())

    def check_connection(self) -> bool:
        if not self.url:
            return False
        try:
            return self.session.head(self.url, timeout=self.connection_check_timeout).ok
        except requests.RequestException as exc:
            logger.warning("Connection check failed: %s", exc)
            return False


class HttpBadgeGenerator(BadgeGenerator):
    """Request a badge image for a species name.

    Accepted replies: a raw binary body, JSON ``{"data": <base64>}``, or a
    Gemini-style ``candidates[0].content.parts[*].inlineData.data`` body,
    optionally wrapped in a one-element list. The JSON document itself is
    passed through as the badge's extra payload.
    """

    name = "http-generate"

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 30.0,
        max_tries: int = 3,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_tries = max_tries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: RemoteSettings, session: Optional[requests.Session] = None) -> "HttpBadgeGenerator":
        return cls(
            url=settings.generate_url,
            timeout=settings.request_timeout,
            max_tries=settings.generate_max_tries,
            retry_delay=settings.generate_retry_delay,
            session=session,
        )

    def generate(self, animal_name: str) -> GeneratedBadge:
        if not self.url:
            raise RemoteFailure(RemoteFailureKind.SERVER_ERROR, "generation endpoint is not configured", service="generate")
        response = with_retries(self._fetch, self.max_tries, self.retry_delay)(animal_name)
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return self._parse_json(response)

        if not response.content:
            raise RemoteFailure(RemoteFailureKind.MALFORMED_RESPONSE, "empty badge image response", service="generate")
        return GeneratedBadge(image_bytes=response.content)

    def _fetch(self, animal_name: str) -> requests.Response:
        logger.debug("Requesting badge for %s from %s", animal_name, self.url)
        return _request(
            "generate",
            lambda: self.session.get(self.url, params={"name": animal_name}, timeout=self.timeout),
        )

    @staticmethod
    def _parse_json(response: requests.Response) -> GeneratedBadge:
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFailure(RemoteFailureKind.MALFORMED_RESPONSE, "response is not JSON", service="generate") from exc

        document = payload[0] if isinstance(payload, list) and payload else payload
        encoded = _find_image_data(document)
        if not encoded:
            raise RemoteFailure(RemoteFailureKind.MALFORMED_RESPONSE, "response has no image data", service="generate")

        try:
            image_bytes = decode_base64(encoded)
        except EncodingFailure as exc:
            raise RemoteFailure(
                RemoteFailureKind.MALFORMED_RESPONSE, "image data is not valid base64", service="generate"
            ) from exc
        return GeneratedBadge(image_bytes=image_bytes, extra=document)


def _find_image_data(document: Any) -> Optional[str]:
    if not isinstance(document, dict):
        return None
    if isinstance(document.get("data"), str):
        return document["data"]

    candidates = document.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    for part in parts:
        inline = part.get("inlineData") if isinstance(part, dict) else None
        if isinstance(inline, dict) and isinstance(inline.get("data"), str) and inline["data"]:
            return inline["data"]
    return None
