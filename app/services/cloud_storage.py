"""Cloudinary client: signed upload and destroy of image binaries over the REST API."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Parameters Cloudinary excludes from the signature string.
UNSIGNED_PARAMS = frozenset({"file", "cloud_name", "resource_type", "api_key"})


class CloudStorageNotConfiguredError(Exception):
    """Raised when an upload or delete is attempted without Cloudinary credentials."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CloudStorageError(Exception):
    """Raised when Cloudinary is unreachable, times out, or returns an unusable response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.cause = cause
        super().__init__(message)


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str


def _is_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    return bool(settings.CLOUDINARY_API_SECRET.get_secret_value().strip())


def _require_configured(settings: Settings) -> None:
    if not _is_configured(settings):
        raise CloudStorageNotConfiguredError(
            "Cloudinary is not configured. Set CLOUDINARY_CLOUD_NAME, "
            "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
        )


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Compute the Cloudinary request signature.

    SHA-1 hex digest of the sorted ``key=value`` pairs joined by ``&`` with the
    API secret appended. Empty values and unsigned parameters are skipped.
    """
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if key not in UNSIGNED_PARAMS and params[key] not in (None, "")
    )
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def _signed_form(params: dict[str, Any], settings: Settings) -> dict[str, str]:
    form = {k: str(v) for k, v in params.items() if v not in (None, "")}
    form["timestamp"] = str(int(time.time()))
    secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
    form["signature"] = sign_params(form, secret)
    form["api_key"] = settings.CLOUDINARY_API_KEY
    return form


def _endpoint(settings: Settings, action: str) -> str:
    return f"{settings.CLOUDINARY_BASE_URL}/{settings.CLOUDINARY_CLOUD_NAME}/image/{action}"


async def _post(
    url: str,
    action: str,
    settings: Settings,
    data: dict[str, str],
    files: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """POST a signed form to Cloudinary and return the parsed JSON body."""
    timeout = httpx.Timeout(settings.CLOUDINARY_REQUEST_TIMEOUT_SEC)
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, data=data, files=files)
    except httpx.TimeoutException as e:
        logger.info(
            "Cloudinary request failed",
            extra={
                "cloud_action": action,
                "cloud_latency_seconds": time.perf_counter() - start,
                "status": "timeout",
            },
        )
        raise CloudStorageError("Cloudinary request timed out.", cause=e) from e
    except httpx.HTTPError as e:
        logger.info(
            "Cloudinary request failed",
            extra={
                "cloud_action": action,
                "cloud_latency_seconds": time.perf_counter() - start,
                "status": "error",
            },
        )
        raise CloudStorageError("Cloudinary is unreachable.", cause=e) from e

    logger.info(
        "Cloudinary request completed",
        extra={
            "cloud_action": action,
            "cloud_latency_seconds": time.perf_counter() - start,
            "status_code": response.status_code,
        },
    )
    if response.status_code != 200:
        raise CloudStorageError(
            f"Cloudinary returned status {response.status_code}.",
            status_code=response.status_code,
        )
    try:
        body = response.json()
    except json.JSONDecodeError as e:
        raise CloudStorageError(
            "Cloudinary response body is not valid JSON.", cause=e
        ) from e
    if not isinstance(body, dict):
        raise CloudStorageError("Cloudinary response is not a JSON object.")
    return body


async def upload_image(
    content: bytes,
    filename: str,
    content_type: str,
    settings: Settings,
) -> UploadedImage:
    """
    Upload image bytes and return the hosted URL and public id.

    Raises CloudStorageNotConfiguredError if credentials are missing, and
    CloudStorageError on transport failure or an unexpected response.
    """
    _require_configured(settings)
    form = _signed_form({"folder": settings.CLOUDINARY_FOLDER}, settings)
    body = await _post(
        _endpoint(settings, "upload"),
        "upload",
        settings,
        data=form,
        files={"file": (filename, content, content_type)},
    )
    url = body.get("secure_url") or body.get("url")
    public_id = body.get("public_id")
    if not url or not public_id:
        raise CloudStorageError(
            "Cloudinary upload response missing 'secure_url' or 'public_id'."
        )
    return UploadedImage(url=url, public_id=public_id)


async def delete_image(public_id: str, settings: Settings) -> bool:
    """
    Destroy an uploaded image by public id.

    Returns True when Cloudinary deleted it and False when it was already gone.
    """
    _require_configured(settings)
    form = _signed_form({"public_id": public_id}, settings)
    body = await _post(_endpoint(settings, "destroy"), "destroy", settings, data=form)
    result = body.get("result")
    if result == "ok":
        return True
    if result == "not found":
        logger.warning("Cloudinary asset already gone: public_id=%s", public_id)
        return False
    raise CloudStorageError(f"Cloudinary destroy returned unexpected result {result!r}.")
