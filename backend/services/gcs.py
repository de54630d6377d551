"""GCS publishing: copy a finished clip into the bucket and hand back a shareable URL."""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import httpx

from services.clip_extractor import DOWNLOAD_ROUTE, resolve_clip_path
from services.errors import InvalidInputError, TransportError, raise_for_vendor_status

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "clip-studio-media"
OBJECT_PREFIX = "video-clips"
SHARE_URL_EXPIRATION_SECONDS = 48 * 3600  # 48 hours
DEFAULT_CONTENT_TYPE = "application/octet-stream"
FETCH_TIMEOUT = httpx.Timeout(30.0, read=300.0)


@dataclass
class PublishedObject:
    object_key: str
    public_url: str
    content_type: str
    size: int


def get_bucket_name() -> str:
    """Bucket name from env or default."""
    return os.environ.get("GCS_BUCKET", "").strip() or DEFAULT_BUCKET


def upload_blob(
    blob_name: str,
    data: bytes,
    *,
    content_type: str = DEFAULT_CONTENT_TYPE,
    bucket_name: str | None = None,
) -> None:
    """
    Upload raw bytes to a GCS object.

    :param blob_name: Object path in bucket, e.g. "video-clips/<uuid>-clip_1.mp4"
    :param data: Raw bytes to upload
    :param bucket_name: GCS bucket; default from GCS_BUCKET env or "clip-studio-media"
    """
    from google.cloud import storage

    bucket_name = bucket_name or get_bucket_name()
    client = storage.Client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_name)
    blob.upload_from_string(data, content_type=content_type)


def generate_signed_url(
    blob_name: str,
    *,
    bucket_name: str | None = None,
    expiration_seconds: int = SHARE_URL_EXPIRATION_SECONDS,
    method: str = "GET",
) -> str:
    """
    Generate a V4 signed URL for a GCS object.

    Uses default credentials (GOOGLE_APPLICATION_CREDENTIALS or ADC).
    Returns a URL valid for expiration_seconds (default 48h for shared clips).
    """
    from google.cloud import storage

    bucket_name = bucket_name or get_bucket_name()
    client = storage.Client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_name)
    expiration = datetime.now(timezone.utc) + timedelta(seconds=expiration_seconds)
    return blob.generate_signed_url(
        expiration=expiration,
        method=method,
        version="v4",
    )


def build_object_key(source_name: str, content_type: str, target_file_name: str | None = None) -> str:
    """video-clips/<uuid4>-<name>, with .mp4 appended to extension-less mp4 payloads."""
    name = (target_file_name or source_name or "clip").strip().replace("/", "_") or "clip"
    key = f"{OBJECT_PREFIX}/{uuid.uuid4()}-{name}"
    if "." not in name and content_type == "video/mp4":
        key += ".mp4"
    return key


async def fetch_source(source_url: str, *, transport: httpx.AsyncBaseTransport | None = None) -> tuple[bytes, str, str]:
    """
    Load the clip bytes. Our own download URLs are read from the scratch dir,
    anything else must be an absolute http(s) URL.

    :return: (data, content type or "", file name derived from the URL)
    """
    parsed = urlparse(source_url)
    if parsed.path == DOWNLOAD_ROUTE and not parsed.scheme:
        file_name = (parse_qs(parsed.query).get("file") or [""])[0]
        path = resolve_clip_path(file_name)
        if not path.is_file():
            raise InvalidInputError("Source clip not found.", details=file_name)
        return path.read_bytes(), "video/mp4", file_name
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError("sourceUrl must be an absolute http(s) URL.", details=source_url)

    async with httpx.AsyncClient(transport=transport, timeout=FETCH_TIMEOUT, follow_redirects=True) as client:
        try:
            response = await client.get(source_url)
        except httpx.TransportError as exc:
            raise TransportError("Failed to fetch video from sourceUrl.", details=type(exc).__name__) from exc
    raise_for_vendor_status(response, vendor="Source")
    content_type = response.headers.get("content-type", "").split(";")[0].strip()
    file_name = parsed.path.rsplit("/", 1)[-1] or "clip"
    file_name = (parse_qs(parsed.query).get("file") or [file_name])[0]
    return response.content, content_type, file_name


async def publish_from_url(
    source_url: str,
    *,
    target_file_name: str | None = None,
    content_type: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PublishedObject:
    """Fetch the clip, store it under a random unique key and return a shareable URL."""
    if not source_url or not source_url.strip():
        raise InvalidInputError("Source URL (sourceUrl) is required.")
    logger.info("[gcs] Fetching clip from %s", source_url)
    data, fetched_type, source_name = await fetch_source(source_url.strip(), transport=transport)
    resolved_type = content_type or fetched_type or DEFAULT_CONTENT_TYPE
    object_key = build_object_key(source_name, resolved_type, target_file_name)
    bucket_name = get_bucket_name()
    logger.info("[gcs] Uploading %d bytes to gs://%s/%s", len(data), bucket_name, object_key)
    # google-cloud-storage is blocking; keep it off the event loop.
    await asyncio.to_thread(upload_blob, object_key, data, content_type=resolved_type, bucket_name=bucket_name)
    url = await asyncio.to_thread(generate_signed_url, object_key, bucket_name=bucket_name)
    return PublishedObject(object_key=object_key, public_url=url, content_type=resolved_type, size=len(data))
