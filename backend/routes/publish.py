"""Publishing API: copy a clip to object storage, text a link to a phone."""

import logging

from fastapi import APIRouter
from pydantic import Field

from models import CamelModel
from services.gcs import publish_from_url
from services.sms import send_sms

router = APIRouter(prefix="/publish", tags=["publish"])
logger = logging.getLogger(__name__)


class StoragePublishRequest(CamelModel):
    source_url: str = Field(min_length=1)
    target_file_name: str | None = None
    content_type: str | None = None


class StoragePublishResponse(CamelModel):
    success: bool = True
    public_url: str
    object_key: str


class SmsRequest(CamelModel):
    to_phone_number: str
    message_body: str


class SmsResponse(CamelModel):
    success: bool = True
    message_sid: str
    status_message: str


@router.post("/storage", response_model=StoragePublishResponse)
async def publish_to_storage(body: StoragePublishRequest) -> StoragePublishResponse:
    published = await publish_from_url(
        body.source_url,
        target_file_name=body.target_file_name,
        content_type=body.content_type,
    )
    logger.info("[publish] Stored %s (%d bytes)", published.object_key, published.size)
    return StoragePublishResponse(public_url=published.public_url, object_key=published.object_key)


@router.post("/sms", response_model=SmsResponse)
async def send_link_by_sms(body: SmsRequest) -> SmsResponse:
    sid = await send_sms(body.to_phone_number, body.message_body)
    return SmsResponse(message_sid=sid, status_message="SMS with video URL sent successfully.")
