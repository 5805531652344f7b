"""
Image translation router.

Endpoints:
  GET  /   service info (formats, size limit, model)
  POST /   read text out of an uploaded image and translate it

The upload is a raw multipart/form-data body decoded by
app.services.multipart; no form parsing library is involved.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.errors import error, upstream_error
from app.models.translation import ScriptLabel
from app.services import translator
from app.services.attachment import (
    MAX_ATTACHMENT_BYTES,
    SUPPORTED_IMAGE_TYPES,
    NoAttachment,
    PayloadTooLarge,
    select,
)
from app.services.multipart import MalformedMultipart, decode, extract_boundary
from app.services.response_parser import parse

logger = logging.getLogger(__name__)

router = APIRouter()

# Room for boundaries, part headers and any non-image form fields
MULTIPART_OVERHEAD_BYTES = 64 * 1024


async def read_body_capped(request: Request, limit: int) -> bytes:
    """
    Buffer the request body, aborting once more than ``limit`` bytes arrive.

    Raises:
        PayloadTooLarge: the body is longer than ``limit``.
    """
    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLarge(received, MAX_ATTACHMENT_BYTES)
        chunks.append(chunk)
    return b"".join(chunks)


@router.get("")
async def vision_info():
    return {
        "status": "OK",
        "message": "Vision OCR service is ready",
        "supported_formats": SUPPORTED_IMAGE_TYPES,
        "max_file_size": f"{MAX_ATTACHMENT_BYTES // (1024 * 1024)}MB",
        "model": translator.MODEL,
    }


@router.post("")
async def translate_image(request: Request):
    """
    Extract the text in an uploaded image and translate it.

    Only the first image part of the upload is used. An image without text
    is a successful request with ``success: false`` and ``has_text: false``.
    """
    try:
        boundary = extract_boundary(request.headers.get("content-type", ""))
        buffer = await read_body_capped(request, MAX_ATTACHMENT_BYTES + MULTIPART_OVERHEAD_BYTES)
        attachment = select(decode(buffer, boundary))
    except (MalformedMultipart, NoAttachment, PayloadTooLarge) as e:
        logger.info(f"Rejected image upload: {e.error_code}")
        raise error(400, e.message, e.error_code)

    logger.info(f"Image OCR request: {attachment.media_type} ({attachment.size} bytes)")

    try:
        response_text, token_usage = translator.extract_and_translate_image(
            attachment.to_data_url()
        )
    except Exception as e:
        logger.error(f"Image translation failed: {e}", exc_info=True)
        raise upstream_error(
            e, "An error occurred during image translation", "image_translation_failed"
        )

    result = parse(response_text)

    if not result.has_text:
        return {
            "success": False,
            "message": "No text found in the image",
            "data": {
                "extracted_text": "",
                "translated_text": "",
                "has_text": False,
            },
        }

    return {
        "success": True,
        "data": {
            "extracted_text": result.original_text,
            "translated_text": result.translated_text,
            "has_text": True,
            "source_language": result.source_label.language_name,
            "target_language": result.target_label.language_name,
            "detected_korean": result.source_label is ScriptLabel.HANGUL,
        },
        "meta": {
            "filesize": attachment.size,
            "content_type": attachment.media_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": translator.MODEL,
            "tokens_used": token_usage["total_tokens"],
        },
    }
