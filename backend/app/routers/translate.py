"""
Text translation router.

Endpoints:
  GET  /   live check: one tiny call to the model
  POST /   translate Korean <-> English, direction detected from the text
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.errors import error, upstream_error
from app.models.translation import ScriptLabel, TranslateRequest
from app.services import translator
from app.services.script_classifier import classify

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_TEXT_LENGTH = 1000


@router.get("")
async def translate_health():
    """Confirm the translation model answers. Returns 503 on any failure."""
    try:
        reply = translator.ping()
    except Exception as e:
        logger.error(f"Translation health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "Error",
                "message": "Translation service is not available",
                "error": str(e),
            },
        )

    return {
        "status": "OK",
        "message": "Translation service is working",
        "test_response": reply,
        "model": translator.MODEL,
    }


@router.post("")
async def translate(request: TranslateRequest):
    """
    Translate text between Korean and English.

    Text containing any Hangul is translated to English; anything else is
    translated to Korean.
    """
    text = request.text
    if not isinstance(text, str) or not text.strip():
        raise error(400, "Text is required and must be a string", "invalid_input")

    if len(text) > MAX_TEXT_LENGTH:
        raise error(
            400,
            f"Text must be less than {MAX_TEXT_LENGTH} characters",
            "text_too_long",
        )

    source_label = classify(text.strip())
    target_label = source_label.opposite

    logger.info(
        f"Translation request: {source_label.language_name} -> {target_label.language_name}"
    )
    logger.debug(f"Input text: {text[:50]}...")

    try:
        translated_text, token_usage = translator.translate_text(text, source_label)
    except Exception as e:
        logger.error(f"Translation failed: {e}", exc_info=True)
        raise upstream_error(e, "An error occurred during translation", "translation_failed")

    return {
        "success": True,
        "data": {
            "original_text": text,
            "translated_text": translated_text,
            "source_language": source_label.language_name,
            "target_language": target_label.language_name,
            "detected_korean": source_label is ScriptLabel.HANGUL,
        },
        "meta": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": translator.MODEL,
            "tokens_used": token_usage["total_tokens"],
        },
    }
