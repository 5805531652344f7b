"""
Translation service.
Wraps the Claude calls used for text translation and image OCR + translation.

SDK exceptions (authentication, rate limits, exhausted credit) are not caught
here; the routers map them to HTTP responses.
"""

import os
from typing import Tuple

import anthropic
from dotenv import load_dotenv

from app.models.translation import ScriptLabel

load_dotenv()

# Model configuration
MODEL = "claude-sonnet-4-5-20250929"
TEXT_MAX_TOKENS = 1000
VISION_MAX_TOKENS = 1500
PING_MAX_TOKENS = 10
TEMPERATURE = 0.3

SYSTEM_PROMPT = (
    "당신은 전문 번역가입니다. 한국어와 영어 사이의 정확하고 자연스러운 번역을 제공합니다. "
    "문맥과 뉘앙스를 고려하여 번역하세요."
)

TEXT_PROMPT = """\
다음 {source} 텍스트를 자연스러운 {target}로 번역해주세요. 문맥과 뉘앙스를 고려하여 번역하세요.

텍스트: "{text}"

번역:"""

VISION_PROMPT = """\
이미지에서 텍스트를 추출하고 번역해주세요:

1. 먼저 이미지의 모든 텍스트를 정확히 추출하세요
2. 추출된 텍스트가 한국어라면 영어로, 영어라면 한국어로 번역하세요
3. 응답 형식:
   원본 텍스트: [추출된 텍스트]
   번역: [번역된 텍스트]

만약 텍스트가 없다면 "텍스트 없음"이라고 응답해주세요."""

PING_PROMPT = 'Say "OK" in Korean'

_DATA_URL_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


def _client(api_key: str = None) -> anthropic.Anthropic:
    if api_key is None:
        api_key = os.getenv("ANTHROPIC_API_KEY")
    return anthropic.Anthropic(api_key=api_key)


def _token_usage(response) -> dict:
    return {
        "input_tokens": response.usage.input_tokens,
        "output_tokens": response.usage.output_tokens,
        "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
    }


def build_text_prompt(text: str, source_label: ScriptLabel) -> str:
    """Build the user prompt for translating ``text`` out of ``source_label``."""
    if source_label is ScriptLabel.HANGUL:
        source, target = "한국어", "영어"
    else:
        source, target = "영어", "한국어"
    return TEXT_PROMPT.format(source=source, target=target, text=text)


def image_block_from_data_url(data_url: str) -> dict:
    """
    Convert ``data:<media_type>;base64,<payload>`` into a Claude image block.

    Raises:
        ValueError: if the string is not a base64 data URL.
    """
    if not data_url.startswith(_DATA_URL_PREFIX) or _BASE64_MARKER not in data_url:
        raise ValueError("Expected a base64 data URL")

    media_type, payload = data_url[len(_DATA_URL_PREFIX):].split(_BASE64_MARKER, 1)
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": payload},
    }


def translate_text(
    text: str,
    source_label: ScriptLabel,
    api_key: str = None,
) -> Tuple[str, dict]:
    """
    Translate ``text`` between Korean and English.

    Returns:
        (translated_text, token_usage)
    """
    client = _client(api_key)

    response = client.messages.create(
        model=MODEL,
        max_tokens=TEXT_MAX_TOKENS,
        temperature=TEMPERATURE,
        system=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": build_text_prompt(text, source_label)}],
    )

    return response.content[0].text.strip(), _token_usage(response)


def extract_and_translate_image(data_url: str, api_key: str = None) -> Tuple[str, dict]:
    """
    Ask Claude to read the text in an image and translate it in one call.

    The raw reply is returned untouched; see app.services.response_parser.

    Returns:
        (response_text, token_usage)
    """
    client = _client(api_key)

    response = client.messages.create(
        model=MODEL,
        max_tokens=VISION_MAX_TOKENS,
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": VISION_PROMPT},
                    image_block_from_data_url(data_url),
                ],
            }
        ],
    )

    return response.content[0].text.strip(), _token_usage(response)


def ping(api_key: str = None) -> str:
    """Make a minimal call to confirm the API key and model are usable."""
    client = _client(api_key)

    response = client.messages.create(
        model=MODEL,
        max_tokens=PING_MAX_TOKENS,
        messages=[{"role": "user", "content": PING_PROMPT}],
    )

    return response.content[0].text.strip()
