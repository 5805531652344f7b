"""
Unit tests for the translation service with MOCKED Anthropic API.
These tests avoid real API calls and associated costs.
"""

import base64

import pytest
from unittest.mock import Mock, MagicMock

from app.models.translation import DecodedAttachment, ScriptLabel
from app.services.translator import (
    MODEL,
    SYSTEM_PROMPT,
    VISION_PROMPT,
    build_text_prompt,
    extract_and_translate_image,
    image_block_from_data_url,
    ping,
    translate_text,
)


def _mock_client(mocker, reply: str, input_tokens: int = 100, output_tokens: int = 20):
    """Patch anthropic.Anthropic so every call returns ``reply``."""
    mock_response = Mock()
    mock_response.content = [Mock(text=reply)]
    mock_response.usage = Mock(input_tokens=input_tokens, output_tokens=output_tokens)

    mock_client = MagicMock()
    mock_client.messages.create.return_value = mock_response

    mocker.patch("anthropic.Anthropic", return_value=mock_client)
    return mock_client


class TestBuildTextPrompt:
    """Tests for the direction-dependent translation prompt."""

    def test_korean_source_asks_for_english(self):
        prompt = build_text_prompt("안녕하세요", ScriptLabel.HANGUL)

        assert "다음 한국어 텍스트를 자연스러운 영어로 번역해주세요" in prompt
        assert '텍스트: "안녕하세요"' in prompt

    def test_other_source_asks_for_korean(self):
        prompt = build_text_prompt("Good morning", ScriptLabel.OTHER)

        assert "다음 영어 텍스트를 자연스러운 한국어로 번역해주세요" in prompt
        assert '텍스트: "Good morning"' in prompt

    def test_braces_in_text_are_kept(self):
        prompt = build_text_prompt("use {name} here", ScriptLabel.OTHER)

        assert "use {name} here" in prompt


class TestTranslateText:
    """Test text translation with mocked responses (no API costs)."""

    def test_returns_stripped_reply_and_usage(self, mocker):
        mock_client = _mock_client(mocker, "  Hello  \n", input_tokens=50, output_tokens=5)

        translated, token_usage = translate_text("안녕", ScriptLabel.HANGUL)

        assert translated == "Hello"
        assert token_usage == {"input_tokens": 50, "output_tokens": 5, "total_tokens": 55}
        mock_client.messages.create.assert_called_once()

    def test_request_parameters(self, mocker):
        mock_client = _mock_client(mocker, "안녕")

        translate_text("Hi", ScriptLabel.OTHER)

        call_kwargs = mock_client.messages.create.call_args[1]
        assert call_kwargs["model"] == MODEL
        assert call_kwargs["max_tokens"] == 1000
        assert call_kwargs["temperature"] == 0.3
        assert call_kwargs["system"] == SYSTEM_PROMPT
        assert call_kwargs["messages"][0]["role"] == "user"
        assert "Hi" in call_kwargs["messages"][0]["content"]

    def test_explicit_api_key_is_used(self, mocker):
        _mock_client(mocker, "ok")

        translate_text("Hi", ScriptLabel.OTHER, api_key="sk-test")

        import anthropic
        anthropic.Anthropic.assert_called_once_with(api_key="sk-test")

    def test_api_key_read_from_environment(self, mocker, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-from-env")
        _mock_client(mocker, "ok")

        translate_text("Hi", ScriptLabel.OTHER)

        import anthropic
        anthropic.Anthropic.assert_called_once_with(api_key="sk-from-env")

    def test_sdk_errors_propagate(self, mocker):
        mock_client = _mock_client(mocker, "unused")
        mock_client.messages.create.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            translate_text("Hi", ScriptLabel.OTHER)


class TestExtractAndTranslateImage:
    """Test the vision call with mocked responses."""

    def test_sends_prompt_and_image_block(self, mocker):
        mock_client = _mock_client(mocker, "원본 텍스트: 출구\n번역: Exit", 900, 30)
        attachment = DecodedAttachment(media_type="image/png", content=b"\x89PNG", size=4)

        reply, token_usage = extract_and_translate_image(attachment.to_data_url())

        assert reply == "원본 텍스트: 출구\n번역: Exit"
        assert token_usage["total_tokens"] == 930

        call_kwargs = mock_client.messages.create.call_args[1]
        assert call_kwargs["max_tokens"] == 1500
        content = call_kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": VISION_PROMPT}
        assert content[1] == {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": "image/png",
                "data": base64.b64encode(b"\x89PNG").decode("ascii"),
            },
        }


class TestImageBlockFromDataUrl:
    """Tests for converting a data URL into an image content block."""

    def test_splits_media_type_and_payload(self):
        block = image_block_from_data_url("data:image/jpeg;base64,AAEC")

        assert block["source"]["media_type"] == "image/jpeg"
        assert block["source"]["data"] == "AAEC"

    def test_rejects_plain_url(self):
        with pytest.raises(ValueError):
            image_block_from_data_url("https://example.com/cat.png")

    def test_rejects_non_base64_data_url(self):
        with pytest.raises(ValueError):
            image_block_from_data_url("data:image/png,rawbytes")


class TestPing:
    """Test the liveness probe."""

    def test_returns_reply(self, mocker):
        mock_client = _mock_client(mocker, " 네 \n")

        assert ping() == "네"
        assert mock_client.messages.create.call_args[1]["max_tokens"] == 10
