import asyncio
from types import SimpleNamespace

import pytest

from clients import groq_client
from clients.gemini_client import GeminiClient, InlineAttachment, MultimodalResponse
from clients.generative_client import GenerativeClient
from clients.s3_client import build_s3_key, get_content_type, sanitize_filename
from utils.exceptions import ValidationError
from utils.model_config import ModelConfig, ModelProvider, ModelRole


class RecordingGemini:
    def __init__(self):
        self.calls = []

    async def generate(self, prompt, model_config, attachment=None, want_image=False):
        self.calls.append((prompt, model_config["model"], attachment, want_image))
        return MultimodalResponse(text="from gemini")


def test_role_defaults_resolve_to_known_models():
    for role in ModelRole:
        assert ModelConfig.for_role(role)["model"]
    assert ModelConfig.for_role(ModelRole.IMAGE)["supports_images"] is True


def test_role_model_can_be_overridden(monkeypatch):
    monkeypatch.setenv("MODEL_PLANNER", "llama-4-scout")
    config = ModelConfig.for_role(ModelRole.PLANNER)
    assert config["provider"] == ModelProvider.GROQ


def test_unknown_model_override_is_rejected(monkeypatch):
    monkeypatch.setenv("MODEL_CARD_TEXT", "gpt-2")
    with pytest.raises(ValueError):
        ModelConfig.for_role(ModelRole.CARD_TEXT)


def test_text_routed_to_gemini():
    gemini = RecordingGemini()
    text = asyncio.run(GenerativeClient(gemini=gemini).generate_text("hello", role=ModelRole.CARD_TEXT))
    assert text == "from gemini"
    assert gemini.calls[0][1] == "gemini-2.5-flash"


def test_text_routed_to_groq(monkeypatch):
    seen = {}

    async def fake_generate_text(prompt, model_config):
        seen["model"] = model_config["model"]
        return "from groq"

    monkeypatch.setenv("MODEL_SEGMENTATION", "llama-4-maverick")
    monkeypatch.setattr(groq_client, "generate_text", fake_generate_text)
    gemini = RecordingGemini()

    text = asyncio.run(GenerativeClient(gemini=gemini).generate_text("split", role=ModelRole.SEGMENTATION))

    assert text == "from groq"
    assert seen["model"].startswith("meta-llama/")
    assert gemini.calls == []


def test_multimodal_requires_gemini_model(monkeypatch):
    monkeypatch.setenv("MODEL_EXTRACTION", "llama-4-scout")
    with pytest.raises(ValidationError):
        asyncio.run(GenerativeClient(gemini=RecordingGemini()).generate_multimodal("read", role=ModelRole.EXTRACTION))


def test_multimodal_passes_attachment_and_image_flag():
    gemini = RecordingGemini()
    attachment = InlineAttachment(data=b"%PDF", mime_type="application/pdf")
    asyncio.run(GenerativeClient(gemini=gemini).generate_multimodal(
        "draw", role=ModelRole.IMAGE, attachment=attachment, want_image=True,
    ))
    prompt, model, sent_attachment, want_image = gemini.calls[0]
    assert model == "gemini-2.5-flash-image"
    assert sent_attachment.data == b"%PDF"
    assert want_image is True


def test_gemini_response_collects_text_and_first_image():
    parts = [
        SimpleNamespace(text="Here is ", inline_data=None),
        SimpleNamespace(text=None, inline_data=SimpleNamespace(data=b"img1", mime_type="image/png")),
        SimpleNamespace(text="your image", inline_data=SimpleNamespace(data=b"img2", mime_type="image/jpeg")),
    ]
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])

    result = GeminiClient._to_multimodal_response(response)

    assert result.text == "Here is your image"
    assert result.asset == b"img1"
    assert result.asset_mime_type == "image/png"


def test_gemini_response_without_candidates_is_empty():
    result = GeminiClient._to_multimodal_response(SimpleNamespace(candidates=None))
    assert result.text == "" and result.asset is None


def test_s3_key_sanitizes_filename():
    assert sanitize_filename("../My Notes (v2).pdf") == "My_Notes_v2_.pdf"
    assert build_s3_key("abc", "week 1.pdf") == "documents/abc/week_1.pdf"
    assert sanitize_filename("") == "document"


def test_content_type_from_extension():
    assert get_content_type("slides.PPTX").endswith("presentationml.presentation")
    assert get_content_type("notes") == "application/octet-stream"
