"""Tests for model adapters, prompts and the registry (no network)."""

import json
from types import SimpleNamespace

import pytest

from handnote_extractor.engine import ModelRegistry
from handnote_extractor.engine.errors import ProviderCallError, ProviderConfigurationError
from handnote_extractor.engine.gemini import GeminiAdapter
from handnote_extractor.engine.mock import MOCK_OCR_TEXT, MockAdapter
from handnote_extractor.engine.openai_chat import AzureOpenAIAdapter, OpenRouterAdapter
from handnote_extractor.engine.prompts import (
    CLASSIFICATION_PROMPT,
    CLEANED_TEXT_PLACEHOLDER,
    ENTITY_EXTRACTION_PROMPT,
    LABS_EXTRACTION_PROMPT,
    OCR_PROMPT,
    RAW_OCR_PLACEHOLDER,
    fill_template,
)
from handnote_extractor.schemas.config import MEDGEMMA, ModelSpec, PipelineConfig


def test_prompt_templates_carry_their_placeholders():
    assert RAW_OCR_PLACEHOLDER in CLASSIFICATION_PROMPT
    assert CLEANED_TEXT_PLACEHOLDER in ENTITY_EXTRACTION_PROMPT
    assert CLEANED_TEXT_PLACEHOLDER in LABS_EXTRACTION_PROMPT
    assert "{{" not in OCR_PROMPT
    for prompt, field in (
        (OCR_PROMPT, "ocr_confidence"),
        (CLASSIFICATION_PROMPT, "classification_confidence"),
        (ENTITY_EXTRACTION_PROMPT, "overall_extraction_confidence"),
        (LABS_EXTRACTION_PROMPT, "overall_labs_confidence"),
    ):
        assert field in prompt
        assert "JSON" in prompt


def test_fill_template_is_literal():
    text = "value with {{CLEANED_OCR_TEXT}} and $1 \\n"
    filled = fill_template("A {{RAW_OCR_TEXT}} B", RAW_OCR_PLACEHOLDER, text)
    assert filled == f"A {text} B"


def test_fill_template_requires_placeholder():
    with pytest.raises(ValueError):
        fill_template("no placeholder here", RAW_OCR_PLACEHOLDER, "x")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "prompt, field",
    [
        (OCR_PROMPT, "ocr_confidence"),
        (CLASSIFICATION_PROMPT, "classification_confidence"),
        (ENTITY_EXTRACTION_PROMPT, "overall_extraction_confidence"),
        (LABS_EXTRACTION_PROMPT, "overall_labs_confidence"),
    ],
)
async def test_mock_adapter_answers_each_stage(prompt, field):
    adapter = MockAdapter("mock", "Mock", confidence=0.81)
    response = await adapter.invoke(prompt, "text")
    data = json.loads(response.text)
    metadata = data.get("metadata", {})
    assert data.get(field, metadata.get(field)) == 0.81


@pytest.mark.asyncio
async def test_mock_ocr_returns_handwritten_text(image_payload):
    response = await MockAdapter("mock", "Mock").invoke(OCR_PROMPT, image_payload)
    assert json.loads(response.text)["raw_text"] == MOCK_OCR_TEXT


@pytest.mark.asyncio
async def test_gemini_without_key_raises_configuration_error():
    adapter = GeminiAdapter("gemini-3-flash-preview", "Gemini Flash", client=None)
    assert adapter.is_configured() is False
    with pytest.raises(ProviderConfigurationError, match="GEMINI_API_KEY"):
        await adapter.invoke(OCR_PROMPT, "text")


@pytest.mark.asyncio
@pytest.mark.parametrize("adapter_cls", [AzureOpenAIAdapter, OpenRouterAdapter])
async def test_openai_style_without_key_raises_configuration_error(adapter_cls):
    adapter = adapter_cls("gpt-5-mini", "GPT", client=None)
    with pytest.raises(ProviderConfigurationError):
        await adapter.invoke(CLASSIFICATION_PROMPT, "text")


def test_azure_client_needs_key_and_endpoint():
    assert AzureOpenAIAdapter.build_client(None, "https://x.openai.azure.com/", "2024-12-01-preview") is None
    assert AzureOpenAIAdapter.build_client("key", None, "2024-12-01-preview") is None
    assert GeminiAdapter.build_client(None) is None
    assert OpenRouterAdapter.build_client("", "https://openrouter.ai/api/v1") is None


def test_openai_messages_for_image_and_text(image_payload):
    adapter = AzureOpenAIAdapter("gpt-4o", "Azure GPT-4o", client=None)
    [image_message] = adapter.build_messages("transcribe", image_payload)
    text_part, image_part = image_message["content"]
    assert text_part == {"type": "text", "text": "transcribe"}
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")

    system, user = adapter.build_messages("classify", "raw text")
    assert system == {"role": "system", "content": "classify"}
    assert user == {"role": "user", "content": "raw text"}


def test_registry_dry_run_serves_mock_pairs(dry_run_registry):
    adapter_a, adapter_b = dry_run_registry.stage_pair("ocr")
    assert isinstance(adapter_a, MockAdapter) and isinstance(adapter_b, MockAdapter)
    assert adapter_a.display_name == "Gemini Flash"
    assert adapter_b.display_name == "Azure GPT-4o"
    assert adapter_a.confidence > adapter_b.confidence
    assert dry_run_registry.configured_providers() == {"mock": True}


def test_registry_reuses_adapters_across_text_stages(config):
    registry = ModelRegistry(config)
    assert registry.stage_pair("classification") == registry.stage_pair("labs")
    adapter_a, adapter_b = registry.stage_pair("extraction")
    assert isinstance(adapter_a, GeminiAdapter)
    assert isinstance(adapter_b, AzureOpenAIAdapter)
    assert adapter_a.model == "gemini-3-pro-preview"
    assert adapter_b.model == "gpt-5-mini"


def test_registry_without_credentials_reports_unconfigured(config):
    registry = ModelRegistry(config)
    assert registry.configured_providers() == {
        "gemini": False,
        "azure_openai": False,
        "openrouter": False,
    }
    adapter_a, adapter_b = registry.stage_pair("ocr")
    assert not adapter_a.is_configured()
    assert not adapter_b.is_configured()


def test_registry_rejects_unknown_provider():
    spec = ModelSpec("carrier-pigeon", "v1", "Pigeon")
    registry = ModelRegistry(PipelineConfig(ocr_model_a=spec))
    with pytest.raises(ValueError):
        registry.stage_pair("ocr")


def test_registry_unknown_stage(config):
    with pytest.raises(KeyError):
        ModelRegistry(config).stage_pair("triage")


def test_medgemma_adapter_loads_lazily():
    pytest.importorskip("torch")
    config = PipelineConfig(ocr_model_a=ModelSpec(MEDGEMMA, "google/medgemma-1.5-4b-it", "MedGemma"))
    adapter_a, _ = ModelRegistry(config).stage_pair("ocr")
    assert adapter_a.provider == MEDGEMMA
    assert adapter_a.pipe is None


class RecordingGeminiClient:
    """Stands in for genai.Client; records generate_content kwargs."""

    def __init__(self, text='{"classification_confidence": 0.9}'):
        self.sent = []
        self.aio = SimpleNamespace(models=SimpleNamespace(generate_content=self._generate))
        self.text = text

    async def _generate(self, **kwargs):
        self.sent.append(kwargs)
        return SimpleNamespace(text=self.text, usage_metadata=None)


@pytest.mark.asyncio
async def test_gemini_text_stage_sends_note_once():
    note = "Hb 9.8 g/dL, WBC 11.2"
    client = RecordingGeminiClient()
    adapter = GeminiAdapter("gemini-3-pro-preview", "Gemini Pro", client=client)

    response = await adapter.invoke(fill_template(CLASSIFICATION_PROMPT, RAW_OCR_PLACEHOLDER, note), note)

    [kwargs] = client.sent
    assert kwargs["model"] == "gemini-3-pro-preview"
    [sent_prompt] = kwargs["contents"]
    assert sent_prompt.count(note) == 1
    assert response.text == client.text
    assert response.input_tokens is None


@pytest.mark.asyncio
async def test_gemini_image_is_sent_next_to_prompt(image_payload):
    client = RecordingGeminiClient('{"raw_text": "Rx", "ocr_confidence": 0.9}')
    adapter = GeminiAdapter("gemini-3-flash-preview", "Gemini Flash", client=client)
    await adapter.invoke(OCR_PROMPT, image_payload)
    prompt, part = client.sent[0]["contents"]
    assert prompt == OCR_PROMPT
    assert part.inline_data.data == image_payload.data
    assert part.inline_data.mime_type == "image/png"


def medgemma_adapter(monkeypatch, answer):
    pytest.importorskip("torch")
    from handnote_extractor.engine.medgemma import MedGemmaAdapter

    adapter = MedGemmaAdapter("google/medgemma-1.5-4b-it", "MedGemma", PipelineConfig())
    calls = []

    def fake_query(image, prompt):
        calls.append((image, prompt))
        if isinstance(answer, BaseException):
            raise answer
        return answer

    monkeypatch.setattr(adapter, "query", fake_query)
    return adapter, calls


@pytest.mark.asyncio
async def test_medgemma_image_branch_prepares_image(monkeypatch, image_payload):
    adapter, calls = medgemma_adapter(monkeypatch, '{"ocr_confidence": 0.8}')
    response = await adapter.invoke(OCR_PROMPT, image_payload)
    [(image, prompt)] = calls
    assert image.size == (896, 896)
    assert image.mode == "RGB"
    assert prompt == OCR_PROMPT
    assert response.text == '{"ocr_confidence": 0.8}'


@pytest.mark.asyncio
async def test_medgemma_text_branch_sends_prompt_only(monkeypatch):
    note = "c/o chest pain x2d"
    adapter, calls = medgemma_adapter(monkeypatch, "{}")
    prompt = fill_template(ENTITY_EXTRACTION_PROMPT, CLEANED_TEXT_PLACEHOLDER, note)
    await adapter.invoke(prompt, note)
    [(image, sent_prompt)] = calls
    assert image is None
    assert sent_prompt == prompt
    assert sent_prompt.count(note) == 1


@pytest.mark.asyncio
async def test_medgemma_runtime_error_becomes_call_error(monkeypatch):
    adapter, _ = medgemma_adapter(monkeypatch, RuntimeError("CUDA out of memory"))
    with pytest.raises(ProviderCallError, match="CUDA out of memory") as info:
        await adapter.invoke(CLASSIFICATION_PROMPT, "text")
    assert info.value.provider == "medgemma"
