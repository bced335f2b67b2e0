"""
Tests for the LLM provider layer and the embedding client.

SDK clients are injected as Mocks; no network calls are made.
"""

import os
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from google.genai import errors as genai_errors

from aeo_guru.embed.embeddings import EmbeddingClient, EmbeddingError
from aeo_guru.llm import (
    GenerationConfig,
    LLMProvider,
    get_client,
)
from aeo_guru.llm.base import strip_code_fences
from aeo_guru.llm.claude import ClaudeClient
from aeo_guru.llm.config import get_default_model, get_preset_model, resolve_model_name
from aeo_guru.llm.gemini import GeminiClient, build_genai_client


def gemini_response(text):
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(finish_reason="STOP")],
        usage_metadata=SimpleNamespace(prompt_token_count=10, candidates_token_count=5),
    )


class TestModelConfig:

    def test_aliases(self):
        assert resolve_model_name("gemini") == "gemini-2.5-flash"
        assert resolve_model_name("models/gemini-2.5-pro") == "gemini-2.5-pro"
        assert resolve_model_name("haiku") == "claude-haiku-4-5"

    def test_presets(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_preset_model("reasoning") == "gemini-2.5-pro"
            assert get_preset_model("fast") == "gemini-2.5-flash"

    def test_preset_env_override(self):
        with patch.dict(os.environ, {"GOOGLE_GENAI_FAST_MODEL": "sonnet"}, clear=True):
            assert get_preset_model("fast") == "claude-sonnet-4-5"

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            get_preset_model("creative")

    def test_default_model_from_env(self):
        with patch.dict(os.environ, {"LLM_MODEL": "gemini-flash"}, clear=True):
            assert get_default_model() == "gemini-2.5-flash"
        with patch.dict(os.environ, {"LLM_PROVIDER": "claude"}, clear=True):
            assert get_default_model() == "claude-haiku-4-5"


class TestGetClient:

    def test_model_wins_over_preset(self):
        client = get_client(model="haiku", preset="fast", project_id="p")
        assert isinstance(client, ClaudeClient)
        assert client.provider == LLMProvider.CLAUDE

    def test_preset(self):
        with patch.dict(os.environ, {}, clear=True):
            client = get_client(preset="structured")
        assert isinstance(client, GeminiClient)
        assert client.model_id == "gemini-2.5-flash"

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown model"):
            get_client(model="gpt-4")


class TestBuildGenaiClient:

    @patch("aeo_guru.llm.gemini.genai.Client")
    def test_api_key(self, mock_client):
        with patch.dict(os.environ, {}, clear=True):
            build_genai_client(api_key="secret")
        mock_client.assert_called_once_with(api_key="secret")

    @patch("aeo_guru.llm.gemini.genai.Client")
    def test_vertex(self, mock_client):
        with patch.dict(os.environ, {"GCP_PROJECT": "proj"}, clear=True):
            build_genai_client()
        mock_client.assert_called_once_with(vertexai=True, project="proj", location="europe-west4")

    def test_missing_credentials(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Missing Google credentials"):
                build_genai_client()


class TestGeminiClient:

    def test_generate(self):
        sdk = Mock()
        sdk.models.generate_content.return_value = gemini_response("Hello")
        client = GeminiClient(client=sdk)

        response = client.generate("Hi", GenerationConfig(temperature=0.1), system_prompt="Be brief")

        assert response.text == "Hello"
        assert response.input_tokens == 10
        _, kwargs = sdk.models.generate_content.call_args
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"].temperature == 0.1
        assert kwargs["config"].system_instruction == "Be brief"

    def test_generate_json_strips_fences(self):
        sdk = Mock()
        sdk.models.generate_content.return_value = gemini_response('```json\n{"label": "x"}\n```')
        client = GeminiClient(client=sdk)

        assert client.generate_json("Hi") == {"label": "x"}
        config = sdk.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    def test_generate_json_rejects_non_object(self):
        sdk = Mock()
        sdk.models.generate_content.return_value = gemini_response("[1, 2]")
        with pytest.raises(ValueError, match="Expected a JSON object"):
            GeminiClient(client=sdk).generate_json("Hi")

    @patch("aeo_guru.llm.gemini.time.sleep")
    def test_retries_rate_limits(self, mock_sleep):
        sdk = Mock()
        sdk.models.generate_content.side_effect = [Exception("429 quota exceeded"), gemini_response("ok")]

        assert GeminiClient(client=sdk).generate_text("Hi") == "ok"
        mock_sleep.assert_called_once_with(1.0)

    def test_non_retriable_error_raises(self):
        sdk = Mock()
        sdk.models.generate_content.side_effect = Exception("permission denied")
        with pytest.raises(Exception, match="permission denied"):
            GeminiClient(client=sdk).generate("Hi")
        assert sdk.models.generate_content.call_count == 1

    def test_empty_response_raises(self):
        sdk = Mock()
        sdk.models.generate_content.return_value = gemini_response("  ")
        with pytest.raises(ValueError, match="Empty response"):
            GeminiClient(client=sdk).generate("Hi")


class TestClaudeClient:

    def test_generate(self):
        sdk = Mock()
        sdk.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text='{"ok": true}')],
            usage=SimpleNamespace(input_tokens=3, output_tokens=4),
            stop_reason="end_turn",
        )
        client = ClaudeClient(project_id="proj", client=sdk)

        assert client.generate_json("Hi", system_prompt="JSON only") == {"ok": True}
        _, kwargs = sdk.messages.create.call_args
        assert kwargs["system"] == "JSON only"
        assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]

    def test_initialize_requires_project(self):
        with patch.dict(os.environ, {}, clear=True):
            client = ClaudeClient()
            with pytest.raises(ValueError, match="GCP_PROJECT"):
                client.initialize()


class TestStripCodeFences:

    def test_variants(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestEmbeddingClient:

    def make_sdk(self):
        sdk = Mock()
        sdk.models.embed_content.side_effect = lambda model, contents, config: SimpleNamespace(
            embeddings=[SimpleNamespace(values=[float(len(text)), 1.0]) for text in contents]
        )
        return sdk

    def test_requires_initialize(self):
        with pytest.raises(EmbeddingError):
            EmbeddingClient().embed_texts(["hello"])

    def test_batches_preserve_order(self):
        sdk = self.make_sdk()
        client = EmbeddingClient(batch_size=2, client=sdk)

        vectors = client.embed_texts(["a", "bb", "ccc"])

        assert vectors == [[1.0, 1.0], [2.0, 1.0], [3.0, 1.0]]
        assert sdk.models.embed_content.call_count == 2
        config = sdk.models.embed_content.call_args.kwargs["config"]
        assert config.output_dimensionality == 768

    def test_empty_input(self):
        assert EmbeddingClient(client=Mock()).embed_texts([]) == []

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            EmbeddingClient(batch_size=0)

    @patch("aeo_guru.embed.embeddings.time.sleep")
    def test_retries_server_errors(self, mock_sleep):
        sdk = Mock()
        error = genai_errors.APIError(503, {"error": {"message": "unavailable"}})
        sdk.models.embed_content.side_effect = [
            error,
            SimpleNamespace(embeddings=[SimpleNamespace(values=[0.1, 0.2])]),
        ]

        assert EmbeddingClient(client=sdk).embed_text("hi") == [0.1, 0.2]
        mock_sleep.assert_called_once()

    def test_client_error_not_retried(self):
        sdk = Mock()
        sdk.models.embed_content.side_effect = genai_errors.APIError(400, {"error": {"message": "bad"}})
        with pytest.raises(EmbeddingError):
            EmbeddingClient(client=sdk).embed_text("hi")
        assert sdk.models.embed_content.call_count == 1

    def test_count_mismatch(self):
        sdk = Mock()
        sdk.models.embed_content.return_value = SimpleNamespace(embeddings=[])
        with pytest.raises(EmbeddingError, match="Expected 1 embeddings"):
            EmbeddingClient(client=sdk).embed_text("hi")
