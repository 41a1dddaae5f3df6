"""Tests for request, result and event models."""

import json

import pytest
from pydantic import ValidationError

from orchd.config import reload_settings
from orchd.events import StreamEvent
from orchd.models import ModelConfig, ModelResult, Request, Response


class TestRequest:
    """Test Request parsing."""

    def test_full_document(self):
        request = Request.model_validate_json(
            json.dumps(
                {
                    "prompt": "explain",
                    "code": "x = 1",
                    "models": [
                        {
                            "name": "sonnet",
                            "provider": "anthropic",
                            "model": "claude-3-5-sonnet-latest",
                            "api_key": "k",
                            "endpoint": "http://localhost",
                            "temperature": 0.2,
                            "max_tokens": 100,
                        }
                    ],
                    "timeout_seconds": 5,
                    "stream": True,
                }
            )
        )

        assert request.prompt == "explain"
        assert request.code == "x = 1"
        assert request.stream is True
        assert request.timeout_seconds == 5
        model = request.models[0]
        assert model.api_key == "k"
        assert model.max_tokens == 100
        assert model.temperature == 0.2

    def test_camel_case_aliases(self):
        request = Request.model_validate(
            {
                "models": [{"name": "a", "provider": "openai", "model": "m", "apiKey": "k", "maxTokens": 7}],
                "timeoutSeconds": 9,
            }
        )

        assert request.timeout_seconds == 9
        assert request.models[0].api_key == "k"
        assert request.models[0].max_tokens == 7

    def test_missing_fields_default_to_empty(self):
        request = Request.model_validate_json("{}")

        assert request.prompt == ""
        assert request.code == ""
        assert request.models == ()
        assert request.timeout_seconds == 0
        assert request.stream is False

    def test_null_fields_are_empty(self):
        request = Request.model_validate_json('{"prompt": null, "code": null, "models": null}')

        assert request.prompt == ""
        assert request.code == ""
        assert request.models == ()

    def test_unknown_fields_are_ignored(self):
        request = Request.model_validate_json('{"prompt": "p", "extra": 1, "models": [{"name": "a", "x": 2}]}')

        assert request.prompt == "p"
        assert request.models[0].name == "a"

    def test_wrong_type_is_rejected(self):
        with pytest.raises(ValidationError):
            Request.model_validate_json('{"models": "not a list"}')

    def test_request_is_frozen(self):
        request = Request(prompt="p")
        with pytest.raises(ValidationError):
            request.prompt = "other"

    def test_effective_timeout_uses_positive_value(self):
        assert Request(timeout_seconds=12).effective_timeout() == 12

    @pytest.mark.parametrize("timeout", [0, -5])
    def test_effective_timeout_defaults(self, timeout):
        assert Request(timeout_seconds=timeout).effective_timeout() == 30

    def test_default_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("ORCHD_DEFAULT_TIMEOUT_SECONDS", "7")
        reload_settings()

        assert Request().effective_timeout() == 7


class TestModelConfig:
    """Test ModelConfig tuning helpers."""

    def test_unset_tuning_fields(self):
        config = ModelConfig(name="a", provider="openai", model="m")

        assert config.effective_temperature() is None
        assert config.effective_max_tokens() is None
        assert config.effective_max_tokens(2048) == 2048

    def test_non_positive_tuning_fields_mean_default(self):
        config = ModelConfig(name="a", provider="openai", model="m", temperature=0, max_tokens=-1)

        assert config.effective_temperature() is None
        assert config.effective_max_tokens(2048) == 2048

    def test_positive_tuning_fields(self):
        config = ModelConfig(name="a", provider="openai", model="m", temperature=0.5, max_tokens=10)

        assert config.effective_temperature() == 0.5
        assert config.effective_max_tokens(2048) == 10


class TestResults:
    """Test ModelResult, Response and StreamEvent serialisation."""

    def test_success_and_failure_copy_identity(self):
        config = ModelConfig(name="a", provider="openai", model="m")

        ok = ModelResult.success(config, "answer")
        failed = ModelResult.failure(config, "boom")

        assert (ok.name, ok.provider, ok.text, ok.error, ok.ok) == ("a", "openai", "answer", None, True)
        assert (failed.name, failed.provider, failed.text, failed.error, failed.ok) == (
            "a",
            "openai",
            None,
            "boom",
            False,
        )

    def test_response_json_omits_absent_fields(self):
        response = Response(
            results=[
                ModelResult(name="a", provider="openai", text="answer"),
                ModelResult(name="b", provider="ollama", error="boom"),
            ]
        )

        assert json.loads(response.to_json()) == {
            "results": [
                {"name": "a", "provider": "openai", "text": "answer"},
                {"name": "b", "provider": "ollama", "error": "boom"},
            ]
        }

    def test_response_json_is_indented(self):
        assert Response().to_json() == '{\n  "results": []\n}'

    def test_result_event_line(self):
        event = StreamEvent.result(ModelResult(name="a", provider="openai", text="hi"))

        assert event.to_line() == '{"event":"result","name":"a","provider":"openai","text":"hi"}\n'

    def test_failed_result_event_line(self):
        event = StreamEvent.result(ModelResult(name="b", provider="x", error="unknown provider: x"))

        assert event.to_line() == '{"event":"result","name":"b","provider":"x","error":"unknown provider: x"}\n'

    def test_done_event_line(self):
        assert StreamEvent.done().to_line() == '{"event":"done"}\n'

    def test_event_to_model_result(self):
        result = ModelResult(name="a", provider="openai", text="hi")

        assert StreamEvent.result(result).to_model_result() == result
        assert StreamEvent.done().to_model_result() is None
