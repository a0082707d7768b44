"""Unit tests for the Gemini HTTP client."""
import pytest
import requests
from unittest.mock import MagicMock

from routeready.models.settings import OptimizerSettings
from routeready.solver.gemini_client import GeminiClient, GeminiClientError


class TestGeminiClient:
    """Test suite for GeminiClient class."""

    @pytest.fixture
    def settings(self):
        return OptimizerSettings(
            model="gemini-test",
            endpoint="https://example.test/v1beta",
            timeout_seconds=5,
            use_maps_grounding=True,
            api_key="secret",
        )

    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.fixture
    def client(self, settings, session):
        return GeminiClient(settings, session=session)

    def ok_response(self, payload):
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = payload
        return response

    def test_generate_success(self, client, session):
        session.post.return_value = self.ok_response({
            "candidates": [
                {"content": {"parts": [{"text": "Here: "}, {"text": "[]"}]}}
            ]
        })

        assert client.generate("prompt") == "Here: []"
        assert client.api_calls == 1

        args, kwargs = session.post.call_args
        assert args[0] == "https://example.test/v1beta/models/gemini-test:generateContent"
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["x-goog-api-key"] == "secret"
        assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "prompt"
        assert kwargs["json"]["tools"] == [{"googleMaps": {}}]

    def test_payload_without_grounding(self, settings, session):
        settings.use_maps_grounding = False
        client = GeminiClient(settings, session=session)

        assert "tools" not in client.build_payload("p")

    def test_missing_api_key(self, settings, session):
        settings.api_key = None
        client = GeminiClient(settings, session=session)

        with pytest.raises(GeminiClientError) as exc_info:
            client.generate("prompt")

        assert "GEMINI_API_KEY" in str(exc_info.value)
        session.post.assert_not_called()

    def test_timeout(self, client, session):
        session.post.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(GeminiClientError) as exc_info:
            client.generate("prompt")

        assert "timed out" in str(exc_info.value)
        assert client.failures == 1

    def test_connection_error(self, client, session):
        session.post.side_effect = requests.exceptions.ConnectionError("down")

        with pytest.raises(GeminiClientError):
            client.generate("prompt")

    def test_http_error(self, client, session):
        response = MagicMock()
        response.status_code = 403
        response.text = "forbidden"
        session.post.return_value = response

        with pytest.raises(GeminiClientError) as exc_info:
            client.generate("prompt")

        assert "403" in str(exc_info.value)

    def test_no_candidates(self, client, session):
        session.post.return_value = self.ok_response({"promptFeedback": {"blockReason": "SAFETY"}})

        with pytest.raises(GeminiClientError) as exc_info:
            client.generate("prompt")

        assert "no candidates" in str(exc_info.value)

    def test_empty_text(self, client, session):
        session.post.return_value = self.ok_response({"candidates": [{"content": {"parts": []}}]})

        with pytest.raises(GeminiClientError):
            client.generate("prompt")
