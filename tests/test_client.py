# tests/test_client.py
import pytest

import ta_mbr.llm.client as client_mod
from ta_mbr.utils.config import CredentialsConfig


class DummyGenAIClient:
    def __init__(self, api_key: str, http_options=None):
        self.api_key = api_key
        self.http_options = http_options


def _creds(**gemini) -> CredentialsConfig:
    return CredentialsConfig.model_validate({"gemini": gemini})


def test_get_model_name_priority_override(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "from_env")

    assert client_mod.get_model_name(_creds(model_name="from_creds"), model_name_override="override") == "override"


def test_get_model_name_fallback_credentials(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "from_env")

    assert client_mod.get_model_name(_creds(model_name="from_creds")) == "from_creds"


def test_get_model_name_fallback_env(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "from_env")

    assert client_mod.get_model_name(CredentialsConfig()) == "from_env"


def test_get_model_name_raises_when_missing(monkeypatch):
    monkeypatch.delenv("GEMINI_MODEL", raising=False)

    with pytest.raises(ValueError) as e:
        client_mod.get_model_name(CredentialsConfig())

    assert "model name not found" in str(e.value).lower()


def test_build_gemini_client_missing_key_reports_ai_service_not_configured(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(EnvironmentError) as e:
        client_mod.build_gemini_client(CredentialsConfig(), model_name_override="m")

    assert str(e.value).startswith("AI service not configured")
    assert "GEMINI_API_KEY" in str(e.value)


def test_build_gemini_client_success(monkeypatch):
    monkeypatch.setattr(client_mod.genai, "Client", DummyGenAIClient)
    monkeypatch.setenv("MBR_GEMINI_KEY", "secret")

    ctx = client_mod.build_gemini_client(_creds(api_key_env="MBR_GEMINI_KEY", model_name="m"))

    assert ctx["model_name"] == "m"
    assert isinstance(ctx["client"], DummyGenAIClient)
    assert ctx["client"].api_key == "secret"


def test_build_gemini_client_applies_request_timeout(monkeypatch):
    monkeypatch.setattr(client_mod.genai, "Client", DummyGenAIClient)
    monkeypatch.setenv("GEMINI_API_KEY", "secret")

    creds = _creds(request={"timeout_seconds": 45})
    ctx = client_mod.build_gemini_client(creds, model_name_override="gemini-2.0-flash")

    assert ctx["model_name"] == "gemini-2.0-flash"
    assert ctx["client"].http_options.timeout == 45_000
