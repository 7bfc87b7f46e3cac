"""Tests for the model manager protocol and error hierarchy."""

from persona_engine.llm_client import (
    LLMClientError,
    LLMConnectionError,
    LLMInvalidResponse,
    LLMServerError,
    LLMTimeout,
    ModelConfigurationError,
    ModelManager,
    ModelNotInitializedError,
    UnknownModelError,
)


class TestErrorHierarchy:
    """Transient and configuration errors live in separate branches."""

    def test_transient_errors(self) -> None:
        for error in (LLMTimeout, LLMConnectionError, LLMServerError, LLMInvalidResponse):
            assert issubclass(error, LLMClientError)
            assert not issubclass(error, ModelConfigurationError)

    def test_configuration_errors(self) -> None:
        for error in (ModelNotInitializedError, UnknownModelError):
            assert issubclass(error, ModelConfigurationError)
            assert not issubclass(error, LLMClientError)


class TestModelManagerProtocol:
    """Test runtime protocol checks."""

    def test_fake_manager_satisfies_protocol(self, make_manager) -> None:
        assert isinstance(make_manager(), ModelManager)

    def test_ollama_manager_satisfies_protocol(self) -> None:
        from persona_engine.llm_client import OllamaModelManager

        assert isinstance(OllamaModelManager(base_url="http://ollama.test"), ModelManager)

    def test_plain_object_does_not(self) -> None:
        assert not isinstance(object(), ModelManager)
