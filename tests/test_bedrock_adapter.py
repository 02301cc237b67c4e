from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

from src.domain.errors import RateLimitedError, UpstreamError
from src.domain.ports.observability_port import IObservabilityHandler
from src.infrastructure.llm.bedrock_adapter import BedrockChatAdapter


class FakeRunnable:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def invoke(self, prompt, config=None):
        self.calls.append((prompt, config))
        if self.error is not None:
            raise self.error
        return self.result


class RecordingObservability(IObservabilityHandler):
    def __init__(self):
        self.handler = object()

    def callbacks(self):
        return [self.handler]

    def flush(self):
        pass


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "InvokeModel")


def test_returns_message_content_and_attaches_callbacks():
    runnable = FakeRunnable(SimpleNamespace(content="AAPL looks strong."))
    observability = RecordingObservability()
    adapter = BedrockChatAdapter(observability=observability, _runnable=runnable)

    assert adapter.generate("prompt") == "AAPL looks strong."
    assert runnable.calls == [("prompt", {"callbacks": [observability.handler]})]


def test_joins_list_content_blocks():
    content = [{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}]
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(SimpleNamespace(content=content)))

    assert adapter.generate("prompt") == "Hello world"


def test_throttling_maps_to_rate_limited():
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(error=_client_error("ThrottlingException")))

    with pytest.raises(RateLimitedError):
        adapter.generate("prompt")


def test_other_client_errors_map_to_upstream():
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(error=_client_error("AccessDeniedException")))

    with pytest.raises(UpstreamError) as excinfo:
        adapter.generate("prompt")

    assert not isinstance(excinfo.value, RateLimitedError)


def test_wrapped_throttling_text_is_recognised():
    error = ValueError("Error raised by bedrock service: ThrottlingException: Too many requests")
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(error=error))

    with pytest.raises(RateLimitedError):
        adapter.generate("prompt")


def test_empty_answer_is_an_upstream_error():
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(SimpleNamespace(content="  ")))

    with pytest.raises(UpstreamError, match="empty response"):
        adapter.generate("prompt")


def test_default_model_id():
    adapter = BedrockChatAdapter(_runnable=FakeRunnable(SimpleNamespace(content="x")))
    assert adapter.model_id == BedrockChatAdapter.MODEL_ID
