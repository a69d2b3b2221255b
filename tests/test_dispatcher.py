import asyncio
from types import SimpleNamespace

import pytest

from models.errors import UnsupportedModel, UpstreamInferenceFailure
from models.inference import InferenceModel
from services.inference.dispatcher import OPERATIONS, InferenceDispatcher
from tests.fakes import FakeOpenAI, classification_response, text_response


def test_every_model_has_an_operation():
    assert set(OPERATIONS) == set(InferenceModel)
    for name in OPERATIONS.values():
        assert callable(getattr(InferenceDispatcher, name))


def test_parse_rejects_unknown_model():
    with pytest.raises(UnsupportedModel):
        InferenceModel.parse("translation")
    assert InferenceModel.parse("summarization") is InferenceModel.SUMMARIZATION


def test_dispatch_text_generation_sends_fixed_parameters():
    client = FakeOpenAI(text_response("hi!"))
    result = asyncio.run(InferenceDispatcher(client).dispatch("text-generation", "hello"))

    assert result == {"generated_text": "hi!"}
    call = client.responses.calls[0]
    assert call["input"][-1]["content"][0]["text"] == "hello"


def test_dispatch_image_wraps_bare_base64_as_data_url():
    client = FakeOpenAI(classification_response([{"label": "dog", "score": 0.9}]))
    result = asyncio.run(InferenceDispatcher(client).dispatch(InferenceModel.IMAGE_CLASSIFICATION, "aGVsbG8="))

    assert result == [{"label": "dog", "score": 0.9}]
    call = client.responses.calls[0]
    image_entry = call["input"][-1]["content"][0]
    assert image_entry == {"type": "input_image", "image_url": "data:image/jpeg;base64,aGVsbG8="}
    assert call["tool_choice"] == {"type": "function", "name": "classify_image"}


def test_dispatch_wraps_upstream_errors():
    client = FakeOpenAI(error=ConnectionError("provider down"))
    with pytest.raises(UpstreamInferenceFailure, match="provider down"):
        asyncio.run(InferenceDispatcher(client).dispatch("summarization", "text"))


def test_dispatch_missing_function_call_is_upstream_failure():
    client = FakeOpenAI(text_response("no tool call"))
    with pytest.raises(UpstreamInferenceFailure):
        asyncio.run(InferenceDispatcher(client).dispatch("image-classification", "aGVsbG8="))


def test_dispatch_rejects_empty_text_without_calling_upstream():
    client = FakeOpenAI(text_response("unused"))
    with pytest.raises(ValueError):
        asyncio.run(InferenceDispatcher(client).dispatch("text-generation", "   "))
    assert client.responses.calls == []


def test_dispatch_malformed_tool_arguments_is_upstream_failure():
    call = SimpleNamespace(type="function_call", name="classify_image", arguments="{not json")
    client = FakeOpenAI(SimpleNamespace(output_text="", output=[call]))

    with pytest.raises(UpstreamInferenceFailure, match="Malformed classification output"):
        asyncio.run(InferenceDispatcher(client).dispatch("image-classification", "aGVsbG8="))
