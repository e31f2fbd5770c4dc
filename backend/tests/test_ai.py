import asyncio
import time
import pytest
from unittest.mock import MagicMock
from langchain_core.messages import HumanMessage, SystemMessage

from config.env import CompletionConfig
from utils.completion import CompletionError, LangChainCompletionClient, build_completion_client

def make_llm(content="Term: Description"):
    llm = MagicMock()
    llm.bind.return_value = llm
    llm.invoke.return_value = MagicMock(content=content)
    return llm

def test_complete_returns_content():
    """Test that the chat model output is returned as text."""
    llm = make_llm("Atom: smallest unit")
    client = LangChainCompletionClient(CompletionConfig(api_key="test-key"), llm=llm)

    result = asyncio.run(client.complete("Generate cards", system="Be concise"))

    assert result == "Atom: smallest unit"
    messages = llm.invoke.call_args[0][0]
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[1], HumanMessage)
    assert messages[1].content == "Generate cards"

def test_complete_binds_temperature():
    llm = make_llm()
    client = LangChainCompletionClient(CompletionConfig(api_key="test-key"), llm=llm)

    asyncio.run(client.complete("prompt", temperature=0.8))
    llm.bind.assert_called_once_with(temperature=0.8)

def test_complete_without_system_prompt():
    llm = make_llm()
    client = LangChainCompletionClient(CompletionConfig(api_key="test-key"), llm=llm)

    asyncio.run(client.complete("prompt"))
    messages = llm.invoke.call_args[0][0]
    assert len(messages) == 1
    llm.bind.assert_not_called()

def test_complete_wraps_model_errors():
    """Test that provider errors surface as CompletionError."""
    llm = make_llm()
    llm.invoke.side_effect = RuntimeError("rate limited")
    client = LangChainCompletionClient(CompletionConfig(api_key="test-key"), llm=llm)

    with pytest.raises(CompletionError) as exc_info:
        asyncio.run(client.complete("prompt"))
    assert "RuntimeError" in str(exc_info.value)

def test_complete_times_out():
    """Test that a slow model call is cut off."""
    llm = make_llm()
    llm.invoke.side_effect = lambda messages: time.sleep(0.5)
    client = LangChainCompletionClient(CompletionConfig(api_key="test-key", timeout_seconds=0.05), llm=llm)

    with pytest.raises(CompletionError) as exc_info:
        asyncio.run(client.complete("prompt"))
    assert "timed out" in str(exc_info.value)

def test_build_completion_client_needs_api_key():
    assert build_completion_client(CompletionConfig(api_key=None)) is None
    assert build_completion_client(CompletionConfig(api_key="")) is None

def test_build_completion_client_with_api_key():
    client = build_completion_client(CompletionConfig(api_key="test-key"))
    assert isinstance(client, LangChainCompletionClient)
