"""tests for client with mocking."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from caseboard.core.client import ClaudeClient, ClientProtocol, MockClient


def _text_event(text):
    event = MagicMock()
    event.message = MagicMock()
    block = MagicMock()
    block.text = text
    event.message.content = [block]
    return event


def _sdk_instance(*events, disconnect_error=None):
    instance = AsyncMock()
    instance.connect = AsyncMock()
    instance.query = AsyncMock()
    instance.disconnect = AsyncMock(side_effect=disconnect_error)

    async def mock_receive():
        for event in events:
            yield event

    instance.receive_response = mock_receive
    return instance


class TestMockClient:
    """tests for MockClient."""

    def test_satisfies_protocol(self):
        assert isinstance(MockClient(), ClientProtocol)

    @pytest.mark.asyncio
    async def test_matched_response(self):
        """MockClient matches prompt substrings, case-insensitively."""
        client = MockClient(responses={"Drought": "why that year?"}, delay=0)
        assert await client.complete("the drought mattered") == "why that year?"

    @pytest.mark.asyncio
    async def test_default_response(self):
        client = MockClient(delay=0)
        assert await client.complete("anything") == client.default_response

    @pytest.mark.asyncio
    async def test_tracks_calls(self):
        client = MockClient(delay=0)
        await client.complete("first")
        await client.complete("second")
        assert client.calls == ["first", "second"]


class TestClaudeClient:
    """tests for ClaudeClient."""

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with ClaudeClient() as client:
            assert client is not None

    @pytest.mark.asyncio
    async def test_complete_creates_fresh_client(self):
        """each complete() creates, uses and disconnects a fresh SDK client."""
        with patch("caseboard.core.client.ClaudeSDKClient") as MockSDK:
            instance = _sdk_instance(_text_event("why then?"))
            MockSDK.return_value = instance

            client = ClaudeClient()
            result = await client.complete("test prompt")

            MockSDK.assert_called_once()
            instance.connect.assert_called_once()
            instance.query.assert_called_once_with("test prompt")
            instance.disconnect.assert_called_once()
            assert result == "why then?"

    @pytest.mark.asyncio
    async def test_joins_text_parts(self):
        with patch("caseboard.core.client.ClaudeSDKClient") as MockSDK:
            MockSDK.return_value = _sdk_instance(_text_event("one"), _text_event("two"))
            assert await ClaudeClient().complete("x") == "one\ntwo"

    @pytest.mark.asyncio
    async def test_no_text_response(self):
        with patch("caseboard.core.client.ClaudeSDKClient") as MockSDK:
            MockSDK.return_value = _sdk_instance()
            assert await ClaudeClient().complete("x") == "(no response)"

    @pytest.mark.asyncio
    async def test_complete_handles_disconnect_error(self):
        """complete() ignores disconnect errors."""
        with patch("caseboard.core.client.ClaudeSDKClient") as MockSDK:
            MockSDK.return_value = _sdk_instance(
                _text_event("response"), disconnect_error=Exception("cleanup failed")
            )
            assert await ClaudeClient().complete("x") == "response"

    @pytest.mark.asyncio
    async def test_query_error_wrapped(self):
        with patch("caseboard.core.client.ClaudeSDKClient") as MockSDK:
            instance = _sdk_instance()
            instance.query = AsyncMock(side_effect=Exception("rate limited"))
            MockSDK.return_value = instance

            with pytest.raises(RuntimeError, match="claude api error"):
                await ClaudeClient().complete("x")
            instance.disconnect.assert_called_once()
