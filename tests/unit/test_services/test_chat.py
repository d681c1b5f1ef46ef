"""Unit tests for the streaming chat service."""

from collections.abc import Iterator

import httpx
import pytest

from haven_client.services import ChatService
from haven_client.session import InMemoryKeyValueStore, SessionContext
from haven_client.transport import NetworkError, NetworkErrorKind, TransportMetrics
from tests.helpers.http import make_client


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh metrics."""
    TransportMetrics.reset()


def event_stream(*lines: str, status_code: int = 200) -> httpx.Response:
    """Build a server-sent event response from raw lines."""
    body = "".join(f"{line}\n" for line in lines).encode("utf-8")
    return httpx.Response(
        status_code,
        headers={"Content-Type": "text/event-stream"},
        content=body,
    )


class DroppedStream(httpx.SyncByteStream):
    """Byte stream that loses the connection after its first line."""

    def __iter__(self) -> Iterator[bytes]:
        yield b"data: Hello\n"
        raise httpx.ReadError("connection reset")


class TestStreamReply:
    """Tests for reading reply chunks off the event stream."""

    @pytest.mark.unit
    def test_yields_data_lines_only(self) -> None:
        """Only the payload of data lines reaches the caller."""
        client, _ = make_client(
            lambda r: event_stream(
                ": keep-alive", "data: Hello", "", "event: ping", "data: , world"
            )
        )

        chunks = list(ChatService(client).stream_reply("hi"))

        assert chunks == ["Hello", ", world"]

    @pytest.mark.unit
    def test_request_shape(self) -> None:
        """The prompt is one escaped path segment and the stream is requested."""
        client, transport = make_client(lambda r: event_stream("data: ok"))

        list(ChatService(client).stream_reply("how are you?"))

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.raw_path == b"/api/v1/chat/how%20are%20you%3F"
        assert request.headers["Accept"] == "text/event-stream"
        assert request.headers["Cache-Control"] == "no-cache"

    @pytest.mark.unit
    def test_no_authorization_when_signed_out(self) -> None:
        """Without a stored token no Authorization header is sent."""
        client, transport = make_client(lambda r: event_stream("data: ok"))
        session = SessionContext(InMemoryKeyValueStore())

        list(ChatService(client, session=session).stream_reply("hi"))

        assert "Authorization" not in transport.requests[0].headers

    @pytest.mark.unit
    def test_bearer_when_signed_in(self) -> None:
        """A stored token is sent as a bearer header."""
        client, transport = make_client(lambda r: event_stream("data: ok"))
        session = SessionContext(InMemoryKeyValueStore({"authToken": "tok"}))

        list(ChatService(client, session=session).stream_reply("hi"))

        assert transport.requests[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.unit
    def test_empty_prompt_sends_nothing(self) -> None:
        """An empty prompt yields nothing without touching the network."""
        client, transport = make_client(lambda r: event_stream("data: ok"))

        assert list(ChatService(client).stream_reply("")) == []
        assert transport.requests == []

    @pytest.mark.unit
    def test_ask_joins_chunks(self) -> None:
        """ask returns the whole reply."""
        client, _ = make_client(
            lambda r: event_stream("data: I am ", "data: fine.")
        )

        assert ChatService(client).ask("how are you?") == "I am fine."

    @pytest.mark.unit
    def test_metrics_count_streamed_bytes(self) -> None:
        """A finished stream is recorded with the bytes of its lines."""
        client, _ = make_client(lambda r: event_stream("data: abc"))

        list(ChatService(client).stream_reply("hi"))

        metrics = TransportMetrics.get_instance().to_dict()
        assert metrics["http_requests_total"] == {200: 1}
        assert metrics["http_bytes_total"] == len("data: abc")


class TestStreamFailures:
    """Tests for failures before and during the stream."""

    @pytest.mark.unit
    def test_unauthorized(self) -> None:
        """A 401 is classified as UNAUTHORIZED."""
        client, _ = make_client(lambda r: httpx.Response(401, content=b"denied"))

        with pytest.raises(NetworkError) as exc_info:
            list(ChatService(client).stream_reply("hi"))

        assert exc_info.value.kind is NetworkErrorKind.UNAUTHORIZED

    @pytest.mark.unit
    def test_server_error_not_retried(self) -> None:
        """A 5xx surfaces after a single request."""
        client, transport = make_client(lambda r: httpx.Response(503))

        with pytest.raises(NetworkError) as exc_info:
            list(ChatService(client).stream_reply("hi"))

        assert exc_info.value.kind is NetworkErrorKind.SERVER_ERROR
        assert len(transport.requests) == 1

    @pytest.mark.unit
    def test_connection_lost_mid_stream(self) -> None:
        """Chunks already read are delivered before the failure surfaces."""
        client, _ = make_client(lambda r: httpx.Response(200, stream=DroppedStream()))
        received: list[str] = []

        with pytest.raises(NetworkError) as exc_info:
            for chunk in ChatService(client).stream_reply("hi"):
                received.append(chunk)

        assert received == ["Hello"]
        assert exc_info.value.kind is NetworkErrorKind.CONNECTION_ERROR
