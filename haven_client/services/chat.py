"""Streaming chat replies delivered as server-sent events."""

from collections.abc import Iterator
from urllib.parse import quote

from haven_client.services.base import BaseService
from haven_client.services.constants import CHAT_ENDPOINT


EVENT_DATA_PREFIX = "data: "


class ChatService(BaseService):
    """Streams assistant replies for a prompt.

    Streams are not retried: a failure part-way through would replay
    chunks the caller has already consumed.
    """

    service_name = "chat"

    def stream_reply(self, prompt: str) -> Iterator[str]:
        """Yield reply chunks as the server emits them.

        Only ``data:`` lines carry content; every other line is skipped.
        An empty prompt sends nothing.

        Args:
            prompt: User message, sent as one path segment.

        Raises:
            NetworkError: On request or stream failure.
        """
        if not prompt:
            return
        headers: dict[str, str] = {}
        if self._session is not None and self._session.has_token:
            headers.update(self._session.authorization_header())

        endpoint = CHAT_ENDPOINT.format(prompt=quote(prompt, safe=""))
        chunks = 0
        for line in self._client.stream_lines(endpoint, headers=headers):
            if not line.startswith(EVENT_DATA_PREFIX):
                continue
            chunks += 1
            yield line[len(EVENT_DATA_PREFIX) :]
        self._log.info("chat_reply_streamed", chunks=chunks)

    def ask(self, prompt: str) -> str:
        """Return the complete reply for a prompt."""
        return "".join(self.stream_reply(prompt))
