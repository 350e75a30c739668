"""Live subscription to a Realtime Database collection over its REST stream.

The database pushes server-sent events: ``put`` and ``patch`` carry a JSON
body of the form ``{"path": ..., "data": ...}`` describing a change relative
to the subscribed location. A local mirror of the collection absorbs each
change and a full snapshot of it is handed to the consumer afterwards.

The subscription does not reconnect. Once the stream fails or closes, the
error callback fires and the subscription is over.
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Dict[str, Any]], None]
ErrorCallback = Callable[[str], None]

_FAILURE_EVENTS = {
    "cancel": "Subscription cancelled by the database (check read rules).",
    "auth_revoked": "Subscription credentials were revoked.",
}


class FeedError(Exception):
    """Raised when the feed stream cannot continue."""


@dataclass
class ServerSentEvent:
    name: str
    data: str


async def iter_events(lines: AsyncIterator[str]) -> AsyncIterator[ServerSentEvent]:
    """Group raw stream lines into events, dispatching on blank lines."""
    name = "message"
    data: List[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if data or name != "message":
                yield ServerSentEvent(name=name, data="\n".join(data))
            name, data = "message", []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            name = value
        elif field == "data":
            data.append(value)
    if data:
        yield ServerSentEvent(name=name, data="\n".join(data))


class CollectionMirror:
    """Local copy of the subscribed node, kept current by put/patch events."""

    def __init__(self) -> None:
        self._root: Any = None

    def apply(self, event: str, path: str, data: Any) -> None:
        segments = [segment for segment in path.split("/") if segment]
        if event == "put":
            self._root = self._set(self._root, segments, data)
        elif event == "patch":
            if not isinstance(data, dict):
                raise FeedError(f"Patch payload at {path!r} is not an object.")
            for key, value in data.items():
                child = [segment for segment in str(key).split("/") if segment]
                self._root = self._set(self._root, segments + child, value)
        else:
            raise FeedError(f"Unsupported event {event!r}.")

    def snapshot(self) -> Dict[str, Any]:
        root = self._root
        if isinstance(root, dict):
            return dict(root)
        if isinstance(root, list):
            # Sequential numeric keys arrive as a JSON array with gaps as nulls.
            return {str(index): value for index, value in enumerate(root) if value is not None}
        return {}

    @classmethod
    def _set(cls, node: Any, segments: List[str], value: Any) -> Any:
        if not segments:
            return value
        if isinstance(node, list):
            node = {str(index): item for index, item in enumerate(node) if item is not None}
        container = dict(node) if isinstance(node, dict) else {}
        head, rest = segments[0], segments[1:]
        updated = cls._set(container.get(head), rest, value)
        if updated is None or updated == {}:
            container.pop(head, None)
        else:
            container[head] = updated
        return container or None


class FeedSubscriber:
    """Streams the last ``limit`` entries of ``path`` under ``database_url``."""

    def __init__(
        self,
        database_url: str,
        path: str,
        limit: int = 1500,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.database_url = database_url.rstrip("/")
        self.path = path.strip("/")
        self.limit = limit
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, read=90.0),
            follow_redirects=True,
        )

    @property
    def url(self) -> str:
        return f"{self.database_url}/{self.path}.json"

    @property
    def params(self) -> Dict[str, str]:
        return {"orderBy": '"$key"', "limitToLast": str(self.limit)}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def listen(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> None:
        """Deliver snapshots until the stream fails, then report the failure once."""
        try:
            await self._stream(on_snapshot)
        except (httpx.HTTPError, FeedError) as exc:
            message = str(exc) or exc.__class__.__name__
            logger.error(
                "Feed subscription failed: %s",
                message,
                extra={"path": self.path, "reason": exc.__class__.__name__},
            )
            on_error(message)
        except Exception as exc:
            logger.exception(
                "Feed subscription stopped unexpectedly",
                extra={"path": self.path, "reason": exc.__class__.__name__},
            )
            on_error(str(exc) or exc.__class__.__name__)

    @asynccontextmanager
    async def subscribe(
        self,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> AsyncIterator["asyncio.Task[None]"]:
        """Run :meth:`listen` in the background for the duration of the block."""
        task = asyncio.create_task(
            self.listen(on_snapshot, on_error),
            name=f"feed:{self.path}",
        )
        try:
            yield task
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.info("Feed subscription released", extra={"path": self.path})

    async def _stream(self, on_snapshot: SnapshotCallback) -> None:
        mirror = CollectionMirror()
        async with self._client.stream(
            "GET",
            self.url,
            params=self.params,
            headers={"Accept": "text/event-stream"},
        ) as response:
            response.raise_for_status()
            logger.info("Feed subscription opened", extra={"path": self.path})
            async for event in iter_events(response.aiter_lines()):
                if event.name == "keep-alive":
                    continue
                if event.name in _FAILURE_EVENTS:
                    raise FeedError(_FAILURE_EVENTS[event.name])
                if event.name not in {"put", "patch"}:
                    continue
                path, data = _decode_change(event)
                mirror.apply(event.name, path, data)
                on_snapshot(mirror.snapshot())
        raise FeedError("Feed stream closed by the server.")


def _decode_change(event: ServerSentEvent) -> tuple[str, Any]:
    try:
        payload = json.loads(event.data)
    except json.JSONDecodeError as exc:
        raise FeedError(f"Malformed {event.name} event payload.") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("path"), str):
        raise FeedError(f"Malformed {event.name} event payload.")
    return payload["path"], payload.get("data")
