"""
Byte-range readers for local files and HTTP(S) URLs.

Everything above this module only depends on the ``ByteRangeReader``
protocol: an awaitable ``bytes(start, length)`` returning exactly the
requested range (shorter only at end of file).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

__all__ = ["ByteRangeReader", "LocalFileReader", "RemoteFileReader", "open_reader"]


@runtime_checkable
class ByteRangeReader(Protocol):
    async def bytes(self, start: int = 0, length: int | None = None) -> bytes: ...

    def name(self) -> str: ...


class LocalFileReader:
    """Reads byte ranges of a local file on a worker thread."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.size = self.path.stat().st_size

    def name(self) -> str:
        return self.path.name

    def _read(self, start: int, length: int) -> bytes:
        with open(self.path, "rb") as f:
            f.seek(start)
            return f.read(length)

    async def bytes(self, start: int = 0, length: int | None = None) -> bytes:
        if length is None:
            length = max(self.size - start, 0)
        if length <= 0:
            return b""
        return await asyncio.to_thread(self._read, start, length)

    def __repr__(self) -> str:
        return f"LocalFileReader({str(self.path)!r})"


class RemoteFileReader:
    """
    Reads byte ranges over HTTP with ``Range`` requests.

    Transport failures are retried ``retries`` times, bypassing caches on
    the retry. HTTP error statuses are raised immediately.
    """

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
        retries: int = 1,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self._client = client
        self._owns_client = client is None

    def name(self) -> str:
        return httpx.URL(self.url).path.rsplit("/", 1)[-1]

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RemoteFileReader:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def bytes(self, start: int = 0, length: int | None = None) -> bytes:
        if length is not None and length <= 0:
            return b""

        headers = {}
        if start != 0 or length is not None:
            if length is None:
                headers["Range"] = f"bytes={start}-"
            else:
                headers["Range"] = f"bytes={start}-{start + length - 1}"

        client = self._get_client()
        attempt = 0
        while True:
            try:
                response = await client.get(self.url, headers=headers)
                break
            except httpx.TransportError as e:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning("Retrying %s (%s): %s", self.url, headers.get("Range", "all"), e)
                headers = {**headers, "Cache-Control": "no-cache"}

        response.raise_for_status()
        content = response.content
        if response.status_code == 200 and "Range" in headers:
            # Server ignored the range and sent the whole file
            stop = None if length is None else start + length
            content = content[start:stop]
        return content

    def __repr__(self) -> str:
        return f"RemoteFileReader({self.url!r})"


def open_reader(
    location: str | Path, timeout: float = 60.0, retries: int = 1
) -> LocalFileReader | RemoteFileReader:
    """Pick a reader for a local path or an http(s) URL."""
    text = str(location)
    if text.startswith(("http://", "https://")):
        return RemoteFileReader(text, timeout=timeout, retries=retries)
    return LocalFileReader(location)
