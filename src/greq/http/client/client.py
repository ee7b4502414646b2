import asyncio
from typing import AsyncIterator, Iterable

import aiohttp

from greq.errors import TransportError
from greq.http.client.request import Request
from greq.http.client.response import Response
from greq.settings import CLIENT_SETTINGS
from greq.util.logging import get_logger

log = get_logger(__name__)


class Client:
    """
    Minimal aiohttp transport.

    Every request produces exactly one independent `Response`. Transport
    failures are stored on the response instead of being raised.
    """
    def __init__(
        self,
        concurrency: int | None = None,
        timeout: float | None = None,
        *,
        headers: dict | None = None,
        proxies: dict | None = None,
    ):
        self.concurrency = concurrency or CLIENT_SETTINGS.concurrency
        self._timeout = aiohttp.ClientTimeout(total=timeout or CLIENT_SETTINGS.timeout)
        self._headers = dict(CLIENT_SETTINGS.headers) | (headers or {})
        self._proxies = proxies or CLIENT_SETTINGS.proxies or {}
        self._sem = asyncio.Semaphore(self.concurrency)
        self._session: aiohttp.ClientSession | None = None

    def build_session(self) -> aiohttp.ClientSession:
        # Connector needs the running loop, so build as late as possible
        connector = aiohttp.TCPConnector(limit=self.concurrency * 2, ttl_dns_cache=300)
        return aiohttp.ClientSession(
            headers=self._headers,
            timeout=self._timeout,
            connector=connector,
        )

    async def __aenter__(self):
        if self._session is None:
            self._session = self.build_session()
        return self

    async def __aexit__(self, *_):
        if self._session:
            await self._session.close()
        self._session = None

    def _proxy_for(self, req: Request):
        return self._proxies.get(req.hostname)

    async def fetch(self, req: Request) -> Response:
        if self._session is None:
            raise RuntimeError("client is not open; use 'async with Client()'")

        async with self._sem:
            try:
                async with self._session.request(
                    req.method,
                    req.url,
                    headers=req.headers,
                    data=req.data,
                    proxy=self._proxy_for(req),
                    timeout=aiohttp.ClientTimeout(total=req.timeout) if req.timeout else self._timeout,
                ) as resp:
                    body = await resp.read()
                    return Response(req, resp.status, body, resp.headers)
            except asyncio.CancelledError:
                log.for_exchange(req).debug("cancelled error")
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                log.for_exchange(req).error("request failed", exc_info=exc)
                error = TransportError(f"{req.method} {req.url} failed: {exc!r}", url=req.url)
                error.__cause__ = exc
                return Response(req, 0, b"", error=error)

    async def fetch_all(self, reqs: Iterable[Request]) -> AsyncIterator[Response]:
        """Fetch concurrently, yielding responses as they complete."""
        tasks = [asyncio.create_task(self.fetch(req)) for req in reqs]
        try:
            for fut in asyncio.as_completed(tasks):
                yield await fut
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


def do(req: Request, **client_kwargs) -> Response:
    """Blocking single request."""
    async def _run():
        async with Client(**client_kwargs) as client:
            return await client.fetch(req)
    return asyncio.run(_run())


def do_all(reqs: Iterable[Request], **client_kwargs) -> list[Response]:
    """Blocking concurrent requests, returned in completion order."""
    async def _run():
        async with Client(**client_kwargs) as client:
            return [resp async for resp in client.fetch_all(reqs)]
    return asyncio.run(_run())
