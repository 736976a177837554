"""Long-running unit: a tiny HTTP endpoint served from the event loop.

``run`` returns as soon as the socket is listening; the serving task keeps
going in the background. ``--serve-for SECONDS`` bounds its lifetime so the
example terminates on its own.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from pathlib import Path
from typing import Optional, Sequence

LOGGER = logging.getLogger(__name__)


def _parse(args: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="http_api")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=0)
    parser.add_argument("--serve-for", type=float, default=None)
    parser.add_argument("--port-file", type=Path, default=None)
    return parser.parse_args(list(args or []))


class HttpApi:
    def __init__(self) -> None:
        self.server: Optional[asyncio.AbstractServer] = None
        self.requests = 0

    async def configure(self) -> None:
        self.requests = 0

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        await reader.readuntil(b"\r\n\r\n")
        self.requests += 1
        body = b'{"status": "ok"}'
        writer.write(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/json\r\n"
            + f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
            + body
        )
        await writer.drain()
        writer.close()
        await writer.wait_closed()

    async def _serve(self, serve_for: Optional[float]) -> int:
        assert self.server is not None
        async with self.server:
            if serve_for is None:
                await self.server.serve_forever()
            else:
                await asyncio.sleep(serve_for)
        LOGGER.info("HTTP API stopped after %d request(s)", self.requests)
        return self.requests

    async def run(self, args: Optional[Sequence[str]] = None) -> asyncio.Task:
        options = _parse(args)
        self.server = await asyncio.start_server(
            self._handle, options.host, options.port
        )
        port = self.server.sockets[0].getsockname()[1]
        if options.port_file is not None:
            options.port_file.write_text(str(port))
        LOGGER.info("HTTP API listening on %s:%d", options.host, port)
        return asyncio.get_running_loop().create_task(
            self._serve(options.serve_for)
        )


default = HttpApi
