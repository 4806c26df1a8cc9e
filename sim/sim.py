"""SIM implementation - a host tick loop driving the blocks over HTTP."""

import asyncio
from typing import Any, Protocol

import httpx

from ethblocks.blocks import EVENT_PROPERTIES
from ethblocks.logging_config import get_logger

logger = get_logger(__name__)


class ISim(Protocol):
    """Behave like the visual-programming scheduler."""

    async def start(self) -> None:
        """Start ticking."""
        ...

    async def stop(self) -> None:
        """Stop ticking."""
        ...


class Sim:
    """
    Simulated host.

    Every tick it runs the "When [EVENT_NAME] event queued" hat block for
    each event type. When a hat fires, the script under it reads every
    event property and then dequeues the event, exactly as a user's
    project would.
    """

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tick_interval: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_url = api_url
        self._tick_interval = tick_interval
        self._client = client
        self._owns_client = client is None
        self._running = False
        self._task: asyncio.Task | None = None
        self._event_types: list[str] | None = None
        self.consumed: list[dict[str, Any]] = []
        self.failed_ticks = 0

    async def start(self) -> None:
        """Start ticking."""
        if self._running:
            return

        self._running = True
        if self._client is None:
            self._client = httpx.AsyncClient()

        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop ticking."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _run(self) -> None:
        try:
            while self._running:
                try:
                    await self.tick()
                except Exception as e:
                    # A failed tick is skipped; the scheduler keeps ticking.
                    self.failed_ticks += 1
                    logger.error("SIM tick failed: %s", e)
                await asyncio.sleep(self._tick_interval)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False

    async def tick(self) -> int:
        """
        Run one scheduler tick.

        Returns:
            Number of events consumed this tick
        """
        consumed = 0
        for event_type in await self._get_event_types():
            if not await self._run_block("isQueuedEvent", EVENT_NAME=event_type):
                continue

            fields = {}
            for prop in EVENT_PROPERTIES:
                value = await self._run_block(
                    "getQueuedEventProperty", EVENT_NAME=event_type, EVENT_PROPERTY=prop
                )
                if value is not None:
                    fields[prop] = value

            await self._run_block("dequeueEvent", EVENT_NAME=event_type)

            logger.info("SIM: consumed %s event %s", event_type, fields)
            self.consumed.append({"event_type": event_type, "fields": fields})
            consumed += 1
        return consumed

    async def _get_event_types(self) -> list[str]:
        if self._event_types is None:
            response = await self._client.get(f"{self._api_url}/api/extension", timeout=10.0)
            response.raise_for_status()
            menus = response.json()["menus"]
            self._event_types = [item["value"] for item in menus["events"]]
        return self._event_types

    async def _run_block(self, opcode: str, **args: Any) -> Any:
        response = await self._client.post(
            f"{self._api_url}/api/blocks/{opcode}",
            json={"args": args},
            timeout=10.0,
        )
        response.raise_for_status()
        return response.json()["value"]
