"""Application bootstrap and lifecycle management."""

from typing import Any, Protocol

from .blocks import TokenBlocks
from .config import Settings
from .event_bridge import EventBridge
from .gateway import IContractGateway, Web3ContractGateway
from .logging_config import get_logger
from .models import EventOccurrence

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        gateway: IContractGateway | None = None,
    ):
        self._settings = settings or Settings.from_env()

        # Components (will be initialized in start())
        self._bridge: EventBridge | None = None
        self._gateway: IContractGateway | None = gateway
        self._blocks: TokenBlocks | None = None
        self._started = False

    @property
    def settings(self) -> Settings:
        return self._settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        if self._started:
            return

        logger.info("Starting application")

        # 1. EventBridge with a queue per configured event type
        self._bridge = EventBridge(
            capacity=self._settings.queue_capacity,
            overflow=self._settings.queue_overflow,
        )
        for event_type in self._settings.event_types:
            self._bridge.register_event_type(event_type)
        logger.info("EventBridge initialized for %s", ", ".join(self._settings.event_types))

        # 2. Gateway (no internal dependencies)
        if self._gateway is None:
            self._gateway = Web3ContractGateway.from_settings(self._settings)
        logger.info(
            "Contract gateway initialized for contract %s on network %s",
            self._gateway.contract_address,
            self._gateway.network_id,
        )

        # 3. Subscribe before watching so no event is missed
        self._gateway.subscribe(self._handle_occurrence, self._handle_gateway_error)

        # 4. Blocks (depend on gateway + bridge)
        self._blocks = TokenBlocks(
            gateway=self._gateway,
            bridge=self._bridge,
            event_types=self._settings.event_types,
        )

        # 5. Start watching events
        await self._gateway.start()
        self._started = True
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._gateway:
            await self._gateway.stop()
            logger.info("Contract gateway stopped")
        self._started = False

    def _handle_occurrence(
        self,
        event_type: str,
        fields: dict[str, Any],
        correlation_id: str,
        block_number: int | None = None,
    ) -> None:
        """Gateway push channel -> EventBridge."""
        occurrence = EventOccurrence(
            event_type=event_type,
            correlation_id=correlation_id,
            fields=fields,
            block_number=block_number,
        )
        self._bridge.on_occurrence(event_type, occurrence)

    def _handle_gateway_error(self, error: Exception) -> None:
        """Gateway delivery errors never reach the bridge."""
        logger.error("Event delivery failed: %s", error)

    def _require(self, component):
        if component is None or not self._started:
            raise RuntimeError("Application not started")
        return component

    @property
    def bridge(self) -> EventBridge:
        """Get event bridge instance."""
        return self._require(self._bridge)

    @property
    def gateway(self) -> IContractGateway:
        """Get contract gateway instance."""
        return self._require(self._gateway)

    @property
    def blocks(self) -> TokenBlocks:
        """Get token blocks instance."""
        return self._require(self._blocks)
