"""ContractGateway implementation on top of web3.py."""

import asyncio
from typing import Any, Callable, Protocol

from eth_utils import to_checksum_address
from web3 import Web3
from web3.contract import Contract

from ..config import Settings
from ..errors import GatewayError
from ..logging_config import get_logger
from .artifact import ContractArtifact

logger = get_logger(__name__)


# (event_type, fields, correlation_id, block_number)
OccurrenceHandler = Callable[[str, dict[str, Any], str, int | None], None]
ErrorHandler = Callable[[Exception], None]


class IContractGateway(Protocol):
    """Contract calls, transactions, deployment and the event feed."""

    @property
    def contract_address(self) -> str | None:
        """Address of the active contract."""
        ...

    @property
    def network_id(self) -> int:
        """Network the active contract lives on."""
        ...

    def subscribe(
        self, on_occurrence: OccurrenceHandler, on_error: ErrorHandler | None = None
    ) -> None:
        """Register the event callback and the delivery error side channel."""
        ...

    def set_contract(self, address: str | None = None, network_id: int | None = None) -> None:
        """Switch to another deployed contract."""
        ...

    async def call(self, method_name: str, args: list[Any], description: str) -> Any:
        """Read-only contract call."""
        ...

    async def send(self, method_name: str, args: list[Any], description: str) -> str:
        """State-changing transaction. Returns the transaction hash."""
        ...

    async def deploy(self, args: list[Any], description: str) -> str:
        """Deploy a new contract and switch to it. Returns its address."""
        ...

    async def start(self) -> None:
        """Start watching contract events."""
        ...

    async def stop(self) -> None:
        """Stop watching contract events."""
        ...


class Web3ContractGateway:
    """Talks to one token contract over JSON-RPC and polls its event logs."""

    def __init__(
        self,
        web3: Web3,
        artifact: ContractArtifact,
        network_id: int,
        contract_address: str | None = None,
        account: str | None = None,
        poll_interval: float = 2.0,
    ):
        self._web3 = web3
        self._artifact = artifact
        self._account = to_checksum_address(account) if account else None
        self._poll_interval = poll_interval

        self._on_occurrence: OccurrenceHandler | None = None
        self._on_error: ErrorHandler | None = None

        self._network_id = network_id
        self._contract_address: str | None = None
        self._contract: Contract | None = None
        self._last_block: int | None = None

        self._task: asyncio.Task | None = None
        self._running = False

        self.set_contract(contract_address, network_id)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Web3ContractGateway":
        """Build a gateway for an HTTP JSON-RPC node."""
        if settings.artifact_path:
            artifact = ContractArtifact.load(settings.artifact_path)
        else:
            artifact = ContractArtifact.erc20()

        web3 = Web3(Web3.HTTPProvider(settings.provider_url))
        return cls(
            web3=web3,
            artifact=artifact,
            network_id=settings.network_id,
            contract_address=settings.contract_address,
            account=settings.account,
            poll_interval=settings.poll_interval,
        )

    @property
    def contract_address(self) -> str | None:
        return self._contract_address

    @property
    def network_id(self) -> int:
        return self._network_id

    @property
    def event_names(self) -> list[str]:
        return self._artifact.event_names()

    def subscribe(
        self, on_occurrence: OccurrenceHandler, on_error: ErrorHandler | None = None
    ) -> None:
        """Register the event callback and the delivery error side channel."""
        self._on_occurrence = on_occurrence
        self._on_error = on_error

    def set_contract(self, address: str | None = None, network_id: int | None = None) -> None:
        """Switch to another deployed contract and watch events from the next block."""
        if network_id is not None:
            self._network_id = network_id

        address = address or self._artifact.address_for(self._network_id)
        if not address:
            self._contract_address = None
            self._contract = None
            logger.warning("No contract address configured for network %s", self._network_id)
            return

        try:
            address = to_checksum_address(address)
        except ValueError as e:
            raise GatewayError(f"Invalid contract address {address}") from e

        self._contract_address = address
        self._contract = self._web3.eth.contract(address=address, abi=self._artifact.abi)
        self._last_block = None

        logger.debug(
            "Set contract to address %s for network %s", address, self._network_id
        )

    async def call(self, method_name: str, args: list[Any], description: str) -> Any:
        """Read-only contract call."""
        contract = self._require_contract(description)
        call_description = f"{description} using contract with address {self._contract_address}"

        logger.debug("About to %s calling method name %s", call_description, method_name)

        try:
            value = await asyncio.to_thread(
                lambda: getattr(contract.functions, method_name)(*args).call()
            )
        except Exception as e:
            raise self._failure(call_description, e) from e

        logger.info("Got %s from %s", value, call_description)
        return value

    async def send(self, method_name: str, args: list[Any], description: str) -> str:
        """State-changing transaction. Returns the transaction hash."""
        contract = self._require_contract(description)
        send_description = f"{description} using contract with address {self._contract_address}"

        logger.debug("About to %s", send_description)

        def transact() -> str:
            function = getattr(contract.functions, method_name)(*args)
            tx_hash = function.transact({"from": self._sender()})
            return Web3.to_hex(tx_hash)

        try:
            tx_hash = await asyncio.to_thread(transact)
        except Exception as e:
            raise self._failure(send_description, e) from e

        logger.info("Got transaction hash %s for %s", tx_hash, send_description)
        return tx_hash

    async def deploy(self, args: list[Any], description: str) -> str:
        """Deploy a new contract, wait for it to be mined and switch to it."""
        deploy_description = (
            f"{description} to network with id {self._network_id} with params {args}"
        )
        if not self._artifact.bytecode:
            raise self._failure(
                deploy_description, GatewayError("contract artifact has no bytecode")
            )

        logger.debug("About to %s", deploy_description)

        def transact() -> str:
            factory = self._web3.eth.contract(
                abi=self._artifact.abi, bytecode=self._artifact.bytecode
            )
            tx_hash = factory.constructor(*args).transact({"from": self._sender()})
            logger.info(
                "Got transaction hash %s for %s", Web3.to_hex(tx_hash), deploy_description
            )
            receipt = self._web3.eth.wait_for_transaction_receipt(tx_hash)
            return receipt["contractAddress"]

        try:
            address = await asyncio.to_thread(transact)
        except Exception as e:
            raise self._failure(deploy_description, e) from e

        if not address:
            raise self._failure(deploy_description, GatewayError("receipt has no contract address"))

        self.set_contract(address)
        return self._contract_address

    async def start(self) -> None:
        """Start the event watcher task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._watch())
        logger.debug(
            "Start watching for events on contract with address %s", self._contract_address
        )

    async def stop(self) -> None:
        """Stop the event watcher task."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _watch(self) -> None:
        while self._running:
            await self.poll_events()
            await asyncio.sleep(self._poll_interval)

    async def poll_events(self) -> int:
        """
        Fetch event logs mined since the last poll and deliver them.

        The first poll after a contract is set only records the latest
        block, so history before the watcher started is not replayed.

        Returns:
            Number of occurrences delivered
        """
        contract = self._contract
        if contract is None:
            return 0

        description = f"watching for events on contract with address {self._contract_address}"

        try:
            latest = await asyncio.to_thread(lambda: self._web3.eth.block_number)
            if self._last_block is None:
                self._last_block = latest
                return 0
            if latest <= self._last_block:
                return 0

            from_block = self._last_block + 1
            logs = await asyncio.to_thread(self._fetch_logs, contract, from_block, latest)
        except Exception as e:
            self._report_error(self._failure(description, e))
            return 0

        # A concurrent set_contract invalidates this batch.
        if contract is not self._contract:
            return 0
        self._last_block = latest

        for log in logs:
            self._dispatch(log)
        return len(logs)

    def _fetch_logs(self, contract: Contract, from_block: int, to_block: int) -> list:
        logs = []
        for name in self._artifact.event_names():
            event = getattr(contract.events, name)
            logs.extend(event.get_logs(from_block=from_block, to_block=to_block))

        logs.sort(key=lambda log: (log["blockNumber"], log["logIndex"]))
        return logs

    def _dispatch(self, log: Any) -> None:
        event_type = log["event"]
        fields = dict(log["args"])
        tx_hash = Web3.to_hex(log["transactionHash"])
        block_number = log["blockNumber"]

        logger.info(
            "Got event %s from contract %s with hash %s",
            event_type,
            self._contract_address,
            tx_hash,
            extra={"context": {"fields": fields, "block_number": block_number}},
        )

        if self._on_occurrence is None:
            return

        try:
            self._on_occurrence(event_type, fields, tx_hash, block_number)
        except Exception as e:
            logger.error("Error in occurrence handler for %s event: %s", event_type, e)

    def _report_error(self, error: GatewayError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception as e:
            logger.error("Error in gateway error handler: %s", e)

    def _require_contract(self, description: str) -> Contract:
        if self._contract is None:
            raise self._failure(description, GatewayError("No contract address configured"))
        return self._contract

    def _sender(self) -> str:
        if self._account:
            return self._account

        accounts = self._web3.eth.accounts
        if not accounts:
            raise GatewayError("No sender account configured and node has no accounts")
        return accounts[0]

    @staticmethod
    def _failure(description: str, cause: Exception) -> GatewayError:
        error = GatewayError(f"Failed to {description}. {cause}")
        logger.error(str(error))
        return error
