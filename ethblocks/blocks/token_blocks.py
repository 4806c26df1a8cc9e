"""Basic ERC20 token blocks."""

import inspect
from typing import Any

from ..errors import EventBridgeError, GatewayError, InvalidArgument, UnknownOpcode
from ..event_bridge import IEventBridge
from ..gateway import IContractGateway
from ..logging_config import get_logger
from ..models import ArgumentType, BlockType
from .validation import parse_amount, validate_address

logger = get_logger(__name__)

EVENT_PROPERTIES = ("from", "to", "value", "owner", "spender")

# host opcode -> handler method
OPCODES = {
    "setContract": "set_contract",
    "deploy": "deploy",
    "isQueuedEvent": "is_queued_event",
    "dequeueEvent": "dequeue_event",
    "getQueuedEventProperty": "get_queued_event_property",
    "transfer": "transfer",
    "transferFrom": "transfer_from",
    "approve": "approve",
    "balanceOf": "balance_of",
    "allowance": "allowance",
    "totalSupply": "total_supply",
}


class TokenBlocks:
    """Blocks for one ERC20 token contract and its queued events."""

    extension_id = "tokenBasic"
    name = "Basic ERC20 Token"

    def __init__(
        self,
        gateway: IContractGateway,
        bridge: IEventBridge,
        event_types: list[str],
    ):
        self._gateway = gateway
        self._bridge = bridge
        self._event_types = list(event_types)

    @property
    def event_types(self) -> list[str]:
        return list(self._event_types)

    def get_info(self) -> dict:
        """Extension metadata: blocks in display order and their menus."""
        default_event = self._event_types[0] if self._event_types else ""

        def event_name_arg() -> dict:
            return {
                "type": ArgumentType.STRING.value,
                "menu": "events",
                "defaultValue": default_event,
            }

        def address_arg(default: str) -> dict:
            return {"type": ArgumentType.STRING.value, "defaultValue": default}

        def number_arg(default: int = 0) -> dict:
            return {"type": ArgumentType.NUMBER.value, "defaultValue": default}

        blocks = [
            self._block(
                "setContract",
                BlockType.COMMAND,
                "Set contract [ADDRESS] on network with id [NETWORK_ID]",
                ADDRESS=address_arg("tokenAddress"),
                NETWORK_ID=number_arg(self._gateway.network_id),
            ),
            self._block(
                "deploy",
                BlockType.COMMAND,
                "Deploy contract with total supply [TOTAL_SUPPLY]",
                TOTAL_SUPPLY=number_arg(),
            ),
            self._block(
                "isQueuedEvent",
                BlockType.HAT,
                "When [EVENT_NAME] event queued",
                EVENT_NAME=event_name_arg(),
            ),
            self._block(
                "dequeueEvent",
                BlockType.COMMAND,
                "Dequeue [EVENT_NAME] event",
                EVENT_NAME=event_name_arg(),
            ),
            self._block(
                "getQueuedEventProperty",
                BlockType.REPORTER,
                "Property [EVENT_PROPERTY] of [EVENT_NAME] event",
                EVENT_NAME=event_name_arg(),
                EVENT_PROPERTY={
                    "type": ArgumentType.STRING.value,
                    "menu": "eventProperties",
                    "defaultValue": "to",
                },
            ),
            self._block(
                "transfer",
                BlockType.COMMAND,
                "Transfer [VALUE] tokens to [TO]",
                TO=address_arg("toAddress"),
                VALUE=number_arg(),
            ),
            self._block(
                "transferFrom",
                BlockType.COMMAND,
                "Transfer [VALUE] tokens from [FROM] to [TO]",
                FROM=address_arg("fromAddress"),
                TO=address_arg("toAddress"),
                VALUE=number_arg(),
            ),
            self._block(
                "approve",
                BlockType.COMMAND,
                "Approve [VALUE] tokens to be spent by spender [SPENDER]",
                SPENDER=address_arg("spenderAddress"),
                VALUE=number_arg(),
            ),
            self._block(
                "balanceOf",
                BlockType.REPORTER,
                "Balance of [ADDRESS]",
                ADDRESS=address_arg("ownerAddress"),
            ),
            self._block(
                "allowance",
                BlockType.REPORTER,
                "Allowance from [OWNER] to [SPENDER]",
                OWNER=address_arg("ownerAddress"),
                SPENDER=address_arg("spenderAddress"),
            ),
            self._block("totalSupply", BlockType.REPORTER, "Total supply"),
        ]

        return {
            "id": self.extension_id,
            "name": self.name,
            "blocks": blocks,
            "menus": {
                "events": [{"text": name, "value": name} for name in self._event_types],
                "eventProperties": [
                    {"text": prop.capitalize(), "value": prop} for prop in EVENT_PROPERTIES
                ],
            },
        }

    @staticmethod
    def _block(opcode: str, block_type: BlockType, text: str, **arguments: dict) -> dict:
        block = {"opcode": opcode, "blockType": block_type.value, "text": text}
        if arguments:
            block["arguments"] = arguments
        return block

    async def run(self, opcode: str, args: dict | None = None) -> Any:
        """Run the block behind a host opcode."""
        method_name = OPCODES.get(opcode)
        if method_name is None:
            raise UnknownOpcode(f'No block with opcode "{opcode}"')

        result = getattr(self, method_name)(args or {})
        if inspect.isawaitable(result):
            result = await result
        return result

    # Event blocks

    def is_queued_event(self, args: dict) -> bool:
        """Hat block: True once per newly queued event."""
        event_name = args.get("EVENT_NAME")
        try:
            return self._bridge.poll(event_name)
        except EventBridgeError as e:
            logger.error("Failed to check for queued event: %s", e)
            return False

    def dequeue_event(self, args: dict) -> None:
        """Consume the announced event."""
        event_name = args.get("EVENT_NAME")
        try:
            self._bridge.dequeue(event_name)
        except EventBridgeError as e:
            logger.error('Failed to dequeue the "%s" event: %s', event_name, e)

    def get_queued_event_property(self, args: dict) -> Any:
        """Reporter: a field of the announced event, or None."""
        event_name = args.get("EVENT_NAME")
        property_name = str(args.get("EVENT_PROPERTY", "")).lower()
        try:
            return self._bridge.peek_field(event_name, property_name)
        except EventBridgeError as e:
            logger.error(
                'Failed to read property "%s" from queued "%s" event: %s',
                property_name,
                event_name,
                e,
            )
            return None

    # Contract blocks

    def set_contract(self, args: dict) -> None:
        try:
            address = validate_address(args.get("ADDRESS"), "ADDRESS")
            network_id = args.get("NETWORK_ID")
            if network_id is not None:
                network_id = parse_amount(network_id, "NETWORK_ID")
        except InvalidArgument as e:
            logger.error("%s for the setContract command", e)
            return

        try:
            self._gateway.set_contract(address, network_id)
        except GatewayError as e:
            logger.error("Failed to set contract: %s", e)

    async def deploy(self, args: dict) -> str | None:
        try:
            total_supply = parse_amount(args.get("TOTAL_SUPPLY", 0), "TOTAL_SUPPLY")
        except InvalidArgument as e:
            logger.error("%s for the deploy command", e)
            return None

        try:
            return await self._gateway.deploy(
                [total_supply],
                f"deploy token contract with total supply of {total_supply}",
            )
        except GatewayError as e:
            logger.error("deploy block failed: %s", e)
            return None

    async def transfer(self, args: dict) -> str | None:
        try:
            to = validate_address(args.get("TO"), "TO")
            value = parse_amount(args.get("VALUE"), "VALUE")
        except InvalidArgument as e:
            logger.error("%s for the transfer command", e)
            return None

        return await self._send(
            "transfer", [to, value], f"transfer {value} tokens to address {to}"
        )

    async def transfer_from(self, args: dict) -> str | None:
        try:
            from_ = validate_address(args.get("FROM"), "FROM")
            to = validate_address(args.get("TO"), "TO")
            value = parse_amount(args.get("VALUE"), "VALUE")
        except InvalidArgument as e:
            logger.error("%s for the transferFrom command", e)
            return None

        return await self._send(
            "transferFrom",
            [from_, to, value],
            f"transfer {value} tokens from address {from_} to address {to}",
        )

    async def approve(self, args: dict) -> str | None:
        try:
            spender = validate_address(args.get("SPENDER"), "SPENDER")
            value = parse_amount(args.get("VALUE"), "VALUE")
        except InvalidArgument as e:
            logger.error("%s for the approve command", e)
            return None

        return await self._send(
            "approve",
            [spender, value],
            f"approve {value} tokens to be spent by spender address {spender}",
        )

    async def balance_of(self, args: dict) -> int | None:
        try:
            owner = validate_address(args.get("ADDRESS"), "ADDRESS")
        except InvalidArgument as e:
            logger.error("%s for the balanceOf command", e)
            return None

        return await self._call(
            "balanceOf", [owner], f"get token balance of owner address {owner}"
        )

    async def allowance(self, args: dict) -> int | None:
        try:
            owner = validate_address(args.get("OWNER"), "OWNER")
            spender = validate_address(args.get("SPENDER"), "SPENDER")
        except InvalidArgument as e:
            logger.error("%s for the allowance command", e)
            return None

        return await self._call(
            "allowance",
            [owner, spender],
            f"get token allowance for spender {spender} to transfer from owner {owner}",
        )

    async def total_supply(self, args: dict | None = None) -> int | None:
        return await self._call("totalSupply", [], "get total supply")

    async def _call(self, method_name: str, args: list, description: str) -> Any:
        try:
            return await self._gateway.call(method_name, args, description)
        except GatewayError as e:
            logger.error("%s block failed: %s", method_name, e)
            return None

    async def _send(self, method_name: str, args: list, description: str) -> str | None:
        try:
            return await self._gateway.send(method_name, args, description)
        except GatewayError as e:
            logger.error("%s block failed: %s", method_name, e)
            return None
