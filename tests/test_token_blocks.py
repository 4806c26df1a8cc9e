"""Tests for TokenBlocks."""

import logging

import pytest
from eth_utils import to_checksum_address

from conftest import ALICE, BOB, TOKEN_ADDRESS
from ethblocks.blocks import OPCODES, parse_amount, validate_address
from ethblocks.errors import GatewayError, InvalidArgument, UnknownOpcode


class TestValidation:
    """Tests for block argument validation."""

    def test_valid_address_is_checksummed(self):
        """Test that a valid address comes back checksummed."""
        assert validate_address(ALICE, "TO") == to_checksum_address(ALICE)

    @pytest.mark.parametrize(
        "value", ["toAddress", "0x123", "", None, "0x" + "g" * 40, ALICE[2:]]
    )
    def test_invalid_address(self, value):
        """Test that malformed addresses raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            validate_address(value, "TO")

    @pytest.mark.parametrize("value,expected", [(10, 10), ("25", 25), (3.0, 3), ("1e3", 1000)])
    def test_parse_amount(self, value, expected):
        """Test parsing whole token amounts."""
        assert parse_amount(value, "VALUE") == expected

    @pytest.mark.parametrize("value", ["ten", -1, 1.5, True, "nan", None])
    def test_parse_amount_invalid(self, value):
        """Test that non-whole or negative amounts raise InvalidArgument."""
        with pytest.raises(InvalidArgument):
            parse_amount(value, "VALUE")


class TestGetInfo:
    """Tests for extension metadata."""

    def test_info_lists_every_opcode(self, token_blocks):
        """Test that every dispatchable opcode has a block."""
        info = token_blocks.get_info()

        assert info["id"] == "tokenBasic"
        assert [b["opcode"] for b in info["blocks"]] == list(OPCODES)

    def test_event_menu_matches_event_types(self, token_blocks):
        """Test that the events menu lists the configured event types."""
        menus = token_blocks.get_info()["menus"]

        assert [m["value"] for m in menus["events"]] == ["Transfer", "Approval"]
        assert {m["value"] for m in menus["eventProperties"]} == {
            "from", "to", "value", "owner", "spender",
        }

    def test_hat_block(self, token_blocks):
        """Test that isQueuedEvent is a hat block."""
        blocks = {b["opcode"]: b for b in token_blocks.get_info()["blocks"]}

        assert blocks["isQueuedEvent"]["blockType"] == "hat"
        assert blocks["setContract"]["arguments"]["NETWORK_ID"]["defaultValue"] == 3
        assert "arguments" not in blocks["totalSupply"]


class TestEventBlocks:
    """Tests for the event blocks over a real bridge."""

    def test_hat_fires_once(self, token_blocks, bridge, make_occurrence):
        """Test that the hat block fires once per queued event."""
        bridge.on_occurrence("Transfer", make_occurrence(value=10))

        assert token_blocks.is_queued_event({"EVENT_NAME": "Transfer"}) is True
        assert token_blocks.is_queued_event({"EVENT_NAME": "Transfer"}) is False

    def test_property_is_case_insensitive(self, token_blocks, bridge, make_occurrence):
        """Test that EVENT_PROPERTY is lowercased before lookup."""
        bridge.on_occurrence("Transfer", make_occurrence(to=BOB))
        token_blocks.is_queued_event({"EVENT_NAME": "Transfer"})

        value = token_blocks.get_queued_event_property(
            {"EVENT_NAME": "Transfer", "EVENT_PROPERTY": "TO"}
        )
        assert value == BOB

    def test_dequeue(self, token_blocks, bridge, make_occurrence):
        """Test that dequeueEvent consumes the announced event."""
        bridge.on_occurrence("Transfer", make_occurrence())
        token_blocks.is_queued_event({"EVENT_NAME": "Transfer"})

        token_blocks.dequeue_event({"EVENT_NAME": "Transfer"})

        assert bridge.stats("Transfer").depth == 0

    def test_unknown_event_type_degrades(self, token_blocks):
        """Test that unknown event types give no event and no value."""
        assert token_blocks.is_queued_event({"EVENT_NAME": "Bogus"}) is False
        assert token_blocks.get_queued_event_property(
            {"EVENT_NAME": "Bogus", "EVENT_PROPERTY": "value"}
        ) is None
        assert token_blocks.dequeue_event({"EVENT_NAME": "Bogus"}) is None

    def test_missing_property_degrades(self, token_blocks, bridge, make_occurrence):
        """Test that an absent field reports None."""
        bridge.on_occurrence("Transfer", make_occurrence(value=1))
        token_blocks.is_queued_event({"EVENT_NAME": "Transfer"})

        assert token_blocks.get_queued_event_property(
            {"EVENT_NAME": "Transfer", "EVENT_PROPERTY": "spender"}
        ) is None

    def test_dequeue_without_poll_keeps_event(self, token_blocks, bridge, make_occurrence):
        """Test that dequeueEvent before the hat fires is a logged no-op."""
        bridge.on_occurrence("Transfer", make_occurrence())

        token_blocks.dequeue_event({"EVENT_NAME": "Transfer"})

        assert bridge.stats("Transfer").depth == 1

    @pytest.mark.parametrize("event_name", [["Transfer"], {"name": "Transfer"}, 7])
    def test_non_string_event_name_degrades(self, token_blocks, bridge, make_occurrence, event_name):
        """Test that a list, object or number EVENT_NAME is an unknown event type."""
        bridge.on_occurrence("Transfer", make_occurrence(value=10))

        assert token_blocks.is_queued_event({"EVENT_NAME": event_name}) is False
        assert token_blocks.get_queued_event_property(
            {"EVENT_NAME": event_name, "EVENT_PROPERTY": "value"}
        ) is None
        assert token_blocks.dequeue_event({"EVENT_NAME": event_name}) is None
        assert bridge.stats("Transfer").depth == 1
        assert bridge.stats("Transfer").announced is False


class TestContractBlocks:
    """Tests for contract blocks over the mock gateway."""

    @pytest.mark.asyncio
    async def test_transfer(self, token_blocks, mock_gateway):
        """Test that transfer sends with checksummed address and int value."""
        tx_hash = await token_blocks.transfer({"TO": BOB, "VALUE": "10"})

        assert tx_hash == mock_gateway.send.return_value
        method, args, _ = mock_gateway.send.call_args.args
        assert method == "transfer"
        assert args == [to_checksum_address(BOB), 10]

    @pytest.mark.asyncio
    async def test_transfer_from_argument_order(self, token_blocks, mock_gateway):
        """Test that transferFrom passes from, to, value."""
        await token_blocks.transfer_from({"FROM": ALICE, "TO": BOB, "VALUE": 5})

        method, args, _ = mock_gateway.send.call_args.args
        assert method == "transferFrom"
        assert args == [to_checksum_address(ALICE), to_checksum_address(BOB), 5]

    @pytest.mark.asyncio
    async def test_approve(self, token_blocks, mock_gateway):
        """Test that approve calls the approve method."""
        await token_blocks.approve({"SPENDER": BOB, "VALUE": 7})

        method, args, _ = mock_gateway.send.call_args.args
        assert method == "approve"
        assert args == [to_checksum_address(BOB), 7]

    @pytest.mark.asyncio
    async def test_invalid_address_skips_gateway(self, token_blocks, mock_gateway):
        """Test that invalid input never reaches the gateway."""
        assert await token_blocks.transfer({"TO": "toAddress", "VALUE": 1}) is None
        assert await token_blocks.allowance({"OWNER": ALICE, "SPENDER": "nope"}) is None

        mock_gateway.send.assert_not_called()
        mock_gateway.call.assert_not_called()

    @pytest.mark.asyncio
    async def test_balance_of(self, token_blocks, mock_gateway):
        """Test that balanceOf returns the call result."""
        assert await token_blocks.balance_of({"ADDRESS": ALICE}) == 100
        assert mock_gateway.call.call_args.args[0] == "balanceOf"

    @pytest.mark.asyncio
    async def test_allowance(self, token_blocks, mock_gateway):
        """Test that allowance passes owner then spender."""
        await token_blocks.allowance({"OWNER": ALICE, "SPENDER": BOB})

        method, args, _ = mock_gateway.call.call_args.args
        assert method == "allowance"
        assert args == [to_checksum_address(ALICE), to_checksum_address(BOB)]

    @pytest.mark.asyncio
    async def test_total_supply(self, token_blocks, mock_gateway):
        """Test totalSupply with no arguments."""
        assert await token_blocks.total_supply({}) == 100
        assert mock_gateway.call.call_args.args[:2] == ("totalSupply", [])

    @pytest.mark.asyncio
    async def test_gateway_error_degrades(self, token_blocks, mock_gateway):
        """Test that gateway failures report None."""
        mock_gateway.call.side_effect = GatewayError("node down")

        assert await token_blocks.balance_of({"ADDRESS": ALICE}) is None

    @pytest.mark.asyncio
    async def test_gateway_error_logged_at_error(self, token_blocks, mock_gateway, caplog):
        """Test that gateway failures from calls, sends and deploys log at ERROR."""
        mock_gateway.call.side_effect = GatewayError("node down")
        mock_gateway.send.side_effect = GatewayError("node down")
        mock_gateway.deploy.side_effect = GatewayError("node down")

        with caplog.at_level(logging.DEBUG, logger="ethblocks.blocks"):
            await token_blocks.balance_of({"ADDRESS": ALICE})
            await token_blocks.transfer({"TO": BOB, "VALUE": 1})
            await token_blocks.deploy({"TOTAL_SUPPLY": 1000})

        failures = [r for r in caplog.records if "node down" in r.getMessage()]
        assert len(failures) == 3
        assert {r.levelname for r in failures} == {"ERROR"}

    @pytest.mark.asyncio
    async def test_deploy(self, token_blocks, mock_gateway):
        """Test that deploy passes the total supply."""
        assert await token_blocks.deploy({"TOTAL_SUPPLY": 1000}) == TOKEN_ADDRESS
        assert mock_gateway.deploy.call_args.args[0] == [1000]

    def test_set_contract(self, token_blocks, mock_gateway):
        """Test that setContract validates then switches contract."""
        token_blocks.set_contract({"ADDRESS": ALICE, "NETWORK_ID": "5"})

        mock_gateway.set_contract.assert_called_once_with(to_checksum_address(ALICE), 5)

    def test_set_contract_invalid(self, token_blocks, mock_gateway):
        """Test that setContract ignores malformed addresses."""
        token_blocks.set_contract({"ADDRESS": "tokenAddress", "NETWORK_ID": 3})

        mock_gateway.set_contract.assert_not_called()


class TestRun:
    """Tests for opcode dispatch."""

    @pytest.mark.asyncio
    async def test_run_sync_block(self, token_blocks, bridge, make_occurrence):
        """Test running a synchronous event block by opcode."""
        bridge.on_occurrence("Approval", make_occurrence("Approval"))

        assert await token_blocks.run("isQueuedEvent", {"EVENT_NAME": "Approval"}) is True

    @pytest.mark.asyncio
    async def test_run_async_block(self, token_blocks):
        """Test running an async contract block by opcode."""
        assert await token_blocks.run("totalSupply") == 100

    @pytest.mark.asyncio
    async def test_run_unknown_opcode(self, token_blocks):
        """Test that unknown opcodes raise UnknownOpcode."""
        with pytest.raises(UnknownOpcode):
            await token_blocks.run("selfDestruct", {})
