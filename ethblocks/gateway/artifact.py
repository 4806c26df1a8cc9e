"""
Contract artifact loading.

A truffle-style artifact is a JSON file holding the compiled contract:
- abi: list of ABI entries
- bytecode: creation bytecode (needed for deploy)
- networks: {"<network id>": {"address": "0x..."}}
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# ERC-20 standard ABI, used when no artifact is configured
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_from", "type": "address"},
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transferFrom",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "owner", "type": "address"},
            {"indexed": True, "name": "spender", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
        "name": "Approval",
        "type": "event",
    },
]


@dataclass
class ContractArtifact:
    """Compiled contract: ABI, creation bytecode and known deployments."""

    abi: list[dict[str, Any]]
    bytecode: str | None = None
    networks: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path) -> "ContractArtifact":
        """Load an artifact from a JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if "abi" not in data:
            raise ValueError(f"Contract artifact {path} has no abi")

        return cls(
            abi=data["abi"],
            bytecode=data.get("bytecode") or None,
            networks=data.get("networks") or {},
        )

    @classmethod
    def erc20(cls) -> "ContractArtifact":
        """Standard ERC-20 ABI without bytecode (cannot deploy)."""
        return cls(abi=ERC20_ABI)

    def event_names(self) -> list[str]:
        """Names of the events declared in the ABI."""
        return [entry["name"] for entry in self.abi if entry.get("type") == "event"]

    def address_for(self, network_id: int) -> str | None:
        """Deployed address on network_id, if the artifact records one."""
        return self.networks.get(str(network_id), {}).get("address")
