"""ContractGateway module."""

from .artifact import ERC20_ABI, ContractArtifact
from .gateway import ErrorHandler, IContractGateway, OccurrenceHandler, Web3ContractGateway

__all__ = [
    "ERC20_ABI",
    "ContractArtifact",
    "ErrorHandler",
    "IContractGateway",
    "OccurrenceHandler",
    "Web3ContractGateway",
]
