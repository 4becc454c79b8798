"""
Chain definitions.

Each connector is configured with the list of chains the application
supports; a connection on any other chain is flagged ``unsupported``.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class NativeCurrency:
    name: str = "Ether"
    symbol: str = "ETH"
    decimals: int = 18


@dataclass(frozen=True)
class BlockExplorer:
    name: str
    url: str


@dataclass(frozen=True)
class Chain:
    """EVM chain metadata."""

    id: int
    name: str
    network: str
    native_currency: NativeCurrency = field(default_factory=NativeCurrency)
    rpc_urls: Dict[str, List[str]] = field(default_factory=dict)
    block_explorers: Dict[str, BlockExplorer] = field(default_factory=dict)
    testnet: bool = False

    @property
    def public_rpc_url(self) -> str:
        urls = self.rpc_urls.get("public") or self.rpc_urls.get("default") or [""]
        return urls[0]


def normalize_chain_id(chain_id: Union[int, str]) -> int:
    """
    Convert a chain id reported by a wallet to an int.

    Accepts ints, ``0x`` prefixed hex strings and decimal strings.
    """
    if isinstance(chain_id, bool):
        raise ValueError(f"Invalid chain id: {chain_id!r}")
    if isinstance(chain_id, int):
        return chain_id
    if isinstance(chain_id, str):
        value = chain_id.strip()
        if value.lower().startswith("0x"):
            return int(value, 16)
        return int(value, 10)
    raise ValueError(f"Invalid chain id: {chain_id!r}")


def placeholder_chain(chain_id: int) -> Chain:
    """Chain stub for ids the connector does not know about."""
    hex_id = hex(chain_id)
    return Chain(
        id=chain_id,
        name=f"Chain {hex_id}",
        network=hex_id,
        rpc_urls={"default": [""], "public": [""]},
    )


def find_chain(chains: List[Chain], chain_id: int) -> Optional[Chain]:
    return next((chain for chain in chains if chain.id == chain_id), None)


# =====================================================
# 🌐 BUNDLED CHAINS
# =====================================================

mainnet = Chain(
    id=1,
    name="Ethereum",
    network="homestead",
    rpc_urls={"default": ["https://cloudflare-eth.com"], "public": ["https://cloudflare-eth.com"]},
    block_explorers={
        "etherscan": BlockExplorer("Etherscan", "https://etherscan.io"),
        "default": BlockExplorer("Etherscan", "https://etherscan.io"),
    },
)

goerli = Chain(
    id=5,
    name="Goerli",
    network="goerli",
    native_currency=NativeCurrency("Goerli Ether", "ETH", 18),
    rpc_urls={"default": ["https://rpc.ankr.com/eth_goerli"], "public": ["https://rpc.ankr.com/eth_goerli"]},
    block_explorers={
        "etherscan": BlockExplorer("Etherscan", "https://goerli.etherscan.io"),
        "default": BlockExplorer("Etherscan", "https://goerli.etherscan.io"),
    },
    testnet=True,
)

sepolia = Chain(
    id=11155111,
    name="Sepolia",
    network="sepolia",
    native_currency=NativeCurrency("Sepolia Ether", "SEP", 18),
    rpc_urls={"default": ["https://rpc.sepolia.org"], "public": ["https://rpc.sepolia.org"]},
    block_explorers={
        "etherscan": BlockExplorer("Etherscan", "https://sepolia.etherscan.io"),
        "default": BlockExplorer("Etherscan", "https://sepolia.etherscan.io"),
    },
    testnet=True,
)

polygon = Chain(
    id=137,
    name="Polygon",
    network="matic",
    native_currency=NativeCurrency("MATIC", "MATIC", 18),
    rpc_urls={"default": ["https://polygon-rpc.com"], "public": ["https://polygon-rpc.com"]},
    block_explorers={
        "etherscan": BlockExplorer("PolygonScan", "https://polygonscan.com"),
        "default": BlockExplorer("PolygonScan", "https://polygonscan.com"),
    },
)

optimism = Chain(
    id=10,
    name="OP Mainnet",
    network="optimism",
    rpc_urls={"default": ["https://mainnet.optimism.io"], "public": ["https://mainnet.optimism.io"]},
    block_explorers={
        "etherscan": BlockExplorer("Etherscan", "https://optimistic.etherscan.io"),
        "default": BlockExplorer("Optimism Explorer", "https://explorer.optimism.io"),
    },
)

arbitrum = Chain(
    id=42161,
    name="Arbitrum One",
    network="arbitrum",
    rpc_urls={"default": ["https://arb1.arbitrum.io/rpc"], "public": ["https://arb1.arbitrum.io/rpc"]},
    block_explorers={
        "arbiscan": BlockExplorer("Arbiscan", "https://arbiscan.io"),
        "default": BlockExplorer("Arbiscan", "https://arbiscan.io"),
    },
)

DEFAULT_CHAINS: List[Chain] = [mainnet, goerli]
