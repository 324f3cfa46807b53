"""On-chain reads (versions, proxy implementation slot) for forge-chronicles library."""

import logging
from typing import Any, List, Optional, Protocol

import requests
from eth_abi import decode as abi_decode
from eth_utils import keccak, to_checksum_address

from .constants import IMPLEMENTATION_SLOT
from .exceptions import ChainReaderUnavailableError

logger = logging.getLogger(__name__)

VERSION_SELECTOR = "0x" + keccak(text="version()")[:4].hex()


class ChainReader(Protocol):
    """Read-only view of deployed contracts."""

    def version_of(self, address: str) -> Optional[str]:
        """Return the contract's `version()` string, or None if unavailable."""
        ...

    def implementation_of(self, address: str) -> str:
        """Return the address stored in a proxy's EIP-1967 implementation slot."""
        ...


def rpc_call(rpc_url: str, method: str, params: List[Any]) -> Any:
    """
    Make a single JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method name
        params: Method parameters

    Returns:
        The `result` member of the response

    Raises:
        ValueError: If RPC returns an error
        RuntimeError: If network error occurs or the response is malformed
    """
    try:
        response = requests.post(
            rpc_url,
            json={"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
            timeout=30,
        )

        # Check for HTTP errors
        if response.status_code != 200:
            raise RuntimeError(f"RPC request failed with status {response.status_code}")

        result = response.json()

    except requests.RequestException as e:
        raise RuntimeError(f"Network error during RPC call: {e}") from e

    # Check for RPC errors
    if "error" in result:
        raise ValueError(f"RPC error: {result['error']}")
    if "result" not in result:
        raise RuntimeError(f"Malformed RPC response to {method}")

    return result["result"]


def decode_storage_address(word: str) -> str:
    """
    Extract the right-aligned address from a 32-byte storage word.

    Raises:
        ValueError: If the word is not a hex string
    """
    if not isinstance(word, str):
        raise ValueError(f"Expected a hex storage word, got {word!r}")
    clean = word.lower().removeprefix("0x").rjust(64, "0")
    return to_checksum_address("0x" + clean[-40:])


class RpcChainReader:
    """
    ChainReader backed by a JSON-RPC endpoint.

    Without an RPC URL, version lookups are skipped and upgrade verification
    is impossible.
    """

    def __init__(self, rpc_url: Optional[str] = None):
        self.rpc_url = rpc_url

    def version_of(self, address: str) -> Optional[str]:
        if self.rpc_url is None:
            return None
        try:
            data = rpc_call(
                self.rpc_url,
                "eth_call",
                [{"to": address, "data": VERSION_SELECTOR}, "latest"],
            )
            (version,) = abi_decode(["string"], bytes.fromhex(data.removeprefix("0x")))
        except Exception as e:  # version() is optional
            logger.debug(f"Version lookup failed for {address}: {e}")
            return None
        return version.strip().replace('"', "")

    def implementation_of(self, address: str) -> str:
        if self.rpc_url is None:
            raise ChainReaderUnavailableError(
                "No RPC URL provided, cannot verify upgrade was successful. Aborted."
            )
        try:
            word = rpc_call(
                self.rpc_url, "eth_getStorageAt", [address, IMPLEMENTATION_SLOT, "latest"]
            )
            return decode_storage_address(word)
        except (RuntimeError, ValueError) as e:
            raise ChainReaderUnavailableError(
                f"Failed to read implementation slot of {address}: {e}"
            ) from e
