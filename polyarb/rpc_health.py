# polyarb/rpc_health.py
"""
RPC Connection & Health
Builds the Web3 client and checks latency and block freshness at startup
"""

import time
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from polyarb.config import ConfigError

MAX_RPC_LATENCY = 2.0  # seconds


def connect(rpc_url: str, timeout: float) -> Web3:
    """
    HTTP Web3 client for Polygon.
    Every request carries ``timeout`` so a hung node fails the call instead
    of stalling the cycle.
    """
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    if not w3.is_connected():
        raise ConfigError(f"RPC not connected: {rpc_url.split('/v2/')[0]}")

    return w3


class RPCHealth:
    """
    Monitor RPC health
    """

    def __init__(self, w3: Web3, max_latency: float = MAX_RPC_LATENCY):
        self.w3 = w3
        self.max_latency = max_latency

    def check(self) -> tuple:
        """
        Check RPC health
        Returns (is_healthy: bool, status_message: str)
        """
        try:
            start = time.time()
            latest = self.w3.eth.block_number
            latency = time.time() - start

            if latency > self.max_latency:
                return False, f"High latency {latency:.2f}s"

            return True, f"OK (latency={latency:.2f}s, block={latest})"

        except Exception as e:
            return False, str(e)

    def get_chain_id(self) -> int:
        """Get chain ID"""
        return self.w3.eth.chain_id

    def get_gas_price_gwei(self) -> float:
        """Get current gas price in gwei"""
        return self.w3.eth.gas_price / 10**9
