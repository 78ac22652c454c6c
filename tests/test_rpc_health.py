"""
Tests for polyarb/rpc_health.py
"""
from unittest.mock import MagicMock, PropertyMock

from polyarb.rpc_health import RPCHealth


class TestRPCHealth:
    def test_healthy(self, w3):
        ok, status = RPCHealth(w3).check()

        assert ok is True
        assert "block=1000" in status

    def test_node_error_is_unhealthy(self):
        w3 = MagicMock()
        type(w3.eth).block_number = PropertyMock(side_effect=ConnectionError("refused"))

        ok, status = RPCHealth(w3).check()

        assert ok is False
        assert "refused" in status

    def test_slow_node_is_unhealthy(self, w3):
        ok, status = RPCHealth(w3, max_latency=-1).check()

        assert ok is False
        assert "latency" in status

    def test_gas_price_in_gwei(self, w3):
        assert RPCHealth(w3).get_gas_price_gwei() == 10_000
        assert RPCHealth(w3).get_chain_id() == 137
