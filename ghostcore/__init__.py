"""Transactions, wire messages, a WebSocket client, token issuance and staking for a DAG ledger node."""

__version__ = "0.1.0"