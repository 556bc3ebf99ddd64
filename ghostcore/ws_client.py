"""One-shot WebSocket client for talking to peer nodes."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import websockets
from websockets.exceptions import WebSocketException

from ghostcore.transaction import TransactionVertex
from ghostcore.ws_message import MessageParseError, MessageType, WsMessage

_EXPECTED_FAILURES = (
    OSError,
    asyncio.TimeoutError,
    TimeoutError,
    WebSocketException,
    MessageParseError,
)


class WsClient:
    """Opens a fresh connection per request and gives up after ``timeout`` seconds."""

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    async def _send_only(self, peer_url: str, msg: WsMessage) -> None:
        async with websockets.connect(peer_url) as ws:
            await ws.send(msg.to_json())

    async def _exchange(self, peer_url: str, msg: WsMessage) -> WsMessage | None:
        async with websockets.connect(peer_url) as ws:
            await ws.send(msg.to_json())
            raw = await ws.recv()
        if not isinstance(raw, str):
            return None
        return WsMessage.from_json(raw)

    async def _request(
        self, peer_url: str, msg: WsMessage, expected: MessageType
    ) -> WsMessage | None:
        try:
            response = await asyncio.wait_for(
                self._exchange(peer_url, msg), timeout=self.timeout
            )
        except _EXPECTED_FAILURES:
            return None
        if response is None or response.msg_type is not expected:
            return None
        return response

    async def _send_msg(self, peer_url: str, msg: WsMessage) -> bool:
        try:
            await asyncio.wait_for(self._send_only(peer_url, msg), timeout=self.timeout)
        except _EXPECTED_FAILURES:
            return False
        return True

    async def send_transaction(self, peer_url: str, tx: TransactionVertex) -> bool:
        """Deliver a transaction to one peer; True if it was sent."""
        msg = WsMessage(MessageType.TRANSACTION, tx.to_dict())
        return await self._send_msg(peer_url, msg)

    async def ping(self, peer_url: str) -> bool:
        """True if the peer answers a ping with a pong in time."""
        response = await self._request(peer_url, WsMessage.ping(), MessageType.PONG)
        return response is not None

    async def fetch_state(self, peer_url: str) -> Any | None:
        """Ask a peer for its state; return the payload, or None on any failure."""
        response = await self._request(
            peer_url, WsMessage.state_request(), MessageType.STATE_RESPONSE
        )
        return None if response is None else response.payload

    async def fetch_checkpoint(self, peer_url: str) -> Any | None:
        """Ask a peer for its latest checkpoint; return the payload, or None."""
        response = await self._request(
            peer_url, WsMessage.checkpoint_request(), MessageType.CHECKPOINT_RESPONSE
        )
        return None if response is None else response.payload

    async def broadcast(
        self, peers: Iterable[str], tx: TransactionVertex
    ) -> dict[str, bool]:
        """Send a transaction to each peer in turn; map each peer to its outcome."""
        results: dict[str, bool] = {}
        for peer in peers:
            results[peer] = await self.send_transaction(peer, tx)
        return results