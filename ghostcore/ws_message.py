"""Messages exchanged between nodes over WebSocket connections."""

from __future__ import annotations

import dataclasses
import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class MessageType(Enum):
    """Kind of a peer-to-peer message; the value is its wire name."""

    TRANSACTION = "transaction"
    PING = "ping"
    PONG = "pong"
    STATE_REQUEST = "state_request"
    STATE_RESPONSE = "state_response"
    PEER_LIST = "peer_list"
    DIFFICULTY_REQUEST = "difficulty_request"
    DIFFICULTY_RESPONSE = "difficulty_response"
    EXPLORER_REQUEST = "explorer_request"
    EXPLORER_RESPONSE = "explorer_response"
    CHECKPOINT_REQUEST = "checkpoint_request"
    CHECKPOINT_RESPONSE = "checkpoint_response"
    PARTITION_HANDSHAKE = "partition_handshake"
    PARTITION_HANDSHAKE_ACK = "partition_handshake_ack"
    PARTITION_SYNC_REQUEST = "partition_sync_request"
    PARTITION_SYNC_RESPONSE = "partition_sync_response"


class MessageParseError(ValueError):
    """Raised when a message cannot be decoded from JSON."""


@dataclass
class WsMessage:
    """A typed message with a JSON payload, a send time and the sender's name."""

    msg_type: MessageType
    payload: Any
    timestamp: float = field(default_factory=time.time)
    sender: str = ""

    def with_sender(self, sender: str) -> "WsMessage":
        return dataclasses.replace(self, sender=sender)

    def to_json(self) -> str:
        return json.dumps(
            {
                "type": self.msg_type.value,
                "payload": self.payload,
                "timestamp": float(self.timestamp),
                "sender": self.sender,
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )

    @classmethod
    def from_json(cls, data: str) -> "WsMessage":
        try:
            raw = json.loads(data)
        except json.JSONDecodeError as exc:
            raise MessageParseError(f"parse error: {exc}") from exc
        if not isinstance(raw, dict):
            raise MessageParseError("parse error: expected a JSON object")
        for key in ("type", "payload", "timestamp", "sender"):
            if key not in raw:
                raise MessageParseError(f"parse error: missing field `{key}`")
        try:
            msg_type = MessageType(raw["type"])
        except (ValueError, TypeError):
            raise MessageParseError(
                f"parse error: unknown variant `{raw['type']}`"
            ) from None
        timestamp = raw["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise MessageParseError("parse error: timestamp must be a number")
        sender = raw["sender"]
        if not isinstance(sender, str):
            raise MessageParseError("parse error: sender must be a string")
        return cls(msg_type, raw["payload"], float(timestamp), sender)

    @classmethod
    def ping(cls) -> "WsMessage":
        return cls(MessageType.PING, {})

    @classmethod
    def pong(cls, sender: str) -> "WsMessage":
        return cls(MessageType.PONG, {"status": "ok"}).with_sender(sender)

    @classmethod
    def state_request(cls) -> "WsMessage":
        return cls(MessageType.STATE_REQUEST, {})

    @classmethod
    def peer_list(cls, peers: Iterable[str]) -> "WsMessage":
        return cls(MessageType.PEER_LIST, {"peers": list(peers)})

    @classmethod
    def checkpoint_request(cls) -> "WsMessage":
        return cls(MessageType.CHECKPOINT_REQUEST, {})

    @classmethod
    def checkpoint_response(
        cls,
        checkpoint_id: str,
        state_root: str,
        sequence: int,
        dag_height: int,
        address_count: int,
        timestamp: int,
        is_finalized: bool,
    ) -> "WsMessage":
        return cls(
            MessageType.CHECKPOINT_RESPONSE,
            {
                "checkpoint_id": checkpoint_id,
                "state_root": state_root,
                "sequence": sequence,
                "dag_height": dag_height,
                "address_count": address_count,
                "timestamp": timestamp,
                "is_finalized": is_finalized,
            },
        )

    @classmethod
    def partition_handshake(
        cls, my_checkpoint_id: str, my_dag_height: int, my_sequence: int
    ) -> "WsMessage":
        return cls(
            MessageType.PARTITION_HANDSHAKE,
            {
                "checkpoint_id": my_checkpoint_id,
                "dag_height": my_dag_height,
                "sequence": my_sequence,
            },
        )

    @classmethod
    def partition_handshake_ack(
        cls, common_checkpoint_id: str, common_sequence: int, ready_to_sync: bool
    ) -> "WsMessage":
        return cls(
            MessageType.PARTITION_HANDSHAKE_ACK,
            {
                "common_checkpoint_id": common_checkpoint_id,
                "common_sequence": common_sequence,
                "ready_to_sync": ready_to_sync,
            },
        )

    @classmethod
    def partition_sync_request(cls, above_checkpoint_id: str) -> "WsMessage":
        return cls(
            MessageType.PARTITION_SYNC_REQUEST,
            {"above_checkpoint_id": above_checkpoint_id},
        )

    @classmethod
    def partition_sync_response(
        cls, checkpoint_id: str, transactions: Any, tx_count: int
    ) -> "WsMessage":
        return cls(
            MessageType.PARTITION_SYNC_RESPONSE,
            {
                "checkpoint_id": checkpoint_id,
                "transactions": transactions,
                "tx_count": tx_count,
            },
        )