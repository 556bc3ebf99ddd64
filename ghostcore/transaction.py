"""Transaction vertices of the ledger DAG: payloads, hashes and anti-spam mining."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TxStatus(Enum):
    """Lifecycle state of a transaction in the DAG."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CONFLICT = "conflict"

    def as_str(self) -> str:
        return self.value

    @property
    def wire_name(self) -> str:
        """Name used in serialized transactions, e.g. ``"Pending"``."""
        return self.name.capitalize()

    @classmethod
    def from_wire(cls, name: str) -> "TxStatus":
        for status in cls:
            if name in (status.wire_name, status.value):
                return status
        raise ValueError(f"unknown transaction status: {name!r}")


class RangeProofStatus(Enum):
    """How far a confidential transaction's range proof can be trusted."""

    VERIFIED = "Verified"
    EXPERIMENTAL = "Experimental"
    MISSING = "Missing"


def _canonical_json(mapping: dict[str, Any]) -> str:
    return json.dumps(mapping, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


_REQUIRED_FIELDS = (
    "sender",
    "receiver",
    "amount",
    "nonce",
    "timestamp",
    "public_key",
    "parents",
    "signature",
    "anti_spam_nonce",
    "anti_spam_hash",
    "ephemeral_pubkey",
    "status",
    "weight",
    "tx_id",
    "stem_ttl",
    "range_proof_status",
)

_OPTIONAL_FIELDS = (
    "commitment",
    "balance_proof",
    "range_proof",
    "excess_commitment",
    "excess_signature",
)


@dataclass
class TransactionVertex:
    """A transfer between two addresses, referencing its parents in the DAG."""

    sender: str
    receiver: str
    amount: int
    nonce: int
    timestamp: int
    public_key: str
    parents: list[str] = field(default_factory=list)
    signature: str = ""
    anti_spam_nonce: int = 0
    anti_spam_hash: str = ""
    ephemeral_pubkey: str = ""
    status: TxStatus = TxStatus.PENDING
    weight: int = 1
    tx_id: str = ""
    commitment: str | None = None
    balance_proof: str | None = None
    stem_ttl: int = 0
    range_proof_status: RangeProofStatus = RangeProofStatus.MISSING
    range_proof: str | None = None
    excess_commitment: str | None = None
    excess_signature: str | None = None

    def _base_fields(self) -> dict[str, Any]:
        return {
            "sender": self.sender,
            "receiver": self.receiver,
            "amount": self.amount,
            "nonce": self.nonce,
            "timestamp": self.timestamp,
            "public_key": self.public_key,
            "parents": list(self.parents),
            "anti_spam_nonce": self.anti_spam_nonce,
            "ephemeral_pubkey": self.ephemeral_pubkey,
        }

    def signing_payload(self) -> bytes:
        """Canonical bytes that the sender signs."""
        return _canonical_json(self._base_fields()).encode("utf-8")

    def compute_anti_spam_hash(self) -> str:
        return _sha256_hex(self.signing_payload())

    def compute_tx_id(self) -> str:
        fields = self._base_fields()
        fields["anti_spam_hash"] = self.anti_spam_hash
        fields["signature"] = self.signature
        return _sha256_hex(_canonical_json(fields).encode("utf-8"))

    def finalize(self) -> None:
        """Fill in the anti-spam hash and the transaction id."""
        self.anti_spam_hash = self.compute_anti_spam_hash()
        self.tx_id = self.compute_tx_id()

    def mine_anti_spam(self, difficulty: int) -> None:
        """Search for an anti-spam nonce whose hash starts with ``difficulty`` zeros."""
        prefix = "0" * difficulty
        nonce = 0
        while True:
            self.anti_spam_nonce = nonce
            digest = self.compute_anti_spam_hash()
            if digest.startswith(prefix):
                self.anti_spam_hash = digest
                return
            nonce += 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "sender": self.sender,
            "receiver": self.receiver,
            "amount": self.amount,
            "nonce": self.nonce,
            "timestamp": self.timestamp,
            "public_key": self.public_key,
            "parents": list(self.parents),
            "signature": self.signature,
            "anti_spam_nonce": self.anti_spam_nonce,
            "anti_spam_hash": self.anti_spam_hash,
            "ephemeral_pubkey": self.ephemeral_pubkey,
            "status": self.status.wire_name,
            "weight": self.weight,
            "tx_id": self.tx_id,
            "commitment": self.commitment,
            "balance_proof": self.balance_proof,
            "stem_ttl": self.stem_ttl,
            "range_proof_status": self.range_proof_status.value,
            "range_proof": self.range_proof,
            "excess_commitment": self.excess_commitment,
            "excess_signature": self.excess_signature,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransactionVertex":
        """Build a transaction from :meth:`to_dict` output; raises ``ValueError`` if malformed."""
        if not isinstance(data, dict):
            raise ValueError("transaction must be a JSON object")
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"missing field(s): {', '.join(missing)}")
        try:
            range_status = RangeProofStatus(data["range_proof_status"])
        except ValueError:
            raise ValueError(
                f"unknown range proof status: {data['range_proof_status']!r}"
            ) from None
        values: dict[str, Any] = {name: data[name] for name in _REQUIRED_FIELDS}
        values["parents"] = list(values["parents"])
        values["status"] = TxStatus.from_wire(data["status"])
        values["range_proof_status"] = range_status
        for name in _OPTIONAL_FIELDS:
            values[name] = data.get(name)
        return cls(**values)