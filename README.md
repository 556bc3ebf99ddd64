# ghostcore

Building blocks for a node on a DAG-based ledger network:

- `ghostcore.transaction`: `TransactionVertex`, a dataclass with a
  deterministic signing payload (`signing_payload`), an anti-spam proof of
  work (`mine_anti_spam`) and SHA-256 transaction ids (`compute_tx_id`,
  `finalize`). `to_dict` and `from_dict` convert it to and from JSON-compatible
  dicts, and `from_dict` raises `ValueError` on malformed input. `TxStatus` and
  `RangeProofStatus` describe the vertex's state.
- `ghostcore.ws_message`: `WsMessage` and `MessageType`, the JSON messages
  that peers exchange. Constructors cover ping/pong, state and checkpoint
  requests, checkpoint responses, peer lists, partition handshakes and
  partition sync. `WsMessage.from_json` raises `MessageParseError` on
  malformed input.
- `ghostcore.ws_client`: `WsClient`, an asyncio client that opens a new
  connection for each request and gives up after a timeout. It provides
  `ping`, `fetch_state`, `fetch_checkpoint`, `send_transaction` and
  `broadcast`. Failures come back as `False` or `None`. They are not raised.
- `ghostcore.ghost_token`: `GhostToken`, fixed-supply issuance with a
  one-time genesis allocation and a per-address cap. Node rewards are tiered
  by continuous uptime (`uptime_multiplier`) and halve every four years
  (`halvening_multiplier`). `NodeUptime` records each node's uptime.
- `ghostcore.staking`: `StakingManager`, which handles stake, slash
  (`ViolationType`), withdraw and slash-pool distribution. It reports
  validator and reward eligibility as `EligibilityStatus`. Requests that
  cannot be honoured raise `StakingError`.

## Installation

```
pip install ghostcore
```

For running the tests:

```
pip install "ghostcore[test]"
pytest
```

## Example

```python
from ghostcore.transaction import TransactionVertex
from ghostcore.ws_message import WsMessage
from ghostcore.staking import StakingManager, ViolationType

tx = TransactionVertex("sender_address", "receiver_address", 100, 1, 1000, "public_key_hex", [])
tx.mine_anti_spam(2)
tx.finalize()
print(tx.tx_id)

msg = WsMessage.partition_handshake("cp_abc", 1500, 3)
restored = WsMessage.from_json(msg.to_json())

balances = {"node1": 5000}
manager = StakingManager()
manager.stake("node1", 1000, balances)
result = manager.slash("node1", ViolationType.DOUBLE_VOTE, "")
print(result.slashed_amount, manager.eligibility("node1"))
```

Talking to a peer:

```python
import asyncio
from ghostcore.ws_client import WsClient

async def main():
    client = WsClient(timeout=5)
    print(await client.ping("ws://127.0.0.1:9000"))

asyncio.run(main())
```

## What this package does not do

- It is a library and has no command to run.
- It does not run a node and has no server that answers peers. `WsClient`
  only makes outgoing, one-shot requests.
- It does not keep a table of known peers or hold long-lived connections.
- It does not store or validate a DAG of transactions and does not verify
  signatures. `TransactionVertex` computes hashes and ids only.
- It does not save ledger state to disk.