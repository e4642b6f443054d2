"""Node RPC access: failover JSON-RPC client and the transaction source built on it."""
from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

RawTransaction = Dict[str, Any]


class RPCError(Exception):
    """Raised when the node returns an error or an unusable transaction."""


class RPCClient:
    """JSON-RPC 1.0 client for a DigiByte node, rotating through ``rpc_nodes`` on failure."""

    def __init__(
        self,
        rpc_nodes: List[Dict[str, str]],
        logger,
        retry_attempts: int = 3,
        retry_wait_seconds: int = 1,
        timeout_seconds: int = 10,
        rate_limit_per_sec: Optional[float] = None,
    ) -> None:
        if not rpc_nodes:
            raise ValueError("At least one RPC node must be configured")
        self.nodes = rpc_nodes
        self.logger = logger
        self.index = 0
        self.timeout = timeout_seconds
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait_seconds = max(0, retry_wait_seconds)
        self.rate_limit_per_sec = rate_limit_per_sec
        self._rate_lock = threading.Lock()
        self._last_call_ts = 0.0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], logger) -> "RPCClient":
        net_cfg = cfg["network"]
        return cls(
            net_cfg["rpc_nodes"],
            logger,
            retry_attempts=net_cfg.get("retry", 3),
            retry_wait_seconds=net_cfg.get("retry_wait", 1),
            timeout_seconds=net_cfg.get("timeout", 10),
            rate_limit_per_sec=net_cfg.get("rate_limit_per_sec"),
        )

    def _wait_for_slot(self) -> None:
        if not self.rate_limit_per_sec:
            return
        with self._rate_lock:
            remaining = 1.0 / self.rate_limit_per_sec - (time.time() - self._last_call_ts)
            if remaining > 0:
                time.sleep(remaining)
            self._last_call_ts = time.time()

    def _post(self, method: str, params: List[Any]) -> Any:
        node = self.nodes[self.index]
        auth = (node.get("user"), node.get("pass")) if node.get("user") else None
        self._wait_for_slot()
        response = requests.post(
            node["url"],
            json={"jsonrpc": "1.0", "id": "assetid", "method": method, "params": params},
            auth=auth,
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if body.get("error"):
            raise RPCError(body["error"])
        return body["result"]

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        attempts = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_fixed(self.retry_wait_seconds),
            retry=retry_if_exception_type((requests.RequestException, RPCError)),
            reraise=True,
        )
        for attempt in attempts:
            with attempt:
                try:
                    return self._post(method, params or [])
                except (requests.RequestException, RPCError) as exc:
                    self.logger.error("RPC %s failed on node %s: %s", method, self.index, exc)
                    if len(self.nodes) > 1:
                        self.index = (self.index + 1) % len(self.nodes)
                    raise

    def get_raw_transaction(self, txid: str) -> RawTransaction:
        """Verbose ``getrawtransaction``; the node must return the requested txid."""
        tx = self.call("getrawtransaction", [txid, 1])
        if not isinstance(tx, dict) or tx.get("txid") != txid:
            raise RPCError(f"Node returned no verbose transaction for {txid}")
        return tx

    def get_output_script(self, txid: str, vout: int) -> Optional[Dict[str, Any]]:
        outputs = self.get_raw_transaction(txid).get("vout") or []
        if not 0 <= vout < len(outputs):
            return None
        return outputs[vout].get("scriptPubKey") or None


class TransactionSource:
    """Fetches issuance transactions, attaching the script of the output the first input spends."""

    def __init__(self, rpc: RPCClient, logger, fetch_previous_output: bool = True) -> None:
        self.rpc = rpc
        self.logger = logger
        self.fetch_previous_output = fetch_previous_output

    def _attach_previous_output(self, first_input: Dict[str, Any]) -> None:
        if (first_input.get("previousOutput") or {}).get("hex"):
            return
        prev_txid = first_input.get("txid")
        vout = first_input.get("vout")
        if prev_txid is None or vout is None:
            self.logger.debug("Input has no outpoint, skipping previous output lookup")
            return

        script_pubkey = self.rpc.get_output_script(prev_txid, vout)
        if script_pubkey is None:
            self.logger.warning("Transaction %s has no output %s", prev_txid, vout)
            return
        first_input["previousOutput"] = script_pubkey
        self.logger.debug("Attached previous output %s:%s (%s)", prev_txid, vout, script_pubkey.get("type"))

    def fetch(self, txid: str) -> RawTransaction:
        tx = self.rpc.get_raw_transaction(txid)
        vin = tx.get("vin") or []
        if vin and self.fetch_previous_output:
            self._attach_previous_output(vin[0])
        return tx
