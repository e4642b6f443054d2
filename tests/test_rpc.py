import copy
import logging

import pytest

from assetid import rpc
from assetid.rpc import RPCClient, RPCError, TransactionSource

logger = logging.getLogger("assetid.tests")

nodes = [{"url": "http://node-a:14022", "user": "u", "pass": "p"}, {"url": "http://node-b:14022"}]


class FakeResponse:
    def __init__(self, body):
        self.body = body

    def raise_for_status(self):
        pass

    def json(self):
        return self.body


class FakeNode:
    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.calls = []

    def __call__(self, url, json=None, auth=None, timeout=None):
        self.calls.append((url, json["method"], json["params"], auth))
        if self.error:
            return FakeResponse({"result": None, "error": self.error})
        return FakeResponse({"result": copy.deepcopy(self.results[json["params"][0]]), "error": None})


@pytest.fixture
def client():
    return RPCClient(nodes, logger, retry_attempts=2, retry_wait_seconds=0)


def test_requires_nodes():
    with pytest.raises(ValueError):
        RPCClient([], logger)


def test_call(monkeypatch, client):
    node = FakeNode(results={"ab": {"txid": "ab"}})
    monkeypatch.setattr(rpc.requests, "post", node)
    assert client.call("getrawtransaction", ["ab", 1]) == {"txid": "ab"}
    assert node.calls == [("http://node-a:14022", "getrawtransaction", ["ab", 1], ("u", "p"))]


def test_error_retries_on_next_node(monkeypatch, client):
    node = FakeNode(error={"code": -5, "message": "No such transaction"})
    monkeypatch.setattr(rpc.requests, "post", node)
    with pytest.raises(RPCError):
        client.call("getrawtransaction", ["ab", 1])
    assert [call[0] for call in node.calls] == ["http://node-a:14022", "http://node-b:14022"]
    assert node.calls[1][3] is None


def test_from_config():
    cfg = {"network": {"rpc_nodes": nodes, "retry": 5, "retry_wait": 0, "timeout": 3}}
    client = RPCClient.from_config(cfg, logger)
    assert client.retry_attempts == 5
    assert client.timeout == 3


issuance = {
    "txid": "11" * 32,
    "vin": [{"txid": "22" * 32, "vout": 1, "scriptSig": {"asm": "", "hex": ""}}],
}
spent = {
    "txid": "22" * 32,
    "vout": [
        {"n": 0, "scriptPubKey": {"hex": "51", "type": "nonstandard"}},
        {"n": 1, "scriptPubKey": {"hex": "a914" + "00" * 20 + "87", "type": "scripthash"}},
    ],
}


def test_fetch_attaches_previous_output(monkeypatch, client):
    node = FakeNode(results={issuance["txid"]: issuance, spent["txid"]: spent})
    monkeypatch.setattr(rpc.requests, "post", node)
    tx = TransactionSource(client, logger).fetch(issuance["txid"])
    assert tx["vin"][0]["previousOutput"]["hex"] == "a914" + "00" * 20 + "87"
    assert [call[2] for call in node.calls] == [[issuance["txid"], 1], [spent["txid"], 1]]


def test_fetch_without_previous_output(monkeypatch, client):
    node = FakeNode(results={issuance["txid"]: {"txid": issuance["txid"], "vin": [{"txid": "22" * 32, "vout": 1}]}})
    monkeypatch.setattr(rpc.requests, "post", node)
    tx = TransactionSource(client, logger, fetch_previous_output=False).fetch(issuance["txid"])
    assert "previousOutput" not in tx["vin"][0]
    assert len(node.calls) == 1


def test_fetch_skips_coinbase(monkeypatch, client):
    coinbase = {"txid": "33" * 32, "vin": [{"coinbase": "03abcdef", "sequence": 0}]}
    node = FakeNode(results={coinbase["txid"]: coinbase})
    monkeypatch.setattr(rpc.requests, "post", node)
    tx = TransactionSource(client, logger).fetch(coinbase["txid"])
    assert "previousOutput" not in tx["vin"][0]


def test_get_raw_transaction_checks_txid(monkeypatch, client):
    node = FakeNode(results={"ab": {"txid": "cd"}})
    monkeypatch.setattr(rpc.requests, "post", node)
    with pytest.raises(RPCError):
        client.get_raw_transaction("ab")


def test_get_output_script(monkeypatch, client):
    node = FakeNode(results={spent["txid"]: spent})
    monkeypatch.setattr(rpc.requests, "post", node)
    assert client.get_output_script(spent["txid"], 0) == {"hex": "51", "type": "nonstandard"}
    assert client.get_output_script(spent["txid"], 2) is None


def test_missing_spent_output_is_skipped(monkeypatch, client):
    lone = {"txid": "44" * 32, "vin": [{"txid": spent["txid"], "vout": 7}]}
    node = FakeNode(results={lone["txid"]: lone, spent["txid"]: spent})
    monkeypatch.setattr(rpc.requests, "post", node)
    tx = TransactionSource(client, logger).fetch(lone["txid"])
    assert "previousOutput" not in tx["vin"][0]
