from unittest import mock

import pytest
from eth_account import Account
from web3 import Web3

import claim
import config
from claim import ClaimSubmitter, build_claim_tx
from conftest import make_key

PROOF = ["0x" + "0" * 61 + "abc"]


def test_build_claim_tx_uses_fixed_legacy_gas():
    account = Account.from_key(make_key(1))
    w3 = mock.MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.chain_id = 56
    function = w3.eth.contract.return_value.functions.claim

    build_claim_tx(w3, account, 10 ** 18, PROOF)

    function.assert_called_once_with(10 ** 18, PROOF)
    params = function.return_value.build_transaction.call_args[0][0]
    assert params == {
        "from": account.address,
        "nonce": 7,
        "gas": 160000,
        "gasPrice": 1_020_000_000,
        "chainId": 56,
    }
    assert "maxFeePerGas" not in params
    contract_kwargs = w3.eth.contract.call_args.kwargs
    assert contract_kwargs["address"] == Web3.to_checksum_address(config.CLAIM_CONTRACT_ADDRESS)
    assert contract_kwargs["abi"][0]["name"] == "claim"


def legacy_tx(account):
    return {
        "to": Web3.to_checksum_address(config.CLAIM_CONTRACT_ADDRESS),
        "value": 0,
        "gas": 160000,
        "gasPrice": 1_020_000_000,
        "nonce": 0,
        "chainId": 56,
        "data": "0x",
    }


@pytest.mark.parametrize("status, expected", [(1, True), (0, False)])
def test_submit_reports_receipt_status(monkeypatch, status, expected):
    account = Account.from_key(make_key(2))
    w3 = mock.MagicMock()
    w3.eth.send_raw_transaction.return_value = b"\x11" * 32
    w3.eth.wait_for_transaction_receipt.return_value = {"status": status}
    monkeypatch.setattr(claim, "build_claim_tx", lambda *args: legacy_tx(account))

    submitter = ClaimSubmitter(rpc_list=["http://rpc"], timeout=5)
    monkeypatch.setattr(submitter, "connect", lambda: w3)
    success, tx_hash = submitter.submit(account, 10 ** 18, PROOF)

    assert success is expected
    assert tx_hash == "0x" + "11" * 32
    raw = w3.eth.send_raw_transaction.call_args[0][0]
    assert len(raw) > 0
    w3.eth.wait_for_transaction_receipt.assert_called_once_with(b"\x11" * 32, timeout=5)


def test_connect_skips_unreachable_rpcs(monkeypatch):
    w3 = object()
    results = {"http://down": None, "http://up": w3}
    monkeypatch.setattr(claim, "get_w3_with_retry", lambda rpc, proxy, session: results[rpc])

    assert ClaimSubmitter(rpc_list=["http://down", "http://up"]).connect() is w3


def test_connect_raises_when_no_rpc(monkeypatch):
    monkeypatch.setattr(claim, "get_w3_with_retry", lambda rpc, proxy, session: None)
    with pytest.raises(ConnectionError):
        ClaimSubmitter(rpc_list=["http://down"]).connect()


def test_proxy_session_is_shared_and_closed(monkeypatch):
    seen = []

    def fake_get_w3(rpc, proxy, session):
        seen.append((rpc, proxy, session))
        return None if rpc == "http://down" else object()

    monkeypatch.setattr(claim, "get_w3_with_retry", fake_get_w3)
    submitter = ClaimSubmitter(rpc_list=["http://down", "http://up"], proxy="http://proxy:1")
    session = submitter.session
    assert session.proxies == {"http": "http://proxy:1", "https": "http://proxy:1"}

    submitter.connect()
    assert [s for _, _, s in seen] == [session, session]

    closed = []
    monkeypatch.setattr(session, "close", lambda: closed.append(True))
    submitter.close()
    submitter.close()
    assert closed == [True]
    assert submitter.session is None


def test_no_session_without_proxy():
    submitter = ClaimSubmitter(rpc_list=[])
    assert submitter.session is None
    submitter.close()
