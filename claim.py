# claim.py
from typing import Any, Dict, List, Optional, Tuple

from eth_account.signers.local import LocalAccount
from web3 import Web3

import config
from logger import get_logger
from utils import get_w3_with_retry, make_proxy_session, shorten_address

logger = get_logger("Claim", config.LOG_LEVEL)

CLAIM_ABI = [
    {
        "type": "function",
        "name": "claim",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "fullAmount", "type": "uint256"},
            {"name": "proof", "type": "bytes32[]"},
        ],
        "outputs": [],
    }
]


def build_claim_tx(w3: Web3, account: LocalAccount, amount: int, proof: List[str]) -> Dict[str, Any]:
    """Builds a legacy claim(fullAmount, proof) transaction with fixed gas settings."""
    contract = w3.eth.contract(
        address=Web3.to_checksum_address(config.CLAIM_CONTRACT_ADDRESS), abi=CLAIM_ABI
    )
    return contract.functions.claim(int(amount), proof).build_transaction({
        "from": account.address,
        "nonce": w3.eth.get_transaction_count(account.address),
        "gas": config.CLAIM_GAS_LIMIT,
        "gasPrice": Web3.to_wei(config.CLAIM_GAS_PRICE_GWEI, "gwei"),
        "chainId": w3.eth.chain_id,
    })


class ClaimSubmitter:
    """Signs and broadcasts claim transactions through the first reachable RPC."""

    def __init__(self, rpc_list: Optional[List[str]] = None, proxy: Optional[str] = None,
                 timeout: int = config.TX_TIMEOUT) -> None:
        self.rpc_list = rpc_list if rpc_list is not None else config.RPC_LIST
        self.proxy = proxy
        self.timeout = timeout
        # one proxied session shared by every RPC attempt, closed by close()
        self.session = make_proxy_session(proxy) if proxy else None

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def connect(self) -> Web3:
        for rpc in self.rpc_list:
            w3 = get_w3_with_retry(rpc, self.proxy, self.session)
            if w3 is not None:
                return w3
            logger.debug(f"RPC {rpc} unreachable, skipping")
        raise ConnectionError("No RPC endpoint reachable")

    def submit(self, account: LocalAccount, amount: int, proof: List[str]) -> Tuple[bool, Optional[str]]:
        """Returns (receipt.status == 1, tx hash). Build, send and receipt errors propagate."""
        w3 = self.connect()
        wallet_short = shorten_address(account.address)

        txn = build_claim_tx(w3, account, amount, proof)
        signed_txn = account.sign_transaction(txn)
        tx_hash = w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        tx_hex = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent ({wallet_short}), tx: {tx_hex}")

        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)
        if receipt["status"] == 1:
            logger.info(f"Transaction confirmed ({wallet_short}), tx: {tx_hex}")
            return True, tx_hex
        logger.warning(f"Transaction reverted ({wallet_short}), tx: {tx_hex}")
        return False, tx_hex
