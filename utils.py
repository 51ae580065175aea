# utils.py
import json
import pandas as pd
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3, HTTPProvider
from typing import Any, List, Optional, Union
from requests import Session
import config
from logger import get_logger
from models import WalletRecord

logger = get_logger("Utils", config.LOG_LEVEL)

ADDRESS_COLUMNS = ("address", "add")
PRIVATE_KEY_COLUMNS = ("private_key", "private-key", "pk")


def _pick_column(columns: List[str], candidates: tuple) -> Optional[str]:
    for name in candidates:
        if name in columns:
            return name
    return None


def _cell(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    value = str(value).strip()
    return value or None


def load_wallets(path: str) -> List[WalletRecord]:
    """Loads wallets from a CSV file (or an .xlsx workbook), keeping file order.
    Expected columns: address, private key, optional proxy.
    Private keys are not validated here; a bad key fails that wallet only.
    """
    if str(path).lower().endswith((".xlsx", ".xls")):
        df = pd.read_excel(path, engine="openpyxl", dtype=str)
    else:
        df = pd.read_csv(path, dtype=str, skip_blank_lines=True)
    df.columns = df.columns.str.lower().str.strip()
    columns = list(df.columns)

    address_col = _pick_column(columns, ADDRESS_COLUMNS)
    key_col = _pick_column(columns, PRIVATE_KEY_COLUMNS)
    if address_col is None or key_col is None:
        raise ValueError(
            f"Wallet file must contain an address column {ADDRESS_COLUMNS} "
            f"and a private key column {PRIVATE_KEY_COLUMNS}"
        )
    has_proxy = "proxy" in columns

    wallets = []
    for idx, row in df.iterrows():
        address = _cell(row[address_col])
        private_key = _cell(row[key_col])
        if address is None and private_key is None:
            continue
        if address is None:
            logger.warning(f"Row {idx+2}: empty address")
        proxy = _cell(row["proxy"]) if has_proxy else None
        wallets.append(WalletRecord(address=address or "", private_key=private_key or "", proxy=proxy))

    logger.info(f"Loaded {len(wallets)} wallets from {path}")
    return wallets


def sign_message(private_key: str, message: str = config.SIGN_MESSAGE) -> str:
    """Signs message as an EIP-191 personal message, returns 0x-prefixed hex."""
    signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
    return Web3.to_hex(signed.signature)


def format_token_amount(amount: Union[int, str, None], decimals: int = config.TOKEN_DECIMALS) -> str:
    """Formats a base-unit amount as a decimal string: 10**18 -> "1.0", 0 -> "0"."""
    if amount is None or amount == "":
        return "0"
    try:
        value = int(amount)
    except (TypeError, ValueError) as e:
        logger.error(f"Cannot format token amount {amount!r}: {e}")
        return "0"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def normalize_proof_entry(entry: str) -> str:
    hex_value = entry[2:] if entry.startswith("0x") else entry
    return "0x" + hex_value.rjust(64, "0")


def normalize_proof(proof: Union[str, List[str]]) -> List[str]:
    """Pads every proof entry to 32 bytes. Accepts the JSON-encoded string the API returns."""
    if isinstance(proof, str):
        proof = json.loads(proof)
    return [normalize_proof_entry(str(p)) for p in proof]


def shorten_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"


def make_proxy_session(proxy: str) -> Session:
    session = Session()
    session.proxies = {'http': proxy, 'https': proxy}
    return session


def get_w3(rpc_url: str, proxy: Optional[str] = None, session: Optional[Session] = None) -> Web3:
    """Returns Web3 connection to RPC (with optional HTTP proxy session).
    A session passed in is reused and stays owned by the caller.
    """
    if session is None and proxy:
        session = make_proxy_session(proxy)
    if session is not None:
        provider = HTTPProvider(rpc_url, request_kwargs={'timeout': 30}, session=session)
    else:
        provider = HTTPProvider(rpc_url, request_kwargs={'timeout': 30})
    return Web3(provider)


def get_w3_with_retry(rpc_url: str, proxy: Optional[str] = None,
                      session: Optional[Session] = None) -> Optional[Web3]:
    """Returns Web3 connection with retries and verifies chain_id matches config.CHAIN_ID."""
    for attempt in range(1, config.RPC_TRY + 1):
        try:
            w3 = get_w3(rpc_url, proxy, session)
            chain_id = w3.eth.chain_id
            if chain_id == config.CHAIN_ID:
                return w3
            logger.warning(f"{rpc_url}: unexpected chain_id {chain_id} (expected {config.CHAIN_ID})")
            return None
        except Exception as e:
            logger.warning(f"Attempt {attempt}/{config.RPC_TRY} failed for {rpc_url}: {e}")
    logger.error(f"All attempts failed for {rpc_url}")
    return None
