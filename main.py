# main.py
import argparse
import asyncio
import sys
from typing import List, Optional

from logger import get_logger
import config
from runner import RunOptions, run_wallets
from utils import get_w3_with_retry

logger = get_logger("Main", config.LOG_LEVEL)

ASCII_BANNER = r"""
  _____ _   _ _____    ____ _        _    ___ __  __
 |  ___| | | | ____|  / ___| |      / \  |_ _|  \/  |
 | |_  | |_| |  _|   | |   | |     / _ \  | || |\/| |
 |  _| |  _  | |___  | |___| |___ / ___ \ | || |  | |
 |_|   |_| |_|_____|  \____|_____/_/   \_\___|_|  |_|
"""


def print_banner() -> None:
    print(ASCII_BANNER)


def menu() -> None:
    print("Select an action:")
    print("1. Check eligibility")
    print("2. Check and claim")
    print("3. Check RPC connection")
    print("4. Exit")


async def check_rpc() -> None:
    """Checks availability of RPC nodes and reports chain_id match"""
    print("Checking RPC connectivity...\n")
    for rpc_url in config.RPC_LIST:
        try:
            w3 = get_w3_with_retry(rpc_url, None)
            status = "OK" if w3 else "FAIL"
            chain_id = w3.eth.chain_id if w3 else "N/A"
            print(f"{rpc_url}: {status} (chain_id: {chain_id})")
        except Exception as e:
            print(f"{rpc_url}: ERROR ({e})")
    print()


async def run_action(action: str, wallets_path: str, concurrency: Optional[int]) -> None:
    if action == "check":
        logger.info("Starting eligibility check...")
        await run_wallets(RunOptions.check(), wallets_path, concurrency)
    elif action == "claim":
        logger.info("Starting check and claim...")
        await run_wallets(RunOptions.claim(), wallets_path, concurrency)
    elif action == "rpc":
        logger.info("Checking RPC connectivity...")
        await check_rpc()


async def main_loop(wallets_path: str) -> None:
    print_banner()
    actions = {"1": "check", "2": "claim", "3": "rpc"}
    while True:
        try:
            menu()
            choice = input("Enter action number: ").strip()
            if choice in actions:
                await run_action(actions[choice], wallets_path, None)
            elif choice == "4":
                logger.info("Exiting...")
                sys.exit(0)
            else:
                print("Invalid input, please try again.\n")
        except Exception as e:
            logger.error(f"Error in main loop: {e}")
            print("An error occurred, please restart the script.\n")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="FHE airdrop eligibility checker and claimer")
    parser.add_argument("action", nargs="?", choices=["check", "claim", "rpc"],
                        help="run one action and exit (interactive menu if omitted)")
    parser.add_argument("--wallets", default=config.WALLETS_PATH, help="wallet CSV or XLSX file")
    parser.add_argument("--concurrency", type=int, default=None, help="wallets processed at once")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.action is None:
        asyncio.run(main_loop(args.wallets))
        return 0
    try:
        asyncio.run(run_action(args.action, args.wallets, args.concurrency))
    except Exception as e:
        logger.error(f"Run failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
