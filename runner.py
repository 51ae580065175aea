# runner.py
import asyncio
import csv
import random
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from eth_account import Account

import config
from claim import ClaimSubmitter
from eligibility import EligibilityClient, fetch_eligibility
from logger import get_logger
from models import EligibilityResult, OutcomeStatus, RunStatistics, WalletOutcome, WalletRecord
from utils import format_token_amount, load_wallets, normalize_proof, shorten_address, sign_message

logger = get_logger("Runner", config.LOG_LEVEL)

Handler = Callable[[WalletRecord, int], Awaitable[WalletOutcome]]
Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RunOptions:
    perform_claim: bool
    request_timeout: Optional[float]
    # status recorded for a wallet whose eligible amount is zero
    zero_amount_status: OutcomeStatus
    record_status: bool
    output_path: str
    concurrency: int

    @classmethod
    def claim(cls) -> "RunOptions":
        return cls(
            perform_claim=True,
            request_timeout=config.CLAIM_REQUEST_TIMEOUT_SEC,
            zero_amount_status=OutcomeStatus.NO_ELIGIBILITY,
            record_status=True,
            output_path=config.CLAIM_RESULTS_PATH,
            concurrency=config.CLAIM_CONCURRENCY,
        )

    @classmethod
    def check(cls) -> "RunOptions":
        return cls(
            perform_claim=False,
            request_timeout=None,
            zero_amount_status=OutcomeStatus.SUCCESS,
            record_status=False,
            output_path=config.CHECK_RESULTS_PATH,
            concurrency=config.CHECK_CONCURRENCY,
        )


class WalletProcessor:
    """Runs one wallet through sign -> eligibility -> (claim) and returns its outcome.
    Never raises: any failure becomes an error outcome.
    """

    def __init__(
        self,
        options: RunOptions,
        executor: Optional[Executor] = None,
        client_factory: Callable[..., EligibilityClient] = EligibilityClient,
        submitter_factory: Callable[..., ClaimSubmitter] = ClaimSubmitter,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.options = options
        self.executor = executor
        self.client_factory = client_factory
        self.submitter_factory = submitter_factory
        self.sleep = sleep

    async def __call__(self, wallet: WalletRecord, index: int) -> WalletOutcome:
        try:
            return await self._process(wallet, index)
        except Exception as e:
            logger.error(f"Wallet #{index} ({shorten_address(wallet.address)}): processing failed: {e}")
            return WalletOutcome.error(wallet.address)

    async def _process(self, wallet: WalletRecord, index: int) -> WalletOutcome:
        wallet_short = shorten_address(wallet.address)
        proxy = wallet.proxy if config.USE_PROXY else None
        logger.info(f"Wallet #{index} ({wallet_short}): processing")

        signature = sign_message(wallet.private_key)

        client = self.client_factory(proxy=proxy, timeout=self.options.request_timeout)
        try:
            result = await fetch_eligibility(
                client, wallet.address, signature, sleep=self.sleep, executor=self.executor
            )
        finally:
            client.close()

        if not result.has_data and not self.options.perform_claim:
            logger.warning(f"Wallet #{index} ({wallet_short}): no eligibility data returned")
            return WalletOutcome(address=wallet.address, amount="0", status=OutcomeStatus.FAILED)
        if not result.amount:
            logger.warning(f"Wallet #{index} ({wallet_short}): not eligible")
            return WalletOutcome(address=wallet.address, amount="0", status=self.options.zero_amount_status)

        amount = format_token_amount(result.amount)
        logger.info(f"Wallet #{index} ({wallet_short}): eligible for {amount} {config.TOKEN_SYMBOL}")
        if not self.options.perform_claim:
            return WalletOutcome(
                address=wallet.address, amount=amount, status=OutcomeStatus.SUCCESS, raw_amount=result.amount
            )

        success = await self._claim(wallet, proxy, result)
        status = OutcomeStatus.SUCCESS if success else OutcomeStatus.FAILED
        logger.info(f"Wallet #{index} ({wallet_short}): claim {status.value}")
        return WalletOutcome(address=wallet.address, amount=amount, status=status, raw_amount=result.amount)

    async def _claim(self, wallet: WalletRecord, proxy: Optional[str], result: EligibilityResult) -> bool:
        proof = normalize_proof(result.proof or [])
        account = Account.from_key(wallet.private_key)
        submitter = self.submitter_factory(proxy=proxy)
        loop = asyncio.get_running_loop()
        try:
            success, _ = await loop.run_in_executor(self.executor, submitter.submit, account, result.amount, proof)
        finally:
            submitter.close()
        return success


async def run_pool(
    wallets: Sequence[WalletRecord],
    handler: Handler,
    concurrency: int,
    start_delay: float = config.SLEEP_BETWEEN_WALLETS_SEC,
    cooldown: Tuple[float, float] = config.COOLDOWN_RANGE_SEC,
    sleep: Sleep = asyncio.sleep,
) -> List[WalletOutcome]:
    """Processes every wallet exactly once with at most `concurrency` in flight.
    Worker i starts after i * start_delay seconds and, while work remains,
    pauses a random cooldown between wallets. Outcomes come back in completion order.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    queue: asyncio.Queue = asyncio.Queue()
    for index, wallet in enumerate(wallets, start=1):
        queue.put_nowait((index, wallet))
    outcomes: List[WalletOutcome] = []

    async def worker(slot: int) -> None:
        if slot:
            await sleep(slot * start_delay)
        while True:
            try:
                index, wallet = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                outcome = await handler(wallet, index)
            except Exception as e:
                logger.error(f"Wallet #{index}: unhandled error: {e}")
                outcome = WalletOutcome.error(wallet.address)
            outcomes.append(outcome)
            if not queue.empty():
                await sleep(random.uniform(*cooldown))

    workers = min(concurrency, len(wallets))
    await asyncio.gather(*(worker(slot) for slot in range(workers)))
    return outcomes


def save_results(outcomes: Sequence[WalletOutcome], path: str, record_status: bool = True) -> None:
    """Overwrites path with one row per outcome. Write errors are logged only."""
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(["address", "amount", "status"] if record_status else ["address", "amount"])
            for outcome in outcomes:
                row = [outcome.address, outcome.amount]
                if record_status:
                    row.append(outcome.status.value)
                writer.writerow(row)
        logger.info(f"Results saved to {path}")
    except OSError as e:
        logger.error(f"Failed to write to {path}: {e}")


def log_summary(stats: RunStatistics) -> None:
    logger.info("━━━━━━━━━━━━ Summary ━━━━━━━━━━━━")
    logger.info(f"Success: {stats.success_count} wallets")
    logger.info(f"Failed: {stats.fail_count} wallets")
    logger.info(f"Total claimable: {format_token_amount(stats.total_amount)} {config.TOKEN_SYMBOL}")
    logger.info("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")


async def run_wallets(
    options: RunOptions,
    wallets_path: str = config.WALLETS_PATH,
    concurrency: Optional[int] = None,
    processor: Optional[Handler] = None,
    sleep: Sleep = asyncio.sleep,
) -> RunStatistics:
    """Loads wallets, drains them through the pool, saves results and logs the summary.
    A wallet file that cannot be loaded aborts the run.
    """
    wallets = load_wallets(wallets_path)
    concurrency = concurrency if concurrency is not None else options.concurrency
    logger.info(
        f"Processing {len(wallets)} wallets ({'check and claim' if options.perform_claim else 'check only'}, "
        f"concurrency {concurrency})"
    )

    # ThreadPoolExecutor to limit blocking sync calls
    executor = ThreadPoolExecutor(max_workers=max(1, concurrency))
    try:
        handler = processor or WalletProcessor(options, executor=executor, sleep=sleep)
        outcomes = await run_pool(wallets, handler, concurrency, sleep=sleep)
    finally:
        executor.shutdown(wait=True)

    save_results(outcomes, options.output_path, options.record_status)
    stats = RunStatistics.from_outcomes(outcomes)
    log_summary(stats)
    return stats
