# models.py
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    NO_ELIGIBILITY = "no_eligibility"
    ERROR = "error"


@dataclass(frozen=True)
class WalletRecord:
    address: str
    private_key: str
    proxy: Optional[str] = None


@dataclass(frozen=True)
class EligibilityResult:
    status_code: int
    amount: Optional[int] = None
    # as returned by the API: a JSON-encoded array or a list of hex strings
    proof: Optional[Union[str, List[str]]] = None
    # False when the response carried no data object at all
    has_data: bool = True


@dataclass(frozen=True)
class WalletOutcome:
    address: str
    amount: str
    status: OutcomeStatus
    # base units counted toward the run total
    raw_amount: int = 0

    @classmethod
    def error(cls, address: str) -> "WalletOutcome":
        return cls(address=address, amount="0", status=OutcomeStatus.ERROR)


@dataclass
class RunStatistics:
    success_count: int = 0
    fail_count: int = 0
    total_amount: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[WalletOutcome]) -> "RunStatistics":
        """Folds per-wallet outcomes into run totals once the pool has drained."""
        stats = cls()
        for outcome in outcomes:
            if outcome.status is OutcomeStatus.SUCCESS:
                stats.success_count += 1
            else:
                stats.fail_count += 1
            stats.total_amount += outcome.raw_amount
        return stats
