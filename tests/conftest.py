import asyncio

import pytest

import config

# keep test runs from writing claim_log.txt
config.LOG_FILE = None


def make_key(n: int) -> str:
    return "0x" + f"{n:064x}"


async def no_sleep(delay):
    await asyncio.sleep(0)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()
