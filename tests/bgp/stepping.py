"""
Deterministic delay primitive for establishment tests

Every call parks the caller until the test releases it, so a walk
advances exactly one state per release regardless of wall time.
"""

import asyncio


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until it blocks again"""
    for _ in range(rounds):
        await asyncio.sleep(0)


class SteppedSleep:
    """Sleep replacement released one step at a time"""

    def __init__(self):
        self.waiters = []
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        future = asyncio.get_running_loop().create_future()
        self.waiters.append(future)
        await future

    @property
    def pending(self) -> int:
        return sum(1 for f in self.waiters if not f.done())

    async def step(self) -> None:
        """Release every parked sleeper once and let them run"""
        waiters, self.waiters = self.waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(None)
        await settle()

    async def run_to_end(self, max_steps: int = 20) -> None:
        for _ in range(max_steps):
            await settle()
            if not self.pending:
                return
            await self.step()


class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start: float = 1700000000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
