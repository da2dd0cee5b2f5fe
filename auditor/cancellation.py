"""
Cooperative cancellation token
"""

import asyncio

from auditor.exceptions import JobCancelled


class CancellationToken:
    """Checked by the pipeline between stages; never interrupts an await"""

    def __init__(self, job_id: str | None = None):
        self.job_id = job_id
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise JobCancelled(self.job_id)

    async def wait(self) -> None:
        await self._event.wait()
