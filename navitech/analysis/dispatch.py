"""Fire-and-forget dispatch of sensor records to an Analyzer.

The router must not wait on the analysis service. Each record becomes
its own task whose result is an ``AnalysisResult``; failures are turned
into results instead of being raised.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Set

from ..errors import AnalysisError
from ..models import AnalysisResult, SensorRecord
from .base import Analyzer

logger = logging.getLogger(__name__)


class AnalysisDispatcher:
    """Schedules analysis calls on the running event loop.

    Dispatches are independent: several may be in flight at once and
    they are neither serialized nor cancelled.
    """

    def __init__(self, analyzer: Analyzer):
        self._analyzer = analyzer
        self._tasks: Set[asyncio.Task] = set()

    def submit(self, record: SensorRecord) -> asyncio.Task:
        """Schedule analysis of one record.

        Returns immediately with the task; its result is an
        AnalysisResult and it never raises.
        """
        task = asyncio.get_running_loop().create_task(self._run(record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(f"Dispatched record for analysis ({len(self._tasks)} in flight)")
        return task

    async def _run(self, record: SensorRecord) -> AnalysisResult:
        try:
            text = await self._analyzer.analyze(record)
        except AnalysisError as e:
            logger.error(f"Analysis failed: {e}")
            return AnalysisResult(record=record, error=e)
        except Exception as e:
            logger.exception("Unexpected analysis error")
            return AnalysisResult(record=record, error=e)
        return AnalysisResult(record=record, text=text)

    async def drain(self) -> None:
        """Wait for all in-flight dispatches to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def aclose(self) -> None:
        """Wait for in-flight work, then close the analyzer."""
        await self.drain()
        await self._analyzer.aclose()
