"""Abstract interface of the text-analysis service."""
from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import SensorRecord


class Analyzer(ABC):
    """Turns a sensor record into analysis text.

    Any text-completion service satisfies this contract.
    """

    @abstractmethod
    async def analyze(self, record: SensorRecord) -> str:
        """Analyse one record.

        Raises:
            AnalysisNetworkError: Service unreachable
            AnalysisHttpError: Non-success HTTP status
            MalformedResponseError: No text in the response
        """
        pass

    async def aclose(self) -> None:
        """Release resources held by the analyzer."""
        return None
