from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from scamcheck.core.cancellation import CancellationToken
from scamcheck.core.models import (
    AnalysisRequest,
    GraphResult,
    ProgressEvent,
    WalletGraphQuery,
)


class ScamAnalysisPort(ABC):
    @abstractmethod
    def analyze(
        self,
        request: AnalysisRequest,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[ProgressEvent]:
        raise NotImplementedError


class WalletGraphPort(ABC):
    @abstractmethod
    def build_graph(
        self,
        query: WalletGraphQuery,
        cancel: Optional[CancellationToken] = None,
    ) -> GraphResult:
        raise NotImplementedError
