"""Run context for simulation execution."""

from __future__ import annotations
import time
import uuid
from typing import Any, Dict, Optional
import structlog


class RunContext:
    """Context for one simulation run with a bound logger and timing."""

    def __init__(
        self,
        run_id: Optional[str] = None,
        logger: Optional[structlog.BoundLogger] = None,
        **bindings: Any
    ):
        self.run_id = run_id or uuid.uuid4().hex[:12]

        if logger is None:
            self.logger = structlog.get_logger("compsim").bind(run_id=self.run_id, **bindings)
        else:
            self.logger = logger.bind(run_id=self.run_id, **bindings)

        self._start_time: Optional[float] = None
        self.runtime_s: float = 0.0
        self.metadata: Dict[str, Any] = {"run_id": self.run_id, **bindings}

    def bind(self, **bindings: Any) -> "RunContext":
        """Child context sharing the run id with extra logger bindings."""
        return RunContext(run_id=self.run_id, logger=self.logger, **bindings)

    def start_run(self) -> None:
        """Mark start of run execution."""
        self._start_time = time.perf_counter()
        self.logger.debug("Simulation started")

    def end_run(self, **fields: Any) -> float:
        """Mark end of run execution and return total runtime.

        Returns:
            Total runtime in seconds
        """
        if self._start_time is None:
            return 0.0

        self.runtime_s = time.perf_counter() - self._start_time
        self.logger.debug("Simulation completed", runtime_s=self.runtime_s, **fields)
        return self.runtime_s

    def get_runtime_metadata(self) -> Dict[str, Any]:
        metadata = self.metadata.copy()
        metadata["runtime_s"] = self.runtime_s
        return metadata
