"""Run orchestration package for assetrev.

This package contains orchestration components for manifest runs:
- RunLogger: Structured logging of runs to a plain-text log file.
- RunOrchestrator: Coordinates counting, scanning and manifest writing.
"""

from assetrev.orchestration.run_logger import RunLogger
from assetrev.orchestration.run_orchestrator import RunOrchestrator

__all__ = ["RunLogger", "RunOrchestrator"]
