"""
Package-manager process runtime.
"""

from npm_orchestrator.runtime.base import ExecutionResult, OutputCallback, ProcessRuntime
from npm_orchestrator.runtime.process import SubprocessRuntime

__all__ = ["ProcessRuntime", "ExecutionResult", "OutputCallback", "SubprocessRuntime"]
