"""
Core types shared by the executor modules.

This module contains:
- FLOW_CONTEXT: Task-local context of the running evaluation
- get_current_context: Read the task-local context
- flow_context: Context manager publishing a context
- FlowError, UnsupportedStepError, FlowConfigurationError: Fault types
"""

from pyresultflow.core.context import FLOW_CONTEXT, flow_context, get_current_context
from pyresultflow.core.errors import FlowConfigurationError, FlowError, UnsupportedStepError

__all__ = [
    "FLOW_CONTEXT",
    "get_current_context",
    "flow_context",
    "FlowError",
    "UnsupportedStepError",
    "FlowConfigurationError",
]
