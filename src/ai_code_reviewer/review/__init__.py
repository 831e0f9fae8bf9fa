"""
Review Pipeline

Context assembly, model-call throttling and run orchestration.
"""

from .context import ContextAssembler, matches_any
from .throttle import SerialExecutor
from .orchestrator import ReviewOrchestrator, ReviewRunResult, RunState

__all__ = [
    'ContextAssembler',
    'matches_any',
    'SerialExecutor',
    'ReviewOrchestrator',
    'ReviewRunResult',
    'RunState',
]
