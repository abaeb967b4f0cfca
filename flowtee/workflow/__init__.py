"""
Step execution engine.

Provides linked, output-driven step execution with:
- YAML workflow definitions
- Pseudo-terminal process spawning with live output scanning
- Concurrent follow-on steps triggered mid-stream
- Remote dispatch to tmux windows
"""

from .context import RunContext, StepTask
from .engine import WorkflowEngine
from .links import resolve_link
from .models import Impulse, Links, LinkTarget, Step, TmuxTarget, Workflow
from .parser import WorkflowParser
from .registry import ProcessGroupRegistry

__all__ = [
    'Impulse',
    'Links',
    'LinkTarget',
    'ProcessGroupRegistry',
    'RunContext',
    'Step',
    'StepTask',
    'TmuxTarget',
    'Workflow',
    'WorkflowEngine',
    'WorkflowParser',
    'resolve_link',
]
