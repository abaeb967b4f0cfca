"""
Link resolution: which transition an impulse triggers.
"""

from typing import Optional

from .models import Impulse, LinkTarget, Step


def resolve_link(step: Step, impulse: Impulse) -> Optional[LinkTarget]:
    """Pick the link a step follows for an impulse.

    The impulse-specific link wins over the generic on_ok/on_err link of the
    same direction. Final steps never transition.

    Returns:
        The target to follow, or None when nothing should happen.
    """
    if step.final:
        return None
    links = step.links
    target = links.specific(impulse)
    if target is None:
        target = links.generic(impulse)
    return target
