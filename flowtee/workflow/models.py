"""
Data model for workflows: steps, links, link targets and impulses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Impulse(Enum):
    """A discrete signal produced while a step runs."""
    SCAN_OK = "scan_ok"
    SCAN_ERR = "scan_err"
    EXIT_OK = "exit_ok"
    EXIT_ERR = "exit_err"

    @property
    def is_ok(self) -> bool:
        return self in (Impulse.SCAN_OK, Impulse.EXIT_OK)

    @property
    def is_scan(self) -> bool:
        return self in (Impulse.SCAN_OK, Impulse.SCAN_ERR)

    @property
    def exit_code(self) -> int:
        """Exit code used when this impulse resolves to an end link."""
        return 0 if self.is_ok else 1

    @classmethod
    def from_returncode(cls, returncode: int) -> 'Impulse':
        return cls.EXIT_OK if returncode == 0 else cls.EXIT_ERR


class LinkKind(Enum):
    STEP = "step"
    END = "end"


@dataclass(frozen=True)
class LinkTarget:
    """Where a link leads: another named step, or the end of the run."""
    kind: LinkKind
    step: Optional[str] = None

    @classmethod
    def to_step(cls, name: str) -> 'LinkTarget':
        return cls(LinkKind.STEP, name)

    @classmethod
    def end(cls) -> 'LinkTarget':
        return cls(LinkKind.END)

    @property
    def is_end(self) -> bool:
        return self.kind is LinkKind.END

    def __str__(self):
        return "end" if self.is_end else self.step


@dataclass
class Links:
    """Generic and impulse-specific transitions of a step."""
    on_ok: Optional[LinkTarget] = None
    on_err: Optional[LinkTarget] = None
    on_scan_ok: Optional[LinkTarget] = None
    on_scan_err: Optional[LinkTarget] = None
    on_exit_ok: Optional[LinkTarget] = None
    on_exit_err: Optional[LinkTarget] = None

    FIELDS = ('on_ok', 'on_err', 'on_scan_ok', 'on_scan_err', 'on_exit_ok', 'on_exit_err')

    def specific(self, impulse: Impulse) -> Optional[LinkTarget]:
        return getattr(self, f"on_{impulse.value}")

    def generic(self, impulse: Impulse) -> Optional[LinkTarget]:
        return self.on_ok if impulse.is_ok else self.on_err

    def items(self):
        """(field name, target) pairs for every link that is set."""
        for name in self.FIELDS:
            target = getattr(self, name)
            if target is not None:
                yield name, target


@dataclass
class TmuxTarget:
    """A tmux window that re-runs the step instead of this process."""
    session: str
    window: str
    fish_vi_mode: bool = False

    @property
    def target(self) -> str:
        return f"{self.session}:{self.window}"


@dataclass
class Step:
    """One named unit of work in a workflow."""
    name: str
    command: str
    scan_ok: Optional[str] = None
    scan_err: Optional[str] = None
    pwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    output_file: Optional[str] = None
    tmux: Optional[TmuxTarget] = None
    links: Links = field(default_factory=Links)
    final: bool = False


@dataclass
class Workflow:
    """Ordered collection of steps."""
    steps: List[Step] = field(default_factory=list)

    def find_step(self, name: str) -> Optional[Step]:
        """Return the first step called `name`, or None."""
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]
