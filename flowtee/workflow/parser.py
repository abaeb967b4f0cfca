"""
Workflow definition parser for YAML files.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..config import get_workflow_path
from ..exit_codes import ConfigError
from .models import Links, LinkTarget, Step, TmuxTarget, Workflow

logger = logging.getLogger(__name__)


class WorkflowParser:
    """Parse and validate workflow definitions from YAML."""

    @staticmethod
    def load_workflow(file_path) -> Workflow:
        """Load workflow definition from YAML file.

        Args:
            file_path: Path to workflow YAML file.

        Returns:
            Parsed workflow.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid.
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigError(f"Workflow file not found: {file_path}")

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read workflow {file_path}: {e}") from e

        logger.debug(f"Loaded workflow from {path}")
        return WorkflowParser.parse_workflow(data)

    @staticmethod
    def load_named_workflow(name: str) -> Workflow:
        """Load `<config dir>/<name>.yaml`."""
        return WorkflowParser.load_workflow(get_workflow_path(name))

    @staticmethod
    def parse_workflow(data: Any) -> Workflow:
        """Build a Workflow from already-decoded YAML data.

        Raises:
            ConfigError: If the structure is invalid or step names repeat.
        """
        if not isinstance(data, dict):
            raise ConfigError("Workflow must be a mapping")

        if 'steps' not in data:
            raise ConfigError("Workflow missing required field 'steps'")

        if not isinstance(data['steps'], list):
            raise ConfigError("Workflow 'steps' must be a list")

        steps = []
        seen = set()
        for i, raw in enumerate(data['steps']):
            step = WorkflowParser._parse_step(raw, i)
            if step.name in seen:
                raise ConfigError(f"Duplicate step name '{step.name}'")
            seen.add(step.name)
            steps.append(step)

        return Workflow(steps=steps)

    @staticmethod
    def _parse_step(raw: Any, index: int) -> Step:
        if not isinstance(raw, dict):
            raise ConfigError(f"Step {index} must be a mapping")

        for key in ('name', 'command'):
            if key not in raw:
                raise ConfigError(f"Step {index} missing required field '{key}'")
            if not isinstance(raw[key], str):
                raise ConfigError(f"Step {index} field '{key}' must be a string")

        name = raw['name']
        for key in ('scan_ok', 'scan_err', 'pwd'):
            if raw.get(key) is not None and not isinstance(raw[key], str):
                raise ConfigError(f"Step '{name}' field '{key}' must be a string")

        final = raw.get('final', False)
        if not isinstance(final, bool):
            raise ConfigError(f"Step '{name}' field 'final' must be a boolean")

        return Step(
            name=name,
            command=raw['command'],
            scan_ok=raw.get('scan_ok'),
            scan_err=raw.get('scan_err'),
            pwd=raw.get('pwd'),
            env=WorkflowParser._parse_env(raw.get('env'), name),
            output_file=WorkflowParser._parse_outputs(raw.get('outputs'), name),
            tmux=WorkflowParser._parse_tmux(raw.get('tmux'), name),
            links=WorkflowParser._parse_links(raw.get('links'), name),
            final=final,
        )

    @staticmethod
    def _parse_env(raw: Any, step_name: str) -> Dict[str, str]:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Step '{step_name}' field 'env' must be a mapping")
        env = {}
        for key, value in raw.items():
            if isinstance(value, (dict, list)) or value is None:
                raise ConfigError(f"Step '{step_name}' env var '{key}' must be a scalar")
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            env[str(key)] = str(value)
        return env

    @staticmethod
    def _parse_outputs(raw: Any, step_name: str) -> Optional[str]:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise ConfigError(f"Step '{step_name}' field 'outputs' must be a mapping")
        path = raw.get('stdout', raw.get('file'))
        if path is not None and not isinstance(path, str):
            raise ConfigError(f"Step '{step_name}' output path must be a string")
        return path

    @staticmethod
    def _parse_tmux(raw: Any, step_name: str) -> Optional[TmuxTarget]:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise ConfigError(f"Step '{step_name}' field 'tmux' must be a mapping")
        for key in ('sess', 'win'):
            if raw.get(key) is None:
                raise ConfigError(f"Step '{step_name}' tmux missing required field '{key}'")
        fish_vi_mode = raw.get('fish_vi_mode', False)
        if not isinstance(fish_vi_mode, bool):
            raise ConfigError(f"Step '{step_name}' tmux field 'fish_vi_mode' must be a boolean")
        return TmuxTarget(
            session=str(raw['sess']),
            window=str(raw['win']),
            fish_vi_mode=fish_vi_mode,
        )

    @staticmethod
    def _parse_links(raw: Any, step_name: str) -> Links:
        if raw is None:
            return Links()
        if not isinstance(raw, dict):
            raise ConfigError(f"Step '{step_name}' field 'links' must be a mapping")

        unknown = set(raw) - set(Links.FIELDS)
        if unknown:
            raise ConfigError(
                f"Step '{step_name}' has unknown links: {', '.join(sorted(map(str, unknown)))}"
            )

        targets = {}
        for key, value in raw.items():
            if value is not None:
                targets[key] = WorkflowParser.parse_link_target(value, f"{step_name}.{key}")
        return Links(**targets)

    @staticmethod
    def parse_link_target(raw: Any, where: str = "link") -> LinkTarget:
        """Parse a link target.

        Accepts a bare step name, `{type: step, step: <name>}` or
        `{type: end}`.

        Raises:
            ConfigError: For any other shape.
        """
        if isinstance(raw, str):
            return LinkTarget.to_step(raw)

        if not isinstance(raw, dict):
            raise ConfigError(f"Link '{where}' must be a step name or a mapping")

        link_type = raw.get('type')
        if link_type == 'end':
            return LinkTarget.end()
        if link_type == 'step':
            step = raw.get('step')
            if not isinstance(step, str):
                raise ConfigError(f"Link '{where}' of type 'step' needs a 'step' name")
            return LinkTarget.to_step(step)

        raise ConfigError(f"Link '{where}' has invalid type '{link_type}'")
