"""Skill files and agent-native command naming for the supported coding agents."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = [
    "agent_native_skill_dir",
    "skill_name_to_command",
    "skill_dir_to_filename",
    "transform_plugin_command",
    "strip_frontmatter",
    "skill_to_gemini_toml",
    "extract_description",
    "scan_agent_skills",
]

_FRONTMATTER_MARK = "---"
_HEAD_BYTES = 512

_NATIVE_SKILL_DIRS: dict[str, tuple[str, str]] = {
    "claude": (".claude/commands", "agtx"),
    "gemini": (".gemini/commands", "agtx"),
    "opencode": (".opencode/commands", ""),
    "codex": (".codex/skills", ""),
    "copilot": (".github/agents", "agtx"),
}


def _lines(text: str) -> list[str]:
    return [line.removesuffix("\r") for line in text.split("\n")]


def agent_native_skill_dir(agent_name: str) -> tuple[str, str] | None:
    """Return ``(base_dir, namespace_subdir)`` for an agent's native commands.

    The base directory is relative to the worktree. ``None`` means the agent
    has no native command discovery.
    """
    return _NATIVE_SKILL_DIRS.get(agent_name)


def skill_name_to_command(skill_name: str) -> str:
    """Turn a skill name such as ``agtx-plan`` into ``agtx:plan``."""
    prefix, sep, rest = skill_name.partition("-")
    return f"{prefix}:{rest}" if sep else skill_name


def skill_dir_to_filename(skill_dir_name: str, agent_name: str) -> str:
    """Return the agent-native command file name for a skill directory."""
    if agent_name == "gemini":
        return f"{skill_dir_name.removeprefix('agtx-')}.toml"
    if agent_name == "opencode":
        return f"{skill_dir_name}.md"
    return f"{skill_dir_name.removeprefix('agtx-')}.md"


def transform_plugin_command(canonical_cmd: str, agent_name: str) -> str | None:
    """Adapt a canonical ``/namespace:command args`` to an agent's syntax.

    Returns ``None`` for agents without interactive command invocation.
    """
    if agent_name in ("claude", "gemini"):
        return canonical_cmd
    if agent_name == "opencode":
        return canonical_cmd.replace(":", "-", 1)
    if agent_name == "codex":
        transformed = canonical_cmd.replace(":", "-", 1)
        if transformed.startswith("/"):
            return f"${transformed[1:]}"
        return transformed
    return None


def _frontmatter_end(content: str) -> int | None:
    if not content.startswith(_FRONTMATTER_MARK):
        return None
    end = content.find(_FRONTMATTER_MARK, len(_FRONTMATTER_MARK))
    return None if end < 0 else end


def strip_frontmatter(content: str) -> str:
    """Return the body of a skill file without its YAML frontmatter."""
    end = _frontmatter_end(content)
    if end is None:
        return content
    return content[end + len(_FRONTMATTER_MARK):].lstrip("\n")


def skill_to_gemini_toml(description: str, skill_content: str) -> str:
    """Render a skill as a Gemini TOML command with ``description`` and ``prompt``."""
    body = strip_frontmatter(skill_content)
    escaped = body.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    quoted = description.replace('"', '\\"')
    return f'description = "{quoted}"\n\nprompt = """\n{escaped}\n"""\n'


def extract_description(content: str) -> str | None:
    """Return the ``description:`` value from YAML frontmatter, if any."""
    end = _frontmatter_end(content)
    if end is None:
        return None
    for line in _lines(content[len(_FRONTMATTER_MARK):end]):
        if line.startswith("description:"):
            return line[len("description:"):].strip()
    return None


def _read_head(path: Path) -> str | None:
    try:
        with path.open("rb") as handle:
            data = handle.read(_HEAD_BYTES)
        return data.decode("utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def _description_from_markdown(path: Path) -> str | None:
    content = _read_head(path)
    return None if content is None else extract_description(content)


def _description_from_toml(path: Path) -> str | None:
    content = _read_head(path)
    if content is None:
        return None
    for line in _lines(content):
        trimmed = line.strip()
        if not trimmed.startswith("description"):
            continue
        rest = trimmed[len("description"):].lstrip()
        if not rest.startswith("="):
            continue
        value = rest[1:].strip().lstrip('"').rstrip('"')
        if value:
            return value
    return None


def _entries(directory: Path) -> list[Path]:
    try:
        return list(directory.iterdir())
    except OSError:
        return []


def _scan_namespaced(base: Path, extension: str, describe) -> list[tuple[str, str]]:
    results: list[tuple[str, str]] = []
    for ns_dir in _entries(base):
        if not ns_dir.is_dir():
            continue
        for path in _entries(ns_dir):
            if path.suffix != f".{extension}" or not path.stem:
                continue
            stem = path.stem
            description = describe(path) or stem.replace("-", " ")
            results.append((f"/{ns_dir.name}:{stem}", description))
    return results


def scan_agent_skills(
    agent_name: str, project_path: str | os.PathLike[str]
) -> list[tuple[str, str]]:
    """List ``(command, description)`` pairs found in an agent's command directory.

    Commands are given in the agent's own invocation syntax and sorted by command.
    """
    project = Path(project_path)
    results: list[tuple[str, str]] = []

    if agent_name in ("claude", "copilot"):
        base_dir, _ = _NATIVE_SKILL_DIRS[agent_name]
        results = _scan_namespaced(project / base_dir, "md", _description_from_markdown)
    elif agent_name == "gemini":
        base_dir, _ = _NATIVE_SKILL_DIRS[agent_name]
        results = _scan_namespaced(project / base_dir, "toml", _description_from_toml)
    elif agent_name == "codex":
        for skill_dir in _entries(project / ".codex" / "skills"):
            if not skill_dir.is_dir():
                continue
            skill_file = skill_dir / "SKILL.md"
            if skill_file.exists():
                name = skill_dir.name
                description = _description_from_markdown(skill_file) or name.replace("-", " ")
                results.append((f"${name}", description))
    elif agent_name == "opencode":
        for path in _entries(project / ".config" / "opencode" / "command"):
            if path.suffix != ".md" or not path.stem:
                continue
            results.append((f"/{path.stem}", path.stem.replace("-", " ")))

    results.sort(key=lambda item: item[0])
    return results