"""
Agent Target Configuration

Static table describing where each supported coding agent keeps its skills
and commands. Project paths are relative to the working directory, global
paths are relative to the user's home directory.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class AgentConfig:
    """Install locations for one coding agent."""
    key: str
    display_name: str
    skills_dir: str
    global_skills_dir: str
    commands_dir: str

    def project_base(self, cwd: Path) -> Path:
        return cwd / self.skills_dir

    def global_base(self, home: Optional[Path] = None) -> Path:
        return (home or Path.home()) / self.global_skills_dir

    @property
    def config_root(self) -> str:
        """First segment of the global path, used to detect an installed agent."""
        return Path(self.global_skills_dir).parts[0]


_AGENT_LIST = [
    AgentConfig("opencode", "OpenCode", ".opencode/skill", ".config/opencode/skill", ".opencode/command"),
    AgentConfig("claude-code", "Claude Code", ".claude/skills", ".claude/skills", ".claude/commands"),
    AgentConfig("codex", "Codex", ".codex/skills", ".codex/skills", ".codex/prompts"),
    AgentConfig("cursor", "Cursor", ".cursor/skills", ".cursor/skills", ".cursor/commands"),
    AgentConfig("antigravity", "Antigravity", ".agent/skills", ".gemini/antigravity/skills", ".agent/workflows"),
    AgentConfig("amp", "Amp", ".agents/skills", ".config/agents/skills", ".agents/commands"),
    AgentConfig("kilo", "Kilo Code", ".kilocode/skills", ".kilocode/skills", ".kilocode/workflows"),
    AgentConfig("roo", "Roo Code", ".roo/skills", ".roo/skills", ".roo/commands"),
    AgentConfig("goose", "Goose", ".goose/skills", ".config/goose/skills", ".goose/commands"),
]

# Read-only lookup keyed by agent identifier, in display order
AGENTS: Mapping[str, AgentConfig] = MappingProxyType({a.key: a for a in _AGENT_LIST})


def detect_installed_agents(
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
) -> list[str]:
    """
    Return keys of agents that appear to be installed for this user.

    An agent counts as installed when its global config root (e.g. ~/.cursor)
    exists in the home directory.
    """
    home = home or Path.home()
    return [key for key, agent in agents.items() if (home / agent.config_root).is_dir()]
