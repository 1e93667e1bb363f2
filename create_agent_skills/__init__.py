"""
Create Agent Skills - generate and install skills for AI coding agents

Public API:
    - parse_frontmatter / serialize_frontmatter: SKILL.md metadata block
    - validate_skill_name: Check a skill identifier
    - resolve_source: Materialize a local path or Git repository
    - find_skills_root / discover_skills: Find skills in a directory
    - copy_skill_tree: Copy a skill, stripping install-only metadata
    - add_skills / install_skills: Install skills for coding agents
    - generate_skill / init_workspace: Scaffold skills and workspaces

CLI Entry Point:
    - main: CLI main function
"""

__version__ = "0.3.0"

from .agents import (
    AGENTS,
    AgentConfig,
    detect_installed_agents,
)

from .core import (
    # Constants
    SKILL_FILENAME,
    SNIPPET_KEY,
    EXCLUDE_FILES,
    REMOTE_MARKERS,
    COMMON_SKILL_DIRS,

    # Logging
    Colors,
    log_info,
    log_success,
    log_warning,
    log_error,

    # Errors
    SkillsError,
    InvalidSkillNameError,
    SourceNotFoundError,
    CloneFailedError,
    NoSkillsFoundError,
    NoMatchingSkillsError,
    NoSkillsSelectedError,
    UnknownAgentError,
    InstallCancelledError,

    # Data Types
    Skill,
    InstallResult,
    InstallSummary,
    ResolvedSource,
    GenerationResult,

    # Frontmatter
    parse_frontmatter,
    serialize_frontmatter,
    parse_skill_md,

    # Name Validation
    validate_skill_name,

    # Source Resolution
    is_local_source,
    parse_source,
    run_git,
    clone_repo,
    resolve_source,

    # Skill Discovery
    load_skill,
    discover_skills,
    find_skills_root,

    # Tree Copy
    is_excluded,
    copy_skill_tree,

    # Installation
    get_install_path,
    is_skill_installed,
    install_skill_for_agent,
    select_skills,
    install_skills,
    list_skills,
    add_skills,

    # Generation
    resolve_output_dir,
    generate_skill,
    init_workspace,
)

from .templates import generate_skill_template

from .cli import main

__all__ = [
    # Agents
    "AGENTS",
    "AgentConfig",
    "detect_installed_agents",

    # Constants
    "SKILL_FILENAME",
    "SNIPPET_KEY",
    "EXCLUDE_FILES",
    "REMOTE_MARKERS",
    "COMMON_SKILL_DIRS",

    # Logging
    "Colors",
    "log_info",
    "log_success",
    "log_warning",
    "log_error",

    # Errors
    "SkillsError",
    "InvalidSkillNameError",
    "SourceNotFoundError",
    "CloneFailedError",
    "NoSkillsFoundError",
    "NoMatchingSkillsError",
    "NoSkillsSelectedError",
    "UnknownAgentError",
    "InstallCancelledError",

    # Data Types
    "Skill",
    "InstallResult",
    "InstallSummary",
    "ResolvedSource",
    "GenerationResult",

    # Frontmatter
    "parse_frontmatter",
    "serialize_frontmatter",
    "parse_skill_md",

    # Name Validation
    "validate_skill_name",

    # Source Resolution
    "is_local_source",
    "parse_source",
    "run_git",
    "clone_repo",
    "resolve_source",

    # Skill Discovery
    "load_skill",
    "discover_skills",
    "find_skills_root",

    # Tree Copy
    "is_excluded",
    "copy_skill_tree",

    # Installation
    "get_install_path",
    "is_skill_installed",
    "install_skill_for_agent",
    "select_skills",
    "install_skills",
    "list_skills",
    "add_skills",

    # Generation
    "generate_skill_template",
    "resolve_output_dir",
    "generate_skill",
    "init_workspace",

    # CLI
    "main",
]
