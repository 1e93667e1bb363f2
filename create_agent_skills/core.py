"""
Create Agent Skills Core Library

This module contains all core logic independent of the CLI interface,
allowing reuse by other Python programs.

Main Features:
    - Frontmatter: parse and re-serialize the SKILL.md metadata block
    - Name validation: check skill identifiers against the naming rules
    - Source resolution: local paths or shallow-cloned Git repositories
    - Skill discovery: find and parse skills in directories
    - Installation: copy skills into agent directories without overwriting
    - Generation: scaffold new skill templates and workspaces

Design Principles:
    - Standard library only (colorama is optional, for old Windows consoles)
    - Pure functions where possible for easier testing
    - Fatal problems raise SkillsError subclasses; per-item install
      failures are returned as results
"""

import os
import re
import shutil
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional
from urllib.parse import urlparse

from .agents import AGENTS, AgentConfig, detect_installed_agents
from .templates import generate_skill_template


# =============================================================================
# Global Configuration
# =============================================================================

SKILL_FILENAME = "SKILL.md"

# Frontmatter key used only for interactive display, stripped on install
SNIPPET_KEY = "snippet"

# Entries never copied into an installed skill (plus anything starting with "_")
EXCLUDE_FILES = frozenset({"README.md", "metadata.json"})

# Substrings that mark a source as a remote repository
REMOTE_MARKERS = ("github.com", "gitlab.com", "http", "@")

# Common skill subdirectory locations inside a source repository
COMMON_SKILL_DIRS = [
    "skills",
    "skills/.curated",
    "claude-skills",
    "src/skills",
]

MAX_SKILL_NAME_LENGTH = 64

TEMP_DIR_PREFIX = "create-agent-skills-"


# =============================================================================
# Terminal Color Handling
# =============================================================================

class Colors:
    """
    ANSI color code wrapper class.

    Uses class attributes since colors are a global setting; disable()
    turns them off for consoles without ANSI support.
    """
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"

    @classmethod
    def disable(cls):
        """Disable all color output."""
        cls.RESET = cls.BOLD = cls.DIM = cls.RED = cls.GREEN = ""
        cls.YELLOW = cls.BLUE = cls.CYAN = ""


# Windows terminal compatibility handling
if sys.platform == "win32" and not os.environ.get("WT_SESSION"):
    try:
        import colorama
        colorama.init()
    except ImportError:
        Colors.disable()


# =============================================================================
# Logging Functions
# =============================================================================

def log_info(msg: str):
    """Info message (blue ℹ)."""
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {msg}")


def log_success(msg: str):
    """Success message (green ✓)."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {msg}")


def log_warning(msg: str):
    """Warning message (yellow ⚠)."""
    print(f"{Colors.YELLOW}⚠{Colors.RESET} {msg}")


def log_error(msg: str):
    """Error message (red ✗)."""
    print(f"{Colors.RED}✗{Colors.RESET} {msg}", file=sys.stderr)


# =============================================================================
# Errors
# =============================================================================

class SkillsError(Exception):
    """Base class for fatal errors in a generate or install run."""


class InvalidSkillNameError(SkillsError):
    def __init__(self, name: str, reason: str):
        super().__init__(reason)
        self.name = name
        self.reason = reason


class SourceNotFoundError(SkillsError):
    def __init__(self, path: Path):
        super().__init__(f"Local path does not exist: {path}")
        self.path = path


class CloneFailedError(SkillsError):
    def __init__(self, url: str, detail: str):
        message = f"Failed to clone {url}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.url = url
        self.detail = detail


class NoSkillsFoundError(SkillsError):
    def __init__(self, path: Path):
        super().__init__(
            "No valid skills found. Skills require a SKILL.md with name and description."
        )
        self.path = path


class NoMatchingSkillsError(SkillsError):
    def __init__(self, requested: list[str], available: list[str]):
        super().__init__(f"No matching skills found for: {', '.join(requested)}")
        self.requested = requested
        self.available = available


class NoSkillsSelectedError(SkillsError):
    def __init__(self):
        super().__init__("No skills selected")


class UnknownAgentError(SkillsError):
    def __init__(self, invalid: list[str], valid: list[str]):
        super().__init__(f"Invalid agents: {', '.join(invalid)}")
        self.invalid = invalid
        self.valid = valid


class InstallCancelledError(SkillsError):
    def __init__(self):
        super().__init__("Installation cancelled")


# =============================================================================
# Data Types
# =============================================================================

@dataclass
class Skill:
    """A discovered skill directory and the metadata from its SKILL.md."""
    name: str
    description: str
    path: Path
    snippet: Optional[str] = None

    @property
    def folder_name(self) -> str:
        return self.path.name

    @property
    def display_name(self) -> str:
        return self.name or self.folder_name


@dataclass
class InstallResult:
    """Outcome of installing one skill for one agent."""
    skill: str
    agent: str
    path: Path
    success: bool
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class InstallSummary:
    results: list[InstallResult] = field(default_factory=list)

    @property
    def installed(self) -> list[InstallResult]:
        return [r for r in self.results if r.success and not r.skipped]

    @property
    def skipped(self) -> list[InstallResult]:
        return [r for r in self.results if r.skipped]

    @property
    def failed(self) -> list[InstallResult]:
        return [r for r in self.results if not r.success]

    @property
    def installed_skills(self) -> list[str]:
        names = []
        for result in self.installed:
            if result.skill not in names:
                names.append(result.skill)
        return names

    @property
    def success(self) -> bool:
        # Skipped destinations are not failures
        return not self.failed

    @property
    def error(self) -> Optional[str]:
        if self.success:
            return None
        count = len(self.failed)
        return f"Failed to install {count} skill{'s' if count != 1 else ''}"


@dataclass
class ResolvedSource:
    """A source materialized on the local filesystem."""
    path: Path
    subpath: Optional[str] = None
    url: Optional[str] = None
    temp_dir: Optional[Path] = None

    @property
    def is_remote(self) -> bool:
        return self.url is not None


@dataclass
class GenerationResult:
    success: bool
    skill_path: Optional[Path] = None
    error: Optional[str] = None


# =============================================================================
# Frontmatter
# =============================================================================

def _is_delimiter(line: str) -> bool:
    return line.strip() == "---"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        inner = value[1:-1]
        if value[0] == '"':
            inner = inner.replace('\\"', '"')
        return inner
    return value


def parse_frontmatter(text: str) -> tuple[dict, str]:
    """
    Split a document into its frontmatter mapping and body.

    The frontmatter is the span between the first two "---" lines, and only
    blank lines may precede the opening one. Each line inside is read as a
    flat "key: value" pair. Text after the closing delimiter (minus one
    optional blank line) is returned unmodified as the body.

    Returns:
        (frontmatter, body); ({}, text) when there is no delimiter pair
    """
    lines = text.splitlines(keepends=True)

    start = None
    for i, line in enumerate(lines):
        if _is_delimiter(line):
            start = i
            break
        if line.strip():
            return {}, text
    if start is None:
        return {}, text

    end = None
    for i in range(start + 1, len(lines)):
        if _is_delimiter(lines[i]):
            end = i
            break
    if end is None:
        return {}, text

    data = {}
    for line in lines[start + 1:end]:
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not key:
            continue
        data[key] = _unquote(value.strip())

    body_start = end + 1
    if body_start < len(lines) and not lines[body_start].strip():
        body_start += 1

    return data, "".join(lines[body_start:])


def format_frontmatter_value(value) -> str:
    """Render a scalar for a frontmatter line, quoting it when needed."""
    if not isinstance(value, str):
        value = str(value)
    if any(ch in value for ch in (":", "\n", '"', "'")):
        return '"' + value.replace('"', '\\"') + '"'
    return value


def serialize_frontmatter(data: Mapping, body: str) -> str:
    """Rebuild a document from a frontmatter mapping and a body."""
    lines = []
    for key, value in data.items():
        if value is None:
            continue
        rendered = format_frontmatter_value(value)
        lines.append(f"{key}: {rendered}" if rendered else f"{key}:")
    frontmatter = "\n".join(["---", *lines, "---"])
    return f"{frontmatter}\n\n{body}"


def parse_skill_md(skill_md: Path) -> dict:
    """Parse the frontmatter of a SKILL.md file."""
    content = skill_md.read_text(encoding="utf-8")
    data, _ = parse_frontmatter(content)
    return data


# =============================================================================
# Name Validation
# =============================================================================

_NAME_CHARS = re.compile(r"[a-z0-9-]+")


def validate_skill_name(name: str) -> tuple[bool, Optional[str]]:
    """
    Check a skill name against the Agent Skills naming rules.

    Rules:
        - 1-64 characters
        - Lowercase letters, numbers, and hyphens only
        - Must not start or end with a hyphen
        - Must not contain consecutive hyphens

    Returns:
        (valid, error message or None)
    """
    if len(name) < 1:
        return False, "Skill name must be at least 1 character"
    if len(name) > MAX_SKILL_NAME_LENGTH:
        return False, f"Skill name must be at most {MAX_SKILL_NAME_LENGTH} characters"
    if not _NAME_CHARS.fullmatch(name):
        return False, "Skill name may only contain lowercase letters, numbers, and hyphens"
    if name.startswith("-"):
        return False, "Skill name must not start with a hyphen"
    if name.endswith("-"):
        return False, "Skill name must not end with a hyphen"
    if "--" in name:
        return False, "Skill name must not contain consecutive hyphens"
    return True, None


# =============================================================================
# Source Resolution
# =============================================================================

def is_local_source(source: str) -> bool:
    """
    Decide whether a source string names a local path.

    Anything starting with "." or "/" is local, and so is anything that
    carries none of the remote markers (host names, URL schemes, "@").
    """
    if source.startswith(".") or source.startswith("/"):
        return True
    return not any(marker in source for marker in REMOTE_MARKERS)


def parse_source(source: str) -> dict:
    """
    Parse a remote repository reference into its components.

    Supported formats:
        - GitHub browser URL: https://github.com/owner/repo/tree/branch/subdir
        - GitLab browser URL: https://gitlab.com/owner/repo/-/tree/branch/subdir
        - Plain HTTPS URL: https://github.com/owner/repo
        - SSH URL: git@github.com:owner/repo.git

    Returns:
        dict with keys: source, url, branch, subpath, host
    """
    result = {
        "source": source,
        "url": source,
        "branch": None,
        "subpath": None,
        "host": None,
    }

    github_tree_match = re.match(
        r"https://github\.com/([^/]+)/([^/]+)/tree/([^/]+)(?:/(.+?))?/?$",
        source
    )
    if github_tree_match:
        owner, repo, branch, subpath = github_tree_match.groups()
        result["url"] = f"https://github.com/{owner}/{repo}.git"
        result["branch"] = branch
        result["subpath"] = subpath
        result["host"] = "github"
        return result

    gitlab_tree_match = re.match(
        r"(https://[^/]+)/(.+?)/-/tree/([^/]+)(?:/(.+?))?/?$",
        source
    )
    if gitlab_tree_match:
        host, repo_path, branch, subpath = gitlab_tree_match.groups()
        result["url"] = f"{host}/{repo_path}.git"
        result["branch"] = branch
        result["subpath"] = subpath
        result["host"] = "gitlab"
        return result

    if source.startswith("https://") or source.startswith("http://"):
        parsed = urlparse(source)
        result["host"] = parsed.netloc
        path = parsed.path.rstrip("/")
        if path.endswith(".git"):
            result["url"] = f"{parsed.scheme}://{parsed.netloc}{path}"
        else:
            result["url"] = f"{parsed.scheme}://{parsed.netloc}{path}.git"
        return result

    ssh_match = re.match(r"git@([^:]+):(.+?)(?:\.git)?$", source)
    if ssh_match:
        host, repo_path = ssh_match.groups()
        result["url"] = f"git@{host}:{repo_path}.git"
        result["host"] = host
        return result

    return result


def run_git(args: list, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Unified interface for executing Git commands.

    Raises:
        subprocess.CalledProcessError when git exits non-zero
    """
    cmd = ["git"] + args
    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd, output=result.stdout, stderr=result.stderr
        )
    return result


def default_temp_dir() -> Path:
    """Clone location for this process."""
    return Path(tempfile.gettempdir()) / f"{TEMP_DIR_PREFIX}{os.getpid()}"


def cleanup_temp_dir(temp_dir: Optional[Path]):
    if temp_dir is not None and temp_dir.exists():
        shutil.rmtree(temp_dir, ignore_errors=True)


def clone_repo(url: str, temp_dir: Path, branch: Optional[str] = None) -> Path:
    """
    Shallow-clone a repository into temp_dir.

    A stale directory left by an earlier run is removed first.

    Raises:
        CloneFailedError: git is missing or exited non-zero
    """
    cleanup_temp_dir(temp_dir)
    temp_dir.parent.mkdir(parents=True, exist_ok=True)

    log_info(f"Cloning from {url}" + (f" (branch: {branch})" if branch else ""))

    args = ["clone", "--depth", "1"]
    if branch:
        args += ["--branch", branch]
    args += [url, str(temp_dir)]

    try:
        run_git(args)
    except subprocess.CalledProcessError as e:
        cleanup_temp_dir(temp_dir)
        raise CloneFailedError(url, (e.stderr or "").strip()) from e
    except FileNotFoundError as e:
        cleanup_temp_dir(temp_dir)
        raise CloneFailedError(url, "git executable not found") from e

    return temp_dir


@contextmanager
def resolve_source(
    source: str,
    cwd: Optional[Path] = None,
    temp_dir: Optional[Path] = None,
) -> Iterator[ResolvedSource]:
    """
    Materialize a source on disk for the duration of a with-block.

    Local paths are resolved against cwd. Remote references are cloned into
    temp_dir, which is removed when the block exits, whether it succeeded
    or raised.

    Raises:
        SourceNotFoundError: local path does not exist
        CloneFailedError: clone failed
    """
    cwd = Path(cwd) if cwd else Path.cwd()

    if is_local_source(source):
        path = Path(source).expanduser()
        if not path.is_absolute():
            path = cwd / path
        path = path.resolve()
        if not path.exists():
            raise SourceNotFoundError(path)
        yield ResolvedSource(path=path)
        return

    info = parse_source(source)
    temp_dir = Path(temp_dir) if temp_dir else default_temp_dir()
    try:
        clone_repo(info["url"], temp_dir, info["branch"])
        yield ResolvedSource(
            path=temp_dir,
            subpath=info["subpath"],
            url=info["url"],
            temp_dir=temp_dir,
        )
    finally:
        cleanup_temp_dir(temp_dir)


# =============================================================================
# Skill Discovery and Parsing
# =============================================================================

def load_skill(skill_dir: Path) -> Optional[Skill]:
    """
    Build a Skill from a directory, or None if it does not qualify.

    A directory qualifies when its SKILL.md is readable and has a
    non-empty frontmatter block.
    """
    skill_md = skill_dir / SKILL_FILENAME
    if not skill_md.is_file():
        return None
    try:
        data = parse_skill_md(skill_md)
    except (OSError, UnicodeDecodeError):
        return None
    if not data:
        return None

    name = data.get("name") or skill_dir.name
    return Skill(
        name=name,
        description=data.get("description") or f"Skill: {name}",
        path=skill_dir.absolute(),
        snippet=data.get(SNIPPET_KEY) or None,
    )


def discover_skills(skills_dir: Path) -> list[Skill]:
    """
    Discover all skills directly inside a directory.

    Candidates are visited in sorted order; folders without a usable
    SKILL.md are skipped.
    """
    skills = []

    if not skills_dir.is_dir():
        return skills

    for item in sorted(skills_dir.iterdir()):
        if item.is_dir():
            skill = load_skill(item)
            if skill:
                skills.append(skill)

    return skills


def _candidate_dirs(root: Path, agents: Mapping[str, AgentConfig]) -> list[Path]:
    candidates = [root]
    for subdir in COMMON_SKILL_DIRS:
        candidates.append(root / subdir)
    for agent in agents.values():
        candidates.append(root / agent.skills_dir)

    unique = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def find_skills_root(
    search_path: Path,
    subpath: Optional[str] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
) -> tuple[Path, list[Skill]]:
    """
    Find the skills in a source tree.

    Search order:
        1. The root itself, if it is a single skill
        2. Immediate subdirectories of the root
        3. Common skill folders (skills/, ...) and each agent's skills dir
        4. Nested search for SKILL.md files up to three levels deep

    Returns:
        (skills_root, skills_list); skills_list is empty when nothing is found
    """
    root = search_path / subpath if subpath else search_path
    if not root.is_dir():
        return root, []

    single = load_skill(root)
    if single:
        return root, [single]

    for candidate in _candidate_dirs(root, agents):
        skills = discover_skills(candidate)
        if skills:
            return candidate, skills

    for depth in range(2, 4):
        pattern = "/".join(["*"] * depth) + "/" + SKILL_FILENAME
        skills = []
        for skill_md in sorted(root.glob(pattern)):
            if ".git" in skill_md.relative_to(root).parts:
                continue
            skill = load_skill(skill_md.parent)
            if skill:
                skills.append(skill)
        if skills:
            return root, skills

    return root, []


# =============================================================================
# Tree Copy
# =============================================================================

def is_excluded(name: str) -> bool:
    """Entries left out of an installed skill (templates, sections, docs)."""
    return name in EXCLUDE_FILES or name.startswith("_")


def write_stripped_skill_md(src: Path, dest: Path):
    """Write src SKILL.md to dest with the snippet key removed."""
    content = src.read_text(encoding="utf-8")
    data, body = parse_frontmatter(content)
    if not data:
        shutil.copy2(src, dest)
        return
    data.pop(SNIPPET_KEY, None)
    dest.write_text(serialize_frontmatter(data, body), encoding="utf-8")


def copy_skill_tree(src: Path, dest: Path):
    """
    Recursively copy a skill directory, honoring the exclusion rules.

    Raises:
        OSError on the first file that cannot be copied
        UnicodeDecodeError when a nested SKILL.md is not valid UTF-8
    """
    dest.mkdir(parents=True, exist_ok=True)

    for entry in sorted(src.iterdir()):
        if is_excluded(entry.name):
            continue

        target = dest / entry.name
        if entry.is_dir():
            copy_skill_tree(entry, target)
        elif entry.name == SKILL_FILENAME:
            write_stripped_skill_md(entry, target)
        else:
            shutil.copy2(entry, target)


# =============================================================================
# Installation
# =============================================================================

def get_install_path(
    skill_name: str,
    agent_key: str,
    global_install: bool = False,
    cwd: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
) -> Path:
    """Destination directory of a skill for one agent and scope."""
    agent = agents[agent_key]
    if global_install:
        base = agent.global_base(home)
    else:
        base = agent.project_base(Path(cwd) if cwd else Path.cwd())
    return base / skill_name


def is_skill_installed(
    skill_name: str,
    agent_key: str,
    global_install: bool = False,
    cwd: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
) -> bool:
    return get_install_path(skill_name, agent_key, global_install, cwd, agents, home).exists()


def install_skill_for_agent(
    skill: Skill,
    agent_key: str,
    global_install: bool = False,
    cwd: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
) -> InstallResult:
    """
    Install a single skill for one agent.

    An existing destination is left alone and reported as skipped. A copy
    failure removes the partial destination and is reported with the
    underlying error text.
    """
    dest_path = get_install_path(skill.name, agent_key, global_install, cwd, agents, home)

    if dest_path.exists():
        return InstallResult(skill=skill.name, agent=agent_key, path=dest_path,
                             success=True, skipped=True)

    try:
        copy_skill_tree(skill.path, dest_path)
    except (OSError, UnicodeDecodeError) as e:
        shutil.rmtree(dest_path, ignore_errors=True)
        return InstallResult(skill=skill.name, agent=agent_key, path=dest_path,
                             success=False, error=str(e))

    return InstallResult(skill=skill.name, agent=agent_key, path=dest_path, success=True)


def select_skills(skills: list[Skill], names: list[str]) -> list[Skill]:
    """
    Pick skills by name, case-insensitively.

    A requested name matches a skill's name, display name, or folder name.

    Raises:
        NoMatchingSkillsError: nothing matched
    """
    requested = set(n.strip().lower() for n in names if n.strip())
    selected = [
        s for s in skills
        if s.name.lower() in requested
        or s.display_name.lower() in requested
        or s.folder_name.lower() in requested
    ]
    if not selected:
        raise NoMatchingSkillsError(list(names), [s.display_name for s in skills])
    return selected


def validate_agent_keys(agent_keys: list[str], agents: Mapping[str, AgentConfig] = AGENTS):
    invalid = [key for key in agent_keys if key not in agents]
    if invalid:
        raise UnknownAgentError(invalid, list(agents))


def install_skills(
    skills: list[Skill],
    agent_keys: list[str],
    global_install: bool = False,
    cwd: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
) -> InstallSummary:
    """Install every (skill, agent) pair in order and collect the results."""
    validate_agent_keys(agent_keys, agents)

    summary = InstallSummary()
    for skill in skills:
        for agent_key in agent_keys:
            summary.results.append(
                install_skill_for_agent(skill, agent_key, global_install, cwd, agents, home)
            )
    return summary


def list_skills(
    source: str,
    cwd: Optional[Path] = None,
    temp_dir: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
) -> list[Skill]:
    """
    Resolve a source and return its skills without installing anything.

    Paths of skills from a remote source point into the removed clone.

    Raises:
        SourceNotFoundError, CloneFailedError, NoSkillsFoundError
    """
    with resolve_source(source, cwd=cwd, temp_dir=temp_dir) as resolved:
        _, skills = find_skills_root(resolved.path, resolved.subpath, agents)
        if not skills:
            raise NoSkillsFoundError(resolved.path)
        return skills


def add_skills(
    source: str,
    skill_names: Optional[list[str]] = None,
    agent_keys: Optional[list[str]] = None,
    global_install: Optional[bool] = False,
    cwd: Optional[Path] = None,
    temp_dir: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
    home: Optional[Path] = None,
    selector: Optional[Callable[[list[Skill]], list[Skill]]] = None,
    agent_selector: Optional[Callable[[list[str]], list[str]]] = None,
    scope_selector: Optional[Callable[[], bool]] = None,
    confirm: Optional[Callable[[list[Skill], list[str], bool], bool]] = None,
) -> InstallSummary:
    """
    Install skills from a source end to end.

    Steps: resolve source, discover skills, select, install. The optional
    callables let an interactive caller choose skills, agents and scope and
    confirm the plan; without them every discovered skill is installed to
    the detected agents (or all agents when none are detected).

    Raises:
        SourceNotFoundError, CloneFailedError, NoSkillsFoundError,
        NoMatchingSkillsError, NoSkillsSelectedError, UnknownAgentError,
        InstallCancelledError
    """
    cwd = Path(cwd) if cwd else Path.cwd()

    with resolve_source(source, cwd=cwd, temp_dir=temp_dir) as resolved:
        _, skills = find_skills_root(resolved.path, resolved.subpath, agents)
        if not skills:
            raise NoSkillsFoundError(resolved.path)

        if skill_names:
            selected = select_skills(skills, skill_names)
        elif len(skills) == 1:
            selected = skills
        elif selector is not None:
            selected = selector(skills)
        else:
            selected = skills

        if not selected:
            raise NoSkillsSelectedError()

        if agent_keys:
            validate_agent_keys(agent_keys, agents)
            targets = list(agent_keys)
        else:
            detected = detect_installed_agents(agents, home)
            if agent_selector is not None:
                targets = agent_selector(detected)
            else:
                targets = detected or list(agents)
            if not targets:
                raise InstallCancelledError()

        if global_install is None:
            global_install = scope_selector() if scope_selector is not None else False

        if confirm is not None and not confirm(selected, targets, global_install):
            raise InstallCancelledError()

        return install_skills(selected, targets, global_install, cwd, agents, home)


# =============================================================================
# Generation
# =============================================================================

def resolve_output_dir(cwd: Optional[Path] = None) -> Path:
    """
    Pick where a new skill is generated.

    Prefers a skills/ collection, then the project-level .cursor/skills/,
    then the working directory itself.
    """
    cwd = Path(cwd) if cwd else Path.cwd()
    for candidate in (cwd / "skills", cwd / ".cursor" / "skills"):
        if candidate.is_dir():
            return candidate
    return cwd


def generate_skill(
    skill_name: str,
    description: Optional[str] = None,
    include_scripts: bool = False,
    include_references: bool = False,
    include_assets: bool = False,
    output_dir: Optional[Path] = None,
) -> GenerationResult:
    """
    Generate a skill directory with a SKILL.md template.

    Raises:
        InvalidSkillNameError: the name breaks the naming rules
    """
    valid, error = validate_skill_name(skill_name)
    if not valid:
        raise InvalidSkillNameError(skill_name, error)

    output_dir = Path(output_dir) if output_dir else resolve_output_dir()
    skill_path = output_dir / skill_name

    if skill_path.exists():
        return GenerationResult(
            success=False,
            error=f'Directory "{skill_name}" already exists. '
                  "Please choose a different name or remove the existing directory.",
        )

    try:
        skill_path.mkdir(parents=True)
        (skill_path / SKILL_FILENAME).write_text(
            generate_skill_template(skill_name, description), encoding="utf-8"
        )
        for enabled, subdir in (
            (include_scripts, "scripts"),
            (include_references, "references"),
            (include_assets, "assets"),
        ):
            if enabled:
                (skill_path / subdir).mkdir()
    except OSError as e:
        return GenerationResult(success=False, error=str(e))

    return GenerationResult(success=True, skill_path=skill_path)


def init_workspace(
    agent_keys: list[str],
    cwd: Optional[Path] = None,
    agents: Mapping[str, AgentConfig] = AGENTS,
) -> tuple[bool, Optional[str]]:
    """
    Set up a workspace for authoring skills.

    Creates skills/ for the collection and, for each agent, its commands
    and project skills directories. commands/refine-skill.md is copied into
    each commands directory that does not already have one.

    Returns:
        (success, error message or None)
    """
    cwd = Path(cwd) if cwd else Path.cwd()

    try:
        validate_agent_keys(agent_keys, agents)
        (cwd / "skills").mkdir(parents=True, exist_ok=True)

        command_template = cwd / "commands" / "refine-skill.md"

        for key in agent_keys:
            agent = agents[key]
            commands_dir = cwd / agent.commands_dir
            commands_dir.mkdir(parents=True, exist_ok=True)

            if command_template.is_file():
                target = commands_dir / command_template.name
                if not target.exists():
                    shutil.copy2(command_template, target)

            agent.project_base(cwd).mkdir(parents=True, exist_ok=True)
    except (OSError, SkillsError) as e:
        return False, str(e)

    return True, None
