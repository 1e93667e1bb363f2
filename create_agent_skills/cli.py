"""
Create Agent Skills Command Line Interface

此模組負責 CLI 的參數解析、互動提示和輸出，核心邏輯由 core 模組提供。
"""

import argparse
import os
import sys
from typing import Optional

from . import __version__
from .agents import AGENTS
from .core import (
    Colors,
    log_info,
    log_success,
    log_warning,
    log_error,
    SkillsError,
    InstallCancelledError,
    NoMatchingSkillsError,
    UnknownAgentError,
    Skill,
    InstallSummary,
    add_skills,
    generate_skill,
    get_install_path,
    init_workspace,
    list_skills,
    resolve_output_dir,
    validate_agent_keys,
)

COMMANDS = ("init", "create", "add-skills", "agents")

MAX_HINT_LENGTH = 60


# =============================================================================
# 輔助函式
# =============================================================================

def truncate(text: str, width: int = MAX_HINT_LENGTH) -> str:
    if len(text) > width:
        return text[:width - 3] + "..."
    return text


def skill_hint(skill: Skill) -> str:
    """選單中顯示的簡短說明：有 snippet 就用 snippet。"""
    return skill.snippet or truncate(skill.description)


def parse_selection(selection: str, count: int) -> Optional[list[int]]:
    """
    解析使用者輸入的編號選擇。

    支援 'all'、'*'、逗號分隔的編號與範圍 (1-3)。
    回傳 0-based 索引；格式錯誤時回傳 None。
    """
    selection = selection.strip().lower()
    if selection in ("all", "*", ""):
        return list(range(count))

    indexes = []
    try:
        for part in selection.split(","):
            part = part.strip()
            if "-" in part:
                start, end = map(int, part.split("-"))
                for i in range(start, end + 1):
                    if 1 <= i <= count and i - 1 not in indexes:
                        indexes.append(i - 1)
            else:
                i = int(part)
                if 1 <= i <= count and i - 1 not in indexes:
                    indexes.append(i - 1)
    except ValueError:
        return None
    return indexes


def prompt_multiselect(title: str, labels: list[str], hints: list[str]) -> list[int]:
    """互動式多選介面，回傳選中項目的索引；取消時回傳空列表。"""
    print(f"\n{Colors.BOLD}{title}:{Colors.RESET}\n")

    for i, (label, hint) in enumerate(zip(labels, hints), 1):
        print(f"  {Colors.CYAN}{i:3}{Colors.RESET}. {Colors.BOLD}{label}{Colors.RESET}")
        if hint:
            print(f"       {Colors.YELLOW}{hint}{Colors.RESET}")

    print(f"\n{Colors.BOLD}Enter selection:{Colors.RESET}")
    print("  - 'all' or '*' to select all")
    print("  - Comma-separated numbers (e.g., 1,3,5)")
    print("  - Range (e.g., 1-5)")
    print("  - 'q' to quit\n")

    try:
        selection = input(f"{Colors.GREEN}>{Colors.RESET} ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        print()
        return []

    if selection in ("q", "quit", "exit"):
        return []

    indexes = parse_selection(selection, len(labels))
    if indexes is None:
        log_error("Invalid selection format")
        return []
    return indexes


def prompt_confirm(message: str) -> bool:
    try:
        answer = input(f"{Colors.BOLD}{message} [y/N]{Colors.RESET} ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        print()
        return False
    return answer in ("y", "yes")


def prompt_scope() -> bool:
    """詢問安裝範圍：True 表示全域 (home 目錄)。"""
    print(f"\n{Colors.BOLD}Installation scope:{Colors.RESET}")
    print(f"  {Colors.CYAN}1{Colors.RESET}. Project {Colors.DIM}(install in current directory){Colors.RESET}")
    print(f"  {Colors.CYAN}2{Colors.RESET}. Global  {Colors.DIM}(install in home directory){Colors.RESET}")
    try:
        answer = input(f"{Colors.GREEN}>{Colors.RESET} ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        print()
        raise InstallCancelledError()
    if answer in ("q", "quit", "exit"):
        raise InstallCancelledError()
    return answer in ("2", "g", "global")


def interactive_select(skills: list[Skill]) -> list[Skill]:
    """互動式 skill 選擇介面。"""
    indexes = prompt_multiselect(
        "Available Skills",
        [s.display_name for s in skills],
        [skill_hint(s) for s in skills],
    )
    return [skills[i] for i in indexes]


def select_agents(keys: list[str]) -> list[str]:
    indexes = prompt_multiselect(
        "Select agents to install skills to",
        [AGENTS[k].display_name for k in keys],
        [AGENTS[k].skills_dir for k in keys],
    )
    return [keys[i] for i in indexes]


def print_skills(skills: list[Skill]):
    print(f"\n{Colors.BOLD}Available Skills:{Colors.RESET}")
    for skill in skills:
        print(f"  {Colors.CYAN}{skill.display_name}{Colors.RESET}")
        print(f"    {Colors.DIM}{skill.description}{Colors.RESET}")
    print()


def print_plan(skills: list[Skill], agent_keys: list[str], global_install: bool):
    """輸出安裝摘要，已存在的目錄會被略過。"""
    print(f"\n{Colors.BOLD}Installation Summary:{Colors.RESET}")
    for skill in skills:
        print(f"  {Colors.CYAN}{skill.display_name}{Colors.RESET}")
        for key in agent_keys:
            path = get_install_path(skill.name, key, global_install)
            status = f"{Colors.YELLOW} (already installed, skipped){Colors.RESET}" if path.exists() else ""
            print(f"    → {AGENTS[key].display_name}: {Colors.DIM}{path}{Colors.RESET}{status}")
    print()


def print_summary(summary: InstallSummary):
    print()
    if summary.installed:
        count = len(summary.installed)
        log_success(f"Successfully installed {count} skill{'s' if count != 1 else ''}")
        for r in summary.installed:
            print(f"  {Colors.GREEN}✓{Colors.RESET} {r.skill} → {AGENTS[r.agent].display_name}")
            print(f"    {Colors.DIM}{r.path}{Colors.RESET}")

    if summary.skipped:
        count = len(summary.skipped)
        log_warning(f"Skipped {count} existing skill{'s' if count != 1 else ''}")
        for r in summary.skipped:
            print(f"  {Colors.YELLOW}○{Colors.RESET} {r.skill} → {AGENTS[r.agent].display_name}")
            print(f"    {Colors.DIM}{r.path}{Colors.RESET}")

    if summary.failed:
        log_error(summary.error)
        for r in summary.failed:
            print(f"  {Colors.RED}✗{Colors.RESET} {r.skill} → {AGENTS[r.agent].display_name}")
            print(f"    {Colors.DIM}{r.error}{Colors.RESET}")
    print()


# =============================================================================
# CLI Commands
# =============================================================================

def cmd_init(args):
    """init 指令：初始化 skills 工作區。"""
    if args.agent:
        agent_keys = args.agent
    else:
        keys = list(AGENTS)
        agent_keys = select_agents(keys)
        if not agent_keys:
            log_info("Initialization cancelled")
            return 0

    success, error = init_workspace(agent_keys)
    if not success:
        log_error(f"Failed to initialize workspace: {error}")
        return 1

    log_success("Workspace initialized")
    print(f"\n  {Colors.CYAN}skills/{Colors.RESET}  Directory for your skill collection")
    for key in agent_keys:
        agent = AGENTS[key]
        print(f"  {Colors.CYAN}{agent.display_name}{Colors.RESET}:")
        print(f"    {Colors.DIM}{agent.skills_dir}{Colors.RESET}  Project-level skills")
        print(f"    {Colors.DIM}{agent.commands_dir}{Colors.RESET}  Commands")
    print(f"\nCreate your first skill: {Colors.DIM}create-agent-skills create <skill-name>{Colors.RESET}\n")
    return 0


def cmd_create(args):
    """create 指令：產生新的 skill 範本。"""
    result = generate_skill(
        args.skill_name,
        description=args.description,
        include_scripts=args.scripts,
        include_references=args.references,
        include_assets=args.assets,
        output_dir=resolve_output_dir(),
    )

    if not result.success:
        log_error(result.error)
        return 1

    log_success(f"Skill created at: {Colors.CYAN}{result.skill_path}{Colors.RESET}")
    print(f"\n{Colors.BOLD}Next steps:{Colors.RESET}")
    print("  - Run the /refine-skill command to fill in the placeholders")
    print("  - Edit SKILL.md directly if you prefer manual customization")
    print("  - Add scripts, references, or assets as needed\n")
    return 0


def cmd_add_skills(args):
    """add-skills 指令：從 Git repo 或本機路徑安裝 skills。"""
    if args.list:
        skills = list_skills(args.source)
        print_skills(skills)
        log_info("Use --skill <name> to install specific skills")
        return 0

    if args.agent:
        validate_agent_keys(args.agent)

    def choose_agents(detected: list[str]) -> list[str]:
        if args.yes or len(detected) == 1:
            return detected or list(AGENTS)
        if not detected:
            log_warning("No coding agents detected. You can still install skills.")
            return select_agents(list(AGENTS))
        return select_agents(detected)

    def confirm(skills: list[Skill], agent_keys: list[str], global_install: bool) -> bool:
        print_plan(skills, agent_keys, global_install)
        if args.yes:
            return True
        return prompt_confirm("Proceed with installation?")

    if args.global_:
        global_install = True
    elif args.yes:
        global_install = False
    else:
        global_install = None

    try:
        summary = add_skills(
            args.source,
            skill_names=args.skill,
            agent_keys=args.agent,
            global_install=global_install,
            selector=None if args.yes else interactive_select,
            agent_selector=choose_agents,
            scope_selector=prompt_scope,
            confirm=confirm,
        )
    except NoMatchingSkillsError as e:
        log_error(str(e))
        log_info("Available skills: " + ", ".join(e.available))
        return 1
    except InstallCancelledError:
        log_info("Installation cancelled")
        return 0

    print_summary(summary)
    return 0 if summary.success else 1


def cmd_agents(args):
    """agents 指令：列出支援的 coding agents 與安裝路徑。"""
    width = max(len(k) for k in AGENTS)
    print(f"\n  {'Agent':<{width}}  {'Project':<18}  Global")
    print(f"  {'-' * width}  {'-' * 18}  {'-' * 30}")
    for key, agent in AGENTS.items():
        print(f"  {Colors.CYAN}{key:<{width}}{Colors.RESET}  {agent.skills_dir:<18}  ~/{agent.global_skills_dir}")
    print()
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-agent-skills",
        description="Generate and install skills for AI coding agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Set up a workspace and create a skill
  create-agent-skills init --agent cursor claude-code
  create-agent-skills create my-skill --scripts --references

  # Install skills from a repository or a local directory
  create-agent-skills add-skills https://github.com/owner/repo --list
  create-agent-skills add-skills ./skills --skill pdf --agent cursor -y
  create-agent-skills add-skills git@github.com:owner/repo.git --global
"""
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Init command
    init_parser = subparsers.add_parser("init", help="Initialize workspace for first-time users")
    init_parser.add_argument("--agent", "-a", nargs="+", choices=list(AGENTS),
                             help="Agents to set up (default: prompt)")
    init_parser.set_defaults(func=cmd_init)

    # Create command
    create_parser = subparsers.add_parser("create", help="Create a new skill template")
    create_parser.add_argument("skill_name",
                               help="Name of the skill (lowercase, hyphens, 1-64 chars)")
    create_parser.add_argument("--description", help="Description of the skill")
    create_parser.add_argument("--scripts", action="store_true", help="Include scripts/ directory")
    create_parser.add_argument("--references", action="store_true",
                               help="Include references/ directory")
    create_parser.add_argument("--assets", action="store_true", help="Include assets/ directory")
    create_parser.set_defaults(func=cmd_create)

    # Add-skills command
    add_parser = subparsers.add_parser("add-skills", help="Install skills from a Git repository")
    add_parser.add_argument("source",
                            help="Git repo URL or path to a local skills directory")
    add_parser.add_argument("--global", "-g", dest="global_", action="store_true",
                            help="Install globally (user-level) instead of project-level")
    add_parser.add_argument("--agent", "-a", nargs="+",
                            help=f"Agents to install to ({', '.join(AGENTS)})")
    add_parser.add_argument("--skill", "-s", nargs="+",
                            help="Skill names to install (skip selection prompt)")
    add_parser.add_argument("--list", "-l", action="store_true",
                            help="List available skills without installing")
    add_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompts")
    add_parser.set_defaults(func=cmd_add_skills)

    # Agents command
    agents_parser = subparsers.add_parser("agents", help="List supported agents and their paths")
    agents_parser.set_defaults(func=cmd_agents)

    return parser


def main(argv: Optional[list[str]] = None):
    """CLI 程式進入點。"""
    argv = list(sys.argv[1:] if argv is None else argv)

    # 舊版用法：`create-agent-skills <skill-name>` 等同於 create
    if argv and argv[0] not in COMMANDS and not argv[0].startswith("-"):
        argv.insert(0, "create")

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print()
        return 130
    except UnknownAgentError as e:
        log_error(str(e))
        log_info(f"Valid agents: {', '.join(e.valid)}")
        return 1
    except SkillsError as e:
        log_error(str(e))
        return 1
    except Exception as e:
        log_error(f"Error: {e}")
        if os.environ.get("DEBUG"):
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
