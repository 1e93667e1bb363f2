"""
Tests for installation, source resolution, generation and workspace setup.

Git is never invoked: subprocess.run is patched where a clone is needed.
"""

import subprocess
import tempfile
from pathlib import Path
from unittest import mock

import pytest

from create_agent_skills import (
    AGENTS,
    AgentConfig,
    detect_installed_agents,
    Skill,
    InstallResult,
    InstallSummary,
    SourceNotFoundError,
    CloneFailedError,
    NoSkillsFoundError,
    NoMatchingSkillsError,
    NoSkillsSelectedError,
    UnknownAgentError,
    InstallCancelledError,
    InvalidSkillNameError,
    resolve_source,
    load_skill,
    get_install_path,
    is_skill_installed,
    install_skill_for_agent,
    select_skills,
    install_skills,
    list_skills,
    add_skills,
    resolve_output_dir,
    generate_skill,
    init_workspace,
)


def write_skill(folder: Path, frontmatter: str, body: str = "# Body\n") -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    (folder / "SKILL.md").write_text(f"---\n{frontmatter}\n---\n\n{body}", encoding="utf-8")
    return folder


def make_source(root: Path) -> Path:
    """A local source with skills alpha and beta under skills/."""
    write_skill(root / "skills" / "alpha", "name: alpha\ndescription: First\nsnippet: short text")
    write_skill(root / "skills" / "beta", "name: beta\ndescription: Second")
    return root


def fake_clone(populate=None, returncode=0, stderr=""):
    """Build a subprocess.run replacement for `git clone`."""
    def run(cmd, **kwargs):
        if returncode == 0 and populate:
            populate(Path(cmd[-1]))
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr=stderr)
    return run


class TestAgents:
    """Tests for the agent table and detection."""

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            AGENTS["new"] = AGENTS["cursor"]

    def test_known_agents(self):
        assert list(AGENTS) == ["opencode", "claude-code", "codex", "cursor",
                                "antigravity", "amp", "kilo", "roo", "goose"]
        assert AGENTS["cursor"].skills_dir == ".cursor/skills"

    def test_detect_installed_agents(self):
        with tempfile.TemporaryDirectory() as tmp:
            home = Path(tmp)
            (home / ".cursor").mkdir()
            (home / ".claude").mkdir()

            assert detect_installed_agents(home=home) == ["claude-code", "cursor"]


class TestInstallPaths:
    """Tests for get_install_path and is_skill_installed."""

    def test_project_scope(self):
        cwd = Path("/work/project")
        assert get_install_path("pdf", "cursor", cwd=cwd) == cwd / ".cursor" / "skills" / "pdf"

    def test_global_scope(self):
        home = Path("/home/me")
        path = get_install_path("pdf", "opencode", global_install=True, home=home)
        assert path == home / ".config" / "opencode" / "skill" / "pdf"

    def test_injected_agent_table(self):
        agents = {"mine": AgentConfig("mine", "Mine", "tools/skills", ".mine/skills", "tools/cmd")}
        cwd = Path("/work")
        assert get_install_path("x", "mine", cwd=cwd, agents=agents) == cwd / "tools" / "skills" / "x"

    def test_is_skill_installed(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            assert not is_skill_installed("pdf", "cursor", cwd=cwd)
            (cwd / ".cursor" / "skills" / "pdf").mkdir(parents=True)
            assert is_skill_installed("pdf", "cursor", cwd=cwd)


class TestInstallSkillForAgent:
    """Tests for install_skill_for_agent function."""

    def test_installs_skill(self):
        with tempfile.TemporaryDirectory() as tmp:
            skill = load_skill(write_skill(Path(tmp) / "src" / "pdf", "name: pdf\nsnippet: s"))
            cwd = Path(tmp) / "project"

            result = install_skill_for_agent(skill, "cursor", cwd=cwd)

            assert result.success and not result.skipped
            assert result.path == cwd / ".cursor" / "skills" / "pdf"
            assert "snippet" not in (result.path / "SKILL.md").read_text(encoding="utf-8")

    def test_existing_destination_is_skipped(self):
        """An existing destination is a skip and no copy happens."""
        with tempfile.TemporaryDirectory() as tmp:
            skill = load_skill(write_skill(Path(tmp) / "src" / "pdf", "name: pdf"))
            cwd = Path(tmp) / "project"
            dest = cwd / ".cursor" / "skills" / "pdf"
            dest.mkdir(parents=True)

            with mock.patch("create_agent_skills.core.copy_skill_tree") as copy:
                result = install_skill_for_agent(skill, "cursor", cwd=cwd)

            copy.assert_not_called()
            assert result.success and result.skipped
            assert list(dest.iterdir()) == []

    def test_copy_failure_is_reported(self):
        with tempfile.TemporaryDirectory() as tmp:
            src = write_skill(Path(tmp) / "src" / "pdf", "name: pdf")
            (src / "data.bin").write_bytes(b"\x00")
            skill = load_skill(src)
            cwd = Path(tmp) / "project"

            with mock.patch("create_agent_skills.core.shutil.copy2",
                            side_effect=OSError("disk full")):
                result = install_skill_for_agent(skill, "cursor", cwd=cwd)

            assert not result.success
            assert result.error == "disk full"
            assert not result.path.exists()


class TestInstallSummary:
    """Tests for InstallSummary aggregation."""

    def test_skips_are_not_failures(self):
        summary = InstallSummary([
            InstallResult("a", "cursor", Path("/x/a"), success=True, skipped=True),
        ])

        assert summary.success
        assert summary.installed_skills == []
        assert summary.error is None

    def test_failure_marks_run_failed(self):
        summary = InstallSummary([
            InstallResult("a", "cursor", Path("/x/a"), success=True),
            InstallResult("a", "codex", Path("/y/a"), success=True),
            InstallResult("b", "cursor", Path("/x/b"), success=False, error="boom"),
        ])

        assert not summary.success
        assert summary.installed_skills == ["a"]
        assert len(summary.failed) == 1
        assert summary.error == "Failed to install 1 skill"


class TestSelectSkills:
    """Tests for select_skills function."""

    def skills(self):
        return [
            Skill("pdf", "PDF", Path("/s/pdf-tools")),
            Skill("Excel Tool", "Excel", Path("/s/xlsx")),
        ]

    def test_case_insensitive_match(self):
        assert [s.name for s in select_skills(self.skills(), ["PDF", "excel tool"])] == [
            "pdf", "Excel Tool"]

    def test_folder_name_match(self):
        assert [s.name for s in select_skills(self.skills(), ["xlsx"])] == ["Excel Tool"]

    def test_no_match_lists_available(self):
        with pytest.raises(NoMatchingSkillsError) as exc:
            select_skills(self.skills(), ["docx"])

        assert exc.value.available == ["pdf", "Excel Tool"]


class TestInstallSkills:
    """Tests for install_skills function."""

    def test_continues_after_failure(self):
        with tempfile.TemporaryDirectory() as tmp:
            broken = write_skill(Path(tmp) / "src" / "broken", "name: broken")
            (broken / "data.bin").write_bytes(b"\x00")
            good = write_skill(Path(tmp) / "src" / "good", "name: good")
            cwd = Path(tmp) / "project"

            with mock.patch("create_agent_skills.core.shutil.copy2",
                            side_effect=OSError("permission denied")):
                summary = install_skills([load_skill(broken), load_skill(good)],
                                         ["cursor", "codex"], cwd=cwd)

            assert len(summary.results) == 4
            assert [r.skill for r in summary.failed] == ["broken", "broken"]
            assert summary.installed_skills == ["good"]
            assert (cwd / ".codex" / "skills" / "good" / "SKILL.md").exists()
            assert not summary.success

    def test_undecodable_nested_manifest(self):
        """A nested SKILL.md that is not UTF-8 fails only its own skill."""
        with tempfile.TemporaryDirectory() as tmp:
            alpha = write_skill(Path(tmp) / "src" / "alpha", "name: alpha")
            legacy = alpha / "references" / "legacy"
            legacy.mkdir(parents=True)
            (legacy / "SKILL.md").write_bytes(b"---\nname: caf\xe9\n---\n")
            beta = write_skill(Path(tmp) / "src" / "beta", "name: beta")
            cwd = Path(tmp) / "project"

            summary = install_skills([load_skill(alpha), load_skill(beta)], ["cursor"], cwd=cwd)

            assert [r.skill for r in summary.failed] == ["alpha"]
            assert summary.installed_skills == ["beta"]
            assert not (cwd / ".cursor" / "skills" / "alpha").exists()
            assert (cwd / ".cursor" / "skills" / "beta" / "SKILL.md").exists()

            again = install_skills([load_skill(alpha)], ["cursor"], cwd=cwd)
            assert again.skipped == []
            assert len(again.failed) == 1

    def test_unknown_agent(self):
        with pytest.raises(UnknownAgentError) as exc:
            install_skills([], ["vim"])

        assert exc.value.invalid == ["vim"]
        assert "cursor" in exc.value.valid


class TestResolveSource:
    """Tests for resolve_source context manager."""

    def test_relative_local_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            (cwd / "repo").mkdir()

            with resolve_source("./repo", cwd=cwd) as resolved:
                assert resolved.path == (cwd / "repo").resolve()
                assert not resolved.is_remote

    def test_missing_local_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            with pytest.raises(SourceNotFoundError):
                with resolve_source("missing-dir", cwd=Path(tmp)):
                    pass

    def test_remote_clone_is_removed_after_use(self):
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"
            run = fake_clone(lambda dest: write_skill(dest / "skills" / "x", "name: x"))

            with mock.patch("create_agent_skills.core.subprocess.run", side_effect=run) as git:
                with resolve_source("https://github.com/o/r/tree/dev/skills",
                                    temp_dir=temp_dir) as resolved:
                    assert resolved.path == temp_dir
                    assert resolved.subpath == "skills"
                    assert (temp_dir / "skills" / "x" / "SKILL.md").exists()

            cmd = git.call_args[0][0]
            assert cmd == ["git", "clone", "--depth", "1", "--branch", "dev",
                           "https://github.com/o/r.git", str(temp_dir)]
            assert not temp_dir.exists()

    def test_stale_temp_dir_is_replaced(self):
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"
            temp_dir.mkdir()
            (temp_dir / "stale.txt").write_text("old run")
            seen = []

            def populate(dest):
                seen.append(dest.exists())
                dest.mkdir()

            with mock.patch("create_agent_skills.core.subprocess.run",
                            side_effect=fake_clone(populate)):
                with resolve_source("git@github.com:o/r.git", temp_dir=temp_dir):
                    assert not (temp_dir / "stale.txt").exists()

            assert seen == [False]
            assert not temp_dir.exists()

    def test_temp_dir_removed_when_block_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"

            with mock.patch("create_agent_skills.core.subprocess.run",
                            side_effect=fake_clone(lambda dest: dest.mkdir())):
                with pytest.raises(RuntimeError):
                    with resolve_source("https://gitlab.com/o/r", temp_dir=temp_dir):
                        raise RuntimeError("boom")

            assert not temp_dir.exists()


class TestAddSkills:
    """End-to-end tests for add_skills."""

    def test_installs_selected_skill_only(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"
            cwd.mkdir()

            summary = add_skills(str(source), skill_names=["alpha"],
                                 agent_keys=["cursor"], cwd=cwd)

            skills_dir = cwd / ".cursor" / "skills"
            assert summary.success
            assert summary.installed_skills == ["alpha"]
            installed = (skills_dir / "alpha" / "SKILL.md").read_text(encoding="utf-8")
            assert "snippet" not in installed
            assert "name: alpha" in installed
            assert not (skills_dir / "beta").exists()

    def test_all_skipped_is_success(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"
            (cwd / ".cursor" / "skills" / "alpha").mkdir(parents=True)

            summary = add_skills(str(source), skill_names=["alpha"],
                                 agent_keys=["cursor"], cwd=cwd)

            assert summary.success
            assert summary.installed_skills == []
            assert len(summary.skipped) == 1

    def test_installs_everything_without_selector(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"

            summary = add_skills(str(source), agent_keys=["codex"], cwd=cwd)

            assert summary.installed_skills == ["alpha", "beta"]

    def test_global_scope_uses_home(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            home = Path(tmp) / "home"

            add_skills(str(source), skill_names=["beta"], agent_keys=["claude-code"],
                       global_install=True, cwd=Path(tmp), home=home)

            assert (home / ".claude" / "skills" / "beta" / "SKILL.md").exists()

    def test_falls_back_to_all_agents(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"
            home = Path(tmp) / "home"
            home.mkdir()

            summary = add_skills(str(source), skill_names=["alpha"], cwd=cwd, home=home)

            assert sorted(r.agent for r in summary.results) == sorted(AGENTS)

    def test_uses_detected_agents(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"
            home = Path(tmp) / "home"
            (home / ".codex").mkdir(parents=True)

            summary = add_skills(str(source), skill_names=["alpha"], cwd=cwd, home=home)

            assert [r.agent for r in summary.results] == ["codex"]

    def test_callbacks(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"
            home = Path(tmp) / "home"
            plans = []

            def confirm(skills, agents, global_install):
                plans.append(([s.name for s in skills], agents, global_install))
                return True

            summary = add_skills(
                str(source), cwd=cwd, home=home, global_install=None,
                selector=lambda skills: skills[1:],
                agent_selector=lambda detected: ["roo"],
                scope_selector=lambda: False,
                confirm=confirm,
            )

            assert plans == [(["beta"], ["roo"], False)]
            assert summary.installed_skills == ["beta"]
            assert (cwd / ".roo" / "skills" / "beta").is_dir()

    def test_declined_confirmation(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")
            cwd = Path(tmp) / "project"

            with pytest.raises(InstallCancelledError):
                add_skills(str(source), agent_keys=["cursor"], cwd=cwd,
                           confirm=lambda *args: False)

            assert not (cwd / ".cursor").exists()

    def test_empty_selection(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")

            with pytest.raises(NoSkillsSelectedError):
                add_skills(str(source), agent_keys=["cursor"], cwd=Path(tmp),
                           selector=lambda skills: [])

    def test_no_matching_names(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")

            with pytest.raises(NoMatchingSkillsError) as exc:
                add_skills(str(source), skill_names=["gamma"], agent_keys=["cursor"],
                           cwd=Path(tmp))

            assert exc.value.available == ["alpha", "beta"]

    def test_no_skills_found(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "empty").mkdir()

            with pytest.raises(NoSkillsFoundError):
                add_skills(str(Path(tmp) / "empty"), agent_keys=["cursor"], cwd=Path(tmp))

    def test_clone_failure_cleans_up(self):
        """A failed clone raises CloneFailedError and leaves no temp dir."""
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"

            run = fake_clone(returncode=128, stderr="fatal: repository not found\n")
            with mock.patch("create_agent_skills.core.subprocess.run", side_effect=run):
                with pytest.raises(CloneFailedError) as exc:
                    add_skills("https://github.com/o/missing", agent_keys=["cursor"],
                               cwd=Path(tmp), temp_dir=temp_dir)

            assert "repository not found" in str(exc.value)
            assert exc.value.detail == "fatal: repository not found"
            assert not temp_dir.exists()

    def test_git_not_installed(self):
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"

            with mock.patch("create_agent_skills.core.subprocess.run",
                            side_effect=FileNotFoundError("git")):
                with pytest.raises(CloneFailedError):
                    add_skills("git@github.com:o/r.git", agent_keys=["cursor"],
                               cwd=Path(tmp), temp_dir=temp_dir)

            assert not temp_dir.exists()

    def test_remote_install(self):
        with tempfile.TemporaryDirectory() as tmp:
            temp_dir = Path(tmp) / "clone"
            cwd = Path(tmp) / "project"

            with mock.patch("create_agent_skills.core.subprocess.run",
                            side_effect=fake_clone(make_source)):
                summary = add_skills("https://github.com/o/r", skill_names=["beta"],
                                     agent_keys=["cursor"], cwd=cwd, temp_dir=temp_dir)

            assert summary.installed_skills == ["beta"]
            assert (cwd / ".cursor" / "skills" / "beta" / "SKILL.md").exists()
            assert not temp_dir.exists()


class TestListSkills:
    """Tests for list_skills function."""

    def test_lists_local_skills(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = make_source(Path(tmp) / "source")

            skills = list_skills(str(source))

            assert [s.name for s in skills] == ["alpha", "beta"]
            assert skills[0].snippet == "short text"

    def test_empty_source(self):
        with tempfile.TemporaryDirectory() as tmp:
            with pytest.raises(NoSkillsFoundError):
                list_skills(tmp)


class TestGenerateSkill:
    """Tests for generate_skill and resolve_output_dir."""

    def test_generates_template(self):
        with tempfile.TemporaryDirectory() as tmp:
            result = generate_skill("my-skill", description="Handles PDFs",
                                    include_scripts=True, include_assets=True,
                                    output_dir=Path(tmp))

            skill_path = Path(tmp) / "my-skill"
            assert result.success
            assert result.skill_path == skill_path
            content = (skill_path / "SKILL.md").read_text(encoding="utf-8")
            assert content.startswith("---\nname: my-skill\ndescription: Handles PDFs\n---\n\n# my-skill\n")
            assert (skill_path / "scripts").is_dir()
            assert (skill_path / "assets").is_dir()
            assert not (skill_path / "references").exists()

    def test_generated_skill_is_discoverable(self):
        with tempfile.TemporaryDirectory() as tmp:
            generate_skill("fresh", output_dir=Path(tmp))

            skill = load_skill(Path(tmp) / "fresh")

            assert skill.name == "fresh"
            assert skill.description.startswith("[Describe")

    def test_invalid_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            with pytest.raises(InvalidSkillNameError) as exc:
                generate_skill("Bad_Name", output_dir=Path(tmp))

            assert exc.value.reason
            assert list(Path(tmp).iterdir()) == []

    def test_existing_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "taken").mkdir()

            result = generate_skill("taken", output_dir=Path(tmp))

            assert not result.success
            assert "already exists" in result.error

    def test_resolve_output_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            assert resolve_output_dir(cwd) == cwd
            (cwd / ".cursor" / "skills").mkdir(parents=True)
            assert resolve_output_dir(cwd) == cwd / ".cursor" / "skills"
            (cwd / "skills").mkdir()
            assert resolve_output_dir(cwd) == cwd / "skills"


class TestInitWorkspace:
    """Tests for init_workspace function."""

    def test_creates_directories(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            (cwd / "commands").mkdir()
            (cwd / "commands" / "refine-skill.md").write_text("refine")
            (cwd / ".claude" / "commands").mkdir(parents=True)
            (cwd / ".claude" / "commands" / "refine-skill.md").write_text("custom")

            success, error = init_workspace(["cursor", "claude-code"], cwd=cwd)

            assert success and error is None
            assert (cwd / "skills").is_dir()
            assert (cwd / ".cursor" / "skills").is_dir()
            assert (cwd / ".cursor" / "commands" / "refine-skill.md").read_text() == "refine"
            assert (cwd / ".claude" / "commands" / "refine-skill.md").read_text() == "custom"

    def test_without_command_template(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)

            success, _ = init_workspace(["codex"], cwd=cwd)

            assert success
            assert (cwd / ".codex" / "prompts").is_dir()
            assert list((cwd / ".codex" / "prompts").iterdir()) == []

    def test_unknown_agent(self):
        with tempfile.TemporaryDirectory() as tmp:
            success, error = init_workspace(["vim"], cwd=Path(tmp))

            assert not success
            assert "vim" in error
