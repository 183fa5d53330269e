"""
Shared pytest fixtures for the tidyup test suite.

Usage in tests:
    def test_something(project):
        project.file("a.bak", "old")
        result = project.detect(BackupFilesDetector())

    def test_with_history(git_project):
        git_project.old_branch("feature/old", days_ago=120)

    def test_cli(project, user_home):
        # user config and learned choices live under user_home
        ...
"""

import pytest

from tests.factories import ProjectFactory, git_is_available


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the developer's own tidyup environment out of every test."""
    for var in ("TIDYUP_PARALLEL", "TIDYUP_STALE_DAYS", "TIDYUP_SYMBOLS",
                "TIDYUP_PROJECT_PATH", "TIDYUP_ASCII_ONLY", "TIDYUP_UNICODE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project(tmp_path):
    """Empty project directory wrapped in a ProjectFactory."""
    return ProjectFactory(tmp_path / "project")


@pytest.fixture
def user_home(tmp_path, monkeypatch):
    """
    Fresh user-level directory.

    TIDYUP_HOME points at it and HOME at its parent, so default agent
    log paths (~/.cleanup-log.txt) resolve inside tmp_path too.
    """
    home = tmp_path / "home"
    tidyup_dir = home / ".tidyup"
    tidyup_dir.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("TIDYUP_HOME", str(tidyup_dir))
    return tidyup_dir


@pytest.fixture
def git_project(project):
    """Project initialised as a git repository on 'main' with one commit."""
    if not git_is_available():
        pytest.skip("Git is not available")
    return project.init_git()
