import pytest
import tempfile
from pathlib import Path
from git import Repo, Actor

from gitcommitguard.models import Commit, Identity

AUTHOR = Actor("Jane Doe", "jane@example.com")


def build_commit(
    message="feat: add feature\n\nExplain the feature.",
    sha="0123456789abcdef0123456789abcdef01234567",
    **overrides,
) -> Commit:
    """Create a Commit with sensible defaults for tests."""
    data = dict(
        sha=sha,
        parent_count=1,
        author=Identity(email="jane@example.com", name="Jane Doe", account="jane"),
        committer=Identity(email="noreply@github.com", name="GitHub", account="web-flow"),
        author_account_linked=True,
        committer_account_linked=True,
        signature_verified=True,
        message=message,
    )
    data.update(overrides)
    return Commit(**data)


@pytest.fixture
def make_commit():
    """Factory fixture returning build_commit."""
    return build_commit


@pytest.fixture
def temp_git_repo():
    """Create a temporary git repository for testing."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        # Initialize git repo
        repo = Repo.init(tmp_dir)

        # Create a test file
        test_file = Path(tmp_dir) / "test.txt"
        test_file.write_text("Initial content")

        # Initial commit
        repo.index.add(["test.txt"])
        repo.index.commit("chore: initial commit", author=AUTHOR, committer=AUTHOR)

        yield tmp_dir


@pytest.fixture
def temp_git_repo_with_history(temp_git_repo):
    """Repository with a feature commit and a multi-line commit after the initial one."""
    repo = Repo(temp_git_repo)
    test_file = Path(temp_git_repo) / "test.txt"

    test_file.write_text("Second content")
    repo.index.add(["test.txt"])
    repo.index.commit("feat: second commit", author=AUTHOR, committer=AUTHOR)

    test_file.write_text("Third content")
    repo.index.add(["test.txt"])
    repo.index.commit("fix: third commit\n\nBody line one\nBody line two\n", author=AUTHOR, committer=AUTHOR)

    yield temp_git_repo


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove action inputs and runner variables that could leak into tests."""
    import os
    for name in list(os.environ):
        if name.startswith("INPUT_") or name.startswith("GITHUB_"):
            monkeypatch.delenv(name, raising=False)
    yield
