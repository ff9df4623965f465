"""Local git repository commit source."""

from pathlib import Path
from typing import List, Optional, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.objects.commit import Commit as GitCommit

from ..errors import RetrievalError
from ..models import Commit, Identity, RefInfo
from .base import CommitSource


class LocalRepositorySource(CommitSource):
    """Reads commits of a revision range from a local repository.

    A local repository knows nothing about hosting accounts, so every
    identity is treated as linked. Signatures are checked with
    `git verify-commit`, which needs the signer's key to be available.

    Attributes:
        repo (Repo): The git repository to read from
        rev_range (str): Revision range, e.g. "origin/main..HEAD"
    """

    def __init__(self, repo_path: Union[str, Path], rev_range: str = "HEAD"):
        try:
            self.repo = Repo(repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RetrievalError(f"Not a git repository: {repo_path}") from e
        self.rev_range = rev_range

    async def fetch_ref(self) -> Optional[RefInfo]:
        if not self.repo.head.is_valid():
            return None
        if not self.repo.head.is_detached:
            return RefInfo(branch_name=self.repo.active_branch.name)

        head_sha = self.repo.head.commit.hexsha
        for tag in self.repo.tags:
            if tag.commit.hexsha == head_sha:
                return RefInfo(tag_name=tag.name)
        return None

    async def fetch_commits(self) -> List[Commit]:
        try:
            git_commits = list(self.repo.iter_commits(self.rev_range))
        except (GitCommandError, ValueError) as e:
            raise RetrievalError(f"Error reading commits for '{self.rev_range}': {e}") from e

        # iter_commits yields newest first
        git_commits.reverse()
        return [self._to_commit(git_commit) for git_commit in git_commits]

    def _is_signature_verified(self, git_commit: GitCommit) -> bool:
        if not git_commit.gpgsig:
            return False
        try:
            self.repo.git.verify_commit(git_commit.hexsha)
        except GitCommandError:
            return False
        return True

    def _to_commit(self, git_commit: GitCommit) -> Commit:
        message = git_commit.message
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")

        return Commit(
            sha=git_commit.hexsha,
            parent_count=len(git_commit.parents),
            author=Identity(email=git_commit.author.email or "", name=git_commit.author.name or ""),
            committer=Identity(email=git_commit.committer.email or "", name=git_commit.committer.name or ""),
            author_account_linked=True,
            committer_account_linked=True,
            signature_verified=self._is_signature_verified(git_commit),
            # git stores a trailing newline the hosting API does not return
            message=message.rstrip("\n"),
        )
