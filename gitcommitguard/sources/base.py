"""Base class for commit sources.

A commit source collects everything the rule engine needs for one run:
the ref names of the triggering event and the commits to evaluate, in
the order they must be reported.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Commit, RefInfo


class CommitSource(ABC):
    """Abstract base class for commit sources."""

    @abstractmethod
    async def fetch_ref(self) -> Optional[RefInfo]:
        """Return the pull request title, branch or tag to check.

        Returns:
            Optional[RefInfo]: None when the event carries no ref to check
        """
        pass

    @abstractmethod
    async def fetch_commits(self) -> List[Commit]:
        """Return the commits to evaluate, oldest first.

        Raises:
            RetrievalError: If the commits cannot be retrieved
        """
        pass
