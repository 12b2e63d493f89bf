"""Dogma client facade.

``DogmaClient`` owns the HTTP session and hands out project- and
repository-scoped clients that share it.
"""

import logging
from typing import Optional

from .api_clients.content_client import ContentClient
from .api_clients.projects_client import ProjectsAPIClient
from .api_clients.repos_client import ProjectClient
from .models import Query, Revision
from .watch.long_poll import LongPoller
from .watch.stream import WatchStream
from .watch.targets import FileWatchTarget, RepoWatchTarget, WatchTarget

logger = logging.getLogger(__name__)


class DogmaClient(ProjectsAPIClient):
    """Entry point for all Dogma server operations.

    Example::

        async with DogmaClient("http://localhost:36462", token="...") as client:
            stream = client.repo("foo", "bar").watch_file(Query.of_json("/a.json"))
            async for update in stream:
                print(update.revision, update.entry.content)
    """

    def project(self, name: str) -> ProjectClient:
        """Repository operations for one project."""
        return ProjectClient(self, name)

    def repo(self, project: str, repo: str) -> "RepoClient":
        """Content and watch operations for one repository."""
        return RepoClient(self, project, repo)

    def open_watch(
        self, target: WatchTarget, from_revision: Optional[Revision] = None
    ) -> WatchStream:
        """Open a watch stream on a file or repository.

        Args:
            target: What to watch
            from_revision: Revision the caller has already observed; the
                stream only yields later revisions. None yields the current
                state first.

        Returns:
            A stream that makes no request until it is iterated
        """
        poller = LongPoller(self, timeout_margin=self.watch_config.timeout_margin)
        logger.info(f"Opening watch on {target} from revision {from_revision}")
        return WatchStream(poller, target, from_revision, self.watch_config)


class RepoClient(ContentClient):
    """File and watch operations on one repository."""

    api_client: DogmaClient

    def watch_file(
        self, query: Query, from_revision: Optional[Revision] = None
    ) -> WatchStream:
        """Stream the file's content each time the query result changes."""
        return self.api_client.open_watch(
            FileWatchTarget(self.project, self.repo, query), from_revision
        )

    def watch_repo(
        self, path_pattern: str = "", from_revision: Optional[Revision] = None
    ) -> WatchStream:
        """Stream a notification for each new commit touching files matched
        by ``path_pattern``."""
        return self.api_client.open_watch(
            RepoWatchTarget(self.project, self.repo, path_pattern), from_revision
        )
