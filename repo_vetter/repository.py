"""Repository references parsed from input URLs."""

import re
from typing import NamedTuple

_GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/\s]+)/([^/\s]+)")


class RepositoryRef(NamedTuple):
    """Owner/name pair identifying a GitHub repository."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repository_url(url: str) -> RepositoryRef | None:
    """
    Extract the owner and repository name from a GitHub URL.

    Any text containing ``github.com/<owner>/<repo>`` is accepted; extra path
    segments after the repository name are ignored and a trailing ``.git`` is
    dropped.

    Args:
        url: One line of input.

    Returns:
        RepositoryRef, or None if the URL does not name a repository.

    Example:
        >>> parse_repository_url("https://github.com/psf/requests")
        RepositoryRef(owner='psf', name='requests')
    """
    match = _GITHUB_URL_PATTERN.search(url.strip())
    if not match:
        return None

    owner, name = match.group(1), match.group(2)
    name = re.split(r"[?#]", name, maxsplit=1)[0]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not owner or not name:
        return None
    return RepositoryRef(owner=owner, name=name)
