import re
from typing import Optional

from core.contracts.models import RepositoryReference

DEFAULT_HOST = "github.com"


def _reference_pattern(host: str) -> "re.Pattern[str]":
    # Owner and name are runs of printable non-slash characters; a query
    # string or fragment ends the name segment.
    return re.compile(re.escape(host) + r"/([^/\s\x00-\x1f\x7f]+)/([^/?#\s\x00-\x1f\x7f]+)")


def parse_repository_url(url: str, host: str = DEFAULT_HOST) -> Optional[RepositoryReference]:
    """
    Extracts the owner and repository name from a repository URL.

    Accepts anything containing ``<host>/<owner>/<name>``, e.g.
    ``https://github.com/octo/Hello-World.git`` or ``github.com/octo/repo/tree/main``.
    A trailing ``.git`` is stripped from the name.

    Args:
        url: The user-supplied string.
        host: The repository host to look for.

    Returns:
        The parsed reference, or None if the string holds no recognizable reference.
    """
    if not url:
        return None

    match = _reference_pattern(host).search(url.strip())
    if not match:
        return None

    owner, name = match.group(1), match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        return None
    return RepositoryReference(owner=owner, name=name)
