import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from codecheck.errors import RepoNotFound
from codecheck.schemas import FileType

_ENTITIES = {
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&#39;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))

_EXTENSIONS = {
    "html": FileType.HTML,
    "css": FileType.CSS,
    "js": FileType.JAVASCRIPT,
}


def decode_html_entities(text: str) -> str:
    """
    Single left-to-right pass over the five basic entities, so '&amp;lt;'
    becomes '&lt;' rather than '<'.
    """
    if not text or "&" not in text:
        return text
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def file_type_for(filename: str) -> Optional[FileType]:
    """HTML/CSS/JavaScript by extension (case-insensitive), None for anything else."""
    name = (filename or "").lower()
    if "." not in name:
        return None
    return _EXTENSIONS.get(name.rsplit(".", 1)[-1])


def parse_github_url(url: str) -> Tuple[str, str]:
    """
    'https://github.com/owner/repo' -> ('owner', 'repo').
    Uses the last two path segments; a trailing '.git' or slash is ignored.
    """
    parts = [p for p in urlparse((url or "").strip()).path.split("/") if p]
    if len(parts) < 2:
        raise RepoNotFound(f"Not a repository URL: {url}")
    owner, repo = parts[-2], parts[-1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo
