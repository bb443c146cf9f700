"""Remote repository import: URL checks and coercion of analysis payloads."""

import re

from atlas.models import FileNode, RemoteEntry, RepoAnalysis
from atlas.tree import count_files

_REPO_URL = re.compile(
    r"^(?:https?://)?(?:www\.)?"
    r"(?P<host>[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+)/"
    r"(?P<owner>[A-Za-z0-9_.-]+)/"
    r"(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?/?$"
)


class InvalidRepoUrl(ValueError):
    """Raised when input does not look like host/owner/repo."""


def normalize_repo_url(raw: str) -> str:
    """Validate a typed repository URL and return its canonical https form.

    Only rejects obviously malformed input; whether the repository exists is
    left to the analysis call.

    Raises:
        InvalidRepoUrl: If the input is not host/owner/repo shaped
    """
    match = _REPO_URL.match(raw.strip())
    if not match:
        raise InvalidRepoUrl(f"Not a repository URL (expected host/owner/repo): {raw.strip()!r}")
    return f"https://{match['host'].lower()}/{match['owner']}/{match['repo']}"


def repo_name_from_url(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]


def to_file_node(analysis: RepoAnalysis, url: str) -> FileNode:
    """Coerce an analysis payload into a new root directory node.

    Remote paths are re-rooted under the repository URL so they cannot shadow
    paths of the local forest.
    """
    name = (analysis.name or "").strip() or repo_name_from_url(url)
    children = tuple(_to_node(entry, url) for entry in analysis.structure)
    return FileNode(name=name, path=url, kind="directory", children=children)


def _to_node(entry: RemoteEntry, parent_path: str) -> FileNode:
    raw_path = (entry.path or "").strip().strip("/")
    name = (entry.name or "").strip() or raw_path.rsplit("/", 1)[-1] or "unnamed"

    root = _root_of(parent_path)
    if not raw_path:
        path = f"{parent_path}/{name}"
    elif raw_path == root or raw_path.startswith(root + "/"):
        path = raw_path
    else:
        path = f"{root}/{raw_path}"

    if entry.type == "directory" or entry.children:
        children = tuple(_to_node(child, path) for child in entry.children or [])
        return FileNode(name=name, path=path, kind="directory", children=children)

    return FileNode(
        name=name,
        path=path,
        kind="file",
        content=(
            f"// Discovered remote file: {name}\n"
            "// Ask Atlas to explain it or generate content for it."
        ),
    )


def _root_of(path: str) -> str:
    # https://host/owner/repo[/...] -> https://host/owner/repo
    head, sep, rest = path.partition("://")
    if not sep:
        return path
    return head + sep + "/".join(rest.split("/")[:3])


def summarize_import(analysis: RepoAnalysis, root: FileNode) -> str:
    """Markdown summary posted by the Architect after a successful import."""
    stack = "\n".join(f"- {item}" for item in analysis.stack) or "- (not identified)"
    summary = analysis.summary.strip() or "No summary was returned for this repository."
    return (
        f"### Repository Ingested: {root.name}\n\n"
        f"{summary}\n\n"
        f"**Stack Identified:**\n{stack}\n\n"
        "**Explorer Insights:**\n"
        f"Atlas mapped {len(root.children or ())} top-level entries and "
        f"{count_files([root])} files. Open any of them to start asking questions."
    )


def failure_message(url: str) -> str:
    return f"**Ingestion Failed:** Could not analyze repository at {url}."
