"""Repository tree model: the seed forest, lookups and local directory loading."""

from pathlib import Path
from typing import Iterable, Optional

from atlas.constants import DEFAULT_MAX_READ_MB, LANGUAGE_MAP, TEXT_EXTENSIONS
from atlas.models import FileNode
from atlas.utils.ignore import IgnoreRules


def _file(path: str, content: str) -> FileNode:
    return FileNode(name=path.rsplit("/", 1)[-1], path=path, kind="file", content=content)


def _dir(path: str, *children: FileNode) -> FileNode:
    return FileNode(name=path.rsplit("/", 1)[-1], path=path, kind="directory", children=children)


SEED_FOREST: tuple[FileNode, ...] = (
    _dir("infra", _dir("infra/docker"), _dir("infra/k8s")),
    _dir(
        "services",
        _dir(
            "services/api",
            _file(
                "services/api/main.py",
                'from fastapi import FastAPI\n'
                '\n'
                'app = FastAPI(title="Atlas API")\n'
                '\n'
                '\n'
                '@app.get("/health")\n'
                'def health_check():\n'
                '    """Report that the service is up."""\n'
                '    return {"status": "online", "version": "1.0.0"}\n',
            ),
            _file(
                "services/api/auth.py",
                'from typing import Optional\n'
                '\n'
                '\n'
                'def is_jwt_valid(token: Optional[str]) -> bool:\n'
                '    """Check that a bearer token has the header.payload.signature shape."""\n'
                '    if not token:\n'
                '        return False\n'
                '    return len(token.split(".")) == 3\n',
            ),
        ),
    ),
    _dir(
        "ingestion",
        _file(
            "ingestion/parse_repo.py",
            'import os\n'
            '\n'
            'IGNORED_DIRS = {".git", "node_modules", "venv"}\n'
            '\n'
            '\n'
            'def get_repository_files(root_path):\n'
            '    """Walk root_path and return every file outside the ignored directories."""\n'
            '    if not os.path.exists(root_path):\n'
            '        return []\n'
            '\n'
            '    discovered = []\n'
            '    for current_root, dirs, files in os.walk(root_path):\n'
            '        dirs[:] = [d for d in dirs if d not in IGNORED_DIRS]\n'
            '        discovered.extend(os.path.join(current_root, f) for f in files)\n'
            '    return discovered\n',
        ),
    ),
    _file("README.md", "# Atlas Code Wiki\nMulti-agent orchestration for repository intelligence.\n"),
)


def iter_nodes(forest: Iterable[FileNode]) -> Iterable[FileNode]:
    """Yield every node depth-first, in forest order."""
    for node in forest:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


def find_file(forest: Iterable[FileNode], path: str) -> Optional[FileNode]:
    """Find the first file node with the given path.

    Paths are not guaranteed unique across imported roots; the first match in
    depth-first order wins.
    """
    for node in iter_nodes(forest):
        if node.kind == "file" and node.path == path:
            return node
    return None


def import_forest(forest: tuple[FileNode, ...], root: FileNode) -> tuple[FileNode, ...]:
    """Append a new root. No de-duplication against existing roots."""
    return forest + (root,)


def count_files(forest: Iterable[FileNode]) -> int:
    return sum(1 for node in iter_nodes(forest) if node.kind == "file")


def build_forest(
    project_root: Path,
    ignore_rules: IgnoreRules,
    max_read_mb: int = DEFAULT_MAX_READ_MB,
) -> tuple[FileNode, ...]:
    """Build a forest from a local directory.

    Args:
        project_root: Directory to load
        ignore_rules: Ignore rules to apply
        max_read_mb: Files larger than this are listed without content

    Returns:
        Root-level nodes, directories first, then files, each sorted by name
    """
    max_bytes = max_read_mb * 1024 * 1024
    return tuple(_build_children(project_root, project_root, ignore_rules, max_bytes))


def _build_children(
    directory: Path,
    project_root: Path,
    ignore_rules: IgnoreRules,
    max_bytes: int,
) -> list[FileNode]:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower()))
    except OSError:
        return []

    nodes = []
    for entry in entries:
        if ignore_rules.should_ignore(entry):
            continue

        rel_path = entry.relative_to(project_root).as_posix()

        if entry.is_dir():
            # Symlinked directories can loop
            if entry.is_symlink():
                continue
            children = _build_children(entry, project_root, ignore_rules, max_bytes)
            nodes.append(
                FileNode(name=entry.name, path=rel_path, kind="directory", children=tuple(children))
            )
        else:
            nodes.append(
                FileNode(
                    name=entry.name,
                    path=rel_path,
                    kind="file",
                    content=_load_content(entry, max_bytes),
                )
            )

    return nodes


def _load_content(path: Path, max_bytes: int) -> Optional[str]:
    try:
        if path.stat().st_size > max_bytes:
            return None
    except OSError:
        return None

    if not _is_likely_text(path):
        return None

    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def _is_likely_text(path: Path) -> bool:
    """Heuristic to check if file is likely text."""
    suffix = path.suffix.lower()
    if suffix in LANGUAGE_MAP or suffix in TEXT_EXTENSIONS:
        return True

    try:
        with open(path, "rb") as f:
            chunk = f.read(512)
    except OSError:
        return False

    if not chunk:
        return True
    printable = sum(1 for b in chunk if 32 <= b < 127 or b in (9, 10, 13))
    return printable / len(chunk) > 0.7
