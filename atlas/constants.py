"""Constants and default values for Atlas."""

import re

# Default model configuration
DEFAULT_MODEL = "anthropic:claude-sonnet-4-5"
DEFAULT_TEMPERATURE = 0.7

# Seconds between each staggered agent activation in the status line
DEFAULT_REVEAL_INTERVAL = 0.6

# File size limit (in MB) for content loaded into a local forest
DEFAULT_MAX_READ_MB = 2

# Queries matching this get the repository structure prepended to the prompt
STRUCTURE_QUERY_PATTERN = re.compile(r"architecture|structure|overview|audit|design|pattern")

# In-band marker used when a streamed completion fails
AGENT_ERROR_MARKER = "**Agent Error:**"

# Built-in ignore patterns for local forests
BUILTIN_IGNORES = [
    # Version control and project metadata
    ".git/",
    ".github/",

    # Atlas internal
    ".atlas/",

    # Python
    "__pycache__/",
    "*.pyc",
    "*.pyo",
    "*.egg-info/",
    ".pytest_cache/",
    ".mypy_cache/",
    ".ruff_cache/",
    ".tox/",
    ".coverage",
    "htmlcov/",

    # Virtual environments
    "venv/",
    ".venv/",
    "env/",

    # Build artifacts
    "dist/",
    "build/",
    "*.so",
    "*.dylib",
    "*.dll",

    # JavaScript/Node
    "node_modules/",
    "package-lock.json",
    "yarn.lock",

    # IDE and editor files
    ".DS_Store",
    "*.swp",
    ".vscode/",
    ".idea/",

    # Logs and databases
    "*.log",
    "*.sqlite",
    "*.db",
]

# Language detection by extension (also drives syntax highlighting in the CLI)
LANGUAGE_MAP = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".cpp": "cpp",
    ".h": "c",
    ".rb": "ruby",
    ".php": "php",
    ".kt": "kotlin",
    ".sh": "bash",
    ".md": "markdown",
    ".rst": "rst",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
}

TEXT_EXTENSIONS = {".txt", ".cfg", ".ini", ".conf", ".env.example", ".dockerfile"}

# Model descriptors - Anthropic Claude models only
SUPPORTED_MODELS = {
    "anthropic:claude-sonnet-4-5": {
        "provider": "anthropic",
        "name": "claude-sonnet-4-5-20250929",
        "max_output_tokens": 8192,
    },
    "anthropic:claude-haiku-4-5": {
        "provider": "anthropic",
        "name": "claude-haiku-4-5-20251001",
        "max_output_tokens": 8192,
    },
    "anthropic:claude-opus-4-1": {
        "provider": "anthropic",
        "name": "claude-opus-4-1-20250805",
        "max_output_tokens": 8192,
    },
}
