"""
Custom exception hierarchy for archmap.

All errors inherit from ArchmapError so they can be caught
uniformly at the gateway or CLI level.
"""


class ArchmapError(Exception):
    """Base exception for all archmap errors."""

    def __init__(self, message: str, component: str = "unknown"):
        self.component = component
        super().__init__(f"[{component}] {message}")


class NodeNotFoundError(ArchmapError):
    """No graph node matches the requested module or service."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"could not find node for module {query!r}", component="graph")


class ManifestParseError(ArchmapError):
    """A go.mod file could not be parsed."""

    def __init__(self, message: str, filename: str = "go.mod", line: int = 0):
        self.filename = filename
        self.line = line
        location = f"{filename}:{line}" if line else filename
        super().__init__(f"{location}: {message}", component="manifest")


class GitLabError(ArchmapError):
    """The GitLab REST API returned an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, component="gitlab")


class CacheUnavailableError(ArchmapError):
    """The snapshot cache store is not configured or not reachable."""

    def __init__(self, message: str = "snapshot cache is not available"):
        super().__init__(message, component="cache")


class ArchitectureFileError(ArchmapError):
    """A stored architecture file was requested by an invalid name or is unreadable."""

    def __init__(self, message: str, filename: str = ""):
        self.filename = filename
        super().__init__(message, component="files")


class ArchitectureFileNotFoundError(ArchitectureFileError):
    def __init__(self, filename: str):
        super().__init__(f"architecture file not found: {filename}", filename=filename)
