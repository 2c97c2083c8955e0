"""Fleet scanning: GitLab repository listing and go.mod parsing."""

from archmap.scanner.gitlab import GitLabClient
from archmap.scanner.gomod import GoModFile, effective_requirements, parse_go_mod

__all__ = ["GitLabClient", "GoModFile", "effective_requirements", "parse_go_mod"]
