"""
go.mod Parser

Reads the subset of the go.mod grammar the scanner needs:

- ``module``, ``go`` and ``toolchain`` directives;
- ``require``, ``replace`` and ``exclude``, single-line or in ``( ... )``
  blocks, with ``// indirect`` markers;
- ``retract``, ``godebug``, ``tool`` and ``ignore`` are validated for shape
  and otherwise skipped.

Paths may be bare, double-quoted or back-quoted. Anything that does not fit
the grammar raises ``ManifestParseError`` with the offending line number.
"""

import re
from dataclasses import dataclass, field

from archmap.shared.exceptions import ManifestParseError

_GO_VERSION = re.compile(r"^\d+(?:\.\d+){0,2}(?:(?:rc|beta)\d+)?$")

_BLOCK_DIRECTIVES = {"require", "replace", "exclude", "retract", "godebug", "tool", "ignore"}
_DIRECTIVES = _BLOCK_DIRECTIVES | {"module", "go", "toolchain"}


@dataclass
class Requirement:
    path: str
    version: str
    indirect: bool = False


@dataclass
class Replacement:
    old_path: str
    old_version: str
    new_path: str
    new_version: str


@dataclass
class GoModFile:
    """Parsed go.mod contents."""

    module: str = ""
    go_version: str = ""
    toolchain: str = ""
    requires: list[Requirement] = field(default_factory=list)
    replaces: list[Replacement] = field(default_factory=list)
    excludes: list[tuple[str, str]] = field(default_factory=list)


# ─── Tokenizer ──────────────────────────────────────────────


def _read_quoted(line: str, start: int, filename: str, lineno: int) -> tuple[str, int]:
    """Read a double-quoted string starting at ``start``; return (text, next index)."""
    chars: list[str] = []
    i = start + 1
    while i < len(line):
        c = line[i]
        if c == "\\" and i + 1 < len(line):
            chars.append(line[i + 1])
            i += 2
            continue
        if c == '"':
            return "".join(chars), i + 1
        chars.append(c)
        i += 1
    raise ManifestParseError("unterminated quoted string", filename, lineno)


def _tokenize(line: str, filename: str, lineno: int) -> tuple[list[str], str]:
    """Split one line into tokens and its trailing ``//`` comment."""
    tokens: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        c = line[i]
        if c.isspace():
            i += 1
        elif line.startswith("//", i):
            return tokens, line[i + 2:].strip()
        elif c == '"':
            text, i = _read_quoted(line, i, filename, lineno)
            tokens.append(text)
        elif c == "`":
            end = line.find("`", i + 1)
            if end < 0:
                raise ManifestParseError("unterminated raw string", filename, lineno)
            tokens.append(line[i + 1:end])
            i = end + 1
        elif c in "()":
            tokens.append(c)
            i += 1
        elif line.startswith("=>", i):
            tokens.append("=>")
            i += 2
        else:
            start = i
            while i < n and not line[i].isspace() and line[i] not in '()"`':
                if line.startswith("//", i) or line.startswith("=>", i):
                    break
                i += 1
            tokens.append(line[start:i])
    return tokens, ""


# ─── Directives ─────────────────────────────────────────────


def _apply(gomod: GoModFile, verb: str, args: list[str], comment: str, filename: str, lineno: int) -> None:
    def fail(message: str) -> None:
        raise ManifestParseError(message, filename, lineno)

    if verb == "module":
        if len(args) != 1:
            fail("usage: module module/path")
        if gomod.module:
            fail("repeated module statement")
        gomod.module = args[0]

    elif verb == "go":
        if len(args) != 1:
            fail("usage: go 1.23")
        if not _GO_VERSION.match(args[0]):
            fail(f"invalid go version {args[0]!r}")
        gomod.go_version = args[0]

    elif verb == "toolchain":
        if len(args) != 1:
            fail("usage: toolchain name")
        gomod.toolchain = args[0]

    elif verb == "require":
        if len(args) != 2:
            fail("usage: require module/path v1.2.3")
        indirect = comment == "indirect" or comment.startswith("indirect;")
        gomod.requires.append(Requirement(path=args[0], version=args[1], indirect=indirect))

    elif verb == "exclude":
        if len(args) != 2:
            fail("usage: exclude module/path v1.2.3")
        gomod.excludes.append((args[0], args[1]))

    elif verb == "replace":
        if "=>" not in args:
            fail("usage: replace module/path [v1.2.3] => other/module v1.4")
        arrow = args.index("=>")
        old, new = args[:arrow], args[arrow + 1:]
        if len(old) not in (1, 2) or len(new) not in (1, 2):
            fail("usage: replace module/path [v1.2.3] => other/module v1.4")
        gomod.replaces.append(Replacement(
            old_path=old[0],
            old_version=old[1] if len(old) == 2 else "",
            new_path=new[0],
            new_version=new[1] if len(new) == 2 else "",
        ))

    elif verb == "godebug":
        if len(args) != 1 or "=" not in args[0]:
            fail("usage: godebug key=value")

    elif not args:
        # retract, tool, ignore
        fail(f"usage: {verb} requires an argument")


def parse_go_mod(data: bytes | str, filename: str = "go.mod") -> GoModFile:
    """Parse go.mod ``data``; raises ``ManifestParseError`` on malformed input."""
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ManifestParseError(f"not valid UTF-8: {e}", filename) from e

    gomod = GoModFile()
    block: str | None = None
    block_start = 0

    for lineno, line in enumerate(data.splitlines(), start=1):
        tokens, comment = _tokenize(line, filename, lineno)
        if not tokens:
            continue

        if block is not None:
            if tokens == [")"]:
                block = None
                continue
            if "(" in tokens or ")" in tokens:
                raise ManifestParseError("unexpected parenthesis in block", filename, lineno)
            _apply(gomod, block, tokens, comment, filename, lineno)
            continue

        verb, args = tokens[0], tokens[1:]
        if verb not in _DIRECTIVES:
            raise ManifestParseError(f"unknown directive: {verb}", filename, lineno)
        if args == ["("]:
            if verb not in _BLOCK_DIRECTIVES:
                raise ManifestParseError(f"{verb} does not accept a block", filename, lineno)
            block, block_start = verb, lineno
            continue
        if "(" in args or ")" in args:
            raise ManifestParseError("unexpected parenthesis", filename, lineno)
        _apply(gomod, verb, args, comment, filename, lineno)

    if block is not None:
        raise ManifestParseError(f"unterminated {block} block", filename, block_start)
    return gomod


def effective_requirements(gomod: GoModFile) -> dict[str, str]:
    """
    Required module versions with ``replace`` directives applied.

    A replacement applies when its old version is empty or equals the
    required version; it sets the version only when it names a new one
    (directory replacements keep the required version). The first matching
    replacement wins. Module paths are never rewritten.
    """
    replacements: dict[str, list[Replacement]] = {}
    for rep in gomod.replaces:
        replacements.setdefault(rep.old_path, []).append(rep)

    out: dict[str, str] = {}
    for req in gomod.requires:
        version = req.version
        for rep in replacements.get(req.path, ()):
            if rep.old_version in ("", req.version):
                if rep.new_version:
                    version = rep.new_version
                break
        out[req.path] = version
    return out
