"""
R package descriptor loading.

Reads the package's DESCRIPTION file (Debian control format) into a
PackageDescriptor. The descriptor is loaded fresh for every invocation.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..utils.errors import PackageLoadError

logger = logging.getLogger(__name__)

DESCRIPTION_FILE = "DESCRIPTION"

_FIELD_LINE = re.compile(r"^([A-Za-z0-9][^:\s]*):\s*(.*)$")
_VERSION_SPEC = re.compile(r"\(.*?\)")


def parse_dcf(text: str) -> dict[str, str]:
    """Parse a single-record DCF document into a field mapping."""
    fields: dict[str, str] = {}
    current: Optional[str] = None

    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            if fields:
                # Only the first record matters for DESCRIPTION
                break
            continue

        if line[0] in " \t":
            if current is None:
                raise ValueError(f"Continuation line without a field at line {lineno}")
            fields[current] = f"{fields[current]}\n{line.strip()}".strip()
            continue

        match = _FIELD_LINE.match(line)
        if not match:
            raise ValueError(f"Malformed field at line {lineno}: {line!r}")
        current = match.group(1)
        fields[current] = match.group(2).strip()

    return fields


def parse_dependency_field(value: str) -> list[str]:
    """`R (>= 3.5), methods,\\n utils` -> `["R", "methods", "utils"]`."""
    names = []
    for entry in _VERSION_SPEC.sub("", value).split(","):
        name = entry.strip()
        if name:
            names.append(name)
    return names


@dataclass
class PackageDescriptor:
    """An R package as described by its DESCRIPTION file."""

    name: str
    path: Path
    version: Optional[str] = None
    dependencies: list[str] = field(default_factory=list)  # Depends
    imports: list[str] = field(default_factory=list)
    suggests: list[str] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)

    def ensure_dependency(self, package: str) -> None:
        """
        Put `package` first in the dependency list, exactly once.

        A package never depends on itself, so nothing happens when this
        package is `package`.
        """
        if self.name == package:
            return
        self.dependencies = [package] + [d for d in self.dependencies if d != package]

    @property
    def attached_packages(self) -> list[str]:
        """Dependencies that must be attached with library() before loading."""
        return [d for d in self.dependencies if d != "R"]


def find_package_root(path: Union[str, Path]) -> Path:
    """Walk up from `path` to the first directory holding a DESCRIPTION file."""
    start = Path(path).resolve()
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / DESCRIPTION_FILE).is_file():
            return candidate

    raise PackageLoadError(
        f"Could not find a package root at or above '{path}'",
        recovery_hint=f"Run from inside an R package (a directory with a {DESCRIPTION_FILE} file)",
    )


def load_package(path: Union[str, Path, PackageDescriptor] = ".") -> PackageDescriptor:
    """
    Load the descriptor of the package containing `path`.

    Raises:
        PackageLoadError: No DESCRIPTION found, unreadable, malformed or
            missing the `Package` field
    """
    if isinstance(path, PackageDescriptor):
        return path

    root = find_package_root(path)
    description = root / DESCRIPTION_FILE

    try:
        text = description.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning(f"File {description} decoded using latin-1 instead of utf-8")
        text = description.read_text(encoding="latin-1")
    except OSError as e:
        raise PackageLoadError(f"Cannot read {description}: {e}") from e

    try:
        fields = parse_dcf(text)
    except ValueError as e:
        raise PackageLoadError(f"Malformed {description}: {e}") from e

    name = fields.get("Package")
    if not name:
        raise PackageLoadError(f"{description} has no `Package` field")

    return PackageDescriptor(
        name=name,
        path=root,
        version=fields.get("Version"),
        dependencies=parse_dependency_field(fields.get("Depends", "")),
        imports=parse_dependency_field(fields.get("Imports", "")),
        suggests=parse_dependency_field(fields.get("Suggests", "")),
        fields=fields,
    )


def add_suggested_package(descriptor: PackageDescriptor, package: str) -> bool:
    """
    Add `package` to the Suggests field of the DESCRIPTION on disk.

    Returns:
        True if the file was changed
    """
    if package in descriptor.suggests or package in descriptor.imports:
        return False

    description = descriptor.path / DESCRIPTION_FILE
    lines = description.read_text(encoding="utf-8").splitlines()

    start = next((i for i, line in enumerate(lines) if line.startswith("Suggests:")), None)
    if start is None:
        lines.append(f"Suggests: {package}")
    else:
        end = start + 1
        while end < len(lines) and lines[end][:1] in (" ", "\t"):
            end += 1
        last = lines[end - 1].rstrip()
        if last.endswith(":"):
            lines[end - 1] = f"{last} {package}"
        else:
            lines[end - 1] = f"{last},"
            lines.insert(end, f"    {package}")

    description.write_text("\n".join(lines) + "\n", encoding="utf-8")
    descriptor.suggests.append(package)
    logger.info(f"Added {package} to Suggests in {description}")
    return True
