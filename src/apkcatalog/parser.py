"""Decoder for the APKINDEX text format.

An index is a sequence of blank-line separated records. Each line of a record
is ``<key>:<value>`` where the key is a single letter, e.g.::

    C:Q1abc...=
    P:busybox
    V:1.36.1-r15
    D:so:libc.musl-x86_64.so.1
    p:cmd:busybox=1.36.1-r15

Unknown keys are ignored so newer index fields do not break older readers.
"""

import logging
import re
from collections.abc import Iterable, Iterator

from apkcatalog.models import PackageRecord

logger = logging.getLogger(__name__)

# virtual dependencies on shared objects, commands and pkg-config modules
VIRTUAL_PREFIXES = ("so:", "cmd:", "pc:")
CONFLICT_MARKER = "!"

# everything from the first version comparator onward (>=, >, <=, <, =)
_CONSTRAINT = re.compile(r"[<>=].*$")

_SCALAR_FIELDS = {
    "C": "checksum",
    "P": "name",
    "V": "version",
    "A": "architecture",
    "S": "package_size",
    "I": "installed_size",
    "T": "description",
    "U": "url",
    "L": "license",
    "o": "origin",
    "m": "maintainer",
    "t": "build_time",
}


def parse_dependencies(value: str) -> list[str]:
    """Extract bare package names from a dependency list.

    Virtual dependencies (``so:``, ``cmd:``, ``pc:``) and conflicts (``!name``)
    are dropped, and version constraints are stripped.

    Examples:
        >>> parse_dependencies("foo>=1.2.3 so:libc.so.6 !baz bar")
        ['foo', 'bar']
    """
    deps = []
    for token in value.split():
        if token.startswith(VIRTUAL_PREFIXES) or token.startswith(CONFLICT_MARKER):
            continue
        if name := _CONSTRAINT.sub("", token):
            deps.append(name)
    return deps


def parse_provides(value: str) -> list[str]:
    """Extract provided names, dropping any ``=version`` suffix.

    Examples:
        >>> parse_provides("cmd:foo=1.0 so:libfoo.so.1=1")
        ['cmd:foo', 'so:libfoo.so.1']
    """
    return [name for item in value.split() if (name := item.split("=", 1)[0])]


def iter_index_records(
    lines: Iterable[str],
    *,
    repo: str = "",
    source_repo: str = "",
    architecture: str = "",
) -> Iterator[PackageRecord]:
    """Stream package records from the lines of an APKINDEX.

    Args:
        lines: Index text, one line per item. Line terminators are optional.
        repo: Display label stamped onto every record.
        source_repo: Repository id stamped onto every record, used for priority ranking.
        architecture: Default architecture for records without an ``A:`` line.

    Yields:
        One PackageRecord per block that has a package name.
    """

    def new_fields() -> dict:
        return {"repo": repo, "source_repo": source_repo, "architecture": architecture}

    fields = new_fields()
    skipped = 0
    for line in lines:
        line = line.rstrip("\r\n")
        if line == "":
            if fields.get("name"):
                yield PackageRecord(**fields)
            fields = new_fields()
            continue

        key, sep, value = line.partition(":")
        if not sep:
            skipped += 1
            continue

        if field := _SCALAR_FIELDS.get(key):
            fields[field] = value
        elif key == "D":
            fields["dependencies"] = parse_dependencies(value)
        elif key == "p":
            fields["provides"] = parse_provides(value)
        elif key == "i":
            fields["install_if"] = parse_dependencies(value)

    if fields.get("name"):
        yield PackageRecord(**fields)

    if skipped:
        logger.debug(f"Skipped {skipped} malformed index lines for {source_repo or 'index'}/{architecture}")


def parse_index(
    text: str,
    *,
    repo: str = "",
    source_repo: str = "",
    architecture: str = "",
) -> list[PackageRecord]:
    """Parse a complete APKINDEX text into package records."""
    return list(
        iter_index_records(
            text.split("\n"),
            repo=repo,
            source_repo=source_repo,
            architecture=architecture,
        )
    )
