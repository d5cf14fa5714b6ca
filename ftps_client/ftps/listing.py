"""LIST output parsing.

Turns one line of Unix-style ``LIST`` output into a ListingEntry. The
filename is the ninth field and is taken verbatim up to the end of the
line, so names containing runs of spaces or semicolons survive intact:

    drwx---r-x   6 ftp-user.jp ftpsUser123        4096 Aug 27 00:07 lib
    -rw-rw-r--    1 ftp      ftp      13881548 Sep 04 20:32 14 a   ;b.wav
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EntryKind(Enum):
    """Type of a listed directory entry."""
    CURRENT_DIRECTORY = "current_directory"
    PARENT_DIRECTORY = "parent_directory"
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class ListingEntry:
    """One entry of a directory listing."""
    kind: Optional[EntryKind]
    name: str

    @property
    def is_directory(self) -> bool:
        """True for real subdirectories (not '.' or '..')."""
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        """True for regular files."""
        return self.kind == EntryKind.FILE


# Field holding the filename: perms, links, owner, group, size, month, day, time, name
NAME_FIELD = 8


def parse_listing_line(line: str) -> ListingEntry:
    """
    Parse a single LIST line.

    Fields are separated by runs of spaces of any width. Only the first
    field (permissions) and the ninth (name) are extracted; the ones in
    between are counted and skipped.

    Args:
        line: One listing line without its line terminator

    Returns:
        ListingEntry; kind is None when the permission string starts with
        neither 'd' nor '-', or when the line has fewer than nine fields
    """
    kind: Optional[EntryKind] = None
    field = 0
    start = 0

    for current in range(len(line) - 1):
        char = line[current]
        following = line[current + 1]

        if char != " " and following == " ":
            # End of a field
            if field == 0:
                permissions = line[start:current + 1]
                if permissions.startswith("d"):
                    kind = EntryKind.DIRECTORY
                elif permissions.startswith("-"):
                    kind = EntryKind.FILE
            field += 1

        elif field in (0, NAME_FIELD) and char == " " and following != " ":
            # Start of the permission field or the name field
            start = current + 1
            if field == NAME_FIELD:
                break

    name = line[start:]
    if name == ".":
        kind = EntryKind.CURRENT_DIRECTORY
    elif name == "..":
        kind = EntryKind.PARENT_DIRECTORY

    return ListingEntry(kind=kind, name=name)
