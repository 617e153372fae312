"""
In-memory register of posts.

A post links a title and description to a storage key, typically after the
client has finished a direct upload through a pre-signed URL. The register
is created empty with the application and lost when the process exits.

No validation is performed: the referenced key may not exist, now or ever.
"""

import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PostRecord:
    """A confirmed upload with user-supplied descriptive metadata."""
    id: int
    title: Optional[str]
    description: Optional[str]
    file_key: Optional[str]


class PostRegister:
    """
    Ordered, append-only collection of PostRecords.

    Identifier assignment and append happen under one lock, so concurrent
    callers always observe ids 1, 2, 3, ... with no gaps or duplicates.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._posts: list[PostRecord] = []
        self._next_id = 1

    def append(
        self,
        title: Optional[str],
        description: Optional[str],
        file_key: Optional[str],
    ) -> PostRecord:
        with self._lock:
            post = PostRecord(
                id=self._next_id,
                title=title,
                description=description,
                file_key=file_key,
            )
            self._posts.append(post)
            self._next_id += 1
        return post

    def list(self) -> list[PostRecord]:
        with self._lock:
            return list(self._posts)

    def __len__(self) -> int:
        return len(self._posts)
