"""Mailbox listing models"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .message import NO_SUBJECT


@dataclass(frozen=True)
class MailboxEntry:
    """Sequence number and subject of one message."""

    sequence: int
    subject: Optional[str]

    def render(self) -> str:
        subject = self.subject if self.subject is not None else NO_SUBJECT
        return f"{self.sequence}: {subject}"


@dataclass
class MailboxListing:
    """Entries in server response order."""

    entries: List[MailboxEntry] = field(default_factory=list)

    def add(self, sequence: int, subject: Optional[str]) -> None:
        self.entries.append(MailboxEntry(sequence, subject))

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def lines(self) -> List[str]:
        return [entry.render() for entry in self.entries]

    def __iter__(self) -> Iterator[MailboxEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
