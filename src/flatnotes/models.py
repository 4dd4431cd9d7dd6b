"""Defines the :class:`Note` record."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime


DISPLAY_TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass(frozen=True)
class Note:
    """A single note. Instances are never changed after creation.

    Normally you get these from :meth:`flatnotes.store.NoteStore.create` or by loading a notes file,
    rather than constructing them yourself.
    """

    id: int
    """Unique within a store. Assigned when the note is created."""

    title: str
    """Non-empty, with surrounding whitespace removed."""

    content: str
    """Non-empty, with surrounding whitespace removed."""

    created: datetime
    """When the note was created, in local time, to the second."""

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'created': self.created.isoformat()
        }

    def format(self) -> str:
        """Returns the text shown to a user for this note."""
        return (f'ID: {self.id} | Title: {self.title} | Created: {self.created.strftime(DISPLAY_TIME_FORMAT)}\n'
                f'Content: {self.content}')
