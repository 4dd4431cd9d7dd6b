"""Provides the in-memory collection of notes, :class:`NoteStore`."""

from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional

from flatnotes.models import Note


class ValidationError(ValueError):
    """Raised when user-supplied values for a note or search are unusable."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoteStore:
    """Holds the notes for a session, in the order they were added.

    Ids are allocated by counting up from the highest id the store has ever held, so deleting the newest note
    does not free its id for the next one. When notes are loaded via :meth:`replace_all`, the count resumes
    from the highest loaded id.
    """
    def __init__(self, notes: Iterable[Note] = ()):
        self._notes: Dict[int, Note] = {}
        self._last_id = 0
        self.replace_all(notes)

    def create(self, title: str, content: str) -> Note:
        """Adds a new note at the end of the collection and returns it.

        Surrounding whitespace is removed from both values. Raises :exc:`ValidationError` if either is
        then empty.
        """
        title = (title or '').strip()
        content = (content or '').strip()
        if not title:
            raise ValidationError('Title cannot be empty!')
        if not content:
            raise ValidationError('Content cannot be empty!')
        note = Note(self._last_id + 1, title, content, datetime.now().replace(microsecond=0))
        self._notes[note.id] = note
        self._last_id = note.id
        return note

    def list(self) -> List[Note]:
        """Returns all notes in insertion order."""
        return list(self._notes.values())

    def search(self, term: str) -> List[Note]:
        """Returns notes whose title or content contains the term, ignoring case, in insertion order.

        Raises :exc:`ValidationError` if the term is empty or only whitespace.
        """
        term = (term or '').strip().casefold()
        if not term:
            raise ValidationError('Search term cannot be empty!')
        return [n for n in self._notes.values() if term in n.title.casefold() or term in n.content.casefold()]

    def get(self, note_id: int) -> Optional[Note]:
        return self._notes.get(note_id)

    def delete_by_id(self, note_id: int) -> bool:
        """Removes the note with the given id. Returns False if there was no such note."""
        return self._notes.pop(note_id, None) is not None

    def replace_all(self, notes: Iterable[Note]) -> None:
        """Swaps in an entirely new collection.

        Raises :exc:`ValueError` if two of the notes share an id; the current collection is kept in that case.
        """
        replacement = {}
        for note in notes:
            if note.id in replacement:
                raise ValueError(f'Duplicate note id: {note.id}')
            replacement[note.id] = note
        self._notes = replacement
        self._last_id = max(replacement, default=0)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.list())

    def __contains__(self, note_id) -> bool:
        return note_id in self._notes
