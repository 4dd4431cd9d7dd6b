"""Provides the main entry point for using the library, :class:`Notebook`"""

from __future__ import annotations
import logging
from typing import List, Optional

from flatnotes import codec
from flatnotes.codec import DecodeError
from flatnotes.conf import NotesConf
from flatnotes.models import Note
from flatnotes.store import NoteStore

logger = logging.getLogger(__name__)


class Error(Exception):
    pass


class Notebook:
    """Main entry point for working programmatically with your notes.

    Generally, you should get an instance using the :meth:`Notebook.for_user` method, then call :meth:`load`.
    Changes only reach the notes file when you call :meth:`save`; closing the notebook does not save.

    .. attribute:: conf
       :type: flatnotes.conf.NotesConf

    .. attribute:: store
       :type: Optional[flatnotes.store.NoteStore]

       None until notes have been loaded.

    Here's an example of how to use this class. This would add a note and write it to your notes file.

    .. code-block:: python

       from flatnotes.api import Notebook
       with Notebook.for_user() as nb:
           nb.load()
           nb.create('Groceries', 'Milk, eggs, bread')
           nb.save()
    """

    @staticmethod
    def for_user() -> Notebook:
        """Creates an instance using the user's ``~/.flatnotes.conf.py`` file, if any."""
        return NotesConf.for_user().instantiate()

    def __init__(self, conf: NotesConf):
        self.conf = conf
        self.store: Optional[NoteStore] = None

    def _loaded_store(self) -> NoteStore:
        if self.store is None:
            raise Error('No notes loaded. Call load() first.')
        return self.store

    def load(self) -> List[DecodeError]:
        """Reads the notes file, replacing any notes currently held.

        Returns errors for the lines that were skipped because they could not be parsed.
        If the file cannot be read, raises :exc:`flatnotes.codec.IOFailure` and leaves the current notes as they were.
        """
        notes, errors = codec.load(self.conf.path)
        if self.store is None:
            self.store = NoteStore(notes)
        else:
            self.store.replace_all(notes)
        logger.info('Loaded %d notes from %s', len(notes), self.conf.path)
        return errors

    def save(self) -> None:
        """Writes all current notes to the notes file, replacing its contents.

        May raise :exc:`flatnotes.codec.IOFailure`.
        """
        codec.save(self.conf.path, self._loaded_store().list())
        logger.info('Saved %d notes to %s', len(self.store), self.conf.path)

    def create(self, title: str, content: str) -> Note:
        return self._loaded_store().create(title, content)

    def list(self) -> List[Note]:
        return self._loaded_store().list()

    def search(self, term: str) -> List[Note]:
        return self._loaded_store().search(term)

    def delete_by_id(self, note_id: int) -> bool:
        return self._loaded_store().delete_by_id(note_id)

    def close(self):
        """Releases the loaded notes without saving them."""
        self.store = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
