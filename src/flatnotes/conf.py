from __future__ import annotations
from dataclasses import dataclass, replace
import os.path


@dataclass
class NotesConf:
    """Configures where notes are kept and how the interactive shell behaves.

    You can customize this by creating ``~/.flatnotes.conf.py`` and assigning an instance to the variable
    ``conf`` there, for example:

    .. code-block:: python

       from flatnotes.conf import NotesConf
       conf = NotesConf(path='~/Documents/notes.txt')
    """

    path: str = 'notes.txt'
    """The notes file. Relative paths are resolved against the current working directory.

    The file does not need to exist yet; it will be created the first time notes are saved.
    Instead of setting this in your ``.flatnotes.conf.py``, you can pass a ``--file`` command-line argument.
    """

    autosave: bool = True
    """If True, the interactive ``shell`` command saves your notes when you exit it."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.flatnotes.conf.py'))

    @classmethod
    def for_user(cls) -> NotesConf:
        """Loads ``~/.flatnotes.conf.py``, or returns the defaults if there is no such file."""
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of NotesConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            path=os.path.abspath(os.path.expanduser(self.path))
        )

    def instantiate(self):
        from flatnotes.api import Notebook
        return Notebook(self.standardize())
