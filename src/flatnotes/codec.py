"""Reads and writes the notes file.

Each note is one line of the form ``id|title|content|created``, where ``created`` is an ISO 8601 timestamp.
Within the title and content, backslashes, pipes, and line breaks are escaped with a backslash, so any text
survives a save and load unchanged.

The main functions are :func:`save` and :func:`load`.
"""

from contextlib import suppress
from datetime import datetime
import logging
import os
import os.path
import re
import shutil
from tempfile import mkstemp
from typing import Iterable, List, Optional, Tuple

from flatnotes.models import Note

logger = logging.getLogger(__name__)

DELIMITER = '|'
ESCAPE = '\\'
ESCAPES = {ESCAPE: ESCAPE + ESCAPE, DELIMITER: ESCAPE + DELIMITER, '\n': ESCAPE + 'n', '\r': ESCAPE + 'r'}
UNESCAPES = {ESCAPE: ESCAPE, DELIMITER: DELIMITER, 'n': '\n', 'r': '\r'}
FIELD_COUNT = 4
# Older files may carry up to nanosecond precision, and may omit the seconds entirely.
TIMESTAMP_RE = re.compile(r'^([0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}(?::[0-9]{2})?)(?:\.([0-9]{1,9}))?'
                          r'([+-][0-9]{2}:[0-9]{2}|Z)?$')
# Ids are ASCII digits, short enough to always convert.
ID_RE = re.compile(r'[0-9]{1,18}')


class DecodeError(Exception):
    """Raised when a line of a notes file does not describe a note."""
    def __init__(self, message: str, line: str, lineno: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.lineno = lineno


class IOFailure(Exception):
    """Raised when the notes file cannot be read or written."""
    def __init__(self, message: str, path: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause


def _escape(value: str) -> str:
    return ''.join(ESCAPES.get(c, c) for c in value)


def _split(line: str) -> List[str]:
    # A backslash before anything unrecognized is kept as-is, so files written before escaping was
    # introduced still load.
    fields = []
    current = []
    chars = iter(line)
    for c in chars:
        if c == ESCAPE:
            following = next(chars, '')
            if following in UNESCAPES:
                current.append(UNESCAPES[following])
            else:
                current.append(c + following)
        elif c == DELIMITER:
            fields.append(''.join(current))
            current = []
        else:
            current.append(c)
    fields.append(''.join(current))
    return fields


def _parse_timestamp(value: str, line: str) -> datetime:
    match = TIMESTAMP_RE.match(value)
    if not match:
        raise DecodeError(f'Invalid timestamp: {value}', line)
    try:
        created = datetime.fromisoformat(match.group(1) + (match.group(3) or '').replace('Z', '+00:00'))
    except ValueError:
        raise DecodeError(f'Invalid timestamp: {value}', line)
    if match.group(2):
        created = created.replace(microsecond=int(match.group(2)[:6].ljust(6, '0')))
    return created


def encode(note: Note) -> str:
    """Returns the line (without a line break) representing the note in a notes file."""
    return DELIMITER.join([str(note.id), _escape(note.title), _escape(note.content), note.created.isoformat()])


def decode(line: str) -> Note:
    """Parses one line of a notes file. Raises :exc:`DecodeError` if the line is malformed."""
    fields = _split(line)
    if not len(fields) == FIELD_COUNT:
        raise DecodeError(f'Expected {FIELD_COUNT} fields but found {len(fields)}', line)
    idstr, title, content, created = fields
    note_id = int(idstr) if ID_RE.fullmatch(idstr) else 0
    if note_id < 1:
        raise DecodeError(f'Invalid id: {idstr[:20]}', line)
    if not title.strip():
        raise DecodeError('Empty title', line)
    if not content.strip():
        raise DecodeError('Empty content', line)
    return Note(note_id, title, content, _parse_timestamp(created, line))


def save(path: str, notes: Iterable[Note]) -> None:
    """Replaces the contents of the file at the given path with the given notes, in order.

    The notes are written to a temporary file next to the destination, which is then renamed over it,
    so the previous file is left intact if anything fails partway.

    Raises :exc:`IOFailure` if the file cannot be written.
    """
    dirname, basename = os.path.split(os.path.abspath(path))
    try:
        fd, tmp = mkstemp(prefix=f'.{basename}.', suffix='.tmp', dir=dirname)
    except OSError as e:
        raise IOFailure(f'Cannot create temporary file in {dirname}: {e}', path, e) from e
    count = 0
    try:
        with open(fd, 'w', encoding='utf-8', newline='\n') as file:
            for note in notes:
                file.write(encode(note))
                file.write('\n')
                count += 1
            file.flush()
            os.fsync(file.fileno())
        if os.path.isfile(path):
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException as e:
        with suppress(FileNotFoundError):
            os.remove(tmp)
        if isinstance(e, OSError):
            raise IOFailure(f'Error saving notes to {path}: {e}', path, e) from e
        raise
    logger.debug('Saved %d notes to %s', count, path)


def load(path: str) -> Tuple[List[Note], List[DecodeError]]:
    """Reads all notes from the file at the given path.

    Returns the notes in file order, and a list of errors for lines that could not be used. A malformed line,
    or a line repeating the id of an earlier line, is skipped without affecting the rest of the file.
    Blank lines are ignored.

    If there is no file at the path, returns two empty lists.

    Raises :exc:`IOFailure` if the file exists but cannot be read.
    """
    try:
        with open(path, 'r', encoding='utf-8-sig') as file:
            lines = list(file)
    except FileNotFoundError:
        logger.debug('No notes file at %s', path)
        return [], []
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(f'Error loading notes from {path}: {e}', path, e) from e

    notes = []
    errors = []
    seen = set()
    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            note = decode(line)
            if note.id in seen:
                raise DecodeError(f'Duplicate id: {note.id}', line)
        except DecodeError as e:
            e.lineno = lineno
            logger.warning('Skipping line %d of %s: %s', lineno, path, e.message)
            errors.append(e)
            continue
        seen.add(note.id)
        notes.append(note)
    logger.debug('Loaded %d notes from %s', len(notes), path)
    return notes, errors
