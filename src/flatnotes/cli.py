"""Command-line interface for flatnotes."""


import argparse
from dataclasses import replace
import json
import logging
import sys
from typing import List
from terminaltables import AsciiTable
from flatnotes.api import Notebook
from flatnotes.codec import IOFailure
from flatnotes.conf import NotesConf
from flatnotes.models import Note, DISPLAY_TIME_FORMAT
from flatnotes.store import ValidationError

SEPARATOR = '-' * 50

SHELL_MENU = """
=== Notes ===
1. Add Note
2. View All Notes
3. Search Notes
4. Delete Note
5. Save Notes
6. Load Notes
7. Exit"""


def _print_notes(notes: List[Note]) -> None:
    for note in notes:
        print(note.format())
        print(SEPARATOR)


def _print_table(notes: List[Note]) -> None:
    data = [('ID', 'Title', 'Created', 'Content')]
    data.extend((str(n.id), n.title, n.created.strftime(DISPLAY_TIME_FORMAT), n.content) for n in notes)
    table = AsciiTable(data)
    table.justify_columns[0] = 'right'
    print(table.table)


def _output(args, notes: List[Note], empty_message: str) -> None:
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
    elif not notes:
        print(empty_message)
    elif args.table:
        _print_table(notes)
    else:
        _print_notes(notes)


def _load(nb: Notebook) -> None:
    for error in nb.load():
        print(f'Skipped malformed record at line {error.lineno}: {error.message}', file=sys.stderr)


def _add(args, nb: Notebook) -> int:
    note = nb.create(args.title[0], args.content[0])
    nb.save()
    print(f'Added note {note.id}')
    return 0


def _list(args, nb: Notebook) -> int:
    _output(args, nb.list(), 'No notes found.')
    return 0


def _search(args, nb: Notebook) -> int:
    term = args.term[0]
    _output(args, nb.search(term), f"No notes found matching '{term.strip()}'")
    return 0


def _delete(args, nb: Notebook) -> int:
    note_id = args.id[0]
    if not nb.delete_by_id(note_id):
        print(f'No note found with ID: {note_id}', file=sys.stderr)
        return 1
    nb.save()
    print(f'Deleted note {note_id}')
    return 0


def _shell_add(nb: Notebook) -> None:
    title = input('Enter note title: ')
    if not title.strip():
        raise ValidationError('Title cannot be empty!')
    content = input('Enter note content: ')
    note = nb.create(title, content)
    print(f'Note added successfully! (ID: {note.id})')


def _shell_view(nb: Notebook) -> None:
    notes = nb.list()
    if not notes:
        print('No notes found.')
        return
    print('\n=== All Notes ===')
    _print_notes(notes)


def _shell_search(nb: Notebook) -> None:
    if not nb.list():
        print('No notes to search.')
        return
    term = input('Enter search term: ')
    notes = nb.search(term)
    if not notes:
        print(f"No notes found matching '{term.strip()}'")
        return
    print('\n=== Search Results ===')
    _print_notes(notes)


def _shell_delete(nb: Notebook) -> None:
    if not nb.list():
        print('No notes to delete.')
        return
    _shell_view(nb)
    idstr = input('Enter the ID of the note to delete: ')
    try:
        note_id = int(idstr)
    except ValueError:
        print('Please enter a valid ID number.')
        return
    if nb.delete_by_id(note_id):
        print('Note deleted successfully!')
    else:
        print(f'No note found with ID: {note_id}')


def _shell_save(nb: Notebook) -> None:
    nb.save()
    print(f'Notes saved to {nb.conf.path} successfully!')


def _shell_load(nb: Notebook) -> None:
    _load(nb)
    print(f'Loaded {len(nb.list())} notes from {nb.conf.path}')


SHELL_ACTIONS = {
    '1': _shell_add,
    '2': _shell_view,
    '3': _shell_search,
    '4': _shell_delete,
    '5': _shell_save,
    '6': _shell_load,
}


def _shell(args, nb: Notebook) -> int:
    while True:
        print(SHELL_MENU)
        try:
            choice = input('Enter your choice: ').strip()
            if choice == '7':
                break
            action = SHELL_ACTIONS.get(choice)
            if action:
                action(nb)
            else:
                print('Invalid choice. Please try again.')
        except EOFError:
            print()
            break
        except ValidationError as e:
            print(e.message)
        except IOFailure as e:
            print(e.message, file=sys.stderr)
    # Saving on exit is the last thing the shell does; nothing saves implicitly.
    if nb.conf.autosave:
        _shell_save(nb)
    print('Goodbye!')
    return 0


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.set_defaults(func=None)
    parser.add_argument('-f', '--file', nargs=1,
                        help='Notes file to use, instead of the path configured in ~/.flatnotes.conf.py '
                             '(or notes.txt in the current directory if that is not configured).')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging output.')

    subs = parser.add_subparsers(title='Commands')

    p_add = subs.add_parser('add', help='Create a note and save it.')
    p_add.add_argument('title', nargs=1)
    p_add.add_argument('content', nargs=1)
    p_add.set_defaults(func=_add)

    p_list = subs.add_parser('list', help='Show all notes, oldest first.')
    p_list_formats = p_list.add_mutually_exclusive_group()
    p_list_formats.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_list_formats.add_argument('-t', '--table', action='store_true', help='Format output as a table.')
    p_list.set_defaults(func=_list)

    p_search = subs.add_parser(
        'search',
        help='Show notes whose title or content contains the given text. Matching ignores case.')
    p_search.add_argument('term', nargs=1)
    p_search_formats = p_search.add_mutually_exclusive_group()
    p_search_formats.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_search_formats.add_argument('-t', '--table', action='store_true', help='Format output as a table.')
    p_search.set_defaults(func=_search)

    p_delete = subs.add_parser('delete', help='Delete a note by ID and save.')
    p_delete.add_argument('id', nargs=1, type=int)
    p_delete.set_defaults(func=_delete)

    p_shell = subs.add_parser(
        'shell',
        help='Start an interactive menu for working with notes. Notes are saved when you exit, unless '
             'conf.autosave is False.')
    p_shell.set_defaults(func=_shell)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    logging.basicConfig(format='%(levelname)s: %(message)s',
                        level=logging.DEBUG if args.verbose else logging.WARNING)
    if not args.func:
        parser.print_help()
        return 1
    conf = NotesConf.for_user()
    if args.file:
        conf = replace(conf, path=args.file[0])
    with conf.instantiate() as nb:
        try:
            _load(nb)
            return args.func(args, nb)
        except ValidationError as e:
            print(e.message, file=sys.stderr)
            return 1
        except IOFailure as e:
            print(e.message, file=sys.stderr)
            return 2
