import io
import json
from pathlib import Path
from freezegun import freeze_time
from flatnotes import cli


def nf_setup(fs, extra_conf=None):
    fs.cwd = '/notes/cwd'
    Path(fs.cwd).mkdir(parents=True)
    if extra_conf is not None:
        Path('~').expanduser().mkdir(parents=True, exist_ok=True)
        Path('~/.flatnotes.conf.py').expanduser().write_text('from flatnotes.conf import *\n' + extra_conf)


def feed(monkeypatch, text):
    monkeypatch.setattr('sys.stdin', io.StringIO(text))


def test_no_command(fs, capsys):
    nf_setup(fs)
    assert cli.main([]) == 1
    out, err = capsys.readouterr()
    assert 'usage:' in out


@freeze_time('2012-05-02T03:04:05')
def test_add_and_list(fs, capsys):
    nf_setup(fs)
    assert cli.main(['add', 'Groceries', 'Milk, eggs, bread']) == 0
    assert cli.main(['add', 'Reminder', 'Call the dentist']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 1\nAdded note 2\n'
    assert Path('/notes/cwd/notes.txt').read_text() == (
        '1|Groceries|Milk, eggs, bread|2012-05-02T03:04:05\n'
        '2|Reminder|Call the dentist|2012-05-02T03:04:05\n')

    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    sep = '-' * 50
    assert out == f"""ID: 1 | Title: Groceries | Created: 2012-05-02 03:04:05
Content: Milk, eggs, bread
{sep}
ID: 2 | Title: Reminder | Created: 2012-05-02 03:04:05
Content: Call the dentist
{sep}
"""


def test_list_empty(fs, capsys):
    nf_setup(fs)
    assert cli.main(['list']) == 0
    out, err = capsys.readouterr()
    assert out == 'No notes found.\n'
    assert not Path('/notes/cwd/notes.txt').exists()


@freeze_time('2012-05-02T03:04:05')
def test_list_json(fs, capsys):
    nf_setup(fs)
    cli.main(['add', 'Groceries', 'Milk, eggs, bread'])
    capsys.readouterr()
    assert cli.main(['list', '-j']) == 0
    out, err = capsys.readouterr()
    assert json.loads(out) == [{
        'id': 1,
        'title': 'Groceries',
        'content': 'Milk, eggs, bread',
        'created': '2012-05-02T03:04:05'
    }]


@freeze_time('2012-05-02T03:04:05')
def test_list_table(fs, capsys):
    nf_setup(fs)
    cli.main(['add', 'Groceries', 'Milk, eggs, bread'])
    capsys.readouterr()
    assert cli.main(['list', '-t']) == 0
    out, err = capsys.readouterr()
    lines = out.splitlines()
    assert '| ID | Title     | Created             | Content           |' in lines
    assert '|  1 | Groceries | 2012-05-02 03:04:05 | Milk, eggs, bread |' in lines


def test_search(fs, capsys):
    nf_setup(fs)
    cli.main(['add', 'Groceries', 'Milk, eggs, bread'])
    cli.main(['add', 'Reminder', 'Call the dentist'])
    capsys.readouterr()
    assert cli.main(['search', 'EGG', '-j']) == 0
    out, err = capsys.readouterr()
    assert [n['title'] for n in json.loads(out)] == ['Groceries']
    assert cli.main(['search', 'zebra']) == 0
    out, err = capsys.readouterr()
    assert out == "No notes found matching 'zebra'\n"


def test_search_empty_term(fs, capsys):
    nf_setup(fs)
    assert cli.main(['search', '  ']) == 1
    out, err = capsys.readouterr()
    assert err == 'Search term cannot be empty!\n'


def test_add_empty_title(fs, capsys):
    nf_setup(fs)
    assert cli.main(['add', '', 'content']) == 1
    out, err = capsys.readouterr()
    assert err == 'Title cannot be empty!\n'
    assert not Path('/notes/cwd/notes.txt').exists()


def test_delete(fs, capsys):
    nf_setup(fs)
    cli.main(['add', 'One', 'First'])
    cli.main(['add', 'Two', 'Second'])
    capsys.readouterr()
    assert cli.main(['delete', '1']) == 0
    out, err = capsys.readouterr()
    assert out == 'Deleted note 1\n'
    assert Path('/notes/cwd/notes.txt').read_text().startswith('2|Two|Second|')
    assert cli.main(['delete', '1']) == 1
    out, err = capsys.readouterr()
    assert err == 'No note found with ID: 1\n'


def test_file_option(fs, capsys):
    nf_setup(fs)
    fs.create_dir('/elsewhere')
    assert cli.main(['-f', '/elsewhere/mine.txt', 'add', 'One', 'First']) == 0
    assert Path('/elsewhere/mine.txt').exists()
    assert not Path('/notes/cwd/notes.txt').exists()


def test_configured_path(fs, capsys):
    nf_setup(fs, "conf = NotesConf(path='/notes/configured.txt')")
    assert cli.main(['add', 'One', 'First']) == 0
    assert Path('/notes/configured.txt').exists()


def test_skipped_records(fs, capsys):
    nf_setup(fs)
    fs.create_file('/notes/cwd/notes.txt', contents='1|One|First|2001-02-03T04:05:06\nbroken\n\n'
                                                   '2|Two|Second|2001-02-03T04:05:06\n'
                                                   'x|Bad|Id|2001-02-03T04:05:06\n')
    assert cli.main(['list', '-j']) == 0
    out, err = capsys.readouterr()
    assert [n['id'] for n in json.loads(out)] == [1, 2]
    assert [line for line in err.splitlines() if line.startswith('Skipped')] == [
        'Skipped malformed record at line 2: Expected 4 fields but found 1',
        'Skipped malformed record at line 5: Invalid id: x',
    ]


def test_io_failure(fs, capsys):
    nf_setup(fs)
    fs.create_dir('/notes/cwd/notes.txt')
    assert cli.main(['list']) == 2
    out, err = capsys.readouterr()
    assert err.startswith('Error loading notes from /notes/cwd/notes.txt')


def test_shell(fs, capsys, monkeypatch):
    nf_setup(fs)
    feed(monkeypatch, '\n'.join([
        '1', 'Groceries', 'Milk, eggs, bread',
        '1', 'Reminder', 'Call the dentist',
        '1', '   ',
        '3', 'egg',
        '4', 'abc',
        '4', '2',
        '9',
        'x',
        '7',
    ]) + '\n')
    assert cli.main(['shell']) == 0
    out, err = capsys.readouterr()
    assert 'Note added successfully! (ID: 1)' in out
    assert 'Note added successfully! (ID: 2)' in out
    assert 'Title cannot be empty!' in out
    assert '=== Search Results ===' in out
    assert 'Please enter a valid ID number.' in out
    assert 'Note deleted successfully!' in out
    assert out.count('Invalid choice. Please try again.') == 2
    assert 'Notes saved to /notes/cwd/notes.txt successfully!' in out
    assert out.endswith('Goodbye!\n')
    text = Path('/notes/cwd/notes.txt').read_text()
    assert text.startswith('1|Groceries|Milk, eggs, bread|')
    assert text.count('\n') == 1


def test_shell_save_and_load(fs, capsys, monkeypatch):
    nf_setup(fs)
    feed(monkeypatch, '1\nOne\nFirst\n5\n1\nTwo\nSecond\n6\n2\n4\n5\n')
    assert cli.main(['shell']) == 0
    out, err = capsys.readouterr()
    assert 'Loaded 1 notes from /notes/cwd/notes.txt' in out
    assert 'No note found with ID: 5' in out
    # input ran out, which exits the shell and saves
    assert out.endswith('Goodbye!\n')
    notes = Path('/notes/cwd/notes.txt').read_text().splitlines()
    assert [n.split('|')[1] for n in notes] == ['One']


def test_shell_without_autosave(fs, capsys, monkeypatch):
    nf_setup(fs, 'conf = NotesConf(autosave=False)')
    feed(monkeypatch, '1\nOne\nFirst\n7\n')
    assert cli.main(['shell']) == 0
    assert not Path('/notes/cwd/notes.txt').exists()


def test_shell_empty_store(fs, capsys, monkeypatch):
    nf_setup(fs)
    feed(monkeypatch, '2\n3\n4\n7\n')
    assert cli.main(['shell']) == 0
    out, err = capsys.readouterr()
    assert 'No notes found.' in out
    assert 'No notes to search.' in out
    assert 'No notes to delete.' in out


def test_shell_autosave_failure(tmp_path, capsys, monkeypatch, mocker):
    mocker.patch('flatnotes.conf.NotesConf.user_config_path', return_value=str(tmp_path / 'missing.conf.py'))
    feed(monkeypatch, '1\nOne\nFirst\n7\n')
    mocker.patch('os.replace', side_effect=OSError(28, 'No space left on device'))
    assert cli.main(['-f', str(tmp_path / 'notes.txt'), 'shell']) == 2
    out, err = capsys.readouterr()
    assert 'Note added successfully! (ID: 1)' in out
    assert 'Goodbye!' not in out
    assert 'No space left on device' in err
    assert not (tmp_path / 'notes.txt').exists()
    assert not [p for p in tmp_path.iterdir() if p.name.endswith('.tmp')]
