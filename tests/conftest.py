from datetime import datetime
import pytest
from flatnotes.models import Note


@pytest.fixture
def notes():
    return [
        Note(1, 'Groceries', 'Milk, eggs, bread', datetime(2012, 5, 2, 3, 4, 5)),
        Note(2, 'Reminder', 'Call the dentist', datetime(2012, 5, 3, 9, 0, 0)),
        Note(4, 'Pipes | and \\ slashes', 'First line\nsecond line', datetime(2013, 1, 1, 0, 0, 0)),
    ]
