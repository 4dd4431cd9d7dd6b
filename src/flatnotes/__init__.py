"""Keeps short text notes in a single flat text file.

If you installed via ``pip``, run ``flatnotes -h`` to get help.

To use the Python API, look at :class:`flatnotes.api.Notebook`
"""
