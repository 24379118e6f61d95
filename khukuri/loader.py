"""Reading Khukuri source files from disk."""

import pathlib


SOURCE_ENCODING = 'utf-8'


def read_source(filename: str) -> str:
    """Return the full text of filename, resolved against the working directory.

    The name is used exactly as given: no extension is added and no search
    path is consulted. OSError propagates to the caller.
    """
    return pathlib.Path(filename).read_text(encoding=SOURCE_ENCODING)
