import os
import sqlite3


class Database:

    @staticmethod
    def connect(path):
        return sqlite3.connect(path)

    @staticmethod
    def ensure_parent_dir(path):
        """
        Create the directory holding a sqlite file if it is missing.
        In-memory databases and bare filenames are left alone.
        """
        directory = os.path.dirname(path)
        if directory and path != ':memory:':
            os.makedirs(directory, exist_ok=True)
        return path
