"""Filesystem capability handed to the converters.

Converters only ever read text, write text and list directories; keeping
that behind one small object lets tests run against an in-memory tree.
"""

import os
import shutil


class LocalFileSystem:
    """Reads and writes real files on disk."""

    def read_text(self, path: str) -> str:
        # utf-8-sig drops the BOM spreadsheet tools put in front of CSV exports
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            return f.read()

    def write_text(self, path: str, text: str):
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)

    def list_dir(self, path: str) -> list:
        return sorted(os.listdir(path))

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def remove_tree(self, path: str):
        if os.path.isdir(path):
            shutil.rmtree(path)
