# Put the repo root on sys.path so tests can import `vtol_polyglot` without an editable install
import os
import sys

import pytest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


class MemoryFileSystem:
    """In-memory stand-in for LocalFileSystem."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.dirs = set()

    def read_text(self, path):
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write_text(self, path, text):
        self.files[path] = text

    def list_dir(self, path):
        prefix = path.rstrip("/") + "/"
        names = {p[len(prefix):].split("/")[0] for p in self.files if p.startswith(prefix)}
        return sorted(names)

    def exists(self, path):
        return path in self.files or self.is_dir(path)

    def is_dir(self, path):
        prefix = path.rstrip("/") + "/"
        return path in self.dirs or any(p.startswith(prefix) for p in self.files)

    def remove_tree(self, path):
        prefix = path.rstrip("/") + "/"
        self.files = {p: t for p, t in self.files.items() if not p.startswith(prefix)}
        self.dirs.discard(path)


@pytest.fixture
def memfs():
    return MemoryFileSystem()


@pytest.fixture
def category_map():
    from vtol_polyglot.category_map import CategoryMap
    return CategoryMap([("ui", "interface"), ("weapons", "weapons"), ("vehicles", "vehicles")])
