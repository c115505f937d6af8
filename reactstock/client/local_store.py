"""
File-backed key/value store with the browser localStorage contract.

Values are JSON documents kept in a single file. A missing or corrupted
file reads as an empty store.
"""
import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger('reactstock.client')

DEFAULT_STORE_PATH = Path.home() / '.reactstock' / 'local_store.json'


class LocalStorage:

    def __init__(self, path=None):
        self.path = Path(path or os.getenv('REACTSTOCK_LOCAL_STORE') or DEFAULT_STORE_PATH)

    def _load(self):
        try:
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local store {self.path}: {str(e)}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring local store {self.path}: top level is not an object")
            return {}
        return data

    def _save(self, data):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix='.local_store-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(data, fh, default=str)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get_item(self, key, default=None):
        return self._load().get(key, default)

    def set_item(self, key, value):
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self):
        return list(self._load().keys())

    def clear(self):
        self._save({})
