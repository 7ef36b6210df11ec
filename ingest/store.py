import logging
from config import INGEST_DB_PATH
from pathlib import Path
from tinydb import TinyDB

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The persistence backend rejected a write"""


class TinyDBPhotoStore:
    """Photo-location records persisted to a TinyDB JSON file"""

    def __init__(self, db_path: Path = INGEST_DB_PATH):
        self.db_path = db_path
        self._db = None

    @property
    def db(self) -> TinyDB:
        if self._db is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = TinyDB(self.db_path)
        return self._db

    def insert_many(self, table_name: str, rows: list[dict]) -> list[int]:
        """Insert all rows in one write, raising StorageError on backend failure"""
        try:
            ids = self.db.table(table_name).insert_multiple(rows)
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(str(e)) from e

        logger.info(f"Stored {len(ids)} rows in {table_name}")
        return ids

    def all(self, table_name: str) -> list[dict]:
        return self.db.table(table_name).all()

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None
