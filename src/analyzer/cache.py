"""Lint result cache for repeat runs.

Cache Strategy:
- Store the serialised diagnostics per file
- Use the linter version plus file mtime + size as cache key
- If file unchanged, skip parsing and analysis entirely

Cache Format: SQLite database for performance and simplicity
Location: .mutation_guard_cache/ in project root
"""

import sqlite3
import json
from pathlib import Path
from typing import Dict, List, Optional

from src.config import __version__

DEFAULT_CACHE_DIR = '.mutation_guard_cache'


class LintCache:
    """Per-file cache of lint diagnostics."""

    def __init__(self, project_root: Path, cache_dir_name: str = DEFAULT_CACHE_DIR):
        """Initialize cache database.

        Args:
            project_root: Root directory of the project being linted
            cache_dir_name: Name of the cache directory inside project_root
        """
        self.project_root = Path(project_root)
        self.cache_dir = self.project_root / cache_dir_name
        self.cache_file = self.cache_dir / 'lint.db'

        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(str(self.cache_file))
        self._init_database()

    def _init_database(self):
        """Create cache tables if they don't exist."""
        cursor = self.conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_diagnostics (
                file_path TEXT PRIMARY KEY,
                cache_key TEXT NOT NULL,
                diagnostics TEXT NOT NULL
            )
        ''')

        self.conn.commit()

    @staticmethod
    def _get_cache_key(file_path: Path) -> Optional[str]:
        """Generate cache key from the linter version, file mtime and size.

        Returns:
            "version:mtime:size" string, or None if the file cannot be stat'ed
        """
        try:
            stat = Path(file_path).stat()
        except OSError:
            return None
        return f"{__version__}:{stat.st_mtime}:{stat.st_size}"

    def get_diagnostics(self, file_path: Path) -> Optional[List[Dict]]:
        """Get cached diagnostics for a file.

        Returns:
            List of diagnostic dicts, or None if not cached or stale
        """
        cache_key = self._get_cache_key(file_path)
        if cache_key is None:
            return None

        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT cache_key, diagnostics FROM file_diagnostics
            WHERE file_path = ?
        ''', (str(file_path),))

        result = cursor.fetchone()
        if not result or result[0] != cache_key:
            return None

        try:
            return json.loads(result[1])
        except json.JSONDecodeError:
            return None

    def set_diagnostics(self, file_path: Path, diagnostics: List[Dict]):
        """Cache diagnostics for a file under its current version:mtime:size key."""
        cache_key = self._get_cache_key(file_path)
        if cache_key is None:
            return

        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT OR REPLACE INTO file_diagnostics (file_path, cache_key, diagnostics)
            VALUES (?, ?, ?)
        ''', (str(file_path), cache_key, json.dumps(diagnostics)))
        self.conn.commit()

    def clear(self):
        """Drop every cached entry."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM file_diagnostics')
        self.conn.commit()

    def stats(self) -> Dict[str, int]:
        """Get cache statistics.

        Returns:
            Dict with cached file count and how many of them carry diagnostics
        """
        cursor = self.conn.cursor()
        cursor.execute('SELECT COUNT(*) FROM file_diagnostics')
        total = cursor.fetchone()[0]
        cursor.execute("SELECT COUNT(*) FROM file_diagnostics WHERE diagnostics != '[]'")
        with_findings = cursor.fetchone()[0]
        return {
            'cached_files': total,
            'files_with_diagnostics': with_findings,
        }

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
