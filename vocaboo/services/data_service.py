import json
import os
import sqlite3
import threading
from contextlib import contextmanager

from vocaboo.config import config
from vocaboo.exceptions import ConflictError, ValidationError
from vocaboo.services.schema import create_all_tables
from vocaboo.utils.helpers import _new_id, _normalize_words, _to_number, _utcnow_iso

JSON_FIELDS = ("genre", "subtitle_languages", "vocabulary_words")
BOOL_FIELDS = ("completed", "sound_enabled", "notifications_enabled")

DEFAULT_SETTINGS = {
    "translation_language": "es",
    "daily_goal": 10,
    "sound_enabled": True,
    "notifications_enabled": True,
}

class DataService:
    def __init__(self):
        self._initialized = set()
        self._global_lock = threading.Lock()

    def initialize(self, db_path=None):
        path = db_path or config.DATABASE_PATH
        with self._global_lock:
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)
            create_all_tables(path)
            self._initialized.add(path)

    @contextmanager
    def _connection(self):
        path = config.DATABASE_PATH
        if path not in self._initialized:
            self.initialize(path)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _row(self, row):
        if row is None:
            return None
        data = dict(row)
        for key in JSON_FIELDS:
            if key in data:
                try:
                    data[key] = json.loads(data[key]) if data[key] else []
                except (TypeError, ValueError):
                    data[key] = []
        for key in BOOL_FIELDS:
            if key in data and data[key] is not None:
                data[key] = bool(data[key])
        return data

    def _rows(self, rows):
        return [self._row(r) for r in rows]

    def _insert(self, conn, table, record):
        cols = list(record.keys())
        values = []
        for c in cols:
            v = record[c]
            if c in JSON_FIELDS:
                v = json.dumps(v if isinstance(v, list) else [], ensure_ascii=False)
            values.append(v)
        try:
            conn.execute(
                f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
                values,
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"{table} record conflicts with existing data: {e}")

    def _require(self, data, *fields):
        for f in fields:
            if data.get(f) in (None, ""):
                raise ValidationError(f"{f} is required")

    # Shows
    def list_shows(self, show_type=None, difficulty=None, search=None):
        with self._connection() as conn:
            rows = self._rows(conn.execute("SELECT * FROM shows ORDER BY title").fetchall())
        if show_type and show_type != "all":
            rows = [r for r in rows if r.get("type") == show_type]
        if difficulty and difficulty != "all":
            rows = [r for r in rows if r.get("difficulty_level") == difficulty]
        if search:
            term = search.lower()
            rows = [r for r in rows if term in (r.get("title") or "").lower()
                    or term in (r.get("description") or "").lower()]
        return rows

    def get_show(self, show_id):
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM shows WHERE id = ?", (show_id,)).fetchone())

    def insert_show(self, data):
        self._require(data, "title", "type")
        now = _utcnow_iso()
        record = {
            "id": data.get("id") or _new_id(),
            "title": data["title"],
            "description": data.get("description"),
            "type": data["type"],
            "genre": data.get("genre") or [],
            "difficulty_level": data.get("difficulty_level") or "beginner",
            "duration_minutes": data.get("duration_minutes"),
            "seasons": data.get("seasons"),
            "episodes": data.get("episodes"),
            "rating": data.get("rating"),
            "release_year": data.get("release_year"),
            "language": data.get("language") or "en",
            "image_url": data.get("image_url"),
            "trailer_url": data.get("trailer_url"),
            "video_url": data.get("video_url"),
            "subtitle_languages": data.get("subtitle_languages") or ["en"],
            "created_at": now,
            "updated_at": now,
        }
        with self._connection() as conn:
            self._insert(conn, "shows", record)
        return self.get_show(record["id"])

    # Episodes
    def list_episodes(self, show_id):
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM episodes WHERE show_id = ? ORDER BY season_number, episode_number",
                (show_id,),
            ).fetchall()
        return self._rows(rows)

    def get_episode(self, episode_id):
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM episodes WHERE id = ?", (episode_id,)).fetchone())

    def insert_episode(self, show_id, data):
        self._require(data, "title", "episode_number")
        now = _utcnow_iso()
        record = {
            "id": data.get("id") or _new_id(),
            "show_id": show_id,
            "season_number": _to_number(data.get("season_number") or 1, "season_number", int),
            "episode_number": _to_number(data["episode_number"], "episode_number", int),
            "title": data["title"],
            "description": data.get("description"),
            "duration_minutes": data.get("duration_minutes"),
            "video_url": data.get("video_url"),
            "subtitle_url": data.get("subtitle_url"),
            "vocabulary_words": _normalize_words(data.get("vocabulary_words")),
            "created_at": now,
            "updated_at": now,
        }
        with self._connection() as conn:
            self._insert(conn, "episodes", record)
            row = conn.execute("SELECT * FROM episodes WHERE id = ?", (record["id"],)).fetchone()
        return self._row(row)

    # Progress
    def upsert_progress(self, user_id, show_id, progress_percentage, completed, episode_id=None):
        now = _utcnow_iso()
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO user_show_progress
                    (id, user_id, show_id, episode_id, progress_percentage, completed,
                     last_watched_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, show_id) DO UPDATE SET
                    episode_id = COALESCE(excluded.episode_id, user_show_progress.episode_id),
                    progress_percentage = excluded.progress_percentage,
                    completed = excluded.completed,
                    last_watched_at = excluded.last_watched_at,
                    updated_at = excluded.updated_at
                """,
                (_new_id(), user_id, show_id, episode_id, int(progress_percentage),
                 1 if completed else 0, now, now, now),
            )
            row = conn.execute(
                "SELECT * FROM user_show_progress WHERE user_id = ? AND show_id = ?",
                (user_id, show_id),
            ).fetchone()
        return self._row(row)

    def list_progress(self, user_id):
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM user_show_progress WHERE user_id = ? ORDER BY last_watched_at DESC",
                (user_id,),
            ).fetchall()
        return self._rows(rows)

    # Books & Chapters
    def list_books(self):
        with self._connection() as conn:
            return self._rows(conn.execute(
                "SELECT id, title, author, description, difficulty_level, created_at FROM books ORDER BY title"
            ).fetchall())

    def get_book(self, book_id):
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone())

    def insert_book(self, data):
        self._require(data, "title", "content")
        record = {
            "id": data.get("id") or _new_id(),
            "title": data["title"],
            "author": data.get("author"),
            "description": data.get("description"),
            "content": data["content"],
            "difficulty_level": data.get("difficulty_level"),
            "created_at": _utcnow_iso(),
        }
        with self._connection() as conn:
            self._insert(conn, "books", record)
        return self.get_book(record["id"])

    def chapters_exist(self, book_id):
        with self._connection() as conn:
            row = conn.execute("SELECT id FROM chapters WHERE book_id = ? LIMIT 1", (book_id,)).fetchone()
        return row is not None

    def insert_chapters(self, book_id, chapters):
        now = _utcnow_iso()
        with self._connection() as conn:
            for index, chapter in enumerate(chapters):
                self._insert(conn, "chapters", {
                    "id": _new_id(),
                    "book_id": book_id,
                    "chapter_number": index + 1,
                    "title": str(chapter.get("title") or f"Chapter {index + 1}"),
                    "content": str(chapter.get("content") or ""),
                    "created_at": now,
                })
        return self.list_chapters(book_id)

    def list_chapters(self, book_id):
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM chapters WHERE book_id = ? ORDER BY chapter_number",
                (book_id,),
            ).fetchall()
        return self._rows(rows)

    # Songs & Lyrics
    def list_songs(self, search=None, genre=None, difficulty=None):
        with self._connection() as conn:
            rows = self._rows(conn.execute("SELECT * FROM songs ORDER BY title ASC").fetchall())
        if search:
            term = search.lower()
            rows = [s for s in rows if term in (s.get("title") or "").lower()
                    or term in (s.get("artist") or "").lower()
                    or any(term in g.lower() for g in s.get("genre") or [])]
        if genre and genre != "all":
            rows = [s for s in rows if genre in (s.get("genre") or [])]
        if difficulty and difficulty != "all":
            rows = [s for s in rows if s.get("difficulty_level") == difficulty]
        return rows

    def get_song(self, song_id):
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM songs WHERE id = ?", (song_id,)).fetchone())

    def insert_song(self, data):
        self._require(data, "title", "artist")
        record = {
            "id": data.get("id") or _new_id(),
            "title": data["title"],
            "artist": data["artist"],
            "album": data.get("album"),
            "genre": data.get("genre") or [],
            "difficulty_level": data.get("difficulty_level") or "intermediate",
            "duration_seconds": data.get("duration_seconds"),
            "release_year": data.get("release_year"),
            "audio_url": data.get("audio_url"),
            "image_url": data.get("image_url"),
            "lyrics": data.get("lyrics"),
            "vocabulary_words": _normalize_words(data.get("vocabulary_words")),
            "subtitle_languages": data.get("subtitle_languages") or ["en"],
            "created_at": _utcnow_iso(),
        }
        with self._connection() as conn:
            self._insert(conn, "songs", record)
        return self.get_song(record["id"])

    def list_lyrics_lines(self, song_id):
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM lyrics_lines WHERE song_id = ? ORDER BY line_number",
                (song_id,),
            ).fetchall()
        return self._rows(rows)

    def insert_lyrics_lines(self, song_id, lines):
        with self._connection() as conn:
            for i, line in enumerate(lines):
                self._require(line, "start_time_seconds", "end_time_seconds", "text")
                self._insert(conn, "lyrics_lines", {
                    "id": _new_id(),
                    "song_id": song_id,
                    "line_number": _to_number(line.get("line_number") or i + 1, "line_number", int),
                    "start_time_seconds": _to_number(line["start_time_seconds"], "start_time_seconds"),
                    "end_time_seconds": _to_number(line["end_time_seconds"], "end_time_seconds"),
                    "text": str(line["text"]),
                })
        return self.list_lyrics_lines(song_id)

    # Users
    def create_user(self, identifier, password_hash, token):
        record = {
            "id": _new_id(),
            "identifier": identifier,
            "password_hash": password_hash,
            "token": token,
            "created_at": _utcnow_iso(),
        }
        try:
            with self._connection() as conn:
                self._insert(conn, "users", record)
        except ConflictError:
            return None
        return record

    def get_user_by_identifier(self, identifier):
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM users WHERE identifier = ?", (identifier,)).fetchone())

    def get_user_by_token(self, token):
        if not token:
            return None
        with self._connection() as conn:
            return self._row(conn.execute("SELECT * FROM users WHERE token = ?", (token,)).fetchone())

    def set_user_token(self, user_id, token):
        with self._connection() as conn:
            conn.execute("UPDATE users SET token = ? WHERE id = ?", (token, user_id))

    # Saved Words
    def list_saved_words(self, user_id):
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT word, definition, created_at FROM saved_words WHERE user_id = ? ORDER BY created_at DESC, word",
                (user_id,),
            ).fetchall()
        return self._rows(rows)

    def save_word(self, user_id, word, definition=None):
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO saved_words (user_id, word, definition, created_at) VALUES (?, ?, ?, ?)
                ON CONFLICT (user_id, word) DO UPDATE SET
                    definition = COALESCE(excluded.definition, saved_words.definition)
                """,
                (user_id, word, definition, _utcnow_iso()),
            )

    def remove_saved_word(self, user_id, word):
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM saved_words WHERE user_id = ? AND word = ?", (user_id, word))
            return cur.rowcount > 0

    # Settings
    def load_settings(self, user_id):
        with self._connection() as conn:
            row = self._row(conn.execute("SELECT * FROM user_settings WHERE user_id = ?", (user_id,)).fetchone())
        settings = dict(DEFAULT_SETTINGS)
        if row:
            row.pop("user_id", None)
            settings.update(row)
        return settings

    def save_settings(self, user_id, updates):
        settings = self.load_settings(user_id)
        for k in DEFAULT_SETTINGS:
            if k in updates:
                settings[k] = updates[k]
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO user_settings
                    (user_id, translation_language, daily_goal, sound_enabled, notifications_enabled)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id) DO UPDATE SET
                    translation_language = excluded.translation_language,
                    daily_goal = excluded.daily_goal,
                    sound_enabled = excluded.sound_enabled,
                    notifications_enabled = excluded.notifications_enabled
                """,
                (user_id, str(settings["translation_language"]), int(settings["daily_goal"]),
                 1 if settings["sound_enabled"] else 0, 1 if settings["notifications_enabled"] else 0),
            )
        return settings

data_service = DataService()
