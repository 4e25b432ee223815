"""
SQLite schema for the Vocaboo content catalog and learner state.

List-valued columns (genre, subtitle_languages, vocabulary_words) are stored
as JSON text and decoded by the data service.
"""

import sqlite3

SCHEMA = """
CREATE TABLE IF NOT EXISTS shows (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    type TEXT NOT NULL,
    genre TEXT,
    difficulty_level TEXT NOT NULL,
    duration_minutes INTEGER,
    seasons INTEGER,
    episodes INTEGER,
    rating REAL,
    release_year INTEGER,
    language TEXT,
    image_url TEXT,
    trailer_url TEXT,
    video_url TEXT,
    subtitle_languages TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS episodes (
    id TEXT PRIMARY KEY,
    show_id TEXT NOT NULL REFERENCES shows(id) ON DELETE CASCADE,
    season_number INTEGER NOT NULL DEFAULT 1,
    episode_number INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    duration_minutes INTEGER,
    video_url TEXT,
    subtitle_url TEXT,
    vocabulary_words TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS user_show_progress (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    show_id TEXT NOT NULL REFERENCES shows(id) ON DELETE CASCADE,
    episode_id TEXT REFERENCES episodes(id) ON DELETE SET NULL,
    progress_percentage INTEGER,
    completed INTEGER,
    last_watched_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, show_id)
);

CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT,
    description TEXT,
    content TEXT NOT NULL,
    difficulty_level TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chapters (
    id TEXT PRIMARY KEY,
    book_id TEXT NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    chapter_number INTEGER NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (book_id, chapter_number)
);

CREATE TABLE IF NOT EXISTS songs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    artist TEXT NOT NULL,
    album TEXT,
    genre TEXT,
    difficulty_level TEXT NOT NULL,
    duration_seconds INTEGER,
    release_year INTEGER,
    audio_url TEXT,
    image_url TEXT,
    lyrics TEXT,
    vocabulary_words TEXT,
    subtitle_languages TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS lyrics_lines (
    id TEXT PRIMARY KEY,
    song_id TEXT NOT NULL REFERENCES songs(id) ON DELETE CASCADE,
    line_number INTEGER NOT NULL,
    start_time_seconds REAL NOT NULL,
    end_time_seconds REAL NOT NULL,
    text TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    identifier TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    token TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS saved_words (
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    word TEXT NOT NULL,
    definition TEXT,
    created_at TEXT NOT NULL,
    PRIMARY KEY (user_id, word)
);

CREATE TABLE IF NOT EXISTS user_settings (
    user_id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    translation_language TEXT NOT NULL DEFAULT 'es',
    daily_goal INTEGER NOT NULL DEFAULT 10,
    sound_enabled INTEGER NOT NULL DEFAULT 1,
    notifications_enabled INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_episodes_show ON episodes(show_id, season_number, episode_number);
CREATE INDEX IF NOT EXISTS idx_lyrics_lines_song ON lyrics_lines(song_id, line_number);
CREATE INDEX IF NOT EXISTS idx_chapters_book ON chapters(book_id, chapter_number);
CREATE INDEX IF NOT EXISTS idx_users_token ON users(token);
"""

def create_all_tables(db_path):
    conn = sqlite3.connect(str(db_path))
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
