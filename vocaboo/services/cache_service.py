import json
import os
import threading

from vocaboo.config import config

class CacheService:
    """Word translations, kept in memory and mirrored to a JSON store."""

    def __init__(self):
        self.translations = {}
        self._lock = threading.RLock()

    def _key(self, word, language):
        return f"{word}|{language}"

    def _load_json(self, path, default=None):
        with self._lock:
            try:
                if not os.path.exists(path):
                    return default if default is not None else {}
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, ValueError):
                return default if default is not None else {}

    def _save_json(self, path, data):
        with self._lock:
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)
            tmp_path = path + ".tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)

    def load_translations(self):
        data = self._load_json(config.TRANSLATIONS_STORE_PATH, default={})
        if isinstance(data, dict):
            return data
        return {}

    def get_translation(self, word, language):
        key = self._key(word, language)
        if key in self.translations:
            return self.translations[key]
        store = self.load_translations()
        cached = store.get(key)
        if isinstance(cached, str) and cached:
            self.translations[key] = cached
            return cached
        return None

    def set_translation(self, word, language, translation):
        key = self._key(word, language)
        # load-modify-save must not interleave with another writer
        with self._lock:
            self.translations[key] = translation
            store = self.load_translations()
            store[key] = translation
            self._save_json(config.TRANSLATIONS_STORE_PATH, store)

    def clear(self):
        self.translations.clear()

cache_service = CacheService()
