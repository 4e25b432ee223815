"""
Tests for the word translation cache and its JSON store.
"""

import json
import threading

from vocaboo.config import config
from vocaboo.services.cache_service import cache_service


def test_store_survives_memory_reset(app):
    cache_service.set_translation("castle", "es", "castillo")
    cache_service.clear()
    assert cache_service.get_translation("castle", "es") == "castillo"
    assert cache_service.get_translation("castle", "fr") is None


def test_concurrent_writers_keep_every_entry(app):
    threads, per_thread = 8, 25

    def writer(n):
        for i in range(per_thread):
            cache_service.set_translation(f"word{n}x{i}", "es", f"palabra{n}x{i}")

    workers = [threading.Thread(target=writer, args=(n,)) for n in range(threads)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    with open(config.TRANSLATIONS_STORE_PATH, encoding="utf-8") as f:
        store = json.load(f)
    assert len(store) == threads * per_thread
    assert store["word3x7|es"] == "palabra3x7"
