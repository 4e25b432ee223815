"""
Tests for accounts and the learner API: saved words, settings, the daily
challenge, tap-to-learn tokenizing and lyric sync.
"""

from vocaboo.utils.challenge import DAILY_CHALLENGES


class TestAuth:
    def test_register_login_logout(self, client):
        creds = {"email": "Ana@Example.com", "password": "pw"}
        registered = client.post("/auth/register", json=creds).get_json()
        assert registered["token"]

        login = client.post("/auth/login", json={"email": "ana@example.com", "password": "pw"})
        assert login.status_code == 200
        token = login.get_json()["token"]
        assert login.get_json()["user_id"] == registered["user_id"]

        headers = {"Authorization": f"Bearer {token}"}
        assert client.get("/api/saved_words", headers=headers).status_code == 200
        assert client.post("/auth/logout", headers=headers).get_json() == {"ok": True}
        assert client.get("/api/saved_words", headers=headers).status_code == 401

    def test_register_errors(self, client):
        assert client.post("/auth/register", json={"email": "a@b.c"}).status_code == 400
        client.post("/auth/register", json={"email": "a@b.c", "password": "pw"})
        resp = client.post("/auth/register", json={"email": "A@B.C", "password": "other"})
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "exists"}

    def test_bad_login(self, client):
        client.post("/auth/register", json={"phone": "+15550100", "password": "pw"})
        assert client.post("/auth/login", json={"phone": "+15550100", "password": "nope"}).status_code == 401
        assert client.post("/auth/login", json={"email": "ghost@x.y", "password": "pw"}).get_json() == {"error": "invalid"}

    def test_unknown_token(self, client):
        resp = client.get("/api/settings", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401


class TestSavedWords:
    def test_save_list_remove(self, client, auth_headers):
        resp = client.post("/api/saved_words", headers=auth_headers, json={"word": "Verdant,", "definition": "green"})
        assert resp.get_json() == {"ok": True, "word": "verdant", "saved": True}
        client.post("/api/saved_words", headers=auth_headers, json={"word": "verdant"})

        words = client.get("/api/saved_words", headers=auth_headers).get_json()["words"]
        assert [(w["word"], w["definition"]) for w in words] == [("verdant", "green")]

        removed = client.delete("/api/saved_words/Verdant", headers=auth_headers)
        assert removed.get_json() == {"ok": True, "word": "verdant", "saved": False}
        assert client.delete("/api/saved_words/verdant", headers=auth_headers).status_code == 404

    def test_remove_by_body(self, client, auth_headers):
        client.post("/api/saved_words", headers=auth_headers, json={"word": "serendipity"})
        resp = client.delete("/api/saved_words", headers=auth_headers, json={"word": "Serendipity!"})
        assert resp.status_code == 200
        assert resp.get_json() == {"ok": True, "word": "serendipity", "saved": False}
        assert client.get("/api/saved_words", headers=auth_headers).get_json() == {"words": []}
        assert client.delete("/api/saved_words", headers=auth_headers, json={"word": "serendipity"}).status_code == 404
        assert client.delete("/api/saved_words", headers=auth_headers, json={}).status_code == 400

    def test_missing_word(self, client, auth_headers):
        resp = client.post("/api/saved_words", headers=auth_headers, json={"word": "..."})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "missing word"}

    def test_words_are_per_user(self, client, auth_headers):
        client.post("/api/saved_words", headers=auth_headers, json={"word": "castle"})
        other = client.post("/auth/register", json={"email": "other@example.com", "password": "pw"}).get_json()
        words = client.get("/api/saved_words", headers={"Authorization": f"Bearer {other['token']}"}).get_json()
        assert words == {"words": []}


class TestSettings:
    def test_defaults_then_update(self, client, auth_headers):
        assert client.get("/api/settings", headers=auth_headers).get_json() == {
            "translation_language": "es",
            "daily_goal": 10,
            "sound_enabled": True,
            "notifications_enabled": True,
        }
        updated = client.put("/api/settings", headers=auth_headers,
                             json={"translation_language": "FR", "daily_goal": "20", "sound_enabled": False})
        assert updated.get_json()["translation_language"] == "fr"
        stored = client.get("/api/settings", headers=auth_headers).get_json()
        assert stored["daily_goal"] == 20
        assert stored["sound_enabled"] is False
        assert stored["notifications_enabled"] is True

    def test_validation(self, client, auth_headers):
        assert client.put("/api/settings", headers=auth_headers, json={"daily_goal": 0}).status_code == 400
        assert client.put("/api/settings", headers=auth_headers, json={"daily_goal": "x"}).status_code == 400
        assert client.put("/api/settings", headers=auth_headers, json={"translation_language": " "}).status_code == 400


class TestDailyChallenge:
    def test_questions_hide_answers(self, client):
        questions = client.get("/api/daily_challenge").get_json()["questions"]
        assert len(questions) == 5
        assert "correct_answer" not in questions[0]

    def test_submit(self, client):
        answers = [q["correct_answer"] for q in DAILY_CHALLENGES]
        result = client.post("/api/daily_challenge/submit", json={"answers": answers}).get_json()
        assert (result["score"], result["total"], result["percentage"]) == (5, 5, 100)
        assert client.post("/api/daily_challenge/submit", json={"answers": "A"}).status_code == 400


class TestInteractiveText:
    def test_tokens_and_count(self, client):
        resp = client.post("/api/interactive_text", json={
            "content": "A verdant, verdant hill.",
            "words": ["verdant"],
            "saved_words": ["hill"],
        })
        body = resp.get_json()
        assert body["interactive_count"] == 2
        hill = [t for t in body["tokens"] if t.get("clean") == "hill"][0]
        assert hill["saved"] is True
        assert hill["interactive"] is False

    def test_content_required(self, client):
        assert client.post("/api/interactive_text", json={"words": []}).status_code == 400


class TestLyricsSync:
    LINES = [
        {"start_time_seconds": 0, "end_time_seconds": 4, "text": "one"},
        {"start_time_seconds": 5, "end_time_seconds": 9, "text": "two"},
    ]

    def test_inline_lines(self, client):
        body = client.post("/api/lyrics_sync", json={"lines": self.LINES, "current_time": 65}).get_json()
        assert body == {"index": -1, "time": "1:05"}
        body = client.post("/api/lyrics_sync", json={"lines": self.LINES, "current_time": 6}).get_json()
        assert body == {"index": 1, "time": "0:06"}

    def test_stored_song(self, client):
        song = client.post("/api/songs", json={"title": "Hello", "artist": "Adele"}).get_json()
        client.post(f"/api/songs/{song['id']}/lyrics_lines", json={"lines": self.LINES})
        body = client.post("/api/lyrics_sync", json={"song_id": song["id"], "current_time": 2}).get_json()
        assert body == {"index": 0, "time": "0:02"}

    def test_requires_lines(self, client):
        assert client.post("/api/lyrics_sync", json={"current_time": 2}).status_code == 400
