import logging
from urllib.parse import quote

import requests

from vocaboo.config import config
from vocaboo.services.ai_service import ai_service

logger = logging.getLogger(__name__)

LYRICS_OVH_URL = "https://api.lyrics.ovh/v1/{artist}/{title}"
LYRIST_URL = "https://lyrist.vercel.app/api/{title}/{artist}"

class LyricsService:
    def _lyrics_from(self, url, provider):
        try:
            response = requests.get(url, timeout=config.HTTP_TIMEOUT)
            logger.info("%s response status: %s", provider, response.status_code)
            if not response.ok:
                return None
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("%s request error: %s", provider, e)
            return None
        lyrics = data.get("lyrics") if isinstance(data, dict) else None
        if isinstance(lyrics, str) and lyrics.strip():
            logger.info("Got lyrics from %s, length: %d", provider, len(lyrics))
            return lyrics
        logger.info("%s returned empty or invalid lyrics", provider)
        return None

    def fetch_lyrics(self, artist, title):
        """lyrics.ovh, then Lyrist, then AI-generated lyrics."""
        artist_q = quote(artist, safe="")
        title_q = quote(title, safe="")

        lyrics = self._lyrics_from(LYRICS_OVH_URL.format(artist=artist_q, title=title_q), "lyrics.ovh")
        if lyrics:
            return {"lyrics": lyrics}

        lyrics = self._lyrics_from(LYRIST_URL.format(title=title_q, artist=artist_q), "Lyrist")
        if lyrics:
            return {"lyrics": lyrics}

        logger.info("Lyrics not found from APIs, trying AI generation...")
        lyrics = ai_service.generate_lyrics(title, artist)
        if lyrics:
            return {"lyrics": lyrics, "ai_generated": True}

        logger.info("Lyrics not found for %s - %s", artist, title)
        return {"lyrics": None, "error": "Lyrics not found"}

lyrics_service = LyricsService()
