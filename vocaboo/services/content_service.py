"""
HTTP clients for the third-party content catalogs.

TMDB supplies popular movies and TV shows, Pexels a preview clip per show,
YouTube a captioned episode video, iTunes song search results and Jamendo a
full-length playable track. Responses are reshaped into the records the
Vocaboo UI consumes; nothing is persisted here.
"""

import logging
import uuid
import concurrent.futures

import requests

from vocaboo.config import config
from vocaboo.exceptions import ConfigurationError, ProviderError
from vocaboo.utils.helpers import (
    _difficulty_from_genre,
    _difficulty_from_rating,
    _episode_search_query,
    _release_year,
    _round_half_up,
    _simplify_title,
)

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
PEXELS_SEARCH_URL = "https://api.pexels.com/videos/search"
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
ITUNES_SEARCH_URL = "https://itunes.apple.com/search"
JAMENDO_TRACKS_URL = "https://api.jamendo.com/v3.0/tracks/"

SHOWS_PER_TYPE = 5
DEFAULT_SONG_QUERY = "popular english songs"
INSTRUMENTAL_QUERY = "instrumental background"

class ContentService:
    def __init__(self):
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=5)

    def _get(self, url, params=None, headers=None):
        try:
            return requests.get(url, params=params, headers=headers, timeout=config.HTTP_TIMEOUT)
        except requests.exceptions.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise ProviderError(f"Request to {url} failed")

    # Shows
    def fetch_shows(self, filters=None):
        filters = filters if isinstance(filters, dict) else {}
        if not config.TMDB_API_KEY:
            raise ConfigurationError("TMDB_API_KEY is not configured")
        if not config.PEXELS_API_KEY:
            raise ConfigurationError("PEXELS_API_KEY is not configured")

        show_type = filters.get("type")
        shows = []
        if not show_type or show_type in ("all", "movie"):
            shows.extend(self._popular("movie"))
        if not show_type or show_type in ("all", "tv_show"):
            shows.extend(self._popular("tv"))

        search = str(filters.get("search") or "").lower()
        if search:
            shows = [s for s in shows if search in (s["title"] or "").lower()
                     or search in (s["description"] or "").lower()]

        difficulty = filters.get("difficulty")
        if difficulty and difficulty != "all":
            shows = [s for s in shows if s["difficulty_level"] == difficulty]

        logger.info("Fetching videos for %d shows...", len(shows))
        video_urls = list(self.executor.map(self.fetch_show_video, [s["title"] for s in shows]))
        for show, video_url in zip(shows, video_urls):
            show["video_url"] = video_url
        return shows

    def _popular(self, media):
        response = self._get(
            f"{TMDB_BASE_URL}/{media}/popular",
            params={"api_key": config.TMDB_API_KEY, "language": "en-US", "page": 1},
        )
        if not response.ok:
            logger.warning("TMDB %s/popular returned %s", media, response.status_code)
            return []
        results = (response.json() or {}).get("results") or []
        mapper = self._movie_record if media == "movie" else self._tv_record
        return [mapper(item) for item in results[:SHOWS_PER_TYPE]]

    def _movie_record(self, movie):
        return {
            "id": str(uuid.uuid4()),
            "title": movie.get("title") or "",
            "description": movie.get("overview") or "",
            "type": "movie",
            "genre": ["Drama", "Action"],
            "difficulty_level": _difficulty_from_rating(movie.get("vote_average")),
            "duration_minutes": 120,
            "seasons": 1,
            "episodes": 1,
            "rating": movie.get("vote_average"),
            "release_year": _release_year(movie.get("release_date")),
            "subtitle_languages": ["en", "es", "fr"],
        }

    def _tv_record(self, show):
        return {
            "id": str(uuid.uuid4()),
            "title": show.get("name") or "",
            "description": show.get("overview") or "",
            "type": "tv_show",
            "genre": ["Drama", "Comedy"],
            "difficulty_level": _difficulty_from_rating(show.get("vote_average")),
            "duration_minutes": 45,
            "seasons": show.get("number_of_seasons") or 1,
            "episodes": show.get("number_of_episodes") or 10,
            "rating": show.get("vote_average"),
            "release_year": _release_year(show.get("first_air_date")),
            "subtitle_languages": ["en", "es", "fr"],
        }

    def fetch_show_video(self, title):
        """Pexels preview clip for a show; never raises."""
        try:
            response = requests.get(
                PEXELS_SEARCH_URL,
                params={"query": title, "per_page": 1},
                headers={"Authorization": config.PEXELS_API_KEY},
                timeout=config.HTTP_TIMEOUT,
            )
            if not response.ok:
                logger.error('Pexels API error for "%s": %s', title, response.status_code)
                return config.FALLBACK_SHOW_VIDEO_URL
            videos = (response.json() or {}).get("videos") or []
            files = (videos[0].get("video_files") or []) if videos else []
            link = files[0].get("link") if files else None
            if link:
                logger.info('Found video for "%s": %s', title, link)
                return link
        except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
            logger.error('Error fetching video for "%s": %s', title, e)
        return config.FALLBACK_SHOW_VIDEO_URL

    # Episodes
    def fetch_episode_video(self, show_title, season_number, episode_number, episode_name=None):
        if not config.YOUTUBE_API_KEY:
            raise ConfigurationError("YOUTUBE_API_KEY is not configured")
        query = _episode_search_query(show_title, season_number, episode_number, episode_name)
        logger.info("Searching for: %s", query)
        response = self._get(YOUTUBE_SEARCH_URL, params={
            "part": "snippet",
            "q": query,
            "type": "video",
            "videoCaption": "closedCaption",
            "maxResults": 1,
            "key": config.YOUTUBE_API_KEY,
        })
        if not response.ok:
            logger.error("YouTube API error: %s", response.status_code)
            return {"error": "Failed to fetch video", "videoUrl": config.FALLBACK_EPISODE_VIDEO_URL}
        items = (response.json() or {}).get("items") or []
        video_id = ((items[0].get("id") or {}).get("videoId")) if items else None
        if video_id:
            video_url = f"https://www.youtube.com/watch?v={video_id}"
            logger.info("Found video: %s", video_url)
            return {"videoUrl": video_url}
        return {"videoUrl": config.FALLBACK_EPISODE_VIDEO_URL}

    # Songs
    def fetch_songs(self, search_term="", genre="all", difficulty="all"):
        query = search_term or DEFAULT_SONG_QUERY
        response = self._get(ITUNES_SEARCH_URL, params={
            "term": query,
            "media": "music",
            "entity": "song",
            "country": "US",
            "limit": 50,
            "lang": "en",
        })
        if not response.ok:
            raise ProviderError(f"iTunes search failed with status {response.status_code}")
        try:
            results = (response.json() or {}).get("results") or []
        except ValueError:
            raise ProviderError("iTunes returned invalid JSON")

        songs = [self._song_record(track) for track in results if isinstance(track, dict)]

        genre = genre or "all"
        if genre != "all":
            g = genre.lower()
            songs = [s for s in songs if any(g in x.lower() for x in s["genre"])]
        if difficulty and difficulty != "all":
            songs = [s for s in songs if s["difficulty_level"] == difficulty]

        unique = {}
        for song in songs:
            key = f"{(song['title'] or '').lower()}-{(song['artist'] or '').lower()}"
            if key not in unique:
                unique[key] = song
        logger.info("Returning %d songs", len(unique))
        return list(unique.values())

    def _song_record(self, track):
        primary_genre = track.get("primaryGenreName") or "Pop"
        millis = track.get("trackTimeMillis")
        artwork = track.get("artworkUrl100")
        return {
            "id": f"itunes-{track.get('trackId')}",
            "title": track.get("trackName") or "",
            "artist": track.get("artistName") or "",
            "album": track.get("collectionName"),
            "genre": [primary_genre],
            "difficulty_level": _difficulty_from_genre(primary_genre, track.get("trackName")),
            "duration_seconds": _round_half_up(millis / 1000) if isinstance(millis, (int, float)) else None,
            "release_year": _release_year(track.get("releaseDate")),
            "audio_url": track.get("previewUrl"),
            "image_url": artwork.replace("100x100", "300x300") if artwork else None,
            "subtitle_languages": ["en"],
            "vocabulary_words": [],
        }

    def _search_jamendo(self, query):
        try:
            response = requests.get(JAMENDO_TRACKS_URL, params={
                "client_id": config.JAMENDO_CLIENT_ID,
                "format": "json",
                "limit": 1,
                "audioformat": "mp32",
                "search": query,
                "order": "popularity_total_desc",
            }, timeout=config.HTTP_TIMEOUT)
            if not response.ok:
                return None
            results = (response.json() or {}).get("results") or []
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Jamendo search for %r failed: %s", query, e)
            return None
        return results[0] if results else None

    def fetch_song_audio(self, title=None, artist=None):
        matched = True
        track = None

        if title and artist:
            logger.info("Searching for song: %s by %s", title, artist)
            track = self._search_jamendo(f"{title} {artist}")

        if not track and title:
            matched = False
            logger.info("Fallback search by title: %s", title)
            track = self._search_jamendo(title)

        if not track and title:
            matched = False
            simplified = _simplify_title(title)
            if simplified and simplified != title:
                logger.info("Fallback search by simplified title: %s", simplified)
                track = self._search_jamendo(simplified)

        if not track and artist:
            matched = False
            logger.info("Fallback search by artist: %s", artist)
            track = self._search_jamendo(artist)

        if not track:
            matched = False
            logger.info("No exact/partial match, using popular instrumental fallback")
            track = self._search_jamendo(INSTRUMENTAL_QUERY)

        if not track:
            logger.info("No track found after all attempts")
            return {"audio_url": None}

        return {
            "audio_url": track.get("audio"),
            "title": track.get("name"),
            "artist": track.get("artist_name"),
            "duration": track.get("duration"),
            "image": track.get("image"),
            "matched": matched,
        }

content_service = ContentService()
