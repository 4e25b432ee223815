import base64
import functools
import logging

from flask import Blueprint, request, jsonify

from vocaboo.config import config
from vocaboo.exceptions import NotFoundError, PaymentRequiredError, RateLimitError, ValidationError, VocabooError
from vocaboo.services.ai_service import ai_service
from vocaboo.services.cache_service import cache_service
from vocaboo.services.content_service import content_service
from vocaboo.services.data_service import data_service
from vocaboo.services.lyrics_service import lyrics_service
from vocaboo.utils.helpers import _clean_word, _decode_base64_audio, _pair_translated_lines, _word_similarity

logger = logging.getLogger(__name__)

functions_bp = Blueprint('functions', __name__, url_prefix='/functions')

def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def edge_function(name, error_status=500, fallback=None):
    """Register a JSON-in/JSON-out function under /functions/<name>.

    Failures become {"error": message, **fallback} with error_status, except
    provider rate-limit and billing errors which keep their own status.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def view():
            try:
                result = fn(_body())
            except (RateLimitError, PaymentRequiredError) as e:
                return jsonify({"error": e.message}), e.status
            except VocabooError as e:
                logger.error("%s error: %s", name, e.message)
                message = e.message
            except Exception:
                logger.exception("%s failed", name)
                message = "Internal error"
            else:
                if isinstance(result, tuple):
                    return jsonify(result[0]), result[1]
                return jsonify(result)
            payload = {"error": message}
            payload.update(fallback() if callable(fallback) else (fallback or {}))
            return jsonify(payload), error_status

        functions_bp.add_url_rule(f'/{name}', endpoint=name.replace('-', '_'), view_func=view, methods=['POST'])
        return fn
    return decorator

@edge_function('fetch-lyrics', fallback={"lyrics": None})
def fetch_lyrics(data):
    artist = str(data.get("artist") or "").strip()
    title = str(data.get("title") or "").strip()
    logger.info("Fetching lyrics for: %s - %s", artist, title)
    if not artist or not title:
        raise ValidationError("Artist and title are required")
    return lyrics_service.fetch_lyrics(artist, title)

@edge_function('fetch-shows')
def fetch_shows(data):
    shows = content_service.fetch_shows(data.get("filters"))
    logger.info("Successfully fetched %d shows with videos", len(shows))
    return {"shows": shows}

@edge_function('fetch-episode-video', fallback=lambda: {"videoUrl": config.FALLBACK_EPISODE_VIDEO_URL})
def fetch_episode_video(data):
    return content_service.fetch_episode_video(
        data.get("showTitle") or "",
        data.get("seasonNumber") or 1,
        data.get("episodeNumber") or 1,
        data.get("episodeName"),
    )

@edge_function('fetch-songs', fallback={"songs": []})
def fetch_songs(data):
    search_term = str(data.get("searchTerm") or "")
    genre = str(data.get("genre") or "all")
    difficulty = str(data.get("difficulty") or "all")
    logger.info("Fetching songs with filters: term=%r genre=%s difficulty=%s", search_term, genre, difficulty)
    return {"songs": content_service.fetch_songs(search_term, genre, difficulty)}

@edge_function('fetch-song-audio', error_status=400)
def fetch_song_audio(data):
    title = str(data.get("title") or "").strip()
    artist = str(data.get("artist") or "").strip()
    if not title and not artist:
        raise ValidationError("Title or artist is required")
    return content_service.fetch_song_audio(title or None, artist or None)

@edge_function('translate-word', fallback={"translation": None})
def translate_word(data):
    word = _clean_word(str(data.get("word") or ""))
    target_language = str(data.get("targetLanguage") or "es").strip().lower()
    if not word:
        raise ValidationError("Word is required")
    cached = cache_service.get_translation(word, target_language)
    if cached:
        return {"word": word, "translation": cached, "targetLanguage": target_language, "cached": True}
    translation = ai_service.translate_word(word, target_language)
    cache_service.set_translation(word, target_language, translation)
    return {"word": word, "translation": translation, "targetLanguage": target_language, "cached": False}

@edge_function('translate-lyrics', fallback={"translation": None})
def translate_lyrics(data):
    lyrics = str(data.get("lyrics") or "")
    target_language = str(data.get("targetLanguage") or "es").strip().lower()
    if not lyrics.strip():
        raise ValidationError("Lyrics are required")
    translation = ai_service.translate_lyrics(lyrics, target_language)
    return {"translation": translation, "lines": _pair_translated_lines(lyrics, translation)}

@edge_function('explain-lyrics')
def explain_lyrics(data):
    lyrics = str(data.get("lyrics") or "")
    selected_text = str(data.get("selectedText") or "").strip() or None
    logger.info("Explaining lyrics: %s", "selected text" if selected_text else "full lyrics")
    if not lyrics.strip():
        raise ValidationError("Lyrics are required")
    return {"explanation": ai_service.explain_lyrics(lyrics, selected_text)}

@edge_function('pronunciation-check')
def pronunciation_check(data):
    audio = data.get("audio")
    original_text = str(data.get("originalText") or "")
    if not audio:
        raise ValidationError("No audio data provided")
    audio_bytes = _decode_base64_audio(str(audio))
    if not audio_bytes:
        raise ValidationError("Invalid audio data")

    logger.info("Processing pronunciation check...")
    transcribed = ai_service.transcribe_audio(audio_bytes)
    logger.info("Transcribed text: %s", transcribed)
    feedback = ai_service.pronunciation_feedback(original_text, transcribed)
    return {
        "transcribed": transcribed,
        "original": original_text,
        "feedback": feedback,
        "score": _word_similarity(transcribed.lower(), original_text.lower()),
    }

@edge_function('text-to-speech')
def text_to_speech(data):
    text = str(data.get("text") or "").strip()
    if not text:
        raise ValidationError("Text is required")
    audio = ai_service.text_to_speech(text, data.get("voice") or None)
    return {"audioContent": base64.b64encode(audio).decode("ascii")}

@edge_function('generate-chapters', error_status=400)
def generate_chapters(data):
    book_id = str(data.get("bookId") or "").strip()
    if not book_id:
        raise ValidationError("Book ID is required")
    book = data_service.get_book(book_id)
    if not book:
        raise NotFoundError("Book not found")
    logger.info("Book fetched: %s", book["title"])

    if data_service.chapters_exist(book_id):
        return {"message": "Chapters already exist for this book"}

    chapters = ai_service.split_into_chapters(book["title"], book["content"])
    inserted = data_service.insert_chapters(book_id, chapters)
    logger.info("Successfully created %d chapters", len(inserted))
    return {
        "success": True,
        "chapters": len(inserted),
        "message": f"Generated {len(inserted)} chapters for {book['title']}",
    }
