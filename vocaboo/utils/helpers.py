import base64
import binascii
import math
import re
import uuid
from datetime import datetime, timezone

from vocaboo.exceptions import ValidationError

LANGUAGE_NAMES = {
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
    "nl": "Dutch",
    "pl": "Polish",
    "vi": "Vietnamese",
}

_SENTENCE_END = re.compile(r"([.!?]+)")
_WHITESPACE = re.compile(r"(\s+)")
_NON_WORD = re.compile(r"[^\w]", re.ASCII)
_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)

def _create_token():
    return uuid.uuid4().hex

def _new_id():
    return str(uuid.uuid4())

def _clamp(v, lo, hi):
    return max(lo, min(hi, v))

def _round_half_up(x):
    return int(math.floor(x + 0.5))

def _to_number(value, field, cast=float):
    """Coerce a request value to a finite number or raise ValidationError."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    return cast(number)

def _normalize_words(words):
    if not isinstance(words, list):
        return []
    normalized = []
    seen = set()
    for w in words:
        if not isinstance(w, str):
            continue
        w2 = w.strip()
        if not w2:
            continue
        w2 = w2.lower()
        if w2 in seen:
            continue
        seen.add(w2)
        normalized.append(w2)
    return normalized

def _clean_word(word):
    return _NON_WORD.sub("", (word or "").lower())

def _vocabulary_lookup(words):
    """Accept either {clean_word: entry} or a plain list of words."""
    if isinstance(words, dict):
        return {_clean_word(k): v for k, v in words.items() if _clean_word(k)}
    if isinstance(words, (list, tuple, set)):
        return {_clean_word(w): None for w in words if isinstance(w, str) and _clean_word(w)}
    return {}

def _tokenize_interactive(content, words=None, saved_words=None):
    """Split story text into renderable tokens for tap-to-learn.

    Sentence punctuation runs become "punctuation" tokens, whitespace runs
    become "space" tokens and everything else a "word" token. A word is
    interactive when its cleaned form is in the vocabulary.
    """
    vocab = _vocabulary_lookup(words)
    saved = {_clean_word(w) for w in (saved_words or []) if isinstance(w, str)}
    tokens = []
    for sentence in _SENTENCE_END.split(content or ""):
        if not sentence:
            continue
        if _SENTENCE_END.fullmatch(sentence):
            tokens.append({"type": "punctuation", "text": sentence})
            continue
        for piece in _WHITESPACE.split(sentence):
            if not piece:
                continue
            if piece.isspace():
                tokens.append({"type": "space", "text": piece})
                continue
            clean = _clean_word(piece)
            interactive = bool(clean) and clean in vocab
            token = {
                "type": "word",
                "text": piece,
                "clean": clean,
                "interactive": interactive,
                "saved": clean in saved,
            }
            if interactive:
                token["display"] = _PUNCTUATION.sub("", piece)
                token["punctuation"] = "".join(_PUNCTUATION.findall(piece))
                if vocab[clean] is not None:
                    token["entry"] = vocab[clean]
            tokens.append(token)
    return tokens

def _current_line_index(lines, current_time):
    try:
        t = float(current_time)
    except (TypeError, ValueError):
        return -1
    for i, line in enumerate(lines or []):
        try:
            start = float(line.get("start_time_seconds"))
            end = float(line.get("end_time_seconds"))
        except (TypeError, ValueError, AttributeError):
            continue
        if start <= t <= end:
            return i
    return -1

def _format_time(seconds):
    try:
        seconds = float(seconds)
    except (TypeError, ValueError):
        return "0:00"
    if seconds != seconds or seconds < 0:  # NaN
        return "0:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"

def _split_lyrics_lines(lyrics):
    return [line for line in (lyrics or "").split("\n") if line.strip()]

def _pair_translated_lines(original, translated):
    src = _split_lyrics_lines(original)
    dst = _split_lyrics_lines(translated)
    pairs = []
    for i, line in enumerate(src):
        pairs.append({
            "original": line.strip(),
            "translated": dst[i].strip() if i < len(dst) else "",
        })
    return pairs

def _word_similarity(spoken, original):
    """Percentage of word positions where both strings agree."""
    words1 = re.split(r"\s+", spoken or "")
    words2 = re.split(r"\s+", original or "")
    max_len = max(len(words1), len(words2))
    matches = sum(1 for a, b in zip(words1, words2) if a == b)
    return _round_half_up(matches / max_len * 100)

def _difficulty_from_rating(vote_average):
    try:
        v = float(vote_average or 0)
    except (TypeError, ValueError):
        v = 0.0
    if v >= 8:
        return "advanced"
    if v >= 6:
        return "intermediate"
    return "beginner"

def _difficulty_from_genre(genre, track_name):
    g = (genre or "").lower()
    t = (track_name or "").lower()
    if "children" in g or "nursery" in t or "folk" in g or "traditional" in g:
        return "beginner"
    if "pop" in g or "country" in g or "easy" in g or "acoustic" in g:
        return "intermediate"
    return "advanced"

def _release_year(date_str):
    s = str(date_str or "").strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).year
    except ValueError:
        m = re.match(r"(\d{4})", s)
        return int(m.group(1)) if m else None

def _simplify_title(title):
    s = re.sub(r"[^a-z0-9 ]", " ", title or "", flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", s).strip()

def _episode_search_query(show_title, season_number, episode_number, episode_name=None):
    if episode_name:
        return (f"{show_title} S{str(season_number).zfill(2)}E{str(episode_number).zfill(2)} "
                f"{episode_name} full episode english subtitles")
    return f"{show_title} season {season_number} episode {episode_number} full episode english subtitles"

def _progress_percentage(current_time, duration):
    try:
        current_time = float(current_time or 0)
        duration = float(duration or 0)
    except (TypeError, ValueError):
        return 0
    if not (math.isfinite(current_time) and math.isfinite(duration)) or duration <= 0:
        return 0
    return _clamp(_round_half_up(current_time / duration * 100), 0, 100)

def _language_name(code):
    code = (code or "").strip().lower()
    return LANGUAGE_NAMES.get(code, code or "Spanish")

def _decode_base64_audio(data):
    s = (data or "").strip()
    if s.startswith("data:") and "," in s:
        s = s.split(",", 1)[1]
    try:
        return base64.b64decode(s, validate=False)
    except (binascii.Error, ValueError):
        return b""

def _utcnow_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
