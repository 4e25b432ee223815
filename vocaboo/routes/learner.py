from flask import Blueprint, request, jsonify, g

from vocaboo.exceptions import NotFoundError, ValidationError
from vocaboo.routes.auth import login_required
from vocaboo.services.data_service import data_service
from vocaboo.utils.challenge import _public_questions, _score_answers
from vocaboo.utils.helpers import _clean_word, _current_line_index, _format_time, _tokenize_interactive

learner_bp = Blueprint('learner', __name__, url_prefix='/api')

@learner_bp.route('/interactive_text', methods=['POST'])
def interactive_text():
    data = request.get_json(silent=True) or {}
    content = data.get("content")
    if not isinstance(content, str):
        raise ValidationError("content is required")
    tokens = _tokenize_interactive(content, data.get("words"), data.get("saved_words"))
    return jsonify({
        "tokens": tokens,
        "interactive_count": sum(1 for t in tokens if t.get("interactive")),
    })

@learner_bp.route('/lyrics_sync', methods=['POST'])
def lyrics_sync():
    data = request.get_json(silent=True) or {}
    lines = data.get("lines")
    if lines is None and data.get("song_id"):
        lines = data_service.list_lyrics_lines(str(data["song_id"]))
    if not isinstance(lines, list):
        raise ValidationError("lines or song_id is required")
    current_time = data.get("current_time", 0)
    return jsonify({
        "index": _current_line_index(lines, current_time),
        "time": _format_time(current_time),
    })

@learner_bp.route('/saved_words')
@login_required
def saved_words():
    return jsonify({"words": data_service.list_saved_words(g.user["id"])})

@learner_bp.route('/saved_words', methods=['POST'])
@login_required
def save_word():
    data = request.get_json(silent=True) or {}
    word = _clean_word(str(data.get("word") or ""))
    if not word:
        raise ValidationError("missing word")
    data_service.save_word(g.user["id"], word, data.get("definition"))
    return jsonify({"ok": True, "word": word, "saved": True})

@learner_bp.route('/saved_words', methods=['DELETE'])
@learner_bp.route('/saved_words/<word>', methods=['DELETE'])
@login_required
def remove_word(word=None):
    if word is None:
        data = request.get_json(silent=True)
        word = str(data.get("word") or "") if isinstance(data, dict) else ""
    word = _clean_word(word)
    if not word:
        raise ValidationError("missing word")
    if not data_service.remove_saved_word(g.user["id"], word):
        raise NotFoundError("not_found")
    return jsonify({"ok": True, "word": word, "saved": False})

@learner_bp.route('/settings')
@login_required
def get_settings():
    return jsonify(data_service.load_settings(g.user["id"]))

@learner_bp.route('/settings', methods=['PUT', 'POST'])
@login_required
def update_settings():
    data = request.get_json(silent=True) or {}
    updates = {}
    if "translation_language" in data:
        lang = str(data["translation_language"] or "").strip().lower()
        if not lang:
            raise ValidationError("translation_language must not be empty")
        updates["translation_language"] = lang
    if "daily_goal" in data:
        try:
            goal = int(data["daily_goal"])
        except (TypeError, ValueError):
            raise ValidationError("daily_goal must be a number")
        if goal <= 0:
            raise ValidationError("daily_goal must be positive")
        updates["daily_goal"] = goal
    for k in ("sound_enabled", "notifications_enabled"):
        if k in data:
            updates[k] = bool(data[k])
    return jsonify(data_service.save_settings(g.user["id"], updates))

@learner_bp.route('/daily_challenge')
def daily_challenge():
    return jsonify({"questions": _public_questions()})

@learner_bp.route('/daily_challenge/submit', methods=['POST'])
def daily_challenge_submit():
    data = request.get_json(silent=True) or {}
    answers = data.get("answers")
    if not isinstance(answers, list):
        raise ValidationError("answers must be a list")
    return jsonify(_score_answers(answers))
