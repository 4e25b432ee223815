from flask import Blueprint, request, jsonify, g

from vocaboo.exceptions import NotFoundError, ValidationError
from vocaboo.routes.auth import login_required
from vocaboo.services.data_service import data_service
from vocaboo.utils.helpers import _clamp, _progress_percentage, _to_number

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')

COMPLETED_THRESHOLD = 90

def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON object body required")
    return data

@catalog_bp.route('/shows')
def list_shows():
    shows = data_service.list_shows(
        show_type=request.args.get('type'),
        difficulty=request.args.get('difficulty'),
        search=request.args.get('search', '').strip(),
    )
    return jsonify({"shows": shows})

@catalog_bp.route('/shows', methods=['POST'])
def create_show():
    return jsonify(data_service.insert_show(_json_body())), 201

@catalog_bp.route('/shows/<show_id>')
def get_show(show_id):
    show = data_service.get_show(show_id)
    if not show:
        raise NotFoundError("show not found")
    return jsonify(show)

@catalog_bp.route('/shows/<show_id>/episodes')
def list_episodes(show_id):
    if not data_service.get_show(show_id):
        raise NotFoundError("show not found")
    return jsonify({"episodes": data_service.list_episodes(show_id)})

@catalog_bp.route('/shows/<show_id>/episodes', methods=['POST'])
def create_episode(show_id):
    if not data_service.get_show(show_id):
        raise NotFoundError("show not found")
    return jsonify(data_service.insert_episode(show_id, _json_body())), 201

@catalog_bp.route('/progress', methods=['POST'])
@login_required
def save_progress():
    data = _json_body()
    show_id = str(data.get("show_id") or "").strip()
    if not show_id:
        raise ValidationError("show_id is required")
    if not data_service.get_show(show_id):
        raise NotFoundError("show not found")
    episode_id = data.get("episode_id") or None
    if episode_id is not None:
        episode = data_service.get_episode(str(episode_id))
        if not episode or episode["show_id"] != show_id:
            raise ValidationError("episode_id does not belong to this show")
    if "progress_percentage" in data:
        percentage = _clamp(_to_number(data["progress_percentage"], "progress_percentage", int), 0, 100)
    else:
        current_time = _to_number(data.get("current_time") or 0, "current_time")
        duration = _to_number(data.get("duration") or 0, "duration")
        percentage = _progress_percentage(current_time, duration)
    progress = data_service.upsert_progress(
        g.user["id"],
        show_id,
        percentage,
        percentage >= COMPLETED_THRESHOLD,
        episode_id=str(episode_id) if episode_id is not None else None,
    )
    return jsonify(progress)

@catalog_bp.route('/progress')
@login_required
def list_progress():
    return jsonify({"progress": data_service.list_progress(g.user["id"])})

@catalog_bp.route('/songs')
def list_songs():
    songs = data_service.list_songs(
        search=request.args.get('search', '').strip(),
        genre=request.args.get('genre'),
        difficulty=request.args.get('difficulty'),
    )
    return jsonify({"songs": songs})

@catalog_bp.route('/songs', methods=['POST'])
def create_song():
    return jsonify(data_service.insert_song(_json_body())), 201

@catalog_bp.route('/songs/<song_id>/lyrics_lines')
def list_lyrics_lines(song_id):
    if not data_service.get_song(song_id):
        raise NotFoundError("song not found")
    return jsonify({"lines": data_service.list_lyrics_lines(song_id)})

@catalog_bp.route('/songs/<song_id>/lyrics_lines', methods=['POST'])
def create_lyrics_lines(song_id):
    if not data_service.get_song(song_id):
        raise NotFoundError("song not found")
    lines = _json_body().get("lines")
    if not isinstance(lines, list) or not all(isinstance(l, dict) for l in lines):
        raise ValidationError("lines must be a list of objects")
    return jsonify({"lines": data_service.insert_lyrics_lines(song_id, lines)}), 201

@catalog_bp.route('/books')
def list_books():
    return jsonify({"books": data_service.list_books()})

@catalog_bp.route('/books', methods=['POST'])
def create_book():
    return jsonify(data_service.insert_book(_json_body())), 201

@catalog_bp.route('/books/<book_id>/chapters')
def list_chapters(book_id):
    if not data_service.get_book(book_id):
        raise NotFoundError("book not found")
    return jsonify({"chapters": data_service.list_chapters(book_id)})
