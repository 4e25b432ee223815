from flask import Blueprint, jsonify, current_app

from vocaboo.config import config
from vocaboo.services.ai_service import ai_service

main_bp = Blueprint('main', __name__)

@main_bp.route('/health')
def health():
    return jsonify({"ok": True})

@main_bp.route('/__meta')
def meta():
    return jsonify({
        "debug": current_app.debug,
        "database": config.DATABASE_PATH,
        "providers": {
            "ai_gateway": ai_service.gateway_configured(),
            "openai": bool(config.OPENAI_API_KEY),
            "tmdb": bool(config.TMDB_API_KEY),
            "pexels": bool(config.PEXELS_API_KEY),
            "youtube": bool(config.YOUTUBE_API_KEY),
        },
        "routes": sorted([str(r) for r in current_app.url_map.iter_rules()]),
    })
