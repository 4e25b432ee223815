import os
import configparser

class Config:
    def __init__(self, root_path):
        self.root_path = root_path
        self._cfg = configparser.ConfigParser()
        self._cfg.read(os.path.join(root_path, "config.ini"), encoding="utf-8")

        # Flask Config
        self.MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # base64 audio uploads
        self.JSON_AS_ASCII = False
        self.LOG_DIR = self._get("LOG_DIR", "server", "log_dir", os.path.join(root_path, "logs"))
        self.CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

        # AI Gateway (OpenAI-compatible chat completions)
        self.AI_GATEWAY_API_KEY = os.environ.get("AI_GATEWAY_API_KEY") or os.environ.get("LOVABLE_API_KEY") or self._cfg.get("gateway", "api_key", fallback="")
        self.AI_GATEWAY_BASE_URL = self._get("AI_GATEWAY_BASE_URL", "gateway", "base_url", "https://ai.gateway.lovable.dev/v1")
        self.TEXT_MODEL_ID = self._normalize_model_id(self._get("TEXT_MODEL", "gateway", "text_model", "google/gemini-2.5-flash"))
        self.AI_TIMEOUT = int(self._get("AI_TIMEOUT", "gateway", "timeout", "60"))

        # OpenAI speech + feedback
        self.OPENAI_API_KEY = self._get("OPENAI_API_KEY", "openai", "api_key", "")
        self.OPENAI_BASE_URL = self._get("OPENAI_BASE_URL", "openai", "base_url", "https://api.openai.com/v1")
        self.FEEDBACK_MODEL_ID = self._normalize_model_id(self._get("FEEDBACK_MODEL", "openai", "feedback_model", "gpt-4o-mini"))
        self.STT_MODEL_ID = self._normalize_model_id(self._get("STT_MODEL", "openai", "stt_model", "whisper-1"))
        self.TTS_MODEL_ID = self._normalize_model_id(self._get("TTS_MODEL", "openai", "tts_model", "tts-1"))
        self.TTS_VOICE_DEFAULT = self._get("TTS_VOICE_DEFAULT", "openai", "voice", "alloy")

        # Content providers
        self.TMDB_API_KEY = self._get("TMDB_API_KEY", "providers", "tmdb_api_key", "")
        self.PEXELS_API_KEY = self._get("PEXELS_API_KEY", "providers", "pexels_api_key", "")
        self.YOUTUBE_API_KEY = self._get("YOUTUBE_API_KEY", "providers", "youtube_api_key", "")
        self.JAMENDO_CLIENT_ID = self._get("JAMENDO_CLIENT_ID", "providers", "jamendo_client_id", "56d30c95")
        self.HTTP_TIMEOUT = int(self._get("HTTP_TIMEOUT", "providers", "http_timeout", "15"))

        # Fallback media
        self.FALLBACK_SHOW_VIDEO_URL = "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4"
        self.FALLBACK_EPISODE_VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

        # Data Store Paths
        self.DATABASE_PATH = self._get("DATABASE_PATH", "storage", "database_path", os.path.join(root_path, "vocaboo.db"))
        self.TRANSLATIONS_STORE_PATH = self._get("TRANSLATIONS_STORE_PATH", "storage", "translations_path", os.path.join(root_path, "translations_store.json"))

    def _get(self, env_name, section, option, default):
        return os.environ.get(env_name) or self._cfg.get(section, option, fallback=default)

    def _normalize_model_id(self, mid):
        return "".join(str(mid or "").split())

config = Config(os.getcwd())
