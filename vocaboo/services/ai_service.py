import json
import logging
import concurrent.futures

import openai
from openai import OpenAI

from vocaboo.config import config
from vocaboo.exceptions import ConfigurationError, PaymentRequiredError, ProviderError, RateLimitError
from vocaboo.utils.helpers import _language_name

logger = logging.getLogger(__name__)

CHAPTERS_TOOL = {
    "type": "function",
    "function": {
        "name": "create_chapters",
        "description": "Create chapters from book content",
        "parameters": {
            "type": "object",
            "properties": {
                "chapters": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "content": {"type": "string"},
                        },
                        "required": ["title", "content"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["chapters"],
            "additionalProperties": False,
        },
    },
}

class AIService:
    def __init__(self):
        self._gateway = None
        self._openai = None
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=3)

    @property
    def gateway(self):
        if not config.AI_GATEWAY_API_KEY:
            raise ConfigurationError("AI_GATEWAY_API_KEY is not configured")
        if self._gateway is None:
            self._gateway = OpenAI(base_url=config.AI_GATEWAY_BASE_URL, api_key=config.AI_GATEWAY_API_KEY)
        return self._gateway

    @property
    def speech(self):
        if not config.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is not configured")
        if self._openai is None:
            self._openai = OpenAI(base_url=config.OPENAI_BASE_URL, api_key=config.OPENAI_API_KEY)
        return self._openai

    def gateway_configured(self):
        return bool(config.AI_GATEWAY_API_KEY)

    def _call_with_timeout(self, fn, timeout_s=None, **kwargs):
        fut = self.executor.submit(fn, **kwargs)
        try:
            return fut.result(timeout=timeout_s or config.AI_TIMEOUT)
        except concurrent.futures.TimeoutError:
            raise ProviderError("AI request timed out")

    def _chat_completion_with_timeout(self, client, model, messages, timeout_s=None, **kwargs):
        return self._call_with_timeout(
            client.chat.completions.create, timeout_s=timeout_s,
            model=model, messages=messages, **kwargs
        )

    def _content(self, response):
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            return ""
        return (content or "").strip()

    def _raise_provider_error(self, e, service):
        status = getattr(e, "status_code", None)
        text = str(e)
        logger.error("%s error: %s %s", service, status, text)
        if isinstance(e, openai.RateLimitError) or status == 429 or "insufficient_quota" in text:
            raise RateLimitError(f"{service} rate limit or quota exceeded. Please try again later.")
        if status == 402:
            raise PaymentRequiredError(f"Payment required by the {service.lower()} provider. Please check billing.")
        raise ProviderError(f"{service} error: {text}")

    def _gateway_chat(self, service, messages, timeout_s=None, **kwargs):
        try:
            return self._chat_completion_with_timeout(
                self.gateway, config.TEXT_MODEL_ID, messages, timeout_s=timeout_s, **kwargs
            )
        except openai.OpenAIError as e:
            self._raise_provider_error(e, service)

    def translate_word(self, word, target_language):
        language = _language_name(target_language)
        messages = [
            {
                'role': 'system',
                'content': 'You are a dictionary for English learners. Reply with the translation only: '
                           'no quotes, no explanation, at most a few words.'
            },
            {'role': 'user', 'content': f'Translate the English word "{word}" into {language}.'},
        ]
        response = self._gateway_chat("Translation", messages, timeout_s=20)
        translation = self._content(response).strip('"').strip()
        if not translation:
            raise ProviderError("No translation received from AI")
        return translation

    def translate_lyrics(self, lyrics, target_language):
        language = _language_name(target_language)
        messages = [
            {
                'role': 'system',
                'content': 'You translate song lyrics for language learners. Translate line by line, '
                           'keep exactly one output line per input line and keep the line breaks. '
                           'Return only the translated lyrics.'
            },
            {'role': 'user', 'content': f'Translate these lyrics into {language}:\n\n{lyrics}'},
        ]
        response = self._gateway_chat("Translation", messages)
        translation = self._content(response)
        if not translation:
            raise ProviderError("No translation received from AI")
        return translation

    def explain_lyrics(self, lyrics, selected_text=None):
        text_to_explain = selected_text or lyrics
        context = f"\n\nFull lyrics context:\n{lyrics}" if selected_text else ""
        messages = [
            {
                'role': 'system',
                'content': 'You are an English teacher helping students understand song lyrics. Explain the meaning, '
                           'metaphors, idioms, cultural references, and any language learning insights. Keep '
                           'explanations clear and concise for English learners.'
            },
            {'role': 'user', 'content': f'Explain these lyrics:\n\n{text_to_explain}{context}'},
        ]
        response = self._gateway_chat("Explanation", messages)
        explanation = self._content(response)
        if not explanation:
            raise ProviderError("No explanation received from AI")
        return explanation

    def generate_lyrics(self, title, artist):
        """Last-resort lyrics. Returns None instead of raising."""
        if not self.gateway_configured():
            return None
        messages = [
            {
                'role': 'system',
                'content': 'You are a helpful assistant that generates song lyrics. Generate lyrics that match the '
                           'style and theme of the requested song. Keep it appropriate for language learners.'
            },
            {
                'role': 'user',
                'content': f'Generate lyrics for the song "{title}" by {artist}. If you know this song, provide the '
                           f'actual lyrics. If not, create original lyrics inspired by the song title and artist style.'
            },
        ]
        try:
            response = self._gateway_chat("Lyrics generation", messages)
        except ProviderError as e:
            logger.error("AI generation failed: %s", e)
            return None
        return self._content(response) or None

    def split_into_chapters(self, title, content):
        messages = [
            {
                'role': 'system',
                'content': 'You are a helpful assistant that splits book content into logical chapters. Return '
                           'structured data with chapters array. Each chapter must have "title" and "content" '
                           'fields. Aim for 5-10 chapters of roughly equal length.'
            },
            {'role': 'user', 'content': f'Split this book into chapters:\n\nTitle: {title}\n\nContent:\n{content}'},
        ]
        response = self._gateway_chat(
            "Chapter generation", messages, timeout_s=120,
            tools=[CHAPTERS_TOOL],
            tool_choice={"type": "function", "function": {"name": "create_chapters"}},
        )
        try:
            tool_call = response.choices[0].message.tool_calls[0]
            data = json.loads(tool_call.function.arguments)
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            logger.error("Chapter tool call missing or malformed: %s", e)
            raise ProviderError("Failed to generate chapters")
        chapters = data.get("chapters") if isinstance(data, dict) else None
        if not isinstance(chapters, list):
            return []
        return [c for c in chapters if isinstance(c, dict)]

    def transcribe_audio(self, audio_bytes, filename="audio.webm", content_type="audio/webm"):
        try:
            result = self._call_with_timeout(
                self.speech.audio.transcriptions.create,
                model=config.STT_MODEL_ID,
                file=(filename, audio_bytes, content_type),
                language="en",
            )
        except openai.OpenAIError as e:
            self._raise_provider_error(e, "Speech-to-text")
        # Whisper text is scored as returned, leading whitespace included
        return getattr(result, "text", "") or ""

    def pronunciation_feedback(self, original_text, transcribed_text):
        messages = [
            {
                'role': 'system',
                'content': 'You are an English pronunciation teacher. Compare what the student said with the original '
                           'text and provide helpful, encouraging feedback on their pronunciation. Keep feedback '
                           'concise and specific.'
            },
            {
                'role': 'user',
                'content': f'Original text: "{original_text}"\n\nWhat the student said: "{transcribed_text}"\n\n'
                           'Provide feedback on their pronunciation accuracy. If they got it right or very close, '
                           'praise them! If there are differences, point them out gently and suggest improvements.'
            },
        ]
        try:
            response = self._chat_completion_with_timeout(
                self.speech, config.FEEDBACK_MODEL_ID, messages, max_tokens=200
            )
        except openai.OpenAIError as e:
            self._raise_provider_error(e, "Feedback")
        return self._content(response)

    def text_to_speech(self, text, voice=None):
        try:
            response = self._call_with_timeout(
                self.speech.audio.speech.create,
                model=config.TTS_MODEL_ID,
                voice=voice or config.TTS_VOICE_DEFAULT,
                input=text,
                response_format="mp3",
            )
        except openai.OpenAIError as e:
            self._raise_provider_error(e, "Text-to-speech")
        return response.content

ai_service = AIService()
