"""
Gemini Inference Client

Thin wrapper around the Gemini ``generateContent`` REST endpoint.
Sends one prompt, asks for JSON-only output and returns the raw text.
No retries and no streaming: callers decide what a failure means.
"""

import logging

import requests

logger = logging.getLogger(__name__)


class InferenceError(Exception):
    """Raised when the model call fails or returns an unusable payload."""
    pass


DEFAULT_GENERATION_CONFIG = {
    'temperature': 0.8,
    'topP': 0.95,
    'topK': 40,
    'maxOutputTokens': 8192,
    'responseMimeType': 'application/json',
}


class GeminiClient:
    """Calls a single Gemini model over HTTP."""

    def __init__(self, api_key, model='gemini-2.5-flash',
                 api_url='https://generativelanguage.googleapis.com/v1beta/models',
                 timeout=60, generation_config=None, session=None):
        if not api_key:
            raise InferenceError('Gemini API key is missing')
        self.api_key = api_key
        self.model = model
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.generation_config = dict(generation_config or DEFAULT_GENERATION_CONFIG)
        # JSON output is the whole point of this client
        self.generation_config['responseMimeType'] = 'application/json'
        self.session = session or requests.Session()

    @property
    def endpoint(self):
        return f"{self.api_url}/{self.model}:generateContent"

    def generate_json(self, prompt):
        """
        Send ``prompt`` and return the model's text output.

        Raises:
            InferenceError: network failure, non-2xx status, API error payload,
                or a response with no candidates.
        """
        payload = {
            'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
            'generationConfig': self.generation_config,
        }
        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self.api_key,
        }

        try:
            response = self.session.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise InferenceError(f"Gemini request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise InferenceError(f"Gemini request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = _error_message(data) or response.text[:200]
            logger.error("Gemini returned HTTP %s: %s", response.status_code, message)
            raise InferenceError(message or f"Gemini returned HTTP {response.status_code}")

        if not isinstance(data, dict):
            raise InferenceError('Gemini returned a non-JSON envelope')

        return _extract_text(data)


def _error_message(data):
    if isinstance(data, dict) and isinstance(data.get('error'), dict):
        return data['error'].get('message', '')
    return ''


def _extract_text(data):
    """Concatenate the text parts of the first candidate."""
    candidates = data.get('candidates') or []
    if not candidates:
        feedback = data.get('promptFeedback', {})
        reason = feedback.get('blockReason') if isinstance(feedback, dict) else None
        if reason:
            raise InferenceError(f"Prompt was blocked: {reason}")
        return ''

    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts if isinstance(part, dict))


def from_config(config):
    """Build a client from a Flask config mapping."""
    return GeminiClient(
        api_key=config.get('GEMINI_API_KEY'),
        model=config.get('GEMINI_MODEL', 'gemini-2.5-flash'),
        api_url=config.get('GEMINI_API_URL', 'https://generativelanguage.googleapis.com/v1beta/models'),
        timeout=config.get('GEMINI_TIMEOUT', 60),
        generation_config=config.get('GEMINI_GENERATION_CONFIG'),
    )
