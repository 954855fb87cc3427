import logging

import requests
from flask import Response, jsonify

from config import Settings
from errors import BadRequestError, ProxyError, ServerConfigurationError, UpstreamError

logger = logging.getLogger("pronunciation-proxy")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
}

MISSING_FIELDS_MESSAGE = "Missing 'systemPrompt' or 'userQuery' in the request body."


def build_payload(system_prompt: str, user_query: str) -> dict:
    """Build the generateContent body for one prompt/query pair."""
    return {
        "contents": [{"parts": [{"text": user_query}]}],
        "systemInstruction": {"parts": [{"text": system_prompt}]},
    }


def _error_details(response: requests.Response):
    try:
        return response.json()
    except ValueError:
        return response.text or "Unknown error"


class GeminiProxy:
    """Relays {systemPrompt, userQuery} to Gemini with the server-held key.

    The key is attached here and never leaves the server: it is not echoed
    to the client and is redacted from anything that gets logged.
    """

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()

    def handle(self, request) -> Response:
        if request.method == "OPTIONS":
            # Pre-flight request; reply successfully.
            return self._with_cors(Response("", status=204))

        try:
            upstream = self._forward(request)
        except ProxyError as e:
            response = jsonify(e.to_dict())
            response.status_code = e.status_code
            return self._with_cors(response)

        return self._with_cors(Response(
            upstream.content,
            status=200,
            content_type=upstream.headers.get("Content-Type", "application/json"),
        ))

    def _forward(self, request) -> requests.Response:
        if not self.settings.gemini_key:
            err = ServerConfigurationError()
            logger.error(err.cause)
            raise err

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        system_prompt = data.get("systemPrompt")
        user_query = data.get("userQuery")
        if not system_prompt or not user_query:
            raise BadRequestError(MISSING_FIELDS_MESSAGE)

        try:
            resp = self.session.post(
                self.settings.generate_content_url(),
                json=build_payload(system_prompt, user_query),
                headers={"Content-Type": "application/json"},
                timeout=self.settings.upstream_timeout,
            )
        except requests.RequestException as e:
            # the message can carry the request URL, key included
            logger.error("Error calling Gemini API: %s", self._redact(str(e)))
            raise UpstreamError() from None

        if not 200 <= resp.status_code < 300:
            details = _error_details(resp)
            logger.error(
                "Error calling Gemini API: status=%s details=%s",
                resp.status_code, self._redact(str(details)),
            )
            raise UpstreamError(resp.status_code, details)

        return resp

    def _redact(self, text: str) -> str:
        key = self.settings.gemini_key
        return text.replace(key, "***") if key else text

    @staticmethod
    def _with_cors(response: Response) -> Response:
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response
