import json
import logging
import os

import google.auth.transport.requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
import requests

from api.exception import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def load_service_account_info(raw):
    """Accepts the credential JSON itself or a path to a file holding it."""
    if not raw:
        return None
    raw = raw.strip()
    if not raw.startswith('{') and os.path.isfile(raw):
        with open(raw, encoding='utf-8') as fh:
            raw = fh.read()
    try:
        info = json.loads(raw)
    except ValueError as e:
        raise ValidationError(f"Service account credential is not valid JSON: {e}")
    if not isinstance(info, dict):
        raise ValidationError("Service account credential must be a JSON object")
    return info


def build_upstream_body(prompt):
    # plain {prompt} for simple proxies, contents for the Gemini REST shape
    return {
        'prompt': prompt,
        'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
    }


class GeminiClient:
    """
    Calls the configured generative-AI endpoint with a bearer credential.

    The credential is the API key when one is set, otherwise an access token
    obtained from the service-account key through google-auth.
    """

    def __init__(self, api_url, api_key=None, service_account_json=None,
                 project_id=None, model=None, session=None, timeout=30):
        self.api_url = api_url
        self.api_key = api_key
        self.service_account_info = load_service_account_info(service_account_json)
        self.project_id = project_id or (self.service_account_info or {}).get('project_id')
        self.model = model or DEFAULT_MODEL
        self.session = session or requests.Session()
        self.timeout = timeout
        self._credentials = None

    @classmethod
    def from_config(cls, config, session=None):
        return cls(
            api_url=config.get('GEMINI_API_URL'),
            api_key=config.get('GEMINI_API_KEY'),
            service_account_json=config.get('GOOGLE_SERVICE_ACCOUNT_JSON'),
            project_id=config.get('GOOGLE_PROJECT_ID'),
            model=config.get('GEMINI_MODEL'),
            session=session,
            timeout=config.get('HTTP_TIMEOUT', 30),
        )

    @property
    def configured(self):
        return bool(self.api_url and (self.api_key or self.service_account_info))

    def endpoint(self, model=None):
        return (self.api_url
                .replace('{model}', model or self.model)
                .replace('{project}', self.project_id or ''))

    def bearer_token(self):
        if self.api_key:
            return self.api_key
        if not self.service_account_info:
            raise UpstreamError("No generative-AI credential configured")
        try:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_info(
                    self.service_account_info, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            if not self._credentials.valid:
                self._credentials.refresh(google.auth.transport.requests.Request())
        except (GoogleAuthError, ValueError) as e:
            logger.error("Service account token exchange failed: %s", e)
            raise UpstreamError(f"Service account token exchange failed: {e}")
        return self._credentials.token

    def generate(self, prompt, model=None):
        """Sends the prompt upstream and returns the decoded JSON response."""
        if not self.configured:
            raise UpstreamError("Generative-AI API not configured")
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self.bearer_token()}",
        }
        try:
            response = self.session.post(
                self.endpoint(model),
                json=build_upstream_body(prompt),
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise UpstreamError(f"Failed to call generative-AI API: {e}")
        except ValueError as e:
            raise UpstreamError(f"Generative-AI API returned invalid JSON: {e}")
