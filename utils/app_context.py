from flask import current_app, request

EXTENSION_KEY = 'taskboard'


def get_store():
    return current_app.extensions[EXTENSION_KEY]['store']


def get_blobs():
    return current_app.extensions[EXTENSION_KEY]['blobs']


def get_weather():
    return current_app.extensions[EXTENSION_KEY]['weather']


def current_uid():
    return getattr(request, 'current_user_id', None)


def public_origin():
    """Origin used in share links: PUBLIC_BASE_URL, else the request's host URL."""
    return current_app.config.get('PUBLIC_BASE_URL') or request.host_url.rstrip('/')


def get_gemini():
    """Generative-AI client, built on first use so its access token is reused."""
    from services.gemini import GeminiClient

    extension = current_app.extensions[EXTENSION_KEY]
    if extension.get('gemini') is None:
        extension['gemini'] = GeminiClient.from_config(current_app.config)
    return extension['gemini']
