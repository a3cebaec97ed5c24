"""
Serverless-style summary proxy: receives {prompt, model?} and forwards it to
the configured generative-AI endpoint. The upstream answer is returned as is
under "result"; callers decide how to extract the text.
"""
import logging

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from api.exception import UpstreamError, ValidationError
from utils.app_context import get_gemini

logger = logging.getLogger(__name__)

gemini_summary_bp = Blueprint('gemini_summary', __name__)
CORS(gemini_summary_bp)


@gemini_summary_bp.route('/gemini-summary', methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
def gemini_summary():
    """
    Forward a prompt to the generative-AI API
    ---
    tags:
      - Summaries
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [prompt]
          properties:
            prompt: {type: string}
            model: {type: string}
    responses:
      200:
        description: "{ok: true, result: <upstream payload>}"
      400:
        description: Missing prompt.
      405:
        description: Method not allowed.
      500:
        description: API not configured on the server.
      502:
        description: The upstream call failed.
    """
    if request.method != 'POST':
        return jsonify({"error": "Method not allowed"}), 405

    data = request.get_json(silent=True) or {}
    prompt = data.get('prompt')
    if not prompt:
        return jsonify({"error": "Missing prompt in request body"}), 400

    try:
        client = get_gemini()
    except ValidationError as e:
        logger.error("Invalid generative-AI configuration: %s", e)
        return jsonify({"error": "Gemini API not configured on server"}), 500
    if not client.configured:
        return jsonify({"error": "Gemini API not configured on server"}), 500

    try:
        result = client.generate(prompt, model=data.get('model'))
    except UpstreamError as e:
        logger.error("gemini proxy error: %s", e)
        return jsonify({"error": "Failed to call Gemini API", "details": str(e)}), 502

    return jsonify({"ok": True, "result": result}), 200
