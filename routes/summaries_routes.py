from flask import Blueprint, current_app, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_required
from services import summaries as summary_service
from services.summary import SummaryOrchestrator
from utils.app_context import current_uid, get_store

summaries_bp = Blueprint('summaries', __name__)
CORS(summaries_bp)


@summaries_bp.route('/generate', methods=['POST'])
@jwt_required
def generate_summary():
    """
    Generate and save an AI summary of the user's task backlog
    ---
    tags:
      - Summaries
    parameters:
      - name: body
        in: body
        required: false
        schema:
          type: object
          properties:
            projectId: {type: string, description: Limit the summary to one project}
    responses:
      200:
        description: >
          "{text, source, prompt, error, saved}". When source is "prompt" both
          upstream calls failed and text is the raw prompt to submit manually.
    """
    data = request.get_json(silent=True) or {}
    orchestrator = SummaryOrchestrator(get_store(), current_app.config)
    outcome = orchestrator.generate(current_uid(), data.get('projectId'))
    return jsonify(outcome.to_dict()), 200


@summaries_bp.route('/me', methods=['GET'])
@jwt_required
def get_my_summary():
    summary = summary_service.get_tasks_summary(get_store(), current_uid())
    if summary is None:
        return jsonify({"error": "No summary yet"}), 404
    return jsonify(summary), 200
