import logging
import os

from flask import Blueprint, jsonify, request, send_from_directory
from flask_cors import CORS

from api.exception import NotFoundError
from auth.authhelpers import jwt_optional, jwt_required
from services import project_files as file_service
from utils.app_context import current_uid, get_blobs, get_store

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload_files", __name__)
CORS(upload_bp)


@upload_bp.route('/projects/<string:project_id>/files', methods=['GET'])
@jwt_optional
def get_files_for_project(project_id):
    """
    Files attached to a project, newest first
    ---
    tags:
      - Files
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: A list of file metadata records.
    """
    return jsonify(file_service.get_files_for_project(get_store(), current_uid(), project_id)), 200


@upload_bp.route('/projects/<string:project_id>/files', methods=['POST'])
@jwt_required
def upload_project_files(project_id):
    """
    Upload one or more files (multipart field "uploads")
    ---
    tags:
      - Files
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
      - in: formData
        name: uploads
        type: file
        required: true
    responses:
      201:
        description: Metadata of the stored files.
      413:
        description: A file exceeds the size limit.
    """
    attachments = [f for f in request.files.getlist("uploads") if f and f.filename]
    if not attachments:
        return jsonify({"error": "No files provided"}), 400

    store = get_store()
    blobs = get_blobs()
    uid = current_uid()
    uploaded = []
    for attachment in attachments:
        uploaded.append(file_service.upload_project_file(
            store, blobs, uid, project_id,
            attachment.filename, attachment.mimetype, attachment.read(),
        ))
    logger.info("Uploaded %d file(s) to project %s", len(uploaded), project_id)
    return jsonify(uploaded), 201


@upload_bp.route('/files/<string:file_id>', methods=['DELETE'])
@jwt_required
def delete_project_file(file_id):
    file_service.delete_project_file(get_store(), get_blobs(), current_uid(), file_id)
    return jsonify({"message": f"File {file_id} deleted"}), 200


@upload_bp.route('/blobs/<path:blob_path>', methods=['GET'])
def serve_blob(blob_path):
    blobs = get_blobs()
    if not blobs.exists(blob_path):
        raise NotFoundError("File not found.")
    return send_from_directory(os.path.abspath(blobs.root), blobs.normalize(blob_path))
