"""
Upload Routes

    POST   /uploads/scenario            - Upload a scenario file (field "scenario")
    POST   /uploads/data                - Upload a traffic data file (field "data")
    GET    /uploads                     - List uploaded files
    DELETE /uploads/<filename>          - Delete an uploaded file
    GET    /uploads/<filename>/download - Download an uploaded file
"""

from flask import Blueprint, current_app, jsonify, request, send_file

from ..uploads.service import UploadService

uploads_bp = Blueprint('uploads', __name__)


def get_upload_service() -> UploadService:
    return current_app.extensions['trafficsim.uploads']


@uploads_bp.route('/uploads/scenario', methods=['POST'])
def upload_scenario():
    """Upload a scenario file"""
    info = get_upload_service().save(request.files.get('scenario'), 'scenario')
    return jsonify({
        'message': 'File uploaded successfully',
        'file': info.to_dict()
    }), 201


@uploads_bp.route('/uploads/data', methods=['POST'])
def upload_data():
    """Upload a traffic data file (CSV/Excel/text)"""
    info = get_upload_service().save(request.files.get('data'), 'data')
    return jsonify({
        'message': 'Data file uploaded successfully',
        'file': info.to_dict()
    }), 201


@uploads_bp.route('/uploads', methods=['GET'])
def list_uploads():
    """List uploaded files"""
    files = get_upload_service().list()
    return jsonify({'files': [item.to_dict() for item in files]})


@uploads_bp.route('/uploads/<path:filename>', methods=['DELETE'])
def delete_upload(filename: str):
    """Delete an uploaded file"""
    get_upload_service().delete(filename)
    return '', 204


@uploads_bp.route('/uploads/<path:filename>/download', methods=['GET'])
def download_upload(filename: str):
    """Download an uploaded file"""
    path = get_upload_service().resolve(filename)
    return send_file(path, as_attachment=True, download_name=path.name)
