"""
API routes for the enrolled gallery
"""
from flask import Blueprint, current_app, jsonify

from liveguard.web import get_services
from liveguard.web.utils import get_request_data, parse_embedding

gallery_api_bp = Blueprint('gallery_api', __name__, url_prefix='/api/gallery')


@gallery_api_bp.route('', methods=['GET'])
def list_gallery():
    """Enrolled labels with their embedding counts."""
    entries = get_services().gallery.load_gallery()
    data = [{'label': entry.label, 'embeddings': len(entry.embeddings)} for entry in entries]
    return jsonify({'success': True, 'data': data})


@gallery_api_bp.route('', methods=['POST'])
def enroll():
    """Register one embedding for a label. Re-registering adds another embedding."""
    data = get_request_data()
    label = (data.get('label') or '').strip()
    if not label:
        return jsonify({'success': False, 'message': 'Missing label'}), 400

    services = get_services()
    try:
        embedding = parse_embedding(data.get('embedding'))
        owned = services.gallery.enroll(label, embedding)
    except ValueError as exc:
        return jsonify({'success': False, 'message': str(exc)}), 400
    except Exception as exc:
        current_app.logger.error("Error enrolling %s: %s", label, exc, exc_info=True)
        return jsonify({'success': False, 'message': 'Could not enroll face'}), 500

    services.audit.log_enrollment(label, owned)
    return jsonify({'success': True, 'data': {'label': label, 'embeddings': owned}}), 201


@gallery_api_bp.route('/<label>', methods=['DELETE'])
def remove(label):
    if not get_services().gallery.remove(label):
        return jsonify({'success': False, 'message': f'Label {label} not enrolled'}), 404
    return jsonify({'success': True})
