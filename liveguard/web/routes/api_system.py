"""
API routes for service health
"""
from flask import Blueprint, jsonify

from liveguard import __version__
from liveguard.web import get_services

system_api_bp = Blueprint('system_api', __name__, url_prefix='/api')


@system_api_bp.route('/health', methods=['GET'])
def health():
    services = get_services()
    return jsonify({
        'success': True,
        'data': {
            'version': __version__,
            'gallery': services.gallery.describe(),
            'session_active': services.orchestrator.is_active(),
        },
    })
