"""
API routes for verification sessions
"""
from flask import Blueprint, current_app, jsonify

from liveguard.attendance import SessionBusyError
from liveguard.vision import LivenessSessionError
from liveguard.web import get_services
from liveguard.web.utils import get_request_data, parse_embedding, parse_frame

sessions_api_bp = Blueprint('sessions_api', __name__, url_prefix='/api/sessions')


@sessions_api_bp.route('', methods=['POST'])
def run_session():
    """
    Run one verification attempt over client-detected frames.

    Body: ``{"frames": [frame | null, ...], "embedding": [float, ...]}``.
    The embedding is the one the client extracted from its last frame.
    """
    data = get_request_data()
    frames = data.get('frames')
    if not isinstance(frames, list):
        return jsonify({'success': False, 'message': 'frames must be a list'}), 400

    try:
        samples = [parse_frame(frame) for frame in frames]
        embedding = parse_embedding(data['embedding']) if data.get('embedding') is not None else None
    except ValueError as exc:
        return jsonify({'success': False, 'message': str(exc)}), 400

    services = get_services()
    try:
        outcome = services.orchestrator.run(samples, extractor=lambda _sample: embedding)
    except SessionBusyError as exc:
        return jsonify({'success': False, 'message': str(exc)}), 409
    except (LivenessSessionError, ValueError) as exc:
        current_app.logger.warning("Rejected session input: %s", exc)
        return jsonify({'success': False, 'message': str(exc)}), 400

    return jsonify({'success': True, 'data': outcome.to_dict()})


@sessions_api_bp.route('/stop', methods=['POST'])
def stop_session():
    services = get_services()
    active = services.orchestrator.is_active()
    services.orchestrator.stop()
    return jsonify({'success': True, 'data': {'stopped': active}})
