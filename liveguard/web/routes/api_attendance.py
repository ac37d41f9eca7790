"""
API routes for attendance records
"""
from datetime import datetime

from flask import Blueprint, Response, jsonify, request

from liveguard.web import get_services

attendance_api_bp = Blueprint('attendance_api', __name__, url_prefix='/api/attendance')


@attendance_api_bp.route('', methods=['GET'])
def list_attendance():
    """Recorded attempts, newest first. Optional ``outcome`` and ``limit`` filters."""
    outcome = request.args.get('outcome') or None
    limit = request.args.get('limit', 100, type=int) or 100
    limit = max(1, min(limit, 1000))
    records = get_services().recorder.list_records(outcome=outcome, limit=limit)
    return jsonify({'success': True, 'data': records})


@attendance_api_bp.route('/export', methods=['GET'])
def export_attendance():
    csv_text = get_services().recorder.export_csv()
    filename = f"attendance_{datetime.now().strftime('%Y%m%d')}.csv"
    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )
