"""
Endpoint de health check geral da API
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime, timezone

from report_docs.services.google_client import has_google_credentials

bp = Blueprint('health', __name__, url_prefix='/api')


@bp.route('/health', methods=['GET'])
def health_check():
    """Healthcheck: API online e se credenciais Google e template estão configurados"""
    config = current_app.config
    return jsonify({
        'status': 'healthy',
        'message': 'API is online',
        'google_credentials_configured': has_google_credentials(config),
        'template_configured': bool(config.get('TEMPLATE_DOCUMENT_ID')),
        'timestamp': datetime.now(timezone.utc).isoformat()
    }), 200
