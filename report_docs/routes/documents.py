"""
Rotas de documentos.

Contrato das respostas (sempre HTTP 200):
    sucesso: {"success": true, "docId" | "pdfFileId": ..., "url": ...}
    erro:    {"success": false, "error": "..."}
"""
import logging

from flask import Blueprint, request, jsonify, current_app
from googleapiclient.errors import HttpError

from report_docs.auth import require_auth
from report_docs.services.documents import (
    ContentReplaceHandler,
    DocumentCreationHandler,
    HeaderFooterHandler,
    PdfExportHandler,
    DocumentSettings,
    DocumentServiceError,
    ValidationError,
)
from report_docs.services.google_client import build_stores

logger = logging.getLogger(__name__)

documents_bp = Blueprint('documents', __name__, url_prefix='/api/v1/documents')

# Testes registram (document_store, file_store) aqui para substituir os stores Google
STORES_EXTENSION = 'report_docs.stores'


def get_stores():
    stores = current_app.extensions.get(STORES_EXTENSION)
    if stores is not None:
        return stores
    return build_stores(current_app.config)


def _handler(handler_class):
    document_store, file_store = get_stores()
    return handler_class(
        document_store,
        file_store,
        DocumentSettings.from_config(current_app.config),
    )


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('body', 'Request body must be a JSON object')
    return data


def _error_response(error):
    return jsonify({'success': False, 'error': str(error)}), 200


def _run(operation):
    """Fronteira única de erro de cada requisição"""
    try:
        return jsonify(operation()), 200
    except DocumentServiceError as e:
        logger.warning(f"{request.path}: {e}")
        return _error_response(e)
    except HttpError as e:
        logger.error(f"Google API error em {request.path}: {e}")
        return _error_response(e)
    except Exception as e:
        logger.exception(f"Erro inesperado em {request.path}")
        return _error_response(e)


def _replace_content(data):
    # Validação antes de criar clientes Google
    ContentReplaceHandler.validate(data.get('docId'), data.get('htmlContent'))
    return _handler(ContentReplaceHandler).handle(data.get('docId'), data.get('htmlContent'))


def _apply_header_footer(data):
    HeaderFooterHandler.validate(data.get('docId'))
    return _handler(HeaderFooterHandler).handle(data.get('docId'))


@documents_bp.route('/replace-content', methods=['POST'])
@require_auth
def replace_content():
    """Substitui o corpo do documento pelo HTML enviado"""
    return _run(lambda: _replace_content(_payload()))


@documents_bp.route('/create', methods=['POST'])
@require_auth
def create_document():
    """Cria documento a partir do template com o HTML enviado"""
    def operation():
        data = _payload()
        DocumentCreationHandler.validate(data.get('htmlContent'), data.get('fileName'))
        return _handler(DocumentCreationHandler).handle(data.get('htmlContent'), data.get('fileName'))
    return _run(operation)


@documents_bp.route('/header-footer', methods=['POST'])
@require_auth
def apply_header_footer():
    """Copia header/footer do template para o documento"""
    return _run(lambda: _apply_header_footer(_payload()))


@documents_bp.route('/export-pdf', methods=['POST'])
@require_auth
def export_pdf():
    """Exporta o documento como PDF"""
    def operation():
        data = _payload()
        PdfExportHandler.validate(data.get('docId'))
        return _handler(PdfExportHandler).handle(data.get('docId'))
    return _run(operation)


@documents_bp.route('/update', methods=['POST'])
@require_auth
def update_document():
    """
    Endpoint único de atualização: com htmlContent substitui o corpo,
    sem htmlContent aplica header/footer. O campo 'action' é ignorado.
    """
    def operation():
        data = _payload()
        if 'htmlContent' in data:
            return _replace_content(data)
        return _apply_header_footer(data)
    return _run(operation)
