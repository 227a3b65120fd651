"""
Exceções customizadas para o serviço de documentos.
"""

from googleapiclient.errors import HttpError

ACCESS_ERROR_MARKERS = ('not found', 'access')

# 403 da Google API também é usado para limite de uso, que não é falta de acesso
RATE_LIMIT_REASONS = {
    'rateLimitExceeded',
    'userRateLimitExceeded',
    'dailyLimitExceeded',
    'quotaExceeded',
    'sharingRateLimitExceeded',
}
RATE_LIMIT_MARKERS = ('rate limit', 'quota')


class DocumentServiceError(Exception):
    """Erro genérico do serviço de documentos"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(DocumentServiceError):
    """Campo obrigatório ausente ou vazio"""

    def __init__(self, field: str, message: str = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class ConfigurationError(DocumentServiceError):
    """Configuração obrigatória ausente (ex: ID do template)"""


class DocumentAccessError(DocumentServiceError):
    """Documento não encontrado ou sem permissão de acesso"""

    def __init__(self, document_id: str, message: str = None):
        self.document_id = document_id
        if not message:
            message = (
                f"Document {document_id} not found or you do not have "
                f"permissions to access it"
            )
        super().__init__(message)


def _error_reasons(error: HttpError) -> set:
    details = getattr(error, 'error_details', None)
    if not isinstance(details, list):
        return set()
    return {item.get('reason') for item in details if isinstance(item, dict)}


def is_rate_limit_error(error: HttpError) -> bool:
    if _error_reasons(error) & RATE_LIMIT_REASONS:
        return True
    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def is_access_error(error: Exception) -> bool:
    """
    Indica se o erro da plataforma representa falta de acesso ao arquivo.

    404 sempre conta. 403 conta, exceto quando é limite de uso ou de quota.
    Para outros erros vale a mensagem ("not found" / "access").
    """
    if isinstance(error, HttpError) and error.resp is not None:
        status = getattr(error.resp, 'status', None)
        if status == 404:
            return True
        if status == 403:
            return not is_rate_limit_error(error)
    message = str(error).lower()
    return any(marker in message for marker in ACCESS_ERROR_MARKERS)


def raise_for_access(document_id: str, error: Exception):
    """
    Remapeia erros de acesso da plataforma para DocumentAccessError.

    Qualquer outro erro é relançado sem alteração.
    """
    if isinstance(error, DocumentServiceError):
        raise error
    if is_access_error(error):
        raise DocumentAccessError(document_id) from error
    raise error
