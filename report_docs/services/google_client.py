"""
Credenciais e clientes das APIs Google (service account).
"""
import logging
from typing import Mapping, Any, Optional, Tuple

from google.oauth2 import service_account
from googleapiclient.discovery import build

from report_docs.services.documents.exceptions import ConfigurationError
from report_docs.services.documents.google_stores import GoogleDocumentStore, GoogleDriveFileStore

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = [
    'https://www.googleapis.com/auth/documents',
    'https://www.googleapis.com/auth/drive',
]


def _service_account_info(config: Mapping[str, Any]) -> Optional[dict]:
    """Monta o JSON da service account a partir das variáveis individuais"""
    private_key = config.get('GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY')
    client_email = config.get('GOOGLE_SERVICE_ACCOUNT_CLIENT_EMAIL')
    if not private_key or not client_email:
        return None

    return {
        'type': config.get('GOOGLE_SERVICE_ACCOUNT_TYPE') or 'service_account',
        'project_id': config.get('GOOGLE_SERVICE_ACCOUNT_PROJECT_ID', ''),
        'private_key_id': config.get('GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY_ID', ''),
        # Chaves vindas de .env costumam ter '\n' escapado
        'private_key': private_key.replace('\\n', '\n'),
        'client_email': client_email,
        'client_id': config.get('GOOGLE_SERVICE_ACCOUNT_CLIENT_ID', ''),
        'token_uri': config.get('GOOGLE_SERVICE_ACCOUNT_TOKEN_URI') or 'https://oauth2.googleapis.com/token',
    }


def has_google_credentials(config: Mapping[str, Any]) -> bool:
    return bool(
        config.get('GOOGLE_SERVICE_ACCOUNT_KEY_PATH')
        or config.get('GOOGLE_APPLICATION_CREDENTIALS')
        or _service_account_info(config)
    )


def get_google_credentials(config: Mapping[str, Any]):
    """
    Obter credenciais da service account.

    Ordem: arquivo em GOOGLE_SERVICE_ACCOUNT_KEY_PATH, depois
    GOOGLE_APPLICATION_CREDENTIALS, depois variáveis individuais.
    Retorna None se nada estiver configurado.
    """
    key_path = config.get('GOOGLE_SERVICE_ACCOUNT_KEY_PATH') or config.get('GOOGLE_APPLICATION_CREDENTIALS')

    if key_path:
        creds = service_account.Credentials.from_service_account_file(key_path, scopes=GOOGLE_SCOPES)
    else:
        info = _service_account_info(config)
        if not info:
            return None
        creds = service_account.Credentials.from_service_account_info(info, scopes=GOOGLE_SCOPES)

    delegated_user = config.get('GOOGLE_DELEGATED_USER')
    if delegated_user:
        creds = creds.with_subject(delegated_user)

    return creds


def build_stores(config: Mapping[str, Any]) -> Tuple[GoogleDocumentStore, GoogleDriveFileStore]:
    """Cria os stores Google para uma requisição"""
    creds = get_google_credentials(config)
    if not creds:
        raise ConfigurationError('Google credentials are not configured')

    docs_service = build('docs', 'v1', credentials=creds, cache_discovery=False)
    drive_service = build('drive', 'v3', credentials=creds, cache_discovery=False)
    return GoogleDocumentStore(docs_service), GoogleDriveFileStore(drive_service)
