import os
from dotenv import load_dotenv

load_dotenv()


def _optional(name):
    """Lê variável de ambiente tratando string vazia como ausente"""
    value = os.getenv(name, '').strip()
    return value or None


class Config:
    # Security
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    # Quando vazio, as rotas ficam abertas (mesmo comportamento do web app original)
    BACKEND_API_TOKEN = os.getenv('BACKEND_API_TOKEN', '')

    # Flask
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    DEBUG = os.getenv('FLASK_ENV') == 'development'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Documentos
    TEMPLATE_DOCUMENT_ID = _optional('TEMPLATE_DOCUMENT_ID')
    PDF_FOLDER_ID = _optional('PDF_FOLDER_ID')

    # Google Service Account
    # Opção 1: Variáveis de ambiente individuais
    GOOGLE_SERVICE_ACCOUNT_TYPE = os.getenv('GOOGLE_SERVICE_ACCOUNT_TYPE', 'service_account')
    GOOGLE_SERVICE_ACCOUNT_PROJECT_ID = os.getenv('GOOGLE_SERVICE_ACCOUNT_PROJECT_ID', '')
    GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY_ID = os.getenv('GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY_ID', '')
    GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY = os.getenv('GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY', '')
    GOOGLE_SERVICE_ACCOUNT_CLIENT_EMAIL = os.getenv('GOOGLE_SERVICE_ACCOUNT_CLIENT_EMAIL', '')
    GOOGLE_SERVICE_ACCOUNT_CLIENT_ID = os.getenv('GOOGLE_SERVICE_ACCOUNT_CLIENT_ID', '')
    GOOGLE_SERVICE_ACCOUNT_TOKEN_URI = os.getenv('GOOGLE_SERVICE_ACCOUNT_TOKEN_URI', 'https://oauth2.googleapis.com/token')

    # Opção 2: Caminho para arquivo JSON (alternativa)
    GOOGLE_SERVICE_ACCOUNT_KEY_PATH = os.getenv('GOOGLE_SERVICE_ACCOUNT_KEY_PATH', '')
    GOOGLE_APPLICATION_CREDENTIALS = os.getenv('GOOGLE_APPLICATION_CREDENTIALS', '')

    # Domain-wide delegation (opcional)
    GOOGLE_DELEGATED_USER = _optional('GOOGLE_DELEGATED_USER')
