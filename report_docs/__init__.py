from flask import Flask
from flask_cors import CORS
import logging
import os
from report_docs.config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Configurar CORS
    allowed_origins = [
        'http://localhost:5173',  # Vite dev server
        'http://localhost:3000',  # Alternativa
    ]

    # Adicionar origins de variável de ambiente se existir
    env_origins = os.getenv('CORS_ORIGINS', '')
    if env_origins:
        allowed_origins.extend([origin.strip() for origin in env_origins.split(',')])

    CORS(app,
         resources={r"/api/*": {"origins": allowed_origins}},
         supports_credentials=False,  # Não precisa de credentials com Bearer token
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "OPTIONS"])

    from report_docs.routes import documents
    app.register_blueprint(documents.documents_bp)

    # Health check endpoint
    from report_docs.routes import health
    app.register_blueprint(health.bp)

    return app
