"""
Handlers de documentos.

Cada handler é uma sequência linear de chamadas aos stores com uma única
fronteira de erro: erros de acesso da plataforma viram
DocumentAccessError, o resto é relançado como está.
"""

import logging
import uuid
from typing import Dict, Any, List, Optional

from .elements import DocumentElement, SegmentType
from .exceptions import ValidationError, ConfigurationError, raise_for_access
from .settings import DocumentSettings
from .stores import DocumentStore, FileStore, FileInfo, PDF_MIME_TYPE, ROOT_FOLDER_ID

logger = logging.getLogger(__name__)

TEMP_FILE_PREFIX = 'tmp-html-conversion-'


def document_url(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit?usp=sharing"


def pdf_url(file_info: FileInfo) -> str:
    return file_info.web_view_link or f"https://drive.google.com/file/d/{file_info.file_id}/view"


def pdf_file_name(name: Optional[str]) -> str:
    """Nome do PDF a partir do nome do documento, garantindo o sufixo .pdf"""
    name = name or 'document'
    if name.lower().endswith('.pdf'):
        return name
    return f"{name}.pdf"


def require_field(value: Any, field: str) -> str:
    """Valida campo obrigatório (string não vazia) antes de qualquer chamada externa"""
    if value is None:
        raise ValidationError(field)
    if not isinstance(value, str):
        raise ValidationError(field, f"{field} must be a string")
    if not value.strip():
        raise ValidationError(field)
    return value.strip()


class BaseDocumentHandler:
    """Dependências e procedimentos comuns aos handlers"""

    def __init__(
        self,
        document_store: DocumentStore,
        file_store: FileStore,
        settings: DocumentSettings = None,
    ):
        self.document_store = document_store
        self.file_store = file_store
        self.settings = settings or DocumentSettings()

    def _require_template_id(self) -> str:
        if not self.settings.template_id:
            raise ConfigurationError(
                'Template document ID is not configured. Set TEMPLATE_DOCUMENT_ID.'
            )
        return self.settings.template_id

    def render_html_into(self, document_id: str, html: str) -> List[DocumentElement]:
        """
        Substitui o corpo do documento pelo conteúdo convertido do HTML.

        O HTML é enviado ao Drive como Google Doc temporário, seus elementos
        são copiados na ordem para o destino e o temporário é sempre
        removido, mesmo se a cópia falhar.
        """
        temp_name = f"{TEMP_FILE_PREFIX}{document_id}-{uuid.uuid4().hex[:8]}"
        temp_id = self.file_store.convert_html(temp_name, html)
        logger.debug(f"Documento temporário {temp_id} criado para {document_id}")

        try:
            converted = self.document_store.open(temp_id)
            self.document_store.clear(document_id, SegmentType.BODY)
            appended = self.document_store.append(document_id, converted.body, SegmentType.BODY)
            self.document_store.save(document_id)
        finally:
            self._discard_temp_file(temp_id)

        logger.info(
            f"{len(appended)} de {len(converted.body)} elementos copiados para {document_id}"
        )
        return appended

    def _discard_temp_file(self, file_id: str):
        try:
            self.file_store.delete(file_id)
        except Exception as e:
            logger.warning(f"Falha ao remover documento temporário {file_id}: {e}")


class ContentReplaceHandler(BaseDocumentHandler):
    """Limpa o corpo de um documento e o repopula a partir de HTML"""

    @staticmethod
    def validate(doc_id: Any, html_content: Any) -> str:
        doc_id = require_field(doc_id, 'docId')
        require_field(html_content, 'htmlContent')
        return doc_id

    def handle(self, doc_id: Any, html_content: Any) -> Dict[str, Any]:
        doc_id = self.validate(doc_id, html_content)

        logger.info(f"Substituindo conteúdo do documento {doc_id}")
        try:
            self.document_store.open(doc_id)
            self.render_html_into(doc_id, html_content)
        except Exception as e:
            raise_for_access(doc_id, e)

        return {'success': True, 'docId': doc_id, 'url': document_url(doc_id)}


class DocumentCreationHandler(BaseDocumentHandler):
    """Duplica o template, preenche com HTML e compartilha por link"""

    @staticmethod
    def validate(html_content: Any, file_name: Any) -> str:
        require_field(html_content, 'htmlContent')
        return require_field(file_name, 'fileName')

    def handle(self, html_content: Any, file_name: Any) -> Dict[str, Any]:
        file_name = self.validate(html_content, file_name)
        template_id = self._require_template_id()

        logger.info(f"Criando documento '{file_name}' a partir do template {template_id}")
        try:
            new_id = self.file_store.copy(template_id, file_name)
        except Exception as e:
            raise_for_access(template_id, e)

        try:
            self.render_html_into(new_id, html_content)
            self.file_store.share_with_link(new_id, 'writer')
        except Exception as e:
            raise_for_access(new_id, e)

        logger.info(f"Documento {new_id} criado")
        return {'success': True, 'docId': new_id, 'url': document_url(new_id)}


class HeaderFooterHandler(BaseDocumentHandler):
    """Copia header e footer do template para o documento; o corpo não é alterado"""

    SEGMENTS = (SegmentType.HEADER, SegmentType.FOOTER)

    @staticmethod
    def validate(doc_id: Any) -> str:
        return require_field(doc_id, 'docId')

    def handle(self, doc_id: Any) -> Dict[str, Any]:
        doc_id = self.validate(doc_id)
        template_id = self._require_template_id()

        try:
            template = self.document_store.open(template_id)
        except Exception as e:
            raise_for_access(template_id, e)

        logger.info(f"Aplicando header/footer do template {template_id} em {doc_id}")
        try:
            self.document_store.open(doc_id)
            for segment in self.SEGMENTS:
                source = template.segment(segment)
                if source is None:
                    logger.info(f"Template {template_id} não possui {segment.value}")
                    continue
                self.document_store.ensure_segment(doc_id, segment)
                self.document_store.clear(doc_id, segment)
                self.document_store.append(doc_id, source.elements, segment)
            self.document_store.save(doc_id)
        except Exception as e:
            raise_for_access(doc_id, e)

        return {'success': True, 'docId': doc_id, 'url': document_url(doc_id)}


class PdfExportHandler(BaseDocumentHandler):
    """Exporta o documento como PDF substituindo arquivo homônimo na pasta destino"""

    @staticmethod
    def validate(doc_id: Any) -> str:
        return require_field(doc_id, 'docId')

    def handle(self, doc_id: Any) -> Dict[str, Any]:
        doc_id = self.validate(doc_id)

        try:
            source = self.file_store.get_metadata(doc_id)
            name = pdf_file_name(source.name)
            # Sem pasta configurada nem pasta do documento, o PDF fica na raiz do Drive
            folder_id = self.settings.pdf_folder_id or (source.parents[0] if source.parents else ROOT_FOLDER_ID)

            pdf_bytes = self.file_store.export_pdf(doc_id)

            for existing in self.file_store.list_by_name(name, folder_id, PDF_MIME_TYPE):
                logger.info(f"Movendo PDF anterior {existing.file_id} para a lixeira")
                self.file_store.trash(existing.file_id)

            created = self.file_store.create_from_blob(name, pdf_bytes, PDF_MIME_TYPE, folder_id)
        except Exception as e:
            raise_for_access(doc_id, e)

        logger.info(f"PDF {created.file_id} gerado para o documento {doc_id}")
        return {'success': True, 'pdfFileId': created.file_id, 'url': pdf_url(created)}
