"""
Interfaces dos stores de documentos e arquivos.

Os handlers dependem apenas destas interfaces; as implementações Google
ficam em ``google_stores`` e os testes usam fakes em memória.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .elements import Document, DocumentElement, SegmentType

GOOGLE_DOCS_MIME_TYPE = 'application/vnd.google-apps.document'
PDF_MIME_TYPE = 'application/pdf'

# Alias da Drive API para a pasta raiz do usuário
ROOT_FOLDER_ID = 'root'


@dataclass
class FileInfo:
    file_id: str
    name: str = ''
    parents: List[str] = field(default_factory=list)
    mime_type: Optional[str] = None
    web_view_link: Optional[str] = None


class DocumentStore(ABC):
    """Acesso ao conteúdo de documentos (Docs API)"""

    @abstractmethod
    def open(self, document_id: str) -> Document:
        """Lê o documento; falha se não existir ou não houver acesso"""
        pass

    @abstractmethod
    def clear(self, document_id: str, segment: SegmentType = SegmentType.BODY):
        pass

    @abstractmethod
    def ensure_segment(self, document_id: str, segment: SegmentType) -> Optional[str]:
        """Cria header/footer padrão se ausente e retorna o ID do segmento"""
        pass

    @abstractmethod
    def append(
        self,
        document_id: str,
        elements: List[DocumentElement],
        segment: SegmentType = SegmentType.BODY,
    ) -> List[DocumentElement]:
        """Anexa os elementos na ordem; retorna os que foram de fato anexados"""
        pass

    @abstractmethod
    def save(self, document_id: str):
        pass


class FileStore(ABC):
    """Operações de arquivo (Drive API)"""

    @abstractmethod
    def copy(self, file_id: str, name: str) -> str:
        pass

    @abstractmethod
    def convert_html(self, name: str, html: str) -> str:
        """Cria um Google Doc a partir de HTML (conversão no upload)"""
        pass

    @abstractmethod
    def delete(self, file_id: str):
        pass

    @abstractmethod
    def trash(self, file_id: str):
        pass

    @abstractmethod
    def get_metadata(self, file_id: str) -> FileInfo:
        pass

    @abstractmethod
    def list_by_name(self, name: str, folder_id: str, mime_type: Optional[str] = None) -> List[FileInfo]:
        """
        Arquivos não excluídos com o nome exato dentro de ``folder_id``.

        A busca é sempre restrita a uma pasta; ``ROOT_FOLDER_ID`` representa
        a raiz do Drive. Com ``mime_type`` só arquivos desse tipo retornam.
        """
        pass

    @abstractmethod
    def create_from_blob(
        self,
        name: str,
        data: bytes,
        mime_type: str,
        folder_id: Optional[str] = None,
    ) -> FileInfo:
        pass

    @abstractmethod
    def export_pdf(self, file_id: str) -> bytes:
        pass

    @abstractmethod
    def share_with_link(self, file_id: str, role: str = 'writer'):
        """Qualquer pessoa com o link pode acessar com o papel informado"""
        pass
