"""
Serviço de documentos: conversão de HTML, header/footer e exportação PDF.
"""

from .elements import (
    SegmentType,
    TextRun,
    ParagraphElement,
    ListItemElement,
    TableElement,
    RuleElement,
    PageBreakElement,
    ImageElement,
    UnsupportedElement,
    Document,
    Segment,
    parse_document,
    parse_content,
)
from .exceptions import (
    DocumentServiceError,
    ValidationError,
    ConfigurationError,
    DocumentAccessError,
)
from .handlers import (
    ContentReplaceHandler,
    DocumentCreationHandler,
    HeaderFooterHandler,
    PdfExportHandler,
)
from .settings import DocumentSettings
from .stores import DocumentStore, FileStore, FileInfo

__all__ = [
    'SegmentType',
    'TextRun',
    'ParagraphElement',
    'ListItemElement',
    'TableElement',
    'RuleElement',
    'PageBreakElement',
    'ImageElement',
    'UnsupportedElement',
    'Document',
    'Segment',
    'parse_document',
    'parse_content',
    'DocumentServiceError',
    'ValidationError',
    'ConfigurationError',
    'DocumentAccessError',
    'ContentReplaceHandler',
    'DocumentCreationHandler',
    'HeaderFooterHandler',
    'PdfExportHandler',
    'DocumentSettings',
    'DocumentStore',
    'FileStore',
    'FileInfo',
]
