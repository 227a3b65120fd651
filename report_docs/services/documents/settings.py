from dataclasses import dataclass
from typing import Mapping, Any, Optional


@dataclass(frozen=True)
class DocumentSettings:
    """Configuração explícita entregue aos handlers na construção"""
    template_id: Optional[str] = None
    pdf_folder_id: Optional[str] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'DocumentSettings':
        return cls(
            template_id=config.get('TEMPLATE_DOCUMENT_ID') or None,
            pdf_folder_id=config.get('PDF_FOLDER_ID') or None,
        )
