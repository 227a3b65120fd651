"""
Implementações Google (Docs API v1 / Drive API v3) dos stores.
"""

import io
import logging
from typing import Dict, Any, List, Optional, Tuple

from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from .batch_requests import (
    BODY_START_INDEX, HEADER_FOOTER_START_INDEX,
    build_insert_requests, clear_requests,
)
from .elements import (
    Document, DocumentElement, SegmentType,
    parse_document, supported_elements,
)
from .exceptions import DocumentServiceError
from .stores import (
    DocumentStore, FileStore, FileInfo,
    GOOGLE_DOCS_MIME_TYPE, PDF_MIME_TYPE,
)

logger = logging.getLogger(__name__)

FILE_FIELDS = 'id, name, parents, mimeType, webViewLink'

SEGMENT_STYLE_KEYS = {
    SegmentType.HEADER: ('defaultHeaderId', 'headers', 'createHeader', 'headerId'),
    SegmentType.FOOTER: ('defaultFooterId', 'footers', 'createFooter', 'footerId'),
}


def _quote(value: str) -> str:
    """Escapa um literal para a sintaxe de busca do Drive"""
    return value.replace('\\', '\\\\').replace("'", "\\'")


class GoogleDocumentStore(DocumentStore):
    """
    DocumentStore sobre a Docs API.

    ``clear`` e ``append`` acumulam requests por documento; ``save`` envia
    tudo em um único ``batchUpdate``.
    """

    def __init__(self, docs_service):
        self.docs = docs_service
        self._pending: Dict[str, List[Dict[str, Any]]] = {}

    def _fetch(self, document_id: str) -> Dict[str, Any]:
        return self.docs.documents().get(documentId=document_id).execute()

    def _batch_update(self, document_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.docs.documents().batchUpdate(
            documentId=document_id,
            body={'requests': requests},
        ).execute()

    def open(self, document_id: str) -> Document:
        return parse_document(self._fetch(document_id))

    def _segment_content(self, data, segment: SegmentType) -> Tuple[Optional[str], Optional[List[Dict]]]:
        """Retorna (segment_id, content) do segmento; content None se inexistente"""
        if segment == SegmentType.BODY:
            return None, data.get('body', {}).get('content', [])

        style_key, collection_key, _, _ = SEGMENT_STYLE_KEYS[segment]
        segment_id = data.get('documentStyle', {}).get(style_key)
        if not segment_id or segment_id not in data.get(collection_key, {}):
            return None, None
        return segment_id, data[collection_key][segment_id].get('content', [])

    def clear(self, document_id: str, segment: SegmentType = SegmentType.BODY):
        # Requests pendentes mudariam os índices lidos abaixo
        self.save(document_id)

        segment_id, content = self._segment_content(self._fetch(document_id), segment)
        if content is None:
            logger.debug(f"Documento {document_id} sem {segment.value}; nada a limpar")
            return

        start = BODY_START_INDEX if segment == SegmentType.BODY else HEADER_FOOTER_START_INDEX
        end = content[-1].get('endIndex', start + 1) if content else start + 1
        self._pending.setdefault(document_id, []).extend(clear_requests(start, end, segment_id))

    def ensure_segment(self, document_id: str, segment: SegmentType) -> Optional[str]:
        if segment == SegmentType.BODY:
            return None

        segment_id, content = self._segment_content(self._fetch(document_id), segment)
        if content is not None:
            return segment_id

        self.save(document_id)
        _, _, create_key, id_key = SEGMENT_STYLE_KEYS[segment]
        response = self._batch_update(document_id, [{create_key: {'type': 'DEFAULT'}}])
        segment_id = response['replies'][0][create_key][id_key]
        logger.info(f"{segment.value.capitalize()} criado no documento {document_id}: {segment_id}")
        return segment_id

    def append(
        self,
        document_id: str,
        elements: List[DocumentElement],
        segment: SegmentType = SegmentType.BODY,
    ) -> List[DocumentElement]:
        kept = supported_elements(elements, segment)
        if not kept:
            return kept

        if segment == SegmentType.BODY:
            segment_id, start = None, BODY_START_INDEX
        else:
            segment_id, content = self._segment_content(self._fetch(document_id), segment)
            if content is None:
                raise DocumentServiceError(
                    f"Document {document_id} has no {segment.value}; create it before appending"
                )
            start = HEADER_FOOTER_START_INDEX

        self._pending.setdefault(document_id, []).extend(
            build_insert_requests(kept, start, segment_id)
        )
        return kept

    def save(self, document_id: str):
        requests = self._pending.pop(document_id, [])
        if not requests:
            return
        logger.debug(f"Enviando {len(requests)} requests para o documento {document_id}")
        self._batch_update(document_id, requests)


class GoogleDriveFileStore(FileStore):
    """FileStore sobre a Drive API v3"""

    def __init__(self, drive_service):
        self.drive = drive_service

    @staticmethod
    def _to_file_info(data: Dict[str, Any]) -> FileInfo:
        return FileInfo(
            file_id=data.get('id'),
            name=data.get('name', ''),
            parents=data.get('parents', []),
            mime_type=data.get('mimeType'),
            web_view_link=data.get('webViewLink'),
        )

    def copy(self, file_id: str, name: str) -> str:
        result = self.drive.files().copy(
            fileId=file_id,
            body={'name': name},
            fields='id',
            supportsAllDrives=True,
        ).execute()
        return result['id']

    def convert_html(self, name: str, html: str) -> str:
        media = MediaIoBaseUpload(io.BytesIO(html.encode('utf-8')), mimetype='text/html', resumable=False)
        result = self.drive.files().create(
            body={'name': name, 'mimeType': GOOGLE_DOCS_MIME_TYPE},
            media_body=media,
            fields='id',
            supportsAllDrives=True,
        ).execute()
        return result['id']

    def delete(self, file_id: str):
        self.drive.files().delete(fileId=file_id, supportsAllDrives=True).execute()

    def trash(self, file_id: str):
        self.drive.files().update(
            fileId=file_id,
            body={'trashed': True},
            supportsAllDrives=True,
        ).execute()

    def get_metadata(self, file_id: str) -> FileInfo:
        data = self.drive.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        ).execute()
        return self._to_file_info(data)

    def list_by_name(self, name: str, folder_id: str, mime_type: Optional[str] = None) -> List[FileInfo]:
        query = f"name = '{_quote(name)}' and trashed = false and '{_quote(folder_id)}' in parents"
        if mime_type:
            query += f" and mimeType = '{_quote(mime_type)}'"

        files = []
        page_token = None
        while True:
            results = self.drive.files().list(
                q=query,
                fields=f"nextPageToken, files({FILE_FIELDS})",
                pageSize=100,
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            ).execute()
            files.extend(self._to_file_info(item) for item in results.get('files', []))
            page_token = results.get('nextPageToken')
            if not page_token:
                break
        return files

    def create_from_blob(
        self,
        name: str,
        data: bytes,
        mime_type: str = PDF_MIME_TYPE,
        folder_id: Optional[str] = None,
    ) -> FileInfo:
        file_metadata = {'name': name, 'mimeType': mime_type}
        if folder_id:
            file_metadata['parents'] = [folder_id]

        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=True)
        result = self.drive.files().create(
            body=file_metadata,
            media_body=media,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        ).execute()
        return self._to_file_info(result)

    def export_pdf(self, file_id: str) -> bytes:
        request = self.drive.files().export_media(fileId=file_id, mimeType=PDF_MIME_TYPE)

        file_io = io.BytesIO()
        downloader = MediaIoBaseDownload(file_io, request)

        done = False
        while not done:
            status, done = downloader.next_chunk()

        return file_io.getvalue()

    def share_with_link(self, file_id: str, role: str = 'writer'):
        self.drive.permissions().create(
            fileId=file_id,
            body={'type': 'anyone', 'role': role},
            fields='id',
            supportsAllDrives=True,
        ).execute()
