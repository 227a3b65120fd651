"""
Pytest fixtures: stores em memória e app Flask de teste
"""

import copy
import itertools
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Dict, List, Optional

import pytest

from report_docs import create_app
from report_docs.config import Config
from report_docs.routes.documents import STORES_EXTENSION
from report_docs.services.documents import (
    Document, Segment, SegmentType, DocumentSettings, FileInfo,
    DocumentStore, FileStore,
    ParagraphElement, ListItemElement, TableElement, RuleElement,
    PageBreakElement, ImageElement, TextRun,
)
from report_docs.services.documents.elements import supported_elements

TEMPLATE_ID = 'TEMPLATE'
NOT_FOUND_MESSAGE = 'Requested entity was not found.'


class SimpleHtmlConverter(HTMLParser):
    """Conversão HTML -> elementos suficiente para os testes"""

    HEADINGS = {f'h{level}': f'HEADING_{level}' for level in range(1, 7)}

    def __init__(self):
        super().__init__()
        self.elements = []
        self._text = None
        self._style = None
        self._lists = []
        self._rows = None

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag in self.HEADINGS or tag == 'p' or tag == 'li' or tag in ('td', 'th'):
            self._text = []
            self._style = self.HEADINGS.get(tag, 'NORMAL_TEXT')
        elif tag in ('ul', 'ol'):
            self._lists.append(tag == 'ol')
        elif tag == 'table':
            self._rows = []
        elif tag == 'tr' and self._rows is not None:
            self._rows.append([])
        elif tag == 'hr':
            self.elements.append(RuleElement())
        elif tag == 'img':
            self.elements.append(ImageElement(uri=attrs.get('src', '')))
        elif tag == 'br' and attrs.get('class') == 'page-break':
            self.elements.append(PageBreakElement())

    def handle_endtag(self, tag):
        if tag in ('td', 'th') and self._rows is not None:
            self._rows[-1].append(''.join(self._text))
            self._text = None
        elif tag == 'li':
            self.elements.append(ListItemElement(
                runs=[TextRun(''.join(self._text))],
                nesting_level=max(len(self._lists) - 1, 0),
                ordered=self._lists[-1] if self._lists else False,
            ))
            self._text = None
        elif tag in self.HEADINGS or tag == 'p':
            self.elements.append(ParagraphElement(runs=[TextRun(''.join(self._text))], named_style=self._style))
            self._text = None
        elif tag in ('ul', 'ol') and self._lists:
            self._lists.pop()
        elif tag == 'table' and self._rows is not None:
            self.elements.append(TableElement(rows=self._rows))
            self._rows = None

    def handle_data(self, data):
        if self._text is not None:
            self._text.append(data)


def convert_html(html: str):
    parser = SimpleHtmlConverter()
    parser.feed(html)
    parser.close()
    return parser.elements


class FakeDocumentStore(DocumentStore):
    """DocumentStore em memória que registra as chamadas"""

    def __init__(self):
        self.documents: Dict[str, Document] = {}
        self.inaccessible = set()
        self.calls = []
        self.saved = []

    def add(self, document: Document) -> Document:
        self.documents[document.document_id] = document
        return document

    def _get(self, document_id) -> Document:
        if document_id in self.inaccessible or document_id not in self.documents:
            raise Exception(NOT_FOUND_MESSAGE)
        return self.documents[document_id]

    def open(self, document_id):
        self.calls.append(('open', document_id))
        return copy.deepcopy(self._get(document_id))

    def clear(self, document_id, segment=SegmentType.BODY):
        self.calls.append(('clear', document_id, segment))
        document = self._get(document_id)
        if segment == SegmentType.BODY:
            document.body = []
        elif document.segment(segment) is not None:
            document.segment(segment).elements = []

    def ensure_segment(self, document_id, segment):
        self.calls.append(('ensure_segment', document_id, segment))
        document = self._get(document_id)
        if segment == SegmentType.HEADER and document.header is None:
            document.header = Segment(segment_id=f'{document_id}-header')
        elif segment == SegmentType.FOOTER and document.footer is None:
            document.footer = Segment(segment_id=f'{document_id}-footer')
        existing = document.segment(segment)
        return existing.segment_id if existing else None

    def append(self, document_id, elements, segment=SegmentType.BODY):
        self.calls.append(('append', document_id, segment))
        document = self._get(document_id)
        kept = supported_elements(elements, segment)
        if segment == SegmentType.BODY:
            document.body.extend(copy.deepcopy(kept))
        else:
            document.segment(segment).elements.extend(copy.deepcopy(kept))
        return kept

    def save(self, document_id):
        self.calls.append(('save', document_id))
        self.saved.append(document_id)


@dataclass
class FakeFile:
    info: FileInfo
    data: bytes = b''
    trashed: bool = False


class FakeFileStore(FileStore):
    """FileStore em memória ligado ao FakeDocumentStore"""

    def __init__(self, document_store: FakeDocumentStore):
        self.document_store = document_store
        self.files: Dict[str, FakeFile] = {}
        self.calls = []
        self.converted_ids: List[str] = []
        self.shared = {}
        self.fail_delete = False
        self._ids = itertools.count(1)

    def _new_id(self, prefix):
        return f'{prefix}-{next(self._ids)}'

    def add_document(self, document: Document, parents: Optional[List[str]] = None) -> Document:
        self.document_store.add(document)
        self.files[document.document_id] = FakeFile(
            info=FileInfo(file_id=document.document_id, name=document.title, parents=parents or [])
        )
        return document

    def _get(self, file_id) -> FakeFile:
        if file_id in self.document_store.inaccessible or file_id not in self.files:
            raise Exception(NOT_FOUND_MESSAGE)
        return self.files[file_id]

    def copy(self, file_id, name):
        self.calls.append(('copy', file_id, name))
        source = self._get(file_id)
        new_id = self._new_id('copy')
        document = copy.deepcopy(self.document_store.documents[file_id])
        document.document_id = new_id
        document.title = name
        self.add_document(document, parents=list(source.info.parents))
        return new_id

    def convert_html(self, name, html):
        self.calls.append(('convert_html', name))
        temp_id = self._new_id('tmp')
        self.add_document(Document(document_id=temp_id, title=name, body=convert_html(html)))
        self.converted_ids.append(temp_id)
        return temp_id

    def delete(self, file_id):
        self.calls.append(('delete', file_id))
        if self.fail_delete:
            raise Exception('Internal error while deleting file')
        self.files.pop(file_id, None)
        self.document_store.documents.pop(file_id, None)

    def trash(self, file_id):
        self.calls.append(('trash', file_id))
        self._get(file_id).trashed = True

    def get_metadata(self, file_id):
        self.calls.append(('get_metadata', file_id))
        return copy.deepcopy(self._get(file_id).info)

    def list_by_name(self, name, folder_id, mime_type=None):
        self.calls.append(('list_by_name', name, folder_id))
        return [
            copy.deepcopy(item.info) for item in self.files.values()
            if not item.trashed
            and item.info.name == name
            and folder_id in item.info.parents
            and (mime_type is None or item.info.mime_type == mime_type)
        ]

    def create_from_blob(self, name, data, mime_type, folder_id=None):
        self.calls.append(('create_from_blob', name, folder_id))
        file_id = self._new_id('file')
        info = FileInfo(
            file_id=file_id,
            name=name,
            parents=[folder_id] if folder_id else [],
            mime_type=mime_type,
            web_view_link=f'https://drive.google.com/file/d/{file_id}/view?usp=drivesdk',
        )
        self.files[file_id] = FakeFile(info=info, data=data)
        return copy.deepcopy(info)

    def export_pdf(self, file_id):
        self.calls.append(('export_pdf', file_id))
        return b'%PDF-1.4 ' + self._get(file_id).info.name.encode('utf-8')

    def share_with_link(self, file_id, role='writer'):
        self.calls.append(('share_with_link', file_id, role))
        self._get(file_id)
        self.shared[file_id] = role

    def active_files(self, name=None):
        return [
            item for item in self.files.values()
            if not item.trashed and (name is None or item.info.name == name)
        ]


@pytest.fixture
def document_store():
    return FakeDocumentStore()


@pytest.fixture
def file_store(document_store):
    return FakeFileStore(document_store)


@pytest.fixture
def template_document(file_store):
    """Template com header, footer e corpo"""
    return file_store.add_document(Document(
        document_id=TEMPLATE_ID,
        title='Suitability Report Template',
        body=[ParagraphElement(runs=[TextRun('Template body')])],
        header=Segment(segment_id='h.template', elements=[
            ParagraphElement(runs=[TextRun('ACME Wealth')], named_style='HEADING_2'),
            ImageElement(uri='https://example.com/logo.png', width_pt=120, height_pt=40),
        ]),
        footer=Segment(segment_id='f.template', elements=[
            ParagraphElement(runs=[TextRun('Confidential')]),
            PageBreakElement(),
            TableElement(rows=[['Page', '1']]),
        ]),
    ), parents=['templates-folder'])


@pytest.fixture
def settings():
    return DocumentSettings(template_id=TEMPLATE_ID)


class TestConfig(Config):
    TESTING = True
    BACKEND_API_TOKEN = ''
    TEMPLATE_DOCUMENT_ID = TEMPLATE_ID
    PDF_FOLDER_ID = None


@pytest.fixture
def app(document_store, file_store):
    app = create_app(TestConfig)
    app.extensions[STORES_EXTENSION] = (document_store, file_store)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
