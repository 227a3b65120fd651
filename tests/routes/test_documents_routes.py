"""
Testes das rotas HTTP de documentos (Flask test client + stores em memória)
"""
import pytest
from unittest.mock import patch

from report_docs.services.documents import Document, ParagraphElement, TextRun


@pytest.fixture
def lead_document(file_store):
    return file_store.add_document(Document(
        document_id='D1',
        title='Lead report',
        body=[ParagraphElement(runs=[TextRun('Old')])],
    ), parents=['reports-folder'])


class TestReplaceContentRoute:
    """POST /api/v1/documents/replace-content"""

    def test_end_to_end(self, client, document_store, lead_document):
        response = client.post('/api/v1/documents/replace-content', json={
            'docId': 'D1',
            'htmlContent': '<h1>Hi</h1><p>Body</p>',
        })

        assert response.status_code == 200
        assert response.get_json() == {
            'success': True,
            'docId': 'D1',
            'url': 'https://docs.google.com/document/d/D1/edit?usp=sharing',
        }
        body = document_store.documents['D1'].body
        assert [(e.named_style, e.text) for e in body] == [('HEADING_1', 'Hi'), ('NORMAL_TEXT', 'Body')]

    @pytest.mark.parametrize('payload,message', [
        ({'htmlContent': '<p>x</p>'}, 'docId is required'),
        ({'docId': '  ', 'htmlContent': '<p>x</p>'}, 'docId is required'),
        ({'docId': 'D1'}, 'htmlContent is required'),
        ({'docId': 'D1', 'htmlContent': ''}, 'htmlContent is required'),
    ])
    def test_validation_failure(self, client, document_store, file_store, payload, message):
        with patch('report_docs.routes.documents.build_stores') as mock_build:
            response = client.post('/api/v1/documents/replace-content', json=payload)

        assert response.status_code == 200
        assert response.get_json() == {'success': False, 'error': message}
        assert document_store.calls == []
        assert file_store.calls == []
        mock_build.assert_not_called()

    def test_body_must_be_json_object(self, client):
        response = client.post('/api/v1/documents/replace-content', data='not json', content_type='text/plain')

        assert response.status_code == 200
        assert response.get_json() == {'success': False, 'error': 'Request body must be a JSON object'}

    def test_inaccessible_document(self, client):
        response = client.post('/api/v1/documents/replace-content', json={
            'docId': 'UNKNOWN',
            'htmlContent': '<p>x</p>',
        })

        data = response.get_json()
        assert response.status_code == 200
        assert data['success'] is False
        assert 'UNKNOWN' in data['error']
        assert 'permissions' in data['error']

    def test_unexpected_error_returns_error_payload(self, client, file_store, lead_document):
        with patch.object(file_store, 'convert_html', side_effect=RuntimeError('Conversion backend down')):
            response = client.post('/api/v1/documents/replace-content', json={
                'docId': 'D1',
                'htmlContent': '<p>x</p>',
            })

        assert response.status_code == 200
        assert response.get_json() == {'success': False, 'error': 'Conversion backend down'}


class TestCreateRoute:
    """POST /api/v1/documents/create"""

    def test_create(self, client, document_store, file_store, template_document):
        response = client.post('/api/v1/documents/create', json={
            'htmlContent': '<p>Strategy</p>',
            'fileName': 'Report - Jane',
        })

        data = response.get_json()
        assert data['success'] is True
        assert data['url'] == f"https://docs.google.com/document/d/{data['docId']}/edit?usp=sharing"
        assert document_store.documents[data['docId']].title == 'Report - Jane'
        assert file_store.shared[data['docId']] == 'writer'

    def test_missing_template_configuration(self, app, client, template_document):
        app.config['TEMPLATE_DOCUMENT_ID'] = None

        response = client.post('/api/v1/documents/create', json={
            'htmlContent': '<p>x</p>',
            'fileName': 'Report',
        })

        data = response.get_json()
        assert data['success'] is False
        assert 'TEMPLATE_DOCUMENT_ID' in data['error']


class TestHeaderFooterRoute:
    """POST /api/v1/documents/header-footer"""

    def test_apply(self, client, document_store, template_document, lead_document):
        response = client.post('/api/v1/documents/header-footer', json={'docId': 'D1'})

        assert response.get_json()['success'] is True
        document = document_store.documents['D1']
        assert document.header.elements[0].text == 'ACME Wealth'
        assert document.body[0].text == 'Old'


class TestExportPdfRoute:
    """POST /api/v1/documents/export-pdf"""

    def test_export(self, client, file_store, lead_document):
        response = client.post('/api/v1/documents/export-pdf', json={'docId': 'D1'})

        data = response.get_json()
        assert data['success'] is True
        assert data['pdfFileId'] in file_store.files
        assert data['url'].startswith('https://drive.google.com/file/d/')

    def test_export_twice_leaves_one_pdf(self, client, file_store, lead_document):
        client.post('/api/v1/documents/export-pdf', json={'docId': 'D1'})
        client.post('/api/v1/documents/export-pdf', json={'docId': 'D1'})

        assert len(file_store.active_files('Lead report.pdf')) == 1

    def test_uses_configured_folder(self, app, client, file_store, lead_document):
        app.config['PDF_FOLDER_ID'] = 'pdf-folder'

        data = client.post('/api/v1/documents/export-pdf', json={'docId': 'D1'}).get_json()

        assert file_store.files[data['pdfFileId']].info.parents == ['pdf-folder']


class TestUpdateRoute:
    """POST /api/v1/documents/update despacha pela presença de htmlContent"""

    def test_with_html_replaces_content(self, client, document_store, lead_document):
        response = client.post('/api/v1/documents/update', json={
            'docId': 'D1',
            'htmlContent': '<p>New</p>',
            'action': 'header-footer',
        })

        assert response.get_json()['success'] is True
        assert [e.text for e in document_store.documents['D1'].body] == ['New']
        assert document_store.documents['D1'].header is None

    def test_without_html_applies_header_footer(self, client, document_store, template_document, lead_document):
        response = client.post('/api/v1/documents/update', json={'docId': 'D1'})

        assert response.get_json()['success'] is True
        assert document_store.documents['D1'].header is not None
        assert [e.text for e in document_store.documents['D1'].body] == ['Old']

    def test_blank_html_is_validation_error(self, client, document_store, lead_document):
        response = client.post('/api/v1/documents/update', json={'docId': 'D1', 'htmlContent': ''})

        assert response.get_json() == {'success': False, 'error': 'htmlContent is required'}
        assert document_store.calls == []


class TestAuth:
    """Bearer token opcional"""

    def test_token_required_when_configured(self, app, client, lead_document):
        app.config['BACKEND_API_TOKEN'] = 'secret'

        response = client.post('/api/v1/documents/export-pdf', json={'docId': 'D1'})

        assert response.status_code == 401

    def test_invalid_token(self, app, client, lead_document):
        app.config['BACKEND_API_TOKEN'] = 'secret'

        response = client.post(
            '/api/v1/documents/export-pdf',
            json={'docId': 'D1'},
            headers={'Authorization': 'Bearer wrong'},
        )

        assert response.status_code == 401
        assert response.get_json()['error'] == 'Invalid token'

    def test_valid_token(self, app, client, lead_document):
        app.config['BACKEND_API_TOKEN'] = 'secret'

        response = client.post(
            '/api/v1/documents/export-pdf',
            json={'docId': 'D1'},
            headers={'Authorization': 'Bearer secret'},
        )

        assert response.status_code == 200
        assert response.get_json()['success'] is True


class TestHealth:
    """GET /api/health"""

    def test_health(self, client):
        response = client.get('/api/health')

        data = response.get_json()
        assert response.status_code == 200
        assert data['status'] == 'healthy'
        assert data['template_configured'] is True
