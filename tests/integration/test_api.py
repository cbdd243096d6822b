import json
from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.analysis.exceptions import UpstreamUnavailableError
from app.config.settings import Settings
from app.extraction.extractor import ContentExtractor
from app.main import create_app

pytestmark = pytest.mark.integration


@pytest.fixture()
def client(test_settings: Settings, mock_client: AsyncMock) -> Iterator[TestClient]:
    with TestClient(create_app(test_settings, client=mock_client)) as test_client:
        yield test_client


def _pdf_upload(content: bytes, name: str = "doc.pdf") -> dict[str, tuple[str, bytes, str]]:
    return {"file": (name, content, "application/pdf")}


class TestHealth:
    def test_health_needs_no_auth(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "OK"}


class TestMultiDocumentEndpoint:
    def test_single_page_invoice(
        self, client, auth_headers, mock_client, make_document, invoice_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = json.dumps(
            {"totalPages": 1, "documents": [make_document(1, 1)]}
        )
        response = client.post(
            "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["fileType"] == "application/pdf"
        assert body["numPages"] == 1
        assert body["content"]["totalPages"] == 1
        documents = body["content"]["documents"]
        assert [(d["startPage"], d["endPage"]) for d in documents] == [(1, 1)]
        user_content = mock_client.create_chat_completion.call_args.kwargs["user_content"]
        assert "INV-2024-0042" in user_content

    def test_scanned_pdf_page_count_comes_from_file(
        self, client, auth_headers, mock_client, make_document, scanned_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = json.dumps(
            {"totalPages": 3, "documents": [make_document(1, 2), make_document(3, 4)]}
        )
        response = client.post(
            "/upload", files=_pdf_upload(scanned_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["numPages"] == 4
        assert body["content"]["totalPages"] == 4
        ranges = [(d["startPage"], d["endPage"]) for d in body["content"]["documents"]]
        assert ranges == [(1, 2), (3, 4)]
        parts = mock_client.create_chat_completion.call_args.kwargs["user_content"]
        assert parts[1]["type"] == "file"

    def test_image_upload(
        self, client, auth_headers, mock_client, make_document, large_png_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = json.dumps(
            {"totalPages": 1, "documents": [make_document(1, 1)]}
        )
        response = client.post(
            "/process-document",
            files={"file": ("scan.png", large_png_bytes, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["numPages"] == 1
        parts = mock_client.create_chat_completion.call_args.kwargs["user_content"]
        assert parts[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


class TestSingleDocumentEndpoint:
    def test_returns_data_envelope(
        self, client, auth_headers, mock_client, make_document, invoice_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = json.dumps(make_document(1, 1))
        response = client.post(
            "/analyze", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["data"]["documentDetails"]["caseNumber"] == "INV-1"
        assert "content" not in body


class TestPageSplitterEndpoint:
    def test_returns_bare_boundaries(
        self, client, auth_headers, mock_client, multi_page_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = json.dumps(
            {
                "totalPages": 5,
                "totalDocuments": 2,
                "documentBoundaries": [
                    {"documentNumber": 1, "startPage": 1},
                    {"documentNumber": 2, "startPage": 2},
                ],
            }
        )
        response = client.post(
            "/page-splitter", files=_pdf_upload(multi_page_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json() == {
            "totalPages": 2,
            "totalDocuments": 2,
            "documentBoundaries": [
                {"documentNumber": 1, "startPage": 1},
                {"documentNumber": 2, "startPage": 2},
            ],
        }

    def test_rejects_images(self, client, auth_headers, mock_client, small_png_bytes) -> None:
        response = client.post(
            "/page-splitter",
            files={"file": ("scan.png", small_png_bytes, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["error"]
        mock_client.create_chat_completion.assert_not_called()


class TestAuthentication:
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "test-secret"}],
    )
    def test_rejects_bad_credentials(
        self, client, mock_client, invoice_pdf_bytes, headers
    ) -> None:
        with patch.object(ContentExtractor, "extract") as mock_extract:
            response = client.post(
                "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=headers
            )
        assert response.status_code == 403
        assert response.json() == {"error": "Unauthorized access"}
        mock_extract.assert_not_called()
        mock_client.create_chat_completion.assert_not_called()

    def test_empty_secret_rejects_every_request(
        self, test_settings, mock_client, invoice_pdf_bytes
    ) -> None:
        settings = test_settings.model_copy(update={"shared_secret": ""})
        with TestClient(create_app(settings, client=mock_client)) as test_client:
            response = test_client.post(
                "/analyze",
                files=_pdf_upload(invoice_pdf_bytes),
                headers={"Authorization": "Bearer "},
            )
        assert response.status_code == 403


class TestCorsAndMethods:
    @pytest.mark.parametrize(
        "path", ["/health", "/analyze", "/process-document", "/upload", "/page-splitter"]
    )
    def test_preflight(self, client, path: str) -> None:
        response = client.options(path)
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Authorization" in response.headers["Access-Control-Allow-Headers"]
        assert "POST" in response.headers["Access-Control-Allow-Methods"]

    def test_get_on_upload_path_is_405(self, client, auth_headers) -> None:
        response = client.get("/process-document", headers=auth_headers)
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_success_response_carries_cors_headers(self, client) -> None:
        assert client.get("/health").headers["Access-Control-Allow-Origin"] == "*"


class TestRequestErrors:
    def test_missing_file_is_400(self, client, auth_headers, mock_client) -> None:
        response = client.post("/process-document", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "No file found in the request"
        mock_client.create_chat_completion.assert_not_called()

    def test_empty_file_is_400(self, client, auth_headers) -> None:
        response = client.post("/process-document", files=_pdf_upload(b""), headers=auth_headers)
        assert response.status_code == 400

    def test_oversized_file_is_400(self, test_settings, mock_client, auth_headers) -> None:
        settings = test_settings.model_copy(update={"max_upload_bytes": 10})
        with TestClient(create_app(settings, client=mock_client)) as test_client:
            response = test_client.post(
                "/process-document", files=_pdf_upload(b"x" * 11), headers=auth_headers
            )
        assert response.status_code == 400
        assert "upload limit" in response.json()["error"]

    def test_unsupported_type_is_400(self, client, auth_headers, mock_client) -> None:
        response = client.post(
            "/process-document",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "Only PDF files and images are supported" in response.json()["error"]
        mock_client.create_chat_completion.assert_not_called()

    def test_unreadable_pdf_is_500(self, client, auth_headers) -> None:
        response = client.post(
            "/process-document", files=_pdf_upload(b"%PDF-garbage"), headers=auth_headers
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process file"


class TestAnalysisErrors:
    def test_malformed_reply_returns_raw_text(
        self, client, auth_headers, mock_client, invoice_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = "Sorry, I cannot help."
        response = client.post(
            "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to parse analysis results"
        assert "Invalid JSON response" in body["errorMessage"]
        assert body["rawResponse"] == "Sorry, I cannot help."

    def test_raw_reply_can_be_hidden(
        self, test_settings, mock_client, auth_headers, invoice_pdf_bytes
    ) -> None:
        settings = test_settings.model_copy(update={"expose_raw_response": False})
        mock_client.create_chat_completion.return_value = "not json"
        with TestClient(create_app(settings, client=mock_client)) as test_client:
            response = test_client.post(
                "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
            )
        assert response.status_code == 500
        assert "rawResponse" not in response.json()

    def test_missing_documents_is_invalid_structure(
        self, client, auth_headers, mock_client, invoice_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.return_value = '{"totalPages": 1}'
        response = client.post(
            "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Invalid analysis structure"

    def test_upstream_failure(self, client, auth_headers, mock_client, invoice_pdf_bytes) -> None:
        mock_client.create_chat_completion.side_effect = UpstreamUnavailableError(
            "Analysis service network error: connection refused"
        )
        response = client.post(
            "/process-document", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Analysis service unavailable"
        assert "connection refused" in body["message"]

    def test_unexpected_failure_is_500(
        self, client, auth_headers, mock_client, invoice_pdf_bytes
    ) -> None:
        mock_client.create_chat_completion.side_effect = RuntimeError("kaboom")
        response = client.post(
            "/analyze", files=_pdf_upload(invoice_pdf_bytes), headers=auth_headers
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process file", "message": "kaboom"}
