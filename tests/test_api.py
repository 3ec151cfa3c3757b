import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from docbrief.core.config import Settings
from docbrief.core.errors import UnsupportedFormat
from docbrief.main import app
from docbrief.models.generation import Flashcard, GenerationTask, QuizQuestion
from docbrief.services.auth import USER_STORE, decode_token
from docbrief.services.document_store import DOCUMENT_STORE

SETTINGS = Settings(jwt_secret="test-secret")
PDF = "application/pdf"


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        USER_STORE.clear()
        DOCUMENT_STORE.clear()

        settings_patch = patch("docbrief.services.auth.get_settings", return_value=SETTINGS)
        settings_patch.start()
        self.addCleanup(settings_patch.stop)

        self.orchestrator = MagicMock()
        self.orchestrator.run = AsyncMock(side_effect=self._fake_run)
        orchestrator_patch = patch(
            "docbrief.api.documents.get_orchestrator", return_value=self.orchestrator
        )
        orchestrator_patch.start()
        self.addCleanup(orchestrator_patch.stop)

        extract_patch = patch(
            "docbrief.api.documents.extract_text", return_value="Extracted document text."
        )
        self.mock_extract = extract_patch.start()
        self.addCleanup(extract_patch.stop)

        self.client = TestClient(app)

    async def _fake_run(self, task, source_text, *, summary=None):
        if task == GenerationTask.SUMMARIZE:
            return "Generated summary."
        if task == GenerationTask.FLASHCARDS:
            return [Flashcard(question="What?", answer=summary or "none")]
        return [QuizQuestion(question="Which?", options=["a", "b", "c", "d"], correct_answer=1)]

    def register(self, email: str = "ada@example.com") -> dict:
        response = self.client.post(
            "/api/register", json={"email": email, "password": "s3cret", "name": "Ada"}
        )
        self.assertEqual(response.status_code, 201, response.text)
        return {"Authorization": f"Bearer {response.json()['token']}"}

    def upload(self, headers: dict, filename: str = "Lecture Notes.pdf") -> dict:
        response = self.client.post(
            "/api/upload-pdf",
            headers=headers,
            files={"document": (filename, b"%PDF-1.4", PDF)},
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["document"]


class TestAuthRoutes(ApiTestCase):
    def test_register_then_login(self) -> None:
        headers = self.register()
        token = headers["Authorization"].split()[1]
        self.assertEqual(decode_token(token)["email"], "ada@example.com")

        response = self.client.post(
            "/api/login", json={"email": "ada@example.com", "password": "s3cret"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Login successful")

    def test_duplicate_registration_rejected(self) -> None:
        self.register()
        response = self.client.post(
            "/api/register",
            json={"email": "ada@example.com", "password": "other", "name": "Ada"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "User already exists")

    def test_bad_password_rejected(self) -> None:
        self.register()
        response = self.client.post(
            "/api/login", json={"email": "ada@example.com", "password": "wrong"}
        )
        self.assertEqual(response.status_code, 400)

    def test_missing_and_invalid_tokens(self) -> None:
        self.assertEqual(self.client.get("/api/documents").status_code, 401)
        response = self.client.get("/api/documents", headers={"Authorization": "Bearer nope"})
        self.assertEqual(response.status_code, 403)


class TestDocumentRoutes(ApiTestCase):
    def test_health(self) -> None:
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "OK")

    def test_debug_reset_route_is_not_exposed(self) -> None:
        headers = self.register()
        self.assertEqual(self.client.post("/api/debug/reset").status_code, 404)
        self.assertEqual(self.client.post("/api/debug/reset", headers=headers).status_code, 404)

    def test_upload_summarizes_and_stores(self) -> None:
        headers = self.register()
        document = self.upload(headers)

        self.assertEqual(document["title"], "Lecture Notes")
        self.assertEqual(document["summary"], "Generated summary.")
        self.assertIn("createdAt", document)
        self.assertNotIn("created_at", document)
        self.mock_extract.assert_called_once_with(b"%PDF-1.4", PDF, "Lecture Notes.pdf")
        self.orchestrator.run.assert_awaited_once_with(
            GenerationTask.SUMMARIZE, "Extracted document text."
        )

        listing = self.client.get("/api/documents", headers=headers).json()
        self.assertEqual([d["id"] for d in listing], [document["id"]])
        self.assertEqual(listing[0]["createdAt"], document["createdAt"])

        detail = self.client.get(f"/api/documents/{document['id']}", headers=headers).json()
        self.assertEqual(detail["content"], "Extracted document text.")
        self.assertEqual(detail["flashcards"], [])
        self.assertEqual(detail["createdAt"], document["createdAt"])

    def test_upload_without_file(self) -> None:
        headers = self.register()
        response = self.client.post("/api/upload-pdf", headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No document file uploaded")

    def test_upload_unsupported_type(self) -> None:
        headers = self.register()
        self.mock_extract.side_effect = UnsupportedFormat("Unsupported file type.")
        response = self.client.post(
            "/api/upload-pdf",
            headers=headers,
            files={"document": ("notes.txt", b"hello", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(DOCUMENT_STORE.list_for_user("anyone"), [])

    def test_documents_are_scoped_to_owner(self) -> None:
        owner = self.register()
        document = self.upload(owner)
        other = self.register("grace@example.com")

        response = self.client.get(f"/api/documents/{document['id']}", headers=other)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get("/api/documents", headers=other).json(), [])

    def test_flashcards_generate_and_fetch(self) -> None:
        headers = self.register()
        document = self.upload(headers)
        url = f"/api/documents/{document['id']}/flashcards"

        self.assertEqual(self.client.get(url, headers=headers).json(), {"flashcards": []})

        created = self.client.post(url, headers=headers).json()
        self.assertEqual(
            created, {"flashcards": [{"question": "What?", "answer": "Generated summary."}]}
        )
        self.assertEqual(self.client.get(url, headers=headers).json(), created)

    def test_quiz_generate_and_fetch_uses_camel_case(self) -> None:
        headers = self.register()
        document = self.upload(headers)
        url = f"/api/documents/{document['id']}/quiz"

        created = self.client.post(url, headers=headers).json()
        self.assertEqual(
            created,
            {"quiz": [{"question": "Which?", "options": ["a", "b", "c", "d"], "correctAnswer": 1}]},
        )
        self.assertEqual(self.client.get(url, headers=headers).json(), created)

    def test_regenerate_summary(self) -> None:
        headers = self.register()
        document = self.upload(headers)
        self.orchestrator.run = AsyncMock(return_value="Fresh summary.")

        response = self.client.post(f"/api/documents/{document['id']}/summarize", headers=headers)

        self.assertEqual(response.json()["summary"], "Fresh summary.")
        detail = self.client.get(f"/api/documents/{document['id']}", headers=headers).json()
        self.assertEqual(detail["summary"], "Fresh summary.")

    def test_unknown_document_is_404(self) -> None:
        headers = self.register()
        for method, path in (
            ("get", "/api/documents/missing"),
            ("post", "/api/documents/missing/flashcards"),
            ("post", "/api/documents/missing/quiz"),
            ("post", "/api/documents/missing/summarize"),
        ):
            response = getattr(self.client, method)(path, headers=headers)
            self.assertEqual(response.status_code, 404, path)


if __name__ == "__main__":
    unittest.main()
