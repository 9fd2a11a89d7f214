import httpx
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from modules.zine.controllers.zine_controller import get_email_sender
from modules.zine.models.zine_request import ZineRequest
from modules.zine.repositories.zine_repository import ZineRepository
from modules.zine.schemas.zine_schemas import ZineSubmission
from modules.zine.services.email_sender import EmailError, EmailJsSender
from modules.zine.services.zine_service import ZineService, ZineTemplate
from conftest import TestingSessionLocal

SUBMISSION = {
    "name": "Ada",
    "email": "ada@example.com",
    "address1": "1 Main St",
    "address2": "",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
}


class FakeSender:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, template_params):
        if self.fail:
            raise EmailError("EmailJS returned 400")
        self.sent.append(template_params)


def test_template_params():
    params = ZineTemplate(ZineSubmission(**SUBMISSION)).to_dict()
    assert {k: params[k] for k in SUBMISSION} == SUBMISSION
    assert params["timestamp"]


def test_submit_persists_and_emails(db_session):
    sender = FakeSender()
    service = ZineService(ZineRepository(db_session), sender)
    saved = service.submit(ZineSubmission(**SUBMISSION))

    assert saved.emailed is True
    assert sender.sent[0]["email"] == "ada@example.com"
    assert db_session.query(ZineRequest).count() == 1


def test_email_failure_keeps_request(db_session):
    service = ZineService(ZineRepository(db_session), FakeSender(fail=True))
    saved = service.submit(ZineSubmission(**SUBMISSION))
    assert saved.emailed is False
    assert service.get_requests()[0].id == saved.id


def test_emailjs_payload():
    seen = {}

    def handler(request):
        seen["json"] = request.read()
        return httpx.Response(200, text="OK")

    sender = EmailJsSender("service_1", "template_1", "public", "private", api_url="https://emailjs.test/send",
                           client=httpx.Client(transport=httpx.MockTransport(handler)))
    sender.send({"name": "Ada"})
    assert b'"service_id":"service_1"' in seen["json"].replace(b" ", b"")
    assert b'"accessToken":"private"' in seen["json"].replace(b" ", b"")


def test_unconfigured_emailjs():
    with pytest.raises(EmailError):
        EmailJsSender(None, None, None).send({"name": "Ada"})


@pytest.fixture
def client(db_session):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    sender = FakeSender()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: sender
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_submission_endpoint(client):
    resp = client.post("/zine/submissions", json=SUBMISSION)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["city"] == "Springfield"
    assert body["data"]["emailed"] is True


@pytest.mark.parametrize("field", ["name", "email", "address1", "city", "state", "zip"])
def test_missing_fields_rejected(client, field):
    payload = dict(SUBMISSION)
    payload.pop(field)
    assert client.post("/zine/submissions", json=payload).status_code == 422


def test_invalid_email_rejected(client):
    assert client.post("/zine/submissions", json=dict(SUBMISSION, email="not-an-email")).status_code == 422


def test_email_sender_is_shared_between_requests():
    get_email_sender.cache_clear()
    try:
        assert get_email_sender() is get_email_sender()
    finally:
        get_email_sender.cache_clear()
