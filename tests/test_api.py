import sys
import os
import unittest
from unittest.mock import MagicMock, patch

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

# Add parent directory to path to import modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from db.init import Base, engine
from main import app
from utils.config import settings
from utils.limiter import limiter

CONTACT = {
    "name": "Priya Sharma",
    "email": "Priya@Example.com",
    "subject": "Website enquiry",
    "message": "Could you call me back about pricing?",
    "phone": "+91 98765 43210",
}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.client = TestClient(app)

    def register(self, email="admin@example.com", password="secret1"):
        return self.client.post(
            "/api/auth/register",
            json={"name": "Site Admin", "email": email, "password": password},
        )

    def auth_headers(self):
        token = self.register().json()["token"]
        return {"Authorization": f"Bearer {token}"}

    def submit(self, **overrides):
        body = dict(CONTACT)
        body.update(overrides)
        return self.client.post("/api/messages", json=body)


class TestAuthEndpoints(ApiTestCase):
    def test_register_and_me(self):
        res = self.register()

        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Admin registered successfully")
        self.assertEqual(set(body["admin"]), {"id", "name", "email", "role"})

        me = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["admin"], body["admin"])

    def test_duplicate_register(self):
        self.register()
        res = self.register(email="ADMIN@example.com")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"success": False, "message": "Admin already exists with this email"})

    def test_register_validation_errors(self):
        res = self.client.post(
            "/api/auth/register",
            json={"name": "Site Admin", "email": "nope", "password": "123"},
        )

        self.assertEqual(res.status_code, 400)
        body = res.json()
        self.assertFalse(body["success"])
        fields = {e["field"] for e in body["errors"]}
        self.assertEqual(fields, {"email", "password"})

    def test_login_failures_share_one_response(self):
        self.register()

        wrong_password = self.client.post(
            "/api/auth/login", json={"email": "admin@example.com", "password": "bad-password"}
        )
        unknown_email = self.client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "secret1"}
        )

        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())

    def test_login_success(self):
        self.register()

        res = self.client.post("/api/auth/login", json={"email": "Admin@Example.com", "password": "secret1"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["message"], "Login successful")
        self.assertIn("token", res.json())

    def test_protected_routes_need_token(self):
        for method, path in (
            ("get", "/api/auth/me"),
            ("get", "/api/messages"),
            ("get", "/api/messages/abc"),
            ("patch", "/api/messages/abc/read"),
            ("patch", "/api/messages/abc/spam"),
            ("delete", "/api/messages/abc"),
        ):
            res = getattr(self.client, method)(path)
            self.assertEqual(res.status_code, 401, path)
            self.assertFalse(res.json()["success"])

        res = self.client.get("/api/messages", headers={"Authorization": "Bearer garbage"})
        self.assertEqual(res.status_code, 401)


class TestMessageEndpoints(ApiTestCase):
    def test_submit_returns_receipt(self):
        res = self.submit()

        self.assertEqual(res.status_code, 201)
        data = res.json()["data"]
        self.assertEqual(set(data), {"id", "name", "email", "subject", "createdAt"})
        self.assertEqual(data["email"], "priya@example.com")
        self.assertTrue(data["createdAt"].endswith(("Z", "+00:00")))

    def test_submit_validation(self):
        res = self.submit(message="Hi", phone="+1 2025551234")

        self.assertEqual(res.status_code, 400)
        errors = {e["field"]: e["message"] for e in res.json()["errors"]}
        self.assertEqual(errors["message"], "Message must be between 10 and 2000 characters")
        self.assertIn("phone", errors)

    def test_triage_flow(self):
        headers = self.auth_headers()
        first = self.submit().json()["data"]["id"]
        second = self.submit(subject="Second enquiry").json()["data"]["id"]

        listing = self.client.get("/api/messages", headers=headers).json()
        self.assertEqual(listing["pagination"], {
            "currentPage": 1, "totalPages": 1, "totalItems": 2, "itemsPerPage": 10,
        })
        self.assertEqual(listing["stats"], {"total": 2, "unread": 2, "read": 0, "spam": 0})
        self.assertIn("isRead", listing["data"][0])

        res = self.client.patch(f"/api/messages/{first}/read", headers=headers)
        self.assertEqual(res.json()["message"], "Message marked as read")
        self.assertTrue(res.json()["data"]["isRead"])

        res = self.client.patch(f"/api/messages/{first}/read", json={"isRead": False}, headers=headers)
        self.assertEqual(res.json()["message"], "Message marked as unread")

        res = self.client.patch(f"/api/messages/{second}/spam", headers=headers)
        self.assertTrue(res.json()["data"]["isSpam"])
        self.assertFalse(res.json()["data"]["isRead"])

        spam = self.client.get("/api/messages", params={"status": "spam"}, headers=headers).json()
        self.assertEqual([m["id"] for m in spam["data"]], [second])
        self.assertEqual(spam["stats"], {"total": 1, "unread": 1, "read": 0, "spam": 1})

        res = self.client.delete(f"/api/messages/{first}", headers=headers)
        self.assertEqual(res.json(), {"success": True, "message": "Message deleted successfully"})

        res = self.client.get(f"/api/messages/{first}", headers=headers)
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"success": False, "message": "Message not found"})

    def test_bulk_delete(self):
        headers = self.auth_headers()
        existing = self.submit().json()["data"]["id"]

        res = self.client.post(
            "/api/messages/bulk/delete", json={"ids": [existing, "missing-id"]}, headers=headers
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["deletedCount"], 1)
        self.assertEqual(res.json()["message"], "1 message(s) deleted successfully")

    def test_bulk_delete_empty_ids(self):
        headers = self.auth_headers()

        for body in ({"ids": []}, {}):
            res = self.client.post("/api/messages/bulk/delete", json=body, headers=headers)
            self.assertEqual(res.status_code, 400)
            self.assertEqual(res.json()["message"], "Please provide message IDs to delete")

    def test_list_rejects_bad_paging(self):
        headers = self.auth_headers()

        res = self.client.get("/api/messages", params={"page": 0}, headers=headers)

        self.assertEqual(res.status_code, 400)

    @patch("utils.email.requests.post")
    def test_submit_sends_notification_when_configured(self, mock_post):
        mock_post.return_value = MagicMock(status_code=201)

        with patch("routers.messages.notifications_enabled", return_value=True), \
                patch.object(settings, "contact_notify_email", "owner@example.com"):
            res = self.submit()

        self.assertEqual(res.status_code, 201)
        mock_post.assert_called_once()
        payload = mock_post.call_args.kwargs["json"]
        self.assertEqual(payload["to"], [{"email": "owner@example.com"}])
        self.assertEqual(payload["replyTo"]["email"], "priya@example.com")
        self.assertIn("Could you call me back about pricing?", payload["textContent"])
        self.assertNotIn("htmlContent", payload)

    @patch("utils.email.requests.post")
    def test_submit_without_notification_config(self, mock_post):
        with patch("routers.messages.notifications_enabled", return_value=False):
            res = self.submit()

        self.assertEqual(res.status_code, 201)
        mock_post.assert_not_called()


class TestServerBehaviour(ApiTestCase):
    def test_health(self):
        res = self.client.get("/api/health")

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["success"])
        self.assertEqual(res.json()["message"], "Server is running")
        self.assertIn("timestamp", res.json())

    def test_unknown_route(self):
        res = self.client.get("/api/nothing-here")

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"success": False, "message": "Route not found"})

    def test_unexpected_error_is_generic(self):
        headers = self.auth_headers()
        client = TestClient(app, raise_server_exceptions=False)

        with patch("services.message_service.MessageService.get_by_id", side_effect=RuntimeError("db exploded")):
            res = client.get("/api/messages/some-id", headers=headers)

        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json()["message"], "Internal server error")
        if settings.is_development:
            self.assertEqual(res.json()["error"], "db exploded")
        else:
            self.assertNotIn("error", res.json())

    def test_contact_form_rate_limit(self):
        limiter.reset()
        limiter.enabled = True
        try:
            statuses = [self.submit().status_code for _ in range(6)]
        finally:
            limiter.enabled = False
            limiter.reset()

        self.assertEqual(statuses[:5], [201] * 5)
        self.assertEqual(statuses[5], 429)

    def test_general_limit_is_shared_across_routes(self):
        """Requests to different routes draw from the same per-IP budget"""
        limiter.reset()
        limiter.enabled = True
        try:
            with self.assertLogs("utils.limiter", level="WARNING") as logs:
                statuses = [self.client.get("/api/health").status_code for _ in range(60)]
                responses = [self.client.get("/api/auth/me") for _ in range(60)]
        finally:
            limiter.enabled = False
            limiter.reset()

        self.assertEqual(statuses, [200] * 60)
        me_statuses = [res.status_code for res in responses]
        self.assertEqual(me_statuses[:40], [401] * 40)
        self.assertEqual(me_statuses[40:], [429] * 20)
        self.assertEqual(responses[-1].json(), {
            "success": False,
            "message": "Too many requests from this IP, please try again later.",
        })
        self.assertIn("GET /api/auth/me -> 429", logs.output[0])


if __name__ == '__main__':
    unittest.main()
