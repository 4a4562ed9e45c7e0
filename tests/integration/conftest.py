"""Fixtures for HTTP tests against the assembled FastAPI application."""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from marketplace.api.app import create_app
from marketplace.api.auth import JWT_ALGORITHM, JWT_SECRET


@pytest.fixture()
def client():
    return TestClient(create_app())


@pytest.fixture()
def issue_token():
    """Factory: sign a bearer token the way the identity service would."""

    def _issue(user_id, role="USER", secret=JWT_SECRET):
        return jwt.encode({"userId": user_id, "role": role}, secret, algorithm=JWT_ALGORITHM)

    return _issue


@pytest.fixture()
def headers_for(issue_token):
    def _headers(user_id, role="USER"):
        return {"Authorization": f"Bearer {issue_token(user_id, role)}"}

    return _headers


@pytest.fixture()
def user_headers(headers_for, user_id):
    return headers_for(user_id)


@pytest.fixture()
def vendor_headers(headers_for, vendor_id):
    return headers_for(vendor_id, role="VENDOR")


@pytest.fixture()
def address_payload():
    return {
        "fullName": "Jane Doe",
        "phoneNumber": "+15550100",
        "line1": "1 Main St",
        "city": "Springfield",
        "country": "US",
    }
