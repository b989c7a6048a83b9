"""Tests for bearer token authentication through Supabase Auth."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from legate.core.auth_middleware import get_current_user


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
async def test_no_credentials():
    assert await get_current_user(None) is None


@pytest.mark.asyncio
async def test_valid_token():
    mock_client = MagicMock()
    mock_client.auth.get_user.return_value.user.id = "user-1"
    mock_client.auth.get_user.return_value.user.email = "owner@example.com"

    with patch("legate.core.auth_middleware.get_supabase", return_value=mock_client):
        auth = await get_current_user(bearer("jwt-token"))

    assert auth.user_id == "user-1"
    assert auth.email == "owner@example.com"
    assert auth.token == "jwt-token"
    mock_client.auth.get_user.assert_called_once_with("jwt-token")


@pytest.mark.asyncio
async def test_rejected_token():
    mock_client = MagicMock()
    mock_client.auth.get_user.side_effect = Exception("invalid JWT")

    with patch("legate.core.auth_middleware.get_supabase", return_value=mock_client):
        assert await get_current_user(bearer("expired")) is None


@pytest.mark.asyncio
async def test_token_without_user():
    mock_client = MagicMock()
    mock_client.auth.get_user.return_value.user = None

    with patch("legate.core.auth_middleware.get_supabase", return_value=mock_client):
        assert await get_current_user(bearer("jwt-token")) is None
