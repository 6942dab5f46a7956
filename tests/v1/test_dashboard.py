# tests/v1/test_dashboard.py
"""Tests for notification counts, metrics, activity and categories."""

from __future__ import annotations

from fastapi import status

from drystore_hub.services import documents as document_service
from drystore_hub.services import messages as message_service


def test_counts(client, db_session, channel, admin_user, auth_token) -> None:
    message_service.send_message(db_session, admin_user, channel.id, "oi @Test User")
    document_service.create_document(db_session, admin_user, {"title": "Política"})

    counts = client.get("/api/v1/notifications/counts", headers=auth_token).json()
    assert counts == {"total_messages": 1, "announcements": 0, "mentions": 1, "documents": 1}


def test_metrics_visibility(client, auth_token, admin_auth_token) -> None:
    personal = client.get("/api/v1/notifications/metrics", headers=auth_token).json()
    assert personal["is_admin"] is False
    assert personal["total_users"] is None

    admin = client.get("/api/v1/notifications/metrics", headers=admin_auth_token).json()
    assert admin["is_admin"] is True
    assert admin["total_users"] == 2


def test_activity_feed_and_stats(client, db_session, channel, admin_user, auth_token) -> None:
    message_service.send_message(db_session, admin_user, channel.id, "estoque chegou")

    feed = client.get("/api/v1/activity/", headers=auth_token).json()
    assert {item["type"] for item in feed} == {"message", "channel"}

    stats = client.get("/api/v1/activity/stats", headers=auth_token).json()
    assert stats["total_messages"] == 1
    assert stats["total_channels"] == 1


def test_categories_admin_only(client, auth_token, admin_auth_token) -> None:
    payload = {"name": "RH", "color": "#3366FF"}
    assert client.post("/api/v1/knowledge-base/categories", json=payload, headers=auth_token).status_code == 403

    created = client.post("/api/v1/knowledge-base/categories", json=payload, headers=admin_auth_token)
    assert created.status_code == status.HTTP_201_CREATED

    duplicate = client.post("/api/v1/knowledge-base/categories", json=payload, headers=admin_auth_token)
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    names = [item["name"] for item in client.get("/api/v1/knowledge-base/categories", headers=auth_token).json()]
    assert names == ["RH"]


def test_category_rename_is_validated(client, admin_auth_token) -> None:
    url = "/api/v1/knowledge-base/categories"
    client.post(url, json={"name": "RH"}, headers=admin_auth_token)
    other = client.post(url, json={"name": "Vendas"}, headers=admin_auth_token).json()

    null_name = client.patch(f"{url}/{other['id']}", json={"name": None}, headers=admin_auth_token)
    assert null_name.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    taken = client.patch(f"{url}/{other['id']}", json={"name": "RH"}, headers=admin_auth_token)
    assert taken.status_code == status.HTTP_409_CONFLICT

    blank = client.patch(f"{url}/{other['id']}", json={"name": "   "}, headers=admin_auth_token)
    assert blank.status_code == status.HTTP_409_CONFLICT

    recolored = client.patch(f"{url}/{other['id']}", json={"color": "#112233"}, headers=admin_auth_token)
    assert recolored.status_code == status.HTTP_200_OK
    assert recolored.json()["name"] == "Vendas"
