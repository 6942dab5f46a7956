# src/drystore_hub/api/v1/endpoints/realtime.py
"""WebSocket stream of row changes."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from drystore_hub.services import channels as channel_service
from drystore_hub.services.change_feed import Subscription, Viewer, get_change_feed
from drystore_hub.services.notifications import WATCHED_TABLES

from ..dependencies import SessionFactoryDep, user_from_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _pump(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        change = await subscription.queue.get()
        await websocket.send_json(change.to_payload())


async def _drain(websocket: WebSocket) -> None:
    # Client messages are ignored; this only notices the disconnect.
    while True:
        await websocket.receive_text()


@router.websocket("/ws/changes")
async def stream_changes(
    websocket: WebSocket,
    session_factory: SessionFactoryDep,
    token: str = Query(...),
    tables: str | None = Query(None, description="Comma-separated table names"),
) -> None:
    """Push ``{table, event, record, commit_timestamp}`` frames for each visible change.

    Without ``tables`` the stream carries the tables the sidebar badges watch.
    Rows are filtered per listener: channel messages reach members only,
    direct messages their two participants, read receipts their owner, and
    invitations and role changes admins only.
    """
    with session_factory() as db:
        try:
            user = user_from_token(token, db)
        except HTTPException:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        viewer = Viewer(
            user_id=user.id,
            is_admin=user.is_admin,
            channel_ids=channel_service.joined_channel_ids(db, user.id),
        )
    user_id = viewer.user_id

    wanted = [name.strip() for name in tables.split(",") if name.strip()] if tables else list(WATCHED_TABLES)
    await websocket.accept()
    feed = get_change_feed()
    subscription = feed.subscribe(wanted, viewer=viewer)
    logger.info("User %s subscribed to %s", user_id, ", ".join(sorted(subscription.tables)))

    tasks = [asyncio.create_task(_pump(websocket, subscription)), asyncio.create_task(_drain(websocket))]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Realtime stream for user %s ended with error: %s", user_id, exc)
    finally:
        for task in tasks:
            task.cancel()
        feed.unsubscribe(subscription)
        logger.info("User %s unsubscribed from change feed", user_id)
