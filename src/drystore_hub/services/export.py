"""Channel history export as JSON or CSV."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from drystore_hub.db.time import utcnow
from drystore_hub.models import Channel, Message, Profile

CSV_HEADER = "Author,Content,Timestamp,Edited,Attachments"
UNKNOWN_AUTHOR = "Unknown User"
UNKNOWN_CHANNEL = "Unknown"
FORMATS = {"json": "application/json", "csv": "text/csv"}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    media_type: str
    body: str


def collect_export(
    db: Session,
    channel_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Return the export document for a channel's messages in ascending order."""
    query = (
        db.query(Message, Profile.display_name)
        .outerjoin(Profile, Profile.user_id == Message.user_id)
        .filter(Message.channel_id == channel_id)
    )
    if start_date is not None:
        query = query.filter(Message.created_at >= start_date)
    if end_date is not None:
        query = query.filter(Message.created_at <= end_date)
    rows = query.order_by(Message.created_at.asc(), Message.id.asc()).all()

    channel = db.query(Channel).filter(Channel.id == channel_id).first()
    return {
        "channel": channel.name if channel else UNKNOWN_CHANNEL,
        "export_date": (now or utcnow()).isoformat(),
        "message_count": len(rows),
        "date_range": {
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
        "messages": [
            {
                "author": author or UNKNOWN_AUTHOR,
                "content": message.content,
                "timestamp": message.created_at.isoformat(),
                "edited": bool(message.edited),
                "attachments": list(message.attachments or []),
            }
            for message, author in rows
        ],
    }


def to_csv(export: dict[str, Any]) -> str:
    """Render the export as CSV with every field quoted."""
    buf = io.StringIO()
    buf.write(CSV_HEADER + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for entry in export["messages"]:
        writer.writerow(
            [
                entry["author"],
                entry["content"],
                entry["timestamp"],
                "true" if entry["edited"] else "false",
                json.dumps(jsonable_encoder(entry["attachments"]), separators=(",", ":")),
            ]
        )
    return buf.getvalue().removesuffix("\n")


def export_filename(channel_name: str, fmt: str, now: datetime | None = None) -> str:
    return f"channel-{channel_name}-{(now or utcnow()).date().isoformat()}.{fmt}"


def export_channel(
    db: Session,
    channel_id: str,
    fmt: str = "json",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    now: datetime | None = None,
) -> ExportFile:
    """Build the downloadable export file."""
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    moment = now or utcnow()
    export = collect_export(db, channel_id, start_date, end_date, now=moment)
    body = to_csv(export) if fmt == "csv" else json.dumps(jsonable_encoder(export), indent=2, ensure_ascii=False)
    return ExportFile(
        filename=export_filename(export["channel"], fmt, moment),
        media_type=FORMATS[fmt],
        body=body,
    )
