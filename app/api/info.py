# app/api/info.py
"""
Public side of the shop-info document.

- GET  /           landing page (name, address, grouped hours, note)
- GET  /api/info   the document as JSON
- POST /api/info   replace the document (needs ?secret=)
"""

from html import escape
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
import structlog

from app.api.auth import is_authorized
from app.hours import compress_hours, normalize_info
from app.models import DEFAULT_BACKGROUND_URL, ShopInfo, default_info
from infrastructure.errors import InfoStoreError

logger = structlog.get_logger()
router = APIRouter(tags=["info"])


# ==========================================
# ENDPOINT: GET /api/info
# ==========================================

@router.get("/api/info")
async def get_info(request: Request):
    info = await request.app.state.store.read()
    return info.to_document()


# ==========================================
# ENDPOINT: POST /api/info
# ==========================================

@router.post("/api/info")
async def replace_info(request: Request, secret: Optional[str] = None):
    """
    Replace the whole document.

    The body goes through the same normalizer as stored documents, so legacy
    grouped hours are accepted too. A missing backgroundUrl gets the default image.
    """
    state = request.app.state

    if not is_authorized(state.settings, secret):
        logger.warning("info_write_refused")
        raise HTTPException(403, "Forbidden")

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(422, "Body must be JSON")

    if not isinstance(body, dict):
        raise HTTPException(422, "Body must be a JSON object")

    if not body.get("backgroundUrl"):
        body["backgroundUrl"] = DEFAULT_BACKGROUND_URL

    try:
        await state.store.write(normalize_info(body))
    except InfoStoreError as e:
        logger.error("info_write_failed", error=str(e))
        raise HTTPException(502, "Saved locally, mirror update failed")

    return {"ok": True}


# ==========================================
# LANDING PAGE
# ==========================================

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            margin: 0;
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
            font-family: Georgia, serif;
            color: #f3e9d2;
            background: #2b1d14 center / cover no-repeat;
        }}
        .panel {{
            background: rgba(20, 12, 8, 0.72);
            border-radius: 12px;
            padding: 40px;
            max-width: 520px;
            width: 100%;
        }}
        h1 {{ margin: 0; font-size: 48px; color: #e8a34b; }}
        h2 {{ font-size: 12px; letter-spacing: 0.2em; text-transform: uppercase; color: #c9b28a; }}
        ul {{ list-style: none; padding: 0; }}
        li {{ display: flex; justify-content: space-between; padding: 4px 0; }}
        .closed {{ text-transform: uppercase; letter-spacing: 0.15em; opacity: 0.7; }}
        .note {{ margin-top: 24px; font-style: italic; }}
    </style>
</head>
<body style="background-image: url('{background}')">
    <main class="panel">
        <h1>{title}</h1>
        <p>{address}</p>
        <h2>Opening Hours</h2>
        <ul>
{hours}
        </ul>
{note}
    </main>
</body>
</html>"""


def render_page(info: ShopInfo) -> str:
    """Landing page HTML; hours are shown as day-range groups."""
    rows = []
    for group in compress_hours(info.hours):
        css = ' class="closed"' if group.closed else ""
        rows.append(
            f"            <li><span>{escape(group.label)}</span>"
            f"<span{css}>{escape(group.schedule)}</span></li>"
        )

    note = ""
    if info.weekly_note:
        note = f'        <p class="note">{escape(info.weekly_note)}</p>'

    return PAGE_TEMPLATE.format(
        title=escape(info.name),
        address=escape(f"{info.address}, {info.city}"),
        background=escape(info.background_url or DEFAULT_BACKGROUND_URL, quote=True),
        hours="\n".join(rows),
        note=note,
    )


@router.get("/", response_class=HTMLResponse)
async def landing_page(request: Request):
    """Falls back to the default document when storage can't be read."""
    try:
        info = await request.app.state.store.read()
    except (OSError, InfoStoreError) as e:
        logger.error("info_read_failed", error=str(e))
        info = default_info()
    return HTMLResponse(render_page(info))
