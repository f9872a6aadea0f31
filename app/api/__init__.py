# app/api/__init__.py
"""
🌐 API ROUTES (FastAPI)

- landing page + shop-info JSON (info.py)
- Telegram webhook (webhooks/telegram.py)
"""

from .app import create_app

__all__ = ["create_app"]
