# FastAPI routers - health, prices, alerts, push tokens
from app.bullion_tracker.presentation.api import alerts, health, prices, push_tokens

__all__ = ["health", "prices", "alerts", "push_tokens"]
