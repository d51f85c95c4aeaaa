# Routers package — Thin Controllers (SRP / DIP)
from healx.routers import auto_restock, surgical_items

__all__ = [
    "auto_restock",
    "surgical_items",
]
