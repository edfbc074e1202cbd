from . import admin, attendance, auth, gifts, orders, public, users, withdrawals

__all__ = [
    "auth",
    "users",
    "public",
    "gifts",
    "orders",
    "withdrawals",
    "attendance",
    "admin",
]
