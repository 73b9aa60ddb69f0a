from .session_store import CheckoutSessionStore, new_checkout_id

__all__ = ["CheckoutSessionStore", "new_checkout_id"]
