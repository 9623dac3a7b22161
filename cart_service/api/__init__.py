from .routes.cart import router as cart_router

__all__ = ["cart_router"]
