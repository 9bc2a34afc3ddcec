"""
FastAPI Task Backend package.

Layers, outermost first: routers (HTTP delivery) -> usecases -> repositories
(db.SQLiteTaskRepository). The ASGI application lives at src.api.main:app.
"""
