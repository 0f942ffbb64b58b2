"""HTTP layer: FastAPI app factory and endpoint handlers."""

from console_wallet.server.app import create_app, run_server
from console_wallet.server.handlers import ConsoleHandlers, HandlerResult

__all__ = ["ConsoleHandlers", "HandlerResult", "create_app", "run_server"]
