from .mcp_server import TOOLS, build_server, dispatch, run_stdio

__all__ = ["TOOLS", "build_server", "dispatch", "run_stdio"]
