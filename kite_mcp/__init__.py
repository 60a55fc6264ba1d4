"""
Kite MCP Server - GitHub OAuth, public GitHub proxy tools and Cerebras chat
streaming, with the tools exposed over a small MCP (JSON-RPC) endpoint.
"""

__version__ = "1.0.0"
