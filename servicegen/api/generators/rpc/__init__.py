"""JSON-dispatch backends (tool calls, JSON-RPC, WebSocket) and their documents."""
