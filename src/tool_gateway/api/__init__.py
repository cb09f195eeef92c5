"""HTTP and JSON-RPC surface."""
