"""Definitions of the three meta tools clients call through ``tools/call``."""

from __future__ import annotations

from typing import Any

from tool_gateway.modules.registry import ModuleRegistry

BATCH_DESCRIPTION = """Execute multiple tools in batch (JSONL format, with dependency and parallel execution support).

[Fields]
- id (required): Task identifier
- module (required): Module name
- tool (required): Tool name
- params: Parameters
- after: Dependency task ID array (waits for these to complete before executing)
- output: If true, includes result in response (default: compact format)

[Response Format]
Tasks with output: true return compact format (CSV/MD) by default. For full JSON response, add format: "json" to params.

[Variable References] ${id.results[index].field}

[Example: Chained Processing]
{"id":"search","module":"notes","tool":"search","params":{"query":"design"}}
{"id":"note","module":"notes","tool":"get_note","params":{"note_id":"${search.results[0].id}"},"after":["search"],"output":true}

[Limits]
- Maximum %(max_batch_size)s commands per batch

[Execution Rules]
- No after -> runs in parallel
- With after -> runs after the listed tasks complete
- Circular dependency -> error
- Dependency failure -> dependents are skipped"""

RUN_DESCRIPTION = """Execute a single module tool.

[Available Modules]
%(modules)s

[Usage]
1. get_module_schema(module) to check available tools and parameters
2. run(module, tool, params) to execute

[Response Format]
Results are returned in compact format (CSV/MD) by default. For full JSON response, add format: "json" to params."""

SCHEMA_DESCRIPTION = (
    "Get tool definitions for modules. Call once per module per session; "
    "use run directly for later calls to the same module."
)


def build_meta_tools(registry: ModuleRegistry, *, max_batch_size: int) -> list[dict[str, Any]]:
    names = registry.names()
    module_lines = "\n".join(f"- {module.name}: {module.description}" for module in registry)
    return [
        {
            "name": "get_module_schema",
            "description": SCHEMA_DESCRIPTION,
            "inputSchema": {
                "type": "object",
                "properties": {
                    "module": {
                        "type": "array",
                        "description": (
                            'Array of module names (e.g. ["notes"]). '
                            f"Available: {', '.join(names)}"
                        ),
                        "items": {"type": "string"},
                    }
                },
                "required": ["module"],
            },
        },
        {
            "name": "run",
            "description": RUN_DESCRIPTION % {"modules": module_lines},
            "inputSchema": {
                "type": "object",
                "properties": {
                    "module": {"type": "string", "description": "Module name"},
                    "tool": {"type": "string", "description": "Tool name"},
                    "params": {"type": "object", "description": "Tool parameters"},
                },
                "required": ["module", "tool"],
            },
        },
        {
            "name": "batch",
            "description": BATCH_DESCRIPTION % {"max_batch_size": max_batch_size},
            "inputSchema": {
                "type": "object",
                "properties": {
                    "commands": {"type": "string", "description": "Commands in JSONL format"}
                },
                "required": ["commands"],
            },
        },
    ]
