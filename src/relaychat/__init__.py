"""RelayChat - route each chat message to the best available LLM backend.

Modules:
    - routing: Domain classifier and rule-based provider selection
    - providers: One request/response adapter per backend
    - credentials: Per-provider API key storage
    - dispatcher: Routes a conversation and calls the chosen backend
    - config: YAML-backed settings
"""

__version__ = "0.1.0"
