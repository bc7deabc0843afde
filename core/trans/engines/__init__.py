"""Translation endpoint implementations.

Importing this package registers every endpoint with TransInterface.

Modules:
- ClaudeTranslation: Batched endpoint for the Claude messages API.
"""

from core.trans.engines.trans_claude import ClaudeTranslation

__all__: list[str] = ["ClaudeTranslation"]
