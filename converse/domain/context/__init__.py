# Context handling for conversations
#
# +---------------------+
# |   Context Store     |   (per session, survives turns)
# |---------------------|
# | latest snapshot     |
# +---------------------+
#          |
#          v   clone
# +---------------------+
# |   Step Engine       |   (authoritative copy for one turn)
# +---------------------+
#          |
#          v   clone per step
# +---------------------+
# |   Action handler    |   (loaned copy, may be mutated freely)
# +---------------------+
#          |
#          v   callback(new_context)
#   replaces the engine's copy

from .snapshot import clone_context, clone_value
from .context_store import ContextStore

__all__ = ["clone_context", "clone_value", "ContextStore"]
