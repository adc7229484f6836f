from typing import Dict, Any, Optional, Mapping, Set

from converse.domain.errors import ContextCloneError


JSON_SCALARS = (str, int, float, bool, type(None))


def clone_value(value: Any, path: str = "context", _ancestors: Optional[Set[int]] = None) -> Any:
    """Deep structural clone of a JSON-compatible value"""

    if isinstance(value, JSON_SCALARS):
        return value

    if not isinstance(value, (Mapping, list, tuple)):
        raise ContextCloneError(
            f"{path} holds a {type(value).__name__}, which is not a JSON value"
        )

    # Containers currently being cloned above this one
    ancestors = _ancestors if _ancestors is not None else set()
    if id(value) in ancestors:
        raise ContextCloneError(f"{path} refers back to one of its parents")
    ancestors.add(id(value))

    try:
        if isinstance(value, Mapping):
            cloned = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise ContextCloneError(f"{path} has a non-string key: {key!r}")
                cloned[key] = clone_value(item, f"{path}.{key}", ancestors)
            return cloned
        return [clone_value(item, f"{path}[{i}]", ancestors) for i, item in enumerate(value)]
    finally:
        ancestors.discard(id(value))


def clone_context(context: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Clone a whole context; None becomes an empty context"""

    if context is None:
        return {}
    if not isinstance(context, Mapping):
        raise ContextCloneError(
            f"context must be a mapping, got {type(context).__name__}"
        )
    return clone_value(context)
