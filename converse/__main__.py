"""
Interactive console for a converse-style NLU service.

Usage:
    python -m converse --token $WIT_ACCESS_TOKEN
    python -m converse --actions myapp.bot:ACTIONS --context '{"user": "ada"}'
"""
import argparse
import asyncio
import importlib
import json
import sys
from typing import Any, Dict, List, Optional

from converse.application.client import ConverseClient
from converse.application.shell.console_actions import CONSOLE_ACTIONS
from converse.domain.errors import ActionValidationError
from converse.infrastructure.config.settings import get_settings
from converse.infrastructure.observability.logging import setup_logging


def load_actions(spec: Optional[str]) -> Dict[str, Any]:
    """Import a handler mapping given as ``module:attribute``"""

    if not spec:
        return CONSOLE_ACTIONS

    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected module:attribute, got {spec!r}")

    module = importlib.import_module(module_name)
    return getattr(module, attribute)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="converse",
        description="Talk to an NLU converse endpoint and run local actions"
    )
    parser.add_argument("--token", help="Access token (defaults to WIT_ACCESS_TOKEN)")
    parser.add_argument("--actions", help="Handler mapping to load, as module:attribute")
    parser.add_argument("--context", default="{}", help="Initial context as JSON")
    parser.add_argument("--max-steps", type=int, default=None, help="Step budget per turn")
    parser.add_argument("--log-level", default=None, help="Log level (defaults to WIT_LOG_LEVEL)")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, actions: Dict[str, Any], context: Dict[str, Any]):
    async with ConverseClient(args.token, actions) as client:
        await client.interactive(context, args.max_steps)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, settings.log_format)

    # Parse initial context and load handlers
    try:
        context = json.loads(args.context)
        actions = load_actions(args.actions)
    except (ValueError, ImportError, AttributeError) as e:
        print(f"converse: {e}", file=sys.stderr)
        return 2

    if not isinstance(context, dict):
        print("converse: --context must be a JSON object", file=sys.stderr)
        return 2

    try:
        asyncio.run(_run(args, actions, context))
    except ActionValidationError as e:
        print(f"converse: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
