# src/tasklist/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..cli.commands import render_stats
from ..core.state import AppState

logger = logging.getLogger(__name__)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    print(f"[{state.settings.app_name}] {render_stats(state.engine.get_stats())}")
    print("Type /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input("> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."
        print(reply)

    logger.info("Console connector finished.")
