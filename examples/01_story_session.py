#!/usr/bin/env python3
"""Example 1: Story session - a long conversation kept inside the window.

Settings come from LOREWEAVER_* environment variables or a .env file:

    LOREWEAVER_OPENAI_API_KEY=sk-...
    LOREWEAVER_MODEL=gpt3
    LOREWEAVER_STORAGE=file
    LOREWEAVER_LOG_LEVEL=debug

Type messages at the prompt; an empty line ends the session.
"""

import asyncio

from loreweaver import BudgetExhaustedError, ConversationKey, LoreweaverError
from loreweaver.config import LoreweaverSettings
from loreweaver.observability import configure_logging


SYSTEM = (
    "You are the narrator of a fantasy adventure. Describe what the "
    "player sees and hears, and never act on the player's behalf."
)


async def main() -> None:
    settings = LoreweaverSettings()
    configure_logging(settings.log_config())
    manager = settings.build_manager()

    conversation = ConversationKey("story", "demo")
    print(f"Model {manager.model.model_name}, {manager.tokens_available()} tokens per turn")

    while True:
        message = input("> ").strip()
        if not message:
            break
        try:
            result = await manager.weave_turn(conversation, SYSTEM, message, author="player")
        except BudgetExhaustedError as e:
            print(f"[message too long for the window: {e.available} tokens left]")
            continue
        except LoreweaverError as e:
            print(f"[turn failed: {e}]")
            continue

        if result.compacted:
            print("[earlier story was summarized]")
        print(result.response)


if __name__ == "__main__":
    asyncio.run(main())
