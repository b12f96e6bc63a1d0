"""
Paced-reveal chat with a language-model backend.

This package implements the message-delivery pipeline of a multi-turn chat:
a user submission is persisted, answered by a language model, revealed to
the user at a controlled pace, and then durably recorded, with recovery
paths when any step fails.

Key Components:
- DeliveryOrchestrator: State machine driving every message through delivery
- CompletionGateway: One answer per conversation history, or a classified failure
- PacedRevealEngine: Reveals a received answer in slices at a fixed cadence
- ConversationStoreAdapter: Store façade with local-only fallback

Example Usage:
    ```python
    import asyncio
    from harmony_chat.agents.orchestrator import DeliveryOrchestrator
    from harmony_chat.core.config import ChatConfig
    from harmony_chat.delivery.stores import InMemoryConversationStore
    from harmony_chat.interfaces.console_interface import ConsoleUserInterface, ConsoleLogger

    ui = ConsoleUserInterface()
    orchestrator = DeliveryOrchestrator.from_config(
        ChatConfig.from_env(),
        store=InMemoryConversationStore(),
        ui=ui,
        logger=ConsoleLogger(ui.console, verbose=False)
    )

    async def ask():
        if await orchestrator.submit("My transmission is broken"):
            await orchestrator.wait_for_reveal()

    asyncio.run(ask())
    ```
"""

__all__ = [
    # Main interfaces are exposed through the subpackages
]

__version__ = '0.1.0'
