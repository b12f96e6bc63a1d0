"""
Standard-library logging implementation of the ChatLogger protocol.

Used when the pipeline is embedded in a host process that already
configures `logging` handlers.
"""

import logging
from typing import Dict, Any, List

from ..core.protocols import ChatLogger


class StandardLogger(ChatLogger):
    """ChatLogger that forwards to a `logging.Logger`."""

    def __init__(self, name: str = "harmony_chat"):
        self.logger = logging.getLogger(name)

    def log_debug(self, message: str):
        self.logger.debug(message)

    def log_info(self, message: str):
        self.logger.info(message)

    def log_warning(self, message: str):
        self.logger.warning(message)

    def log_error(self, message: str, exc_info: bool = False):
        self.logger.error(message, exc_info=exc_info)

    def log_function_call(self, function_name: str, arguments: Dict[str, Any]):
        self.logger.debug("CALL: %s(%s)", function_name, arguments)

    def log_function_result(self, function_name: str, success: bool, duration: float, result: Dict[str, Any] = None):
        level = logging.DEBUG if success else logging.WARNING
        status = "SUCCESS" if success else "FAILED"
        self.logger.log(level, "RESULT: %s - %s (%.2fs) %s", function_name, status, duration, result or "")

    def log_llm_request(self, model: str, messages: List[Dict], has_system_prompt: bool = False):
        self.logger.info(
            "LLM REQUEST: %s - %d messages, system prompt: %s", model, len(messages), has_system_prompt
        )

    def log_llm_response(self, content: str, duration: float = None):
        preview = content[:50] + "..." if content and len(content) > 50 else content or ""
        self.logger.info("LLM RESPONSE: '%s' (%.2fs)", preview, duration or 0.0)
