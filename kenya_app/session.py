"""
Chat session state.

A session owns an append-only message history for one user. A security block
freezes the session: further sends are refused until the module is switched.
Any other failure is rendered as a model message and the session stays usable.
"""

import logging
import threading
from typing import List, Optional

from .errors import ConfigurationBlockedError
from .schemas import AIModule, GeoLocation, Message

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(self, orchestrator, module: AIModule = AIModule.GENERAL, location: Optional[GeoLocation] = None):
        self.orchestrator = orchestrator
        self.module = AIModule(module)
        self.location = location
        self.error_state: Optional[str] = None
        self.in_flight = False
        self._history: List[Message] = []
        self._lock = threading.Lock()

    @property
    def history(self) -> List[Message]:
        with self._lock:
            return list(self._history)

    @property
    def locked(self) -> bool:
        return self.error_state is not None

    def switch_module(self, module: AIModule) -> None:
        with self._lock:
            self.module = AIModule(module)
            self._history = []
            self.error_state = None

    def send(self, text: str) -> Optional[Message]:
        """Send text and return the model reply.

        Returns None for blank input and for any send made while an earlier
        request on this session is still running.
        """
        if not text or not text.strip():
            return None

        with self._lock:
            if self.in_flight:
                logger.info("Ignoring send while a request is in flight")
                return None
            if self.locked:
                raise ConfigurationBlockedError(self.error_state)
            self.in_flight = True
            module = self.module
            prior = list(self._history)
            self._history.append(Message(role="user", text=text, module=module))

        reply = None
        try:
            result = self.orchestrator.send_message(text, prior, module, self.location)
        except ConfigurationBlockedError as exc:
            self.error_state = str(exc)
            reply = Message(role="model", text=str(exc), module=module)
        except Exception as exc:
            logger.exception("Chat request failed in module %s", module.value)
            reply = Message(role="model", text=str(exc), module=module)
        else:
            reply = Message(role="model", text=result.text, module=module, grounding_urls=result.grounding_urls)
        finally:
            with self._lock:
                if reply is not None:
                    self._history.append(reply)
                self.in_flight = False
        return reply
