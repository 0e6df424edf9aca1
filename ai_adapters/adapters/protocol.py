"""Model client protocol shared by every capability adapter.

Each adapter translates one portable request type into one vendor REST call,
so callers can swap providers without changing how they invoke a client.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ModelClientProtocol(Protocol):
    """Interface implemented by every capability client.

    ``call`` runs the request under the client's retry policy and returns a
    portable ``ModelResponse``. Transient upstream failures are retried;
    anything else propagates on first occurrence.
    """

    @property
    def provider_name(self) -> str:
        """Provider identifier (``openai`` or ``anthropic``)."""
        ...

    @property
    def capability(self) -> str:
        """Capability served (``chat``, ``embedding``, ``image``, ``speech``, ``transcription``)."""
        ...

    async def call(self, request: Any) -> Any:
        """Execute ``request`` and return the portable response.

        Raises:
            ValueError: If the request is missing or empty.
            TransientAIError: When retries are exhausted.
            NonTransientAIError: On a non-retryable failure.
        """
        ...
