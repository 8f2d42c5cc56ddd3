from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from http_pipeline.core.domain.transport import TransportRequest, TransportResponse
from http_pipeline.core.domain.transport_profile import TransportProfile

if TYPE_CHECKING:
    from http_pipeline.core.services.timeout_controller import CancellationToken


class Transport(abc.ABC):
    """
    Abstract base class for HTTP transports.
    Defines how the pipeline hands one request to the network layer.
    """

    transport_type: str

    @abc.abstractmethod
    async def send(
        self,
        request: TransportRequest,
        profile: TransportProfile,
        token: CancellationToken,
    ) -> TransportResponse:
        """
        Performs one HTTP exchange and returns the fully-read response.

        Args:
            request: The assembled request.
            profile: Fetch-style knobs to honour where the transport can.
            token: Cancellation signal; once set the transport should abort
                and raise.

        Returns:
            The response with its body already read.

        Raises:
            TransportError: When the exchange fails or is aborted.
        """

    async def aclose(self) -> None:
        """Release transport resources. The default has nothing to release."""
