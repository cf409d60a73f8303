from abc import ABC, abstractmethod
from typing import Any, Dict


class IEmailService(ABC):
    """Outbound mail collaborator"""

    @abstractmethod
    async def send(self, to: str, template: str, model: Dict[str, Any]) -> None:
        """
        Render template with model and deliver it to one address.

        Raises on delivery failure; callers on the notification path log and
        swallow the error.
        """
        pass
