import structlog

from agora.core.core import Service
from agora.core.modules.code.generator import generate_code
from agora.errors import ExhaustedRetriesError

logger = structlog.get_logger(__name__)


class CodeService(Service):
    """Generates session codes that are not yet in use."""

    async def reserve_unique_code(self, length: int | None = None) -> str:
        """Return a code no stored session uses, trying a bounded number of candidates.

        The check is advisory: a concurrent creator may take the same code
        before it is inserted, so the insert itself must still be checked.
        """
        length = length if length is not None else self.core.config.code_length
        max_attempts = self.core.config.code_max_attempts

        for attempt in range(1, max_attempts + 1):
            candidate = generate_code(length)
            if not await self.store.code_exists(candidate):
                return candidate
            logger.debug("session_code_taken", code=candidate, attempt=attempt)

        raise ExhaustedRetriesError(f"Failed to generate a unique session code after {max_attempts} attempts")
