"""User lookup service.

`user_name` is observed declaratively:
- "user.name" is used as the metric name
- "getting-user-name" is used as the span name
- userType=userType2 is set as a tag for both metric and span
"""

import asyncio
import random

from lookout_core.observed import observed
from lookout_obs.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Looks up user names. Lookup latency is simulated."""

    def __init__(self, max_latency_ms: int = 200):
        self.max_latency_ms = max_latency_ms
        self._random = random.Random()

    @observed(
        name="user.name",
        contextual_name="getting-user-name",
        low_cardinality_key_values=("userType", "userType2"),
    )
    async def user_name(self, user_id: str) -> str:
        logger.info("Getting user name for user with id <%s>", user_id)
        if self.max_latency_ms:
            await asyncio.sleep(self._random.randrange(self.max_latency_ms) / 1000)
        return "foo"
