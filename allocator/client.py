import asyncio
import aiohttp
import logging
from typing import List, Sequence

from .types import AssignmentOutcome, Task

logger = logging.getLogger(__name__)


class AllocationClientError(Exception):
    """Raised when the allocator service rejects a request."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class AllocationClient:
    def __init__(self, base_url="http://localhost:8001", timeout=10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def health_check(self) -> bool:
        """Check if the allocator service is healthy"""
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(f"{self.base_url}/health") as resp:
                    if resp.status == 200:
                        data = await resp.json()
                        logger.info(f"Allocator health: {data}")
                        return data.get('status') == 'healthy'
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Health check failed: {e}")
        return False

    async def allocate(self, tasks: Sequence[Task],
                       worker_count: int) -> List[AssignmentOutcome]:
        """Submit tasks to the service and return one outcome per task"""
        payload = {
            'worker_count': worker_count,
            'tasks': [
                {'arrival_time': t.arrival_time, 'duration': t.duration}
                for t in tasks
            ],
        }
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(f"{self.base_url}/allocate",
                                    json=payload) as resp:
                if resp.status != 200:
                    raise AllocationClientError(
                        resp.status, await self._error_message(resp))
                data = await resp.json()

        logger.info(f"Received {len(data['outcomes'])} outcomes, "
                    f"metrics: {data.get('metrics')}")
        return [
            AssignmentOutcome(
                task_index=o['task_index'],
                worker_id=o['worker_id'],
                release_time=o['release_time'],
            )
            for o in data['outcomes']
        ]

    @staticmethod
    async def _error_message(resp: aiohttp.ClientResponse) -> str:
        # error pages from the web server itself (405, proxies) are not JSON
        if resp.content_type == 'application/json':
            data = await resp.json()
            return data.get('error', 'unknown error')
        return (await resp.text()).strip() or resp.reason or 'unknown error'
