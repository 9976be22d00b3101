"""
Deadline helper for external reads.

Every collaborator call made by the engines goes through bounded()
so a slow store or geometry backend cannot hang a resolution.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from pricing.core.errors import StoreUnavailable
from pricing.observability import metrics

T = TypeVar('T')

async def bounded(aw: Awaitable[T], timeout: Optional[float], lookup: str) -> T:
    """
    외부 조회를 타임아웃으로 제한합니다.

    Args:
        aw: 외부 조회 코루틴
        timeout: 제한 시간 (초), None 이면 제한 없음
        lookup: 메트릭 라벨용 조회 이름

    Returns:
        조회 결과

    Raises:
        asyncio.TimeoutError: 제한 시간 초과
    """
    try:
        return await asyncio.wait_for(aw, timeout)
    except asyncio.TimeoutError:
        metrics.lookup_timeouts.labels(lookup=lookup).inc()
        raise

async def guarded(aw: Awaitable[T], timeout: Optional[float], lookup: str, subject: str) -> T:
    """
    bounded() 와 같되 시간 초과나 저장소 오류를 StoreUnavailable 로 바꿉니다.

    Args:
        aw: 외부 조회 코루틴
        timeout: 제한 시간 (초)
        lookup: 메트릭 라벨용 조회 이름
        subject: 오류 메시지에 넣을 조회 대상 (예: "business_id=1")

    Raises:
        StoreUnavailable: 조회가 시간 초과되거나 실패한 경우
    """
    try:
        return await bounded(aw, timeout, lookup)
    except asyncio.TimeoutError as e:
        raise StoreUnavailable(f"{lookup} lookup timed out {subject}") from e
    except Exception as e:
        raise StoreUnavailable(f"{lookup} lookup failed {subject}: {e}") from e
