"""At-most-one concurrent production per cache identity."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
import weakref

from aws_lambda_powertools import Logger

logger = Logger(UTC=True)

T = TypeVar("T")


class _LoopState:
    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.pending: dict[str, asyncio.Future[Any]] = {}


class InFlightRegistry:
    """Maps a key to the completion signal of the task currently producing it.

    The first caller for a key becomes the leader and runs the work; callers
    arriving while it runs await the leader's outcome instead. The entry is
    dropped once the leader finishes, so a failure is shared with the
    waiters of that attempt but never with later requests.

    State is kept per event loop since futures cannot cross loops.
    """

    def __init__(self) -> None:
        self._states: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, _LoopState
        ] = weakref.WeakKeyDictionary()

    def _state(self) -> _LoopState:
        loop = asyncio.get_running_loop()
        state = self._states.get(loop)
        if state is None:
            state = self._states[loop] = _LoopState()
        return state

    def pending_count(self) -> int:
        return len(self._state().pending)

    async def run(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        state = self._state()

        async with state.lock:
            future = state.pending.get(key)
            leader = future is None
            if future is None:
                future = asyncio.get_running_loop().create_future()
                state.pending[key] = future

        if not leader:
            logger.info("Joining in-flight work", extra={"key": key})
            return await asyncio.shield(future)

        try:
            result = await work()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except BaseException as exc:
            future.set_exception(exc)
            # mark retrieved so a leader without followers does not warn
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            async with state.lock:
                state.pending.pop(key, None)
