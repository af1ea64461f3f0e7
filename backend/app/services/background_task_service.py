import asyncio
import time
from typing import Dict, Any, Optional

from utils.logger import get_logger

logger = get_logger(__name__)

class BackgroundTaskService:
    def __init__(self):
        self.is_running = False
        self.current_task: Optional[asyncio.Task] = None
        self.state: Dict[str, Any] = {
            "type": "idle",
            "total": 0,
            "current": 0,
            "message": "",
            "processed": 0,
            "skipped": 0,
            "errors": 0,
            "start_time": 0,
            "estimated_remaining": 0,
            "details": {} # extra fields like 'song_id'
        }

    async def start_task(self, task_coroutine) -> bool:
        """
        Starts a background task.
        :param task_coroutine: A coroutine object (e.g. self._run_something())
        """
        if self.is_running:
            task_coroutine.close()
            return False

        self.is_running = True
        self._reset_state()
        self.current_task = asyncio.create_task(self._task_wrapper(task_coroutine))
        return True

    async def cancel_task(self):
        if self.current_task:
            self.current_task.cancel()
            try:
                await self.current_task
            except asyncio.CancelledError:
                pass

        self.is_running = False
        self.state["type"] = "cancelled"

    async def wait(self):
        if self.current_task:
            await asyncio.shield(self.current_task)

    def _reset_state(self):
        self.state.update(
            type="start",
            start_time=time.time(),
            processed=0,
            skipped=0,
            errors=0,
            current=0,
            total=0,
            estimated_remaining=0,
            message="",
        )
        self.state["details"] = {}

    async def _task_wrapper(self, task_coroutine):
        try:
            await task_coroutine

            if self.state["type"] not in ("error", "limit"):
                self.state["type"] = "complete"
                self.state["message"] = self.state["message"] or "Task completed"
        except asyncio.CancelledError:
            logger.info("Background task cancelled")
            self.state["type"] = "cancelled"
        except Exception as e:
            logger.error(f"Background task failed: {e}", exc_info=True)
            self.state["type"] = "error"
            self.state["message"] = str(e)
        finally:
            self.is_running = False
            self.current_task = None

    def update_state(self, **kwargs):
        """
        Updates the state dictionary. Unknown keys land in state['details'].
        """
        for key, value in kwargs.items():
            if key in self.state:
                self.state[key] = value
            else:
                self.state["details"][key] = value

        if "processed" in kwargs or "skipped" in kwargs or "errors" in kwargs:
            elapsed = time.time() - self.state["start_time"]
            done = self.state["processed"] + self.state["skipped"] + self.state["errors"]
            if done > 0 and self.state["total"] > 0:
                avg_time = elapsed / done
                remaining = self.state["total"] - done
                self.state["estimated_remaining"] = avg_time * remaining

    def get_state(self) -> Dict[str, Any]:
        return {**self.state, "is_running": self.is_running}
