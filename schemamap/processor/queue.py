"""Single-flight FIFO queue for instruction processing."""
import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Tuple

from schemamap.processor.results import ProcessingResult

logger = logging.getLogger(__name__)

Handler = Callable[[str, Any], ProcessingResult]
ResultListener = Callable[[str, ProcessingResult], None]


class InstructionQueue:
    """
    Runs one instruction at a time.

    An instruction submitted while another is in flight is queued and the
    caller immediately gets a "please wait" result. Once the in-flight
    instruction finishes, queued ones run in submission order and their
    results go to ``on_result``.
    """

    def __init__(
        self,
        handler: Handler,
        max_pending: int = 16,
        on_result: Optional[ResultListener] = None,
    ):
        """
        Initialize queue.

        Args:
            handler: Processes one (instruction, context) pair
            max_pending: Maximum number of queued instructions
            on_result: Receives results of instructions that were queued
        """
        self.handler = handler
        self.max_pending = max_pending
        self.on_result = on_result
        self._pending: Deque[Tuple[str, Any]] = deque()
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, instruction: str, context: Any) -> ProcessingResult:
        """Run the instruction now, or queue it if another one is in flight."""
        if self._processing:
            if len(self._pending) >= self.max_pending:
                logger.warning(f"Instruction queue full, rejecting: {instruction!r}")
                return ProcessingResult(
                    success=False,
                    message="Too many pending instructions, please try again later.",
                )

            self._pending.append((instruction, context))
            logger.debug(f"Queued instruction ({len(self._pending)} pending): {instruction!r}")
            return ProcessingResult(
                success=False,
                message="Processing previous instruction, please wait...",
                queued=True,
            )

        result = self._run(instruction, context)
        self._drain()
        return result

    def _run(self, instruction: str, context: Any) -> ProcessingResult:
        self._processing = True
        try:
            return self.handler(instruction, context)
        finally:
            self._processing = False

    def _drain(self) -> None:
        while self._pending and not self._processing:
            instruction, context = self._pending.popleft()
            result = self._run(instruction, context)
            if self.on_result:
                self.on_result(instruction, result)
