"""Sequential, failure-isolating execution of strict actions."""

import logging
from typing import Any, Callable, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from .reporting import Reporter, result_rows
from .types import ActionState, DeploymentRecord, Result, StrictAction

logger = logging.getLogger(__name__)


def _format_message(msg: Any, args: Tuple[Any, ...]) -> str:
    # Same argument handling as logging.LogRecord.getMessage
    text = str(msg)
    if not args:
        return text
    if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
        args = args[0]
    try:
        return text % args
    except (TypeError, ValueError, KeyError):
        return f"{text} {args!r}"


class LogSink(logging.LoggerAdapter):
    """
    Per-action logger that remembers every message it is given.

    Messages are forwarded to the wrapped logger as usual and also kept in
    `lines`, so a failed action can report what it logged before failing.
    """

    def __init__(self, contract_name: str, base: logging.Logger = logger):
        super().__init__(base, {"contract_name": contract_name})
        self.lines: List[str] = []

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['contract_name']}] {msg}", kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.lines.append(_format_message(msg, args))
        super().log(level, msg, *args, **kwargs)


Operation = Callable[[Any, Optional[DeploymentRecord], LogSink], Optional[Result]]


def _finalize(result: Optional[Result], contract_name: str, sink: LogSink) -> Result:
    if result is None:
        result = Result(contract_name=contract_name, error="operation returned no result")

    result.logs = list(sink.lines)
    if result.error is None and result.transaction is not None:
        result.state = ActionState.SUCCEEDED
    else:
        if result.error is None:
            result.error = "operation returned neither a transaction nor an error"
        result.transaction = None
        result.state = ActionState.FAILED
    return result


def execute_one(
    action: StrictAction,
    operation: Operation,
    store: Optional[Any] = None,
) -> Result:
    """
    Run a single action, converting any exception into a failed Result.

    Args:
        action: Strict action to run
        operation: Callable(action, record, sink) -> Result
        store: Metadata store; when given, the action's record is passed along

    Returns:
        Result in state SUCCEEDED or FAILED
    """
    sink = LogSink(action.contract_name)
    record = store.get(action.contract_name) if store is not None else None

    try:
        returned = operation(action, record, sink)
    except Exception as e:
        logger.debug("Action for %s raised", action.contract_name, exc_info=True)
        returned = Result(
            contract_name=action.contract_name,
            error=str(e) or type(e).__name__,
            record=record,
        )

    return _finalize(returned, action.contract_name, sink)


def execute(
    actions: Sequence[StrictAction],
    operation: Operation,
    store: Optional[Any] = None,
    reporter: Optional[Reporter] = None,
) -> List[Result]:
    """
    Run actions strictly in order; a failure never stops the actions after it.

    Args:
        actions: Strict actions, executed in list order
        operation: Callable(action, record, sink) -> Result; may write to the store
        store: Metadata store consulted for each action's current record
        reporter: Receives result rows per action, closed after the last one

    Returns:
        One Result per action, in the same order
    """
    results: List[Result] = []
    for index, action in enumerate(actions):
        logger.debug("%s %s (%d/%d)", ActionState.RUNNING.value, action.contract_name, index + 1, len(actions))
        result = execute_one(action, operation, store)
        results.append(result)

        if result.state is ActionState.FAILED:
            logger.warning("%s %s failed: %s", action.kind.value, action.contract_name, result.error)

        if reporter is not None:
            for row in result_rows(action, result):
                reporter.write(row, index)
            if index == len(actions) - 1:
                reporter.close()

    return results
