"""Row shaping for action previews and results.

Rendering is left to a Reporter; this module only decides which text goes in
which cell. Multi-line cells are expressed as columns of lines and turned into
rows with spread_rows().
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Protocol, Sequence, Tuple

from .constants import TRUNCATE_LENGTH
from .types import ActionKind, ArgumentRecord, Result, StrictAction

logger = logging.getLogger(__name__)

PREVIEW_TITLES = {
    ActionKind.DEPLOY: "Deployment preview:",
    ActionKind.INITIALIZE: "Initialization preview:",
    ActionKind.VERIFY: "Verification preview:",
}
RESULT_TITLES = {
    ActionKind.DEPLOY: "Deployment results:",
    ActionKind.INITIALIZE: "Initialization results:",
    ActionKind.VERIFY: "Verification results:",
}
COMPLETION_MESSAGES = {
    ActionKind.DEPLOY: "Deployment complete.",
    ActionKind.INITIALIZE: "Initialization complete.",
    ActionKind.VERIFY: "Verification complete.",
}
PREVIEW_HEADERS = {
    ActionKind.DEPLOY: ["Contract", "Constr Args", "Libs"],
    ActionKind.INITIALIZE: ["Contract", "Function", "Args"],
    ActionKind.VERIFY: ["Contract", "Constr Args", "Libs"],
}
RESULT_HEADERS = {
    ActionKind.DEPLOY: ["Contract", "Address", "Response"],
    ActionKind.INITIALIZE: ["Contract", "Function", "Args", "Response"],
    ActionKind.VERIFY: ["Contract", "Constr Args", "Libs", "Response"],
}


class Reporter(Protocol):
    """Sink for table rows; index is the position of the action the row belongs to."""

    def write(self, row: List[str], index: int) -> None: ...

    def close(self) -> None: ...


@dataclass
class RowCollector:
    """Reporter that keeps rows in memory."""

    title: str = ""
    headers: List[str] = field(default_factory=list)
    rows: List[Tuple[int, List[str]]] = field(default_factory=list)
    closed: bool = False

    def write(self, row: List[str], index: int) -> None:
        self.rows.append((index, list(row)))

    def close(self) -> None:
        self.closed = True

    def rows_for(self, index: int) -> List[List[str]]:
        return [row for row_index, row in self.rows if row_index == index]


class LogReporter:
    """Reporter that emits each row as a log line."""

    def __init__(self, title: str, headers: Sequence[str]):
        self.title = title
        self.headers = list(headers)
        logger.info("%s %s", title, " | ".join(self.headers))

    def write(self, row: List[str], index: int) -> None:
        logger.info("[%d] %s", index, " | ".join(cell.strip() for cell in row))

    def close(self) -> None:
        logger.info("%s done", self.title)


def truncate(text: str, length: int = TRUNCATE_LENGTH) -> str:
    return text[:length]


def spread_rows(columns: Sequence[Sequence[str]]) -> List[List[str]]:
    """
    Transpose per-column line lists into table rows, padding with "".

    [["Name"], ["a1", "a2"], ["l1"]] -> [["Name", "a1", "l1"], ["", "a2", ""]]
    """
    if not columns:
        return []
    height = max((len(column) for column in columns), default=0)
    rows = [["" for _ in columns] for _ in range(height)]
    for col_index, column in enumerate(columns):
        for row_index, value in enumerate(column):
            rows[row_index][col_index] = value
    return rows


def format_arg_lines(record: ArgumentRecord) -> List[str]:
    """One "  name(type): value" line per positional argument."""
    if not record.args:
        return [""]

    lines = []
    for i, value in enumerate(record.args):
        name = record.arg_names[i] if i < len(record.arg_names) else ""
        sig = f"({record.arg_sigs[i]})" if i < len(record.arg_sigs) else ""
        lines.append(f"  {name}{sig}: {value}")
    return lines


def format_library_lines(libraries: Mapping[str, str]) -> List[str]:
    if not libraries:
        return [""]
    return [f"  {name}: {address}" for name, address in libraries.items()]


def preview_rows(action: StrictAction) -> List[List[str]]:
    """Rows describing an action before it runs."""
    match action.kind:
        case ActionKind.DEPLOY:
            columns = [
                [f"  {action.contract_name}"],
                format_arg_lines(action.args),
                format_library_lines(action.libraries),
            ]
        case ActionKind.INITIALIZE:
            columns = [
                [f"  {action.contract_name} ({action.address})"],
                [f"  {action.function_name}"],
                format_arg_lines(action.args),
            ]
        case ActionKind.VERIFY:
            columns = [
                [f"  {action.contract_name} ({action.address})"],
                format_arg_lines(action.args),
                format_library_lines(action.libraries),
            ]
        case _:
            raise TypeError(f"Unsupported action: {action!r}")
    return spread_rows(columns)


def _response_text(result: Result) -> str:
    if result.transaction is not None and result.error is None:
        return f"  {truncate(result.transaction.describe())}"
    return f"  {result.error} {' '.join(result.logs)}".rstrip()


def result_rows(action: StrictAction, result: Result) -> List[List[str]]:
    """Rows describing the outcome of an action."""
    response = _response_text(result)
    match action.kind:
        case ActionKind.DEPLOY:
            address = result.record.address if result.record is not None and result.succeeded else ""
            return [[f"  {action.contract_name}", f"  {address}" if address else "", response]]
        case ActionKind.INITIALIZE:
            columns = [
                [f"  {action.contract_name}"],
                [f"  {action.function_name}"],
                format_arg_lines(action.args),
                [response],
            ]
        case ActionKind.VERIFY:
            columns = [
                [f"  {action.contract_name} ({action.address})"],
                format_arg_lines(action.args),
                format_library_lines(action.libraries),
                [response],
            ]
        case _:
            raise TypeError(f"Unsupported action: {action!r}")
    return spread_rows(columns)


def preview(reporter: Reporter, actions: Sequence[StrictAction]) -> None:
    """Write preview rows for every action, then close the reporter."""
    for index, action in enumerate(actions):
        for row in preview_rows(action):
            reporter.write(row, index)
    if actions:
        reporter.close()
