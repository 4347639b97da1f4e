"""
Process Orchestrator.

Recursive evaluator over the command tree. Sequential and conditional nodes
run in the calling process; Parallel and Pipe nodes fork one branch per side
and join both.
"""

from functools import partial
from typing import Optional, assert_never

from treeshell.execution.application.simple_executor import SimpleCommandExecutor
from treeshell.execution.domain.status import FAILURE, SHELL_EXIT, SUCCESS
from treeshell.execution.infrastructure.branches import Branch, Channel, spawn_branch
from treeshell.shared.domain.exceptions import ShellError
from treeshell.shared.infrastructure.logging import get_logger
from treeshell.shared.infrastructure.reporting import report
from treeshell.tree.domain.models import (
    CommandNode,
    ConditionalIfNonZero,
    ConditionalIfZero,
    Parallel,
    Pipe,
    Sequential,
    SimpleCommand,
)

logger = get_logger(__name__)


class ProcessOrchestrator:
    """
    Evaluate command trees.

    Status rules:
    - Sequential: status of the right side
    - Conditionals: right side runs only when the left status is zero (&&)
      or nonzero (||); otherwise the left status stands
    - Parallel: SUCCESS when both branches were spawned and joined; the
      branches' own exit codes are not looked at
    - Pipe: SUCCESS when both branches were joined and both exited with 0

    SHELL_EXIT from a left operand stops Sequential and conditional
    evaluation and is returned unchanged: `exit; x` and `exit || x` never
    run `x`, even though both operators would normally go on to the right.
    """

    def __init__(self, executor: SimpleCommandExecutor):
        self.executor = executor

    def evaluate(self, node: CommandNode) -> int:
        match node:
            case SimpleCommand():
                return self.executor.run(node)
            case Sequential(left=left, right=right):
                status = self.evaluate(left)
                if status == SHELL_EXIT:
                    return status
                return self.evaluate(right)
            case ConditionalIfZero(left=left, right=right):
                status = self.evaluate(left)
                if status != 0:
                    return status
                return self.evaluate(right)
            case ConditionalIfNonZero(left=left, right=right):
                status = self.evaluate(left)
                if status == 0 or status == SHELL_EXIT:
                    return status
                return self.evaluate(right)
            case Parallel(left=left, right=right):
                return self._run_parallel(left, right)
            case Pipe(left=left, right=right):
                return self._run_pipe(left, right)
            case _:
                assert_never(node)

    def _run_parallel(self, left: CommandNode, right: CommandNode) -> int:
        branches = self._spawn_pair(
            partial(self.evaluate, left),
            partial(self.evaluate, right),
        )
        if len(branches) < 2:
            self._join_all(branches)
            return FAILURE

        codes = self._join_all(branches)
        return SUCCESS if codes is not None else FAILURE

    def _run_pipe(self, left: CommandNode, right: CommandNode) -> int:
        try:
            channel = Channel()
        except ShellError as e:
            report(e.message)
            return FAILURE

        # Both ends are closed here once the branches hold their copies,
        # otherwise the reader would never see end-of-input.
        with channel:
            branches = self._spawn_pair(
                partial(self.evaluate, left),
                partial(self.evaluate, right),
                left_options={"stdout": channel.write_fd, "close": (channel.read_fd,)},
                right_options={"stdin": channel.read_fd, "close": (channel.write_fd,)},
            )
        if len(branches) < 2:
            # A writer without a reader gets EPIPE now that the channel is closed
            self._join_all(branches)
            return FAILURE

        codes = self._join_all(branches)
        if codes is None or any(code != 0 for code in codes):
            return FAILURE
        return SUCCESS

    def _spawn_pair(
        self,
        left_work,
        right_work,
        left_options: Optional[dict] = None,
        right_options: Optional[dict] = None,
    ) -> list[Branch]:
        """
        Fork one branch per side.

        Returns the branches that were started; fewer than two means a spawn
        failed and the caller must still join the ones returned.
        """
        try:
            left = spawn_branch(left_work, label="left branch", **(left_options or {}))
        except ShellError as e:
            report(e.message)
            return []

        try:
            right = spawn_branch(right_work, label="right branch", **(right_options or {}))
        except ShellError as e:
            report(e.message)
            return [left]

        return [left, right]

    def _join_all(self, branches: list[Branch]) -> Optional[list[int]]:
        """Join every branch; None if any wait failed."""
        codes = []
        failed = False
        for branch in branches:
            try:
                codes.append(branch.join())
            except ShellError as e:
                report(e.message)
                failed = True
        return None if failed else codes
