"""Line-oriented console I/O for the interactive programs."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TextIO

from agent_workflows.workflow.errors import ensure_workflow_error

QUIT_WORDS: frozenset[str] = frozenset({"q", "quit", "exit"})


@dataclass(frozen=True, slots=True)
class ConsoleInput:
    prompt: str
    iteration: int


class ConsoleReader:
    """Yields user prompts until a quit word or end of input.

    Iterating again restarts prompting. `fallback` replaces a blank first
    prompt so programs have a sensible demo question.
    """

    def __init__(
        self,
        *,
        fallback: str | None = None,
        input_prompt: str = "User 👤 : ",
        input_fn: Callable[[str], str] | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.fallback = fallback
        self.input_prompt = input_prompt
        self._input = input_fn or input
        self._output = output

    @property
    def output(self) -> TextIO:
        return self._output or sys.stdout

    def write(self, role: str, text: str) -> None:
        print(f"{role} {text}", file=self.output, flush=True)

    def write_error(self, error: BaseException) -> None:
        self.write("Error", ensure_workflow_error(error).dump())

    def __iter__(self) -> Iterator[ConsoleInput]:
        iteration = 0
        while True:
            try:
                raw = self._input(self.input_prompt)
            except EOFError:
                return
            prompt = raw.strip()
            if prompt.lower() in QUIT_WORDS:
                return
            if not prompt:
                if iteration == 0 and self.fallback:
                    prompt = self.fallback
                    self.write(self.input_prompt.strip(), prompt)
                else:
                    self.write("ℹ️ ", "Please provide a non-empty input (or 'q' to quit).")
                    continue
            iteration += 1
            yield ConsoleInput(prompt=prompt, iteration=iteration)
