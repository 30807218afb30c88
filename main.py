from enum import Enum
from pathlib import Path

from rich.pretty import pprint

from bindery import *

__prog__ = "bindery-demo"


class Mode(Enum):
    FAST = "fast"
    EXACT = "exact"


class Task:
    pass


@program("align reads to a reference", group="alignment")
class Align(Task):
    def __init__(self, reference: Path, reads: list[Path], *, threads: int = 1, mode: Mode | None):
        self.reference = reference
        self.reads = reads
        self.threads = threads
        self.mode = mode


if __name__ == '__main__':
    pprint(describe(frozenset[Mode] | None))
    pprint(construct(set[Mode], "FAST", "EXACT", "FAST"))
    pprint(collect([Align]))

    bound = bind(Align, {"reference": "ref.fa", "reads": ["a.fq", "b.fq"], "threads": "4"})
    pprint(bound.arguments)

    resolve(describe(Mode), "SLOW").unwrap(shell=True, fancy=True)
