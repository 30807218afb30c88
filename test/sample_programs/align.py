from bindery import program

from .base import Task


@program("align reads to a reference", group="alignment")
class Align(Task):
    def run(self):
        return "align"


@program(omit=True)
class Scratch(Task):
    def run(self):
        return "scratch"


class Reference:
    """Not a task; never discovered."""
