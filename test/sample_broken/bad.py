from sample_programs.base import Task

raise RuntimeError("bad module")


class Unreachable(Task):
    def run(self):
        return "unreachable"
