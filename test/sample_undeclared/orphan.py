from sample_programs.base import Task


class Orphan(Task):
    def run(self):
        return "orphan"
