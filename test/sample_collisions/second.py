from bindery import program

from sample_programs.base import Task


@program
class Merge(Task):
    def run(self):
        return "second"


@program
class Split(Task):
    def run(self):
        return "split"
