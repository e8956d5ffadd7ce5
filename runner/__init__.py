from runner.models import ExecutionResult, OutputRecord
from runner.sandbox import ProcessInterpreter, SnippetRunner, run_block

__all__ = ["ExecutionResult", "OutputRecord", "ProcessInterpreter", "SnippetRunner", "run_block"]
