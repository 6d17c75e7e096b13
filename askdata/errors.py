from __future__ import annotations


class PipelineError(RuntimeError):
    """Base class for failures that abort a question before an answer exists."""


class GenerationFailure(PipelineError):
    """The model produced no usable SQL or answer text."""


class ValidationFailure(PipelineError):
    """Generated SQL was rejected before reaching the data store."""


class ExecutionFailure(PipelineError):
    """The data store could not run the statement."""


__all__ = ["PipelineError", "GenerationFailure", "ValidationFailure", "ExecutionFailure"]
