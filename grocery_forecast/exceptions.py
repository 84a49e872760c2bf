"""
Pipeline Exceptions

Every failure is fatal for the partition being processed; nothing here is
meant to be caught and recovered from inside the pipeline.

Exceptions raised in worker processes are pickled back to the orchestrator,
so each class rebuilds itself from its own constructor arguments.
"""

from typing import Optional, Tuple


class ForecastPipelineError(Exception):
    """Base class for pipeline failures"""


class ModelFitError(ForecastPipelineError):
    """A single (group, model) fit failed, so the whole partition fit fails"""

    def __init__(self, group: Tuple, model_name: str, reason: str):
        self.group = group
        self.model_name = model_name
        self.reason = reason
        super().__init__(f"Failed to fit model '{model_name}' for group {group}: {reason}")

    def __reduce__(self):
        return (self.__class__, (self.group, self.model_name, self.reason))


class MissingModelSetError(ForecastPipelineError):
    """ETS stage invoked without the basic model set it imputes from"""

    def __init__(self, message: str, group: Optional[Tuple] = None):
        self.group = group
        super().__init__(message)

    def __reduce__(self):
        return (self.__class__, (str(self), self.group))


class WorkerSetupError(ForecastPipelineError):
    """A library required by the workers cannot be imported"""

    def __init__(self, library: str, reason: str):
        self.library = library
        self.reason = reason
        super().__init__(f"Worker library '{library}' is not available: {reason}")

    def __reduce__(self):
        return (self.__class__, (self.library, self.reason))
