class LLMException(Exception):
    """Base class for all llmcli exceptions/errors."""


# ==== configuration ====
class ConfigurationError(LLMException):
    """A credential or other required environment value is missing.

    The message should tell the user which value is missing and how to obtain it.
    """

    def __init__(self, msg: str, variable: str = None):
        super().__init__(msg)
        self.variable = variable


class MissingModelDependencies(LLMException):
    """You are trying to use an engine but do not have engine-specific packages installed."""


class PromptError(LLMException):
    """For some reason, the prompt could not be resolved (e.g. it is empty or the prompt file is unreadable)."""


# ==== upstream ====
class UpstreamError(LLMException):
    """The backend failed to produce a completion.

    This covers network failures, non-2xx responses, malformed responses, and local processes that could not be
    spawned or exited with a non-zero status.
    """

    def __init__(self, msg: str, backend: str = None):
        super().__init__(msg)
        self.backend = backend
