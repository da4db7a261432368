from .form_state import FormEvent, FormState, MutualExclusionController
from .poller import PollState, PollStep, StatusPoller, advance
from .submission import RelayClient, SubmissionClient, SubmissionOutcome

__all__ = [
    "FormEvent",
    "FormState",
    "MutualExclusionController",
    "PollState",
    "PollStep",
    "StatusPoller",
    "advance",
    "RelayClient",
    "SubmissionClient",
    "SubmissionOutcome",
]
