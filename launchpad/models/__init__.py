from .account import Account
from .submission import Submission, SUBMISSION_STATUSES
from .login_activity import LoginActivity

__all__ = ["Account", "Submission", "SUBMISSION_STATUSES", "LoginActivity"]
