from hrtests.models.user import User
from hrtests.models.test_result import TestResult
from hrtests.models.session import UserSession

__all__ = ["User", "TestResult", "UserSession"]
