from enum import Enum


class LoginStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
