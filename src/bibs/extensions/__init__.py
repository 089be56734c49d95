"""Pluggable environment terms for behaviour utility."""

from bibs.extensions.base import EnvironmentModel, NullEnvironment
from bibs.extensions.environment import ConstantEnvironment, ScheduledEnvironment

__all__ = [
    "EnvironmentModel",
    "NullEnvironment",
    "ConstantEnvironment",
    "ScheduledEnvironment",
]
