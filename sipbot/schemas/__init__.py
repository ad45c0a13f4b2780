from .arguments import FundArgs, NavArgs, PlanArgs, StepUpArgs, UserArgs, validate_args

__all__ = [
    "PlanArgs",
    "StepUpArgs",
    "FundArgs",
    "NavArgs",
    "UserArgs",
    "validate_args",
]
