"""Detection rules and the rule registry."""

from typing import Optional

from ..matcher import ExecutionLimits
from .base import PatternSpec, Rule
from .cookie_security import CookieSecurityRule
from .cors_config import CORSConfigRule
from .env_exposure import EnvExposureRule
from .eval_usage import EvalUsageRule
from .hardcoded_secrets import HardcodedSecretsRule
from .jwt_storage import JWTStorageRule
from .password_security import PasswordSecurityRule
from .weak_crypto import WeakCryptoRule

# Declaration order; also the tie-breaker when ordering findings.
RULE_CLASSES: list[type[Rule]] = [
    HardcodedSecretsRule,
    JWTStorageRule,
    EvalUsageRule,
    WeakCryptoRule,
    PasswordSecurityRule,
    CookieSecurityRule,
    CORSConfigRule,
    EnvExposureRule,
]


def get_all_rules(limits: Optional[ExecutionLimits] = None) -> list[Rule]:
    """Fresh instances of every rule, in declaration order."""
    return [rule_class(limits) for rule_class in RULE_CLASSES]


def get_rule_by_id(rule_id: str, limits: Optional[ExecutionLimits] = None) -> Optional[Rule]:
    for rule_class in RULE_CLASSES:
        if rule_class.id == rule_id:
            return rule_class(limits)
    return None


__all__ = [
    "RULE_CLASSES",
    "PatternSpec",
    "Rule",
    "CookieSecurityRule",
    "CORSConfigRule",
    "EnvExposureRule",
    "EvalUsageRule",
    "HardcodedSecretsRule",
    "JWTStorageRule",
    "PasswordSecurityRule",
    "WeakCryptoRule",
    "get_all_rules",
    "get_rule_by_id",
]
