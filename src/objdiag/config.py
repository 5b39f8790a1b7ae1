from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class CheckPolicy(str, Enum):
    """When the self-check runs relative to an intercepted operation."""
    AFTER = "after"
    BOTH = "both"


@dataclass
class Settings:
    enabled: bool = True
    check_method: str = "self_check"
    check_policy: CheckPolicy = CheckPolicy.AFTER
    skip_types: Tuple[type, ...] = ()


@dataclass(frozen=True)
class GateSettings:
    environment_variables: Tuple[str, ...] = ("OBJDIAG_ENV", "PYTHON_ENV")
    production_values: Tuple[str, ...] = ("production", "prod")
    local_hostnames: Tuple[str, ...] = ("localhost", "localhost.localdomain")
