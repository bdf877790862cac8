import yaml
import re
from pathlib import Path
from yaml.loader import SafeLoader
from typing import Dict, List, Optional, Any


class AppNameValidationError(Exception):
    """Raised when AppName validation fails."""
    pass


# ELB names ("{AppName}-nlb", "{AppName}-tg") are capped at 32 characters.
APP_NAME_MAX_LENGTH = 28
APP_NAME_MIN_LENGTH = 3

DEFAULT_HEALTH_CHECK = {
    'IntervalSeconds': 30,
    'HealthyThresholdCount': 3,
    'UnhealthyThresholdCount': 3,
}

DEFAULT_SCHEDULED_TASK = {
    'Enabled': True,
    'ScheduleExpression': 'rate(1 hour)',
    'TaskCount': 1,
}


class Config:

    _environment = 'development'
    data = {}

    def __init__(self, environment, config_dir: Optional[str] = None) -> None:
        self._environment = environment
        self._config_dir = Path(config_dir) if config_dir else Path('config')
        self.load()
        self._validate_app_name()

    def load(self) -> dict:
        path = self._config_dir / f'{self._environment}.yaml'
        with open(path, encoding='utf-8') as f:
            self.data = yaml.load(f, Loader=SafeLoader) or {}
        return self.data

    @property
    def environment(self) -> str:
        return self._environment

    def get(self, key):
        return self.data[key]

    def get_optional(self, key: str, default: Any = None) -> Any:
        value = self.data.get(key)
        return default if value is None else value

    def _validate_app_name(self) -> None:
        """
        Validate AppName against the naming constraints of every resource derived from it.

        Raises:
            AppNameValidationError: If AppName doesn't meet requirements
        """
        app_name = self.data.get('AppName')

        if not app_name:
            raise AppNameValidationError("AppName is required in configuration")

        if not isinstance(app_name, str):
            raise AppNameValidationError("AppName must be a string")

        app_name = app_name.strip()

        if not app_name:
            raise AppNameValidationError("AppName cannot be empty or whitespace only")

        # Load balancer and target group names: 32 chars max, "-nlb"/"-tg" suffix.
        if len(app_name) > APP_NAME_MAX_LENGTH:
            raise AppNameValidationError(
                f"AppName must be {APP_NAME_MAX_LENGTH} characters or less. "
                f"Current length: {len(app_name)}. "
                f"Constraint: Network Load Balancer and target group names (32 chars) minus suffixes"
            )

        if len(app_name) < APP_NAME_MIN_LENGTH:
            raise AppNameValidationError(
                f"AppName must be at least {APP_NAME_MIN_LENGTH} characters long. "
                f"Current length: {len(app_name)}"
            )

        # ELB names may not start or end with a hyphen; CloudFormation stack
        # names must start with a letter.
        if not re.match(r'^[a-z]([a-z0-9-]*[a-z0-9])?$', app_name):
            raise AppNameValidationError(
                f"AppName '{app_name}' contains invalid characters. "
                f"Must use only lowercase letters (a-z), numbers (0-9), and hyphens (-). "
                f"Must start with a letter and end with a letter or number"
            )

        if '--' in app_name:
            raise AppNameValidationError(
                f"AppName '{app_name}' contains consecutive hyphens"
            )

        # "internal-" is reserved by Elastic Load Balancing
        if app_name.startswith('internal-'):
            raise AppNameValidationError(
                f"AppName '{app_name}' cannot start with 'internal-' (reserved by Elastic Load Balancing)"
            )

    def get_validated_app_name(self) -> str:
        """
        Get the validated application name.

        Returns:
            Validated application name

        Raises:
            AppNameValidationError: If validation fails
        """
        app_name = self.data.get('AppName')

        if not app_name:
            raise AppNameValidationError("AppName not found in configuration")

        self._validate_app_name()

        return app_name.strip()

    def get_health_check_config(self) -> Dict[str, int]:
        """Get target group health check settings merged over the defaults."""
        return {**DEFAULT_HEALTH_CHECK, **(self.get_optional('HealthCheck') or {})}

    def get_scheduled_task_config(self) -> Dict[str, Any]:
        """Get scheduled task settings merged over the defaults."""
        return {**DEFAULT_SCHEDULED_TASK, **(self.get_optional('ScheduledTask') or {})}

    def is_scheduled_task_enabled(self) -> bool:
        return bool(self.get_scheduled_task_config().get('Enabled'))

    def is_nlb_security_group_enabled(self) -> bool:
        return bool(self.get_optional('EnableNlbSecurityGroup', False))

    def get_allowed_ingress_cidrs(self) -> List[str]:
        return list(self.get_optional('AllowedIngressCidrs', ['0.0.0.0/0']))

    def get_state_backend_config(self) -> Optional[Dict[str, Any]]:
        """Get the remote state backend coordinates section, if present."""
        return self.get_optional('AuthorizerStateBackend')
