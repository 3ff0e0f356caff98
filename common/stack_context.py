from attrs import define, field
from aws_cdk import RemovalPolicy, Stack, aws_logs as logs
from typing import Optional

import common.constants as constants


def _validate_env(instance, attribute, value: str) -> None:
    if not value or not value.isalnum():
        raise ValueError(
            f"Deployment environment must be a non-empty alphanumeric string, got {value!r}"
        )


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    env: str = field(
        default=constants.DEFAULT_ENV,
        validator=_validate_env,
        metadata={"description": "Deployment environment (dev, staging, prod)"},
    )
    service: str = field(default=constants.SERVICE_NAME, init=False)
    domain: str = field(default=constants.DOMAIN)
    component: str = field(default=constants.COMPONENT)

    # ---------- naming ----------
    def build_resource_name(
        self, resource_type: str, action: Optional[str] = None
    ) -> str:
        """Build resource name with optional action.

        Examples:
            - Without action: nexus-artifact-repository-cluster-dev
            - With action: nexus-artifact-repository-container-loggroup-dev
        """
        if action:
            return f"{self.service}-{self.domain}-{self.component}-{action}-{resource_type}-{self.env}".lower()
        return f"{self.service}-{self.domain}-{self.component}-{resource_type}-{self.env}".lower()

    def build_resource_id(self, resource_type: str, action: Optional[str] = None) -> str:
        """Build resource ID with optional action.

        Examples:
            - Without action: NexusArtifactRepositoryCluster
            - With action: NexusArtifactRepositoryContainerLoggroup
        """
        if action:
            return (
                f"{self.service.capitalize()}"
                f"{self.domain.capitalize()}"
                f"{self.component.capitalize()}"
                f"{action.capitalize()}"
                f"{resource_type.capitalize()}"
            )
        return (
            f"{self.service.capitalize()}"
            f"{self.domain.capitalize()}"
            f"{self.component.capitalize()}"
            f"{resource_type.capitalize()}"
        )

    # ---------- logging ----------
    def build_log_group(
        self,
        resource_type: str,
        action: Optional[str] = None,
        retention: logs.RetentionDays = logs.RetentionDays.ONE_YEAR,
    ) -> logs.LogGroup:
        return logs.LogGroup(
            self.scope,
            self.build_resource_id("LogGroup", action=action),
            log_group_name=f"/ecs/{self.build_resource_name(resource_type, action=action)}",
            removal_policy=RemovalPolicy.DESTROY,
            retention=retention,
        )
