"""Typed, validated configuration for the Nexus Fargate stack.

Every value the stack declares is read from a :class:`NexusSettings` instance.
Defaults come from :mod:`common.constants`; the topology invariants (two AZs,
one NAT gateway, a single replica that is never allowed to drop below 100%
healthy) are ``init=False`` so they cannot be overridden.
"""
import ipaddress

from attrs import define, field
from attrs.validators import ge, in_, instance_of, le
from aws_cdk import (
    aws_ecs as ecs,
    aws_efs as efs,
    aws_logs as logs,
)

import common.constants as constants

_port = [instance_of(int), ge(1), le(65535)]
_positive = [instance_of(int), ge(1)]


def _valid_cidr(instance, attribute, value: str) -> None:
    try:
        network = ipaddress.IPv4Network(value)
    except ValueError as e:
        raise ValueError(f"{attribute.name} is not a valid IPv4 CIDR block: {value!r}") from e
    # VPC CIDR blocks must be between /16 and /28
    if not 16 <= network.prefixlen <= 28:
        raise ValueError(
            f"{attribute.name} prefix must be between /16 and /28, got {value!r}"
        )


def _numeric_id(instance, attribute, value: str) -> None:
    if not value.isdigit():
        raise ValueError(f"{attribute.name} must be a numeric POSIX id, got {value!r}")


def _absolute_path(instance, attribute, value: str) -> None:
    if not value.startswith("/"):
        raise ValueError(f"{attribute.name} must be an absolute path, got {value!r}")


@define(slots=True, frozen=True, kw_only=True)
class NetworkSettings:
    cidr: str = field(
        default=constants.VPC_CIDR, validator=[instance_of(str), _valid_cidr]
    )
    cidr_mask: int = field(
        default=constants.CIDR_MASK, validator=[instance_of(int), ge(16), le(28)]
    )
    public_subnet_name: str = field(
        default=constants.PUBLIC_SUBNET_NAME, validator=instance_of(str)
    )
    container_subnet_name: str = field(
        default=constants.CONTAINER_SUBNET_NAME, validator=instance_of(str)
    )
    persistent_subnet_name: str = field(
        default=constants.PERSISTENT_SUBNET_NAME, validator=instance_of(str)
    )
    max_azs: int = field(default=constants.MAX_AZS, init=False)
    nat_gateways: int = field(default=constants.NAT_GATEWAYS, init=False)

    def __attrs_post_init__(self) -> None:
        names = self.subnet_names
        if len(set(names)) != len(names):
            raise ValueError(f"Subnet tier names must be unique, got {names}")
        vpc_size = ipaddress.IPv4Network(self.cidr).num_addresses
        subnet_count = len(names) * self.max_azs
        needed = subnet_count * 2 ** (32 - self.cidr_mask)
        if needed > vpc_size:
            raise ValueError(
                f"{subnet_count} subnets of /{self.cidr_mask} do not fit in {self.cidr}"
            )

    @property
    def subnet_names(self) -> tuple[str, str, str]:
        return (
            self.public_subnet_name,
            self.container_subnet_name,
            self.persistent_subnet_name,
        )


@define(slots=True, frozen=True, kw_only=True)
class StorageSettings:
    lifecycle_policy: efs.LifecyclePolicy = field(
        default=efs.LifecyclePolicy.AFTER_14_DAYS,
        validator=instance_of(efs.LifecyclePolicy),
    )
    performance_mode: efs.PerformanceMode = field(
        default=efs.PerformanceMode.GENERAL_PURPOSE,
        validator=instance_of(efs.PerformanceMode),
    )
    throughput_mode: efs.ThroughputMode = field(
        default=efs.ThroughputMode.BURSTING,
        validator=instance_of(efs.ThroughputMode),
    )
    nfs_port: int = field(default=constants.NFS_PORT, validator=_port)
    access_point_path: str = field(
        default=constants.ACCESS_POINT_PATH,
        validator=[instance_of(str), _absolute_path],
    )
    posix_uid: str = field(
        default=constants.ACCESS_POINT_POSIX_UID,
        validator=[instance_of(str), _numeric_id],
        metadata={"description": "uid every file system request is made as"},
    )
    posix_gid: str = field(
        default=constants.ACCESS_POINT_POSIX_GID,
        validator=[instance_of(str), _numeric_id],
        metadata={"description": "gid every file system request is made as"},
    )
    volume_name: str = field(
        default=constants.DATA_VOLUME_NAME, validator=instance_of(str)
    )
    mount_path: str = field(
        default=constants.DATA_MOUNT_PATH,
        validator=[instance_of(str), _absolute_path],
    )


@define(slots=True, frozen=True, kw_only=True)
class TaskSettings:
    cpu: int = field(
        default=constants.TASK_CPU,
        validator=[instance_of(int), in_(constants.FARGATE_MEMORY_RANGES)],
    )
    memory_limit_mib: int = field(
        default=constants.TASK_MEMORY_LIMIT_MIB, validator=instance_of(int)
    )
    image: str = field(default=constants.NEXUS_IMAGE, validator=instance_of(str))
    container_name: str = field(
        default=constants.CONTAINER_NAME, validator=instance_of(str)
    )
    container_port: int = field(default=constants.CONTAINER_PORT, validator=_port)
    nofile_limit: int = field(default=constants.NOFILE_LIMIT, validator=_positive)
    init_process_enabled: bool = field(default=True, validator=instance_of(bool))
    log_stream_prefix: str = field(
        default=constants.LOG_STREAM_PREFIX, validator=instance_of(str)
    )
    log_retention: logs.RetentionDays = field(
        default=logs.RetentionDays.ONE_YEAR,
        validator=instance_of(logs.RetentionDays),
    )

    @memory_limit_mib.validator
    def _check_memory_fits_cpu(self, attribute, value: int) -> None:
        low, high = constants.FARGATE_MEMORY_RANGES[self.cpu]
        if not low <= value <= high or (value % 1024 and value != 512):
            raise ValueError(
                f"Fargate does not offer {value} MiB with {self.cpu} CPU units "
                f"(allowed: {low}-{high} MiB in 1 GiB steps)"
            )


@define(slots=True, frozen=True, kw_only=True)
class ServiceSettings:
    platform_version: ecs.FargatePlatformVersion = field(
        default=ecs.FargatePlatformVersion.VERSION1_4,
        validator=instance_of(ecs.FargatePlatformVersion),
    )
    enable_execute_command: bool = field(default=True, validator=instance_of(bool))
    desired_count: int = field(default=constants.DESIRED_COUNT, init=False)
    min_healthy_percent: int = field(
        default=constants.MIN_HEALTHY_PERCENT, init=False
    )


@define(slots=True, frozen=True, kw_only=True)
class LoadBalancerSettings:
    listener_port: int = field(default=constants.LISTENER_PORT, validator=_port)
    target_port: int = field(default=constants.TARGET_PORT, validator=_port)
    health_check_path: str = field(
        default=constants.HEALTH_CHECK_PATH,
        validator=[instance_of(str), _absolute_path],
    )
    health_check_interval_seconds: int = field(
        default=constants.HEALTH_CHECK_INTERVAL_SECONDS,
        validator=[instance_of(int), ge(5), le(300)],
    )
    unhealthy_threshold_count: int = field(
        default=constants.UNHEALTHY_THRESHOLD_COUNT,
        validator=[instance_of(int), ge(2), le(10)],
    )
    deregistration_delay_seconds: int = field(
        default=constants.DEREGISTRATION_DELAY_SECONDS,
        validator=[instance_of(int), ge(0), le(3600)],
    )


@define(slots=True, frozen=True, kw_only=True)
class NexusSettings:
    network: NetworkSettings = field(
        factory=NetworkSettings, validator=instance_of(NetworkSettings)
    )
    storage: StorageSettings = field(
        factory=StorageSettings, validator=instance_of(StorageSettings)
    )
    task: TaskSettings = field(factory=TaskSettings, validator=instance_of(TaskSettings))
    service: ServiceSettings = field(
        factory=ServiceSettings, validator=instance_of(ServiceSettings)
    )
    load_balancer: LoadBalancerSettings = field(
        factory=LoadBalancerSettings, validator=instance_of(LoadBalancerSettings)
    )
