import pytest
from attrs.exceptions import FrozenInstanceError
from aws_cdk import aws_ecs as ecs, aws_efs as efs, aws_logs as logs

from common.settings import (
    LoadBalancerSettings,
    NetworkSettings,
    NexusSettings,
    ServiceSettings,
    StorageSettings,
    TaskSettings,
)


def test_defaults_describe_the_nexus_deployment():
    settings = NexusSettings()

    assert settings.network.cidr == "10.0.0.0/16"
    assert settings.network.subnet_names == ("public", "container", "persistent")
    assert settings.network.max_azs == 2
    assert settings.network.nat_gateways == 1
    assert settings.storage.lifecycle_policy == efs.LifecyclePolicy.AFTER_14_DAYS
    assert settings.storage.nfs_port == 2049
    assert (settings.storage.posix_uid, settings.storage.posix_gid) == ("0", "0")
    assert settings.task.image == "sonatype/nexus3:3.33.1"
    assert (settings.task.cpu, settings.task.memory_limit_mib) == (1024, 2048)
    assert settings.task.log_retention == logs.RetentionDays.ONE_YEAR
    assert settings.service.platform_version == ecs.FargatePlatformVersion.VERSION1_4
    assert settings.load_balancer.health_check_path == "/"


def test_settings_are_immutable():
    settings = NexusSettings()
    with pytest.raises(FrozenInstanceError):
        settings.task = TaskSettings(cpu=2048, memory_limit_mib=4096)


# ------------------- Fixed topology invariants -------------------


@pytest.mark.parametrize(
    "factory,kwargs",
    [
        (NetworkSettings, {"max_azs": 3}),
        (NetworkSettings, {"nat_gateways": 2}),
        (ServiceSettings, {"desired_count": 2}),
        (ServiceSettings, {"min_healthy_percent": 50}),
    ],
    ids=["max_azs", "nat_gateways", "desired_count", "min_healthy_percent"],
)
def test_fixed_invariants_cannot_be_overridden(factory, kwargs):
    with pytest.raises(TypeError):
        factory(**kwargs)


def test_service_keeps_one_fully_healthy_replica():
    service = ServiceSettings(enable_execute_command=False)
    assert service.desired_count == 1
    assert service.min_healthy_percent == 100


# ------------------- Validation errors -------------------


@pytest.mark.parametrize(
    "factory,kwargs",
    [
        (NetworkSettings, {"cidr": "10.0.0.0/33"}),
        (NetworkSettings, {"cidr": "fd00::/56"}),
        (NetworkSettings, {"cidr": "10.0.0.0/8"}),
        (NetworkSettings, {"cidr_mask": 16}),
        (NetworkSettings, {"cidr": "10.0.0.0/22", "cidr_mask": 24}),
        (NetworkSettings, {"cidr_mask": 30}),
        (NetworkSettings, {"container_subnet_name": "public"}),
        (StorageSettings, {"nfs_port": 0}),
        (StorageSettings, {"posix_uid": "nexus"}),
        (StorageSettings, {"posix_gid": "-1"}),
        (StorageSettings, {"mount_path": "nexus-data"}),
        (TaskSettings, {"cpu": 1000}),
        (TaskSettings, {"memory_limit_mib": 1024}),
        (TaskSettings, {"cpu": 512, "memory_limit_mib": 1536}),
        (TaskSettings, {"container_port": 70000}),
        (LoadBalancerSettings, {"unhealthy_threshold_count": 11}),
        (LoadBalancerSettings, {"health_check_interval_seconds": 0}),
        (LoadBalancerSettings, {"health_check_path": "health"}),
    ],
    ids=[
        "cidr",
        "ipv6_cidr",
        "cidr_prefix_too_wide",
        "subnets_exceed_vpc",
        "subnets_exceed_small_vpc",
        "cidr_mask",
        "duplicate_subnet_name",
        "nfs_port",
        "non_numeric_posix_uid",
        "negative_posix_gid",
        "relative_mount_path",
        "unsupported_cpu",
        "memory_below_cpu_minimum",
        "memory_not_in_gib_steps",
        "container_port",
        "unhealthy_threshold",
        "health_check_interval",
        "relative_health_check_path",
    ],
)
def test_out_of_range_values_raise_value_error(factory, kwargs):
    with pytest.raises(ValueError):
        factory(**kwargs)


@pytest.mark.parametrize(
    "factory,kwargs",
    [
        (NetworkSettings, {"cidr_mask": "24"}),
        (StorageSettings, {"posix_uid": 0}),
        (StorageSettings, {"lifecycle_policy": "AFTER_14_DAYS"}),
        (TaskSettings, {"init_process_enabled": "yes"}),
        (NexusSettings, {"task": {"cpu": 1024}}),
    ],
    ids=["cidr_mask", "posix_uid", "lifecycle_policy", "init_process", "nested"],
)
def test_wrong_types_raise_type_error(factory, kwargs):
    with pytest.raises(TypeError):
        factory(**kwargs)


@pytest.mark.parametrize(
    "cpu,memory_limit_mib",
    [(256, 512), (256, 2048), (512, 4096), (2048, 16384), (4096, 30720)],
)
def test_supported_fargate_sizes_are_accepted(cpu: int, memory_limit_mib: int):
    task = TaskSettings(cpu=cpu, memory_limit_mib=memory_limit_mib)
    assert task.memory_limit_mib == memory_limit_mib


@pytest.mark.parametrize(
    "cidr,cidr_mask",
    [("10.0.0.0/16", 24), ("10.1.0.0/20", 24), ("10.2.0.0/24", 28)],
)
def test_subnets_that_fit_the_vpc_are_accepted(cidr: str, cidr_mask: int):
    network = NetworkSettings(cidr=cidr, cidr_mask=cidr_mask)
    assert (network.cidr, network.cidr_mask) == (cidr, cidr_mask)
