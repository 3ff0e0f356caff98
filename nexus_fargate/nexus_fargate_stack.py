from typing import Optional

from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Stack,
    aws_ecs as ecs,
    aws_efs as efs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_logs as logs,
)
from constructs import Construct

import common.constants as constants
from common.settings import NexusSettings
from common.stack_context import StackContext
from networking.nexus_network import NexusNetwork


class NexusFargateStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: Optional[NexusSettings] = None,
        deploy_env: str = constants.DEFAULT_ENV,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.settings = settings or NexusSettings()
        self.context = StackContext(scope=self, env=deploy_env)

        # VPC, security groups and the NFS rule between service and storage
        self.network = NexusNetwork(
            self,
            "Network",
            context=self.context,
            settings=self.settings.network,
            nfs_port=self.settings.storage.nfs_port,
        )

        # Persistent Nexus data
        self.file_system = self._build_file_system()
        self.access_point = self._build_access_point(self.file_system)

        # Compute
        self.cluster = self._build_cluster()
        self.log_group = self.context.build_log_group(
            "Container", retention=self.settings.task.log_retention
        )
        self.task_definition = self._build_task_definition(
            file_system=self.file_system, access_point=self.access_point
        )
        self.container = self._build_container(
            task_definition=self.task_definition, log_group=self.log_group
        )
        self.service = self._build_service(
            cluster=self.cluster, task_definition=self.task_definition
        )

        # Public entry point
        self.load_balancer = self._build_load_balancer()
        self.target_group = self._build_target_group(
            load_balancer=self.load_balancer, service=self.service
        )

        CfnOutput(self, "AlbDnsName", value=self.load_balancer.load_balancer_dns_name)

    # Resource creation

    def _build_file_system(self) -> efs.FileSystem:
        storage = self.settings.storage
        return efs.FileSystem(
            self,
            "FileSystem",
            vpc=self.network.vpc,
            file_system_name=self.context.build_resource_name("FileSystem"),
            encrypted=True,
            lifecycle_policy=storage.lifecycle_policy,
            performance_mode=storage.performance_mode,
            throughput_mode=storage.throughput_mode,
            security_group=self.network.efs_security_group,
            vpc_subnets=self.network.persistent_subnets,
            removal_policy=RemovalPolicy.DESTROY,
        )

    def _build_access_point(self, file_system: efs.IFileSystem) -> efs.AccessPoint:
        """Expose the file system under a fixed POSIX identity."""
        storage = self.settings.storage
        return efs.AccessPoint(
            self,
            "AccessPoint",
            file_system=file_system,
            path=storage.access_point_path,
            posix_user=efs.PosixUser(uid=storage.posix_uid, gid=storage.posix_gid),
        )

    def _build_cluster(self) -> ecs.Cluster:
        return ecs.Cluster(
            self,
            self.context.build_resource_id("Cluster"),
            cluster_name=self.context.build_resource_name("Cluster"),
            vpc=self.network.vpc,
            enable_fargate_capacity_providers=True,
        )

    def _build_task_definition(
        self, file_system: efs.IFileSystem, access_point: efs.IAccessPoint
    ) -> ecs.FargateTaskDefinition:
        task = self.settings.task
        task_definition = ecs.FargateTaskDefinition(
            self,
            "NexusTaskDef",
            family=self.context.build_resource_name("Task"),
            cpu=task.cpu,
            memory_limit_mib=task.memory_limit_mib,
        )
        task_definition.add_volume(
            name=self.settings.storage.volume_name,
            efs_volume_configuration=ecs.EfsVolumeConfiguration(
                file_system_id=file_system.file_system_id,
                transit_encryption="ENABLED",
                authorization_config=ecs.AuthorizationConfig(
                    access_point_id=access_point.access_point_id,
                ),
            ),
        )
        return task_definition

    def _build_container(
        self, task_definition: ecs.TaskDefinition, log_group: logs.ILogGroup
    ) -> ecs.ContainerDefinition:
        task = self.settings.task
        storage = self.settings.storage
        container = task_definition.add_container(
            "NexusContainerDef",
            container_name=task.container_name,
            image=ecs.ContainerImage.from_registry(task.image),
            port_mappings=[
                ecs.PortMapping(
                    container_port=task.container_port,
                    host_port=task.container_port,
                )
            ],
            # execute-command needs an init process to reap its child sessions
            linux_parameters=ecs.LinuxParameters(
                self,
                "NexusLinuxParameters",
                init_process_enabled=task.init_process_enabled,
            ),
            logging=ecs.LogDrivers.aws_logs(
                stream_prefix=task.log_stream_prefix,
                log_group=log_group,
            ),
        )
        container.add_mount_points(
            ecs.MountPoint(
                container_path=storage.mount_path,
                read_only=False,
                source_volume=storage.volume_name,
            )
        )
        container.add_ulimits(
            ecs.Ulimit(
                name=ecs.UlimitName.NOFILE,
                soft_limit=task.nofile_limit,
                hard_limit=task.nofile_limit,
            )
        )
        return container

    def _build_service(
        self, cluster: ecs.ICluster, task_definition: ecs.TaskDefinition
    ) -> ecs.FargateService:
        service = self.settings.service
        return ecs.FargateService(
            self,
            "Service",
            cluster=cluster,
            task_definition=task_definition,
            desired_count=service.desired_count,
            min_healthy_percent=service.min_healthy_percent,
            enable_execute_command=service.enable_execute_command,
            platform_version=service.platform_version,
            security_groups=[self.network.service_security_group],
            vpc_subnets=self.network.container_subnets,
        )

    def _build_load_balancer(self) -> elbv2.ApplicationLoadBalancer:
        return elbv2.ApplicationLoadBalancer(
            self,
            id="ApplicationLoadBalancer",
            vpc=self.network.vpc,
            internet_facing=True,
            security_group=self.network.alb_security_group,
        )

    def _build_target_group(
        self,
        load_balancer: elbv2.ApplicationLoadBalancer,
        service: ecs.FargateService,
    ) -> elbv2.ApplicationTargetGroup:
        """Forward HTTP traffic to the Nexus container."""
        lb = self.settings.load_balancer
        task = self.settings.task
        http_listener = load_balancer.add_listener(
            "HttpListener", port=lb.listener_port, open=True
        )
        return http_listener.add_targets(
            "NexusTargetGroup",
            port=lb.target_port,
            deregistration_delay=Duration.seconds(lb.deregistration_delay_seconds),
            health_check=elbv2.HealthCheck(
                path=lb.health_check_path,
                interval=Duration.seconds(lb.health_check_interval_seconds),
                unhealthy_threshold_count=lb.unhealthy_threshold_count,
            ),
            targets=[
                service.load_balancer_target(
                    container_name=task.container_name,
                    container_port=task.container_port,
                )
            ],
        )
