from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from common.settings import NetworkSettings
from common.stack_context import StackContext


class NexusNetwork(Construct):
    """VPC and security groups shared by the Nexus stack.

    Only the NFS rule between the service and the file system is declared
    here; CDK infers the load balancer rules from the listener and targets.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        context: StackContext,
        settings: NetworkSettings,
        nfs_port: int,
    ) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        self.settings = settings

        self.vpc = self.create_vpc()
        self.alb_security_group = self.create_security_group(
            "AlbSecurityGroup", "Security group for the Nexus load balancer"
        )
        self.service_security_group = self.create_security_group(
            "NexusServiceSecurityGroup", "Security group for the Nexus Fargate service"
        )
        self.efs_security_group = self.create_security_group(
            "EfsSecurityGroup", "Security group for the Nexus file system"
        )
        self.allow_nfs_from_service(nfs_port)

    def create_vpc(self) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            "Vpc",
            vpc_name=self.context.build_resource_name("Vpc"),
            ip_addresses=ec2.IpAddresses.cidr(self.settings.cidr),
            max_azs=self.settings.max_azs,
            nat_gateways=self.settings.nat_gateways,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name=self.settings.public_subnet_name,
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=self.settings.cidr_mask,
                ),
                ec2.SubnetConfiguration(
                    name=self.settings.container_subnet_name,
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=self.settings.cidr_mask,
                ),
                ec2.SubnetConfiguration(
                    name=self.settings.persistent_subnet_name,
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=self.settings.cidr_mask,
                ),
            ],
        )

    def create_security_group(self, construct_id: str, description: str) -> ec2.SecurityGroup:
        return ec2.SecurityGroup(
            self,
            id=construct_id,
            vpc=self.vpc,
            description=description,
        )

    def allow_nfs_from_service(self, nfs_port: int) -> None:
        self.efs_security_group.connections.allow_from(
            self.service_security_group,
            ec2.Port.tcp(nfs_port),
            f"Allow NFS (TCP/{nfs_port}) from the Nexus service",
        )

    @property
    def container_subnets(self) -> ec2.SubnetSelection:
        return ec2.SubnetSelection(subnet_group_name=self.settings.container_subnet_name)

    @property
    def persistent_subnets(self) -> ec2.SubnetSelection:
        return ec2.SubnetSelection(subnet_group_name=self.settings.persistent_subnet_name)
