DEFAULT_ENV = "dev"

# Naming convention components
SERVICE_NAME = "nexus"  # The application name
DOMAIN = "artifact"  # The domain being served
COMPONENT = "repository"  # The functional component/subsystem

# Network
VPC_CIDR = "10.0.0.0/16"
CIDR_MASK = 24
MAX_AZS = 2
NAT_GATEWAYS = 1
PUBLIC_SUBNET_NAME = "public"
CONTAINER_SUBNET_NAME = "container"
PERSISTENT_SUBNET_NAME = "persistent"

# Storage
NFS_PORT = 2049
ACCESS_POINT_PATH = "/"
# Nexus runs as uid 200; mapped to root so it can write to the file system
ACCESS_POINT_POSIX_UID = "0"
ACCESS_POINT_POSIX_GID = "0"
DATA_VOLUME_NAME = "nexus-data-volume"
DATA_MOUNT_PATH = "/nexus-data"

# Task
NEXUS_IMAGE = "sonatype/nexus3:3.33.1"
CONTAINER_NAME = "nexus"
CONTAINER_PORT = 8081
TASK_CPU = 1024
# Nexus gets OOM-killed below 2 GiB
TASK_MEMORY_LIMIT_MIB = 2048
NOFILE_LIMIT = 65536
LOG_STREAM_PREFIX = "nexus"

# Fargate CPU units -> (min, max) memory in MiB
FARGATE_MEMORY_RANGES = {
    256: (512, 2048),
    512: (1024, 4096),
    1024: (2048, 8192),
    2048: (4096, 16384),
    4096: (8192, 30720),
}

# Service
DESIRED_COUNT = 1
MIN_HEALTHY_PERCENT = 100

# Load balancer
LISTENER_PORT = 80
TARGET_PORT = 80
HEALTH_CHECK_PATH = "/"
HEALTH_CHECK_INTERVAL_SECONDS = 30
UNHEALTHY_THRESHOLD_COUNT = 10
DEREGISTRATION_DELAY_SECONDS = 30
