import os
from typing import Callable, Dict, Optional

from hostprov.config.settings import config
from hostprov.containers.models import (
    ConfigFile,
    HostDirectory,
    PublishPort,
    QuadletUnit,
    ServiceDeployment,
    TmpfsMount,
    UnitWritePolicy,
    Volume,
)
from hostprov.errors import ValidationError

MOSQUITTO_CONF = """per_listener_settings false
allow_anonymous true

listener 1883 0.0.0.0

persistence true
persistence_location /mosquitto/data/

log_dest file /mosquitto/log/mosquitto.log
log_type error
log_type warning
log_type notice
log_type information
"""

FRIGATE_ENV_EXAMPLE = """# Example Frigate env (do not commit)
# FRIGATE_RTSP_PASSWORD=super-secret-rtsp
# FRIGATE_MQTT_USER=frigate
# FRIGATE_MQTT_PASSWORD=super-secret-mqtt
"""


def get_mosquitto_deployment(
    base_dir: Optional[str] = None,
    image: str = "docker.io/library/eclipse-mosquitto:latest",
    write_policy: UnitWritePolicy = UnitWritePolicy.OVERWRITE,
) -> ServiceDeployment:
    base_dir = base_dir or os.path.join(config.containers_directory, "mosquitto")
    config_dir = os.path.join(base_dir, "config")
    data_dir = os.path.join(base_dir, "data")
    log_dir = os.path.join(base_dir, "log")

    return ServiceDeployment(
        unit=QuadletUnit(
            name="mosquitto",
            description="Mosquitto MQTT Broker",
            image=image,
            ports=[
                PublishPort(host_port=1883, container_port=1883),
                PublishPort(host_port=9001, container_port=9001),
            ],
            volumes=[
                Volume(source=config_dir, target="/mosquitto/config"),
                Volume(source=data_dir, target="/mosquitto/data"),
                Volume(source=log_dir, target="/mosquitto/log"),
            ],
            restart="on-failure",
            timeout_start_sec=300,
        ),
        directories=[
            HostDirectory(path=base_dir, mode="0755"),
            HostDirectory(path=config_dir, mode="0755"),
            HostDirectory(path=data_dir, mode="0755"),
            HostDirectory(path=log_dir, mode="0755"),
        ],
        config_files=[
            ConfigFile(path=os.path.join(config_dir, "mosquitto.conf"), content=MOSQUITTO_CONF),
        ],
        write_policy=write_policy,
    )


def get_frigate_deployment(
    base_dir: str = "/var/frigate",
    image: str = "ghcr.io/blakeblackshear/frigate:stable",
    write_policy: UnitWritePolicy = UnitWritePolicy.PRESERVE,
) -> ServiceDeployment:
    media_dir = os.path.join(base_dir, "media")
    config_dir = os.path.join(base_dir, "config")
    env_path = os.path.join(config_dir, "frigate.env")

    return ServiceDeployment(
        unit=QuadletUnit(
            name="frigate",
            description="Frigate video recorder",
            image=image,
            network="host",
            environment_file=env_path,
            volumes=[
                Volume(source=media_dir, target="/media"),
                Volume(source=config_dir, target="/config"),
                Volume(source="/etc/localtime", target="/etc/localtime", options="ro"),
            ],
            tmpfs=[TmpfsMount(target="/tmp/cache", size=1000000000)],
            shm_size="128m",
            restart="always",
            timeout_start_sec=900,
            wants=[],
        ),
        directories=[
            HostDirectory(path=media_dir, mode="0750", owner="root:root"),
            HostDirectory(path=config_dir, mode="0750", owner="root:root"),
        ],
        env_file=ConfigFile(path=env_path, content=FRIGATE_ENV_EXAMPLE, mode="0600", overwrite=False),
        selinux_root=base_dir,
        firewall_ports=["8971/tcp", "5000/tcp", "8554/tcp", "8555/tcp"],
        write_policy=write_policy,
    )


DEPLOYMENTS: Dict[str, Callable[..., ServiceDeployment]] = {
    "mosquitto": get_mosquitto_deployment,
    "frigate": get_frigate_deployment,
}


def get_deployment(name: str, **kwargs) -> ServiceDeployment:
    try:
        factory = DEPLOYMENTS[name]
    except KeyError:
        raise ValidationError(f"Unknown service '{name}'. Available: {', '.join(sorted(DEPLOYMENTS))}")
    # Drop unset overrides so each preset keeps its own defaults
    return factory(**{k: v for k, v in kwargs.items() if v is not None})
