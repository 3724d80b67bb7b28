# aca_capacity/settings.py
#
# Planner tunables. Defaults match the Azure Container Apps platform rules.

from dataclasses import dataclass


# Addresses Azure reserves in every Container Apps environment subnet
RESERVED_IPS = 14

# Consumption plan: one IP is consumed per started block of replicas
REPLICAS_PER_IP = 10


@dataclass(frozen=True)
class PlannerSettings:
    reserved_ips: int = RESERVED_IPS
    replicas_per_ip: int = REPLICAS_PER_IP

    # Per-replica ceiling for apps hosted on the Consumption plan
    consumption_max_cpu: float = 4.0
    consumption_max_ram_gb: float = 8.0
    consumption_max_gpu: int = 0

    # A rolling revision runs the old and new baseline side by side
    upgrade_multiplier: int = 2


DEFAULT_SETTINGS = PlannerSettings()
