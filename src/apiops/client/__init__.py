"""Resource-provider clients.

* :mod:`~apiops.client.base` -- the :class:`ResourceClient` capability.
* :mod:`~apiops.client.arm_client` -- the Azure Resource Manager client.
"""

from apiops.client.arm_client import ArmResourceClient
from apiops.client.base import APIS, ResourceClient

__all__ = ["APIS", "ArmResourceClient", "ResourceClient"]
