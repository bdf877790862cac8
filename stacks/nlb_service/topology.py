"""
Wiring invariants for the load-balanced Fargate service.

The stack records what it declared in a ServiceTopology and checks it before
synthesis finishes, so a broken combination of settings fails `cdk synth`
instead of a deployment.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from stacks.common.constants import LAUNCH_TYPE_FARGATE, OPEN_IPV4_CIDR, TARGET_TYPE_IP
from stacks.common.exceptions import TopologyValidationError, ValidationError
from stacks.common.network import AwsVpcNetworkConfiguration, IngressRule
from stacks.common.validators import AWSResourceValidator


@dataclass
class ServiceTopology:
    """What the service stack declared, in the terms the invariants need."""

    container_port: int
    target_group_port: int
    listener_port: int
    listener_target_group: str
    target_group: str
    service_target_group: str
    service_container_port: int
    service_network: AwsVpcNetworkConfiguration
    launch_type: str = LAUNCH_TYPE_FARGATE
    target_type: str = TARGET_TYPE_IP
    nlb_security_group_enabled: bool = False
    nlb_security_group_id: Optional[str] = None
    load_balancer_security_group_ids: List[str] = field(default_factory=list)
    service_ingress: List[IngressRule] = field(default_factory=list)
    load_balancer_ingress: List[IngressRule] = field(default_factory=list)
    scheduled_network: Optional[AwsVpcNetworkConfiguration] = None


class TopologyValidator:
    """Checks a ServiceTopology; every check raises TopologyValidationError."""

    @staticmethod
    def validate_target_type(topology: ServiceTopology) -> None:
        try:
            AWSResourceValidator.validate_target_type_for_launch_type(
                topology.target_type, topology.launch_type
            )
        except ValidationError as e:
            raise TopologyValidationError(
                e.message, invariant="target-type", provided_value=topology.target_type
            ) from e

    @staticmethod
    def validate_listener_forwarding(topology: ServiceTopology) -> None:
        if topology.listener_target_group != topology.target_group:
            raise TopologyValidationError(
                f"Listener forwards to '{topology.listener_target_group}', "
                f"not the service target group '{topology.target_group}'",
                invariant="listener-forwarding",
                provided_value=topology.listener_target_group
            )

        if topology.service_target_group != topology.target_group:
            raise TopologyValidationError(
                f"Service registers into '{topology.service_target_group}', "
                f"not the listener's target group '{topology.target_group}'",
                invariant="listener-forwarding",
                provided_value=topology.service_target_group
            )

        if topology.target_group_port != topology.container_port:
            raise TopologyValidationError(
                f"Target group port {topology.target_group_port} does not match "
                f"container port {topology.container_port}",
                invariant="listener-forwarding",
                provided_value=str(topology.target_group_port)
            )

        if topology.service_container_port != topology.container_port:
            raise TopologyValidationError(
                f"Service load balancer binding uses port {topology.service_container_port}, "
                f"container listens on {topology.container_port}",
                invariant="listener-forwarding",
                provided_value=str(topology.service_container_port)
            )

    @staticmethod
    def validate_service_ingress(topology: ServiceTopology) -> None:
        if not any(rule.port == topology.target_group_port for rule in topology.service_ingress):
            raise TopologyValidationError(
                f"Service security group does not allow the forwarded port {topology.target_group_port}",
                invariant="service-ingress",
                provided_value=str([rule.port for rule in topology.service_ingress])
            )

    @staticmethod
    def validate_security_group_wiring(topology: ServiceTopology) -> None:
        sg_rules = [r for r in topology.service_ingress if r.source_security_group_id is not None]
        cidr_rules = [r for r in topology.service_ingress if r.cidr is not None]

        if topology.nlb_security_group_enabled:
            wired = (
                topology.nlb_security_group_id is not None
                and topology.load_balancer_security_group_ids == [topology.nlb_security_group_id]
                and bool(sg_rules)
                and all(r.source_security_group_id == topology.nlb_security_group_id for r in sg_rules)
                and not cidr_rules
            )
        else:
            wired = (
                topology.nlb_security_group_id is None
                and not topology.load_balancer_security_group_ids
                and not sg_rules
                and bool(cidr_rules)
                and all(r.cidr == OPEN_IPV4_CIDR for r in cidr_rules)
            )

        if not wired:
            raise TopologyValidationError(
                "Load balancer security group wiring is partial: the group, its attachment "
                "to the load balancer and the service ingress rule must all exist, or all be "
                f"absent with the service open to {OPEN_IPV4_CIDR}",
                invariant="security-group-wiring",
                provided_value=str(topology.nlb_security_group_enabled)
            )

    @staticmethod
    def validate_load_balancer_ingress(topology: ServiceTopology) -> None:
        if not topology.nlb_security_group_enabled:
            return

        if not any(rule.port == topology.listener_port for rule in topology.load_balancer_ingress):
            raise TopologyValidationError(
                f"Load balancer security group does not allow the listener port {topology.listener_port}",
                invariant="load-balancer-ingress",
                provided_value=str([rule.port for rule in topology.load_balancer_ingress])
            )

    @staticmethod
    def validate_scheduled_network(topology: ServiceTopology) -> None:
        if topology.scheduled_network is None:
            return

        if topology.scheduled_network != topology.service_network:
            raise TopologyValidationError(
                "Scheduled task network configuration differs from the service's",
                invariant="scheduled-network",
                provided_value=str(topology.scheduled_network)
            )

    @classmethod
    def validate(cls, topology: ServiceTopology) -> None:
        """Run every check."""
        cls.validate_target_type(topology)
        cls.validate_listener_forwarding(topology)
        cls.validate_service_ingress(topology)
        cls.validate_security_group_wiring(topology)
        cls.validate_load_balancer_ingress(topology)
        cls.validate_scheduled_network(topology)
