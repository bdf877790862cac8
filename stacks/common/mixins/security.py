"""Security group mixin for CDK stacks."""

from typing import Dict, List, Optional

from aws_cdk import aws_ec2 as ec2

from ..constants import OPEN_IPV4_CIDR
from ..exceptions import ValidationError
from ..network import IngressRule
from ..validators import ConfigValidator


class SecurityGroupMixin:
    """
    Mixin class providing security group functionality.

    The load balancer group is optional; the service group trusts it when it
    exists and falls back to the open CIDR when it doesn't. Every ingress rule
    added here is recorded, so callers can check what was really declared.
    """

    def create_load_balancer_security_group(self,
                                            name: str,
                                            vpc: ec2.IVpc,
                                            listener_port: int,
                                            allowed_cidrs: List[str],
                                            description: Optional[str] = None) -> ec2.SecurityGroup:
        """
        Create the security group attached to the network load balancer.

        Args:
            name: Name prefix for the security group
            vpc: VPC to create the security group in
            listener_port: Listener port clients connect to
            allowed_cidrs: CIDR blocks allowed to reach the listener
            description: Optional description for the security group

        Returns:
            The created security group
        """
        ConfigValidator.validate_resource_name(name)
        ConfigValidator.validate_port_range(listener_port)

        security_group = ec2.SecurityGroup(
            self,
            f"{name}-nlb-security-group",
            vpc=vpc,
            description=description or f"Network load balancer security group for {name}",
            allow_all_outbound=True
        )

        for cidr in allowed_cidrs:
            self.add_tcp_ingress_rule(security_group, listener_port, cidr=cidr)

        return security_group

    def create_service_security_group(self,
                                      name: str,
                                      vpc: ec2.IVpc,
                                      port: int,
                                      source_security_group: Optional[ec2.ISecurityGroup] = None,
                                      description: Optional[str] = None) -> ec2.SecurityGroup:
        """
        Create the security group for the ECS tasks.

        Args:
            name: Name prefix for the security group
            vpc: VPC to create the security group in
            port: Container port the load balancer forwards to
            source_security_group: Load balancer security group to trust, if any.
                Without one the port is open to 0.0.0.0/0, since the load
                balancer reaches IP targets from its own private addresses.
            description: Optional description for the security group

        Returns:
            The created security group
        """
        ConfigValidator.validate_resource_name(name)
        ConfigValidator.validate_port_range(port)

        security_group = ec2.SecurityGroup(
            self,
            f"{name}-service-security-group",
            vpc=vpc,
            description=description or f"ECS task security group for {name}",
            allow_all_outbound=True
        )

        if source_security_group is not None:
            self.add_tcp_ingress_rule(
                security_group,
                port,
                source_security_group_id=source_security_group.security_group_id,
                description=f"Allow TCP {port} from the load balancer security group"
            )
        else:
            self.add_tcp_ingress_rule(security_group, port, cidr=OPEN_IPV4_CIDR)

        return security_group

    def add_tcp_ingress_rule(self,
                             security_group: ec2.SecurityGroup,
                             port: int,
                             cidr: Optional[str] = None,
                             source_security_group_id: Optional[str] = None,
                             description: Optional[str] = None) -> IngressRule:
        """
        Add a validated TCP ingress rule and record it against the group.

        Exactly one of cidr and source_security_group_id must be given.

        Raises:
            ValidationError: If the port or CIDR is invalid, or the source is ambiguous
        """
        ConfigValidator.validate_port_range(port)

        if (cidr is None) == (source_security_group_id is None):
            raise ValidationError(
                "An ingress rule needs exactly one of a CIDR or a source security group",
                parameter_name="ingress_source",
                provided_value=str(cidr or source_security_group_id)
            )

        if cidr is not None:
            ConfigValidator.validate_cidr_block(cidr)
            peer = ec2.Peer.ipv4(cidr)
        else:
            peer = ec2.Peer.security_group_id(source_security_group_id)

        security_group.add_ingress_rule(
            peer=peer,
            connection=ec2.Port.tcp(port),
            description=description or f"Allow TCP {port} from {cidr or 'source security group'}"
        )

        rule = IngressRule(port=port, source_security_group_id=source_security_group_id, cidr=cidr)
        self._ingress_registry().setdefault(security_group.node.path, []).append(rule)
        return rule

    def declared_ingress_rules(self, security_group: Optional[ec2.ISecurityGroup]) -> List[IngressRule]:
        """Ingress rules added to a group through this mixin, in order."""
        if security_group is None:
            return []
        return list(self._ingress_registry().get(security_group.node.path, []))

    def _ingress_registry(self) -> Dict[str, List[IngressRule]]:
        registry = getattr(self, "_declared_ingress", None)
        if registry is None:
            registry = {}
            self._declared_ingress = registry
        return registry
