"""
Unit tests for the service wiring invariants.
"""

import dataclasses

import pytest

from stacks.common.exceptions import TopologyValidationError, ValidationError
from stacks.common.network import AwsVpcNetworkConfiguration
from stacks.nlb_service.topology import IngressRule, ServiceTopology, TopologyValidator

NETWORK = AwsVpcNetworkConfiguration.create(
    subnets=["subnet-0a1b2c3d4e5f00003"],
    security_groups=["sg-service"],
    assign_public_ip=False
)


@pytest.fixture
def open_topology():
    """Topology without a load balancer security group."""
    return ServiceTopology(
        container_port=8080,
        target_group_port=8080,
        listener_port=80,
        listener_target_group="tg-arn",
        target_group="tg-arn",
        service_target_group="tg-arn",
        service_container_port=8080,
        service_network=NETWORK,
        service_ingress=[IngressRule(port=8080, cidr="0.0.0.0/0")],
        scheduled_network=NETWORK
    )


@pytest.fixture
def secured_topology(open_topology):
    """Topology with the load balancer security group wired in."""
    return dataclasses.replace(
        open_topology,
        nlb_security_group_enabled=True,
        nlb_security_group_id="sg-nlb",
        load_balancer_security_group_ids=["sg-nlb"],
        service_ingress=[IngressRule(port=8080, source_security_group_id="sg-nlb")],
        load_balancer_ingress=[IngressRule(port=80, cidr="0.0.0.0/0")]
    )


class TestValidTopologies:
    """Test consistent wirings pass."""

    def test_open_topology(self, open_topology):
        TopologyValidator.validate(open_topology)

    def test_secured_topology(self, secured_topology):
        TopologyValidator.validate(secured_topology)

    def test_without_schedule(self, open_topology):
        TopologyValidator.validate(dataclasses.replace(open_topology, scheduled_network=None))

    def test_equal_network_instances(self, open_topology):
        """Test scheduled and service networks compare by value."""
        copy = AwsVpcNetworkConfiguration.create(["subnet-0a1b2c3d4e5f00003"], ["sg-service"])
        TopologyValidator.validate(dataclasses.replace(open_topology, scheduled_network=copy))


class TestViolations:
    """Test each broken wiring is reported with its invariant name."""

    def test_instance_targets_for_fargate(self, open_topology):
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(dataclasses.replace(open_topology, target_type="instance"))
        assert exc_info.value.invariant == "target-type"

    def test_listener_forwards_elsewhere(self, open_topology):
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(dataclasses.replace(open_topology, listener_target_group="other"))
        assert exc_info.value.invariant == "listener-forwarding"

    def test_service_registers_elsewhere(self, open_topology):
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(dataclasses.replace(open_topology, service_target_group="other"))
        assert exc_info.value.invariant == "listener-forwarding"

    def test_target_group_port_differs_from_container(self, open_topology):
        broken = dataclasses.replace(
            open_topology,
            target_group_port=9090,
            service_ingress=[IngressRule(port=9090, cidr="0.0.0.0/0")]
        )
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "listener-forwarding"

    def test_service_binding_port_differs(self, open_topology):
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(dataclasses.replace(open_topology, service_container_port=80))
        assert exc_info.value.invariant == "listener-forwarding"

    def test_ingress_misses_forwarded_port(self, open_topology):
        broken = dataclasses.replace(open_topology, service_ingress=[IngressRule(port=80, cidr="0.0.0.0/0")])
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "service-ingress"

    def test_group_not_attached_to_load_balancer(self, secured_topology):
        broken = dataclasses.replace(secured_topology, load_balancer_security_group_ids=[])
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "security-group-wiring"

    def test_group_enabled_but_tasks_trust_cidr(self, secured_topology):
        broken = dataclasses.replace(
            secured_topology,
            service_ingress=[IngressRule(port=8080, cidr="0.0.0.0/0")]
        )
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "security-group-wiring"

    def test_group_disabled_but_attached(self, open_topology):
        broken = dataclasses.replace(open_topology, load_balancer_security_group_ids=["sg-nlb"])
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "security-group-wiring"

    def test_group_disabled_but_tasks_narrowed(self, open_topology):
        broken = dataclasses.replace(
            open_topology,
            service_ingress=[IngressRule(port=8080, cidr="203.0.113.0/24")]
        )
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "security-group-wiring"

    def test_load_balancer_group_misses_listener_port(self, secured_topology):
        broken = dataclasses.replace(
            secured_topology,
            load_balancer_ingress=[IngressRule(port=443, cidr="0.0.0.0/0")]
        )
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(broken)
        assert exc_info.value.invariant == "load-balancer-ingress"

    def test_scheduled_network_differs(self, open_topology):
        public = dataclasses.replace(NETWORK, assign_public_ip=True)
        with pytest.raises(TopologyValidationError) as exc_info:
            TopologyValidator.validate(dataclasses.replace(open_topology, scheduled_network=public))
        assert exc_info.value.invariant == "scheduled-network"

    def test_is_a_validation_error(self, open_topology):
        with pytest.raises(ValidationError):
            TopologyValidator.validate(dataclasses.replace(open_topology, target_type="instance"))


class TestStackTopology:
    """Test the synthesized stack records a consistent topology."""

    @pytest.mark.parametrize("enabled", [True, False])
    def test_stack_topology(self, synth_service, enabled):
        stack, _ = synth_service(EnableNlbSecurityGroup=enabled)

        assert stack.topology.nlb_security_group_enabled is enabled
        assert stack.topology.scheduled_network == stack.topology.service_network
        assert stack.topology.target_group_port == 8080
        TopologyValidator.validate(stack.topology)

    def test_records_declared_open_ingress(self, synth_service):
        stack, _ = synth_service(AllowedIngressCidrs=['203.0.113.0/24'])

        assert stack.topology.service_ingress == [IngressRule(port=8080, cidr="0.0.0.0/0")]
        assert stack.topology.load_balancer_ingress == []
        assert stack.topology.launch_type == "FARGATE"
        assert stack.topology.target_type == "ip"

    def test_records_declared_secured_ingress(self, synth_service):
        stack, _ = synth_service(EnableNlbSecurityGroup=True, ListenerPort=443)

        nlb_sg_id = stack.nlb_security_group.security_group_id
        assert stack.topology.service_ingress == [
            IngressRule(port=8080, source_security_group_id=nlb_sg_id)
        ]
        assert stack.topology.load_balancer_ingress == [IngressRule(port=443, cidr="0.0.0.0/0")]
