"""
Unit tests for the plan-style template comparison.
"""

from helper.template_diff import ChangeAction, ResourceChange, diff_templates, has_changes, summarize_changes

OLD = {
    "Resources": {
        "Service": {
            "Type": "AWS::ECS::Service",
            "Properties": {"ServiceName": "svc", "LaunchType": "FARGATE"},
            "DependsOn": ["Listener"]
        },
        "TaskDefinition": {
            "Type": "AWS::ECS::TaskDefinition",
            "Properties": {"Family": "svc", "Cpu": "256"}
        },
        "OldRule": {
            "Type": "AWS::Events::Rule",
            "Properties": {"ScheduleExpression": "rate(1 hour)"}
        }
    }
}


class TestDiffTemplates:
    """Test resource level changes."""

    def test_identical_templates(self):
        assert diff_templates(OLD, OLD) == []
        assert not has_changes(OLD, dict(OLD))

    def test_add_remove_modify(self):
        new = {
            "Resources": {
                "Service": OLD["Resources"]["Service"],
                "TaskDefinition": {
                    "Type": "AWS::ECS::TaskDefinition",
                    "Properties": {"Family": "svc", "Cpu": "512", "Memory": "1024"}
                },
                "NewRule": {
                    "Type": "AWS::Events::Rule",
                    "Properties": {"ScheduleExpression": "rate(5 minutes)"}
                }
            }
        }

        changes = diff_templates(OLD, new)

        assert changes == [
            ResourceChange("NewRule", "AWS::Events::Rule", ChangeAction.ADD),
            ResourceChange("OldRule", "AWS::Events::Rule", ChangeAction.REMOVE),
            ResourceChange("TaskDefinition", "AWS::ECS::TaskDefinition", ChangeAction.MODIFY, ["Cpu", "Memory"]),
        ]
        assert summarize_changes(changes) == {"ADD": 1, "REMOVE": 1, "MODIFY": 1}

    def test_removed_property_is_a_change(self):
        new = {"Resources": dict(OLD["Resources"])}
        new["Resources"]["Service"] = {
            "Type": "AWS::ECS::Service",
            "Properties": {"ServiceName": "svc"},
            "DependsOn": ["Listener"]
        }

        changes = diff_templates(OLD, new)

        assert len(changes) == 1
        assert changes[0].changed_properties == ["LaunchType"]

    def test_resource_attribute_change(self):
        new = {"Resources": dict(OLD["Resources"])}
        new["Resources"]["Service"] = {**OLD["Resources"]["Service"], "DependsOn": ["Listener", "Seed"]}

        changes = diff_templates(OLD, new)

        assert changes[0].action == ChangeAction.MODIFY
        assert changes[0].changed_properties == ["DependsOn"]

    def test_first_template(self):
        changes = diff_templates(None, OLD)

        assert [change.action for change in changes] == [ChangeAction.ADD] * 3

    def test_change_rendering(self):
        change = ResourceChange("TaskDefinition", "AWS::ECS::TaskDefinition", ChangeAction.MODIFY, ["Cpu"])

        assert str(change) == "MODIFY TaskDefinition (AWS::ECS::TaskDefinition): Cpu"
        assert str(ResourceChange("NewRule", "AWS::Events::Rule", ChangeAction.ADD)) == \
            "ADD NewRule (AWS::Events::Rule)"
