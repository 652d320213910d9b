"""Unit tests for the PolicyBuilder."""

import pytest

from policy.domain import ApiOptions, Condition, PolicyBuilder, Statement
from shared_kernel.authorization import (
    ConditionKey,
    ConditionOperator,
    Effect,
    HttpVerb,
    ResourceReference,
    ValidationError,
)

ARN_PREFIX = "arn:aws:execute-api:ap-southeast-2:123123123123:123sdfasdf12/prod"


@pytest.fixture
def builder(mock_builder_probe):
    """Builder scoped to a concrete region, API and stage."""
    return PolicyBuilder(
        principal_id="user|a1b2c3d4",
        account_id="123123123123",
        options=ApiOptions(region="ap-southeast-2", api_id="123sdfasdf12", stage="prod"),
        probe=mock_builder_probe,
    )


def _statements(result):
    return result.policy_document.statements


class TestConstruction:
    """Tests for builder construction and scoping defaults."""

    def test_unset_options_default_to_wildcard(self, mock_builder_probe):
        """Test that missing region/api/stage widen to '*'."""
        builder = PolicyBuilder("user", "123", probe=mock_builder_probe)

        assert builder.region == "*"
        assert builder.api_id == "*"
        assert builder.stage == "*"

    def test_each_option_defaults_independently(self, mock_builder_probe):
        builder = PolicyBuilder(
            "user", "123", ApiOptions(region="eu-west-1", stage=" "), probe=mock_builder_probe
        )

        assert builder.region == "eu-west-1"
        assert builder.api_id == "*"
        assert builder.stage == "*"

    def test_wildcard_scope_appears_in_arn(self, mock_builder_probe):
        builder = PolicyBuilder("user", "123", probe=mock_builder_probe)
        builder.allow_method(HttpVerb.GET, "/pets")

        statement = _statements(builder.build())[0]

        assert statement.resources == ("arn:aws:execute-api:*:123:*/*/GET/pets",)

    def test_from_resource_reference(self, mock_builder_probe):
        """Test that a parsed locator seeds account, partition and scope."""
        reference = ResourceReference.parse(
            "arn:aws-cn:execute-api:cn-north-1:999:api42/dev/GET/pets/1"
        )

        builder = PolicyBuilder.from_resource_reference(
            "user", reference, probe=mock_builder_probe
        )
        builder.allow_method("GET", "/pets/*")

        statement = _statements(builder.build())[0]
        assert statement.resources == (
            "arn:aws-cn:execute-api:cn-north-1:999:api42/dev/GET/pets/*",
        )

    def test_default_probe_is_created(self):
        builder = PolicyBuilder("user", "123")
        builder.deny_all_methods()

        assert builder.build().principal_id == "user"


class TestRegistrationValidation:
    """Tests for fail-fast validation on registration."""

    def test_rejects_unknown_verb(self, builder, mock_builder_probe):
        with pytest.raises(ValidationError, match="Invalid HTTP verb FETCH"):
            builder.allow_method("FETCH", "/pets")

        assert builder.rules == ()
        mock_builder_probe.rule_rejected.assert_called_once()

    def test_verbs_are_case_sensitive(self, builder):
        with pytest.raises(ValidationError):
            builder.deny_method("get", "/pets")

    def test_accepts_plain_string_verbs(self, builder):
        builder.allow_method("OPTIONS", "/pets")

        assert builder.rules[0].verb == "OPTIONS"

    def test_accepts_wildcard_verb(self, builder):
        builder.allow_method("*", "/pets")

        assert builder.rules[0].verb == "*"

    @pytest.mark.parametrize("path", ["/pets?x=1", "/pets name", "", "/pets/{id}", "/pets\n"])
    def test_rejects_invalid_paths(self, builder, path):
        with pytest.raises(ValidationError, match="Invalid resource path"):
            builder.allow_method("GET", path)

    def test_validates_percent_decoded_path(self, builder):
        """Test that an encoded space is rejected after decoding."""
        with pytest.raises(ValidationError):
            builder.allow_method("GET", "/pets%20name")

    def test_encoded_valid_characters_are_accepted(self, builder):
        """Test that validation decodes but the ARN keeps the path as given."""
        builder.allow_method("GET", "/my%2Dpets")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/GET/my%2Dpets"

    def test_rejects_duplicate_condition_operator(self, builder, mock_builder_probe):
        conditions = [
            Condition(ConditionOperator.IP_ADDRESS, {ConditionKey.SOURCE_IP: "10.0.0.0/8"}),
            Condition("IpAddress", {"aws:SourceIp": "192.168.0.0/16"}),
        ]

        with pytest.raises(ValidationError, match="unique"):
            builder.allow_method_with_conditions("GET", "/pets", conditions)

        assert builder.rules == ()
        mock_builder_probe.rule_rejected.assert_called_once()

    def test_rejects_condition_without_key_values(self, builder):
        with pytest.raises(ValidationError):
            builder.deny_method_with_conditions("GET", "/pets", {"Bool": "true"})

    def test_rejects_non_condition_items(self, builder):
        with pytest.raises(ValidationError):
            builder.deny_method_with_conditions("GET", "/pets", [("Bool", {"a": "b"})])

    @pytest.mark.parametrize(
        "conditions",
        [{"IpAddress": {}}, [Condition(ConditionOperator.IP_ADDRESS, {})]],
    )
    def test_rejects_operator_without_condition_keys(self, builder, conditions):
        with pytest.raises(ValidationError, match="no condition keys"):
            builder.allow_method_with_conditions("GET", "/pets", conditions)

        assert builder.rules == ()


class TestResourceArn:
    """Tests for the generated method ARNs."""

    def test_strips_one_leading_slash(self, builder):
        builder.allow_method("GET", "/a")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/GET/a"

    def test_only_first_slash_is_stripped(self, builder):
        builder.allow_method("GET", "//a")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/GET//a"

    def test_keeps_inner_slashes(self, builder):
        builder.allow_method("GET", "/users/username/pets")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/GET/users/username/pets"

    def test_path_without_slash_is_unchanged(self, builder):
        builder.allow_method("PATCH", "pets/*")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/PATCH/pets/*"

    def test_root_path(self, builder):
        builder.allow_method("GET", "/")

        assert builder.rules[0].resource_arn == f"{ARN_PREFIX}/GET/"


class TestBuild:
    """Tests for statement compilation."""

    def test_build_without_rules_fails(self, builder, mock_builder_probe):
        with pytest.raises(ValidationError, match="No statements"):
            builder.build()

        mock_builder_probe.build_rejected.assert_called_once()
        assert builder.is_built is False

    def test_deny_all_methods_end_to_end(self, builder):
        builder.deny_all_methods()

        result = builder.build()

        assert result.to_dict() == {
            "principalId": "user|a1b2c3d4",
            "policyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Action": "execute-api:Invoke",
                        "Effect": "Deny",
                        "Resource": [
                            "arn:aws:execute-api:ap-southeast-2:123123123123:123sdfasdf12/prod/*/*"
                        ],
                    }
                ],
            },
        }

    def test_allow_and_deny_same_method(self, builder):
        builder.allow_method("GET", "/a")
        builder.deny_method("GET", "/a")

        statements = _statements(builder.build())

        assert len(statements) == 2
        assert statements[0].effect == Effect.ALLOW
        assert statements[0].resources[0].endswith("/GET/a")
        assert statements[1].effect == Effect.DENY
        assert statements[1].resources[0].endswith("/GET/a")

    def test_unconditioned_rules_are_batched_in_order(self, builder):
        builder.allow_method("GET", "/pets")
        builder.allow_method("POST", "/orders")

        statements = _statements(builder.build())

        assert len(statements) == 1
        assert statements[0].resources == (
            f"{ARN_PREFIX}/GET/pets",
            f"{ARN_PREFIX}/POST/orders",
        )

    def test_duplicate_rules_are_not_deduplicated(self, builder):
        builder.allow_method("GET", "/pets")
        builder.allow_method("GET", "/pets")

        statements = _statements(builder.build())

        assert statements[0].resources == (f"{ARN_PREFIX}/GET/pets",) * 2

    def test_conditioned_rule_gets_own_statement(self, builder):
        conditions = {"IpAddress": {"aws:SourceIp": ["10.0.0.0/8"]}}
        builder.allow_method_with_conditions("GET", "/admin", conditions)
        builder.allow_method("GET", "/pets")

        statements = _statements(builder.build())

        assert len(statements) == 2
        assert statements[0] == Statement(
            effect=Effect.ALLOW, resources=(f"{ARN_PREFIX}/GET/pets",)
        )
        assert statements[1].resources == (f"{ARN_PREFIX}/GET/admin",)
        assert statements[1].condition == conditions

    def test_condition_objects_are_merged_into_one_block(self, builder):
        builder.deny_method_with_conditions(
            HttpVerb.DELETE,
            "/pets/*",
            [
                Condition(ConditionOperator.BOOL, {ConditionKey.MULTI_FACTOR_AUTH_PRESENT: "false"}),
                Condition(ConditionOperator.NOT_IP_ADDRESS, {ConditionKey.SOURCE_IP: "10.0.0.0/8"}),
            ],
        )

        statement = _statements(builder.build())[0]

        assert statement.condition == {
            "Bool": {"aws:MultiFactorAuthPresent": "false"},
            "NotIpAddress": {"aws:SourceIp": "10.0.0.0/8"},
        }

    def test_empty_conditions_register_unconditioned_rule(self, builder):
        builder.allow_method_with_conditions("GET", "/pets", {})
        builder.allow_method("GET", "/orders")

        statements = _statements(builder.build())

        assert len(statements) == 1
        assert len(statements[0].resources) == 2

    def test_full_statement_order(self, builder):
        """Test Allow batch, Allow conditionals, Deny batch, Deny conditionals, custom."""
        custom = {"Action": "execute-api:Invoke", "Effect": "Deny", "Resource": ["x"]}
        builder.add_statement(custom)
        builder.deny_method_with_conditions("PUT", "/d1", {"Bool": {"aws:SecureTransport": "false"}})
        builder.allow_method_with_conditions("GET", "/c1", {"IpAddress": {"aws:SourceIp": "1.1.1.1"}})
        builder.deny_method("PUT", "/d0")
        builder.allow_method("GET", "/a0")
        builder.allow_method_with_conditions("GET", "/c2", {"IpAddress": {"aws:SourceIp": "2.2.2.2"}})
        builder.allow_method("GET", "/a1")

        statements = _statements(builder.build())

        assert [s.resources if isinstance(s, Statement) else s for s in statements] == [
            (f"{ARN_PREFIX}/GET/a0", f"{ARN_PREFIX}/GET/a1"),
            (f"{ARN_PREFIX}/GET/c1",),
            (f"{ARN_PREFIX}/GET/c2",),
            (f"{ARN_PREFIX}/PUT/d0",),
            (f"{ARN_PREFIX}/PUT/d1",),
            custom,
        ]
        assert [s.effect for s in statements[:5]] == [Effect.ALLOW] * 3 + [Effect.DENY] * 2

    def test_custom_statement_alone_is_enough(self, builder):
        builder.add_statement({"Effect": "Allow", "Action": "execute-api:Invoke", "Resource": "*"})

        result = builder.build()

        assert result.to_dict()["policyDocument"]["Statement"] == [
            {"Effect": "Allow", "Action": "execute-api:Invoke", "Resource": "*"}
        ]

    def test_custom_statement_is_not_validated(self, builder):
        builder.add_statement({"Anything": ["goes"]})

        assert _statements(builder.build()) == ({"Anything": ["goes"]},)

    def test_no_context_by_default(self, builder):
        builder.allow_all_methods()

        result = builder.build()

        assert result.context is None
        assert "context" not in result.to_dict()

    def test_probe_records_build(self, builder, mock_builder_probe):
        builder.allow_all_methods()
        builder.add_statement({"Effect": "Deny"})

        builder.build()

        mock_builder_probe.policy_built.assert_called_once_with(
            statement_count=2, custom_statement_count=1
        )


class TestContext:
    """Tests for with_context()."""

    def test_context_is_emitted(self, builder):
        builder.allow_all_methods()
        builder.with_context({"key": "value", "number": 1, "bool": True, "ratio": 0.5})

        assert builder.build().to_dict()["context"] == {
            "key": "value",
            "number": 1,
            "bool": True,
            "ratio": 0.5,
        }

    def test_last_write_wins(self, builder):
        builder.allow_all_methods()
        builder.with_context({"a": "1"})
        builder.with_context({"b": "2"})

        assert builder.build().context == {"b": "2"}

    @pytest.mark.parametrize(
        "value",
        [["foo"], {"foo": "bar"}, None, float("nan"), float("inf"), float("-inf")],
    )
    def test_rejects_non_scalar_values(self, builder, value):
        with pytest.raises(ValidationError, match="Invalid context value"):
            builder.with_context({"key": value})

    def test_rejects_non_string_keys(self, builder):
        with pytest.raises(ValidationError):
            builder.with_context({1: "one"})


class TestLifecycle:
    """Tests for the accumulating -> built state machine."""

    def test_rebuild_is_deterministic(self, builder):
        builder.allow_method("GET", "/pets")
        builder.deny_method_with_conditions("POST", "/pets", {"Bool": {"aws:SecureTransport": "false"}})

        first = builder.build()
        second = builder.build()

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert builder.is_built is True

    @pytest.mark.parametrize(
        "mutation",
        [
            lambda b: b.allow_method("GET", "/x"),
            lambda b: b.deny_all_methods(),
            lambda b: b.add_statement({"Effect": "Allow"}),
            lambda b: b.with_context({"k": "v"}),
        ],
    )
    def test_mutation_after_build_is_refused(self, builder, mutation):
        builder.allow_all_methods()
        builder.build()

        with pytest.raises(ValidationError, match="already been built"):
            mutation(builder)

    def test_result_does_not_share_state_with_inputs(self, builder):
        """Test that mutating caller-owned inputs cannot alter the result."""
        conditions = {"IpAddress": {"aws:SourceIp": ["10.0.0.0/8"]}}
        custom = {"Effect": "Allow", "Resource": ["a"]}
        context = {"key": "value"}
        builder.allow_method_with_conditions("GET", "/pets", conditions)
        builder.add_statement(custom)
        builder.with_context(context)

        result = builder.build()
        conditions["IpAddress"]["aws:SourceIp"].append("0.0.0.0/0")
        custom["Resource"].append("b")
        context["key"] = "changed"
        wire = result.to_dict()
        wire["policyDocument"]["Statement"][0]["Condition"]["IpAddress"]["aws:SourceIp"].clear()

        assert result.to_dict() == {
            "principalId": "user|a1b2c3d4",
            "policyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Action": "execute-api:Invoke",
                        "Effect": "Allow",
                        "Resource": [f"{ARN_PREFIX}/GET/pets"],
                        "Condition": {"IpAddress": {"aws:SourceIp": ["10.0.0.0/8"]}},
                    },
                    {"Effect": "Allow", "Resource": ["a"]},
                ],
            },
            "context": {"key": "value"},
        }
