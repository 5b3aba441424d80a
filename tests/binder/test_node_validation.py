"""
Tests for validation of binder nodes.

Focus Areas:
1. Error attribution by field path and distribution over the tree
2. Which validators a node-level validation runs
3. Deduplication of concurrent validator runs
4. Validity signals, failing validators and empty optional values
5. Validation triggered by visited and value changes
"""

import asyncio
import logging

from formtree import Binder, BinderConfiguration, FunctionValidator, ValidityState
from formtree.binder import error_path
from formtree.validation import Required


def counting_validator(calls, result=True, message=None):
    """Validator recording every value it is run with."""

    def validate(value, binder):
        calls.append(value)
        return result

    return FunctionValidator(validate, message=message)


class TestErrorAttribution:
    """Test how reported errors are attributed to nodes."""

    def test_fresh_binder_reports_required_city(self, binder):
        errors = asyncio.run(binder.validate())

        assert [error_path(error) for error in errors] == ["address.city"]
        assert errors[0].message == "must not be empty"
        city = binder.for_(binder.model.address.city)
        assert city.own_errors == errors
        assert city.invalid
        assert binder.for_(binder.model.address).invalid
        assert binder.invalid
        assert not binder.for_(binder.model.name).invalid

    def test_valid_value_has_no_errors(self, binder, person_value):
        binder.read(person_value)
        errors = asyncio.run(binder.validate())
        assert errors == []
        assert not binder.invalid

    def test_error_routed_to_named_property(self, binder, person_value):
        binder.read(person_value)
        binder.add_validator(
            FunctionValidator(
                lambda value, b: {"property": b.model.name}, message="bad name"
            )
        )

        asyncio.run(binder.validate())

        name = binder.for_(binder.model.name)
        assert [error.message for error in name.own_errors] == ["bad name"]
        assert binder.own_errors == []
        assert binder.errors == name.own_errors

    def test_cross_field_validator(self, binder):
        def emails_match(value, b):
            if value["email"] != value["other_email"]:
                return {"property": b.model.other_email, "message": "emails must match"}
            return None

        binder.add_validator(FunctionValidator(emails_match))
        binder.for_(binder.model.email).value = "a@example.com"
        binder.for_(binder.model.other_email).value = "b@example.com"

        asyncio.run(binder.validate())

        other_email = binder.for_(binder.model.other_email)
        assert [error.message for error in other_email.own_errors] == [
            "emails must match"
        ]
        assert binder.for_(binder.model.email).own_errors == []

    def test_error_with_path_property(self, binder, person_value):
        binder.read(person_value)
        binder.add_validator(
            FunctionValidator(
                lambda value, b: [
                    {"property": "contacts.1.email", "message": "duplicate"},
                    {"property": "scores", "message": "too few"},
                ]
            )
        )

        asyncio.run(binder.validate())

        contact_email = binder.for_(binder.model.contacts[1].email)
        assert [error.message for error in contact_email.own_errors] == ["duplicate"]
        assert [e.message for e in binder.for_(binder.model.scores).own_errors] == [
            "too few"
        ]
        assert binder.for_(binder.model.contacts[0].email).own_errors == []

    def test_errors_list_descendants_before_own(self, binder):
        binder.add_validator(counting_validator([], False, "root invalid"))

        asyncio.run(binder.validate())

        assert [error.message for error in binder.errors] == [
            "must not be empty",
            "root invalid",
        ]
        assert [error_path(error) for error in binder.own_errors] == [""]

    def test_validation_is_idempotent(self, binder):
        first = asyncio.run(binder.validate())
        first_own = binder.for_(binder.model.address.city).own_errors

        second = asyncio.run(binder.validate())

        assert first == second
        assert binder.for_(binder.model.address.city).own_errors == first_own

    def test_fixed_errors_are_removed(self, binder):
        asyncio.run(binder.validate())
        city = binder.for_(binder.model.address.city)

        city.value = "Paris"
        errors = asyncio.run(binder.validate())

        assert errors == []
        assert city.own_errors == []
        assert not binder.invalid


class TestValidationScope:
    """Test which validators run when a node is validated."""

    def test_node_validation_runs_ancestors_not_siblings(self, binder):
        root_calls = []
        email_calls = []
        binder.add_validator(counting_validator(root_calls))
        email = binder.for_(binder.model.email)
        email.value = "jane@example.com"
        email.add_validator(counting_validator(email_calls))

        asyncio.run(binder.for_(binder.model.address.city).validate())

        assert len(root_calls) == 1
        assert email_calls == []

    def test_node_validation_keeps_sibling_errors(self, binder):
        name = binder.for_(binder.model.name)
        name.value = "Jane"
        name.add_validator(counting_validator([], False, "bad name"))
        asyncio.run(binder.validate())
        city = binder.for_(binder.model.address.city)

        city.value = "Paris"
        asyncio.run(city.validate())

        assert city.own_errors == []
        assert [error.message for error in name.own_errors] == ["bad name"]

    def test_async_validator(self, binder):
        async def name_available(value, b):
            await asyncio.sleep(0)
            return value != "taken"

        name = binder.for_(binder.model.name)
        name.add_validator(FunctionValidator(name_available, message="name is taken"))
        name.value = "taken"

        errors = asyncio.run(name.validate())

        assert [error.message for error in errors] == ["name is taken"]
        assert name.own_errors == errors

    def test_concurrent_validations_share_runs(self, binder):
        calls = []

        async def slow(value, b):
            calls.append(b.validating)
            await asyncio.sleep(0)
            return True

        name = binder.for_(binder.model.name)
        name.value = "Jane"
        name.add_validator(FunctionValidator(slow))

        async def scenario():
            results = await asyncio.gather(binder.validate(), binder.validate())
            await asyncio.sleep(0)
            return results, binder.validating

        (first, second), validating = asyncio.run(scenario())

        assert calls == [True]
        assert first == second
        assert not validating


class TestValidatorRuns:
    """Test validity signals, failing validators and empty values."""

    def test_invalid_validity_replaces_validators(self, binder):
        calls = []
        email = binder.for_(binder.model.email)
        email.add_validator(counting_validator(calls, False))
        email.validity = ValidityState(valid=False, message="Not parseable", bad_input=True)

        asyncio.run(binder.validate())

        assert [error.message for error in email.own_errors] == ["Not parseable"]
        assert calls == []

    def test_validity_without_message(self, binder):
        email = binder.for_(binder.model.email)
        email.validity = ValidityState(valid=False)

        asyncio.run(email.validate())

        assert [error.message for error in email.own_errors] == ["invalid value"]

    def test_valid_validity_runs_validators(self, binder):
        email = binder.for_(binder.model.email)
        email.value = "not an email"
        email.validity = ValidityState(valid=True)

        asyncio.run(email.validate())

        assert [error.message for error in email.own_errors] == [
            "must be a well-formed email address"
        ]

    def test_failing_validator_becomes_error(self, binder, caplog):
        def broken(value, b):
            raise RuntimeError("backend down")

        name = binder.for_(binder.model.name)
        name.value = "Jane"
        name.add_validator(FunctionValidator(broken))

        with caplog.at_level(logging.WARNING):
            errors = asyncio.run(name.validate())

        assert [error.message for error in errors] == ["backend down"]
        assert "backend down" in caplog.text

    def test_unsupported_result_does_not_break_visited(self, binder):
        name = binder.for_(binder.model.name)
        name.value = "Jane"
        name.add_validator(FunctionValidator(lambda value, b: "looks wrong"))

        name.visited = True

        assert name.visited
        assert len(name.own_errors) == 1

    def test_empty_optional_value_skips_validators(self, binder):
        calls = []
        binder.for_(binder.model.email).add_validator(counting_validator(calls, False))

        asyncio.run(binder.validate())

        assert calls == []
        assert binder.for_(binder.model.email).own_errors == []

    def test_required_field_validates_empty_value(self, binder):
        calls = []
        email = binder.for_(binder.model.email)
        email.add_validator(Required())
        email.add_validator(counting_validator(calls))

        asyncio.run(email.validate())

        assert email.required
        assert calls == [""]
        assert [error.message for error in email.own_errors] == [
            "must be a well-formed email address",
            "must not be empty",
        ]

    def test_validate_empty_values_option(self, person_model):
        binder = Binder(person_model, BinderConfiguration(validate_empty_values=True))

        errors = asyncio.run(binder.validate())

        assert sorted(error_path(error) for error in errors) == ["address.city", "email"]


class TestTriggeredValidation:
    """Test validation triggered by visited flags and value changes."""

    def test_visited_triggers_validation(self, binder):
        email = binder.for_(binder.model.email)
        email.value = "bad"

        email.visited = True

        assert email.visited
        assert [error.message for error in email.own_errors] == [
            "must be a well-formed email address"
        ]

    def test_change_revalidates_visited_field(self, binder):
        email = binder.for_(binder.model.email)
        email.value = "bad"
        email.visited = True

        email.value = "jane@example.com"

        assert email.own_errors == []
        assert not email.invalid

    def test_unvisited_fields_are_not_validated(self, binder):
        city = binder.for_(binder.model.address.city)
        city.value = "Paris"
        city.value = ""
        assert city.own_errors == []

    def test_visited_in_running_loop_schedules_task(self, binder):
        email = binder.for_(binder.model.email)

        async def scenario():
            email.value = "bad"
            email.visited = True
            before = email.own_errors
            await binder.wait_for_validation()
            return before, email.own_errors

        before, after = asyncio.run(scenario())

        assert before == []
        assert len(after) == 1

    def test_update_validation_revalidates_visited(self, binder):
        email = binder.for_(binder.model.email)
        email.value = "bad"
        email.visited = True
        email.validators = []

        asyncio.run(binder.update_validation())

        assert email.own_errors == []

    def test_update_validation_skips_pristine_tree(self, binder):
        calls = []
        binder.add_validator(counting_validator(calls))

        asyncio.run(binder.update_validation())

        assert calls == []

    def test_clear_validation(self, binder):
        email = binder.for_(binder.model.email)
        email.value = "bad"
        email.visited = True

        assert binder.clear_validation() is True
        assert not email.visited
        assert email.errors == []
        assert binder.clear_validation() is False

    def test_validate_notifies_change(self, person_model):
        changes = []
        binder = Binder(person_model, BinderConfiguration(on_change=changes.append))
        changes.clear()

        asyncio.run(binder.validate())

        assert changes == [None]
