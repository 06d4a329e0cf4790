from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Optional

import pytest

from model_validation import (
    ModelStateDictionary,
    ModelValidationState,
    ObjectModelValidator,
    RangeValidator,
    RequiredValidator,
    ValidatableObject,
    ValidationConfig,
    ValidationDepthExceededError,
    ValidationResult,
    ValidationStateDictionary,
    ValidationStateEntry,
)
from model_validation.validation.model_state import TooManyModelErrors


@dataclass
class Address:
    street: Annotated[str, RequiredValidator()]
    city: Optional[str] = None


@dataclass
class Customer:
    name: Annotated[str, RequiredValidator()]
    address: Address
    tags: List[str] = field(default_factory=list)


@dataclass
class OrderLine:
    product: str
    quantity: Annotated[int, RangeValidator(1, 100)]


@dataclass
class Order:
    lines: List[OrderLine]
    stock: Dict[str, Annotated[int, RangeValidator(0, 10)]] = field(default_factory=dict)


@dataclass
class Node:
    name: str
    children: List["Node"] = field(default_factory=list)


@dataclass
class DateRange(ValidatableObject):
    start: int
    end: Annotated[int, RangeValidator(minimum=0)]

    def validate(self, context):
        if self.end < self.start:
            yield ValidationResult("End must not be before start.", member_name="end")
        if self.start == self.end:
            yield "Range is empty."


@dataclass
class Holder:
    payload: Any


@dataclass
class Account:
    login: Annotated[str, RequiredValidator()]
    password: str = field(default="", metadata={"validators": [RequiredValidator()], "validate_never": True})


def test_valid_model(validator):
    state = validator.validate(Customer("Ann", Address("Main St")))

    assert state.is_valid
    assert state.error_count == 0
    assert state.get_validation_state("address.street") is ModelValidationState.VALID
    assert state.get_validation_state("") is ModelValidationState.VALID


def test_nested_error_key(validator):
    state = validator.validate(Customer("Ann", Address("")), prefix="customer")

    assert state.to_dict() == {"customer.address.street": ["The street field is required."]}
    assert not state.is_valid
    assert state.get_field_validation_state("customer.address") is ModelValidationState.INVALID
    assert state.get_validation_state("customer.name") is ModelValidationState.VALID


def test_collection_error_keys(validator):
    order = Order(lines=[OrderLine("a", 1), OrderLine("b", 0), OrderLine("c", 500)])

    state = validator.validate(order, prefix="order")

    assert state.to_dict() == {
        "order.lines[1].quantity": ["The field quantity must be between 1 and 100."],
        "order.lines[2].quantity": ["The field quantity must be between 1 and 100."],
    }


def test_dictionary_values_are_validated_as_pairs(validator):
    state = validator.validate(Order(lines=[], stock={"a": 3, "b": 20}))

    assert state.to_dict() == {"stock[1].value": ["The field value must be between 0 and 10."]}


def test_errors_accumulate_in_existing_state(validator):
    state = ModelStateDictionary()

    validator.validate(Address(""), prefix="billing", model_state=state)
    validator.validate(Address(""), prefix="shipping", model_state=state)

    assert sorted(state.to_dict()) == ["billing.street", "shipping.street"]


def test_try_validate_model(validator):
    assert validator.try_validate_model(Address("x"))
    assert not validator.try_validate_model(Address(" "))


def test_try_validate_model_rejects_none(validator):
    with pytest.raises(ValueError, match="None model"):
        validator.try_validate_model(None)
    with pytest.raises(ValueError):
        validator.try_validate_model(None, prefix="order", model_type=Order)


def test_string_for_list_property_is_a_type_error(validator):
    state = validator.validate(Customer("Ann", Address(""), tags="abc"), prefix="customer")

    assert sorted(state.to_dict()) == ["customer.address.street", "customer.tags"]
    [message] = state.to_dict()["customer.tags"]
    assert message.startswith("The value 'abc' is not valid for tags; expected ")
    assert state.get_validation_state("customer.tags[0]") is ModelValidationState.UNVALIDATED


def test_non_iterable_for_list_property_is_a_type_error(validator):
    state = validator.validate(Customer("Ann", Address("x"), tags=7))

    assert list(state.to_dict()) == ["tags"]


def test_sequence_for_dictionary_property_is_a_type_error(validator):
    state = validator.validate(Order(lines=[OrderLine("a", 1)], stock=[("a", 99)]))

    assert list(state.to_dict()) == ["stock"]
    assert state.get_validation_state("lines[0].quantity") is ModelValidationState.VALID


def test_none_model_is_valid_without_explicit_type(validator):
    assert validator.validate(None).is_valid


def test_none_model_with_explicit_type_runs_node_validators(validator):
    state = validator.validate(None, prefix="name", model_type=Annotated[Optional[str], RequiredValidator()])

    assert state.to_dict() == {"name": ["The str field is required."]}


def test_validatable_object(validator):
    state = validator.validate(DateRange(5, 2), prefix="range")

    assert state.to_dict() == {"range.end": ["End must not be before start."]}


def test_validatable_object_plain_message(validator):
    state = validator.validate(DateRange(3, 3), prefix="range")

    assert state.to_dict() == {"range": ["Range is empty."]}


def test_type_validators_skipped_when_children_fail(provider):
    default = ObjectModelValidator(provider, ValidationConfig())
    eager = ObjectModelValidator(provider, ValidationConfig(validate_complex_types_if_child_validation_fails=True))

    assert default.validate(DateRange(3, -1)).to_dict() == {
        "end": ["The field end must be greater than or equal to 0."]
    }
    assert eager.validate(DateRange(3, -1)).to_dict() == {
        "end": ["The field end must be greater than or equal to 0.", "End must not be before start."],
    }


def test_validate_never_skips_property(validator):
    state = validator.validate(Account("root", password=""))

    assert state.is_valid
    assert state.get_validation_state("password") is ModelValidationState.SKIPPED


def test_any_property_uses_runtime_type(validator):
    state = validator.validate(Holder(Address("")))

    assert state.to_dict() == {"payload.street": ["The street field is required."]}


def test_any_property_with_simple_value(validator):
    assert validator.validate(Holder(42)).is_valid


def test_reference_cycle_is_skipped(validator):
    root = Node("root")
    root.children.append(root)

    state = validator.validate(root)

    assert state.is_valid
    assert state.get_validation_state("children[0]") is ModelValidationState.SKIPPED


def test_shared_reference_is_validated_twice(validator):
    shared = Address("")
    state = validator.validate([shared, shared], model_type=List[Address])

    assert state.to_dict() == {
        "[0].street": ["The street field is required."],
        "[1].street": ["The street field is required."],
    }


def test_depth_limit(provider):
    validator = ObjectModelValidator(provider, ValidationConfig(max_validation_depth=3))
    root = Node("0")
    current = root
    for i in range(1, 10):
        child = Node(str(i))
        current.children.append(child)
        current = child

    with pytest.raises(ValidationDepthExceededError):
        validator.validate(root)


def test_depth_limit_disabled(provider):
    validator = ObjectModelValidator(provider, ValidationConfig(max_validation_depth=None))
    root = Node("0")
    current = root
    for i in range(1, 50):
        child = Node(str(i))
        current.children.append(child)
        current = child

    assert validator.validate(root).is_valid


def test_max_errors(provider):
    validator = ObjectModelValidator(provider, ValidationConfig(max_model_errors=3))

    state = validator.validate([5] * 10, model_type=List[Annotated[int, RangeValidator(0, 1)]])

    assert state.has_reached_max_errors
    assert state.error_count == 3
    assert sorted(state.to_dict()) == ["", "[0]", "[1]"]
    assert isinstance(state.get_errors("")[0], TooManyModelErrors)
    assert state.get_validation_state("[5]") is ModelValidationState.UNVALIDATED
    assert not state.is_valid


def test_suppressed_model(validator):
    address = Address("")
    validation_state = ValidationStateDictionary()
    validation_state[address] = ValidationStateEntry(suppress_validation=True)

    state = validator.validate(Customer("Ann", address), validation_state=validation_state)

    assert state.is_valid
    assert state.get_validation_state("address") is ModelValidationState.SKIPPED


def test_validation_state_key_override(validator):
    address = Address("")
    validation_state = ValidationStateDictionary()
    validation_state[address] = ValidationStateEntry(key="shipping")

    state = validator.validate(Customer("Ann", address), validation_state=validation_state)

    assert state.to_dict() == {"shipping.street": ["The street field is required."]}


def test_validation_state_is_keyed_by_identity():
    validation_state = ValidationStateDictionary()
    first = Address("x")
    validation_state[first] = ValidationStateEntry(suppress_validation=True)

    assert first in validation_state
    assert Address("x") not in validation_state
