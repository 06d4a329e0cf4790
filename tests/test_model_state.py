import pytest

from model_validation import ConfigurationError, ModelStateDictionary, ModelValidationState
from model_validation.validation.model_state import TooManyModelErrors


def test_empty_state_is_valid():
    state = ModelStateDictionary()

    assert state.is_valid
    assert state.validation_state is ModelValidationState.VALID
    assert state.error_count == 0


def test_errors_make_key_and_ancestors_invalid():
    state = ModelStateDictionary()
    state.add_model_error("order.lines[0].sku", "bad sku")

    assert not state.is_valid
    assert state.get_validation_state("order.lines[0].sku") is ModelValidationState.INVALID
    assert state.get_field_validation_state("order") is ModelValidationState.INVALID
    assert state.get_field_validation_state("order.lines") is ModelValidationState.INVALID
    assert state.get_field_validation_state("other") is ModelValidationState.UNVALIDATED
    assert state.to_dict() == {"order.lines[0].sku": ["bad sku"]}


def test_field_state_of_valid_and_skipped_entries():
    state = ModelStateDictionary()
    state.mark_field_valid("a")
    state.mark_field_skipped("a.b")

    assert state.get_field_validation_state("a") is ModelValidationState.VALID
    assert state.is_valid


def test_unvalidated_descendant():
    state = ModelStateDictionary()
    state.mark_field_valid("a")
    state.mark_prefix_skipped("a.b")
    state._get_or_add("a.c")

    assert state.get_field_validation_state("a") is ModelValidationState.UNVALIDATED


def test_mark_prefix_skipped_keeps_errors():
    state = ModelStateDictionary()
    state.add_model_error("a.x", "broken")
    state.mark_field_valid("a.y")

    state.mark_prefix_skipped("a")

    assert state.get_validation_state("a") is ModelValidationState.SKIPPED
    assert state.get_validation_state("a.x") is ModelValidationState.INVALID
    assert state.get_validation_state("a.y") is ModelValidationState.SKIPPED


def test_cannot_mark_invalid_field_valid():
    state = ModelStateDictionary()
    state.add_model_error("a", "broken")

    with pytest.raises(ConfigurationError):
        state.mark_field_valid("a")
    with pytest.raises(ConfigurationError):
        state.mark_field_skipped("a")


def test_max_errors():
    state = ModelStateDictionary(max_allowed_errors=3)

    assert state.try_add_model_error("a", "1")
    assert state.try_add_model_error("b", "2")
    assert not state.try_add_model_error("c", "3")
    assert not state.try_add_model_error("d", "4")

    assert state.has_reached_max_errors
    assert state.error_count == 3
    assert "c" not in state
    assert isinstance(state[""].errors[0], TooManyModelErrors)
    assert len(state[""].errors) == 1


def test_invalid_max_errors():
    with pytest.raises(ConfigurationError):
        ModelStateDictionary(max_allowed_errors=0)


def test_find_keys_with_prefix():
    state = ModelStateDictionary()
    for key in ("a", "a.b", "a[0]", "ab"):
        state.mark_field_valid(key)

    assert sorted(k for k, _ in state.find_keys_with_prefix("a")) == ["a", "a.b", "a[0]"]
    assert len(state) == 4
    assert list(state) == ["a", "a.b", "a[0]", "ab"]
