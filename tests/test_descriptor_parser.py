import logging
import textwrap

import pytest

from model_validation import (
    DescriptorError,
    DescriptorParser,
    FormatVersionError,
    ModelValidationState,
    PatternValidator,
    RangeValidator,
    RequiredValidator,
)
from model_validation.models.declared_types import DeclaredList, DeclaredObject, DeclaredScalar

ORDER_DESCRIPTOR = textwrap.dedent(
    """\
    model_validation_format: 0.1.0
    root: Order
    types:
      Order:
        display_name: Purchase order
        properties:
          id:
            type: str
            required: true
            pattern: "[A-Z]+-[0-9]+"
          lines:
            type: list[OrderLine]
            length: {min: 1}
          tags:
            type: dict[str, int]
          notes:
            type: str
            validate: false
            required: true
      OrderLine:
        properties:
          sku:
            type: str
            required: true
          quantity:
            type: int
            display_name: Quantity
            range: [1, 100]
    """
)


@pytest.fixture
def descriptor():
    return DescriptorParser().parse_string(ORDER_DESCRIPTOR)


@pytest.fixture
def order_metadata(provider, descriptor):
    provider.register_descriptor(descriptor)
    return provider.get_metadata_for_declared_type("Order")


def descriptor_with(body):
    return "model_validation_format: 0.1.0\n" + textwrap.dedent(body)


def test_parse_types(descriptor):
    order = descriptor.get_root_type()
    line = descriptor.get_type("OrderLine")

    assert descriptor.root == "Order"
    assert descriptor.format_version == "0.1.0"
    assert order.display_name == "Purchase order"
    assert [p.name for p in order.properties] == ["id", "lines", "tags", "notes"]
    assert order.properties[1].type_key == DeclaredList(DeclaredObject("OrderLine"))
    assert [type(v) for v in order.properties[0].validators] == [RequiredValidator, PatternValidator]
    assert order.properties[3].validate_never
    assert line.properties[1].type_key == DeclaredScalar("int")
    assert isinstance(line.properties[1].validators[0], RangeValidator)
    assert line.properties[1].yaml_path == "/types/OrderLine/properties/quantity"


def test_parse_file(tmp_path):
    path = tmp_path / "order.yaml"
    path.write_text(ORDER_DESCRIPTOR)

    descriptor = DescriptorParser().parse_file(path)

    assert descriptor.file_path == path
    assert descriptor.get_root_type().name == "Order"
    assert descriptor.source_map["/types/OrderLine/properties/sku/type"] == {"line": 23, "column": 15}


def test_valid_document(validator, order_metadata):
    data = {"id": "AB-12", "lines": [{"sku": "x", "quantity": 3}], "tags": {"rush": 1}}

    state = validator.validate(data, metadata=order_metadata)

    assert state.is_valid
    assert state.get_validation_state("notes") is ModelValidationState.SKIPPED


def test_invalid_document(validator, order_metadata):
    data = {
        "id": "ab",
        "lines": [{"sku": "x", "quantity": 0}, {"quantity": "two"}],
        "tags": {"rush": "yes"},
    }

    state = validator.validate(data, prefix="order", metadata=order_metadata)

    assert state.to_dict() == {
        "order.id": ["The field id must match the regular expression '[A-Z]+-[0-9]+'."],
        "order.lines[0].quantity": ["The field Quantity must be between 1 and 100."],
        "order.lines[1].sku": ["The sku field is required."],
        "order.lines[1].quantity": ["The value 'two' is not valid for Quantity; expected int."],
        "order.tags[0].value": ["The value 'yes' is not valid for value; expected int."],
    }


def test_property_rules_run_when_children_are_valid(validator, order_metadata):
    state = validator.validate({"id": "A-1", "lines": []}, metadata=order_metadata)

    assert state.to_dict() == {"lines": ["The field lines must have a minimum length of 1."]}


def test_missing_required_property(validator, order_metadata):
    state = validator.validate({"lines": [{"sku": "a", "quantity": 1}]}, metadata=order_metadata)

    assert state.to_dict() == {"id": ["The id field is required."]}


def test_boolean_is_not_an_int(validator, order_metadata):
    state = validator.validate({"id": "A-1", "lines": [{"sku": "a", "quantity": True}]}, metadata=order_metadata)

    assert state.to_dict() == {"lines[0].quantity": ["The value True is not valid for Quantity; expected int."]}


def test_root_type_mismatch(validator, order_metadata):
    state = validator.validate([1, 2], metadata=order_metadata)

    assert state.to_dict() == {"": ["The value [1, 2] is not valid for Purchase order; expected Order."]}


def test_type_level_rules():
    descriptor = DescriptorParser().parse_string(
        descriptor_with(
            """\
            types:
              Point:
                properties:
                  x: {type: number}
                rules:
                  schema:
                    type: object
                    required: [x, y]
            """
        )
    )

    assert len(descriptor.get_type("Point").validators) == 1


def test_missing_format_version_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="model_validation"):
        DescriptorParser().parse_string("types:\n  A:\n    properties: {}\n")

    assert "Missing 'model_validation_format' field" in caplog.text


def test_newer_minor_version_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="model_validation"):
        descriptor = DescriptorParser().parse_string("model_validation_format: 0.2.0\ntypes:\n  A: {}\n")

    assert descriptor.get_type("A").properties == ()
    assert "newer minor version" in caplog.text


@pytest.mark.parametrize("version", ["1.0.0", "latest"])
def test_incompatible_format_version(version):
    with pytest.raises(FormatVersionError):
        DescriptorParser().parse_string(f"model_validation_format: {version}\ntypes:\n  A: {{}}\n")


def test_root_must_be_mapping():
    with pytest.raises(DescriptorError, match="must be a mapping"):
        DescriptorParser().parse_string("- a\n- b\n")


def test_schema_violation_reports_location():
    body = descriptor_with(
        """\
        types:
          Order:
            properties:
              id:
                type: str
                minimum: 3
        """
    )

    with pytest.raises(DescriptorError) as exc_info:
        DescriptorParser().parse_string(body)

    assert "'minimum' was unexpected" in str(exc_info.value)
    assert "(at /types/Order/properties/id)" in str(exc_info.value)


def test_schema_violation_for_bad_rule_shape():
    body = descriptor_with(
        """\
        types:
          Order:
            properties:
              count:
                type: int
                range: [1]
        """
    )

    with pytest.raises(DescriptorError, match="/types/Order/properties/count/range"):
        DescriptorParser().parse_string(body)


def test_missing_types():
    with pytest.raises(DescriptorError, match="'types' is a required property"):
        DescriptorParser().parse_string("model_validation_format: 0.1.0\nroot: A\n")


def test_invalid_type_reference():
    body = descriptor_with(
        """\
        types:
          Order:
            properties:
              lines: {type: "list[Line"}
        """
    )

    with pytest.raises(DescriptorError, match="/types/Order/properties/lines/type"):
        DescriptorParser().parse_string(body)


def test_invalid_rule_value():
    body = descriptor_with(
        """\
        types:
          Order:
            properties:
              code: {type: str, pattern: "("}
        """
    )

    with pytest.raises(DescriptorError, match="Invalid 'pattern' rule"):
        DescriptorParser().parse_string(body)


def test_undeclared_root():
    with pytest.raises(DescriptorError, match="Root type 'Missing' is not declared"):
        DescriptorParser().parse_string(descriptor_with("root: Missing\ntypes:\n  A: {}\n"))


def test_register_rejects_undeclared_references(provider):
    descriptor = DescriptorParser().parse_string(
        descriptor_with("types:\n  A:\n    properties:\n      b: {type: 'list[B]'}\n")
    )

    with pytest.raises(DescriptorError, match="undeclared type 'B'"):
        provider.register_descriptor(descriptor)


def test_register_rejects_conflicting_types(provider):
    parser = DescriptorParser()
    provider.register_descriptor(parser.parse_string(descriptor_with("types:\n  A: {}\n")))

    with pytest.raises(DescriptorError, match="already registered"):
        provider.register_descriptor(
            parser.parse_string(descriptor_with("types:\n  A:\n    properties:\n      x: {type: int}\n"))
        )


def test_register_same_descriptor_twice(provider, descriptor):
    provider.register_descriptor(descriptor)
    provider.register_descriptor(descriptor)

    assert provider.declared_type_names == ("Order", "OrderLine")


def test_register_same_content_parsed_twice(provider, tmp_path):
    path = tmp_path / "order.model.yaml"
    path.write_text(ORDER_DESCRIPTOR)
    parser = DescriptorParser()

    provider.register_descriptor(parser.parse_string(ORDER_DESCRIPTOR))
    provider.register_descriptor(parser.parse_string(ORDER_DESCRIPTOR))
    provider.register_descriptor(parser.parse_file(path))

    assert provider.declared_type_names == ("Order", "OrderLine")


def test_register_rejects_changed_rule_value(provider):
    parser = DescriptorParser()
    provider.register_descriptor(parser.parse_string(ORDER_DESCRIPTOR))
    changed = ORDER_DESCRIPTOR.replace("range: [1, 100]", "range: [1, 50]")

    with pytest.raises(DescriptorError, match="Type 'OrderLine' is already registered") as exc_info:
        provider.register_descriptor(parser.parse_string(changed))
    assert "None" not in str(exc_info.value)


def test_get_root_type_without_root():
    descriptor = DescriptorParser().parse_string(descriptor_with("types:\n  A: {}\n"))

    assert descriptor.get_root_type("A").name == "A"
    with pytest.raises(DescriptorError, match="declares no 'root' type"):
        descriptor.get_root_type()
