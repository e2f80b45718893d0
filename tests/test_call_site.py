"""Tests for call-site keys, templates and wire envelopes."""

from __future__ import annotations

import json

import pytest

from anydoor.core.call_site import (
    EMPTY_ARGUMENTS,
    CallSite,
    InvocationRequest,
    MethodTarget,
    default_template,
    signature_key,
)


def test_signature_key_joins_fields_with_separators() -> None:
    call_site = CallSite("com.A", "foo", ("int", "java.lang.String"))

    assert signature_key(call_site) == "com.A#foo#int,java.lang.String"


def test_signature_key_is_stable_for_equal_call_sites() -> None:
    first = CallSite("com.A", "foo", ["int"])
    second = CallSite("com.A", "foo", ("int",))

    assert first == second
    assert signature_key(first) == signature_key(second)


@pytest.mark.parametrize(
    "other",
    [
        CallSite("com.A", "foo", ("int",)),
        CallSite("com.B", "foo", ("int", "java.lang.String")),
        CallSite("com.A", "bar", ("int", "java.lang.String")),
        CallSite("com.A", "foo", ("java.lang.String", "int")),
    ],
)
def test_signature_key_differs_when_any_field_differs(other: CallSite) -> None:
    base = CallSite("com.A", "foo", ("int", "java.lang.String"))

    assert signature_key(other) != signature_key(base)


def test_signature_key_for_parameterless_member() -> None:
    assert signature_key(CallSite("com.A", "run")) == "com.A#run#"


def test_default_template_lists_parameters_in_order_with_nulls() -> None:
    text = default_template(["id", "name"])

    assert json.loads(text) == {"id": None, "name": None}
    assert list(json.loads(text)) == ["id", "name"]
    assert text == '{\n  "id": null,\n  "name": null\n}'


def test_default_template_without_parameters_is_empty_object() -> None:
    assert default_template([]) == EMPTY_ARGUMENTS


def test_method_target_requires_matching_name_count() -> None:
    with pytest.raises(ValueError):
        MethodTarget(call_site=CallSite("com.A", "foo", ("int",)), parameter_names=())


def test_request_envelope_uses_wire_key_order() -> None:
    request = InvocationRequest.for_call_site(CallSite("com.A", "foo", ("int", "java.lang.String")), '{"id": 5}')

    payload = json.loads(request.to_json())

    assert list(payload) == ["content", "methodName", "className", "parameterTypes"]
    assert payload == {
        "content": '{"id": 5}',
        "methodName": "foo",
        "className": "com.A",
        "parameterTypes": ["int", "java.lang.String"],
    }


def test_request_json_is_compact() -> None:
    request = InvocationRequest("com.A", "run", (), EMPTY_ARGUMENTS)

    assert request.to_json() == '{"content":"{}","methodName":"run","className":"com.A","parameterTypes":[]}'
