import json

import httpx
import pytest

from invoicing.core.context import RequestContext
from invoicing.domain.acquisitions_units import (
    ProtectedOperation,
    is_operation_restricted,
    validate_unit_ids,
    verify_all_units_exist,
)
from invoicing.errors import AcqUnitsNotFoundError, DomainValidationError
from invoicing.schemas.acquisitions_unit import AcquisitionsUnit
from tests.factories import (
    INVOICE_ID,
    INVOICE_LINES_PATH,
    LINE_ID,
    MISSING_UNIT_ID,
    OPEN_UNIT_ID,
    PROTECTING_UNIT_ID,
    USER_ID,
    invoice_json,
    line_json,
    mock_invoice,
    mock_line,
    mock_memberships,
    mock_sequence,
    mock_units,
    unit_json,
)

LINES_URL = "/invoice/invoice-lines"
USER_HEADERS = {"x-okapi-user-id": USER_ID}

OPERATIONS = ["READ", "CREATE", "UPDATE", "DELETE"]
SUCCESS_STATUS = {"READ": 200, "CREATE": 201, "UPDATE": 204, "DELETE": 204}


def mock_line_operations(storage, acq_unit_ids: list[str]):
    """Storage routes for every invoice line operation on an invoice owned by the given units."""
    mock_invoice(storage, invoice_json(acqUnitIds=acq_unit_ids))
    mock_line(storage, line_json())
    mock_sequence(storage, INVOICE_ID, "1")
    storage.post(INVOICE_LINES_PATH).mock(
        side_effect=lambda request: httpx.Response(201, json=json.loads(request.content))
    )
    storage.put(f"{INVOICE_LINES_PATH}/{LINE_ID}").mock(return_value=httpx.Response(204))
    storage.delete(f"{INVOICE_LINES_PATH}/{LINE_ID}").mock(return_value=httpx.Response(204))


def perform(client, operation: str, headers: dict | None = None):
    if operation == "READ":
        return client.get(f"{LINES_URL}/{LINE_ID}", headers=headers)
    if operation == "CREATE":
        return client.post(
            LINES_URL,
            json={"invoiceId": INVOICE_ID, "unitPrice": 5, "quantity": 4},
            headers=headers,
        )
    if operation == "UPDATE":
        return client.put(f"{LINES_URL}/{LINE_ID}", json=line_json(), headers=headers)
    return client.delete(f"{LINES_URL}/{LINE_ID}", headers=headers)


# ============================================================================
# ACCESS RULES
# ============================================================================


def test_malformed_unit_ids_are_rejected():
    with pytest.raises(DomainValidationError):
        validate_unit_ids([OPEN_UNIT_ID, "bad-unit"])


def test_duplicate_unit_ids_are_collapsed():
    assert validate_unit_ids([OPEN_UNIT_ID, OPEN_UNIT_ID]) == [OPEN_UNIT_ID]


def test_missing_units_are_reported():
    units = [AcquisitionsUnit.model_validate(unit_json(OPEN_UNIT_ID))]

    with pytest.raises(AcqUnitsNotFoundError) as exc_info:
        verify_all_units_exist([OPEN_UNIT_ID, MISSING_UNIT_ID], units)

    assert exc_info.value.unit_ids == [MISSING_UNIT_ID]


def test_operation_is_restricted_when_any_unit_protects_it():
    units = [
        AcquisitionsUnit.model_validate(unit_json(OPEN_UNIT_ID, protecting=False)),
        AcquisitionsUnit.model_validate({**unit_json(PROTECTING_UNIT_ID), "protectRead": False}),
    ]

    assert not is_operation_restricted(units, ProtectedOperation.READ)
    assert is_operation_restricted(units, ProtectedOperation.DELETE)


def test_user_id_comes_from_okapi_header():
    ctx = RequestContext.from_headers({"X-Okapi-User-Id": USER_ID, "X-Okapi-Tenant": "diku"})

    assert ctx.user_id == USER_ID


# ============================================================================
# INVOICE LINE OPERATIONS
# ============================================================================


@pytest.mark.parametrize("operation", OPERATIONS)
def test_operation_with_non_existent_units(client, storage, operation):
    mock_line_operations(storage, [MISSING_UNIT_ID])
    units_route = mock_units(storage, [])
    memberships_route = mock_memberships(storage, [])

    response = perform(client, operation, USER_HEADERS)

    assert response.status_code == 422
    assert response.json()["code"] == "acqUnitsNotFound"
    assert units_route.call_count == 1
    assert memberships_route.call_count == 0


@pytest.mark.parametrize("operation", OPERATIONS)
def test_operation_with_units_that_allow_it(client, storage, operation):
    mock_line_operations(storage, [OPEN_UNIT_ID])
    units_route = mock_units(storage, [unit_json(OPEN_UNIT_ID, protecting=False)])
    memberships_route = mock_memberships(storage, [])

    response = perform(client, operation, USER_HEADERS)

    assert response.status_code == SUCCESS_STATUS[operation]
    assert units_route.call_count == 1
    assert memberships_route.call_count == 0


@pytest.mark.parametrize("operation", OPERATIONS)
def test_protecting_units_allow_their_members(client, storage, operation):
    mock_line_operations(storage, [PROTECTING_UNIT_ID])
    units_route = mock_units(storage, [unit_json(PROTECTING_UNIT_ID)])
    memberships_route = mock_memberships(storage, [PROTECTING_UNIT_ID])

    response = perform(client, operation, USER_HEADERS)

    assert response.status_code == SUCCESS_STATUS[operation]
    assert units_route.call_count == 1
    assert memberships_route.call_count == 1
    query = memberships_route.calls.last.request.url.params["query"]
    assert query == f"userId=={USER_ID} and acquisitionsUnitId==({PROTECTING_UNIT_ID})"


@pytest.mark.parametrize("operation", OPERATIONS)
def test_protecting_units_forbid_other_users(client, storage, operation):
    mock_line_operations(storage, [PROTECTING_UNIT_ID])
    mock_units(storage, [unit_json(PROTECTING_UNIT_ID)])
    memberships_route = mock_memberships(storage, [])

    response = perform(client, operation, USER_HEADERS)

    assert response.status_code == 403
    assert response.json()["code"] == "userHasNoPermission"
    assert memberships_route.call_count == 1


def test_protecting_units_forbid_anonymous_requests(client, storage):
    mock_line_operations(storage, [PROTECTING_UNIT_ID])
    mock_units(storage, [unit_json(PROTECTING_UNIT_ID)])
    memberships_route = mock_memberships(storage, [PROTECTING_UNIT_ID])

    response = perform(client, "DELETE")

    assert response.status_code == 403
    assert memberships_route.call_count == 0


@pytest.mark.parametrize("operation", OPERATIONS)
def test_operation_with_malformed_units(client, storage, operation):
    mock_line_operations(storage, ["bad-unit"])
    units_route = mock_units(storage, [])
    memberships_route = mock_memberships(storage, [])

    response = perform(client, operation, USER_HEADERS)

    assert response.status_code == 400
    assert response.json()["code"] == "genericError"
    assert units_route.call_count == 0
    assert memberships_route.call_count == 0


def test_units_are_looked_up_without_deleted_ones(client, storage):
    mock_line_operations(storage, [OPEN_UNIT_ID])
    units_route = mock_units(storage, [unit_json(OPEN_UNIT_ID, protecting=False)])

    perform(client, "READ", USER_HEADERS)

    params = units_route.calls.last.request.url.params
    assert params["query"] == f"isDeleted==false and id==({OPEN_UNIT_ID})"
    assert params["limit"] == "1"
