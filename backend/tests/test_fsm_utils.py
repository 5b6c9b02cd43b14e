import pytest
from ro_service.errors import Conflict, InvalidInput
from ro_service.utils.fsm import TransitionValidator
from ro_service.utils.validation import validate_status, validate_enum, validate_id_list
from ro_service.services.maintenance import SERVICE_FSM


def test_transition_validator_allows_valid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    assert fsm.assert_can_transition('A', 'B') is True


def test_transition_validator_blocks_invalid():
    fsm = TransitionValidator({'A': {'B'}, 'B': set()})
    with pytest.raises(Conflict):
        fsm.assert_can_transition('A', 'C')
    strict = TransitionValidator({'A': {'B'}}, error=InvalidInput)
    with pytest.raises(InvalidInput):
        strict.assert_can_transition('B', 'A')


def test_service_completion_is_terminal():
    assert SERVICE_FSM.can_transition('PENDING', 'COMPLETED')
    assert SERVICE_FSM.is_terminal('COMPLETED')
    assert not SERVICE_FSM.can_transition('COMPLETED', 'PENDING')


def test_validate_helpers():
    assert validate_status('OPEN', ('OPEN', 'CLOSED')) == 'OPEN'
    with pytest.raises(InvalidInput):
        validate_status('open', ('OPEN', 'CLOSED'))
    assert validate_enum(' cash ', ('CASH', 'UPI'), 'payment_method') == 'CASH'
    assert validate_enum(None, ('CASH', 'UPI'), 'payment_method', 'CASH') == 'CASH'
    with pytest.raises(InvalidInput):
        validate_enum(None, ('CASH',), 'payment_method')
    assert validate_id_list([3, 1, 2]) == [3, 1, 2]
