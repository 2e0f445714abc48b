"""
Unit tests for the sequence catalog.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from nurturing.extensions import db
from nurturing.models import NurturingSequence, NurturingStep, NurturingTask, TaskStatus
from nurturing.services.nurturing_engine import enroll, NotFoundError, InvalidSequenceError
from nurturing.services.nurturing_engine.catalog import (
    create_sequence, delete_sequence, find_sequence_by_name, get_organisation_sequence,
    list_sequences, replace_steps, update_sequence, validate_sequence_definition
)

from .conftest import SEQUENCE_STEPS, T0


class TestValidateSequenceDefinition:
    """Test step definition validation."""
    
    def test_valid_definition(self):
        result = validate_sequence_definition(SEQUENCE_STEPS)
        assert result['valid'] is True
        assert result['errors'] == []
    
    def test_not_a_list(self):
        result = validate_sequence_definition({'channel': 'SMS'})
        assert result['valid'] is False
    
    def test_empty_list(self):
        result = validate_sequence_definition([])
        assert result['valid'] is False
        assert "at least one step" in result['errors'][0]
    
    def test_invalid_channel(self):
        result = validate_sequence_definition([{'channel': 'PIGEON', 'content': 'Hi'}])
        assert result['valid'] is False
        assert any("Invalid channel" in error for error in result['errors'])
    
    def test_negative_delay(self):
        result = validate_sequence_definition([{'channel': 'SMS', 'content': 'Hi', 'delay_in_hours': -1}])
        assert result['valid'] is False
    
    def test_non_integer_delay(self):
        result = validate_sequence_definition([{'channel': 'SMS', 'content': 'Hi', 'delay_in_hours': 1.5}])
        assert result['valid'] is False
        result = validate_sequence_definition([{'channel': 'SMS', 'content': 'Hi', 'delay_in_hours': True}])
        assert result['valid'] is False
    
    def test_duplicate_order(self):
        result = validate_sequence_definition([
            {'channel': 'SMS', 'content': 'A', 'order': 1},
            {'channel': 'SMS', 'content': 'B', 'order': 1}
        ])
        assert result['valid'] is False
        assert any("duplicate order" in error for error in result['errors'])
    
    def test_missing_content(self):
        result = validate_sequence_definition([{'channel': 'SMS', 'content': '  '}])
        assert result['valid'] is False
    
    def test_warnings(self):
        result = validate_sequence_definition([
            {'channel': 'SMS', 'content': 'Hi {{company}}', 'subject': 'Ignored'},
            {'channel': 'EMAIL', 'content': 'Hello'}
        ])
        assert result['valid'] is True
        assert len(result['warnings']) == 3


class TestSequenceCrud:
    """Test sequence storage."""
    
    def test_create_sequence_orders_steps(self, sample_organisation):
        sequence = create_sequence({
            'organisation_id': sample_organisation.id,
            'name': 'Unordered',
            'steps': [
                {'channel': 'SMS', 'content': 'Second', 'order': 2, 'delay_in_hours': 5},
                {'channel': 'EMAIL', 'content': 'First', 'order': 1, 'subject': 'Hello'}
            ]
        })
        assert [step.order for step in sequence.steps] == [1, 2]
        assert sequence.steps[0].subject == 'Hello'
        assert sequence.steps[0].type == 'EMAIL'
        assert sequence.steps[1].delay_in_hours == 5
    
    def test_create_sequence_requires_name(self, sample_organisation):
        with pytest.raises(InvalidSequenceError):
            create_sequence({'organisation_id': sample_organisation.id, 'name': ' ', 'steps': SEQUENCE_STEPS})
    
    def test_create_sequence_rejects_invalid_steps(self, sample_organisation):
        with pytest.raises(InvalidSequenceError) as exc_info:
            create_sequence({'organisation_id': sample_organisation.id, 'name': 'Bad', 'steps': []})
        assert exc_info.value.details['errors']
    
    def test_duplicate_name_in_organisation(self, sample_organisation, sample_sequence):
        with pytest.raises(IntegrityError):
            create_sequence({
                'organisation_id': sample_organisation.id,
                'name': sample_sequence.name,
                'steps': SEQUENCE_STEPS
            })
        db.session.rollback()
    
    def test_same_name_in_other_organisation(self, other_organisation, sample_sequence):
        sequence = create_sequence({
            'organisation_id': other_organisation.id,
            'name': sample_sequence.name,
            'steps': SEQUENCE_STEPS
        })
        assert sequence.id != sample_sequence.id
    
    def test_get_foreign_sequence(self, other_organisation, sample_sequence):
        with pytest.raises(NotFoundError):
            get_organisation_sequence(sample_sequence.id, other_organisation.id)
    
    def test_find_and_list(self, sample_organisation, sample_sequence):
        assert find_sequence_by_name(sample_organisation.id, 'Relance test').id == sample_sequence.id
        
        update_sequence(sample_sequence.id, sample_organisation.id, {'is_active': False})
        assert find_sequence_by_name(sample_organisation.id, 'Relance test') is None
        assert find_sequence_by_name(sample_organisation.id, 'Relance test', active_only=False) is not None
        assert list_sequences(sample_organisation.id) == []
        assert len(list_sequences(sample_organisation.id, active_only=False)) == 1
    
    def test_update_sequence(self, sample_organisation, sample_sequence):
        sequence = update_sequence(sample_sequence.id, sample_organisation.id, {
            'name': 'Renamed',
            'description': 'New description'
        })
        assert sequence.name == 'Renamed'
        assert sequence.description == 'New description'
        assert len(sequence.steps) == 3
    
    def test_replace_steps_keeps_existing_tasks(self, sample_organisation, sample_sequence, sample_lead):
        enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        sequence = replace_steps(sample_sequence.id, sample_organisation.id, {
            'steps': [{'channel': 'SMS', 'content': 'Only step', 'delay_in_hours': 2}]
        })
        
        assert len(sequence.steps) == 1
        assert NurturingStep.query.filter_by(sequence_id=sequence.id).count() == 1
        tasks = NurturingTask.query.filter_by(lead_id=sample_lead.id).all()
        assert len(tasks) == 3
        assert all(task.status == TaskStatus.PENDING for task in tasks)
        assert any(task.content == "Bonjour Marie, on vous a manqué !" for task in tasks)
    
    def test_delete_sequence(self, sample_organisation, sample_sequence, sample_lead):
        enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        delete_sequence(sample_sequence.id, sample_organisation.id)
        
        assert db.session.get(NurturingSequence, sample_sequence.id) is None
        assert NurturingStep.query.count() == 0
        assert NurturingTask.query.count() == 0
