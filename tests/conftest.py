"""
Pytest configuration and fixtures for the nurturing engine tests.

This module provides:
- Test database setup and teardown
- Flask test client
- JWT auth headers scoped to an organisation
- Mock external services
- Common test data
"""

import pytest
from datetime import datetime
from unittest.mock import Mock, patch

from flask_jwt_extended import create_access_token

from nurturing.main import create_app
from nurturing.extensions import db
from nurturing.models import Organisation, Lead, NurturingChannel
from nurturing.services.nurturing_engine.catalog import create_sequence

# Fixed processing clock
T0 = datetime(2024, 3, 4, 9, 0, 0)

# Test configuration
TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'JWT_SECRET_KEY': 'test-jwt-secret-with-enough-length',
    'CRON_SECRET': None,
    'RESEND_API_KEY': None,
    'NURTURING_EMAIL_FROM': None,
    'TWILIO_ACCOUNT_SID': None,
    'TWILIO_AUTH_TOKEN': None,
    'TWILIO_SMS_FROM': None,
    'TWILIO_WHATSAPP_NUMBER': None,
    'WHATSAPP_PHONE_NUMBER_ID': None,
    'WHATSAPP_ACCESS_TOKEN': None,
    'LOG_LEVEL': 'DEBUG'
}

SEQUENCE_STEPS = [
    {
        "order": 1,
        "channel": NurturingChannel.WHATSAPP,
        "delay_in_hours": 1,
        "content": "Bonjour {{firstName}}, on vous a manqué !"
    },
    {
        "order": 2,
        "channel": NurturingChannel.SMS,
        "delay_in_hours": 23,
        "content": "Rappel pour {{firstName}} {{lastName}}"
    },
    {
        "order": 3,
        "channel": NurturingChannel.WHATSAPP,
        "delay_in_hours": 24,
        "content": "Dernière relance {{firstName}}"
    }
]


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app('testing')
    app.config.update(TEST_CONFIG)
    
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Database session for tests."""
    return db.session


@pytest.fixture
def sample_organisation(db_session):
    organisation = Organisation(name="Centre de Formation")
    db_session.add(organisation)
    db_session.commit()
    return organisation


@pytest.fixture
def other_organisation(db_session):
    organisation = Organisation(name="Autre Centre")
    db_session.add(organisation)
    db_session.commit()
    return organisation


@pytest.fixture
def sample_lead(db_session, sample_organisation):
    lead = Lead(
        organisation_id=sample_organisation.id,
        first_name="Marie",
        last_name="Curie",
        phone="+33612345678",
        email="marie@example.com",
        status="NRP"
    )
    db_session.add(lead)
    db_session.commit()
    return lead


@pytest.fixture
def second_lead(db_session, sample_organisation):
    lead = Lead(
        organisation_id=sample_organisation.id,
        first_name="Paul",
        last_name="Langevin",
        phone="+33687654321"
    )
    db_session.add(lead)
    db_session.commit()
    return lead


@pytest.fixture
def sample_sequence(db_session, sample_organisation):
    """Three-step sequence: WhatsApp +1h, SMS +23h, WhatsApp +24h."""
    return create_sequence({
        'organisation_id': sample_organisation.id,
        'name': 'Relance test',
        'steps': SEQUENCE_STEPS
    })


@pytest.fixture
def auth_headers(app, sample_organisation):
    """Headers for requests authenticated as a member of sample_organisation."""
    token = create_access_token(
        identity='user-1',
        additional_claims={'organisation_id': sample_organisation.id}
    )
    return {
        'Content-Type': 'application/json',
        'Authorization': f'Bearer {token}'
    }


@pytest.fixture
def json_headers():
    """Headers for JSON requests."""
    return {
        'Content-Type': 'application/json'
    }


@pytest.fixture
def mock_requests_post():
    """Mock outgoing HTTP calls made by the channel adapters."""
    with patch('requests.post') as mock_post:
        response = Mock()
        response.ok = True
        response.status_code = 201
        response.json.return_value = {'sid': 'SM123'}
        mock_post.return_value = response
        yield mock_post


@pytest.fixture
def mock_resend():
    """Mock Resend email service for testing."""
    with patch('nurturing.services.channels.email.resend') as mock_resend:
        mock_resend.Emails.send.return_value = {"id": "email-123"}
        yield mock_resend


@pytest.fixture
def mock_adapter():
    """Replace adapter lookup in the task processor with a controllable adapter."""
    adapter = Mock()
    adapter.send.return_value = {'success': True, 'message_id': 'msg-1', 'error': None, 'provider': 'mock'}
    with patch('nurturing.services.nurturing_engine.task_processor.get_channel_adapter', return_value=adapter):
        yield adapter
